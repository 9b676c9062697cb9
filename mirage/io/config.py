"""
Configuration file loading.

Render settings can be kept in a JSON file, either as a flat object of
RenderConfig fields or nested under a "render" key:

    {"render": {"use_multiprocessing": true, "num_processes": 4}}
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

from ..api import RenderConfig
from ..core.exceptions import ConfigError

logger = logging.getLogger(__name__)


def load_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a JSON configuration file into a dictionary."""
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def load_render_config(path: Optional[Union[str, Path]] = None,
                       overrides: Optional[Dict[str, Any]] = None) -> RenderConfig:
    """
    Build a validated RenderConfig from a file and explicit overrides.

    Args:
        path: Optional JSON config file
        overrides: Values taking precedence over the file; None values are ignored

    Returns:
        RenderConfig
    """
    data: Dict[str, Any] = {}
    if path is not None:
        data = load_config_file(path)
        if 'render' in data:
            others = sorted(set(data) - {'render'})
            if others:
                raise ConfigError(f"Keys {', '.join(others)} in {path} must go inside "
                                  f"the 'render' section")
            data = data['render']
            if not isinstance(data, dict):
                raise ConfigError(f"'render' section in {path} must be a JSON object")
        logger.debug(f"Loaded render config from {path}: {data}")

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    return RenderConfig.from_dict(data)
