"""
Multiprocessing backend for parallel fractal computation.

This module splits a raster into horizontal bands of rows and computes
them in a process pool. Bands are disjoint, so workers share no mutable
state; the raster is assembled only after every band has finished.
"""

import numpy as np
from typing import List, Optional
import multiprocessing as mp
import logging
import time
from dataclasses import dataclass
from concurrent.futures import ProcessPoolExecutor, as_completed

from ..core.math_functions import compute_rows
from ..core.raster import Raster, validate_dimensions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BandSpec:
    """Specification for a single band of rows in parallel rendering."""
    band_id: int
    y_start: int
    y_end: int
    width: int
    height: int

    @property
    def rows(self) -> int:
        return self.y_end - self.y_start


@dataclass
class BandResult:
    """Result from processing a single band."""
    band_id: int
    y_start: int
    pixels: np.ndarray
    processing_time: float


def create_band_grid(width: int, height: int, band_height: int = 64) -> List[BandSpec]:
    """
    Split a raster into bands of consecutive rows.

    Args:
        width: Total raster width
        height: Total raster height
        band_height: Target rows per band

    Returns:
        List of BandSpec objects covering every row exactly once
    """
    validate_dimensions(width, height)
    if band_height < 1:
        raise ValueError("band_height must be >= 1")

    bands = []
    for band_id, y in enumerate(range(0, height, band_height)):
        bands.append(BandSpec(
            band_id=band_id,
            y_start=y,
            y_end=min(y + band_height, height),
            width=width,
            height=height,
        ))

    logger.debug(f"Created {len(bands)} bands of up to {band_height} rows")
    return bands


def process_band(band: BandSpec, overflow: str = 'wrap') -> BandResult:
    """
    Compute a single band in a worker process.

    Args:
        band: Rows to compute
        overflow: Narrowing rule for the gradient channels

    Returns:
        BandResult with the band's pixels
    """
    start_time = time.time()
    pixels = compute_rows(band.width, band.height, band.y_start, band.y_end, overflow)
    return BandResult(
        band_id=band.band_id,
        y_start=band.y_start,
        pixels=pixels,
        processing_time=time.time() - start_time,
    )


def assemble_bands(band_results: List[BandResult], width: int, height: int) -> Raster:
    """
    Assemble band results into a complete raster.

    Args:
        band_results: One result per band
        width: Total raster width
        height: Total raster height

    Returns:
        Raster with every row written exactly once
    """
    raster = Raster.allocate(width, height)
    written = np.zeros(height, dtype=bool)

    for result in band_results:
        y_end = result.y_start + result.pixels.shape[0]
        if written[result.y_start:y_end].any():
            raise ValueError(f"Band {result.band_id} overlaps rows already written")
        raster.write_rows(result.y_start, result.pixels)
        written[result.y_start:y_end] = True

    if not written.all():
        missing = int(np.count_nonzero(~written))
        raise ValueError(f"{missing} rows were not computed")

    return raster


class MultiprocessingAccelerator:
    """Multiprocessing-based parallel fractal computation."""

    def __init__(self, num_processes: Optional[int] = None, band_height: int = 64):
        """
        Initialize multiprocessing accelerator.

        Args:
            num_processes: Number of worker processes (None for CPU count)
            band_height: Rows per band
        """
        if num_processes is None:
            self.num_processes = mp.cpu_count()
        else:
            self.num_processes = max(1, num_processes)

        if band_height < 1:
            raise ValueError("band_height must be >= 1")
        self.band_height = band_height
        logger.info(f"Multiprocessing accelerator: {self.num_processes} processes, "
                    f"{band_height}-row bands")

    def render_parallel(self, width: int, height: int, overflow: str = 'wrap') -> Raster:
        """
        Render a raster using parallel band-based processing.

        Args:
            width, height: Raster resolution
            overflow: Narrowing rule for the gradient channels

        Returns:
            Complete raster
        """
        start_time = time.time()

        bands = create_band_grid(width, height, self.band_height)
        logger.info(f"Processing {len(bands)} bands with {self.num_processes} processes")

        band_results = []
        with ProcessPoolExecutor(max_workers=self.num_processes) as executor:
            futures = {executor.submit(process_band, band, overflow): band for band in bands}

            for future in as_completed(futures):
                band_results.append(future.result())

                completed = len(band_results)
                if completed % max(1, len(bands) // 10) == 0:
                    progress = (completed / len(bands)) * 100
                    logger.debug(f"Completed {completed}/{len(bands)} bands ({progress:.1f}%)")

        logger.debug("Assembling band results")
        raster = assemble_bands(band_results, width, height)

        total_time = time.time() - start_time
        total_processing_time = sum(result.processing_time for result in band_results)
        logger.info(f"Parallel rendering complete: {total_time:.2f}s total, "
                    f"{total_processing_time:.2f}s processing time")

        return raster


def get_optimal_process_count() -> int:
    """Get optimal number of processes for fractal computation."""
    # Leave one core for the system
    return max(1, mp.cpu_count() - 1)
