"""
Command-line interface for mirage.

Renders Julia-set fractals and applies simple image edits through Pillow.
"""

import click
import sys
import logging
import time

from .. import __version__
from ..api import FractalRenderer
from ..core.exceptions import MirageError
from ..io.config import load_render_config
from ..rendering import transforms

logger = logging.getLogger(__name__)


def _report_error(ctx, e: Exception):
    click.echo(f"Error: {e}", err=True)
    if ctx.obj.get('verbose'):
        import traceback
        traceback.print_exc()
    sys.exit(1)


def _transform(ctx, infile, outfile, name, **params):
    try:
        transforms.transform_file(infile, outfile, name, **params)
        click.echo(f"Saved: {outfile}")
    except MirageError as e:
        _report_error(ctx, e)


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--config', type=click.Path(exists=True, dir_okay=False), help='Configuration file path (JSON)')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def main(ctx, version, config, verbose, quiet):
    """
    Mirage - fractal generation and simple image editing.
    """
    # Setup logging
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.INFO,
                            format='%(levelname)s: %(message)s')

    if version:
        click.echo(f"mirage v{__version__}")
        click.echo(f"Python: {sys.version}")
        if ctx.invoked_subcommand is None:
            sys.exit(0)
    elif ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())

    # Store global options in context
    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose


@main.command()
@click.argument('outfile', type=click.Path(dir_okay=False))
@click.argument('width', type=int)
@click.argument('height', type=int)
@click.option('--parallel/--sequential', default=None, help='Render row bands in a process pool')
@click.option('--processes', type=int, help='Number of worker processes')
@click.option('--band-height', type=int, help='Rows per parallel band')
@click.option('--saturate', is_flag=True,
              help='Clamp the red/blue gradient at 255 instead of wrapping')
@click.option('--no-metadata', is_flag=True, help='Do not embed render metadata')
@click.pass_context
def fractal(ctx, outfile, width, height, parallel, processes, band_height, saturate, no_metadata):
    """
    Generate a fractal image in the file provided.

    OUTFILE: Output image path; the extension selects the format
    WIDTH, HEIGHT: Image size in pixels
    """
    try:
        config = load_render_config(ctx.obj.get('config_file'), {
            'use_multiprocessing': parallel,
            'num_processes': processes,
            'band_height': band_height,
            'channel_overflow': 'saturate' if saturate else None,
            'save_metadata': False if no_metadata else None,
        })

        renderer = FractalRenderer(config)

        click.echo(f"Rendering {width}x{height} fractal...")
        start_time = time.time()

        renderer.render_to_file(outfile, width, height)

        click.echo(f"Render complete: {time.time() - start_time:.2f}s")
        click.echo(f"Saved: {outfile}")

    except MirageError as e:
        _report_error(ctx, e)


@main.command()
@click.argument('outfile', type=click.Path(dir_okay=False))
@click.argument('color')
@click.option('--width', '-W', type=int, default=256, show_default=True, help='Image width')
@click.option('--height', '-H', type=int, default=256, show_default=True, help='Image height')
@click.pass_context
def generate(ctx, outfile, color, width, height):
    """
    Generate a solid-color image.

    COLOR: "#rrggbb", a color name or "rgb(r,g,b)"
    """
    try:
        transforms.save_image(transforms.generate_solid(width, height, color), outfile)
        click.echo(f"Saved: {outfile}")
    except MirageError as e:
        _report_error(ctx, e)


@main.command()
@click.argument('infile', type=click.Path(dir_okay=False))
@click.argument('outfile', type=click.Path(dir_okay=False))
@click.argument('value', type=float)
@click.pass_context
def blur(ctx, infile, outfile, value):
    """Blur an image with a Gaussian of the given sigma."""
    _transform(ctx, infile, outfile, 'blur', sigma=value)


@main.command()
@click.argument('infile', type=click.Path(dir_okay=False))
@click.argument('outfile', type=click.Path(dir_okay=False))
@click.argument('amount', type=int)
@click.pass_context
def brighten(ctx, infile, outfile, amount):
    """Brighten an image by the given amount (negative darkens)."""
    _transform(ctx, infile, outfile, 'brighten', amount=amount)


@main.command()
@click.argument('infile', type=click.Path(dir_okay=False))
@click.argument('outfile', type=click.Path(dir_okay=False))
@click.argument('x', type=click.IntRange(min=0))
@click.argument('y', type=click.IntRange(min=0))
@click.argument('width', type=click.IntRange(min=1))
@click.argument('height', type=click.IntRange(min=1))
@click.pass_context
def crop(ctx, infile, outfile, x, y, width, height):
    """Crop an image to X, Y, WIDTH, HEIGHT."""
    _transform(ctx, infile, outfile, 'crop', x=x, y=y, width=width, height=height)


@main.command()
@click.argument('infile', type=click.Path(dir_okay=False))
@click.argument('outfile', type=click.Path(dir_okay=False))
@click.argument('degrees', type=click.Choice(['90', '180', '270']))
@click.pass_context
def rotate(ctx, infile, outfile, degrees):
    """Rotate an image clockwise by 90, 180 or 270 degrees."""
    _transform(ctx, infile, outfile, 'rotate', degrees=int(degrees))


@main.command()
@click.argument('infile', type=click.Path(dir_okay=False))
@click.argument('outfile', type=click.Path(dir_okay=False))
@click.pass_context
def invert(ctx, infile, outfile):
    """Invert the colors of an image."""
    _transform(ctx, infile, outfile, 'invert')


@main.command()
@click.argument('infile', type=click.Path(dir_okay=False))
@click.argument('outfile', type=click.Path(dir_okay=False))
@click.pass_context
def grayscale(ctx, infile, outfile):
    """Convert an image to grayscale."""
    _transform(ctx, infile, outfile, 'grayscale')


if __name__ == '__main__':
    main()
