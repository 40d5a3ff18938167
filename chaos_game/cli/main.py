"""
Command-line interface for chaos game and explore rendering.
"""

import click
import sys
from pathlib import Path
from typing import Optional, Tuple
import logging
import time

from .. import __version__
from ..api import FractalRenderer
from ..core.description import ChaosGameDescription
from ..core.linalg import Vector2D
from ..core.presets import DescriptionRegistry, explore_julia, EXPLORE_CONSTANT
from ..io.config import load_config_from_args
from ..io.description_file import read_description, write_description
from ..rendering.coloring import ColoringEngine

logger = logging.getLogger(__name__)


def _fail(ctx, error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    if ctx.obj.get('verbose'):
        import traceback
        traceback.print_exc()
    sys.exit(1)


def _parse_pair(text: str, what: str) -> Tuple[float, float]:
    try:
        parts = [float(x.strip()) for x in text.split(',')]
    except ValueError:
        raise click.BadParameter(f"Invalid {what}. Use 'a,b'") from None
    if len(parts) != 2:
        raise click.BadParameter(f"Invalid {what}. Use 'a,b'")
    return parts[0], parts[1]


def _parse_bounds(text: str) -> Tuple[Vector2D, Vector2D]:
    try:
        bounds = [float(x.strip()) for x in text.split(',')]
    except ValueError:
        raise click.BadParameter("Invalid bounds format. Use 'xmin,ymin,xmax,ymax'") from None
    if len(bounds) != 4:
        raise click.BadParameter("Invalid bounds format. Use 'xmin,ymin,xmax,ymax'")
    return Vector2D(bounds[0], bounds[1]), Vector2D(bounds[2], bounds[3])


def _load_description(preset: Optional[str], description_file: Optional[str]) -> ChaosGameDescription:
    if description_file:
        return read_description(description_file)
    return DescriptionRegistry.create(preset or 'sierpinski')


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--config', type=click.Path(exists=True), help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def main(ctx, version, config, verbose, quiet):
    """
    Chaos game - iterated function system and escape-time fractal renderer.
    """
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.INFO,
                            format='%(levelname)s: %(message)s')

    if version:
        click.echo(f"chaos-game v{__version__}")
        click.echo(f"Python: {sys.version}")
        if ctx.invoked_subcommand is None:
            sys.exit(0)

    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose


@main.command()
@click.argument('output', type=click.Path())
@click.option('--preset', '-p', help='Built-in description name')
@click.option('--file', '-f', 'description_file', type=click.Path(exists=True),
              help='Description file (overrides --preset)')
@click.option('--steps', '-n', type=int, help='Number of plotted steps')
@click.option('--width', '-w', type=int, help='Image width')
@click.option('--height', '-h', type=int, help='Image height')
@click.option('--seed', type=int, help='Random seed')
@click.option('--palette', help='Color palette name')
@click.option('--linear', is_flag=True, help='Linear instead of logarithmic count scaling')
@click.pass_context
def chaos(ctx, output, preset, description_file, linear, **kwargs):
    """
    Run the chaos game and save the result.

    OUTPUT: Output file (.png image or .npy raw counts)
    """
    try:
        config = load_config_from_args(ctx.obj.get('config_file'))
        config.update(**kwargs)
        if linear:
            config.update(log_scale=False)

        description = _load_description(preset, description_file)
        renderer = FractalRenderer(config)

        click.echo(f"Running {config.steps:,} chaos game steps...")
        start_time = time.time()
        _, game = renderer.render_chaos(description, Path(output))

        click.echo(f"Render complete: {time.time() - start_time:.2f}s "
                   f"({game.total_steps:,} steps)")
        click.echo(f"Saved: {output}")

    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.argument('output', type=click.Path())
@click.option('--julia-c', type=str, help='Julia constant "real,imag"')
@click.option('--file', '-f', 'description_file', type=click.Path(exists=True),
              help='Description file whose first transform is iterated')
@click.option('--bounds', type=str, help='Window "xmin,ymin,xmax,ymax"')
@click.option('--width', '-w', type=int, help='Image width')
@click.option('--height', '-h', type=int, help='Image height')
@click.option('--max-iter', 'max_iterations', type=int, help='Maximum iterations')
@click.option('--escape-radius', type=float, help='Escape radius')
@click.option('--workers', type=int, help='Worker processes for the sweep')
@click.option('--tile-size', type=int, help='Tile size for the sweep')
@click.option('--palette', help='Color palette name')
@click.pass_context
def explore(ctx, output, julia_c, description_file, bounds, **kwargs):
    """
    Render an escape-time image of a Julia set.

    OUTPUT: Output file (.png image or .npy raw escape times)
    """
    try:
        config = load_config_from_args(ctx.obj.get('config_file'))
        config.update(**kwargs)

        if description_file:
            description = read_description(description_file)
        else:
            real, imag = EXPLORE_CONSTANT.x, EXPLORE_CONSTANT.y
            if julia_c:
                real, imag = _parse_pair(julia_c, 'Julia constant')
            description = explore_julia(real, imag)

        if bounds:
            description.set_window(*_parse_bounds(bounds))

        renderer = FractalRenderer(config)

        click.echo(f"Exploring {config.width}x{config.height} "
                   f"(max {config.max_iterations} iterations)...")
        start_time = time.time()
        renderer.render_explore(description, Path(output))

        click.echo(f"Render complete: {time.time() - start_time:.2f}s")
        click.echo(f"Saved: {output}")

    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.pass_context
def presets(ctx):
    """List built-in descriptions and color palettes."""
    try:
        click.echo("Available presets:")
        for name, summary in DescriptionRegistry.list_presets().items():
            click.echo(f"  {name}")
            if ctx.obj.get('verbose'):
                click.echo(f"    {summary}")

        click.echo("\nAvailable color palettes:")
        for palette in ColoringEngine().list_palettes():
            click.echo(f"  {palette}")

    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.argument('description_file', type=click.Path(exists=True))
@click.pass_context
def show(ctx, description_file):
    """Print a summary of a description file."""
    try:
        summary = read_description(description_file).summary()

        click.echo(f"Window: {summary['min_coords']} to {summary['max_coords']}")
        click.echo(f"Transforms ({len(summary['transforms'])}):")
        for transform in summary['transforms']:
            details = ', '.join(f"{k}={v}" for k, v in transform.items() if k != 'type')
            click.echo(f"  {transform['type']}: {details}")
        if summary['probabilities']:
            click.echo(f"Probabilities: {summary['probabilities']}")

    except Exception as e:
        _fail(ctx, e)


@main.command('save-preset')
@click.argument('name')
@click.argument('output', type=click.Path())
@click.pass_context
def save_preset(ctx, name, output):
    """
    Write a built-in description to a file.

    NAME: Preset name (see `presets`)
    OUTPUT: Description file to write
    """
    try:
        write_description(DescriptionRegistry.create(name), output)
        click.echo(f"Saved: {output}")

    except Exception as e:
        _fail(ctx, e)


if __name__ == '__main__':
    main()
