"""
Module: aspect_gen.cli
Purpose: Command-line interface for aspect ratio re-composition
Dependencies: click, pathlib

Lets a user re-compose an image file without running the HTTP server.
"""

import click
from pathlib import Path
from typing import Optional
import asyncio
import logging
import platform
import subprocess
import sys

from aspect_gen import __version__
from aspect_gen.core import AspectSession
from aspect_gen.config import get_config
from aspect_gen.errors import AspectGenError
from aspect_gen.schemas import AppStatus, ImageView, available_ratios
from aspect_gen.utils.uploads import image_size, load_image_file

logger = logging.getLogger(__name__)

RATIO_CHOICES = [r.value for r in available_ratios()]


def _open_image(image_path: Path) -> None:
    """Open image in the system default viewer."""
    try:
        system = platform.system()

        if system == "Darwin":  # macOS
            subprocess.run(["open", str(image_path)], check=True)
        elif system == "Linux":
            subprocess.run(["xdg-open", str(image_path)], check=True)
        elif system == "Windows":
            subprocess.run(["start", str(image_path)], shell=True, check=True)
        else:
            logger.warning(f"Auto-preview not supported on {system}")

    except (OSError, subprocess.CalledProcessError) as e:
        logger.warning(f"Failed to open image: {e}")


@click.group()
@click.version_option(version=__version__, prog_name="aspect-gen")
@click.option("--verbose", "-v", is_flag=True, help="Show log output")
def cli(verbose: bool):
    """
    AspectRatioAI - Re-compose images to a new aspect ratio with Gemini.

    Examples:

    \b
      # Recreate a photo as a 16:9 banner
      aspect-gen generate photo.jpg --ratio 16:9

    \b
      # List supported ratios
      aspect-gen ratios

    \b
      # Start the HTTP API
      aspect-gen serve --port 8000
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("image", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--ratio", "-r",
    type=click.Choice(RATIO_CHOICES),
    default=None,
    help="Target aspect ratio (default: 9:16)"
)
@click.option(
    "--output", "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Download directory (default: downloads/)"
)
@click.option(
    "--save-original",
    is_flag=True,
    help="Also write the original as a PNG next to the result"
)
@click.option(
    "--no-preview",
    is_flag=True,
    help="Don't automatically open the result"
)
def generate(
    image: Path,
    ratio: Optional[str],
    output: Optional[Path],
    save_original: bool,
    no_preview: bool
):
    """
    Re-compose IMAGE to a new aspect ratio.

    \b
    Examples:
      aspect-gen generate photo.jpg
      aspect-gen generate portrait.png --ratio 1:1 -o out/ --no-preview
    """
    try:
        session = AspectSession()
        session.select_image(load_image_file(image))
        if ratio:
            session.select_ratio(ratio)

        size = image_size(session.state.original)
        click.echo(f"🎨 Re-composing: {image.name}")
        if size:
            click.echo(f"   Source size: {size[0]}x{size[1]}")
        click.echo(f"   Target ratio: {session.selected_ratio.value}")

        asyncio.run(session.start_generation())

        if session.state.status != AppStatus.SUCCESS:
            click.echo(f"✗ Error: {session.state.error_message}", err=True)
            sys.exit(1)

        if save_original:
            session.set_active_view(ImageView.ORIGINAL)
            original_path = session.download(output)
            click.echo(f"  Original saved to: {original_path}")
            session.set_active_view(ImageView.GENERATED)

        result_path = session.download(output)
        result_size = image_size(session.state.generated)

        click.echo("✓ Image generated successfully!")
        if result_size:
            click.echo(f"  Size: {result_size[0]}x{result_size[1]}")
        click.echo(f"  Saved to: {result_path}")

        if not no_preview:
            _open_image(result_path)

    except AspectGenError as e:
        click.echo(f"✗ Error: {e}", err=True)
        sys.exit(1)


@cli.command()
def ratios():
    """List the supported aspect ratios."""
    default = get_config().generation["default_ratio"]
    for r in RATIO_CHOICES:
        marker = " (default)" if r == default else ""
        click.echo(f"{r}{marker}")


@cli.command()
def info():
    """
    Display configuration information.

    Shows:
    - Gemini model
    - Whether an API key is configured
    - Download directory
    """
    config = get_config()
    click.echo("=== AspectRatioAI Info ===\n")
    click.echo(f"Model: {config.get_model_id()}")
    click.echo(f"Default ratio: {config.generation['default_ratio']}")
    key_vars = ", ".join(config.credentials["env_vars"])
    if config.get_api_key():
        click.echo(f"API key: configured ({key_vars})")
    else:
        click.echo(f"API key: missing (set one of {key_vars})")
    click.echo(f"Download directory: {config.output['directory']}")


@cli.command()
@click.option("--host", default=None, help="Host to bind to (default: 0.0.0.0)")
@click.option("--port", "-p", type=int, default=None, help="Port to listen on (default: 8000)")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the HTTP API server."""
    from aspect_gen.server import run_server

    api = get_config().api
    run_server(
        host=host or api["host"],
        port=port or api["port"],
        reload=reload or api["reload"],
    )


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
