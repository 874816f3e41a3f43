"""CLI entry point for printify."""

import asyncio
from pathlib import Path

import click
from dotenv import find_dotenv, load_dotenv

from . import __version__
from .config import (
    DEFAULT_BRIGHTNESS,
    DEFAULT_CONTRAST,
    DEFAULT_JOBS,
    DEFAULT_PAPER_FORMAT,
    DEFAULT_QUALITY,
    DEFAULT_RESOLUTION,
    ENV_PREFIX,
    build_configuration,
)
from .errors import InterruptedRunError, PrintifyError
from .output import confirm_overwrite
from .pipeline import run_pipeline
from .toolchain import detect_toolchain


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("input_pdf", nargs=-1, type=click.Path(path_type=Path))
@click.option(
    "--paperformat",
    "-p",
    "paper_format",
    default=DEFAULT_PAPER_FORMAT,
    envvar=f"{ENV_PREFIX}PAPERFORMAT",
    show_default=True,
    help="Paper format, as accepted by Ghostscript's -sPAPERSIZE",
)
@click.option(
    "--resolution",
    "-r",
    default=str(DEFAULT_RESOLUTION),
    envvar=f"{ENV_PREFIX}RESOLUTION",
    show_default=True,
    help="Resolution in DPI for the rasterized pages",
)
@click.option(
    "--brightness",
    "-b",
    default=str(DEFAULT_BRIGHTNESS),
    envvar=f"{ENV_PREFIX}BRIGHTNESS",
    show_default=True,
    help="Brightness adjustment",
)
@click.option(
    "--contrast",
    "-c",
    default=str(DEFAULT_CONTRAST),
    envvar=f"{ENV_PREFIX}CONTRAST",
    show_default=True,
    help="Contrast adjustment",
)
@click.option(
    "--quality",
    "-Q",
    default=str(DEFAULT_QUALITY),
    envvar=f"{ENV_PREFIX}QUALITY",
    show_default=True,
    help="Image quality, 0-100",
)
@click.option(
    "--jobs",
    "-j",
    default=str(DEFAULT_JOBS),
    envvar=f"{ENV_PREFIX}JOBS",
    show_default=True,
    help="Pages adjusted/encoded in parallel",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    envvar=f"{ENV_PREFIX}QUIET",
    help="Minimal output: hide progress and tool output",
)
@click.version_option(__version__, prog_name="printify")
def printify(
    input_pdf: tuple[Path, ...],
    paper_format: str,
    resolution: str,
    brightness: str,
    contrast: str,
    quality: str,
    jobs: str,
    quiet: bool,
):
    """Printify INPUT_PDF: grayscale, sharpen and re-level every page, then fit
    it to a paper format.

    The result is written next to the input as <name>_printified.pdf.
    Requires pdftoppm, ImageMagick, pdftk and Ghostscript on PATH.

    Example: printify input.pdf -r 600 -b 10 -c 50 -p letter
    """
    # The last positional wins
    input_path = input_pdf[-1] if input_pdf else None

    try:
        toolchain = detect_toolchain()
        config = build_configuration(
            input_path,
            paper_format=paper_format,
            resolution=resolution,
            brightness=brightness,
            contrast=contrast,
            quality=quality,
            quiet=quiet,
            jobs=jobs,
        )
        confirm_overwrite(config.output_path)
        result = asyncio.run(run_pipeline(config, toolchain))
    except PrintifyError as e:
        raise click.ClickException(str(e)) from e
    except KeyboardInterrupt as e:
        raise click.ClickException(str(InterruptedRunError())) from e

    click.echo(f"Done. Output saved to {result.output_path}")


def main(argv: list[str] | None = None) -> int:
    """Console script: every failure, usage errors included, exits with 1."""
    load_dotenv(find_dotenv(usecwd=True))
    try:
        return printify.main(args=argv, prog_name="printify", standalone_mode=False) or 0
    except click.ClickException as e:
        e.show()
        return 1
    except click.Abort:
        click.echo("Aborted!", err=True)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
