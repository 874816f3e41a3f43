"""Output path handling: naming, overwrite confirmation, final placement."""

from pathlib import Path

import click

from .errors import OverwriteDeclinedError

OUTPUT_SUFFIX = "_printified"


def derive_output_path(input_path: Path) -> Path:
    """``dir/name.pdf`` -> ``dir/name_printified.pdf``."""
    return input_path.with_name(f"{input_path.stem}{OUTPUT_SUFFIX}.pdf")


def confirm_overwrite(output_path: Path) -> bool:
    """Ask before replacing an existing output file.

    Returns False when nothing exists at ``output_path``, True when the user
    agreed to overwrite. Declining, or closing stdin, raises
    OverwriteDeclinedError. Anything other than y/yes/n/no re-prompts.
    """
    if not output_path.exists():
        return False

    click.echo(f"Output file '{output_path}' already exists.")
    try:
        agreed = click.confirm("Do you want to overwrite it?", default=None)
    except click.Abort:
        # EOF on stdin
        agreed = False
    if not agreed:
        raise OverwriteDeclinedError(output_path)
    click.echo("Overwriting the file.")
    return True


def place_output(produced: Path, output_path: Path) -> Path:
    """Move a finished file from the workspace onto ``output_path``.

    ``Path.replace`` is atomic when both paths are on the same filesystem.
    The workspace usually lives under the system temp dir, so the file is first
    copied next to the target and then renamed over it.
    """
    staging = output_path.with_name(f".{output_path.stem}.partial{output_path.suffix}")
    try:
        staging.write_bytes(produced.read_bytes())
        staging.replace(output_path)
    finally:
        staging.unlink(missing_ok=True)
    return output_path
