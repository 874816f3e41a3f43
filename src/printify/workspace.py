"""Temporary working directory for one pipeline run."""

import shutil
import tempfile
from pathlib import Path

import click

WORKSPACE_PREFIX = "printify-"


class Workspace:
    """Exclusively-owned temp directory, removed when the ``with`` block exits.

    Exit covers normal return, exceptions and task cancellation (which is how
    SIGINT/SIGTERM reach the pipeline), so intermediate images never outlive
    the run.

    Example:
        with Workspace(quiet=config.quiet) as workdir:
            ...  # workdir is a Path
    """

    def __init__(self, quiet: bool = False, parent: Path | None = None):
        self.quiet = quiet
        self.parent = parent
        self.path: Path | None = None

    def __enter__(self) -> Path:
        self.path = Path(tempfile.mkdtemp(prefix=WORKSPACE_PREFIX, dir=self.parent))
        return self.path

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def cleanup(self) -> None:
        if self.path is None:
            return
        shutil.rmtree(self.path, ignore_errors=True)
        if self.path.exists():
            click.echo(f"Could not remove temporary directory {self.path}", err=True)
        elif not self.quiet:
            click.echo("Temporary files cleaned up.", err=True)
        self.path = None
