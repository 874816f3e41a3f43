"""Run external tools as child processes.

The pipeline only talks to ``ProcessInvoker.run``; tests swap in a fake with
the same coroutine signature.
"""

import asyncio
import contextlib
import shlex
from pathlib import Path
from typing import Sequence

import click

from .errors import ExternalToolError, MissingDependencyError, PipelineError


def command_str(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(a)) for a in argv)


class ProcessInvoker:
    """Spawn one external command per call and wait for it.

    In quiet mode the child's stdout/stderr go to /dev/null, otherwise they are
    inherited so tool diagnostics reach the terminal. A non-zero exit raises
    ExternalToolError; there is no retry and no timeout.
    """

    def __init__(self, quiet: bool = False):
        self.quiet = quiet

    async def run(self, stage: str, executable: str, args: Sequence[str]) -> None:
        stream = asyncio.subprocess.DEVNULL if self.quiet else None
        try:
            proc = await asyncio.create_subprocess_exec(
                executable, *[str(a) for a in args], stdout=stream, stderr=stream
            )
        except FileNotFoundError as e:
            # Removed from PATH between detection and use
            raise MissingDependencyError([executable]) from e
        except OSError as e:
            raise PipelineError(stage, f"could not start '{Path(executable).name}': {e}") from e

        try:
            returncode = await proc.wait()
        except asyncio.CancelledError:
            # The child must be gone before the workspace is removed
            if proc.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
                await proc.wait()
            raise

        if returncode != 0:
            if not self.quiet:
                click.echo(f"Command failed: {command_str([executable, *args])}", err=True)
            raise ExternalToolError(stage, Path(executable).name, returncode)
