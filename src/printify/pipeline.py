"""Printify pipeline: PDF -> grayscale, contrast-enhanced, paper-fitted PDF.

Stages (strictly sequential, the first failure aborts the rest):
  1. rasterize    pdftoppm renders one PNG per page
  2. adjust       ImageMagick sharpens, grays and re-levels every page
  3. encode       ImageMagick wraps every adjusted page in a one-page PDF
  4. concatenate  pdftk joins the page PDFs in page order
  5. resize       Ghostscript fits every page to the paper format

Stages 2 and 3 run per page in parallel (bounded by ``Configuration.jobs``)
and finish completely before the next stage starts. Everything lives in a
temporary workspace; the output path is only touched once all stages have
succeeded.

Usage:
    from printify.pipeline import run_pipeline
    result = asyncio.run(run_pipeline(config, detect_toolchain()))
"""

import asyncio
import re
import signal
from dataclasses import dataclass
from pathlib import Path

import click

from .config import Configuration
from .errors import InterruptedRunError, PipelineError
from .output import place_output
from .pdf_utils import get_page_count
from .process import ProcessInvoker
from .toolchain import Toolchain
from .workspace import Workspace

PAGE_PREFIX = "page"
PAGE_INDEX_WIDTH = 4
ADJUSTED_SUFFIX = "_adapted"
COMBINED_NAME = "bw.pdf"
RESIZED_NAME = "resized.pdf"

SHARPEN_STRENGTH = 1
BIT_DEPTH = 8

_RASTER_NAME_RE = re.compile(rf"{PAGE_PREFIX}-(\d+)\.png")


@dataclass
class PipelineResult:
    output_path: Path
    page_count: int


class PipelineRunner:
    """Drive one conversion through all five stages.

    ``invoker`` defaults to a ProcessInvoker honouring ``config.quiet``; any
    object with an ``async run(stage, executable, args)`` method will do.
    """

    def __init__(
        self,
        config: Configuration,
        toolchain: Toolchain,
        invoker: ProcessInvoker | None = None,
    ):
        self.config = config
        self.toolchain = toolchain
        self.invoker = invoker or ProcessInvoker(quiet=config.quiet)

    def _say(self, message: str) -> None:
        if not self.config.quiet:
            click.echo(message, err=True)

    async def run(self) -> PipelineResult:
        config = self.config
        with Workspace(quiet=config.quiet) as workdir:
            self._say(f"Printifying {config.input_path}")

            pages = await self.rasterize(workdir)
            adjusted = await self.adjust(pages)
            page_pdfs = await self.encode(adjusted)
            combined = await self.concatenate(workdir, expected_pages=len(pages))
            resized = await self.resize(combined, workdir)

            try:
                place_output(resized, config.output_path)
            except OSError as e:
                raise PipelineError("resize", f"could not write {config.output_path}: {e}") from e
            return PipelineResult(output_path=config.output_path, page_count=len(page_pdfs))

    async def rasterize(self, workdir: Path) -> list[Path]:
        self._say(f"Generating PNG files with resolution of {self.config.resolution} DPI")
        await self.invoker.run(
            "rasterize",
            self.toolchain.pdftoppm,
            [
                "-png",
                "-r",
                str(self.config.resolution),
                str(self.config.input_path),
                str(workdir / PAGE_PREFIX),
            ],
        )
        pages = number_pages(workdir)
        if not pages:
            raise PipelineError("rasterize", "no pages were produced")
        self._say(f"Rendered {len(pages)} page(s)")
        return pages

    async def adjust(self, pages: list[Path]) -> list[Path]:
        self._say("Creating adapted versions of each PNG")
        config = self.config
        commands = []
        outputs = []
        for page in pages:
            out = page.with_name(f"{page.stem}{ADJUSTED_SUFFIX}.png")
            outputs.append(out)
            commands.append(
                [
                    str(page),
                    "-adaptive-sharpen",
                    str(SHARPEN_STRENGTH),
                    "-colorspace",
                    "Gray",
                    "-brightness-contrast",
                    f"{config.brightness}x{config.contrast}",
                    "-quality",
                    str(config.quality),
                    "-depth",
                    str(BIT_DEPTH),
                    str(out),
                ]
            )
        await self._fan_out("adjust", self.toolchain.imagemagick, commands)
        return outputs

    async def encode(self, adjusted: list[Path]) -> list[Path]:
        self._say("Converting adapted PNG files to PDFs")
        outputs = [image.with_suffix(".pdf") for image in adjusted]
        commands = [
            [str(image), "-compress", "zip", str(out)] for image, out in zip(adjusted, outputs)
        ]
        await self._fan_out("encode", self.toolchain.imagemagick, commands)
        return outputs

    async def concatenate(self, workdir: Path, expected_pages: int) -> Path:
        self._say("Concatenating individual PDFs")
        # Fixed-width page indices make name order equal page order
        page_pdfs = sorted(workdir.glob(f"*{ADJUSTED_SUFFIX}.pdf"), key=lambda p: p.name)
        combined = workdir / COMBINED_NAME
        await self.invoker.run(
            "concatenate",
            self.toolchain.pdftk,
            [*map(str, page_pdfs), "cat", "output", str(combined)],
        )

        try:
            got = get_page_count(combined)
        except (RuntimeError, OSError) as e:
            raise PipelineError("concatenate", f"unreadable combined PDF: {e}") from e
        if got != expected_pages:
            raise PipelineError(
                "concatenate", f"expected {expected_pages} pages, combined PDF has {got}"
            )
        return combined

    async def resize(self, combined: Path, workdir: Path) -> Path:
        self._say("Resizing PDF to desired page format")
        resized = workdir / RESIZED_NAME
        await self.invoker.run(
            "resize",
            self.toolchain.gs,
            [
                "-sDEVICE=pdfwrite",
                "-dCompatibilityLevel=1.4",
                "-dNOPAUSE",
                "-dQUIET",
                "-dBATCH",
                "-dPDFFitPage",
                "-dFIXEDMEDIA",
                f"-sPAPERSIZE={self.config.paper_format}",
                f"-sOutputFile={resized}",
                str(combined),
            ],
        )
        if not resized.is_file():
            raise PipelineError("resize", "Ghostscript produced no output")
        return resized

    async def _fan_out(self, stage: str, executable: str, commands: list[list[str]]) -> None:
        """Run one command per page with at most ``jobs`` in flight.

        Returns only when every command has finished. On the first failure the
        remaining commands are cancelled before the error propagates.
        """
        semaphore = asyncio.Semaphore(self.config.jobs)

        async def limited(args: list[str]) -> None:
            async with semaphore:
                await self.invoker.run(stage, executable, args)

        tasks = [asyncio.create_task(limited(args)) for args in commands]
        try:
            await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)


def number_pages(workdir: Path) -> list[Path]:
    """Rename pdftoppm's ``page-N.png`` files to a fixed-width page index.

    pdftoppm pads the page number to the digit count of the last page, so the
    width changes with document length. Renaming to at least
    ``PAGE_INDEX_WIDTH`` digits keeps lexicographic order equal to page order
    for every later directory listing.

    Returns:
        Renamed page images in page order
    """
    found = []
    for path in workdir.iterdir():
        match = _RASTER_NAME_RE.fullmatch(path.name)
        if match:
            found.append((int(match.group(1)), path))
    found.sort()
    if not found:
        return []

    width = max(PAGE_INDEX_WIDTH, len(str(found[-1][0])))
    pages = []
    for number, path in found:
        target = path.with_name(f"{PAGE_PREFIX}-{number:0{width}d}.png")
        if target != path:
            path.rename(target)
        pages.append(target)
    return pages


def _termination_signals() -> list[int]:
    return [
        sig
        for sig in (getattr(signal, "SIGTERM", None), getattr(signal, "SIGHUP", None))
        if sig is not None
    ]


async def run_pipeline(
    config: Configuration,
    toolchain: Toolchain,
    invoker: ProcessInvoker | None = None,
) -> PipelineResult:
    """Run the pipeline, turning SIGTERM/SIGHUP into a clean abort.

    The signals cancel the running task, so the workspace context manager
    removes the temp directory before the process exits. SIGINT is already
    handled the same way by ``asyncio.run``.
    """
    loop = asyncio.get_running_loop()
    task = asyncio.current_task()
    installed = {}
    for sig in _termination_signals():
        previous = signal.getsignal(sig)
        try:
            loop.add_signal_handler(sig, task.cancel)
        except (NotImplementedError, RuntimeError):
            # Windows event loops, or not running in the main thread
            continue
        installed[sig] = previous

    try:
        return await PipelineRunner(config, toolchain, invoker).run()
    except asyncio.CancelledError as e:
        raise InterruptedRunError() from e
    finally:
        for sig, previous in installed.items():
            loop.remove_signal_handler(sig)
            if previous is not None:
                signal.signal(sig, previous)
