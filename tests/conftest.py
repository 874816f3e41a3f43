from __future__ import annotations

import asyncio
import shutil
import tempfile
from pathlib import Path
from typing import Callable

import fitz
import pytest

from printify import pipeline, toolchain
from printify.config import Configuration
from printify.errors import ExternalToolError
from printify.output import derive_output_path
from printify.toolchain import Toolchain

# Distinct widths let tests check page order after the round trip
PAGE_WIDTHS = (200, 300, 400)


class FakeTools:
    """Stand-in for ProcessInvoker that emulates each tool with PyMuPDF.

    Produces real PNGs and PDFs so the pipeline's own file handling (page
    renaming, sorting, page-count check, final placement) runs unmodified.
    """

    def __init__(self, fail_stage: str | None = None, exit_code: int = 1, drop_page: bool = False):
        self.fail_stage = fail_stage
        self.exit_code = exit_code
        self.drop_page = drop_page
        self.calls: list[tuple[str, str, list[str]]] = []

    async def run(self, stage: str, executable: str, args) -> None:
        args = [str(a) for a in args]
        self.calls.append((stage, executable, args))
        await asyncio.sleep(0)
        if stage == self.fail_stage:
            raise ExternalToolError(stage, Path(executable).name, self.exit_code)
        getattr(self, f"_{stage}")(args)

    def stages(self) -> list[str]:
        return [stage for stage, _, _ in self.calls]

    def _rasterize(self, args: list[str]) -> None:
        # pdftoppm -png -r DPI input prefix
        dpi = int(args[args.index("-r") + 1])
        src, prefix = args[-2], args[-1]
        doc = fitz.open(src)
        try:
            width = len(str(len(doc)))
            for number in range(1, len(doc) + 1):
                pix = doc[number - 1].get_pixmap(dpi=dpi)
                pix.save(f"{prefix}-{number:0{width}d}.png")
        finally:
            doc.close()

    def _adjust(self, args: list[str]) -> None:
        shutil.copyfile(args[0], args[-1])

    def _encode(self, args: list[str]) -> None:
        img = fitz.open(args[0])
        pdf_bytes = img.convert_to_pdf()
        img.close()
        pdf = fitz.open(stream=pdf_bytes, filetype="pdf")
        pdf.save(args[-1])
        pdf.close()

    def _concatenate(self, args: list[str]) -> None:
        # pdftk a.pdf b.pdf ... cat output combined.pdf
        inputs = args[: args.index("cat")]
        if self.drop_page:
            inputs = inputs[:-1]
        out = fitz.open()
        for path in inputs:
            part = fitz.open(path)
            out.insert_pdf(part)
            part.close()
        out.save(args[-1])
        out.close()

    def _resize(self, args: list[str]) -> None:
        target = next(a.split("=", 1)[1] for a in args if a.startswith("-sOutputFile="))
        shutil.copyfile(args[-1], target)


def write_pdf(path: Path, widths=PAGE_WIDTHS, height: int = 300) -> Path:
    doc = fitz.open()
    for number, width in enumerate(widths, start=1):
        page = doc.new_page(width=width, height=height)
        page.insert_text((20, 40), f"Page {number}")
    doc.save(str(path))
    doc.close()
    return path


@pytest.fixture
def sample_pdf(tmp_path: Path) -> Path:
    return write_pdf(tmp_path / "sample.pdf")


@pytest.fixture
def fake_toolchain() -> Toolchain:
    return Toolchain(
        pdftoppm="/usr/bin/pdftoppm",
        imagemagick="/usr/bin/convert",
        pdftk="/usr/bin/pdftk",
        gs="/usr/bin/gs",
    )


@pytest.fixture
def make_config(sample_pdf: Path) -> Callable[..., Configuration]:
    def _make(**overrides) -> Configuration:
        values = {
            "input_path": sample_pdf,
            "output_path": derive_output_path(sample_pdf),
            "resolution": 20,
            "quiet": True,
            "jobs": 2,
        }
        values.update(overrides)
        return Configuration(**values)

    return _make


@pytest.fixture
def workspace_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect the system temp dir so leftover workspaces can be counted."""
    root = tmp_path / "tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


def get_page_sizes(pdf_path: Path) -> list[tuple[float, float]]:
    doc = fitz.open(str(pdf_path))
    try:
        return [(round(page.rect.width, 2), round(page.rect.height, 2)) for page in doc]
    finally:
        doc.close()


def leftover_workspaces(root: Path) -> list[Path]:
    return sorted(root.glob("printify-*"))


@pytest.fixture
def installed_tools(monkeypatch: pytest.MonkeyPatch) -> set[str]:
    """Pretend the named executables are on PATH; edit the set to remove some."""
    names = {"pdftoppm", "convert", "pdftk", "gs"}

    def which(cmd, *args, **kwargs):
        return f"/usr/bin/{cmd}" if cmd in names else None

    monkeypatch.setattr(toolchain.shutil, "which", which)
    return names


@pytest.fixture
def fake_tools(monkeypatch: pytest.MonkeyPatch) -> FakeTools:
    """Route every pipeline built without an explicit invoker to a FakeTools."""
    fake = FakeTools()
    monkeypatch.setattr(pipeline, "ProcessInvoker", lambda quiet=False: fake)
    return fake
