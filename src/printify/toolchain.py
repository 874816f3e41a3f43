"""Locate the external programs the pipeline shells out to.

Required:
- pdftoppm (poppler) to rasterize PDF pages
- ImageMagick, either ``magick`` (v7) or ``convert`` (v6)
- pdftk to concatenate PDFs
- gs (Ghostscript) to fit pages to a paper format
"""

import shutil
from dataclasses import dataclass

from .errors import MissingDependencyError

RASTERIZER = "pdftoppm"
IMAGEMAGICK = ("magick", "convert")
CONCATENATOR = "pdftk"
RESIZER = "gs"


@dataclass(frozen=True)
class Toolchain:
    pdftoppm: str
    imagemagick: str
    pdftk: str
    gs: str


def detect_toolchain() -> Toolchain:
    """Resolve every required executable on PATH.

    All missing programs are reported together so a fresh machine needs only
    one round of installs.
    """
    rasterizer = shutil.which(RASTERIZER)
    imagemagick = next(
        (path for path in (shutil.which(name) for name in IMAGEMAGICK) if path), None
    )
    concatenator = shutil.which(CONCATENATOR)
    resizer = shutil.which(RESIZER)

    missing = [
        name
        for name, path in (
            (RASTERIZER, rasterizer),
            (" or ".join(IMAGEMAGICK), imagemagick),
            (CONCATENATOR, concatenator),
            (RESIZER, resizer),
        )
        if path is None
    ]
    if missing:
        raise MissingDependencyError(missing)

    return Toolchain(
        pdftoppm=rasterizer,
        imagemagick=imagemagick,
        pdftk=concatenator,
        gs=resizer,
    )
