"""Run configuration for printify.

A single immutable ``Configuration`` is built once from the command line
(with environment fallbacks) and passed to every component.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from .output import derive_output_path
from .validation import parse_integer, parse_positive, parse_quality, validate_input

DEFAULT_PAPER_FORMAT = "a4"
DEFAULT_RESOLUTION = 300
DEFAULT_BRIGHTNESS = 5
DEFAULT_CONTRAST = 45
DEFAULT_QUALITY = 80
DEFAULT_JOBS = os.cpu_count() or 1

# Environment fallbacks, read by the CLI options (a .env file is honoured)
ENV_PREFIX = "PRINTIFY_"


@dataclass(frozen=True)
class Configuration:
    """Validated settings for one conversion run."""

    input_path: Path
    output_path: Path
    paper_format: str = DEFAULT_PAPER_FORMAT
    resolution: int = DEFAULT_RESOLUTION
    brightness: int = DEFAULT_BRIGHTNESS
    contrast: int = DEFAULT_CONTRAST
    quality: int = DEFAULT_QUALITY
    quiet: bool = False
    jobs: int = DEFAULT_JOBS


def parse_numeric_options(
    resolution: str | int = DEFAULT_RESOLUTION,
    brightness: str | int = DEFAULT_BRIGHTNESS,
    contrast: str | int = DEFAULT_CONTRAST,
    quality: str | int = DEFAULT_QUALITY,
    jobs: str | int = DEFAULT_JOBS,
) -> dict[str, int]:
    """Validate the numeric options; touches no files."""
    # The first invalid field is reported
    values = {"brightness": parse_integer("brightness", brightness)}
    values["resolution"] = parse_positive("resolution", resolution)
    values["contrast"] = parse_integer("contrast", contrast)
    values["quality"] = parse_quality(quality)
    values["jobs"] = parse_positive("jobs", jobs)
    return values


def build_configuration(
    input_path: str | Path | None,
    paper_format: str = DEFAULT_PAPER_FORMAT,
    resolution: str | int = DEFAULT_RESOLUTION,
    brightness: str | int = DEFAULT_BRIGHTNESS,
    contrast: str | int = DEFAULT_CONTRAST,
    quality: str | int = DEFAULT_QUALITY,
    quiet: bool = False,
    jobs: str | int = DEFAULT_JOBS,
) -> Configuration:
    """Validate raw option values and build a Configuration.

    Numeric options are checked before the input path so a typo in a flag is
    reported without touching the filesystem.
    """
    numbers = parse_numeric_options(resolution, brightness, contrast, quality, jobs)
    path = validate_input(input_path)
    return Configuration(
        input_path=path,
        output_path=derive_output_path(path),
        paper_format=paper_format,
        quiet=quiet,
        **numbers,
    )
