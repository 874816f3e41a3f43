"""Input and option validation.

All checks here run before the workspace exists, so a failure never leaves
anything behind on disk.
"""

import re
from pathlib import Path

from .errors import InputNotFoundError, InvalidArgumentError, MissingInputError

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def parse_integer(field: str, value: str | int) -> int:
    """Parse ``value`` as a plain decimal integer.

    Accepts an optional sign and digits only: "3.5", "1e3", " 7" and "" are
    rejected rather than coerced.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = str(value)
    if not _INTEGER_RE.fullmatch(text):
        raise InvalidArgumentError(field, text)
    return int(text)


def parse_positive(field: str, value: str | int) -> int:
    number = parse_integer(field, value)
    if number <= 0:
        raise InvalidArgumentError(field, str(value), "Must be greater than 0.")
    return number


def parse_quality(value: str | int) -> int:
    number = parse_integer("quality", value)
    if not 0 <= number <= 100:
        raise InvalidArgumentError("quality", str(value), "Must be between 0 and 100.")
    return number


def validate_input(input_path: str | Path | None) -> Path:
    """Return the input as a Path, or raise if it is missing or not a file."""
    if input_path is None or str(input_path) == "":
        raise MissingInputError()
    path = Path(input_path)
    if not path.is_file():
        raise InputNotFoundError(path)
    return path
