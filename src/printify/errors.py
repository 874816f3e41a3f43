"""Error types raised by the printify pipeline.

Every failure is terminal: nothing is retried. Library code raises these,
the CLI turns them into a one-line message and exit status 1.
"""


class PrintifyError(Exception):
    """Base class for all printify failures."""


class MissingDependencyError(PrintifyError):
    """One or more required executables are not on PATH."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        names = ", ".join(f"'{name}'" for name in missing)
        verb = "is" if len(missing) == 1 else "are"
        super().__init__(f"{names} {verb} not installed. Please install it and try again.")


class InvalidArgumentError(PrintifyError):
    """A numeric option did not parse, or parsed out of range."""

    def __init__(self, field: str, value: str, reason: str = "Please provide a valid integer."):
        self.field = field
        self.value = value
        super().__init__(f"Invalid value '{value}' for {field}. {reason}")


class MissingInputError(PrintifyError):
    def __init__(self):
        super().__init__("Missing input PDF. Usage: printify <input_pdf> [OPTIONS]")


class InputNotFoundError(PrintifyError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"Input file '{path}' does not exist.")


class OverwriteDeclinedError(PrintifyError):
    def __init__(self, path):
        self.path = path
        super().__init__(
            "Please specify a different output file name or move the existing file."
        )


class PipelineError(PrintifyError):
    """A pipeline stage failed."""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        super().__init__(f"[{stage}] {message}")


class ExternalToolError(PipelineError):
    """An external tool exited with a non-zero status."""

    def __init__(self, stage: str, tool: str, exit_code: int):
        self.tool = tool
        self.exit_code = exit_code
        super().__init__(stage, f"'{tool}' failed with exit code {exit_code}")


class InterruptedRunError(PrintifyError):
    def __init__(self):
        super().__init__("Interrupted. Temporary files were removed.")
