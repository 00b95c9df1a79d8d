"""
Exception types for the script interpreter.

Content problems never escape the interpreter: block parsers raise
ScriptMalformedError and the chapter controller turns it into a logged
diagnostic. DuplicateCommandError is a startup configuration error and is
allowed to propagate.
"""


class NovelError(Exception):
    """Base class for interpreter errors."""


class ScriptMalformedError(NovelError):
    """
    A script construct is missing an expected delimiter or is empty.

    Attributes:
        line_index: 0-based index of the offending line, if known
        end_index: Last line of the broken construct, so the caller can
            step over it
    """

    def __init__(self, message: str, line_index: int | None = None, end_index: int | None = None):
        self.line_index = line_index
        self.end_index = end_index
        if line_index is not None:
            message = f"line {line_index + 1}: {message}"
        super().__init__(message)


class DuplicateCommandError(NovelError, ValueError):
    """Two commands were registered under the same name."""
