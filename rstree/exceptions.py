"""Package-specific exception types."""

from __future__ import annotations


class RstParseError(ValueError):
    """Raised when an error-class message aborts a parse.

    Args:
        message: Fully formatted message, including location and class.
        filename: File the message refers to.
        line: One-based line of the offending token.
        column: Column of the offending token.
        kind: Value of the reported message kind.
        argument: Argument substituted into the message template.
    """

    def __init__(
        self,
        message: str,
        filename: str = "",
        line: int = 0,
        column: int = 0,
        kind: str = "",
        argument: str = "",
    ):
        self.filename = filename
        self.line = line
        self.column = column
        self.kind = kind
        self.argument = argument
        super().__init__(message)


class IncludeDepthError(RstParseError):
    """Raised when ``include`` directives nest deeper than allowed.

    Args:
        filename: File whose inclusion exceeded the limit.
        limit: Maximum nesting depth permitted.
    """

    def __init__(self, filename: str, limit: int):
        self.limit = limit
        super().__init__(
            f"Include of '{filename}' exceeds the maximum nesting depth of {limit}",
            filename=filename,
        )


class ParseFileError(Exception):
    """Raised when reading or parsing a reStructuredText file fails."""
