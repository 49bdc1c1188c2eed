"""Diagnostics reported while parsing.

Every message kind belongs to exactly one class, derived from the prefix of
its member name: ``E_`` for errors, ``W_`` for warnings and ``H_`` for
hints. The default handler raises on errors and echoes everything else to
stderr; :class:`MessageCollector` records messages instead, which turns hard
errors into recoverable diagnostics.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

import click

from .exceptions import RstParseError


class MessageKind(Enum):
    """Closed set of diagnostics the parser can report."""

    E_CANNOT_OPEN_FILE = "cannot-open-file"
    E_EXPECTED = "expected"
    E_GRID_TABLE_NOT_IMPLEMENTED = "grid-table-not-implemented"
    E_NEW_SECTION_EXPECTED = "new-section-expected"
    E_GENERAL_PARSE_ERROR = "general-parse-error"
    E_INVALID_DIRECTIVE = "invalid-directive"
    W_REDEFINITION_OF_LABEL = "redefinition-of-label"
    W_UNKNOWN_SUBSTITUTION = "unknown-substitution"
    W_UNSUPPORTED_LANGUAGE = "unsupported-language"
    W_UNSUPPORTED_FIELD = "unsupported-field"


class MessageClass(Enum):
    """Severity of a message."""

    HINT = "Hint"
    WARNING = "Warning"
    ERROR = "Error"


MESSAGE_TEMPLATES = {
    MessageKind.E_CANNOT_OPEN_FILE: "cannot open '$1'",
    MessageKind.E_EXPECTED: "'$1' expected",
    MessageKind.E_GRID_TABLE_NOT_IMPLEMENTED: "grid table is not implemented",
    MessageKind.E_NEW_SECTION_EXPECTED: "new section expected",
    MessageKind.E_GENERAL_PARSE_ERROR: "general parse error",
    MessageKind.E_INVALID_DIRECTIVE: "invalid directive: '$1'",
    MessageKind.W_REDEFINITION_OF_LABEL: "redefinition of label '$1'",
    MessageKind.W_UNKNOWN_SUBSTITUTION: "unknown substitution '$1'",
    MessageKind.W_UNSUPPORTED_LANGUAGE: "language '$1' not supported",
    MessageKind.W_UNSUPPORTED_FIELD: "field '$1' not supported",
}

_CLASS_PREFIXES = {"E": MessageClass.ERROR, "W": MessageClass.WARNING, "H": MessageClass.HINT}

MessageHandler = Callable[[str, int, int, MessageKind, str], None]


def message_class(kind: MessageKind) -> MessageClass:
    """Return the severity of `kind`, taken from its member name prefix.

    Examples:
        message_class(MessageKind.W_UNKNOWN_SUBSTITUTION)  # MessageClass.WARNING
    """
    return _CLASS_PREFIXES[kind.name[0]]


def format_message(filename: str, line: int, col: int, kind: MessageKind, arg: str) -> str:
    """Render a message as ``file(line, col) Class: text``.

    Examples:
        format_message("a.rst", 3, 0, MessageKind.E_EXPECTED, "|")
        # "a.rst(3, 0) Error: '|' expected"
    """
    text = MESSAGE_TEMPLATES[kind].replace("$1", arg)
    return f"{filename}({line}, {col}) {message_class(kind).value}: {text}"


def default_message_handler(
    filename: str, line: int, col: int, kind: MessageKind, arg: str
) -> None:
    """Raise on errors; echo warnings and hints to stderr.

    Raises:
        RstParseError: If `kind` is an error-class message.
    """
    message = format_message(filename, line, col, kind, arg)
    if message_class(kind) is MessageClass.ERROR:
        raise RstParseError(
            message, filename=filename, line=line, column=col, kind=kind.value, argument=arg
        )
    click.echo(message, err=True)


@dataclass(frozen=True)
class Message:
    """A recorded diagnostic."""

    filename: str
    line: int
    col: int
    kind: MessageKind
    argument: str

    @property
    def message_class(self) -> MessageClass:
        return message_class(self.kind)

    def __str__(self) -> str:
        return format_message(self.filename, self.line, self.col, self.kind, self.argument)


@dataclass
class MessageCollector:
    """Message handler that records every diagnostic instead of raising.

    Examples:
        collector = MessageCollector()
        parse_rst("|missing|", msg_handler=collector)
        [m.kind for m in collector.messages]  # [MessageKind.W_UNKNOWN_SUBSTITUTION]
    """

    messages: list[Message] = field(default_factory=list)

    def __call__(self, filename: str, line: int, col: int, kind: MessageKind, arg: str) -> None:
        self.messages.append(Message(filename, line, col, kind, arg))

    def of_class(self, cls: MessageClass) -> list[Message]:
        return [message for message in self.messages if message.message_class is cls]

    @property
    def has_errors(self) -> bool:
        return bool(self.of_class(MessageClass.ERROR))
