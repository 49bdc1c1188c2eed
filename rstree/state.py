"""Parse state shared across a document and the per-parse cursor."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from .constants import DEFAULT_MAX_INCLUDE_DEPTH
from .filesystem import default_find_file
from .lexer import tokenize
from .messages import MessageHandler, MessageKind, default_message_handler
from .models import Node, ParseOption, Token, TokenKind
from .refname import add_nodes, equals_ignore_style

FileFinder = Callable[[str], str]


@dataclass
class SharedState:
    """Tables shared by every sub-parse of one top-level parse.

    Table cells and included files are parsed by fresh cursors holding a
    reference to the same instance, so definitions made anywhere are visible
    for the rest of the enclosing parse.

    Attributes:
        options: Enabled parser features.
        msg_handler: Receives every diagnostic.
        find_file: Resolves a file name to a path, or returns ``""``.
        max_include_depth: Deepest allowed nesting of ``include`` directives.
        max_file_size: Size limit in bytes for included files; None uses the
            environment or built-in default.
        substitutions: Substitution name to replacement; last definition wins.
        references: Normalised reference name to target.
        underline_levels: Adornment character to heading level for
            underline-only headings, in order of first appearance.
        overline_levels: Same as `underline_levels` for over- and underlined
            headings.
    """

    options: frozenset[ParseOption] = frozenset()
    msg_handler: MessageHandler = default_message_handler
    find_file: FileFinder = default_find_file
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH
    max_file_size: int | None = None
    substitutions: dict[str, Node] = field(default_factory=dict)
    references: dict[str, Node] = field(default_factory=dict)
    underline_levels: dict[str, int] = field(default_factory=dict)
    overline_levels: dict[str, int] = field(default_factory=dict)

    def has_option(self, option: ParseOption) -> bool:
        return option in self.options

    def find_substitution(self, key: str) -> Node | None:
        """Look `key` up exactly, then ignoring case and underscores."""
        if key in self.substitutions:
            return self.substitutions[key]
        for name, value in self.substitutions.items():
            if equals_ignore_style(key, name):
                return value
        return None

    def set_substitution(self, key: str, value: Node) -> None:
        self.substitutions[key] = value

    def set_reference(self, key: str, value: Node) -> bool:
        """Store a reference target unless `key` is already bound.

        Returns:
            bool: True when `key` was already bound to a target with different
                text. The first target is kept.
        """
        previous = self.references.setdefault(key, value)
        return previous is not value and add_nodes(previous) != add_nodes(value)

    def find_reference(self, key: str) -> Node | None:
        return self.references.get(key)

    def underline_level(self, char: str) -> int:
        return self.underline_levels.setdefault(char, len(self.underline_levels) + 1)

    def overline_level(self, char: str) -> int:
        return self.overline_levels.setdefault(char, len(self.overline_levels) + 1)


_BEFORE_START = Token(TokenKind.INDENT, "\n")


@dataclass
class Cursor:
    """Position of one parse within its token stream.

    Attributes:
        tokens: Token stream ending with an ``EOF`` token.
        shared: State shared with every other cursor of the same parse.
        idx: Index of the current token.
        indent_stack: Active indentation levels; never empty.
        filename: File reported in messages and used to resolve includes.
        line: Line offset added to token lines in messages.
        col: Column offset added to token columns in messages.
        has_toc: Set by the resolution pass when a contents directive is seen.
        include_depth: Number of ``include`` directives enclosing this parse.
    """

    tokens: list[Token]
    shared: SharedState
    idx: int = 0
    indent_stack: list[int] = field(default_factory=lambda: [0])
    filename: str = ""
    line: int = 1
    col: int = 0
    has_toc: bool = False
    include_depth: int = 0

    @classmethod
    def from_text(
        cls,
        text: str,
        shared: SharedState,
        filename: str = "",
        line: int = 1,
        col: int = 0,
        skip_pounds: bool = False,
        include_depth: int = 0,
    ) -> Cursor:
        tokens, offset = tokenize(text, skip_pounds)
        return cls(
            tokens,
            shared,
            filename=filename,
            line=line,
            col=col + offset,
            include_depth=include_depth,
        )

    def at(self, index: int) -> Token:
        """Return the token at `index`, clamped to the stream.

        Indexes past the end yield the ``EOF`` token; negative indexes yield a
        line break, as if the stream started on a fresh line.
        """
        if index < 0:
            return _BEFORE_START
        if index >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[index]

    def tok(self, offset: int = 0) -> Token:
        return self.at(self.idx + offset)

    @property
    def current_indent(self) -> int:
        return self.indent_stack[-1]

    def push_indent(self, indent: int) -> None:
        self.indent_stack.append(indent)

    def pop_indent(self) -> None:
        if len(self.indent_stack) > 1:
            self.indent_stack.pop()

    def has_option(self, option: ParseOption) -> bool:
        return self.shared.has_option(option)

    def message(
        self,
        kind: MessageKind,
        arg: str | None = None,
        line: int | None = None,
        col: int | None = None,
    ) -> None:
        """Report `kind` at the current token, or at `line`/`col` when given.

        The argument defaults to the text of the current token.
        """
        token = self.tok()
        if arg is None:
            arg = token.text
        line = token.line if line is None else line
        col = token.col if col is None else col
        self.shared.msg_handler(self.filename, self.line + line, self.col + col, kind, arg)
