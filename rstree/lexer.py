"""Tokenizer for reStructuredText input."""

from __future__ import annotations

from dataclasses import dataclass

from .constants import (
    ADORNMENT_CHARS,
    BRACKET_CHARS,
    BYTE_ORDER_MARK,
    MAX_PUNCT_LENGTH,
    NEWLINE_CHARS,
    TAB_WIDTH,
    WHITESPACE_CHARS,
)
from .models import Token, TokenKind


def is_word_char(char: str) -> bool:
    """Return True for ASCII letters, digits, and characters at or above U+0080.

    Examples:
        is_word_char("a")  # True
        is_word_char("é")  # True
        is_word_char("-")  # False
    """
    return (
        "a" <= char <= "z"
        or "A" <= char <= "Z"
        or "0" <= char <= "9"
        or char >= "\x80"
    )


@dataclass
class _Lexer:
    buf: str
    pos: int = 0
    line: int = 0
    col: int = 0
    base_indent: int = 0
    skip_pounds: bool = False

    def char(self, pos: int) -> str:
        return self.buf[pos] if pos < len(self.buf) else ""

    def _line_indent(self, start: int) -> tuple[int, int]:
        pos = start
        if self.char(pos) == "\r":
            pos += 2 if self.char(pos + 1) == "\n" else 1
        elif self.char(pos) == "\n":
            pos += 1
        if self.skip_pounds:
            if self.char(pos) == "#":
                pos += 1
            if self.char(pos) == "#":
                pos += 1
        width = 0
        while True:
            char = self.char(pos)
            if char in (" ", "\v", "\f"):
                width += 1
            elif char == "\t":
                width = width - (width % TAB_WIDTH) + TAB_WIDTH
            else:
                break
            pos += 1
        return width, pos

    def indent_after(self, start: int) -> tuple[int, int]:
        """Measure the indentation following the line break at `start`.

        Blank lines are looked through: the width reported is the one of the
        next non-blank line (0 at end of input), while the returned position
        stays on the current line so every line break yields its own token.
        """
        width, resume = self._line_indent(start)
        pos = resume
        while self.char(pos) in NEWLINE_CHARS:
            width, pos = self._line_indent(pos)
        if self.char(pos) == "":
            width = 0
        return width, resume

    def _take_run(self, kind: TokenKind, allowed) -> Token:
        start = self.pos
        pos = start + 1
        while self.char(pos) != "" and allowed(self.char(pos)):
            pos += 1
        token = Token(kind, self.buf[start:pos], line=self.line, col=self.col)
        self.col += pos - start
        self.pos = pos
        return token

    def _indent_token(self) -> Token:
        width, self.pos = self.indent_after(self.pos)
        self.line += 1
        self.col = width
        ival = max(width - self.base_indent, 0)
        return Token(TokenKind.INDENT, "\n" + " " * ival, ival, line=self.line)

    def next_token(self) -> Token:
        char = self.char(self.pos)
        if char == "":
            token = Token(TokenKind.EOF, line=self.line, col=self.col)
        elif is_word_char(char):
            token = self._take_run(TokenKind.WORD, is_word_char)
        elif char in WHITESPACE_CHARS:
            token = self._take_run(TokenKind.WHITE, lambda c: c in (" ", "\t"))
            # Trailing whitespace is folded into the line break.
            if self.char(self.pos) in NEWLINE_CHARS:
                return self.next_token()
        elif char in NEWLINE_CHARS:
            return self._indent_token()
        elif char in ADORNMENT_CHARS:
            token = self._take_run(TokenKind.ADORNMENT, lambda c: c == char)
            if len(token.text) <= MAX_PUNCT_LENGTH:
                token.kind = TokenKind.PUNCT
        elif char in BRACKET_CHARS:
            token = Token(TokenKind.PUNCT, char, line=self.line, col=self.col)
            self.pos += 1
            self.col += 1
        else:
            token = Token(TokenKind.OTHER, char, line=self.line, col=self.col)
            self.pos += 1
            self.col += 1
        token.col = max(token.col - self.base_indent, 0)
        return token


def tokenize(text: str, skip_pounds: bool = False) -> tuple[list[Token], int]:
    """Split `text` into classified tokens.

    The lexer is total: characters it does not recognise become ``OTHER``
    tokens. Every line break produces an ``INDENT`` token whose ``ival`` is
    the indentation of the next non-blank line (tabs advance to the next
    multiple of eight). A leading run of whitespace is reported as an indent.

    Args:
        text: Source text.
        skip_pounds: Consume up to two ``#`` characters at the start of every
            line, plus the spaces after them on the first line, which become
            the base indentation removed from every column.

    Returns:
        tuple[list[Token], int]: Tokens terminated by exactly one ``EOF``
            token, and the number of leading characters skipped on the first
            line.

    Examples:
        tokens, _ = tokenize("Title\\n=====\\n")
        [t.kind.name for t in tokens]
        # ['WORD', 'INDENT', 'ADORNMENT', 'INDENT', 'EOF']
    """
    lexer = _Lexer(text, skip_pounds=skip_pounds)
    offset = 0
    if text.startswith(BYTE_ORDER_MARK):
        lexer.pos = len(BYTE_ORDER_MARK)
    if skip_pounds:
        for _ in range(2):
            if lexer.char(lexer.pos) == "#":
                lexer.pos += 1
                offset += 1
        while lexer.char(lexer.pos) == " ":
            lexer.pos += 1
            lexer.base_indent += 1
            offset += 1

    tokens: list[Token] = []
    while True:
        token = lexer.next_token()
        tokens.append(token)
        if token.kind is TokenKind.EOF:
            break

    if tokens[0].kind is TokenKind.WHITE:
        tokens[0].kind = TokenKind.INDENT
        tokens[0].ival = len(tokens[0].text)
    return tokens, offset
