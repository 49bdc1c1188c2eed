"""Inline markup parsing.

Each ``parse_*`` function reads tokens at the cursor, appends what it
recognises to a father node and advances the cursor.
"""

from __future__ import annotations

from collections.abc import Callable

from .constants import (
    CLOSING_PARTNERS,
    MARKUP_END_FOLLOWERS,
    MARKUP_START_PRECEDERS,
    SMILEY_START_CHARS,
    SMILIES,
    URL_SCHEMES,
)
from .messages import MessageKind
from .models import Node, NodeKind, ParseOption, Token, TokenKind, new_leaf
from .refname import node_to_refname
from .state import Cursor

TokenCheck = Callable[[Token], bool]

_LINE_END = (TokenKind.INDENT, TokenKind.EOF)
_SPACE_OR_END = (TokenKind.INDENT, TokenKind.WHITE, TokenKind.EOF)

ROLE_KINDS = {
    "idx": NodeKind.IDX,
    "literal": NodeKind.INLINE_LITERAL,
    "strong": NodeKind.STRONG_EMPHASIS,
    "emphasis": NodeKind.EMPHASIS,
    "sub": NodeKind.SUB,
    "subscript": NodeKind.SUB,
    "sup": NodeKind.SUP,
    "supscript": NodeKind.SUP,
    "superscript": NodeKind.SUP,
}


# --------------------------------------------------------------------------
# Token shape checks


def kind_is(*kinds: TokenKind) -> TokenCheck:
    return lambda token: token.kind in kinds


def symbol_is(text: str) -> TokenCheck:
    """Match a punctuation or adornment token spelled exactly `text`."""
    return lambda token: (
        token.kind in (TokenKind.PUNCT, TokenKind.ADORNMENT) and token.text == text
    )


def is_enumerator(token: Token) -> bool:
    """Match an enumerated list marker: a number, a single letter or ``#``.

    Examples:
        is_enumerator(Token(TokenKind.WORD, "12"))  # True
        is_enumerator(Token(TokenKind.WORD, "ab"))  # False
    """
    if token.kind is not TokenKind.WORD and token.text != "#":
        return False
    if token.text.isascii() and token.text.isdigit():
        return True
    first = token.text[:1]
    return len(token.text) == 1 and (first == "#" or first.isascii() and first.isalpha())


def tokens_match(p: Cursor, start: int, *checks: TokenCheck) -> bool:
    """Return True when the tokens from `start` on satisfy `checks` in order."""
    return all(check(p.at(start + offset)) for offset, check in enumerate(checks))


def is_role_marker(p: Cursor, start: int) -> bool:
    """``:name:`` at `start`."""
    return tokens_match(p, start, symbol_is(":"), kind_is(TokenKind.WORD), symbol_is(":"))


# --------------------------------------------------------------------------
# Shared helpers


def register_reference(p: Cursor, key: str, value: Node) -> None:
    if p.shared.set_reference(key, value):
        p.message(MessageKind.W_REDEFINITION_OF_LABEL, key)


def expect(p: Cursor, text: str) -> None:
    if p.tok().text == text:
        p.idx += 1
    else:
        p.message(MessageKind.E_EXPECTED, text)


def get_reference_name(p: Cursor, end: str) -> Node:
    """Collect a name up to the punctuation `end`, which is consumed."""
    name = Node(NodeKind.INNER)
    while True:
        token = p.tok()
        if token.kind in (TokenKind.WORD, TokenKind.OTHER, TokenKind.WHITE):
            name.add(new_leaf(token.text))
        elif token.kind is TokenKind.PUNCT:
            if token.text == end:
                p.idx += 1
                break
            name.add(new_leaf(token.text))
        else:
            p.message(MessageKind.E_EXPECTED, end)
            break
        p.idx += 1
    return name


def until_eol(p: Cursor) -> Node:
    """Collect the rest of the line as plain leaves."""
    node = Node(NodeKind.INNER)
    while p.tok().kind not in _LINE_END:
        node.add(new_leaf(p.tok().text))
        p.idx += 1
    return node


# --------------------------------------------------------------------------
# Markup boundaries


def is_inline_markup_start(p: Cursor, markup: str) -> bool:
    """Decide whether the current token opens `markup`.

    The delimiter must follow the start of input, whitespace or an opening
    character, must not be followed by whitespace, must not be escaped, and
    must not sit between a matching pair such as ``(*)``.
    """
    if p.tok().text != markup:
        return False
    previous = p.tok(-1)
    if not (
        p.idx == 0
        or previous.kind in (TokenKind.INDENT, TokenKind.WHITE)
        or previous.text[:1] in MARKUP_START_PRECEDERS
    ):
        return False
    following = p.tok(1)
    if following.kind in _SPACE_OR_END:
        return False
    if p.idx > 0:
        if previous.text == "\\":
            return False
        closing = CLOSING_PARTNERS.get(previous.text[:1])
        if closing is not None and following.text[:1] == closing:
            return False
    return True


def is_inline_markup_end(p: Cursor, markup: str) -> bool:
    """Decide whether the current token closes `markup`."""
    if p.tok().text != markup:
        return False
    previous = p.tok(-1)
    if previous.kind in (TokenKind.INDENT, TokenKind.WHITE):
        return False
    following = p.tok(1)
    if not (following.kind in _SPACE_OR_END or following.text[:1] in MARKUP_END_FOLLOWERS):
        return False
    # Backslashes are literal inside inline literals.
    if markup != "``" and previous.text == "\\":
        return False
    return True


# --------------------------------------------------------------------------
# Constructs


def parse_backslash(p: Cursor, father: Node) -> None:
    token = p.tok()
    if token.text == "\\\\":
        father.add(new_leaf("\\"))
        p.idx += 1
    elif token.text == "\\":
        p.idx += 1
        escaped = p.tok()
        if escaped.kind in _LINE_END:
            return
        if escaped.kind is not TokenKind.WHITE:
            father.add(new_leaf(escaped.text))
        p.idx += 1
    else:
        father.add(new_leaf(token.text))
        p.idx += 1


def parse_until(p: Cursor, father: Node, postfix: str, interpret_backslash: bool) -> None:
    """Consume the opening delimiter and everything up to the matching `postfix`.

    Line breaks inside the span become single spaces. A blank line or the end
    of input before `postfix` reports an ``expected`` error at the opening
    delimiter.
    """
    line, col = p.tok().line, p.tok().col
    p.idx += 1
    while True:
        token = p.tok()
        if token.kind is TokenKind.PUNCT:
            if is_inline_markup_end(p, postfix):
                p.idx += 1
                break
            if interpret_backslash:
                parse_backslash(p, father)
            else:
                father.add(new_leaf(token.text))
                p.idx += 1
        elif token.kind in (TokenKind.ADORNMENT, TokenKind.WORD, TokenKind.OTHER):
            father.add(new_leaf(token.text))
            p.idx += 1
        elif token.kind is TokenKind.INDENT:
            father.add(new_leaf(" "))
            p.idx += 1
            if p.tok().kind is TokenKind.INDENT:
                p.message(MessageKind.E_EXPECTED, postfix, line, col)
                break
        elif token.kind is TokenKind.WHITE:
            father.add(new_leaf(" "))
            p.idx += 1
        else:
            p.message(MessageKind.E_EXPECTED, postfix, line, col)
            break


def _split_embedded_ref(node: Node, text: Node, target: Node) -> None:
    """Split ``text <target>`` leaves into display text and target."""
    separator = -1
    for index in range(len(node.children) - 2, -1, -1):
        if node.children[index].text == "<":
            separator = index
            break
    skip = 2 if separator > 0 and node.children[separator - 1].text[:1] == " " else 1
    text.children.extend(node.children[: max(separator - skip + 1, 0)])
    target.children.extend(node.children[separator + 1 : len(node.children) - 1])


def apply_role(node: Node, role: str) -> Node:
    """Turn interpreted text into the node for `role`.

    Examples:
        apply_role(Node(NodeKind.INTERPRETED_TEXT), "strong").kind
        # NodeKind.STRONG_EMPHASIS
    """
    kind = ROLE_KINDS.get(role)
    if kind is not None:
        node.kind = kind
        return node
    node.kind = NodeKind.INNER
    return Node(NodeKind.GENERAL_ROLE, children=[node, new_leaf(role)])


def parse_postfix(p: Cursor, node: Node) -> Node:
    """Apply a trailing ``_``/``__`` reference marker or ``:role:`` to `node`."""
    if is_inline_markup_end(p, "_") or is_inline_markup_end(p, "__"):
        p.idx += 1
        if p.tok(-2).text == "`" and p.tok(-3).text == ">":
            text = Node(NodeKind.INNER)
            target = Node(NodeKind.INNER)
            _split_embedded_ref(node, text, target)
            if not text.children:
                return Node(NodeKind.STANDALONE_HYPERLINK, children=[target])
            register_reference(p, node_to_refname(text), target)
            return Node(NodeKind.HYPERLINK, children=[text, target])
        if node.kind is NodeKind.INTERPRETED_TEXT:
            node.kind = NodeKind.REF
            return node
        return Node(NodeKind.REF, children=[node])
    if is_role_marker(p, p.idx):
        role = p.tok(1).text
        p.idx += 3
        return apply_role(node, role)
    return node


def _match_verbatim(p: Cursor, start: int, expected: str) -> int:
    """Match consecutive token texts against `expected`.

    Returns:
        int: Index after the last matched token, or 0 when `expected` is not
            fully matched.
    """
    index = start
    matched = 0
    while matched < len(expected) and index < len(p.tokens):
        text = p.tokens[index].text
        if not text or not expected.startswith(text, matched):
            break
        matched += len(text)
        index += 1
    return index if matched == len(expected) else 0


def parse_smiley(p: Cursor) -> Node | None:
    """Recognise the longest emoticon starting at the cursor."""
    if p.tok().text[:1] not in SMILEY_START_CHARS:
        return None
    best_end, best_icon, best_length = 0, "", 0
    for key, icon in SMILIES:
        end = _match_verbatim(p, p.idx, key)
        if end > 0 and len(key) > best_length:
            best_end, best_icon, best_length = end, icon, len(key)
    if not best_end:
        return None
    p.idx = best_end
    return Node(NodeKind.SMILEY, best_icon)


def is_url(p: Cursor, index: int) -> bool:
    """``scheme://word`` starting at `index`."""
    return (
        p.at(index).text in URL_SCHEMES
        and p.at(index + 1).text == ":"
        and p.at(index + 2).text == "//"
        and p.at(index + 3).kind is TokenKind.WORD
    )


def parse_url(p: Cursor, father: Node) -> None:
    """Parse a bare URL, or a word that may carry a reference suffix."""
    if is_url(p, p.idx):
        link = Node(NodeKind.STANDALONE_HYPERLINK)
        while True:
            token = p.tok()
            if token.kind is TokenKind.PUNCT:
                # Trailing punctuation is not part of the link.
                if p.tok(1).kind not in (
                    TokenKind.WORD,
                    TokenKind.ADORNMENT,
                    TokenKind.OTHER,
                    TokenKind.PUNCT,
                ):
                    break
            elif token.kind not in (TokenKind.WORD, TokenKind.ADORNMENT, TokenKind.OTHER):
                break
            link.add(new_leaf(token.text))
            p.idx += 1
        father.add(link)
        return
    node = new_leaf(p.tok().text)
    p.idx += 1
    if p.tok().text == "_":
        node = parse_postfix(p, node)
    father.add(node)


def parse_markdown_codeblock(p: Cursor) -> Node:
    """Parse the body of a ```` ``` ```` fence; the opening fence is consumed."""
    args: Node | None = None
    if p.tok().kind is TokenKind.WORD:
        args = Node(NodeKind.DIRECTIVE_ARG, children=[new_leaf(p.tok().text)])
        p.idx += 1
    parts: list[str] = []
    while True:
        token = p.tok()
        if token.kind is TokenKind.EOF:
            p.message(MessageKind.E_EXPECTED, "```")
            break
        p.idx += 1
        if token.kind is TokenKind.PUNCT and token.text == "```":
            break
        parts.append(token.text)
    block = Node(NodeKind.LITERAL_BLOCK, children=[new_leaf("".join(parts))])
    return Node(NodeKind.CODE_BLOCK, children=[args, None, block])


def parse_markdown_link(p: Cursor, father: Node) -> bool:
    """Parse ``[text](target)``; leaves the cursor alone when it does not match."""

    def scan(index: int, end: str) -> tuple[int, str] | None:
        parts: list[str] = []
        index += 1
        while True:
            token = p.at(index)
            if token.kind in _LINE_END:
                return None
            if token.text == end:
                return index + 1, "".join(parts)
            parts.append(token.text)
            index += 1

    description = scan(p.idx, "]")
    if description is None or p.at(description[0]).text != "(":
        return False
    link = scan(description[0], ")")
    if link is None:
        return False
    father.add(
        Node(NodeKind.HYPERLINK, children=[new_leaf(description[1]), new_leaf(link[1])])
    )
    p.idx = link[0]
    return True


def parse_footnote_ref(p: Cursor, father: Node) -> bool:
    """Parse ``[label]_`` into a reference to a footnote or citation.

    The label is a run of word characters without whitespace. The cursor is
    left alone when the tokens do not form a reference.
    """
    if not is_inline_markup_start(p, "["):
        return False
    start = p.idx
    index = start + 1
    label: list[str] = []
    while p.at(index).kind in (TokenKind.WORD, TokenKind.OTHER):
        label.append(p.at(index).text)
        index += 1
    if not label or p.at(index).text != "]":
        return False
    p.idx = index + 1
    if not is_inline_markup_end(p, "_"):
        p.idx = start
        return False
    p.idx += 1
    father.add(Node(NodeKind.REF, children=[new_leaf("".join(label))]))
    return True


def _parse_prefix_role(p: Cursor, father: Node) -> bool:
    """Parse ``:role:`text```."""
    if not is_role_marker(p, p.idx):
        return False
    start = p.idx
    p.idx += 3
    if not is_inline_markup_start(p, "`"):
        p.idx = start
        return False
    node = Node(NodeKind.INTERPRETED_TEXT)
    parse_until(p, node, "`", True)
    father.add(apply_role(node, p.at(start + 1).text))
    return True


def _try_smiley(p: Cursor, father: Node) -> bool:
    if not p.has_option(ParseOption.SUPPORT_SMILIES):
        return False
    smiley = parse_smiley(p)
    if smiley is None:
        return False
    father.add(smiley)
    return True


def parse_inline(p: Cursor, father: Node) -> None:
    """Parse one inline construct at the cursor and append it to `father`."""
    token = p.tok()
    markdown = p.has_option(ParseOption.SUPPORT_MARKDOWN)
    if token.kind is TokenKind.PUNCT:
        if is_inline_markup_start(p, "***"):
            node = Node(NodeKind.TRIPLE_EMPHASIS)
            parse_until(p, node, "***", True)
        elif is_inline_markup_start(p, "**"):
            node = Node(NodeKind.STRONG_EMPHASIS)
            parse_until(p, node, "**", True)
        elif is_inline_markup_start(p, "*"):
            node = Node(NodeKind.EMPHASIS)
            parse_until(p, node, "*", True)
        elif markdown and token.text == "```":
            p.idx += 1
            node = parse_markdown_codeblock(p)
        elif is_inline_markup_start(p, "``"):
            node = Node(NodeKind.INLINE_LITERAL)
            parse_until(p, node, "``", False)
        elif is_inline_markup_start(p, "`"):
            node = Node(NodeKind.INTERPRETED_TEXT)
            parse_until(p, node, "`", True)
            node = parse_postfix(p, node)
        elif is_inline_markup_start(p, "|"):
            node = Node(NodeKind.SUBSTITUTION_REF)
            parse_until(p, node, "|", False)
        elif token.text == "[" and parse_footnote_ref(p, father):
            return
        elif (
            markdown
            and token.text == "["
            and p.tok(1).text != "["
            and parse_markdown_link(p, father)
        ):
            return
        else:
            if _parse_prefix_role(p, father) or _try_smiley(p, father):
                return
            parse_backslash(p, father)
            return
        father.add(node)
    elif token.kind is TokenKind.WORD:
        if _try_smiley(p, father):
            return
        parse_url(p, father)
    elif token.kind in (TokenKind.ADORNMENT, TokenKind.OTHER, TokenKind.WHITE):
        if _try_smiley(p, father):
            return
        father.add(new_leaf(token.text))
        p.idx += 1


def parse_line(p: Cursor, father: Node) -> None:
    """Parse inline content up to the end of the line or an adornment."""
    while p.tok().kind in (TokenKind.WHITE, TokenKind.WORD, TokenKind.OTHER, TokenKind.PUNCT):
        parse_inline(p, father)


def parse_until_newline(p: Cursor, father: Node) -> None:
    """Parse inline content up to the end of the line."""
    while p.tok().kind not in _LINE_END:
        parse_inline(p, father)
