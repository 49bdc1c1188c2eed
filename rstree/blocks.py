"""Block structure: section classification and block-level parsers.

`which_section` looks at the tokens around the cursor and names the
construct that starts there. The checks are not mutually exclusive, so their
order matters. `parse_section` dispatches to the matching parser, which calls
back into `parse_section` for nested content while the cursor's indentation
stack bounds how far each nested section extends.
"""

from __future__ import annotations

from . import directives, tables
from .inline import (
    is_enumerator,
    is_role_marker,
    kind_is,
    parse_inline,
    parse_line,
    parse_until,
    parse_until_newline,
    symbol_is,
    tokens_match,
)
from .messages import MessageKind
from .models import Node, NodeKind, ParseOption, TokenKind, new_leaf
from .state import Cursor

_WORD = kind_is(TokenKind.WORD)
_WHITE = kind_is(TokenKind.WHITE)
_INDENT = kind_is(TokenKind.INDENT)
_ADORNMENT = kind_is(TokenKind.ADORNMENT)

# Marker shapes of enumerated list items, with the number of tokens before
# the enumerator.
ENUM_MARKERS = (
    ((symbol_is("("), is_enumerator, symbol_is(")"), _WHITE), 1),
    ((is_enumerator, symbol_is(")"), _WHITE), 0),
    ((is_enumerator, symbol_is("."), _WHITE), 0),
)

BULLET_CHARS = ("*", "+", "-")

MAX_MARKDOWN_HEADLINE_LEVEL = 6


# --------------------------------------------------------------------------
# Lookahead predicates


def token_after_newline(p: Cursor) -> int:
    """Index of the first token on the next line, or of ``EOF``."""
    index = p.idx
    while True:
        kind = p.at(index).kind
        if kind is TokenKind.EOF:
            return index
        index += 1
        if kind is TokenKind.INDENT:
            return index


def follows_newline(p: Cursor) -> bool:
    """True when the cursor starts a line at the current indentation."""
    if p.idx == 0:
        return True
    previous = p.tok(-1)
    return previous.kind is TokenKind.INDENT and previous.ival == p.current_indent


def is_transition(p: Cursor) -> bool:
    return tokens_match(p, p.idx + 1, _INDENT, _INDENT)


def is_simple_table(p: Cursor) -> bool:
    return tokens_match(p, p.idx + 1, _WHITE, _ADORNMENT)


def is_overline(p: Cursor) -> bool:
    return tokens_match(p, p.idx + 1, _INDENT)


def is_underlined_headline(p: Cursor) -> bool:
    return tokens_match(p, token_after_newline(p), _ADORNMENT, _INDENT)


def is_markdown_headline(p: Cursor) -> bool:
    """``#`` to ``######`` followed by a space and text, with markdown enabled."""
    if not p.has_option(ParseOption.SUPPORT_MARKDOWN):
        return False
    marker = p.tok().text
    if not 1 <= len(marker) <= MAX_MARKDOWN_HEADLINE_LEVEL or marker.strip("#"):
        return False
    return p.tok(1).kind is TokenKind.WHITE and p.tok(2).kind in (
        TokenKind.WORD,
        TokenKind.OTHER,
        TokenKind.PUNCT,
    )


def is_bullet(p: Cursor) -> bool:
    return (
        follows_newline(p)
        and p.tok().text in BULLET_CHARS
        and p.tok(1).kind is TokenKind.WHITE
    )


def is_line_block(p: Cursor) -> bool:
    """A ``|`` line followed by another ``|`` line or a continuation line."""
    if p.tok().text != "|":
        return False
    current = p.tok()
    following = p.at(token_after_newline(p))
    return (
        current.col == following.col and following.text == "|"
    ) or following.col > current.col


def is_directive_marker(p: Cursor) -> bool:
    return p.tok().text == ".." and follows_newline(p)


def is_field_list(p: Cursor) -> bool:
    return is_role_marker(p, p.idx) and follows_newline(p)


def enum_marker(p: Cursor, index: int | None = None):
    """Return the matching entry of `ENUM_MARKERS` at `index`, or None."""
    index = p.idx if index is None else index
    for checks, skip in ENUM_MARKERS:
        if tokens_match(p, index, *checks):
            return checks, skip
    return None


def is_grid_table(p: Cursor) -> bool:
    return tokens_match(p, p.idx, symbol_is("+"), _ADORNMENT, symbol_is("+"))


def is_definition_list(p: Cursor) -> bool:
    index = token_after_newline(p)
    following = p.at(index)
    return (
        p.tok().col < following.col
        and following.kind in (TokenKind.WORD, TokenKind.OTHER, TokenKind.PUNCT)
        and p.at(index - 2).text != "::"
    )


def is_option_list(p: Cursor) -> bool:
    return any(
        tokens_match(p, p.idx, symbol_is(prefix), _WORD) for prefix in ("-", "--", "/", "//")
    )


def which_section(p: Cursor) -> NodeKind:
    """Classify the construct starting at the cursor.

    Returns:
        NodeKind: Kind of the construct. ``LEAF`` means no section can start
            here; ``GRID_TABLE`` is reported as unsupported.
    """
    token = p.tok()
    if token.kind is TokenKind.ADORNMENT:
        if is_transition(p):
            return NodeKind.TRANSITION
        if is_simple_table(p):
            return NodeKind.TABLE
        if is_overline(p):
            return NodeKind.OVERLINE
        if is_markdown_headline(p):
            return NodeKind.HEADLINE
        return NodeKind.LEAF
    if token.kind is TokenKind.PUNCT:
        if is_markdown_headline(p) or is_underlined_headline(p):
            return NodeKind.HEADLINE
        if token.text == "::":
            return NodeKind.LITERAL_BLOCK
        if is_bullet(p):
            return NodeKind.BULLET_LIST
        if is_line_block(p):
            return NodeKind.LINE_BLOCK
        if is_directive_marker(p):
            return NodeKind.DIRECTIVE
        if is_field_list(p):
            return NodeKind.FIELD_LIST
        if tokens_match(p, p.idx, *ENUM_MARKERS[0][0]) or tokens_match(
            p, p.idx, *ENUM_MARKERS[2][0]
        ):
            return NodeKind.ENUM_LIST
        if is_grid_table(p):
            p.message(MessageKind.E_GRID_TABLE_NOT_IMPLEMENTED)
            return NodeKind.GRID_TABLE
        if is_definition_list(p):
            return NodeKind.DEF_LIST
        if is_option_list(p):
            return NodeKind.OPTION_LIST
        return NodeKind.PARAGRAPH
    if token.kind in (TokenKind.WORD, TokenKind.OTHER, TokenKind.WHITE):
        if is_underlined_headline(p):
            return NodeKind.HEADLINE
        if tokens_match(p, p.idx, *ENUM_MARKERS[1][0]) or tokens_match(
            p, p.idx, *ENUM_MARKERS[2][0]
        ):
            return NodeKind.ENUM_LIST
        if is_definition_list(p):
            return NodeKind.DEF_LIST
        return NodeKind.PARAGRAPH
    return NodeKind.LEAF


# --------------------------------------------------------------------------
# Block parsers


def parse_literal_block(p: Cursor) -> Node:
    """Parse an indented literal block, or the rest of the line.

    Indentation beyond the block's first line is kept; leading blank lines
    are dropped.
    """
    parts: list[str] = []
    if p.tok().kind is TokenKind.INDENT:
        indent = p.tok().ival
        p.idx += 1
        while p.tok().kind is TokenKind.INDENT and p.tok().ival >= indent:
            p.idx += 1
        while True:
            token = p.tok()
            if token.kind is TokenKind.EOF:
                break
            if token.kind is TokenKind.INDENT:
                if token.ival < indent:
                    break
                parts.append("\n" + " " * (token.ival - indent))
            else:
                parts.append(token.text)
            p.idx += 1
    else:
        while p.tok().kind not in (TokenKind.INDENT, TokenKind.EOF):
            parts.append(p.tok().text)
            p.idx += 1
    return Node(NodeKind.LITERAL_BLOCK, children=[new_leaf("".join(parts))])


def parse_field(p: Cursor) -> Node:
    """Parse ``:name: body`` into a field node."""
    col = p.tok().col
    name = Node(NodeKind.FIELD_NAME)
    parse_until(p, name, ":", False)
    body = Node(NodeKind.FIELD_BODY)
    if p.tok().kind is not TokenKind.INDENT:
        parse_line(p, body)
    if p.tok().kind is TokenKind.INDENT and p.tok().ival > col:
        p.push_indent(p.tok().ival)
        parse_section(p, body)
        p.pop_indent()
    return Node(NodeKind.FIELD, children=[name, body])


def parse_fields(p: Cursor) -> Node | None:
    """Parse consecutive fields aligned on one column.

    The cursor sits on the line break before the first field, or on the
    first token of the input.

    Returns:
        Node | None: A field list, or None when no field starts here.
    """
    at_start = p.idx == 0 and p.tokens[0].text == ":"
    if not at_start and not (p.tok().kind is TokenKind.INDENT and p.tok(1).text == ":"):
        return None
    col = p.tok().col if at_start else p.tok().ival
    fields = Node(NodeKind.FIELD_LIST)
    if not at_start:
        p.idx += 1
    while True:
        fields.add(parse_field(p))
        if (
            p.tok().kind is TokenKind.INDENT
            and p.tok().ival == col
            and p.tok(1).text == ":"
        ):
            p.idx += 1
        else:
            break
    return fields


def parse_line_block(p: Cursor) -> Node | None:
    if p.tok(1).kind is not TokenKind.WHITE:
        return None
    col = p.tok().col
    block = Node(NodeKind.LINE_BLOCK)
    p.push_indent(p.tok(2).col)
    p.idx += 2
    while True:
        item = Node(NodeKind.LINE_BLOCK_ITEM)
        parse_section(p, item)
        block.add(item)
        if (
            p.tok().kind is TokenKind.INDENT
            and p.tok().ival == col
            and p.tok(1).text == "|"
            and p.tok(2).kind is TokenKind.WHITE
        ):
            p.idx += 3
        else:
            break
    p.pop_indent()
    return block


def parse_paragraph(p: Cursor, paragraph: Node) -> None:
    """Parse inline content into `paragraph` until a blank line or new block.

    Lines at the current indentation continue the paragraph unless they start
    a list, table or similar block. A trailing ``::`` followed by an indented
    block becomes ``:`` plus a literal block.
    """
    while True:
        token = p.tok()
        if token.kind is TokenKind.INDENT:
            if p.tok(1).kind is TokenKind.INDENT:
                p.idx += 1
                break
            if token.ival != p.current_indent:
                break
            p.idx += 1
            if p.tok().kind is TokenKind.EOF:
                break
            kind = which_section(p)
            if kind in (
                NodeKind.PARAGRAPH,
                NodeKind.LEAF,
                NodeKind.HEADLINE,
                NodeKind.OVERLINE,
                NodeKind.DIRECTIVE,
            ):
                paragraph.add(new_leaf(" "))
            elif kind is NodeKind.LINE_BLOCK:
                paragraph.add_if_not_none(parse_line_block(p))
            else:
                break
        elif token.kind is TokenKind.PUNCT:
            following = p.tok(1)
            if (
                token.text == "::"
                and following.kind is TokenKind.INDENT
                and p.current_indent < following.ival
            ):
                paragraph.add(new_leaf(":"))
                p.idx += 1
                paragraph.add(parse_literal_block(p))
                break
            parse_inline(p, paragraph)
        elif token.kind in (
            TokenKind.WHITE,
            TokenKind.WORD,
            TokenKind.ADORNMENT,
            TokenKind.OTHER,
        ):
            parse_inline(p, paragraph)
        else:
            break


def parse_headline(p: Cursor) -> Node:
    """Parse a markdown headline or a line followed by an underline."""
    headline = Node(NodeKind.HEADLINE)
    if is_markdown_headline(p):
        headline.level = len(p.tok().text)
        p.idx += 2
        parse_until_newline(p, headline)
        return headline
    parse_until_newline(p, headline)
    if p.tok().kind is TokenKind.INDENT and p.tok(1).kind is TokenKind.ADORNMENT:
        headline.level = p.shared.underline_level(p.tok(1).text[0])
        p.idx += 2
    return headline


def parse_transition(p: Cursor) -> Node:
    p.idx += 1
    for _ in range(2):
        if p.tok().kind is TokenKind.INDENT:
            p.idx += 1
    return Node(NodeKind.TRANSITION)


def parse_overline(p: Cursor) -> Node:
    """Parse a heading between an overline and an underline.

    Indented title lines continue the title.
    """
    char = p.tok().text[0]
    p.idx += 2
    headline = Node(NodeKind.OVERLINE)
    while True:
        parse_until_newline(p, headline)
        if p.tok().kind is not TokenKind.INDENT:
            break
        p.idx += 1
        if p.tok(-1).ival <= p.current_indent:
            break
        headline.add(new_leaf(" "))
    headline.level = p.shared.overline_level(char)
    if p.tok().kind is TokenKind.ADORNMENT:
        p.idx += 1
        if p.tok().kind is TokenKind.INDENT:
            p.idx += 1
    return headline


def parse_bullet_list(p: Cursor) -> Node | None:
    """Parse items sharing the same bullet character and column."""
    if p.tok(1).kind is not TokenKind.WHITE:
        return None
    bullet = p.tok().text
    col = p.tok().col
    bullets = Node(NodeKind.BULLET_LIST)
    p.push_indent(p.tok(2).col)
    p.idx += 2
    while True:
        item = Node(NodeKind.BULLET_ITEM)
        parse_section(p, item)
        bullets.add(item)
        if (
            p.tok().kind is TokenKind.INDENT
            and p.tok().ival == col
            and p.tok(1).text == bullet
            and p.tok(2).kind is TokenKind.WHITE
        ):
            p.idx += 3
        else:
            break
    p.pop_indent()
    return bullets


def parse_option_list(p: Cursor) -> Node:
    options = Node(NodeKind.OPTION_LIST)
    while is_option_list(p):
        group = Node(NodeKind.OPTION_GROUP)
        description = Node(NodeKind.DESCRIPTION)
        if tokens_match(p, p.idx, symbol_is("//"), _WORD):
            p.idx += 1
        # Two or more spaces separate the options from their description.
        while p.tok().kind not in (TokenKind.INDENT, TokenKind.EOF):
            if p.tok().kind is TokenKind.WHITE and len(p.tok().text) > 1:
                p.idx += 1
                break
            group.add(new_leaf(p.tok().text))
            p.idx += 1
        line_end = p.at(token_after_newline(p) - 1)
        if line_end.kind is TokenKind.INDENT and line_end.ival > p.current_indent:
            p.push_indent(line_end.ival)
            parse_section(p, description)
            p.pop_indent()
        else:
            parse_line(p, description)
        if p.tok().kind is TokenKind.INDENT:
            p.idx += 1
        options.add(Node(NodeKind.OPTION_LIST_ITEM, children=[group, description]))
    return options


def _starts_definition(p: Cursor, index: int, col: int) -> bool:
    line_end = p.at(index)
    return (
        index >= 1
        and line_end.kind is TokenKind.INDENT
        and line_end.ival > col
        and p.at(index - 1).text != "::"
    )


def parse_definition_list(p: Cursor) -> Node | None:
    """Parse terms each followed by a more indented definition.

    Returns:
        Node | None: The list, or None when not even one item parsed.
    """
    if not _starts_definition(p, token_after_newline(p) - 1, p.current_indent):
        return None
    col = p.tok().col
    definitions = Node(NodeKind.DEF_LIST)
    while True:
        start = p.idx
        name = Node(NodeKind.DEF_NAME)
        parse_line(p, name)
        token = p.tok()
        if not (
            token.kind is TokenKind.INDENT
            and token.ival > p.current_indent
            and p.tok(1).text != "::"
            and p.tok(1).kind not in (TokenKind.INDENT, TokenKind.EOF)
        ):
            p.idx = start
            break
        p.push_indent(token.ival)
        body = Node(NodeKind.DEF_BODY)
        parse_section(p, body)
        definitions.add(Node(NodeKind.DEF_ITEM, children=[name, body]))
        p.pop_indent()
        if not (p.tok().kind is TokenKind.INDENT and p.tok().ival == col):
            break
        p.idx += 1
        index = token_after_newline(p) - 1
        if not _starts_definition(p, index, col) or p.at(index + 1).kind is TokenKind.INDENT:
            break
    return definitions if definitions.children else None


def parse_enum_list(p: Cursor) -> Node | None:
    """Parse items sharing one enumerator style and column.

    Returns:
        Node | None: The list, or None when the second line neither continues
            the first item nor starts another one.
    """
    marker = enum_marker(p)
    if marker is None:
        return None
    checks, skip = marker
    col = p.tok().col
    items = Node(NodeKind.ENUM_LIST)
    p.idx += skip + 3
    following = token_after_newline(p)
    if not (p.at(following).col == p.tok().col or tokens_match(p, following, *checks)):
        p.idx -= skip + 3
        return None
    p.push_indent(p.tok().col)
    while True:
        item = Node(NodeKind.ENUM_ITEM)
        parse_section(p, item)
        items.add(item)
        if (
            p.tok().kind is TokenKind.INDENT
            and p.tok().ival == col
            and tokens_match(p, p.idx + 1, *checks)
        ):
            p.idx += skip + 4
        else:
            break
    p.pop_indent()
    return items


def _child_kind(father: Node, index: int) -> NodeKind:
    if index < len(father.children) and father.children[index] is not None:
        return father.children[index].kind
    return NodeKind.LEAF


def _parse_construct(p: Cursor, kind: NodeKind) -> Node | None:
    if kind is NodeKind.LITERAL_BLOCK:
        p.idx += 1
        return parse_literal_block(p)
    if kind is NodeKind.BULLET_LIST:
        return parse_bullet_list(p)
    if kind is NodeKind.LINE_BLOCK:
        return parse_line_block(p)
    if kind is NodeKind.DIRECTIVE:
        return directives.parse_dot_dot(p)
    if kind is NodeKind.ENUM_LIST:
        return parse_enum_list(p)
    if kind is NodeKind.LEAF:
        p.message(MessageKind.E_NEW_SECTION_EXPECTED)
        return None
    if kind is NodeKind.DEF_LIST:
        return parse_definition_list(p)
    if kind is NodeKind.FIELD_LIST:
        if p.idx > 0:
            p.idx -= 1
        return parse_fields(p)
    if kind is NodeKind.TRANSITION:
        return parse_transition(p)
    if kind is NodeKind.HEADLINE:
        return parse_headline(p)
    if kind is NodeKind.OVERLINE:
        return parse_overline(p)
    if kind is NodeKind.TABLE:
        return tables.parse_simple_table(p)
    if kind is NodeKind.OPTION_LIST:
        return parse_option_list(p)
    return None


def parse_section(p: Cursor, section: Node) -> None:
    """Parse blocks into `section` until the indentation drops below the current level.

    Deeper indentation opens a block quote. A single paragraph followed by
    anything other than another paragraph is relabelled ``INNER``, so simple
    list items and cells hold plain inline content.
    """
    while True:
        leave = False
        while p.tok().kind is TokenKind.INDENT:
            ival = p.tok().ival
            if ival == p.current_indent:
                p.idx += 1
            elif ival > p.current_indent:
                p.push_indent(ival)
                quote = Node(NodeKind.BLOCK_QUOTE)
                parse_section(p, quote)
                section.add(quote)
                p.pop_indent()
            else:
                leave = True
                break
        if leave or p.tok().kind is TokenKind.EOF:
            break
        kind = which_section(p)
        node = _parse_construct(p, kind)
        if node is None and kind is not NodeKind.DIRECTIVE:
            node = Node(NodeKind.PARAGRAPH)
            parse_paragraph(p, node)
        section.add_if_not_none(node)
    first, second = _child_kind(section, 0), _child_kind(section, 1)
    if first is NodeKind.PARAGRAPH and second is not NodeKind.PARAGRAPH:
        section.children[0].kind = NodeKind.INNER


def parse_section_wrapper(p: Cursor) -> Node:
    """Parse a section and unwrap single-child ``INNER`` nodes."""
    node = Node(NodeKind.INNER)
    parse_section(p, node)
    while node.kind is NodeKind.INNER and len(node.children) == 1:
        if node.children[0] is None:
            break
        node = node.children[0]
    return node


def parse_doc(p: Cursor) -> Node:
    """Parse a whole token stream; leftover tokens report a general parse error."""
    document = parse_section_wrapper(p)
    if p.tok().kind is not TokenKind.EOF:
        p.message(MessageKind.E_GENERAL_PARSE_ERROR)
    return document
