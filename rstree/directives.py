"""Explicit markup: directives, targets, substitution definitions and comments.

Everything starting with ``..`` at the start of a line is handled here.
Named directives parse into nodes with three children (argument, options,
content), any of which may be None. Hyperlink targets, substitution
definitions and footnotes only record entries in the shared state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Flag, auto
from pathlib import Path

from . import blocks
from .constants import DEFAULT_LANGUAGE, RAW_FORMATS, SUPPORTED_LANGUAGES
from .exceptions import IncludeDepthError
from .filesystem import find_relative_file, read_source
from .inline import (
    expect,
    get_reference_name,
    kind_is,
    parse_line,
    register_reference,
    symbol_is,
    tokens_match,
    until_eol,
)
from .messages import MessageKind
from .models import Node, NodeKind, ParseOption, TokenKind, new_leaf
from .refname import add_nodes, equals_ignore_style, node_to_refname
from .state import Cursor

logger = logging.getLogger(__name__)

ContentParser = Callable[[Cursor], Node]

_WHITE = kind_is(TokenKind.WHITE)


class DirectiveFlag(Flag):
    """Shape of a directive's argument and options."""

    NONE = 0
    HAS_ARG = auto()
    HAS_OPTIONS = auto()
    ARG_IS_FILE = auto()
    ARG_IS_WORD = auto()


INCLUDE_FIELDS = ("start-after", "end-before", "literal", "encoding")
CODE_FIELDS = ("file", "number-lines", "linenos", "caption", "name", "class", "default-language")
IMAGE_FIELDS = ("alt", "height", "width", "scale", "align", "target", "name", "class")
FIGURE_FIELDS = (*IMAGE_FIELDS, "figwidth", "figclass")
RAW_FIELDS = ("file", "encoding")


# --------------------------------------------------------------------------
# Field access


def get_field_value(directive: Node, name: str) -> str | None:
    """Return the stripped value of option `name`, or None when it is absent.

    Option names are compared ignoring case and underscores. An option given
    without a value yields ``""``.

    Examples:
        get_field_value(parse_rst(".. image:: a.png\\n   :alt: A\\n").document, "alt")
        # "A"
    """
    options = directive.children[1] if len(directive.children) > 1 else None
    if options is None or options.kind is not NodeKind.FIELD_LIST:
        return None
    for field in options.children:
        if equals_ignore_style(add_nodes(field.children[0]).strip(), name):
            return add_nodes(field.children[1]).strip()
    return None


def get_argument(directive: Node) -> str:
    """Return the text of a directive's argument, or ``""``."""
    if not directive.children or directive.children[0] is None:
        return ""
    return add_nodes(directive.children[0])


def _check_fields(p: Cursor, directive: Node, supported: tuple[str, ...]) -> None:
    options = directive.children[1]
    if options is None:
        return
    for field in options.children:
        name = add_nodes(field.children[0]).strip()
        if not any(equals_ignore_style(name, known) for known in supported):
            p.message(MessageKind.W_UNSUPPORTED_FIELD, name)


# --------------------------------------------------------------------------
# Generic directive shape


def get_directive(p: Cursor) -> str:
    """Read ``name::`` after ``..``.

    Returns:
        str: The directive name, or ``""`` with the cursor unchanged when no
            name followed by ``::`` is found.
    """
    if not tokens_match(p, p.idx, _WHITE, kind_is(TokenKind.WORD)):
        return ""
    start = p.idx
    p.idx += 1
    name = p.tok().text
    p.idx += 1
    while p.tok().kind in (
        TokenKind.WORD,
        TokenKind.PUNCT,
        TokenKind.ADORNMENT,
        TokenKind.OTHER,
    ):
        if p.tok().text == "::":
            break
        name += p.tok().text
        p.idx += 1
    if p.tok().kind is TokenKind.WHITE:
        p.idx += 1
    if p.tok().text != "::":
        p.idx = start
        return ""
    p.idx += 1
    if p.tok().kind is TokenKind.WHITE:
        p.idx += 1
    return name


def _indent_follows(p: Cursor) -> bool:
    return p.tok().kind is TokenKind.INDENT and p.tok().ival > p.current_indent


def parse_directive_head(p: Cursor, flags: DirectiveFlag) -> Node:
    """Parse the argument and options of a directive.

    Returns:
        Node: A ``DIRECTIVE`` node with two children, argument and options;
            either may be None.
    """
    args: Node | None = None
    if flags & DirectiveFlag.HAS_ARG:
        args = Node(NodeKind.DIRECTIVE_ARG)
        if flags & DirectiveFlag.ARG_IS_FILE:
            while p.tok().kind in (
                TokenKind.WORD,
                TokenKind.OTHER,
                TokenKind.PUNCT,
                TokenKind.ADORNMENT,
            ):
                args.add(new_leaf(p.tok().text))
                p.idx += 1
        elif flags & DirectiveFlag.ARG_IS_WORD:
            while p.tok().kind is TokenKind.WHITE:
                p.idx += 1
            if p.tok().kind is TokenKind.WORD:
                args.add(new_leaf(p.tok().text))
                p.idx += 1
            else:
                args = None
        else:
            parse_line(p, args)
    options: Node | None = None
    if flags & DirectiveFlag.HAS_OPTIONS and _indent_follows(p) and p.tok(1).text == ":":
        options = blocks.parse_fields(p)
    return Node(NodeKind.DIRECTIVE, children=[args, options])


def parse_directive_body(p: Cursor, content_parser: ContentParser) -> Node | None:
    if not _indent_follows(p):
        return None
    p.push_indent(p.tok().ival)
    content = content_parser(p)
    p.pop_indent()
    return content


def parse_directive(
    p: Cursor,
    flags: DirectiveFlag,
    content_parser: ContentParser | None = None,
    kind: NodeKind = NodeKind.DIRECTIVE,
) -> Node:
    """Parse a directive into ``kind[argument, options, content]``."""
    directive = parse_directive_head(p, flags)
    directive.kind = kind
    if content_parser is None:
        directive.add(None)
    else:
        directive.add(parse_directive_body(p, content_parser))
    return directive


def parse_comment(p: Cursor, col: int) -> None:
    """Skip a comment: the rest of the line and lines indented past `col`."""
    if p.tok().kind is TokenKind.INDENT and p.tok(1).kind is TokenKind.INDENT:
        p.idx += 1
        return
    while True:
        token = p.tok()
        if token.kind is TokenKind.EOF:
            return
        if token.kind is TokenKind.INDENT and token.ival <= col:
            return
        p.idx += 1


def _read_file(p: Cursor, filename: str) -> tuple[str, str] | None:
    """Resolve and read `filename`, reporting ``cannot-open-file`` on failure.

    Returns:
        tuple[str, str] | None: Resolved path and content, or None.
    """
    path = find_relative_file(filename, p.filename, p.shared.find_file)
    if not path:
        p.message(MessageKind.E_CANNOT_OPEN_FILE, filename)
        return None
    try:
        return path, read_source(Path(path), p.shared.max_file_size)
    except (OSError, UnicodeDecodeError) as error:
        logger.debug("Reading %s failed: %s", path, error)
        p.message(MessageKind.E_CANNOT_OPEN_FILE, filename)
        return None


# --------------------------------------------------------------------------
# Named directives


def dir_include(p: Cursor) -> Node | None:
    """Insert another file, parsed or as a literal block.

    ``start-after`` and ``end-before`` select the text between the first
    occurrences of the given strings; a string that is not found does not
    restrict the range.

    Raises:
        IncludeDepthError: If includes nest deeper than the configured limit.
    """
    directive = parse_directive(
        p, DirectiveFlag.HAS_ARG | DirectiveFlag.ARG_IS_FILE | DirectiveFlag.HAS_OPTIONS
    )
    _check_fields(p, directive, INCLUDE_FIELDS)
    loaded = _read_file(p, get_argument(directive).strip())
    if loaded is None:
        return None
    path, content = loaded
    if get_field_value(directive, "literal") is not None:
        return Node(NodeKind.LITERAL_BLOCK, children=[new_leaf(content)])

    depth = p.include_depth + 1
    if depth > p.shared.max_include_depth:
        raise IncludeDepthError(path, p.shared.max_include_depth)

    start = 0
    start_after = get_field_value(directive, "start-after")
    if start_after:
        position = content.find(start_after)
        if position != -1:
            start = position + len(start_after)
    end = len(content)
    end_before = get_field_value(directive, "end-before")
    if end_before:
        position = content.find(end_before, start)
        if position != -1:
            end = position

    logger.debug("Including %s at depth %d", path, depth)
    included = Cursor.from_text(
        content[start:end].strip(), p.shared, filename=path, include_depth=depth
    )
    return blocks.parse_doc(included)


def _check_language(p: Cursor, directive: Node) -> None:
    language = get_argument(directive).strip()
    if not language:
        return
    if not any(equals_ignore_style(language, known) for known in SUPPORTED_LANGUAGES):
        p.message(MessageKind.W_UNSUPPORTED_LANGUAGE, language)


def dir_code_block(p: Cursor, default_language: bool = False) -> Node:
    """Parse ``code`` and ``code-block``.

    The ``file`` option replaces the body with the content of that file.
    The ``code-block`` spelling adds a ``default-language`` field naming
    `DEFAULT_LANGUAGE`.
    """
    directive = parse_directive(
        p,
        DirectiveFlag.HAS_ARG | DirectiveFlag.HAS_OPTIONS,
        blocks.parse_literal_block,
        NodeKind.CODE_BLOCK,
    )
    _check_fields(p, directive, CODE_FIELDS)
    _check_language(p, directive)
    filename = get_field_value(directive, "file")
    if filename:
        loaded = _read_file(p, filename)
        if loaded is not None:
            directive.children[2] = Node(NodeKind.LITERAL_BLOCK, children=[new_leaf(loaded[1])])
    if default_language:
        if directive.children[1] is None:
            directive.children[1] = Node(NodeKind.FIELD_LIST)
        field = Node(
            NodeKind.FIELD,
            children=[
                Node(NodeKind.FIELD_NAME, children=[new_leaf("default-language")]),
                Node(NodeKind.FIELD_BODY, children=[new_leaf(DEFAULT_LANGUAGE)]),
            ],
        )
        directive.children[1].add(field)
    return directive


def dir_container(p: Cursor) -> Node:
    return parse_directive(
        p, DirectiveFlag.HAS_ARG, blocks.parse_section_wrapper, NodeKind.CONTAINER
    )


def dir_image(p: Cursor) -> Node:
    directive = parse_directive(
        p,
        DirectiveFlag.HAS_OPTIONS | DirectiveFlag.HAS_ARG | DirectiveFlag.ARG_IS_FILE,
        kind=NodeKind.IMAGE,
    )
    _check_fields(p, directive, IMAGE_FIELDS)
    return directive


def dir_figure(p: Cursor) -> Node:
    directive = parse_directive(
        p,
        DirectiveFlag.HAS_OPTIONS | DirectiveFlag.HAS_ARG | DirectiveFlag.ARG_IS_FILE,
        blocks.parse_section_wrapper,
        NodeKind.FIGURE,
    )
    _check_fields(p, directive, FIGURE_FIELDS)
    return directive


def dir_title(p: Cursor) -> Node:
    return parse_directive(p, DirectiveFlag.HAS_ARG, kind=NodeKind.TITLE)


def dir_contents(p: Cursor) -> Node:
    return parse_directive(p, DirectiveFlag.HAS_ARG, kind=NodeKind.CONTENTS)


def dir_index(p: Cursor) -> Node:
    return parse_directive(p, DirectiveFlag.NONE, blocks.parse_section_wrapper, NodeKind.INDEX)


def dir_raw(p: Cursor) -> Node | None:
    """Parse ``raw``, whose optional argument names the output format.

    ``html`` and ``latex`` (any case) keep the body verbatim; without an
    argument the body is parsed as markup. Any other format is reported as
    an invalid directive and the block is skipped.
    """
    directive = parse_directive_head(
        p, DirectiveFlag.HAS_OPTIONS | DirectiveFlag.HAS_ARG | DirectiveFlag.ARG_IS_WORD
    )
    _check_fields(p, directive, RAW_FIELDS)
    content_parser: ContentParser = blocks.parse_section_wrapper
    kind = NodeKind.RAW
    if directive.children[0] is not None:
        output_format = get_argument(directive).lower()
        if output_format not in RAW_FORMATS:
            p.message(MessageKind.E_INVALID_DIRECTIVE, get_argument(directive))
            parse_comment(p, p.current_indent)
            return None
        kind = NodeKind.RAW_HTML if output_format == "html" else NodeKind.RAW_LATEX
        content_parser = blocks.parse_literal_block
    directive.kind = kind
    filename = get_field_value(directive, "file")
    if filename:
        loaded = _read_file(p, filename)
        directive.add(None if loaded is None else new_leaf(loaded[1]))
    else:
        directive.add(parse_directive_body(p, content_parser))
    return directive


DirectiveHandler = Callable[[Cursor], Node | None]

# Alphabetical.
DIRECTIVES: dict[str, DirectiveHandler] = {
    "code": dir_code_block,
    "code-block": lambda p: dir_code_block(p, default_language=True),
    "container": dir_container,
    "contents": dir_contents,
    "figure": dir_figure,
    "image": dir_image,
    "include": dir_include,
    "index": dir_index,
    "raw": dir_raw,
    "title": dir_title,
}


def _lookup_directive(p: Cursor, name: str) -> DirectiveHandler | None:
    if name == "raw" and not p.has_option(ParseOption.SUPPORT_RAW_DIRECTIVE):
        return None
    return DIRECTIVES.get(name)


# --------------------------------------------------------------------------
# Explicit markup dispatch


def _parse_hyperlink_target(p: Cursor) -> None:
    p.idx += 2
    name = get_reference_name(p, ":")
    if p.tok().kind is TokenKind.WHITE:
        p.idx += 1
    register_reference(p, node_to_refname(name), until_eol(p))


def _parse_substitution_definition(p: Cursor) -> None:
    p.idx += 2
    name = get_reference_name(p, "|")
    if p.tok().kind is TokenKind.WHITE:
        p.idx += 1
    kind = p.tok().text
    value: Node | None = None
    if equals_ignore_style(kind, "replace"):
        p.idx += 1
        expect(p, "::")
        if p.tok().kind is TokenKind.WHITE:
            p.idx += 1
        value = until_eol(p)
    elif equals_ignore_style(kind, "image"):
        p.idx += 1
        expect(p, "::")
        if p.tok().kind is TokenKind.WHITE:
            p.idx += 1
        value = dir_image(p)
    else:
        p.message(MessageKind.E_INVALID_DIRECTIVE, kind)
    if value is not None:
        p.shared.set_substitution(add_nodes(name), value)


def _parse_footnote(p: Cursor) -> None:
    p.idx += 2
    name = get_reference_name(p, "]")
    if p.tok().kind is TokenKind.WHITE:
        p.idx += 1
    register_reference(p, node_to_refname(name), until_eol(p))


def parse_dot_dot(p: Cursor) -> Node | None:
    """Parse explicit markup starting at ``..``.

    Returns:
        Node | None: The directive node, or None for targets, definitions,
            comments and rejected directives.
    """
    col = p.tok().col
    p.idx += 1
    name = get_directive(p)
    if name:
        handler = _lookup_directive(p, name)
        if handler is None:
            p.message(MessageKind.E_INVALID_DIRECTIVE, name)
            parse_comment(p, col)
            return None
        logger.debug("Directive %s in %s", name, p.filename or "<string>")
        p.push_indent(col)
        node = handler(p)
        p.pop_indent()
        return node
    if tokens_match(p, p.idx, _WHITE, symbol_is("_")):
        _parse_hyperlink_target(p)
    elif tokens_match(p, p.idx, _WHITE, symbol_is("|")):
        _parse_substitution_definition(p)
    elif tokens_match(p, p.idx, _WHITE, symbol_is("[")):
        _parse_footnote(p)
    else:
        parse_comment(p, col)
    return None
