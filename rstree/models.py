"""Data models for rstree."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, auto


class TokenKind(Enum):
    """Classes of tokens produced by the lexer.

    Attributes:
        EOF: End of input; every token stream ends with exactly one.
        INDENT: A line break. Carries the indentation of the next non-blank line.
        WHITE: A run of spaces or tabs.
        WORD: A run of ASCII letters, digits, or characters at or above U+0080.
        ADORNMENT: A run of more than three identical punctuation characters.
        PUNCT: A short punctuation run or a single bracket.
        OTHER: Any character not covered above.
    """

    EOF = auto()
    INDENT = auto()
    WHITE = auto()
    WORD = auto()
    ADORNMENT = auto()
    PUNCT = auto()
    OTHER = auto()


@dataclass
class Token:
    """A classified slice of the input.

    Attributes:
        kind: Token class.
        text: Source text of the token. Indent tokens hold a newline followed
            by ``ival`` spaces.
        ival: Indentation width, only meaningful for ``INDENT`` tokens.
        line: Zero-based line the token starts on.
        col: Column of the first character, relative to the base indentation.
    """

    kind: TokenKind
    text: str = ""
    ival: int = 0
    line: int = 0
    col: int = 0


class NodeKind(Enum):
    """Variants of document tree nodes."""

    LEAF = "leaf"
    INNER = "inner"
    PARAGRAPH = "paragraph"
    HEADLINE = "headline"
    OVERLINE = "overline"
    TRANSITION = "transition"
    BLOCK_QUOTE = "block-quote"
    LITERAL_BLOCK = "literal-block"
    LINE_BLOCK = "line-block"
    LINE_BLOCK_ITEM = "line-block-item"
    BULLET_LIST = "bullet-list"
    BULLET_ITEM = "bullet-item"
    ENUM_LIST = "enumerated-list"
    ENUM_ITEM = "enumerated-item"
    DEF_LIST = "definition-list"
    DEF_ITEM = "definition-item"
    DEF_NAME = "definition-name"
    DEF_BODY = "definition-body"
    FIELD_LIST = "field-list"
    FIELD = "field"
    FIELD_NAME = "field-name"
    FIELD_BODY = "field-body"
    OPTION_LIST = "option-list"
    OPTION_LIST_ITEM = "option-list-item"
    OPTION_GROUP = "option-group"
    DESCRIPTION = "description"
    TABLE = "table"
    GRID_TABLE = "grid-table"
    TABLE_ROW = "table-row"
    TABLE_HEADER_CELL = "table-header-cell"
    TABLE_DATA_CELL = "table-data-cell"
    DIRECTIVE = "directive"
    DIRECTIVE_ARG = "directive-argument"
    CODE_BLOCK = "code-block"
    IMAGE = "image"
    FIGURE = "figure"
    TITLE = "title"
    CONTENTS = "contents"
    CONTAINER = "container"
    INDEX = "index"
    RAW = "raw"
    RAW_HTML = "raw-html"
    RAW_LATEX = "raw-latex"
    STANDALONE_HYPERLINK = "standalone-hyperlink"
    HYPERLINK = "hyperlink"
    REF = "reference"
    INTERPRETED_TEXT = "interpreted-text"
    INLINE_LITERAL = "inline-literal"
    EMPHASIS = "emphasis"
    STRONG_EMPHASIS = "strong-emphasis"
    TRIPLE_EMPHASIS = "triple-emphasis"
    SUB = "subscript"
    SUP = "superscript"
    IDX = "index-entry"
    GENERAL_ROLE = "general-role"
    SUBSTITUTION_REF = "substitution-reference"
    SMILEY = "smiley"


@dataclass(eq=False)
class Node:
    """A node of the document tree.

    Directive-shaped nodes (directive, code block, image, figure, title,
    contents, container, index, raw) keep three positional children:
    argument, options and content. Any of them may be None.

    Attributes:
        kind: Node variant.
        text: Payload of leaf and smiley nodes.
        children: Owned child nodes, in document order.
        level: Heading depth; 0 when unset.
    """

    kind: NodeKind
    text: str = ""
    children: list[Node | None] = field(default_factory=list)
    level: int = 0

    def add(self, child: Node | None) -> None:
        self.children.append(child)

    def add_if_not_none(self, child: Node | None) -> None:
        if child is not None:
            self.children.append(child)

    def __len__(self) -> int:
        return len(self.children)


def new_leaf(text: str) -> Node:
    """Create a leaf node holding `text`."""
    return Node(NodeKind.LEAF, text)


def iter_nodes(node: Node | None) -> Iterator[Node]:
    """Yield `node` and its descendants depth first, skipping None children."""
    if node is None:
        return
    yield node
    for child in node.children:
        yield from iter_nodes(child)


def format_tree(node: Node | None, indent: str = "  ") -> str:
    """Render a tree as an indented outline for inspection.

    Args:
        node: Root of the tree; None renders as ``<none>``.
        indent: String repeated once per nesting level.

    Returns:
        str: One line per node, each ending with a newline.

    Examples:
        format_tree(Node(NodeKind.HEADLINE, children=[new_leaf("Title")], level=1))
        # "headline level=1\\n  leaf 'Title'\\n"
    """
    lines: list[str] = []

    def visit(current: Node | None, depth: int) -> None:
        prefix = indent * depth
        if current is None:
            lines.append(f"{prefix}<none>")
            return
        label = current.kind.value
        if current.level:
            label += f" level={current.level}"
        if current.text or current.kind in (NodeKind.LEAF, NodeKind.SMILEY):
            label += f" {current.text!r}"
        lines.append(prefix + label)
        for child in current.children:
            visit(child, depth + 1)

    visit(node, 0)
    return "".join(f"{line}\n" for line in lines)


class ParseOption(Enum):
    """Independent flags that gate parser features.

    Attributes:
        SKIP_POUNDS: Skip up to two leading ``#`` characters on every line, for
            markup embedded in ``#`` comments.
        SUPPORT_SMILIES: Recognise ASCII emoticons such as ``:-)``.
        SUPPORT_RAW_DIRECTIVE: Allow the ``raw`` directive.
        SUPPORT_MARKDOWN: Accept markdown headlines, code fences and links.
    """

    SKIP_POUNDS = auto()
    SUPPORT_SMILIES = auto()
    SUPPORT_RAW_DIRECTIVE = auto()
    SUPPORT_MARKDOWN = auto()


@dataclass
class ParseResult:
    """Result of parsing a document.

    Attributes:
        document: Root of the resolved tree.
        has_toc: True when a ``contents`` directive was found.
    """

    document: Node
    has_toc: bool = False
