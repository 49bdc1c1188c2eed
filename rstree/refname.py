"""Leaf text extraction and reference name normalisation."""

from __future__ import annotations

from collections.abc import Iterator

from .constants import REFNAME_SPECIALS
from .models import Node, NodeKind, iter_nodes


def add_nodes(node: Node | None) -> str:
    """Concatenate the text of every leaf below `node`, depth first.

    Examples:
        add_nodes(Node(NodeKind.INNER, children=[new_leaf("a"), new_leaf("b")]))  # "ab"
    """
    if node is None:
        return ""
    if node.kind is NodeKind.LEAF:
        return node.text
    return "".join(add_nodes(child) for child in node.children)


def _leaf_texts(node: Node | None) -> Iterator[str]:
    for current in iter_nodes(node):
        if current.kind is NodeKind.LEAF:
            yield current.text


def node_to_refname(node: Node | None) -> str:
    """Normalise the text of `node` into a reference name.

    Letters are lowercased, digits kept, and selected punctuation spelled out
    as words. Runs of any other characters become a single hyphen between
    words and are dropped at the edges. A name starting with a digit is
    prefixed with ``Z``.

    Args:
        node: Node whose leaf text is normalised.

    Returns:
        str: The reference name; empty when the text has no word characters.

    Examples:
        node_to_refname(new_leaf("Hello World"))  # "hello-world"
        node_to_refname(new_leaf("  foo_bar "))  # "foo-bar"
        node_to_refname(new_leaf("1st"))  # "Z1st"
        node_to_refname(new_leaf("a+b"))  # "aplusb"
        node_to_refname(new_leaf("foo-bar"))  # "foo-bar"
    """
    result: list[str] = []
    pending_separator = False

    def emit(text: str) -> None:
        nonlocal pending_separator
        if pending_separator:
            result.append("-")
            pending_separator = False
        result.append(text)

    for text in _leaf_texts(node):
        for char in text:
            if "0" <= char <= "9":
                if not result:
                    result.append("Z")
                emit(char)
            elif "a" <= char <= "z" or char >= "\x80":
                emit(char)
            elif "A" <= char <= "Z":
                emit(char.lower())
            elif char in REFNAME_SPECIALS:
                emit(REFNAME_SPECIALS[char])
            elif result:
                pending_separator = True
    return "".join(result)


def normalize_style(name: str) -> str:
    """Fold `name` for style-insensitive comparison.

    Examples:
        normalize_style("Default_Language")  # "defaultlanguage"
    """
    return name.replace("_", "").casefold()


def equals_ignore_style(left: str, right: str) -> bool:
    """Compare two names ignoring case and underscores.

    Examples:
        equals_ignore_style("start_after", "StartAfter")  # True
    """
    return normalize_style(left) == normalize_style(right)
