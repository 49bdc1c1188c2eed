from __future__ import annotations

import textwrap

from rstree import parse_rst
from rstree.messages import MessageKind
from rstree.models import Node, NodeKind, Token, TokenKind, iter_nodes, new_leaf
from rstree.refname import add_nodes
from rstree.resolver import resolve
from rstree.state import Cursor, SharedState


def _cursor() -> Cursor:
    return Cursor([Token(TokenKind.EOF)], SharedState())


def _resolved(text: str, **kwargs) -> Node:
    return parse_rst(textwrap.dedent(text).lstrip(), **kwargs).document


def test_replace_substitution():
    document = _resolved(
        """
        .. |X| replace:: Y

        |X|
        """
    )

    assert add_nodes(document) == "Y"


def test_substitution_lookup_ignores_case_and_underscores():
    document = _resolved(
        """
        .. |My_Name| replace:: Joe

        |myname|
        """
    )

    assert add_nodes(document) == "Joe"


def test_last_substitution_definition_wins():
    document = _resolved(
        """
        .. |x| replace:: one
        .. |x| replace:: two

        |x|
        """
    )

    assert add_nodes(document) == "two"


def test_substitution_falls_back_to_environment(monkeypatch):
    monkeypatch.setenv("RSTREE_TEST_VAR", "from-env")

    document = _resolved("|RSTREE_TEST_VAR|\n")

    assert document.kind is NodeKind.LEAF
    assert document.text == "from-env"


def test_unknown_substitution_warns_and_keeps_node(monkeypatch, collector):
    monkeypatch.delenv("missing", raising=False)

    document = _resolved("|missing|\n", msg_handler=collector)

    assert [message.kind for message in collector.messages] == [
        MessageKind.W_UNKNOWN_SUBSTITUTION
    ]
    assert collector.messages[0].argument == "missing"
    assert document.kind is NodeKind.SUBSTITUTION_REF
    assert add_nodes(document) == "missing"


def test_unknown_substitution_does_not_raise(monkeypatch, capsys):
    monkeypatch.delenv("missing", raising=False)

    _resolved("|missing|\n")

    assert "Warning: unknown substitution 'missing'" in capsys.readouterr().err


def test_reference_to_named_target():
    document = _resolved(
        """
        .. _foo: https://example.com

        `foo`_
        """
    )

    assert document.kind is NodeKind.HYPERLINK
    text, target = document.children
    assert text.kind is NodeKind.INNER
    assert add_nodes(text) == "foo"
    assert add_nodes(target) == "https://example.com"


def test_reference_names_are_normalised():
    document = _resolved(
        """
        .. _Read The Docs: https://readthedocs.org

        `read the  docs`_
        """
    )

    assert document.kind is NodeKind.HYPERLINK


def test_resolve_rewrites_reference_in_place():
    p = _cursor()
    target = new_leaf("https://example.com")
    p.shared.set_reference("foo", target)
    ref = Node(NodeKind.REF, children=[new_leaf("Foo")])

    result = resolve(p, ref)

    assert result.kind is NodeKind.HYPERLINK
    assert result.children[0] is ref
    assert ref.kind is NodeKind.INNER
    assert result.children[1] is not target
    assert add_nodes(result.children[1]) == "https://example.com"


def test_resolve_descends_into_children():
    p = _cursor()
    p.shared.set_substitution("a", new_leaf("b"))
    tree = Node(
        NodeKind.PARAGRAPH,
        children=[None, Node(NodeKind.SUBSTITUTION_REF, children=[new_leaf("a")])],
    )

    resolve(p, tree)

    assert tree.children[0] is None
    assert tree.children[1].text == "b"
    assert tree.children[1] is not p.shared.find_substitution("a")


def test_resolve_marks_contents():
    p = _cursor()

    resolve(p, Node(NodeKind.INNER, children=[Node(NodeKind.CONTENTS)]))

    assert p.has_toc is True
    assert resolve(p, None) is None


def test_repeated_substitution_yields_distinct_nodes():
    document = _resolved(
        """
        .. |X| replace:: Y

        |X| and |X|
        """
    )
    nodes = list(iter_nodes(document))

    assert add_nodes(document) == "Y and Y"
    assert len(nodes) == len({id(node) for node in nodes})


def test_repeated_reference_yields_distinct_targets():
    document = _resolved(
        """
        .. _t: https://example.com

        `t`_ and `t`_
        """
    )
    hyperlinks = [node for node in iter_nodes(document) if node.kind is NodeKind.HYPERLINK]
    nodes = list(iter_nodes(document))

    assert len(hyperlinks) == 2
    assert hyperlinks[0].children[1] is not hyperlinks[1].children[1]
    assert len(nodes) == len({id(node) for node in nodes})


def test_resolved_copies_do_not_share_edits():
    document = _resolved(
        """
        .. |X| replace:: Y

        |X| and |X|
        """
    )
    first = next(node for node in iter_nodes(document) if node.text == "Y")
    first.text = "changed"

    assert add_nodes(document) == "changed and Y"
