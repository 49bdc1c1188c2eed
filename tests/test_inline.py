from __future__ import annotations

import pytest

from rstree import parse_rst
from rstree.exceptions import RstParseError
from rstree.inline import apply_role, is_enumerator, parse_smiley
from rstree.messages import MessageCollector, MessageKind
from rstree.models import Node, NodeKind, ParseOption, Token, TokenKind, iter_nodes
from rstree.refname import add_nodes
from rstree.state import Cursor, SharedState


def _parse(text: str, *options: ParseOption, collector: MessageCollector | None = None) -> Node:
    return parse_rst(text, options=options, msg_handler=collector).document


def _find(node: Node, kind: NodeKind) -> list[Node]:
    return [current for current in iter_nodes(node) if current.kind is kind]


@pytest.mark.parametrize(
    ("text", "kind"),
    [
        ("*hi*", NodeKind.EMPHASIS),
        ("**hi**", NodeKind.STRONG_EMPHASIS),
        ("***hi***", NodeKind.TRIPLE_EMPHASIS),
        ("``hi``", NodeKind.INLINE_LITERAL),
    ],
)
def test_emphasis_and_literals(text: str, kind: NodeKind):
    document = _parse(text)

    assert document.kind is kind
    assert add_nodes(document) == "hi"


def test_inline_literal_keeps_markup_characters():
    document = _parse("``a*b\\c``")

    assert document.kind is NodeKind.INLINE_LITERAL
    assert add_nodes(document) == "a*b\\c"


@pytest.mark.parametrize("text", ["2 * 3 * 4", "(*)", "a*b*"])
def test_asterisks_that_do_not_start_markup(text: str):
    document = _parse(text)

    assert _find(document, NodeKind.EMPHASIS) == []
    assert add_nodes(document) == text


def test_backslash_escapes_markup():
    document = _parse("a \\*b\\*")

    assert _find(document, NodeKind.EMPHASIS) == []
    assert add_nodes(document) == "a *b*"


def test_unterminated_markup_reports_expected(collector):
    _parse("*oops\n\nnext", collector=collector)

    message = collector.messages[0]
    assert message.kind is MessageKind.E_EXPECTED
    assert message.argument == "*"
    assert (message.line, message.col) == (1, 0)


def test_unterminated_markup_raises_with_default_handler():
    with pytest.raises(RstParseError, match="'\\*' expected"):
        _parse("*oops\n\nnext")


def test_unknown_reference_stays_a_reference(collector):
    document = _parse("`x`_", collector=collector)

    assert document.kind is NodeKind.REF
    assert add_nodes(document) == "x"
    assert collector.messages == []


def test_embedded_hyperlink():
    document = _parse("`Python <https://python.org>`_")

    assert document.kind is NodeKind.HYPERLINK
    text, target = document.children
    assert add_nodes(text) == "Python"
    assert add_nodes(target) == "https://python.org"


def test_embedded_hyperlink_registers_its_name():
    document = _parse("`Python <https://python.org>`_\n\n`Python`_\n")

    links = _find(document, NodeKind.HYPERLINK)
    assert len(links) == 2
    assert add_nodes(links[1].children[0]) == "Python"
    assert add_nodes(links[1].children[1]) == "https://python.org"


def test_embedded_target_without_text_is_standalone():
    document = _parse("`<https://example.org>`_")

    assert document.kind is NodeKind.STANDALONE_HYPERLINK
    assert add_nodes(document) == "https://example.org"


def test_standalone_url_drops_trailing_punctuation():
    document = _parse("Visit https://example.com/a.")

    (link,) = _find(document, NodeKind.STANDALONE_HYPERLINK)
    assert add_nodes(link) == "https://example.com/a"
    assert document.children[-1].text == "."


def test_word_with_reference_suffix():
    document = _parse("see foo_ now")

    (ref,) = _find(document, NodeKind.REF)
    assert add_nodes(ref) == "foo"


@pytest.mark.parametrize(
    ("text", "kind"),
    [
        ("a :strong:`x`", NodeKind.STRONG_EMPHASIS),
        ("a :emphasis:`x`", NodeKind.EMPHASIS),
        ("a :literal:`x`", NodeKind.INLINE_LITERAL),
        ("a :sup:`x`", NodeKind.SUP),
        ("a :subscript:`x`", NodeKind.SUB),
        ("a `x`:sub:", NodeKind.SUB),
        ("a `x`:idx:", NodeKind.IDX),
    ],
)
def test_known_roles(text: str, kind: NodeKind):
    document = _parse(text)

    (node,) = _find(document, kind)
    assert add_nodes(node) == "x"


def test_unknown_role_becomes_general_role():
    document = _parse("a :foo:`x`")

    (node,) = _find(document, NodeKind.GENERAL_ROLE)
    content, role = node.children
    assert content.kind is NodeKind.INNER
    assert add_nodes(content) == "x"
    assert role.text == "foo"


def test_apply_role():
    assert apply_role(Node(NodeKind.INTERPRETED_TEXT), "superscript").kind is NodeKind.SUP
    assert apply_role(Node(NodeKind.INTERPRETED_TEXT), "custom").kind is NodeKind.GENERAL_ROLE


def test_smilies_require_option():
    plain = _parse("hi :-)")
    assert _find(plain, NodeKind.SMILEY) == []
    assert add_nodes(plain) == "hi :-)"

    document = _parse("hi :-)", ParseOption.SUPPORT_SMILIES)
    (smiley,) = _find(document, NodeKind.SMILEY)
    assert smiley.text == "icon_e_smile"


def test_parse_smiley_prefers_longest_match():
    p = Cursor.from_text(":-P and more", SharedState())

    smiley = parse_smiley(p)

    assert smiley is not None
    assert smiley.text == "icon_razz"
    assert p.tok().kind is TokenKind.WHITE


def test_parse_smiley_leaves_cursor_when_nothing_matches():
    p = Cursor.from_text(":-]", SharedState())

    assert parse_smiley(p) is None
    assert p.idx == 0


def test_markdown_link():
    document = _parse("see [text](http://x.org)", ParseOption.SUPPORT_MARKDOWN)

    (link,) = _find(document, NodeKind.HYPERLINK)
    assert [child.text for child in link.children] == ["text", "http://x.org"]


def test_markdown_link_needs_option():
    document = _parse("see [text](http://x.org)")

    assert _find(document, NodeKind.HYPERLINK) == []


def test_markdown_code_fence():
    document = _parse("```python\nprint(1)\n```\n", ParseOption.SUPPORT_MARKDOWN)

    (block,) = _find(document, NodeKind.CODE_BLOCK)
    argument, options, literal = block.children
    assert add_nodes(argument) == "python"
    assert options is None
    assert literal.kind is NodeKind.LITERAL_BLOCK
    assert "print(1)" in add_nodes(literal)


def test_unterminated_markdown_code_fence(collector):
    _parse("```\ncode\n", ParseOption.SUPPORT_MARKDOWN, collector=collector)

    assert [message.kind for message in collector.messages] == [MessageKind.E_EXPECTED]
    assert collector.messages[0].argument == "```"


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        (Token(TokenKind.WORD, "12"), True),
        (Token(TokenKind.WORD, "a"), True),
        (Token(TokenKind.WORD, "Z"), True),
        (Token(TokenKind.PUNCT, "#"), True),
        (Token(TokenKind.WORD, "ab"), False),
        (Token(TokenKind.WORD, "é"), False),
        (Token(TokenKind.PUNCT, "*"), False),
    ],
)
def test_is_enumerator(token: Token, expected: bool):
    assert is_enumerator(token) is expected


def test_footnote_reference_resolves_to_footnote():
    document = _parse("See [1]_.\n\n.. [1] Note text\n")
    hyperlinks = _find(document, NodeKind.HYPERLINK)

    assert len(hyperlinks) == 1
    assert add_nodes(hyperlinks[0].children[0]) == "1"
    assert add_nodes(hyperlinks[0].children[1]) == "Note text"


def test_citation_reference_resolves_to_citation():
    document = _parse(".. [CIT2002] A citation\n\nAs shown in [CIT2002]_\n")
    hyperlinks = _find(document, NodeKind.HYPERLINK)

    assert len(hyperlinks) == 1
    assert add_nodes(hyperlinks[0].children[1]) == "A citation"


def test_undefined_footnote_reference_stays_a_reference():
    document = _parse("[2]_ here\n")
    refs = _find(document, NodeKind.REF)

    assert len(refs) == 1
    assert add_nodes(refs[0]) == "2"


@pytest.mark.parametrize("text", ["[a b]_ x", "[1] x", "x[1]_"])
def test_bracket_text_without_reference_form_is_plain(text: str):
    document = _parse(text)

    assert not _find(document, NodeKind.REF)
    assert add_nodes(document) == text
