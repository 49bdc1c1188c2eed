from __future__ import annotations

import string

from hypothesis import given
from hypothesis import strategies as st
from rstree import parse_rst
from rstree.lexer import tokenize
from rstree.messages import MessageCollector
from rstree.models import NodeKind, TokenKind, format_tree, iter_nodes, new_leaf
from rstree.refname import add_nodes, node_to_refname

UNDERLINE_CHARS = "=-~^+#*"
MARKUP_ALPHABET = string.ascii_letters + string.digits + " \n*`-=:._|"

markup_text = st.one_of(st.text(max_size=200), st.text(alphabet=MARKUP_ALPHABET, max_size=200))
words = st.text(alphabet=string.ascii_lowercase, min_size=1, max_size=8)
blocks = st.one_of(
    words.map(lambda word: f"*{word}* "),
    words.map(lambda word: f"**{word}** "),
    words.map(lambda word: f"``{word}`` "),
    words.map(lambda word: f"`{word}` "),
    words.map(lambda word: f"{word} "),
    words.map(lambda word: f"\n\n- {word}\n\n"),
    st.sampled_from(["=", "-"]).map(lambda char: f"\n\nTitle\n{char * 5}\n\n"),
)


def _parse(text: str):
    collector = MessageCollector()
    result = parse_rst(text, msg_handler=collector, find_file=lambda name: "")
    return result, collector


@given(markup_text, st.booleans())
def test_tokenize_always_ends_with_single_eof(text: str, skip_pounds: bool):
    tokens, _ = tokenize(text, skip_pounds=skip_pounds)

    assert tokens[-1].kind is TokenKind.EOF
    assert [token.kind for token in tokens].count(TokenKind.EOF) == 1


@given(st.text(alphabet=string.ascii_letters + " \n", max_size=200))
def test_tokens_start_at_increasing_positions(text: str):
    tokens, _ = tokenize(text)
    positions = [(token.line, token.col) for token in tokens if token.kind is not TokenKind.EOF]

    assert positions == sorted(positions)


@given(markup_text)
def test_parse_rst_is_deterministic(text: str):
    first, first_messages = _parse(text)
    second, second_messages = _parse(text)

    assert format_tree(first.document) == format_tree(second.document)
    assert first.has_toc == second.has_toc
    assert first_messages.messages == second_messages.messages


@given(st.text(alphabet=string.ascii_letters + string.digits + " \n", max_size=200))
def test_plain_text_round_trip_is_stable(text: str):
    flattened = add_nodes(_parse(text)[0].document)

    assert add_nodes(_parse(flattened)[0].document) == flattened


@given(st.lists(blocks, max_size=20))
def test_markup_round_trip_is_stable(pieces: list[str]):
    result, collector = _parse("".join(pieces))
    flattened = add_nodes(result.document)

    assert not collector.has_errors
    assert add_nodes(_parse(flattened)[0].document) == flattened


@given(st.lists(st.sampled_from(UNDERLINE_CHARS), min_size=2, max_size=12))
def test_heading_levels_follow_first_appearance(chars: list[str]):
    text = "".join(f"Title\n{char * 5}\n\n" for char in chars)
    order: list[str] = []
    for char in chars:
        if char not in order:
            order.append(char)

    result, collector = _parse(text)
    headlines = [node for node in iter_nodes(result.document) if node.kind is NodeKind.HEADLINE]

    assert not collector.messages
    assert [node.level for node in headlines] == [order.index(char) + 1 for char in chars]


@given(st.text())
def test_refname_is_lowercase_and_trimmed(text: str):
    name = node_to_refname(new_leaf(text))
    body = name[1:] if name.startswith("Z") else name

    assert not any(char in string.ascii_uppercase for char in body)
    assert not name.startswith("-")
    assert not name.endswith("-")
    assert "--" not in name


@given(st.text(alphabet=string.ascii_letters + " -", max_size=40))
def test_refname_is_idempotent(text: str):
    name = node_to_refname(new_leaf(text))

    assert node_to_refname(new_leaf(name)) == name
