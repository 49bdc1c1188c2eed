from __future__ import annotations

import textwrap

from rstree import parse_rst
from rstree.messages import MessageKind
from rstree.models import Node, NodeKind
from rstree.refname import add_nodes


def _table(text: str, **kwargs) -> Node:
    return parse_rst(textwrap.dedent(text).lstrip(), **kwargs).document


def _cells(row: Node) -> list[tuple[NodeKind, str]]:
    return [(cell.kind, add_nodes(cell)) for cell in row.children]


def test_table_with_header_row():
    table = _table(
        """
        =====  =====
        A      B
        =====  =====
        1      2
        =====  =====
        """
    )

    assert table.kind is NodeKind.TABLE
    header, data = table.children
    assert _cells(header) == [
        (NodeKind.TABLE_HEADER_CELL, "A"),
        (NodeKind.TABLE_HEADER_CELL, "B"),
    ]
    assert _cells(data) == [
        (NodeKind.TABLE_DATA_CELL, "1"),
        (NodeKind.TABLE_DATA_CELL, "2"),
    ]


def test_table_without_header():
    table = _table(
        """
        =====  =====
        1      2
        3      4
        =====  =====
        """
    )

    assert [row.kind for row in table.children] == [NodeKind.TABLE_ROW, NodeKind.TABLE_ROW]
    assert _cells(table.children[1]) == [
        (NodeKind.TABLE_DATA_CELL, "3"),
        (NodeKind.TABLE_DATA_CELL, "4"),
    ]


def test_last_column_is_unbounded():
    table = _table(
        """
        ====  ======
        a     text that runs past the frame
        ====  ======
        """
    )

    (row,) = table.children
    assert add_nodes(row.children[1]) == "text that runs past the frame"


def test_continuation_lines_join_the_row():
    table = _table(
        """
        =====  =====
        A      B
               more
        =====  =====
        """
    )

    (row,) = table.children
    assert _cells(row) == [
        (NodeKind.TABLE_DATA_CELL, "A"),
        (NodeKind.TABLE_DATA_CELL, "B more"),
    ]


def test_cells_hold_inline_markup():
    table = _table(
        """
        =====  =======
        *a*    ``b``
        =====  =======
        """
    )

    first, second = table.children[0].children
    assert first.children[0].kind is NodeKind.EMPHASIS
    assert second.children[0].kind is NodeKind.INLINE_LITERAL


def test_cells_share_definitions_with_the_document():
    table = _table(
        """
        .. |name| replace:: value

        ======  ======
        |name|  x
        ======  ======
        """
    )

    (row,) = table.children
    assert add_nodes(row.children[0]) == "value"


def test_messages_in_cells_are_offset_to_the_table(collector):
    _table(
        """
        Intro

        =====  =====
        x      *oops
        =====  =====
        """,
        msg_handler=collector,
    )

    (message,) = collector.messages
    assert message.kind is MessageKind.E_EXPECTED
    assert message.line == 4
    assert message.col == 7
