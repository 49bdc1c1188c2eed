"""Simple tables.

A simple table is framed by adornment lines such as ``=====  =====``. The
runs of the first frame line fix the column boundaries; the last column is
unbounded. Each cell's text is parsed as a document of its own that shares
the enclosing parse's state.
"""

from __future__ import annotations

from . import blocks
from .constants import UNBOUNDED_COLUMN
from .models import Node, NodeKind, TokenKind
from .state import Cursor


def _token_end(p: Cursor) -> int:
    token = p.tok()
    return token.col + len(token.text) - 1


def _read_columns(p: Cursor) -> tuple[list[int], list[int]]:
    """Read a frame line.

    Returns:
        tuple[list[int], list[int]]: First and last column of every run; the
            last column of the final run is `UNBOUNDED_COLUMN`.
    """
    starts: list[int] = []
    ends: list[int] = []
    while True:
        starts.append(p.tok().col)
        ends.append(_token_end(p))
        p.idx += 1
        if p.tok().kind is not TokenKind.WHITE:
            break
        p.idx += 1
        if p.tok().kind is not TokenKind.ADORNMENT:
            break
    if p.tok().kind is TokenKind.INDENT:
        p.idx += 1
    ends[-1] = UNBOUNDED_COLUMN
    return starts, ends


def _read_row(p: Cursor, ends: list[int]) -> list[str]:
    """Collect the text of one row, which may span several lines.

    Continuation lines are those whose first token lies past the first
    column; they join each cell of the other columns with a line break.
    """
    row = [""] * len(ends)
    while True:
        column = 0
        while p.tok().kind not in (TokenKind.INDENT, TokenKind.EOF):
            if column == len(ends) - 1 or _token_end(p) <= ends[column]:
                row[column] += p.tok().text
                p.idx += 1
            else:
                if p.tok().kind is TokenKind.WHITE:
                    p.idx += 1
                column += 1
        if p.tok().kind is TokenKind.INDENT:
            p.idx += 1
        if _token_end(p) <= ends[0] or p.tok().kind in (TokenKind.EOF, TokenKind.ADORNMENT):
            return row
        for index in range(1, len(row)):
            row[index] += "\n"


def parse_simple_table(p: Cursor) -> Node:
    """Parse a simple table starting at its top frame line.

    Rows above the last inner frame line are header rows: their cells are
    relabelled ``TABLE_HEADER_CELL`` when that frame line is reached. The
    table ends at a frame line followed by a blank line or the end of input.
    """
    table = Node(NodeKind.TABLE)
    starts: list[int] = []
    ends: list[int] = []
    previous_row: Node | None = None
    while True:
        if p.tok().kind is TokenKind.ADORNMENT:
            last = blocks.token_after_newline(p)
            if p.at(last).kind in (TokenKind.EOF, TokenKind.INDENT):
                p.idx = last
                break
            starts, ends = _read_columns(p)
            if previous_row is not None:
                for cell in previous_row.children:
                    cell.kind = NodeKind.TABLE_HEADER_CELL
        if p.tok().kind is TokenKind.EOF:
            break
        line = p.tok().line
        row = Node(NodeKind.TABLE_ROW)
        for start, text in zip(starts, _read_row(p, ends)):
            cell_cursor = Cursor.from_text(
                text,
                p.shared,
                filename=p.filename,
                line=p.line + line,
                col=p.col + start,
                include_depth=p.include_depth,
            )
            row.add(Node(NodeKind.TABLE_DATA_CELL, children=[blocks.parse_doc(cell_cursor)]))
        table.add(row)
        previous_row = row
    return table
