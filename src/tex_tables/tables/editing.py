"""Structural edit operations on a TableAST.

Every operation takes an AST plus 0-indexed logical grid coordinates and
returns a new AST; the input is never modified, so a rejected edit leaves
the caller's table intact.  Out-of-range coordinates raise IndexError;
requests that cannot be carried out on the table's current structure raise
ValueError.

Rule placement follows the parser's convention: only the first row carries
``rules_above``, every later rule is stored in ``rules_below`` of the row
above it.
"""

import logging

from tex_tables.tables.patterns import ALIGNMENT_KINDS
from tex_tables.tables.schema import Cell, ColumnDescriptor, Row, RowRule, TableAST

logger = logging.getLogger(__name__)


# ─── Helpers ─────────────────────────────────────────────────────────────────


def _check_row(ast: TableAST, index: int, allow_end: bool = False) -> None:
    limit = len(ast.rows) + (1 if allow_end else 0)
    if not 0 <= index < limit:
        raise IndexError(f"Row index {index} out of range for table with {len(ast.rows)} rows")


def _check_column(ast: TableAST, index: int, allow_end: bool = False) -> None:
    limit = ast.grid_width + (1 if allow_end else 0)
    if not 0 <= index < limit:
        raise IndexError(f"Column index {index} out of range for table with {ast.grid_width} columns")


def _covering_index(row: Row, column: int) -> int | None:
    """Return the index in ``row.cells`` of the cell covering logical *column*."""
    for i, (start, cell) in enumerate(row.positions()):
        if start <= column < start + cell.col_span:
            return i
    return None


def _replace_range(row: Row, start: int, span: int, replacement: list[Cell]) -> list[Cell]:
    """Replace the cells tiling columns ``[start, start + span)`` and return the removed cells.

    Raises ValueError when the range does not line up with cell boundaries
    or the row is too short to cover it.
    """
    positions = row.positions()
    indices = [i for i, (pos, cell) in enumerate(positions) if pos < start + span and pos + cell.col_span > start]
    if not indices:
        raise ValueError(f"Row does not cover columns {start}-{start + span - 1}")
    first, last = indices[0], indices[-1]
    range_start = positions[first][0]
    range_end = positions[last][0] + positions[last][1].col_span
    if range_start != start or range_end != start + span:
        raise ValueError(f"Columns {start}-{start + span - 1} cut through a column-spanning cell")
    removed = row.cells[first : last + 1]
    row.cells[first : last + 1] = replacement
    return removed


def _active_row_spans(rows: list[Row], boundary: int) -> list[tuple[int, Cell]]:
    """Return (start column, origin cell) for every row span crossing *boundary*."""
    active: list[tuple[int, Cell]] = []
    for r, row in enumerate(rows[:boundary]):
        for start, cell in row.positions():
            if not cell.is_spanned and cell.row_span > 1 and r + cell.row_span > boundary:
                active.append((start, cell))
    return active


def _partial_rules(ast: TableAST) -> list[tuple[list[RowRule], RowRule]]:
    """Return (containing list, rule) for every rule with a column range."""
    found: list[tuple[list[RowRule], RowRule]] = []
    for row in ast.rows:
        for rules in (row.rules_above, row.rules_below):
            found.extend((rules, rule) for rule in rules if rule.columns is not None)
    return found


def _require_columns(ast: TableAST) -> None:
    if not ast.columns:
        raise ValueError("Column spec is unknown; column edits need a parsed column spec")


# ─── Rows ────────────────────────────────────────────────────────────────────


def insert_row(ast: TableAST, index: int, contents: list[str] | None = None) -> TableAST:
    """Insert a row before row *index* (``len(rows)`` appends).

    *contents* gives text by logical column.  Positions covered by a row span
    crossing the insertion point become placeholders and extend that span;
    giving text for them raises ValueError.  Closing rules stay at the table
    edges: inserting at the top takes over the first row's ``rules_above``,
    appending takes over the last row's ``rules_below``.
    """
    _check_row(ast, index, allow_end=True)
    table = ast.model_copy(deep=True)
    width = table.grid_width
    contents = list(contents or [])
    if len(contents) > width:
        raise ValueError(f"Got {len(contents)} cell contents for a {width}-column table")

    covered: dict[int, int] = {}
    for start, cell in _active_row_spans(table.rows, index):
        cell.row_span += 1
        covered[start] = cell.col_span

    cells: list[Cell] = []
    column = 0
    while column < width:
        if column in covered:
            span = covered[column]
            if any(text.strip() for text in contents[column : column + span]):
                raise ValueError(f"Column {column} of the new row is covered by a row span")
            cells.append(Cell(col_span=span, is_spanned=True))
            column += span
        else:
            cells.append(Cell(content=contents[column] if column < len(contents) else ""))
            column += 1

    new_row = Row(cells=cells)
    if index == 0 and table.rows:
        new_row.rules_above, table.rows[0].rules_above = table.rows[0].rules_above, []
    elif index == len(table.rows) and table.rows:
        new_row.rules_below, table.rows[-1].rules_below = table.rows[-1].rules_below, []
    table.rows.insert(index, new_row)
    logger.debug("Inserted row at %d (%d spans extended)", index, len(covered))
    return table


def delete_row(ast: TableAST, index: int) -> TableAST:
    """Delete row *index*.

    Spans crossing the row shrink by one; spans starting in it move their
    content to the row below.  The table's top rules move to the new first
    row and its bottom rules to the new last row; other rules attached to the
    deleted row are dropped.  Multi-page markers are kept on the row above
    (or in the preamble).
    """
    _check_row(ast, index)
    table = ast.model_copy(deep=True)
    rows = table.rows

    for _, cell in _active_row_spans(rows, index):
        cell.row_span -= 1

    doomed = rows[index]
    if index + 1 < len(rows):
        below = rows[index + 1]
        for start, cell in doomed.positions():
            if cell.is_spanned or cell.row_span == 1:
                continue
            moved = cell.model_copy(update={"row_span": cell.row_span - 1})
            _replace_range(below, start, cell.col_span, [moved])

    if index == 0 and len(rows) > 1:
        rows[1].rules_above = doomed.rules_above + rows[1].rules_above
    if index == len(rows) - 1 and index > 0 and doomed.rules_below:
        rows[index - 1].rules_below = doomed.rules_below
    if doomed.markers_below:
        if index > 0:
            rows[index - 1].markers_below.extend(doomed.markers_below)
        else:
            table.preamble_lines.extend(doomed.markers_below)

    del rows[index]
    logger.debug("Deleted row %d", index)
    return table


# ─── Columns ─────────────────────────────────────────────────────────────────


def insert_column(ast: TableAST, index: int, kind: str = "c", width: str | None = None) -> TableAST:
    """Insert a column before logical column *index* (``column_count`` appends).

    The new column copies the right border of its left neighbour (or, at the
    front, takes over the table's left border).  Cells straddling the
    insertion point widen; every other row gets an empty cell.  Partial-rule
    ranges shift to keep covering the same columns.
    """
    _require_columns(ast)
    _check_column(ast, index, allow_end=True)
    table = ast.model_copy(deep=True)

    descriptor = ColumnDescriptor(kind=kind, width=width)
    if index > 0:
        descriptor.right_border = table.columns[index - 1].right_border
    else:
        first = table.columns[0]
        descriptor.right_border = first.right_border
        descriptor.left_border, first.left_border = first.left_border, False
    table.columns.insert(index, descriptor)

    for row in table.rows:
        straddling = None
        insert_at = len(row.cells)
        for i, (start, cell) in enumerate(row.positions()):
            if start < index < start + cell.col_span:
                straddling = cell
                break
            if start >= index:
                insert_at = i
                break
        if straddling is not None:
            straddling.col_span += 1
        else:
            row.cells.insert(insert_at, Cell())

    for _, rule in _partial_rules(table):
        first_col, last_col = rule.columns
        rule.columns = (first_col + (1 if first_col > index else 0), last_col + (1 if last_col > index else 0))

    logger.debug("Inserted %s column at %d", kind, index)
    return table


def delete_column(ast: TableAST, index: int) -> TableAST:
    """Delete logical column *index*.

    Spanning cells narrow by one; single-column cells are removed.  Partial
    rules lose the column, and rules covering only that column are dropped.
    Deleting the last remaining column raises ValueError.
    """
    _require_columns(ast)
    _check_column(ast, index)
    if ast.column_count == 1:
        raise ValueError("Cannot delete the only column")
    table = ast.model_copy(deep=True)

    removed = table.columns.pop(index)
    if index == 0 and removed.left_border:
        table.columns[0].left_border = True

    for row in table.rows:
        i = _covering_index(row, index)
        if i is None:
            continue
        if row.cells[i].col_span > 1:
            row.cells[i].col_span -= 1
        else:
            del row.cells[i]

    deleted = index + 1  # rules are 1-indexed
    for rules, rule in _partial_rules(table):
        first_col, last_col = rule.columns
        if first_col == last_col == deleted:
            rules.remove(rule)
        elif first_col <= deleted <= last_col:
            rule.columns = (first_col, last_col - 1)
        elif first_col > deleted:
            rule.columns = (first_col - 1, last_col - 1)

    logger.debug("Deleted column %d", index)
    return table


def set_column_alignment(ast: TableAST, index: int, alignment: str) -> TableAST:
    """Change column *index* to plain l/c/r alignment (any width is dropped)."""
    if alignment not in ALIGNMENT_KINDS:
        raise ValueError(f"Unknown alignment '{alignment}'; expected one of {ALIGNMENT_KINDS}")
    _require_columns(ast)
    _check_column(ast, index)
    table = ast.model_copy(deep=True)
    column = table.columns[index]
    column.kind = alignment
    column.width = None
    return table


# ─── Merge & Split ───────────────────────────────────────────────────────────


def merge_cells(ast: TableAST, top: int, left: int, bottom: int, right: int) -> TableAST:
    """Merge the inclusive rectangle ``(top, left)``..``(bottom, right)`` into one cell.

    Non-empty contents are joined with spaces in reading order.  The merged
    cell carries no explicit column spec, so its borders are inferred from
    the columns it covers when generated.  Raises ValueError when an existing
    span crosses the rectangle's edge.
    """
    _check_row(ast, top)
    _check_row(ast, bottom)
    _check_column(ast, left)
    _check_column(ast, right)
    if top > bottom or left > right:
        raise ValueError(f"Empty merge range ({top}, {left})..({bottom}, {right})")
    if top == bottom and left == right:
        raise ValueError("Merge range covers a single cell")
    table = ast.model_copy(deep=True)

    contents: list[str] = []
    origin_alignment = None
    for r, row in enumerate(table.rows):
        for start, cell in row.positions():
            if cell.is_spanned:
                continue
            last_row = r + cell.row_span - 1
            last_col = start + cell.col_span - 1
            intersects = not (last_row < top or r > bottom or last_col < left or start > right)
            inside = top <= r and last_row <= bottom and left <= start and last_col <= right
            if intersects and not inside:
                raise ValueError(f"Cell at ({r}, {start}) crosses the edge of the merge range")
            if inside and cell.content.strip():
                contents.append(cell.content.strip())
            if r == top and start == left:
                origin_alignment = cell.alignment_override

    span = right - left + 1
    merged = Cell(
        content=" ".join(contents),
        col_span=span,
        row_span=bottom - top + 1,
        alignment_override=origin_alignment,
    )
    _replace_range(table.rows[top], left, span, [merged])
    for row in table.rows[top + 1 : bottom + 1]:
        _replace_range(row, left, span, [Cell(col_span=span, is_spanned=True)])

    logger.debug("Merged (%d, %d)..(%d, %d)", top, left, bottom, right)
    return table


def split_cell(ast: TableAST, row: int, column: int) -> TableAST:
    """Split the merged cell starting at ``(row, column)`` back into single cells.

    The content stays in the top-left cell.  Raises ValueError when no cell
    starts there, the cell is not merged, or a covered position holds
    content of its own.
    """
    _check_row(ast, row)
    _check_column(ast, column)
    table = ast.model_copy(deep=True)

    target = None
    for start, cell in table.rows[row].positions():
        if start == column and not cell.is_spanned:
            target = cell
            break
    if target is None:
        raise ValueError(f"No cell starts at ({row}, {column})")
    if target.col_span == 1 and target.row_span == 1:
        raise ValueError(f"Cell at ({row}, {column}) is not merged")

    span = target.col_span
    first = Cell(
        content=target.content,
        alignment_override=target.alignment_override if span == 1 else None,
        vertical_anchor=None,
    )
    _replace_range(table.rows[row], column, span, [first] + [Cell() for _ in range(span - 1)])

    for below in table.rows[row + 1 : row + target.row_span]:
        removed = _replace_range(below, column, span, [Cell() for _ in range(span)])
        if any(not cell.is_spanned for cell in removed):
            raise ValueError(f"A position covered by the cell at ({row}, {column}) holds its own content")

    logger.debug("Split cell at (%d, %d)", row, column)
    return table
