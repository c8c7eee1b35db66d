"""Parse a LaTeX tabular block (optionally float-wrapped) into a TableAST.

Parsing is permissive: rows with too few cells are padded, rows with too
many are kept as-is, and unrecognized cell or rule shapes pass through as
plain content.  Strictness lives in validation.py.  The only failure mode is
returning None for text that is not a recognizable tabular block.
"""

import logging

from tex_tables.tables.classifiers import classify_rule, is_multipage_marker, parse_cell, peel_leading_commands, scan_body_line, split_cells
from tex_tables.tables.columns import parse_column_spec, read_braced, skip_whitespace
from tex_tables.tables.detection import block_end, extract_float_wrapper
from tex_tables.tables.patterns import BEGIN_TABULAR_RE, BRACKET_ARG_RE, WIDTH_DIALECTS
from tex_tables.tables.schema import Cell, Row, RowRule, TableAST, TableOptions

logger = logging.getLogger(__name__)


# ─── Row Segmentation ────────────────────────────────────────────────────────


def _parse_cells(row_text: str, column_count: int) -> list[Cell]:
    """Split and classify one row's cells, padding to *column_count* occupied columns.

    A column count of 0 means "unknown" and disables padding.
    """
    cells = [parse_cell(part) for part in split_cells(row_text)]
    occupied = sum(cell.col_span for cell in cells)

    if column_count and occupied < column_count:
        cells.extend(Cell() for _ in range(column_count - occupied))
    elif column_count and occupied > column_count:
        logger.debug("Row occupies %d columns but the column spec declares %d; keeping the extra cells", occupied, column_count)
    return cells


def _mark_spanned_cells(rows: list[Row]) -> None:
    """Mark blank cells covered by a row span from an earlier row as placeholders.

    Non-blank cells in covered positions are left alone so the validator can
    report the overlap.
    """
    for r, row in enumerate(rows):
        for start, cell in row.positions():
            if cell.is_spanned or cell.row_span == 1:
                continue
            covered = range(start, start + cell.col_span)
            for below in rows[r + 1 : r + cell.row_span]:
                for below_start, below_cell in below.positions():
                    if below_start in covered and not below_cell.content.strip():
                        below_cell.is_spanned = True


def segment_rows(body: str, column_count: int) -> tuple[list[Row], list[str]]:
    """Split a tabular body into rows, attaching rules and passthrough lines.

    Returns (rows, preamble_lines).  Rows end at a ``\\\\`` outside every
    brace group, so several rows may share a line and a ``\\\\`` inside a
    cell argument never splits a row.  Rule commands and multi-page markers
    are peeled off the front of each row segment.  A rule before the first
    row is stored in that row's ``rules_above``; any later rule is stored in
    ``rules_below`` of the most recently completed row, so a rule between two
    rows is recorded exactly once.  Markers and source comments before the
    first row go to the preamble; later ones are attached to the preceding
    row's ``markers_below``.  A trailing row without a terminator is still
    closed.
    """
    rows: list[Row] = []
    preamble_lines: list[str] = []
    buffer: list[str] = []
    rules_above: list[RowRule] = []

    def close_row() -> None:
        rows.append(Row(cells=_parse_cells(" ".join(buffer), column_count), rules_above=list(rules_above)))
        buffer.clear()
        rules_above.clear()

    def passthrough(line: str) -> None:
        if rows:
            rows[-1].markers_below.append(line)
        else:
            preamble_lines.append(line)

    def take_text(text: str) -> None:
        if any(part.strip() for part in buffer):
            buffer.append(text.strip())
            return
        commands, rest = peel_leading_commands(text)
        for command in commands:
            if is_multipage_marker(command):
                passthrough(command)
                continue
            rule = classify_rule(command)
            if rule is None:
                logger.debug("Keeping rule with an invalid column range verbatim: %s", command)
                passthrough(command)
            elif rows:
                rows[-1].rules_below.append(rule)
            else:
                rules_above.append(rule)
        if rest:
            buffer.append(rest)

    depth = 0
    for raw_line in body.split("\n"):
        events, depth = scan_body_line(raw_line, depth)
        for kind, fragment in events:
            if kind == "comment":
                passthrough(fragment)
            elif kind == "end":
                close_row()
            else:
                take_text(fragment)

    # Tolerate a missing terminator on the last row
    if any(part.strip() for part in buffer):
        close_row()

    _mark_spanned_cells(rows)
    return rows, preamble_lines


# ─── Header Parsing ──────────────────────────────────────────────────────────


def _parse_header(text: str, pos: int, dialect: str) -> tuple[TableOptions | None, str, int] | None:
    """Read the header arguments following ``\\begin{dialect}``.

    Width dialects take ``{width}`` first; every dialect then accepts an
    optional ``[position]`` and a required ``{column spec}``.  Returns
    (options, column_spec, body_start), or None if the column spec is missing.
    """
    total_width = None
    position = None

    if dialect in WIDTH_DIALECTS:
        width = read_braced(text, skip_whitespace(text, pos))
        if width is None:
            return None
        total_width = width[0]
        pos = width[1]

    bracket = BRACKET_ARG_RE.match(text[pos:])
    if bracket:
        position = bracket.group(1)
        pos += bracket.end()

    spec = read_braced(text, skip_whitespace(text, pos))
    if spec is None:
        return None

    options = None
    if total_width is not None or position is not None:
        options = TableOptions(total_width=total_width, vertical_position=position)
    return options, spec[0], spec[1]


# ─── Main Entry Point ────────────────────────────────────────────────────────


def parse_table(latex: str) -> TableAST | None:
    """Parse a tabular block, or a float wrapping one, into a TableAST.

    Returns None when the text holds no recognizable tabular block; this is
    "not a table", never an error.
    """
    text = latex.strip()

    # ── 1. Peel off an enclosing float wrapper ───────────────────────────
    wrapper = extract_float_wrapper(text)
    tabular_text = text
    if wrapper is not None:
        if wrapper["tabular"] is None:
            logger.debug("Float wrapper contains no tabular block")
            return None
        tabular_text = wrapper["tabular"]

    # ── 2. Detect the dialect and its block boundaries ───────────────────
    begin = BEGIN_TABULAR_RE.search(tabular_text)
    if not begin:
        return None
    dialect = begin.group(1)
    end = block_end(tabular_text, dialect, begin.start())
    if end is None:
        logger.debug("No matching \\end{%s}", dialect)
        return None

    # ── 3. Header arguments and column spec ──────────────────────────────
    header = _parse_header(tabular_text, begin.end(), dialect)
    if header is None:
        logger.debug("Missing column spec for \\begin{%s}", dialect)
        return None
    options, spec, body_start = header
    columns = parse_column_spec(spec)

    # ── 4. Body rows ─────────────────────────────────────────────────────
    body = tabular_text[body_start : end - len(f"\\end{{{dialect}}}")]
    rows, preamble_lines = segment_rows(body, len(columns))
    logger.debug("Parsed %s block: %d columns, %d rows", dialect, len(columns), len(rows))

    return TableAST(
        dialect=dialect,
        columns=columns,
        rows=rows,
        options=options,
        preamble_lines=preamble_lines,
        wrapped_in_float=wrapper is not None,
        float_environment=wrapper["environment"] if wrapper else "table",
        float_placement=wrapper["placement"] if wrapper else None,
        caption=wrapper["caption"] if wrapper else None,
        short_caption=wrapper["short_caption"] if wrapper else None,
        caption_position=wrapper["caption_position"] if wrapper else None,
        label=wrapper["label"] if wrapper else None,
        float_lines_before=wrapper["lines_before"] if wrapper else [],
        float_lines_after=wrapper["lines_after"] if wrapper else [],
        column_spec_source=spec,
        original_text=latex,
    )
