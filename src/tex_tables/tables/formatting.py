"""LaTeX rendering of a TableAST, plus text and number helpers for cell editing.

generate_table() is the inverse of parser.parse_table().  Output depends
only on the AST, so regenerating an unchanged AST is byte-identical.  Two
pieces of geometry happen here rather than in the parser:

  - Border inference for spans: a ``\\multicolumn`` without an explicit
    spec takes its left border from the first spanned column and its right
    border from the last, so merged cells keep the borders of the columns
    they replace.
  - Smart rule splitting: an ``\\hline`` that would cut through a
    ``\\multirow`` cell is emitted as ``\\cline`` segments over the
    unblocked column runs instead.
"""

import logging
import re

from tex_tables import config
from tex_tables.tables.patterns import ANCHOR_TAGS, WIDTH_DIALECTS
from tex_tables.tables.schema import Cell, ColumnDescriptor, Row, RowRule, TableAST

logger = logging.getLogger(__name__)


# ─── Column Spec ─────────────────────────────────────────────────────────────


def generate_column_spec(columns: list[ColumnDescriptor]) -> str:
    """Render column descriptors back into a column-format string such as ``|l|c|r|``."""
    spec = ""
    for i, column in enumerate(columns):
        if i == 0 and column.left_border:
            spec += "|"
        spec += f"{column.kind}{{{column.width}}}" if column.width is not None else column.kind
        if column.right_border:
            spec += "|"
    return spec


def infer_span_spec(cell: Cell, start: int, columns: list[ColumnDescriptor]) -> str:
    """Return the ``\\multicolumn`` spec for a cell starting at logical column *start*.

    An explicit override recorded at parse time wins.  Otherwise the column spec is
    ``[left border] alignment [right border]``, with the borders taken from
    the first and last spanned columns and the alignment from the cell or,
    failing that, the first spanned column (width-bearing kinds give "c").
    """
    if cell.column_spec_override is not None:
        return cell.column_spec_override

    first = columns[start] if start < len(columns) else None
    last_index = start + cell.col_span - 1
    last = columns[last_index] if last_index < len(columns) else None

    alignment = cell.alignment_override or (first.base_alignment if first else "c")
    left = "|" if first is not None and first.left_border else ""
    right = "|" if last is not None and last.right_border else ""
    return f"{left}{alignment}{right}"


# ─── Cells & Rows ────────────────────────────────────────────────────────────


def _multirow(cell: Cell) -> str:
    """Render the ``\\multirow`` wrapper; width is always regenerated as ``*``."""
    anchor = f"[{ANCHOR_TAGS[cell.vertical_anchor]}]" if cell.vertical_anchor else ""
    return f"\\multirow{anchor}{{{cell.row_span}}}{{*}}{{{cell.content}}}"


def generate_cell(cell: Cell, start: int, columns: list[ColumnDescriptor]) -> str:
    """Render one cell.  Spanned placeholders render as an empty slot."""
    if cell.is_spanned:
        if cell.col_span > 1 or cell.column_spec_override is not None:
            return f"\\multicolumn{{{cell.col_span}}}{{{infer_span_spec(cell, start, columns)}}}{{}}"
        return ""

    inner = _multirow(cell) if cell.row_span > 1 else cell.content
    needs_multicolumn = cell.col_span > 1 or cell.column_spec_override is not None or cell.alignment_override is not None
    if needs_multicolumn:
        return f"\\multicolumn{{{cell.col_span}}}{{{infer_span_spec(cell, start, columns)}}}{{{inner}}}"
    return inner


def generate_row(row: Row, columns: list[ColumnDescriptor]) -> str:
    """Render a row's cells joined by ``&`` and closed with ``\\\\``."""
    text = ""
    for i, (start, cell) in enumerate(row.positions()):
        rendered = generate_cell(cell, start, columns)
        if i == 0:
            text = rendered
        else:
            text += " &" + (f" {rendered}" if rendered else "")
    return f"{text} \\\\".lstrip()


# ─── Rules ───────────────────────────────────────────────────────────────────


def blocked_columns(rows: list[Row], boundary: int) -> set[int]:
    """Return logical columns covered by a row span crossing *boundary*.

    *boundary* is the rule position: 0 is above the first row, ``i`` is
    between rows ``i - 1`` and ``i``.  A span starting in row ``r`` blocks
    its columns when ``r + row_span > boundary``.  Placeholders advance the
    column index but never block on their own.
    """
    blocked: set[int] = set()
    for r, row in enumerate(rows[:boundary]):
        for start, cell in row.positions():
            if cell.is_spanned or cell.row_span == 1:
                continue
            if r + cell.row_span > boundary:
                blocked.update(range(start, start + cell.col_span))
    return blocked


def split_full_rule(rows: list[Row], boundary: int, total_columns: int) -> list[str]:
    """Render an ``\\hline`` at *boundary*, split around blocked columns.

    With nothing blocked the rule is returned unchanged.  Otherwise one
    ``\\cline`` per maximal unblocked run is returned (1-indexed, inclusive);
    blocked runs emit nothing.
    """
    blocked = blocked_columns(rows, boundary)
    if not blocked:
        return ["\\hline"]

    segments: list[tuple[int, int]] = []
    segment_start = None
    for col in range(total_columns):
        if col in blocked:
            if segment_start is not None:
                segments.append((segment_start + 1, col))
                segment_start = None
        elif segment_start is None:
            segment_start = col
    if segment_start is not None:
        segments.append((segment_start + 1, total_columns))

    logger.debug("Split \\hline at boundary %d into %s (blocked: %s)", boundary, segments, sorted(blocked))
    return [f"\\cline{{{first}-{last}}}" for first, last in segments]


def render_rule(rule: RowRule) -> str:
    """Render a rule exactly as recorded."""
    if rule.kind == "cline":
        return f"\\cline{{{rule.columns[0]}-{rule.columns[1]}}}"
    if rule.kind == "cmidrule":
        return f"\\cmidrule{rule.width or ''}{rule.trim or ''}{{{rule.columns[0]}-{rule.columns[1]}}}"
    return f"\\{rule.kind}{rule.width or ''}"


def _generate_rules(rules: list[RowRule], boundary: int, ast: TableAST) -> list[str]:
    """Render the rules at one boundary; only full rules are subject to splitting."""
    lines: list[str] = []
    for rule in rules:
        if rule.kind == "hline":
            lines.extend(split_full_rule(ast.rows, boundary, ast.grid_width))
        else:
            lines.append(render_rule(rule))
    return lines


# ─── Environment ─────────────────────────────────────────────────────────────


def _begin_line(ast: TableAST) -> str:
    """Render ``\\begin{dialect}`` with its header arguments."""
    line = f"\\begin{{{ast.dialect}}}"
    options = ast.options
    if ast.dialect in WIDTH_DIALECTS:
        line += f"{{{options.total_width if options and options.total_width else config.DEFAULT_TOTAL_WIDTH}}}"
    if options and options.vertical_position:
        line += f"[{options.vertical_position}]"
    return line + f"{{{generate_column_spec(ast.columns)}}}"


def _caption_lines(ast: TableAST, indent: str) -> list[str]:
    lines: list[str] = []
    if ast.caption is not None:
        short = f"[{ast.short_caption}]" if ast.short_caption is not None else ""
        lines.append(f"{indent}\\caption{short}{{{ast.caption}}}")
    if ast.label is not None:
        lines.append(f"{indent}\\label{{{ast.label}}}")
    return lines


def generate_table(ast: TableAST) -> str:
    """Serialize a TableAST to LaTeX markup.

    The tabular block is indented one level inside a float wrapper; rows,
    rules, and multi-page markers are indented one level inside the tabular.
    Caption and label go before the tabular when ``caption_position`` is
    "top" and after it otherwise.  Other float-body lines kept by the parser
    sit between the caption block and the tabular.
    """
    indent = config.INDENT
    lines: list[str] = []
    outer = ""

    caption_on_top = ast.caption_position == "top" and ast.caption is not None
    if ast.wrapped_in_float:
        placement = ast.float_placement if ast.float_placement is not None else config.DEFAULT_FLOAT_PLACEMENT
        lines.append(f"\\begin{{{ast.float_environment}}}[{placement}]" if placement else f"\\begin{{{ast.float_environment}}}")
        lines.append(f"{indent}\\centering")
        if caption_on_top:
            lines.extend(_caption_lines(ast, indent))
        lines.extend(indent + line for line in ast.float_lines_before)
        outer = indent

    inner = outer + indent
    lines.append(outer + _begin_line(ast))
    lines.extend(inner + marker for marker in ast.preamble_lines)

    for i, row in enumerate(ast.rows):
        lines.extend(inner + rule for rule in _generate_rules(row.rules_above, i, ast))
        lines.append(inner + generate_row(row, ast.columns))
        lines.extend(inner + rule for rule in _generate_rules(row.rules_below, i + 1, ast))
        lines.extend(inner + marker for marker in row.markers_below)

    lines.append(f"{outer}\\end{{{ast.dialect}}}")

    if ast.wrapped_in_float:
        lines.extend(outer + line for line in ast.float_lines_after)
        if not caption_on_top:
            lines.extend(_caption_lines(ast, indent))
        lines.append(f"\\end{{{ast.float_environment}}}")

    return "\n".join(lines)


# ─── Number Alignment ────────────────────────────────────────────────────────

_DECIMAL_RE = re.compile(r"^(-?\d+)\.(\d+)$")


def align_numbers_by_decimal(cells: list[Cell]) -> list[Cell]:
    """Pad the decimal numbers in a column of cells so their points line up.

    Integer parts are left-padded with spaces and fractions right-padded with
    zeros to the widest seen.  Cells that are not plain decimals (including
    integers without a point) are returned unchanged.  Input cells are never
    modified.
    """
    matches = [_DECIMAL_RE.match(cell.content.strip()) for cell in cells]
    numbers = [m for m in matches if m]
    if not numbers:
        return list(cells)
    max_before = max(len(m.group(1)) for m in numbers)
    max_after = max(len(m.group(2)) for m in numbers)

    aligned: list[Cell] = []
    for cell, match in zip(cells, matches):
        if match is None:
            aligned.append(cell)
            continue
        content = f"{match.group(1).rjust(max_before)}.{match.group(2).ljust(max_after, '0')}"
        aligned.append(cell.model_copy(update={"content": content}))
    return aligned


# ─── Text Helpers ────────────────────────────────────────────────────────────

# Order matters: braces are escaped before the replacements that introduce "{}"
_ESCAPES = {
    "%": "\\%",
    "_": "\\_",
    "&": "\\&",
    "#": "\\#",
    "$": "\\$",
    "{": "\\{",
    "}": "\\}",
    "~": "\\textasciitilde{}",
    "^": "\\textasciicircum{}",
}


def escape_special_chars(text: str) -> str:
    """Escape LaTeX special characters that are not already escaped."""
    result = text
    for char, escaped in _ESCAPES.items():
        result = re.sub(r"(?<!\\)" + re.escape(char), lambda _match, esc=escaped: esc, result)
    return result


def unescape_special_chars(text: str) -> str:
    """Reverse escape_special_chars() for display in an editing surface."""
    result = text
    for char, escaped in reversed(list(_ESCAPES.items())):
        result = result.replace(escaped, char)
    return result


def pretty_format(latex: str) -> str:
    """Re-indent markup by ``\\begin``/``\\end`` nesting, dropping existing indentation."""
    formatted: list[str] = []
    level = 0
    for line in latex.split("\n"):
        stripped = line.strip()
        if stripped.startswith("\\end{"):
            level = max(0, level - 1)
        formatted.append(config.INDENT * level + stripped if stripped else "")
        if stripped.startswith("\\begin{"):
            level += 1
    return "\n".join(formatted)
