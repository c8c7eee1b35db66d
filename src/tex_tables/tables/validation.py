"""Read-only structural checks over a TableAST.

validate_table() runs every check and concatenates their findings.  Checks
are independent, never mutate the AST, and never raise for a table the
parser could represent; findings are advisory and never block generation.
"""

import logging
import re

from tex_tables import config
from tex_tables.tables.columns import find_unknown_column_tokens
from tex_tables.tables.patterns import SECTION_RULE_KINDS
from tex_tables.tables.schema import TableAST, ValidationFinding

logger = logging.getLogger(__name__)

# Dialects that need a package of the same name
_DIALECT_PACKAGES = ("tabularx", "longtable", "tabu")

_UNESCAPED_RES = {char: re.compile(r"(?<!\\)" + re.escape(char)) for char in config.RESERVED_CHARS}


def check_column_count(ast: TableAST) -> list[ValidationFinding]:
    """Error for each row whose occupied width differs from the declared column count.

    Skipped entirely when the column count is unknown (unparseable spec).
    """
    expected = ast.column_count
    if expected == 0:
        return []
    findings: list[ValidationFinding] = []
    for r, row in enumerate(ast.rows):
        if row.width != expected:
            findings.append(
                ValidationFinding(
                    severity="error",
                    code="column-count-mismatch",
                    message=f"Row has {row.width} columns but table expects {expected}",
                    row=r,
                )
            )
    return findings


def check_unescaped_chars(ast: TableAST) -> list[ValidationFinding]:
    """Warning for every occurrence of a reserved character not preceded by a backslash."""
    findings: list[ValidationFinding] = []
    for r, row in enumerate(ast.rows):
        for start, cell in row.positions():
            if cell.is_spanned:
                continue
            for char, pattern in _UNESCAPED_RES.items():
                for _ in pattern.finditer(cell.content):
                    findings.append(
                        ValidationFinding(
                            severity="warning",
                            code="unescaped-char",
                            message=f"Unescaped special character '{char}' found. Use '\\{char}' instead.",
                            row=r,
                            column=start,
                        )
                    )
    return findings


def check_span_overlaps(ast: TableAST) -> list[ValidationFinding]:
    """Error for every grid position covered by more than one cell.

    Simulates an occupancy grid: each non-placeholder cell marks its full
    row-span by col-span rectangle.  Positions past the grid width or below
    the last row are ignored (the column-count check covers excess width).
    """
    width = ast.grid_width
    n_rows = len(ast.rows)
    occupancy = [[0] * width for _ in range(n_rows)]
    findings: list[ValidationFinding] = []

    for r, row in enumerate(ast.rows):
        for start, cell in row.positions():
            if cell.is_spanned:
                continue
            for target_row in range(r, min(r + cell.row_span, n_rows)):
                for target_col in range(start, min(start + cell.col_span, width)):
                    occupancy[target_row][target_col] += 1
                    if occupancy[target_row][target_col] == 2:
                        findings.append(
                            ValidationFinding(
                                severity="error",
                                code="cell-overlap",
                                message="Cell overlap detected from multirow/multicolumn",
                                row=target_row,
                                column=target_col,
                            )
                        )
    return findings


def required_packages(ast: TableAST) -> list[str]:
    """Return the packages the table's features need, in a stable order."""
    packages: list[str] = []
    if ast.dialect in _DIALECT_PACKAGES:
        packages.append(ast.dialect)

    has_row_span = any(cell.row_span > 1 and not cell.is_spanned for row in ast.rows for cell in row.cells)
    if has_row_span:
        packages.append("multirow")

    rules = [rule for row in ast.rows for rule in row.rules_above + row.rules_below]
    if any(rule.kind in SECTION_RULE_KINDS for rule in rules):
        packages.append("booktabs")

    if any(column.kind in ("m", "b") for column in ast.columns):
        packages.append("array")
    return packages


def check_required_packages(ast: TableAST) -> list[ValidationFinding]:
    """One info finding per package the table needs."""
    return [
        ValidationFinding(severity="info", code="required-package", message=f"Table requires \\usepackage{{{package}}}")
        for package in required_packages(ast)
    ]


def check_empty_cells(ast: TableAST) -> list[ValidationFinding]:
    """Info for every empty non-placeholder cell (often intentional)."""
    findings: list[ValidationFinding] = []
    for r, row in enumerate(ast.rows):
        for start, cell in row.positions():
            if not cell.is_spanned and not cell.content.strip():
                findings.append(ValidationFinding(severity="info", code="empty-cell", message="Empty cell", row=r, column=start))
    return findings


def check_table_size(ast: TableAST) -> list[ValidationFinding]:
    """Warnings for tables likely too wide for the page or too long for a single-page dialect."""
    findings: list[ValidationFinding] = []
    if ast.column_count > config.MAX_COLUMNS:
        findings.append(
            ValidationFinding(
                severity="warning",
                code="table-too-wide",
                message=f"Table has {ast.column_count} columns which may be too wide for the page",
            )
        )
    if len(ast.rows) > config.MAX_ROWS and ast.dialect != "longtable":
        findings.append(
            ValidationFinding(
                severity="warning",
                code="table-too-long",
                message=f"Table has {len(ast.rows)} rows. Consider using 'longtable' environment for multi-page tables",
            )
        )
    return findings


def check_column_spec(ast: TableAST) -> list[ValidationFinding]:
    """Warn about column-spec tokens the parser skipped, or a spec that yielded no columns."""
    if ast.column_spec_source.strip() and ast.column_count == 0:
        return [
            ValidationFinding(
                severity="warning",
                code="unparseable-column-spec",
                message=f"Column spec '{ast.column_spec_source}' could not be parsed; column-count checks are disabled",
            )
        ]
    return [
        ValidationFinding(
            severity="warning",
            code="unknown-column-token",
            message=f"Unknown column-spec token '{token}' was ignored",
        )
        for token in dict.fromkeys(find_unknown_column_tokens(ast.column_spec_source))
    ]


def validate_table(ast: TableAST) -> list[ValidationFinding]:
    """Run every structural check and return all findings.  Never mutates *ast*."""
    findings: list[ValidationFinding] = []
    findings.extend(check_column_count(ast))
    findings.extend(check_unescaped_chars(ast))
    findings.extend(check_span_overlaps(ast))
    findings.extend(check_required_packages(ast))
    findings.extend(check_empty_cells(ast))
    findings.extend(check_table_size(ast))
    findings.extend(check_column_spec(ast))
    logger.debug("Validated %s table: %d findings", ast.dialect, len(findings))
    return findings
