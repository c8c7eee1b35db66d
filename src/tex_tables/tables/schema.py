"""Pydantic models for the parsed table AST and validator findings.

The parser builds a TableAST from raw markup, the edit operations copy and
rewrite it, the validator reads it, and the generator turns it back into
markup.  Field-level constraints (span counts, rule ranges) are enforced
here; cross-row structure (column counts, overlaps) is left to the
validator, since parsing is deliberately permissive.
"""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

ColumnKind = Literal["l", "c", "r", "X", "p", "m", "b"]
Alignment = Literal["l", "c", "r"]
VerticalAnchor = Literal["top", "middle", "bottom"]
RuleKind = Literal["hline", "cline", "toprule", "midrule", "bottomrule", "cmidrule"]
Dialect = Literal["tabular", "tabular*", "tabularx", "longtable", "array", "tabu"]
Severity = Literal["error", "warning", "info"]


class ColumnDescriptor(BaseModel):
    """One logical column: alignment or width kind plus its border flags."""

    kind: ColumnKind
    width: str | None = None
    left_border: bool = False
    right_border: bool = False

    @model_validator(mode="after")
    def validate_width(self) -> "ColumnDescriptor":
        """Width-bearing kinds (p, m, b) must carry a width argument."""
        if self.kind in ("p", "m", "b") and self.width is None:
            raise ValueError(f"Column kind '{self.kind}' requires a width")
        return self

    @property
    def base_alignment(self) -> Alignment:
        """Alignment used when a span starting here has no explicit one."""
        return self.kind if self.kind in ("l", "c", "r") else "c"


class Cell(BaseModel):
    """A single cell, or a placeholder for a grid position covered by a span."""

    content: str = ""
    col_span: int = Field(default=1, ge=1)
    row_span: int = Field(default=1, ge=1)
    alignment_override: Alignment | None = None
    vertical_anchor: VerticalAnchor | None = None
    column_spec_override: str | None = None
    is_spanned: bool = False


class RowRule(BaseModel):
    """A horizontal rule attached above or below a row."""

    kind: RuleKind
    columns: tuple[int, int] | None = None
    trim: str | None = None
    # booktabs thickness argument, e.g. "[1.5pt]"
    width: str | None = None

    @model_validator(mode="after")
    def validate_columns(self) -> "RowRule":
        """Partial rules need a 1-indexed inclusive range; full-width rules must not have one."""
        if self.kind in ("cline", "cmidrule"):
            if self.columns is None:
                raise ValueError(f"Rule '{self.kind}' requires a column range")
            start, end = self.columns
            if start < 1 or end < start:
                raise ValueError(f"Invalid column range {start}-{end} for '{self.kind}'")
        elif self.columns is not None:
            raise ValueError(f"Rule '{self.kind}' does not take a column range")
        return self


class Row(BaseModel):
    """One table row with the rules physically above and below it.

    ``markers_below`` holds passthrough lines that follow the row verbatim:
    multi-page markers such as ``\\endhead`` and source comments.
    """

    cells: list[Cell] = Field(default_factory=list)
    rules_above: list[RowRule] = Field(default_factory=list)
    rules_below: list[RowRule] = Field(default_factory=list)
    markers_below: list[str] = Field(default_factory=list)

    def positions(self) -> list[tuple[int, Cell]]:
        """Return (starting logical column, cell) pairs, left to right.

        Every cell, placeholders included, occupies ``col_span`` positions.
        """
        result: list[tuple[int, Cell]] = []
        column = 0
        for cell in self.cells:
            result.append((column, cell))
            column += cell.col_span
        return result

    @property
    def width(self) -> int:
        """Number of logical column positions the row occupies."""
        return sum(cell.col_span for cell in self.cells)


class TableOptions(BaseModel):
    """Dialect header arguments other than the column spec."""

    total_width: str | None = None
    vertical_position: str | None = None


class TableAST(BaseModel):
    """Structured representation of one tabular block (optionally float-wrapped)."""

    dialect: Dialect
    columns: list[ColumnDescriptor] = Field(default_factory=list)
    rows: list[Row] = Field(default_factory=list)
    options: TableOptions | None = None
    preamble_lines: list[str] = Field(default_factory=list)
    wrapped_in_float: bool = False
    float_environment: Literal["table", "table*"] = "table"
    float_placement: str | None = None
    caption: str | None = None
    short_caption: str | None = None
    caption_position: Literal["top", "bottom"] | None = None
    label: str | None = None
    # Unrecognized float-body lines around the tabular, re-emitted verbatim
    float_lines_before: list[str] = Field(default_factory=list)
    float_lines_after: list[str] = Field(default_factory=list)
    column_spec_source: str = ""
    original_text: str = ""

    @property
    def column_count(self) -> int:
        """Declared logical column count; 0 means unknown."""
        return len(self.columns)

    @property
    def grid_width(self) -> int:
        """Declared column count, or the widest row when the column spec was unparseable."""
        if self.columns:
            return len(self.columns)
        return max((row.width for row in self.rows), default=0)


class ValidationFinding(BaseModel):
    """One advisory finding produced by the validator."""

    severity: Severity
    code: str
    message: str
    row: int | None = None
    column: int | None = None


class TableLocation(BaseModel):
    """Source range and raw text of a table block inside a larger document."""

    start: int
    end: int
    content: str
    environment: str
