"""Unit tests for LaTeX generation: border inference, rule splitting, and text helpers."""

# pylint: disable=missing-class-docstring,missing-function-docstring

from tex_tables.tables.formatting import (
    align_numbers_by_decimal,
    blocked_columns,
    escape_special_chars,
    generate_cell,
    generate_column_spec,
    generate_row,
    generate_table,
    infer_span_spec,
    pretty_format,
    render_rule,
    split_full_rule,
    unescape_special_chars,
)
from tex_tables.tables.parser import parse_table
from tex_tables.tables.schema import Cell, ColumnDescriptor, Row, RowRule, TableAST, TableOptions


def _columns(spec: list[tuple[str, bool, bool]]) -> list[ColumnDescriptor]:
    """Build descriptors from (kind, left_border, right_border) tuples."""
    return [ColumnDescriptor(kind=kind, left_border=left, right_border=right) for kind, left, right in spec]


BORDERED = _columns([("c", True, True), ("c", False, True), ("c", False, True)])


# ===========================================================================
# Column spec & span spec
# ===========================================================================


class TestGenerateColumnSpec:

    def test_bordered(self):
        assert generate_column_spec(BORDERED) == "|c|c|c|"

    def test_width_column(self):
        columns = [ColumnDescriptor(kind="p", width="2cm", left_border=True, right_border=True), ColumnDescriptor(kind="l")]
        assert generate_column_spec(columns) == "|p{2cm}|l"

    def test_empty(self):
        assert generate_column_spec([]) == ""


class TestInferSpanSpec:

    def test_borders_from_spanned_columns(self):
        assert infer_span_spec(Cell(col_span=2), 0, BORDERED) == "|c|"

    def test_interior_start_has_no_left_border(self):
        assert infer_span_spec(Cell(col_span=2), 1, BORDERED) == "c|"

    def test_no_borders(self):
        columns = _columns([("l", False, False), ("r", False, False)])
        assert infer_span_spec(Cell(col_span=2), 0, columns) == "l"

    def test_override_wins(self):
        assert infer_span_spec(Cell(col_span=2, column_spec_override="|r"), 0, BORDERED) == "|r"

    def test_alignment_override(self):
        assert infer_span_spec(Cell(col_span=2, alignment_override="l"), 0, BORDERED) == "|l|"

    def test_width_column_aligns_center(self):
        columns = [ColumnDescriptor(kind="p", width="2cm"), ColumnDescriptor(kind="l")]
        assert infer_span_spec(Cell(col_span=2), 0, columns) == "c"

    def test_unknown_columns(self):
        assert infer_span_spec(Cell(col_span=2), 0, []) == "c"


# ===========================================================================
# Cells & rows
# ===========================================================================


class TestGenerateCell:

    def test_plain(self):
        assert generate_cell(Cell(content="x"), 0, BORDERED) == "x"

    def test_multirow(self):
        assert generate_cell(Cell(content="A", row_span=2), 0, BORDERED) == "\\multirow{2}{*}{A}"

    def test_multirow_anchor(self):
        cell = Cell(content="A", row_span=2, vertical_anchor="middle")
        assert generate_cell(cell, 0, BORDERED) == "\\multirow[c]{2}{*}{A}"

    def test_combined(self):
        cell = Cell(content="A", row_span=2, col_span=2)
        assert generate_cell(cell, 0, BORDERED) == "\\multicolumn{2}{|c|}{\\multirow{2}{*}{A}}"

    def test_placeholder_is_empty(self):
        assert generate_cell(Cell(is_spanned=True), 0, BORDERED) == ""

    def test_wide_placeholder_keeps_width(self):
        assert generate_cell(Cell(col_span=2, is_spanned=True), 0, BORDERED) == "\\multicolumn{2}{|c|}{}"

    def test_single_column_alignment_override(self):
        cell = Cell(content="x", alignment_override="r")
        assert generate_cell(cell, 1, BORDERED) == "\\multicolumn{1}{r|}{x}"


class TestGenerateRow:

    def test_basic(self):
        row = Row(cells=[Cell(content="a"), Cell(content="b"), Cell(content="c")])
        assert generate_row(row, BORDERED) == "a & b & c \\\\"

    def test_leading_placeholder(self):
        row = Row(cells=[Cell(is_spanned=True), Cell(content="D"), Cell(content="E")])
        assert generate_row(row, BORDERED) == "& D & E \\\\"

    def test_empty_middle_cell(self):
        row = Row(cells=[Cell(content="a"), Cell(), Cell(content="c")])
        assert generate_row(row, BORDERED) == "a & & c \\\\"


# ===========================================================================
# Rule splitting
# ===========================================================================


def _spanned_rows() -> list[Row]:
    return [
        Row(cells=[Cell(content="A", row_span=2), Cell(content="B"), Cell(content="C")]),
        Row(cells=[Cell(is_spanned=True), Cell(content="D"), Cell(content="E")]),
    ]


class TestBlockedColumns:

    def test_inside_span(self):
        assert blocked_columns(_spanned_rows(), 1) == {0}

    def test_table_edges_never_blocked(self):
        rows = _spanned_rows()
        assert blocked_columns(rows, 0) == set()
        assert blocked_columns(rows, 2) == set()

    def test_placeholders_advance_columns(self):
        rows = [
            Row(cells=[Cell(content="A", row_span=3), Cell(content="B"), Cell(content="C")]),
            Row(cells=[Cell(is_spanned=True), Cell(content="D", row_span=2), Cell(content="E")]),
            Row(cells=[Cell(is_spanned=True), Cell(is_spanned=True), Cell(content="F")]),
        ]
        assert blocked_columns(rows, 2) == {0, 1}


class TestSplitFullRule:

    def test_unblocked_hline_preserved(self):
        assert split_full_rule(_spanned_rows(), 2, 3) == ["\\hline"]

    def test_split_around_multirow(self):
        assert split_full_rule(_spanned_rows(), 1, 3) == ["\\cline{2-3}"]

    def test_split_into_two_segments(self):
        rows = [
            Row(cells=[Cell(content="a"), Cell(content="B", row_span=2), Cell(content="c")]),
            Row(cells=[Cell(content="d"), Cell(is_spanned=True), Cell(content="f")]),
        ]
        assert split_full_rule(rows, 1, 3) == ["\\cline{1-1}", "\\cline{3-3}"]

    def test_fully_blocked_emits_nothing(self):
        rows = [
            Row(cells=[Cell(content="A", row_span=2, col_span=2)]),
            Row(cells=[Cell(col_span=2, is_spanned=True)]),
        ]
        assert split_full_rule(rows, 1, 2) == []


# ===========================================================================
# generate_table
# ===========================================================================


class TestGenerateTable:

    def test_spanned_table_output(self, spanned_latex):
        expected = "\n".join(
            [
                "\\begin{tabular}{|c|c|c|}",
                "    \\hline",
                "    \\multirow{2}{*}{A} & B & C \\\\",
                "    \\cline{2-3}",
                "    & D & E \\\\",
                "    \\hline",
                "\\end{tabular}",
            ]
        )
        assert generate_table(parse_table(spanned_latex)) == expected

    def test_hline_inside_span_becomes_cline(self):
        latex = "\\begin{tabular}{|c|c|c|}\n\\multirow{2}{*}{A} & B & C \\\\\n\\hline\n & D & E \\\\\n\\end{tabular}"
        output = generate_table(parse_table(latex))
        assert "\\cline{2-3}" in output
        assert "\\hline" not in output

    def test_generation_is_deterministic(self, spanned_latex):
        ast = parse_table(spanned_latex)
        assert generate_table(ast) == generate_table(ast)

    def test_round_trip_is_stable(self, spanned_latex, plain_latex):
        for latex in (spanned_latex, plain_latex):
            first = generate_table(parse_table(latex))
            assert generate_table(parse_table(first)) == first

    def test_round_trip_preserves_structure(self, spanned_latex):
        ast = parse_table(spanned_latex)
        again = parse_table(generate_table(ast))
        assert again.columns == ast.columns
        assert again.rows == ast.rows

    def test_float_wrapper(self):
        ast = TableAST(
            dialect="tabular",
            columns=_columns([("l", False, False), ("c", False, False)]),
            rows=[Row(cells=[Cell(content="a"), Cell(content="b")])],
            wrapped_in_float=True,
            caption="Results",
            caption_position="top",
            label="tab:r",
        )
        expected = "\n".join(
            [
                "\\begin{table}[htbp]",
                "    \\centering",
                "    \\caption{Results}",
                "    \\label{tab:r}",
                "    \\begin{tabular}{lc}",
                "        a & b \\\\",
                "    \\end{tabular}",
                "\\end{table}",
            ]
        )
        assert generate_table(ast) == expected

    def test_caption_below(self):
        ast = TableAST(
            dialect="tabular",
            columns=_columns([("c", False, False)]),
            rows=[Row(cells=[Cell(content="a")])],
            wrapped_in_float=True,
            float_placement="h",
            caption="Below",
            caption_position="bottom",
        )
        lines = generate_table(ast).split("\n")
        assert lines[0] == "\\begin{table}[h]"
        assert lines[-2] == "    \\caption{Below}"

    def test_tabularx_header(self):
        ast = TableAST(
            dialect="tabularx",
            columns=_columns([("l", False, False), ("X", False, False)]),
            rows=[Row(cells=[Cell(content="a"), Cell(content="b")])],
            options=TableOptions(total_width="\\textwidth"),
        )
        assert generate_table(ast).split("\n")[0] == "\\begin{tabularx}{\\textwidth}{lX}"

    def test_tabularx_default_width(self):
        ast = TableAST(dialect="tabularx", columns=_columns([("X", False, False)]), rows=[])
        assert generate_table(ast).split("\n")[0] == "\\begin{tabularx}{\\linewidth}{X}"

    def test_partial_rules_rendered_verbatim(self):
        ast = TableAST(
            dialect="tabular",
            columns=_columns([("c", False, False), ("c", False, False)]),
            rows=[
                Row(
                    cells=[Cell(content="a"), Cell(content="b")],
                    rules_above=[RowRule(kind="toprule")],
                    rules_below=[RowRule(kind="cmidrule", columns=(1, 2), trim="(lr)")],
                )
            ],
        )
        output = generate_table(ast)
        assert "    \\toprule" in output
        assert "    \\cmidrule(lr){1-2}" in output

    def test_longtable_markers(self):
        latex = "\\begin{longtable}{ll}\nA & B \\\\\n\\endhead\nx & y \\\\\n\\end{longtable}"
        output = generate_table(parse_table(latex)).split("\n")
        assert output[2] == "    \\endhead"

    def test_comment_lines_regenerated_in_place(self):
        latex = "\\begin{tabular}{cc}\na & b \\\\\n% subtotal\nc & d \\\\\n\\end{tabular}"
        output = generate_table(parse_table(latex)).split("\n")
        assert output[1:4] == ["    a & b \\\\", "    % subtotal", "    c & d \\\\"]

    def test_short_caption(self):
        ast = TableAST(
            dialect="tabular",
            columns=_columns([("c", False, False)]),
            rows=[Row(cells=[Cell(content="a")])],
            wrapped_in_float=True,
            caption="A long caption",
            short_caption="Short",
            caption_position="top",
        )
        assert "    \\caption[Short]{A long caption}" in generate_table(ast).split("\n")

    def test_float_extra_lines(self):
        ast = TableAST(
            dialect="tabular",
            columns=_columns([("c", False, False)]),
            rows=[Row(cells=[Cell(content="a")])],
            wrapped_in_float=True,
            float_placement="h",
            caption="Results",
            caption_position="top",
            float_lines_before=["\\small", "\\resizebox{\\linewidth}{!}{%"],
            float_lines_after=["}", "\\footnotesize Source: survey."],
        )
        expected = "\n".join(
            [
                "\\begin{table}[h]",
                "    \\centering",
                "    \\caption{Results}",
                "    \\small",
                "    \\resizebox{\\linewidth}{!}{%",
                "    \\begin{tabular}{c}",
                "        a \\\\",
                "    \\end{tabular}",
                "    }",
                "    \\footnotesize Source: survey.",
                "\\end{table}",
            ]
        )
        assert generate_table(ast) == expected

    def test_float_extra_lines_round_trip(self):
        latex = (
            "\\begin{table}[h]\n\\small\n\\caption[R]{Results}\n"
            "\\begin{tabular}{c}\na \\\\\n\\end{tabular}\n\\par Note.\n\\end{table}"
        )
        ast = parse_table(latex)
        again = parse_table(generate_table(ast))
        assert again.short_caption == "R"
        assert again.float_lines_before == ["\\small"]
        assert again.float_lines_after == ["\\par Note."]


class TestRenderRule:

    def test_section_rule_width(self):
        assert render_rule(RowRule(kind="toprule", width="[1.5pt]")) == "\\toprule[1.5pt]"

    def test_cmidrule_width_before_trim(self):
        rule = RowRule(kind="cmidrule", columns=(1, 2), trim="(lr)", width="[0.5pt]")
        assert render_rule(rule) == "\\cmidrule[0.5pt](lr){1-2}"

    def test_plain_rules(self):
        assert render_rule(RowRule(kind="hline")) == "\\hline"
        assert render_rule(RowRule(kind="cline", columns=(2, 3))) == "\\cline{2-3}"

    def test_width_survives_round_trip(self):
        latex = "\\begin{tabular}{cc}\n\\toprule[1.5pt]\na & b \\\\\n\\cmidrule[0.5pt](lr){1-2}\nc & d \\\\\n\\bottomrule[1.5pt]\n\\end{tabular}"
        output = generate_table(parse_table(latex))
        assert "    \\toprule[1.5pt]" in output
        assert "    \\cmidrule[0.5pt](lr){1-2}" in output
        assert "    \\bottomrule[1.5pt]" in output


# ===========================================================================
# Decimal alignment
# ===========================================================================


class TestAlignNumbersByDecimal:

    def test_pads_both_sides(self):
        cells = [Cell(content="3.5"), Cell(content="12.25"), Cell(content="-1.125")]
        aligned = align_numbers_by_decimal(cells)
        assert [c.content for c in aligned] == [" 3.500", "12.250", "-1.125"]

    def test_non_numbers_untouched(self):
        cells = [Cell(content="Total"), Cell(content="1.5"), Cell(content="42"), Cell(content="")]
        aligned = align_numbers_by_decimal(cells)
        assert [c.content for c in aligned] == ["Total", "1.5", "42", ""]

    def test_surrounding_whitespace_ignored(self):
        aligned = align_numbers_by_decimal([Cell(content=" 1.5 "), Cell(content="10.25")])
        assert aligned[0].content == " 1.50"

    def test_other_fields_kept(self):
        cell = Cell(content="1.5", col_span=2, alignment_override="r")
        aligned = align_numbers_by_decimal([cell, Cell(content="10.0")])
        assert aligned[0].col_span == 2
        assert aligned[0].alignment_override == "r"

    def test_input_not_modified(self):
        cells = [Cell(content="1.5"), Cell(content="10.25")]
        align_numbers_by_decimal(cells)
        assert cells[0].content == "1.5"

    def test_no_numbers(self):
        assert align_numbers_by_decimal([]) == []
        assert [c.content for c in align_numbers_by_decimal([Cell(content="x")])] == ["x"]


# ===========================================================================
# Text helpers
# ===========================================================================


class TestEscaping:

    def test_escape_percent(self):
        assert escape_special_chars("50%") == "50\\%"

    def test_already_escaped_untouched(self):
        assert escape_special_chars("50\\%") == "50\\%"

    def test_escape_braces_and_tilde(self):
        assert escape_special_chars("{a}~") == "\\{a\\}\\textasciitilde{}"

    def test_unescape(self):
        assert unescape_special_chars("a\\_b \\& c") == "a_b & c"

    def test_unescape_reverses_escape(self):
        text = "100% of R&D_team #1 costs $5 {x} ~ ^"
        assert unescape_special_chars(escape_special_chars(text)) == text


class TestPrettyFormat:

    def test_reindents_nesting(self):
        latex = "\\begin{table}\n\\begin{tabular}{c}\nx \\\\\n\\end{tabular}\n\\end{table}"
        expected = "\\begin{table}\n    \\begin{tabular}{c}\n        x \\\\\n    \\end{tabular}\n\\end{table}"
        assert pretty_format(latex) == expected

    def test_drops_existing_indentation(self):
        assert pretty_format("      x") == "x"
