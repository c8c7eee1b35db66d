"""Compiled regex patterns and constant tuples for LaTeX table recognition.

These patterns identify the structural elements of a tabular block: the
environment header, horizontal rules, row terminators, span wrappers,
multi-page markers, and the float wrapper.  Used by classifiers.py,
detection.py, and parser.py.
"""

import re

# ─── Environment Patterns ─────────────────────────────────────────────────────

# Dialect names in the order they are tried
DIALECTS = ("tabular", "tabular*", "tabularx", "longtable", "array", "tabu")

# Dialects whose header takes a total-width argument before the column spec
WIDTH_DIALECTS = ("tabularx", "tabular*")

_DIALECT_ALT = r"tabular\*?|tabularx|longtable|array|tabu"

# "\begin{tabularx}" -- group 1 is the dialect name
BEGIN_TABULAR_RE = re.compile(r"\\begin\{(" + _DIALECT_ALT + r")\}")

# "\begin{table}" or "\begin{table*}" -- group 1 is the float environment name
BEGIN_FLOAT_RE = re.compile(r"\\begin\{(table\*?)\}")

# Whole text is a float wrapper; group 2 is the optional placement, group 3 the body
FLOAT_WRAPPER_RE = re.compile(r"^\\begin\{(table\*?)\}(?:\[([^\]]*)\])?([\s\S]*?)\\end\{\1\}$")

# "\caption" optionally followed by a short-form "[...]" argument (group 1)
CAPTION_RE = re.compile(r"\\caption\s*(?:\[([^\]]*)\])?\s*(?=\{)")

LABEL_RE = re.compile(r"\\label\{([^}]*)\}")

# Regenerated unconditionally, so stripped from the float body
CENTERING_RE = re.compile(r"\\centering(?![a-zA-Z])")


# ─── Row Patterns ─────────────────────────────────────────────────────────────

# What may follow a row terminator "\\": a "*" and/or a spacing argument like "[2pt]"
ROW_END_ARG_RE = re.compile(r"^\*?(?:\s*\[[^\]]*\])?")

# Multi-page header/footer markers (longtable)
MARKER_RE = re.compile(r"^\\(endhead|endfirsthead|endfoot|endlastfoot)\b")

# Optional booktabs rule thickness such as "[1.5pt]"
_RULE_WIDTH = r"(?:\[[^\]]*\])?"

# A rule command at the start of a row segment, used to peel rules off content
LEADING_RULE_RE = re.compile(
    r"^\s*(\\hline|\\cline\{\d+-\d+\}|\\(?:toprule|midrule|bottomrule)"
    + _RULE_WIDTH
    + r"|\\cmidrule"
    + _RULE_WIDTH
    + r"(?:\([lr]+\))?\{\d+-\d+\})(?![a-zA-Z])"
)


# ─── Rule Patterns ────────────────────────────────────────────────────────────

HLINE_RE = re.compile(r"^\\hline\s*$")
CLINE_RE = re.compile(r"^\\cline\{(\d+)-(\d+)\}\s*$")
# group 2 is the optional "[width]"
SECTION_RULE_RE = re.compile(r"^\\(toprule|midrule|bottomrule)(\[[^\]]*\])?\s*$")
# groups: width, trim, first column, last column
CMIDRULE_RE = re.compile(r"^\\cmidrule(\[[^\]]*\])?(\([lr]+\))?\{(\d+)-(\d+)\}\s*$")

# Rule kinds from the booktabs family
SECTION_RULE_KINDS = ("toprule", "midrule", "bottomrule", "cmidrule")


# ─── Cell Patterns ────────────────────────────────────────────────────────────

MULTICOLUMN_PREFIX_RE = re.compile(r"^\\multicolumn\s*(?=\{)")

# "\multirow" with an optional package-position "[t]" before the row count
MULTIROW_PREFIX_RE = re.compile(r"^\\multirow\s*(?:\[([tcb])\])?\s*(?=\{)")

# Optional "[...]" between the multirow width and its content
BRACKET_ARG_RE = re.compile(r"^\s*\[([^\]]*)\]\s*")

SPAN_COUNT_RE = re.compile(r"^\s*(\d+)\s*$")


# ─── Column-Spec Constants ────────────────────────────────────────────────────

ALIGNMENT_KINDS = ("l", "c", "r")
SIMPLE_COLUMN_KINDS = ("l", "c", "r", "X")
WIDTH_COLUMN_KINDS = ("p", "m", "b")

# Column-spec tokens that consume one braced argument and produce no column
DECORATION_TOKENS = ("@", ">", "<", "!")

VERTICAL_ANCHORS = {"t": "top", "c": "middle", "b": "bottom"}
ANCHOR_TAGS = {"top": "t", "middle": "c", "bottom": "b"}
