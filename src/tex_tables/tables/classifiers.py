"""Row, cell, and rule classification helpers for LaTeX tabular bodies.

Each function takes a fragment of table-body text and either splits it
(split_cells, scan_body_line, peel_leading_commands), classifies it
(classify_rule, is_multipage_marker), or turns it into a model
(parse_cell).  Anything that
does not match a known shape falls through to plain content or None; the
grammar below cell granularity is never parsed.
"""

import logging

from tex_tables.tables.columns import read_braced, skip_whitespace
from tex_tables.tables.patterns import (
    ALIGNMENT_KINDS,
    BRACKET_ARG_RE,
    CLINE_RE,
    CMIDRULE_RE,
    HLINE_RE,
    LEADING_RULE_RE,
    MARKER_RE,
    MULTICOLUMN_PREFIX_RE,
    MULTIROW_PREFIX_RE,
    ROW_END_ARG_RE,
    SECTION_RULE_RE,
    SPAN_COUNT_RE,
    VERTICAL_ANCHORS,
)
from tex_tables.tables.schema import Cell, RowRule

logger = logging.getLogger(__name__)


# ─── Cell Splitting ──────────────────────────────────────────────────────────


def split_cells(row_text: str) -> list[str]:
    """Split a row on ``&`` at brace depth 0, ignoring escaped ``\\&``.

    A trailing separator yields a trailing empty cell, so ``"a & "`` gives
    two cells.
    """
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    prev = ""

    for char in row_text:
        escaped = prev == "\\"
        if char == "{" and not escaped:
            depth += 1
        elif char == "}" and not escaped:
            depth = max(depth - 1, 0)
        elif char == "&" and not escaped and depth == 0:
            parts.append("".join(current))
            current = []
            prev = char
            continue
        current.append(char)
        # "\\" is an escaped backslash, so it does not escape the next char
        prev = "" if escaped and char == "\\" else char

    parts.append("".join(current))
    return parts


# ─── Cell Parsing ────────────────────────────────────────────────────────────


def _read_arguments(text: str, pos: int, count: int) -> tuple[list[str], int] | None:
    """Read *count* consecutive braced arguments (whitespace allowed between them)."""
    args: list[str] = []
    for _ in range(count):
        group = read_braced(text, skip_whitespace(text, pos))
        if group is None:
            return None
        args.append(group[0])
        pos = group[1]
    return args, pos


def _span_count(raw: str) -> int | None:
    """Return a positive span count, or None when *raw* is not one."""
    match = SPAN_COUNT_RE.match(raw)
    if not match or int(match.group(1)) < 1:
        return None
    return int(match.group(1))


def alignment_from_spec(spec: str) -> str | None:
    """Return the first l/c/r letter in a column spec, ignoring braced arguments."""
    i = 0
    while i < len(spec):
        if spec[i] == "{":
            group = read_braced(spec, i)
            if group is None:
                return None
            i = group[1]
            continue
        if spec[i] in ALIGNMENT_KINDS:
            return spec[i]
        i += 1
    return None


def _read_multicolumn(text: str) -> tuple[int, str, str] | None:
    """Match ``\\multicolumn{n}{spec}{content}`` over the whole of *text*."""
    match = MULTICOLUMN_PREFIX_RE.match(text)
    if not match:
        return None
    parsed = _read_arguments(text, match.end(), 3)
    if parsed is None:
        return None
    (count, spec, content), end = parsed
    span = _span_count(count)
    if span is None or end != len(text):
        return None
    return span, spec, content


def _read_multirow(text: str) -> tuple[int, str | None, str] | None:
    """Match ``\\multirow[anchor]{n}[..]{width}[..]{content}`` over the whole of *text*.

    The width argument is discarded (it is always regenerated as ``*``).
    Returns (row_span, vertical_anchor, content).
    """
    match = MULTIROW_PREFIX_RE.match(text)
    if not match:
        return None
    anchor_tag = match.group(1)

    count = read_braced(text, match.end())
    if count is None:
        return None
    span = _span_count(count[0])
    if span is None:
        return None
    pos = count[1]

    # Optional [bigstruts] between the row count and the width
    bracket = BRACKET_ARG_RE.match(text[pos:])
    if bracket:
        pos += bracket.end()

    width = read_braced(text, skip_whitespace(text, pos))
    if width is None:
        return None
    pos = width[1]

    # Optional [vmove]; a bare t/c/b here is accepted as the anchor
    bracket = BRACKET_ARG_RE.match(text[pos:])
    if bracket:
        if anchor_tag is None and bracket.group(1).strip() in VERTICAL_ANCHORS:
            anchor_tag = bracket.group(1).strip()
        pos += bracket.end()

    content = read_braced(text, skip_whitespace(text, pos))
    if content is None or content[1] != len(text):
        return None
    return span, VERTICAL_ANCHORS.get(anchor_tag) if anchor_tag else None, content[0]


def parse_cell(cell_text: str) -> Cell:
    """Classify one cell as combined-span, column-span, row-span, or plain.

    First match wins.  Spans with a zero or non-numeric count are not
    recognized and fall through to a plain cell.
    """
    text = cell_text.strip()

    multicolumn = _read_multicolumn(text)
    if multicolumn is not None:
        col_span, spec, inner = multicolumn
        multirow = _read_multirow(inner.strip())
        if multirow is not None:
            row_span, anchor, content = multirow
            return Cell(
                content=content,
                col_span=col_span,
                row_span=row_span,
                alignment_override=alignment_from_spec(spec),
                vertical_anchor=anchor,
                column_spec_override=spec,
            )
        return Cell(
            content=inner,
            col_span=col_span,
            alignment_override=alignment_from_spec(spec),
            column_spec_override=spec,
        )

    multirow = _read_multirow(text)
    if multirow is not None:
        row_span, anchor, content = multirow
        return Cell(content=content, row_span=row_span, vertical_anchor=anchor)

    return Cell(content=text)


# ─── Rule Classification ─────────────────────────────────────────────────────


def _range_rule(kind: str, start: str, end: str, trim: str | None = None, width: str | None = None) -> RowRule | None:
    """Build a partial rule, or None when the range is not a valid 1-indexed span."""
    first, last = int(start), int(end)
    if first < 1 or last < first:
        return None
    return RowRule(kind=kind, columns=(first, last), trim=trim, width=width)


def classify_rule(line: str) -> RowRule | None:
    """Return the rule a whole line represents, or None for ordinary content."""
    stripped = line.strip()

    if HLINE_RE.match(stripped):
        return RowRule(kind="hline")

    match = CLINE_RE.match(stripped)
    if match:
        return _range_rule("cline", match.group(1), match.group(2))

    match = SECTION_RULE_RE.match(stripped)
    if match:
        return RowRule(kind=match.group(1), width=match.group(2))

    match = CMIDRULE_RE.match(stripped)
    if match:
        return _range_rule("cmidrule", match.group(3), match.group(4), trim=match.group(2), width=match.group(1))

    return None


def is_multipage_marker(line: str) -> bool:
    """Return True for longtable header/footer markers such as ``\\endhead``."""
    return bool(MARKER_RE.match(line.strip()))


# ─── Body Scanning ───────────────────────────────────────────────────────────


def scan_body_line(line: str, depth: int = 0) -> tuple[list[tuple[str, str]], int]:
    """Split one body line into ``("text" | "end" | "comment", fragment)`` events.

    A row ends at a ``\\\\`` outside every brace group; a following ``*`` or
    ``[spacing]`` argument is consumed with it.  An unescaped ``%`` starts a
    comment that runs to the end of the line.  Other control sequences
    (``\\%``, ``\\&``, ``\\{``) are copied through whole.  *depth* is the
    brace depth carried over from the previous line, and the depth at the end
    of this line is returned alongside the events.
    """
    events: list[tuple[str, str]] = []
    current: list[str] = []
    comment = None
    i = 0

    while i < len(line):
        char = line[i]
        if char == "\\":
            if depth == 0 and line.startswith("\\\\", i):
                if current:
                    events.append(("text", "".join(current)))
                    current = []
                arg = ROW_END_ARG_RE.match(line[i + 2 :])
                events.append(("end", line[i : i + 2 + arg.end()]))
                i += 2 + arg.end()
                continue
            current.append(line[i : i + 2])
            i += 2
            continue
        if char == "%":
            comment = line[i:]
            break
        if char == "{":
            depth += 1
        elif char == "}":
            depth = max(depth - 1, 0)
        current.append(char)
        i += 1

    if current:
        events.append(("text", "".join(current)))
    # A bare "%" only joins lines; it carries no text worth keeping
    if comment is not None and comment[1:].strip():
        events.append(("comment", comment.rstrip()))
    return events, depth


def peel_leading_commands(text: str) -> tuple[list[str], str]:
    """Split rule commands and multi-page markers off the front of a row segment.

    ``"\\hline \\endhead a & b"`` gives ``(["\\hline", "\\endhead"], "a & b")``.
    """
    commands: list[str] = []
    rest = text.strip()
    while rest:
        match = LEADING_RULE_RE.match(rest) or MARKER_RE.match(rest)
        if not match:
            break
        commands.append(match.group(0).strip())
        rest = rest[match.end() :].strip()
    return commands, rest
