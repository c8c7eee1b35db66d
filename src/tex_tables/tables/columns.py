"""Column-spec parsing: turn "|l|p{2cm}|c|" into ordered ColumnDescriptors.

The scan is a single left-to-right pass with a pending-left-border flag.
Width arguments and decorations are read with a brace-counting scan rather
than a regex, because widths may themselves contain braces
(e.g. ``p{\\dimexpr 2cm+{1pt}\\relax}``).
"""

import logging

from tex_tables.tables.patterns import DECORATION_TOKENS, SIMPLE_COLUMN_KINDS, WIDTH_COLUMN_KINDS
from tex_tables.tables.schema import ColumnDescriptor

logger = logging.getLogger(__name__)


# ─── Brace Scanning ──────────────────────────────────────────────────────────


def read_braced(text: str, pos: int) -> tuple[str, int] | None:
    """Read a balanced ``{...}`` group starting exactly at *pos*.

    Returns (inner_text, index just past the closing brace), or None when
    *pos* is not an opening brace or the group never closes.  Escaped braces
    (``\\{``, ``\\}``) do not count towards the depth.
    """
    if pos >= len(text) or text[pos] != "{":
        return None
    depth = 0
    i = pos
    while i < len(text):
        char = text[i]
        if char == "\\":
            i += 2
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[pos + 1 : i], i + 1
        i += 1
    return None


def skip_whitespace(text: str, pos: int) -> int:
    """Return the first index at or after *pos* that is not whitespace."""
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def _expand_repetitions(spec: str) -> str:
    """Expand ``*{n}{cols}`` repetitions, recursively, into literal text."""
    out: list[str] = []
    i = 0
    while i < len(spec):
        if spec[i] == "*":
            count = read_braced(spec, skip_whitespace(spec, i + 1))
            if count is not None and count[0].strip().isdigit():
                body = read_braced(spec, skip_whitespace(spec, count[1]))
                if body is not None:
                    out.append(_expand_repetitions(body[0]) * int(count[0]))
                    i = body[1]
                    continue
        out.append(spec[i])
        i += 1
    return "".join(out)


# ─── Column-Spec Scan ────────────────────────────────────────────────────────


def _scan(spec: str) -> tuple[list[ColumnDescriptor], list[str], bool]:
    """Scan a column spec.  Returns (columns, unknown_tokens, well_formed)."""
    expanded = _expand_repetitions(spec)
    columns: list[ColumnDescriptor] = []
    unknown: list[str] = []
    pending_left_border = False
    i = 0

    while i < len(expanded):
        char = expanded[i]

        if char in SIMPLE_COLUMN_KINDS:
            columns.append(ColumnDescriptor(kind=char, left_border=pending_left_border))
            pending_left_border = False
            i += 1
        elif char == "|":
            # Border before the first column, or after the previous one
            if columns:
                columns[-1].right_border = True
            else:
                pending_left_border = True
            i += 1
        elif char in WIDTH_COLUMN_KINDS or char in DECORATION_TOKENS:
            group_start = skip_whitespace(expanded, i + 1)
            if group_start >= len(expanded) or expanded[group_start] != "{":
                unknown.append(char)
                i += 1
                continue
            group = read_braced(expanded, group_start)
            if group is None:
                return [], unknown, False
            if char in WIDTH_COLUMN_KINDS:
                columns.append(ColumnDescriptor(kind=char, width=group[0], left_border=pending_left_border))
                pending_left_border = False
            # Decorations (@{..}, >{..}, <{..}, !{..}) produce no logical column
            i = group[1]
        else:
            if not char.isspace():
                unknown.append(char)
            i += 1

    return columns, unknown, True


def parse_column_spec(spec: str) -> list[ColumnDescriptor]:
    """Parse a column-format string into ordered column descriptors.

    Never raises.  A spec with unbalanced braces degrades to an empty list,
    which callers treat as "column count unknown".  Unknown characters are
    skipped; see find_unknown_column_tokens() to report them.
    """
    columns, unknown, well_formed = _scan(spec)
    if not well_formed:
        logger.debug("Unbalanced braces in column spec %r; treating as unparseable", spec)
        return []
    if unknown:
        logger.debug("Skipped unknown column-spec tokens %s in %r", unknown, spec)
    return columns


def find_unknown_column_tokens(spec: str) -> list[str]:
    """Return the non-whitespace characters parse_column_spec() skipped, in order."""
    return _scan(spec)[1]
