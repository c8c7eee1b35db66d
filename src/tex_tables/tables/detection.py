"""Table block detection inside larger documents, and float-wrapper extraction.

Operates on raw document text: finds where tabular environments (and the
``table`` floats around them) begin and end, answers "which table is the
cursor in", and peels a float wrapper off a block to recover its caption,
label, and placement.
"""

import logging

from tex_tables.tables.columns import read_braced
from tex_tables.tables.patterns import BEGIN_FLOAT_RE, BEGIN_TABULAR_RE, CAPTION_RE, CENTERING_RE, FLOAT_WRAPPER_RE, LABEL_RE
from tex_tables.tables.schema import TableLocation

logger = logging.getLogger(__name__)


# ─── Block Boundaries ────────────────────────────────────────────────────────


def block_end(text: str, environment: str, start: int) -> int | None:
    """Return the index just past the ``\\end{environment}`` matching the ``\\begin`` at *start*.

    Nested environments of the same name are counted, so a tabular inside a
    cell does not close its parent.  Returns None if the block never closes.
    """
    begin_token = f"\\begin{{{environment}}}"
    end_token = f"\\end{{{environment}}}"
    depth = 0
    pos = start
    while True:
        next_begin = text.find(begin_token, pos)
        next_end = text.find(end_token, pos)
        if next_end == -1:
            return None
        if next_begin != -1 and next_begin < next_end:
            depth += 1
            pos = next_begin + len(begin_token)
        else:
            depth -= 1
            pos = next_end + len(end_token)
            if depth <= 0:
                return pos


def _iter_blocks(text: str) -> list[TableLocation]:
    """Return every float and tabular block in *text*, including nested ones."""
    blocks: list[TableLocation] = []
    for pattern in (BEGIN_FLOAT_RE, BEGIN_TABULAR_RE):
        for match in pattern.finditer(text):
            end = block_end(text, match.group(1), match.start())
            if end is None:
                logger.debug("Unclosed \\begin{%s} at offset %d", match.group(1), match.start())
                continue
            blocks.append(
                TableLocation(start=match.start(), end=end, content=text[match.start() : end], environment=match.group(1))
            )
    return blocks


def find_table_at_position(text: str, offset: int) -> TableLocation | None:
    """Return the smallest table block (float or tabular) enclosing *offset*, or None."""
    enclosing = [block for block in _iter_blocks(text) if block.start <= offset <= block.end]
    if not enclosing:
        return None
    return min(enclosing, key=lambda block: block.end - block.start)


def find_tables(text: str) -> list[TableLocation]:
    """Return the outermost table blocks in document order (no block contains another)."""
    blocks = sorted(_iter_blocks(text), key=lambda block: (block.start, -block.end))
    outermost: list[TableLocation] = []
    for block in blocks:
        if outermost and block.start < outermost[-1].end:
            continue  # nested inside the previous outermost block
        outermost.append(block)
    return outermost


# ─── Float Wrapper ───────────────────────────────────────────────────────────


def _residual_lines(body: str, start: int, end: int, spans: list[tuple[int, int]]) -> list[str]:
    """Return the non-blank lines of ``body[start:end]`` with every span in *spans* cut out."""
    pieces: list[str] = []
    pos = start
    for span_start, span_end in sorted(spans):
        if span_end <= pos or span_start >= end:
            continue
        pieces.append(body[pos:span_start])
        pos = max(pos, span_end)
    if pos < end:
        pieces.append(body[pos:end])
    return [line.strip() for line in "".join(pieces).split("\n") if line.strip()]


def extract_float_wrapper(text: str) -> dict | None:
    """Split a ``\\begin{table}...\\end{table}`` block into its parts.

    Returns None when *text* is not a float wrapper.  Otherwise returns a dict
    with keys ``environment``, ``placement``, ``caption``, ``short_caption``,
    ``caption_position``, ``label``, ``tabular`` (the inner tabular block
    text, or None if the float holds no tabular), ``lines_before`` and
    ``lines_after``.  The caption position is "top" when the caption precedes
    the tabular block and "bottom" otherwise.

    The two line lists hold whatever else the float body contains before and
    after the tabular (``\\small``, an opening ``\\resizebox{..}{..}{``,
    notes), with the caption, label, and ``\\centering`` removed since those
    are regenerated.
    """
    match = FLOAT_WRAPPER_RE.match(text.strip())
    if not match:
        return None
    body = match.group(3)

    tabular = None
    tabular_start = tabular_end = len(body)
    begin = BEGIN_TABULAR_RE.search(body)
    if begin:
        end = block_end(body, begin.group(1), begin.start())
        if end is not None:
            tabular = body[begin.start() : end]
            tabular_start, tabular_end = begin.start(), end

    spans = [(m.start(), m.end()) for m in CENTERING_RE.finditer(body)]

    caption = None
    short_caption = None
    caption_position = None
    caption_match = CAPTION_RE.search(body)
    if caption_match:
        group = read_braced(body, caption_match.end())
        if group is not None:
            caption = group[0]
            short_caption = caption_match.group(1)
            caption_position = "top" if caption_match.start() < tabular_start else "bottom"
            spans.append((caption_match.start(), group[1]))

    label_match = LABEL_RE.search(body)
    if label_match:
        spans.append((label_match.start(), label_match.end()))

    return {
        "environment": match.group(1),
        "placement": match.group(2),
        "caption": caption,
        "short_caption": short_caption,
        "caption_position": caption_position,
        "label": label_match.group(1) if label_match else None,
        "tabular": tabular,
        "lines_before": _residual_lines(body, 0, tabular_start, spans),
        "lines_after": _residual_lines(body, tabular_end, len(body), spans),
    }
