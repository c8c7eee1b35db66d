"""Document-level table pass and command-line entry point.

run() finds every table block in a LaTeX document, parses and validates it,
and splices the regenerated markup back in place.  Blocks the parser cannot
represent are left untouched.  main() wraps run() for a single ``.tex`` file.
"""

import argparse
import logging
import sys
from pathlib import Path

from tex_tables import config
from tex_tables.tables.detection import find_tables
from tex_tables.tables.formatting import generate_table
from tex_tables.tables.parser import parse_table
from tex_tables.tables.validation import validate_table

logger = logging.getLogger(__name__)


# ─── Helpers ─────────────────────────────────────────────────────────────────


def _line_indent(document: str, offset: int) -> str:
    """Return the whitespace preceding *offset* on its line, or "" if other text precedes it."""
    line_start = document.rfind("\n", 0, offset) + 1
    prefix = document[line_start:offset]
    return prefix if not prefix.strip() else ""


def _reindent(markup: str, indent: str) -> str:
    """Indent every line after the first; the first line inherits the original position."""
    lines = markup.split("\n")
    return "\n".join([lines[0]] + [indent + line if line else line for line in lines[1:]])


# ─── Main Pipeline Step ──────────────────────────────────────────────────────


def run(document: str) -> tuple[str, list[dict]]:
    """Regenerate every table in *document* and collect validation findings.

    Returns (new_document, findings_by_table).  Each findings entry is a dict
    with the block's ``start`` offset, its ``environment``, and its list of
    ValidationFinding models.  Unparseable blocks produce no entry.
    """
    # ── 1. Locate the outermost table blocks ─────────────────────────────
    locations = find_tables(document)
    logger.info("Detected %d table blocks", len(locations))

    # ── 2. Parse, validate, regenerate ───────────────────────────────────
    pieces: list[str] = []
    findings_by_table: list[dict] = []
    cursor = 0
    for idx, location in enumerate(locations):
        pieces.append(document[cursor : location.start])
        cursor = location.end

        ast = parse_table(location.content)
        if ast is None:
            logger.warning("Skipping unparseable %s block at offset %d", location.environment, location.start)
            pieces.append(location.content)
            continue

        findings = validate_table(ast)
        errors = sum(1 for finding in findings if finding.severity == "error")
        logger.info(
            "Table %d/%d (%s, %d rows): %d findings, %d errors",
            idx + 1,
            len(locations),
            ast.dialect,
            len(ast.rows),
            len(findings),
            errors,
        )
        findings_by_table.append({"start": location.start, "environment": location.environment, "findings": findings})
        pieces.append(_reindent(generate_table(ast), _line_indent(document, location.start)))

    # ── 3. Rebuild the document ──────────────────────────────────────────
    pieces.append(document[cursor:])
    return "".join(pieces), findings_by_table


def format_findings(findings_by_table: list[dict]) -> list[str]:
    """Render findings as ``offset:row:col severity code message`` report lines."""
    lines: list[str] = []
    for entry in findings_by_table:
        for finding in entry["findings"]:
            row = "-" if finding.row is None else finding.row
            column = "-" if finding.column is None else finding.column
            lines.append(f"{entry['start']}:{row}:{column} {finding.severity} {finding.code} {finding.message}")
    return lines


# ─── CLI ─────────────────────────────────────────────────────────────────────


def main(argv: list[str] | None = None) -> int:
    """Normalize or check the tables in one .tex file.  Returns the process exit code."""
    parser = argparse.ArgumentParser(description="Parse, validate, and regenerate LaTeX tables")
    parser.add_argument("path", type=Path, help="LaTeX source file")
    parser.add_argument("--check", action="store_true", help="Report findings only; exit 1 if any error is found")
    parser.add_argument("--write", action="store_true", help="Rewrite the file in place with regenerated tables")
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help=f"Logging level (default: {config.LOG_LEVEL})")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s - %(levelname)s - %(message)s")

    with open(args.path, "r", encoding="utf-8") as fopen:
        document = fopen.read()

    new_document, findings_by_table = run(document)
    for line in format_findings(findings_by_table):
        print(line)

    if args.check:
        has_errors = any(f.severity == "error" for entry in findings_by_table for f in entry["findings"])
        return 1 if has_errors else 0

    if args.write:
        with open(args.path, "w", encoding="utf-8") as fopen:
            fopen.write(new_document)
        logger.info("Rewrote %s (%d tables)", args.path, len(findings_by_table))
    else:
        sys.stdout.write(new_document)
    return 0


if __name__ == "__main__":
    sys.exit(main())
