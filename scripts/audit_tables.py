"""Batch audit of every LaTeX table under a directory.

Walks a directory tree for .tex files, parses and validates every table
block in each, and prints a summary of findings by code plus the files with
the most errors.  Nothing is rewritten.

Usage:
    source .venv/bin/activate
    python scripts/audit_tables.py path/to/thesis --top 10
"""

import argparse
import logging
import sys
from collections import Counter
from pathlib import Path

from tqdm import tqdm

# Ensure project root is importable
ROOT = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(ROOT / "src"))

from tex_tables.tables.pipeline import run  # pylint: disable=wrong-import-position

logger = logging.getLogger(__name__)


def audit_file(path: Path) -> list[dict]:
    """Return findings_by_table for one file."""
    with open(path, "r", encoding="utf-8") as fopen:
        document = fopen.read()
    _, findings_by_table = run(document)
    return findings_by_table


def main():
    """Parse CLI args, audit every .tex file, and print the summary."""
    parser = argparse.ArgumentParser(description="Audit LaTeX tables across a directory of .tex files")
    parser.add_argument("directory", type=Path, help="Directory to scan recursively")
    parser.add_argument("--top", type=int, default=10, help="Number of worst files to list (default: 10)")
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format="%(asctime)s - %(levelname)s - %(message)s")

    files = sorted(args.directory.rglob("*.tex"))
    logger.warning("Auditing %d .tex files under %s", len(files), args.directory)

    by_code: Counter = Counter()
    errors_by_file: Counter = Counter()
    n_tables = 0
    for path in tqdm(files, desc="Auditing tables"):
        try:
            findings_by_table = audit_file(path)
        except UnicodeDecodeError as exc:
            logger.warning("Skipping %s: %s", path, exc)
            continue
        n_tables += len(findings_by_table)
        for entry in findings_by_table:
            for finding in entry["findings"]:
                by_code[(finding.severity, finding.code)] += 1
                if finding.severity == "error":
                    errors_by_file[path] += 1

    # ── Summary ──────────────────────────────────────────────────────────
    print(f"\n{'=' * 70}")
    print(f"  {len(files)} files, {n_tables} tables")
    print(f"{'=' * 70}")
    for (severity, code), count in sorted(by_code.items(), key=lambda item: -item[1]):
        print(f"  {severity:<8} {code:<28} {count:>6}")

    if errors_by_file:
        print("\n  Files with the most errors:")
        for path, count in errors_by_file.most_common(args.top):
            print(f"  {count:>6}  {path.relative_to(args.directory)}")


if __name__ == "__main__":
    main()
