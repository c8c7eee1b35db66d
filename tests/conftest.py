"""Shared test configuration and fixtures."""

from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env from project root for all tests
root = Path(__file__).parent.parent.resolve()
load_dotenv(root / ".env")


SPANNED_TABLE = r"""\begin{tabular}{|c|c|c|}
\hline
\multirow{2}{*}{A} & B & C \\
\cline{2-3}
 & D & E \\
\hline
\end{tabular}"""

PLAIN_TABLE = r"""\begin{tabular}{|c|c|c|}
\hline
a & b & c \\
\hline
d & e & f \\
\hline
\end{tabular}"""


@pytest.fixture
def spanned_latex() -> str:
    """Bordered 3x2 table whose first column is a two-row \\multirow."""
    return SPANNED_TABLE


@pytest.fixture
def plain_latex() -> str:
    """Bordered 3x2 table with no spans."""
    return PLAIN_TABLE
