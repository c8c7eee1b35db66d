"""Shared configuration for the table parser, generator, and validator."""

import os
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent.parent.parent.resolve()
load_dotenv(ROOT / ".env")

# Generated markup is indented by this many spaces per nesting level
INDENT_WIDTH = int(os.getenv("TEX_TABLES_INDENT_WIDTH", "4"))
INDENT = " " * INDENT_WIDTH

# Validator size heuristics
MAX_COLUMNS = int(os.getenv("TEX_TABLES_MAX_COLUMNS", "10"))
MAX_ROWS = int(os.getenv("TEX_TABLES_MAX_ROWS", "50"))

# Placement emitted for float wrappers that were created without one
DEFAULT_FLOAT_PLACEMENT = os.getenv("TEX_TABLES_FLOAT_PLACEMENT", "htbp")

LOG_LEVEL = os.getenv("TEX_TABLES_LOG_LEVEL", "INFO")

# Characters that must be escaped with a backslash inside cell content
RESERVED_CHARS = ("%", "_", "&", "#", "$")

# Total width emitted for tabularx / tabular* tables that were built without one
DEFAULT_TOTAL_WIDTH = os.getenv("TEX_TABLES_TOTAL_WIDTH", "\\linewidth")
