"""LaTeX tabular parsing, generation, validation, and structural editing.

Submodules:
  patterns     -- compiled regex patterns and constant tuples
  schema       -- TableAST and related Pydantic models
  columns      -- column-spec parsing and brace-balanced argument reading
  classifiers  -- cell splitting, cell parsing, rule classification
  detection    -- table block location and float-wrapper extraction
  parser       -- row segmentation and parse_table() entry point
  formatting   -- generate_table(), border inference, rule splitting
  validation   -- validate_table() structural checks
  editing      -- copy-on-write row/column/merge edits
  pipeline     -- document-level run() and CLI main()
"""
