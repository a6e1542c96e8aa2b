"""
Reporting utilities.

This subpackage offers:
- term frequency tables over a document-feature matrix
- keyword-in-context (KWIC) lookups over token sequences
- per-document corpus summaries.
"""
