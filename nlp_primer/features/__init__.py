"""
Text preprocessing and feature extraction utilities.

This subpackage includes:
- tokenization with configurable removal of punctuation, numbers,
  symbols and URLs
- lowercasing and stopword removal
- stemming / table-based lemmatization
- document-feature matrix construction, trimming and grouping.
"""
