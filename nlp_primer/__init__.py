"""
Top-level package for the nlp-primer text analysis toolkit.

This package contains modules for:
- loading tabular text datasets and building corpora
- tokenization, normalization, stopword removal and stemming/lemmatization
- document-feature matrix construction, trimming and grouping
- frequency tables, keyword-in-context reports and corpus summaries
- an end-to-end pipeline that ties the steps together from YAML configs
"""

from nlp_primer.errors import (
    NlpPrimerError,
    DuplicateId,
    NotFound,
    InvalidConfiguration,
)

__all__ = [
    "NlpPrimerError",
    "DuplicateId",
    "NotFound",
    "InvalidConfiguration",
]
