"""
Per-document corpus summary: token and type counts alongside metadata.
"""

from __future__ import annotations

from typing import List, Mapping

import pandas as pd

from nlp_primer.data.corpus import Corpus, DocId
from nlp_primer.errors import NotFound


def summarize_corpus(
    corpus: Corpus,
    tokens_by_doc: Mapping[DocId, List[str]],
) -> pd.DataFrame:
    """
    Summarize each document of a corpus.

    Parameters
    ----------
    corpus : Corpus
        Documents to summarize.
    tokens_by_doc : Mapping[DocId, List[str]]
        Tokens per document, as returned by `preprocess_corpus`.

    Returns
    -------
    pd.DataFrame
        One row per document with columns "document", "types", "tokens"
        followed by the document metadata.
    """
    records = []
    for doc in corpus:
        if doc.doc_id not in tokens_by_doc:
            raise NotFound(f"No tokens for document {doc.doc_id!r}")
        tokens = tokens_by_doc[doc.doc_id]
        records.append(
            {
                "document": doc.doc_id,
                "types": len(set(tokens)),
                "tokens": len(tokens),
                **dict(doc.metadata),
            }
        )
    return pd.DataFrame(records, columns=None if records else ["document", "types", "tokens"])
