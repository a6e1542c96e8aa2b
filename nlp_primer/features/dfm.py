"""
Document-feature matrix (DFM) construction and manipulation.

A DFM is a sparse documents x terms count matrix (bag of words). Rows follow
corpus order and columns follow the **alphabetical** order of the
vocabulary, so a given corpus and preprocessing config always produce the
same column indices.

Counting is delegated to scikit-learn's CountVectorizer fed with
pre-tokenized documents; the resulting scipy CSR matrix is wrapped together
with document names, feature names and document variables (metadata).

Supported operations mirror the usual bag-of-words workflow:

- trim: drop rare (or overly common) features by total count or by
  document frequency
- group: sum the rows of documents sharing a key (e.g. per country)
- select: keep or remove features by glob pattern
- weight: counts, proportions or presence/absence
"""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
import scipy.sparse as sp
from sklearn.feature_extraction.text import CountVectorizer

from nlp_primer.data.corpus import Corpus, DocId
from nlp_primer.errors import InvalidConfiguration, NotFound


GroupSpec = Union[str, Callable[[Mapping[str, Any]], Any], Sequence[Any]]
WEIGHT_SCHEMES = ("count", "prop", "boolean")


def _identity_analyzer(tokens: List[str]) -> List[str]:
    return tokens


class DocumentFeatureMatrix:
    """
    Sparse document x feature matrix with row and column labels.

    Parameters
    ----------
    matrix : scipy.sparse matrix
        Counts (or weights), shape (n_documents, n_features).
    docnames : Sequence
        Row labels (document ids or group names).
    features : Sequence[str]
        Column labels.
    docvars : Optional[pd.DataFrame]
        Document variables aligned with the rows.
    """

    def __init__(
        self,
        matrix: sp.spmatrix,
        docnames: Sequence[Any],
        features: Sequence[str],
        docvars: Optional[pd.DataFrame] = None,
    ):
        self.matrix = sp.csr_matrix(matrix)
        self.docnames = list(docnames)
        self.features = list(features)
        if self.matrix.shape != (len(self.docnames), len(self.features)):
            raise InvalidConfiguration(
                f"Matrix shape {self.matrix.shape} does not match "
                f"{len(self.docnames)} documents x {len(self.features)} features"
            )
        if docvars is None:
            docvars = pd.DataFrame(index=pd.Index(self.docnames, dtype=object))
        self.docvars = docvars.reset_index(drop=True).set_axis(
            pd.Index(self.docnames, name="doc_id", dtype=object), axis=0
        )

    # ------------------------------------------------------------------
    # Shape and margins
    # ------------------------------------------------------------------

    @property
    def shape(self):
        return self.matrix.shape

    def ndoc(self) -> int:
        return self.matrix.shape[0]

    def nfeat(self) -> int:
        return self.matrix.shape[1]

    def ntoken(self) -> pd.Series:
        """Row sums: tokens per document after preprocessing."""
        sums = np.asarray(self.matrix.sum(axis=1)).ravel()
        return pd.Series(sums, index=pd.Index(self.docnames, dtype=object), name="ntoken")

    def ntype(self) -> pd.Series:
        """Number of distinct features per document."""
        counts = np.diff(self.matrix.indptr)
        return pd.Series(counts, index=pd.Index(self.docnames, dtype=object), name="ntype")

    def feature_totals(self) -> pd.Series:
        """Column sums: total count of each feature over all documents."""
        sums = np.asarray(self.matrix.sum(axis=0)).ravel()
        return pd.Series(sums, index=pd.Index(self.features, dtype=object), name="frequency")

    def docfreq(self) -> pd.Series:
        """Number of documents in which each feature occurs."""
        present = (self.matrix > 0).astype(np.int64)
        counts = np.asarray(present.sum(axis=0)).ravel()
        return pd.Series(counts, index=pd.Index(self.features, dtype=object), name="docfreq")

    def topfeatures(self, n: int = 10) -> pd.Series:
        """
        The `n` most frequent features, by total count descending with an
        alphabetical tie-break.
        """
        totals = self.feature_totals()
        order = sorted(range(len(totals)), key=lambda i: (-totals.iloc[i], self.features[i]))
        return totals.iloc[order[:n]]

    # ------------------------------------------------------------------
    # Transformations (each returns a new DFM)
    # ------------------------------------------------------------------

    def _with_columns(self, keep: np.ndarray) -> "DocumentFeatureMatrix":
        columns = np.flatnonzero(keep)
        return DocumentFeatureMatrix(
            self.matrix[:, columns],
            self.docnames,
            [self.features[i] for i in columns],
            self.docvars,
        )

    def trim(
        self,
        min_termfreq: Optional[int] = None,
        max_termfreq: Optional[int] = None,
        min_docfreq: Optional[int] = None,
        max_docfreq: Optional[int] = None,
    ) -> "DocumentFeatureMatrix":
        """
        Drop features by total count and/or document frequency.

        A feature is kept when ``min_termfreq <= total <= max_termfreq`` and
        ``min_docfreq <= docfreq <= max_docfreq``; unset bounds are ignored.
        Kept columns are unchanged.

        Raises
        ------
        InvalidConfiguration
            If a threshold is negative or a min exceeds its max.
        """
        bounds = {
            "min_termfreq": min_termfreq,
            "max_termfreq": max_termfreq,
            "min_docfreq": min_docfreq,
            "max_docfreq": max_docfreq,
        }
        for name, value in bounds.items():
            if value is not None and value < 0:
                raise InvalidConfiguration(f"{name} must be non-negative, got {value}")
        for low, high in (("min_termfreq", "max_termfreq"), ("min_docfreq", "max_docfreq")):
            if bounds[low] is not None and bounds[high] is not None and bounds[low] > bounds[high]:
                raise InvalidConfiguration(f"{low} ({bounds[low]}) exceeds {high} ({bounds[high]})")

        totals = self.feature_totals().to_numpy()
        docfreq = self.docfreq().to_numpy()
        keep = np.ones(self.nfeat(), dtype=bool)
        if min_termfreq is not None:
            keep &= totals >= min_termfreq
        if max_termfreq is not None:
            keep &= totals <= max_termfreq
        if min_docfreq is not None:
            keep &= docfreq >= min_docfreq
        if max_docfreq is not None:
            keep &= docfreq <= max_docfreq
        return self._with_columns(keep)

    def select(
        self,
        patterns: Iterable[str],
        selection: str = "keep",
        case_insensitive: bool = False,
    ) -> "DocumentFeatureMatrix":
        """
        Keep or remove features matching any of the glob `patterns`.

        Patterns support "*" and "?"; a pattern without wildcards matches a
        feature exactly.
        """
        if selection not in ("keep", "remove"):
            raise InvalidConfiguration(f"selection must be 'keep' or 'remove', got {selection!r}")
        patterns = [p.lower() if case_insensitive else p for p in patterns]

        def _matches(feature: str) -> bool:
            name = feature.lower() if case_insensitive else feature
            return any(fnmatchcase(name, p) for p in patterns)

        hits = np.array([_matches(f) for f in self.features], dtype=bool)
        return self._with_columns(hits if selection == "keep" else ~hits)

    def group(self, by: GroupSpec) -> "DocumentFeatureMatrix":
        """
        Sum the rows of documents that share a group key.

        Parameters
        ----------
        by : Union[str, Callable, Sequence]
            A docvars column name, a callable receiving each document's
            variables as a dict, or a sequence of keys aligned with rows.

        Returns
        -------
        DocumentFeatureMatrix
            One row per group, in order of first appearance. Document
            variables that are constant within every group are kept.

        Raises
        ------
        NotFound
            If `by` names a column that is not a document variable, or a
            document has no value for it.
        InvalidConfiguration
            If a key sequence is not aligned with the rows.
        """
        names, rows = self.group_partition(by)

        indicator = sp.csr_matrix(
            (np.ones(len(rows), dtype=np.int64), (rows, np.arange(len(rows)))),
            shape=(len(names), len(rows)),
        )
        summed = indicator @ self.matrix

        return DocumentFeatureMatrix(
            summed,
            names,
            self.features,
            self._group_docvars(rows, len(names)),
        )

    def group_partition(self, by: GroupSpec) -> Tuple[List[Any], List[int]]:
        """
        Group names in order of first appearance, and each row's group index.
        """
        group_index: Dict[Any, int] = {}
        rows = []
        for key in self.group_keys(by):
            rows.append(group_index.setdefault(key, len(group_index)))
        return list(group_index), rows

    def group_keys(self, by: GroupSpec) -> List[Any]:
        if isinstance(by, str):
            if by not in self.docvars.columns:
                raise NotFound(f"Unknown document variable for grouping: {by!r}")
            column = self.docvars[by]
            if column.isna().any():
                missing = list(column.index[column.isna()])
                raise NotFound(f"Document(s) {missing} have no value for {by!r}")
            return list(column)
        if callable(by):
            return [by(row) for row in self.docvars.to_dict(orient="records")]
        keys = list(by)
        if len(keys) != self.ndoc():
            raise InvalidConfiguration(
                f"Group keys ({len(keys)}) must align with documents ({self.ndoc()})"
            )
        return keys

    def _group_docvars(self, rows: List[int], n_groups: int) -> pd.DataFrame:
        if self.docvars.shape[1] == 0 or not rows:
            return pd.DataFrame(index=range(n_groups))
        frame = self.docvars.reset_index(drop=True).assign(_group=rows)
        constant = [
            col for col in self.docvars.columns
            if (frame.groupby("_group")[col].nunique(dropna=False) <= 1).all()
        ]
        if not constant:
            return pd.DataFrame(index=range(n_groups))
        return frame.groupby("_group", sort=True)[constant].first().reset_index(drop=True)

    def weight(self, scheme: str = "count") -> "DocumentFeatureMatrix":
        """
        Re-weight the cells.

        - "count": unchanged
        - "prop": each row divided by its sum (empty rows stay zero)
        - "boolean": 1 where the feature occurs, else 0
        """
        if scheme == "count":
            weighted = self.matrix.copy()
        elif scheme == "prop":
            sums = np.asarray(self.matrix.sum(axis=1)).ravel().astype(float)
            inverse = np.divide(1.0, sums, out=np.zeros_like(sums), where=sums > 0)
            weighted = sp.diags(inverse) @ self.matrix
        elif scheme == "boolean":
            weighted = (self.matrix > 0).astype(np.int64)
        else:
            raise InvalidConfiguration(
                f"Unknown weighting scheme {scheme!r}; expected one of {WEIGHT_SCHEMES}"
            )
        return DocumentFeatureMatrix(weighted, self.docnames, self.features, self.docvars)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_frame(self) -> pd.DataFrame:
        """Dense DataFrame (documents x features)."""
        return pd.DataFrame(
            self.matrix.toarray(),
            index=pd.Index(self.docnames, name="doc_id", dtype=object),
            columns=self.features,
        )

    def __repr__(self) -> str:
        return f"DocumentFeatureMatrix({self.ndoc()} documents x {self.nfeat()} features)"


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


def _aligned_tokens(
    corpus: Corpus,
    tokens_by_doc: Union[Mapping[DocId, List[str]], Sequence[List[str]]],
) -> List[List[str]]:
    if isinstance(tokens_by_doc, Mapping):
        missing = [doc_id for doc_id in corpus.ids if doc_id not in tokens_by_doc]
        if missing:
            raise NotFound(f"No tokens for document(s): {missing}")
        return [list(tokens_by_doc[doc_id]) for doc_id in corpus.ids]

    token_lists = [list(tokens) for tokens in tokens_by_doc]
    if len(token_lists) != len(corpus):
        raise InvalidConfiguration(
            f"Got {len(token_lists)} token sequences for {len(corpus)} documents"
        )
    return token_lists


def build_dfm(
    corpus: Corpus,
    tokens_by_doc: Union[Mapping[DocId, List[str]], Sequence[List[str]]],
    groups: Optional[GroupSpec] = None,
    min_termfreq: Optional[int] = None,
    min_docfreq: Optional[int] = None,
) -> DocumentFeatureMatrix:
    """
    Build a document-feature matrix from preprocessed tokens.

    Parameters
    ----------
    corpus : Corpus
        Source corpus; fixes row order and supplies document variables.
    tokens_by_doc : Mapping or Sequence
        Tokens per document, keyed by id (as returned by
        `preprocess_corpus`) or aligned with corpus order.
    groups : Optional[GroupSpec]
        If given, rows sharing a key are summed before trimming.
    min_termfreq : Optional[int]
        Drop features whose total count is below this value.
    min_docfreq : Optional[int]
        Drop features occurring in fewer documents (or groups).

    Returns
    -------
    DocumentFeatureMatrix
        Counts with alphabetically ordered features.
    """
    token_lists = _aligned_tokens(corpus, tokens_by_doc)

    if any(token_lists):
        vectorizer = CountVectorizer(analyzer=_identity_analyzer, dtype=np.int64)
        matrix = vectorizer.fit_transform(token_lists)
        features = list(vectorizer.get_feature_names_out())
    else:
        matrix = sp.csr_matrix((len(token_lists), 0), dtype=np.int64)
        features = []

    dfm = DocumentFeatureMatrix(matrix, corpus.ids, features, corpus.metadata_frame())

    if groups is not None:
        dfm = dfm.group(groups)
    if min_termfreq is not None or min_docfreq is not None:
        dfm = dfm.trim(min_termfreq=min_termfreq, min_docfreq=min_docfreq)
    return dfm
