"""
Document and Corpus types.

A Corpus is an insertion-ordered collection of immutable Documents, each
identified by a unique id and carrying an open set of metadata fields
(country, author, ...). Corpora are built from plain lists of strings or
from a pandas DataFrame with a designated text column; all other columns
become metadata.

Tokens are never stored on the Corpus: preprocessing produces derived
token sequences keyed by document id, leaving the raw text untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Union

import pandas as pd

from nlp_primer.errors import DuplicateId, InvalidConfiguration, NotFound


DocId = Union[str, int]
GroupKey = Union[str, Callable[[Mapping[str, Any]], Any]]


@dataclass(frozen=True)
class Document:
    """
    A single document: identifier, raw text and read-only metadata.

    Attributes
    ----------
    doc_id : Union[str, int]
        Identifier, unique within a Corpus.
    text : str
        Raw document text; never modified by preprocessing.
    metadata : Mapping[str, Any]
        Document-level variables such as country or author.
    """

    doc_id: DocId
    text: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise InvalidConfiguration(
                f"Document {self.doc_id!r}: text must be a str, "
                f"got {type(self.text).__name__}"
            )
        if not isinstance(self.doc_id, (str, int)) or isinstance(self.doc_id, bool):
            raise InvalidConfiguration(
                f"Document id must be a str or int, got {type(self.doc_id).__name__}"
            )
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))


class Corpus:
    """
    Insertion-ordered collection of Documents with unique identifiers.

    `subset` and `group` return new Corpus objects sharing the same
    (immutable) Document instances.
    """

    def __init__(self, documents: Iterable[Document] = ()):
        self._documents: List[Document] = []
        self._by_id: Dict[DocId, Document] = {}
        for doc in documents:
            self.add(doc)

    def add(self, document: Document) -> None:
        """Append a document; raises DuplicateId if its id is already present."""
        if document.doc_id in self._by_id:
            raise DuplicateId(f"Document id already exists in corpus: {document.doc_id!r}")
        self._documents.append(document)
        self._by_id[document.doc_id] = document

    def get(self, doc_id: DocId) -> Document:
        """Look up a document by id; raises NotFound when absent."""
        try:
            return self._by_id[doc_id]
        except KeyError:
            raise NotFound(f"No document with id {doc_id!r} in corpus") from None

    def subset(
        self,
        predicate: Optional[Callable[[Mapping[str, Any]], bool]] = None,
        **equals: Any,
    ) -> "Corpus":
        """
        Return a new Corpus with the documents whose metadata matches.

        Parameters
        ----------
        predicate : Optional[Callable[[Mapping[str, Any]], bool]]
            Called with each document's metadata; documents for which it
            returns True are kept.
        **equals : Any
            Metadata field -> required value. Every named field must exist
            on at least one document.

        Raises
        ------
        NotFound
            If a keyword names a metadata field no document carries.
        """
        for key in equals:
            if not any(key in doc.metadata for doc in self._documents):
                raise NotFound(f"Unknown metadata field: {key!r}")

        def _matches(doc: Document) -> bool:
            if predicate is not None and not predicate(doc.metadata):
                return False
            return all(
                key in doc.metadata and doc.metadata[key] == value
                for key, value in equals.items()
            )

        return Corpus(doc for doc in self._documents if _matches(doc))

    def group(self, key_fn: GroupKey) -> Dict[Any, "Corpus"]:
        """
        Partition the corpus into named groups.

        Parameters
        ----------
        key_fn : Union[str, Callable]
            Either a metadata field name or a callable mapping a document's
            metadata to its group name.

        Returns
        -------
        Dict[Any, Corpus]
            Group name -> Corpus, in order of first appearance.
        """
        key_of = _resolve_group_key(key_fn)
        groups: Dict[Any, Corpus] = {}
        for doc in self._documents:
            groups.setdefault(key_of(doc), Corpus()).add(doc)
        return groups

    @property
    def ids(self) -> List[DocId]:
        return [doc.doc_id for doc in self._documents]

    @property
    def texts(self) -> List[str]:
        return [doc.text for doc in self._documents]

    def metadata_frame(self) -> pd.DataFrame:
        """Document metadata as a DataFrame indexed by document id."""
        frame = pd.DataFrame(
            [dict(doc.metadata) for doc in self._documents],
            index=pd.Index(self.ids, name="doc_id", dtype=object),
        )
        return frame

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._by_id

    def __repr__(self) -> str:
        return f"Corpus({len(self)} documents)"


def _resolve_group_key(key_fn: GroupKey) -> Callable[[Document], Any]:
    if callable(key_fn):
        return lambda doc: key_fn(doc.metadata)

    def _by_field(doc: Document) -> Any:
        if key_fn not in doc.metadata:
            raise NotFound(
                f"Document {doc.doc_id!r} has no metadata field {key_fn!r}"
            )
        return doc.metadata[key_fn]

    return _by_field


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def corpus_from_texts(
    texts: Sequence[str],
    ids: Optional[Sequence[DocId]] = None,
    metadata: Optional[Sequence[Mapping[str, Any]]] = None,
) -> Corpus:
    """
    Build a Corpus from a list of strings.

    Ids default to "text1", "text2", ...; `ids` and `metadata`, when given,
    must be aligned with `texts`.
    """
    if ids is None:
        ids = [f"text{i}" for i in range(1, len(texts) + 1)]
    if metadata is None:
        metadata = [{} for _ in texts]
    if not (len(ids) == len(texts) == len(metadata)):
        raise InvalidConfiguration(
            "texts, ids and metadata must have the same length: "
            f"{len(texts)}, {len(ids)}, {len(metadata)}"
        )
    return Corpus(
        Document(doc_id=doc_id, text=text, metadata=meta)
        for doc_id, text, meta in zip(ids, texts, metadata)
    )


def corpus_from_dataframe(
    df: pd.DataFrame,
    text_column: str = "text",
    id_column: Optional[str] = None,
) -> Corpus:
    """
    Build a Corpus from a DataFrame with a designated text column.

    Parameters
    ----------
    df : pd.DataFrame
        Input table, one row per document.
    text_column : str
        Name of the column holding raw text.
    id_column : Optional[str]
        Column holding document ids. If None, ids are "text1", "text2", ...

    Returns
    -------
    Corpus
        Corpus whose metadata holds every other column of `df`.

    Raises
    ------
    InvalidConfiguration
        If a column is missing or a text value is not a string.
    DuplicateId
        If the id column holds repeated values.
    """
    missing = [c for c in (text_column, id_column) if c and c not in df.columns]
    if missing:
        raise InvalidConfiguration(
            f"Missing column(s) {missing}; available columns: {list(df.columns)}"
        )

    meta_columns = [c for c in df.columns if c not in (text_column, id_column)]
    corpus = Corpus()
    for position, row in enumerate(df.to_dict(orient="records"), start=1):
        doc_id = row[id_column] if id_column else f"text{position}"
        # numpy integer ids from pandas are turned into plain ints
        if hasattr(doc_id, "item"):
            doc_id = doc_id.item()
        corpus.add(
            Document(
                doc_id=doc_id,
                text=row[text_column],
                metadata={c: row[c] for c in meta_columns},
            )
        )
    return corpus
