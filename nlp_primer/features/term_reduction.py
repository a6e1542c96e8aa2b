"""
Term reduction: stemming and table-based lemmatization.

Both strategies implement the same `TermReducer` interface, so the
preprocessing pipeline picks one at configuration time without the
tokenizer or normalizer knowing which:

- `Stemmer` strips suffixes with an NLTK stemmer (Porter, Snowball or
  Lancaster). Results are not always real words ("studies" -> "studi").
- `TableLemmatizer` looks each token up in a token -> lemma table and
  substitutes the lemma when present, leaving other tokens unchanged.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pandas as pd
from nltk.stem import LancasterStemmer, PorterStemmer, SnowballStemmer

from nlp_primer.errors import InvalidConfiguration
from nlp_primer.features.normalize import resolve_language


STEM_ALGORITHMS = ("porter", "snowball", "lancaster")
REDUCTION_METHODS = ("none", "stem", "lemmatize")


class TermReducer(ABC):
    """Maps each token to a reduced (root or canonical) form."""

    @abstractmethod
    def reduce(self, token: str) -> str:
        raise NotImplementedError()

    def reduce_all(self, tokens: Iterable[str]) -> List[str]:
        return [self.reduce(token) for token in tokens]

    def __call__(self, tokens: Iterable[str]) -> List[str]:
        return self.reduce_all(tokens)


class IdentityReducer(TermReducer):
    """Leaves tokens unchanged (reduction disabled)."""

    def reduce(self, token: str) -> str:
        return token


class Stemmer(TermReducer):
    """
    Rule-based suffix stripping backed by NLTK.

    Parameters
    ----------
    algorithm : str
        "porter", "snowball" or "lancaster".
    language : str
        Language identifier; only used by the Snowball stemmer.
    """

    def __init__(self, algorithm: str = "porter", language: str = "en"):
        algo = (algorithm or "porter").lower()
        if algo == "porter":
            self._stemmer = PorterStemmer()
        elif algo == "snowball":
            self._stemmer = SnowballStemmer(resolve_language(language))
        elif algo == "lancaster":
            self._stemmer = LancasterStemmer()
        else:
            raise InvalidConfiguration(
                f"Unknown stemming algorithm {algorithm!r}; expected one of {STEM_ALGORITHMS}"
            )
        self.algorithm = algo
        self.language = language

    def reduce(self, token: str) -> str:
        stem = self._stemmer.stem(token)
        # Porter may lowercase internally; never return a longer form.
        return stem if len(stem) <= len(token) else token

    def __repr__(self) -> str:
        return f"Stemmer(algorithm={self.algorithm!r}, language={self.language!r})"


class TableLemmatizer(TermReducer):
    """Substitutes the canonical lemma for tokens found in a lookup table."""

    def __init__(self, table: Mapping[str, str]):
        self.table = dict(table)

    def reduce(self, token: str) -> str:
        return self.table.get(token, token)

    def __repr__(self) -> str:
        return f"TableLemmatizer({len(self.table)} entries)"


# ---------------------------------------------------------------------------
# Lemma table resources
# ---------------------------------------------------------------------------


def read_lemma_table(path: str) -> Dict[str, str]:
    """
    Read a two-column token/lemma table from a TSV or CSV file.

    The file must have a header with "token" and "lemma" columns. Rows
    with an empty token or lemma are skipped; later rows win on duplicates.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Lemma table not found at: {path}")

    sep = "\t" if path.endswith((".tsv", ".txt")) else ","
    df = pd.read_csv(path, sep=sep, dtype=str, keep_default_na=False, comment="#")

    missing = [c for c in ("token", "lemma") if c not in df.columns]
    if missing:
        raise InvalidConfiguration(
            f"Lemma table {path} is missing column(s) {missing}; "
            f"found {list(df.columns)}"
        )

    df = df[(df["token"] != "") & (df["lemma"] != "")]
    return dict(zip(df["token"], df["lemma"]))


def load_lemma_table(
    identifier: str,
    registry: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Load a token -> lemma table by language identifier or file path.

    Parameters
    ----------
    identifier : str
        A key of `registry` (e.g. "en") or a path to a table file.
    registry : Optional[Mapping[str, str]]
        Identifier -> file path, usually ``resources.lemma_tables`` from
        config/data.yaml.

    Raises
    ------
    InvalidConfiguration
        If the identifier is neither registered nor an existing file.
    """
    registry = registry or {}
    if identifier in registry:
        return read_lemma_table(registry[identifier])
    if os.path.exists(identifier):
        return read_lemma_table(identifier)
    raise InvalidConfiguration(
        f"Unknown lemma table {identifier!r}; registered: {sorted(registry)}"
    )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def build_term_reducer(
    cfg: Optional[Dict[str, Any]] = None,
    registry: Optional[Mapping[str, str]] = None,
) -> TermReducer:
    """
    Build the term reducer described by a ``preprocessing.reduction`` section.

    Expected keys: ``method`` ("none", "stem" or "lemmatize"),
    ``algorithm`` and ``language`` for stemming, ``table`` (identifier or
    path) for lemmatization.
    """
    cfg = cfg or {}
    method = str(cfg.get("method", "none")).lower()

    if method == "none":
        return IdentityReducer()
    if method == "stem":
        return Stemmer(
            algorithm=cfg.get("algorithm", "porter"),
            language=cfg.get("language", "en"),
        )
    if method == "lemmatize":
        table_id = cfg.get("table") or cfg.get("language", "en")
        return TableLemmatizer(load_lemma_table(table_id, registry))

    raise InvalidConfiguration(
        f"Unknown reduction method {method!r}; expected one of {REDUCTION_METHODS}"
    )
