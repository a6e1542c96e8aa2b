"""
Token normalization: lowercasing and stopword removal.

Stopword matching is exact and case-sensitive. To filter case-insensitively,
lowercase the tokens first (the `Normalizer` does this when `lowercase` is
enabled). Stopword lists are language-keyed resources loaded by identifier
and passed in as plain data:

- "nltk": the NLTK stopwords corpus (downloaded on first use when missing)
- "sklearn": scikit-learn's built-in English list
- any other value: a path to a one-word-per-line text file or a JSON list
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List

from nlp_primer.errors import InvalidConfiguration


# ISO 639-1 code -> NLTK / Snowball language name.
LANGUAGE_NAMES = {
    "ar": "arabic",
    "da": "danish",
    "de": "german",
    "en": "english",
    "es": "spanish",
    "fi": "finnish",
    "fr": "french",
    "hu": "hungarian",
    "it": "italian",
    "nl": "dutch",
    "no": "norwegian",
    "pt": "portuguese",
    "ro": "romanian",
    "ru": "russian",
    "sv": "swedish",
}


def resolve_language(language: str) -> str:
    """
    Map a language identifier ("en" or "english") to its NLTK name.

    Raises
    ------
    InvalidConfiguration
        If the identifier is not a known language.
    """
    lang = (language or "").strip().lower()
    if lang in LANGUAGE_NAMES:
        return LANGUAGE_NAMES[lang]
    if lang in LANGUAGE_NAMES.values():
        return lang
    raise InvalidConfiguration(
        f"Unknown language identifier {language!r}; expected one of "
        f"{sorted(LANGUAGE_NAMES)} or their full names"
    )


# ---------------------------------------------------------------------------
# Case folding and stopword filtering
# ---------------------------------------------------------------------------


def lowercase_tokens(tokens: Iterable[str]) -> List[str]:
    """
    Lowercase every token.

    Parameters
    ----------
    tokens : Iterable[str]
        Input tokens.

    Returns
    -------
    List[str]
        Lowercased tokens, same order.
    """
    return [t.lower() for t in tokens]


def remove_stopwords(tokens: Iterable[str], stopword_set: Iterable[str]) -> List[str]:
    """
    Remove stopwords from a list of tokens.

    Parameters
    ----------
    tokens : Iterable[str]
        Input tokens.
    stopword_set : Iterable[str]
        Words to remove (exact, case-sensitive match).

    Returns
    -------
    List[str]
        Tokens with stopwords removed, remaining order preserved.
    """
    stopword_set = frozenset(stopword_set)
    if not stopword_set:
        return list(tokens)
    return [t for t in tokens if t not in stopword_set]


@dataclass(frozen=True)
class Normalizer:
    """Lowercasing followed by stopword removal for one document's tokens."""

    lowercase: bool = True
    stopwords: FrozenSet[str] = field(default_factory=frozenset)

    def __call__(self, tokens: Iterable[str]) -> List[str]:
        out = lowercase_tokens(tokens) if self.lowercase else list(tokens)
        return remove_stopwords(out, self.stopwords)


# ---------------------------------------------------------------------------
# Stopword resources
# ---------------------------------------------------------------------------


def _nltk_stopwords(language: str) -> FrozenSet[str]:
    import nltk
    from nltk.corpus import stopwords as nltk_stopwords

    try:
        return frozenset(nltk_stopwords.words(language))
    except LookupError:
        # Corpus not installed yet; fetch it once and retry.
        nltk.download("stopwords", quiet=True)
        return frozenset(nltk_stopwords.words(language))


def _sklearn_stopwords(language: str) -> FrozenSet[str]:
    from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

    if language != "english":
        raise InvalidConfiguration(
            f"scikit-learn only ships English stopwords, not {language!r}"
        )
    return frozenset(ENGLISH_STOP_WORDS)


def _file_stopwords(path: str) -> FrozenSet[str]:
    if not os.path.exists(path):
        raise InvalidConfiguration(f"Unknown stopword source or missing file: {path!r}")

    with open(path, "r", encoding="utf-8") as f:
        if path.endswith(".json"):
            words = json.load(f)
            if not isinstance(words, list):
                raise InvalidConfiguration(f"Stopword JSON must hold a list: {path}")
        else:
            words = [line.strip() for line in f]

    return frozenset(w for w in words if w and not w.startswith("#"))


def load_stopwords(language: str = "en", source: str = "nltk") -> FrozenSet[str]:
    """
    Load a stopword list by language identifier.

    Parameters
    ----------
    language : str
        Language identifier, e.g. "en" or "english". Ignored for file
        sources.
    source : str
        "nltk", "sklearn", or a path to a stopword file.

    Returns
    -------
    FrozenSet[str]
        Set of lowercase stopwords.

    Raises
    ------
    InvalidConfiguration
        If the language or source is unknown.
    """
    source = source or "nltk"
    if source == "nltk":
        return _nltk_stopwords(resolve_language(language))
    if source == "sklearn":
        return _sklearn_stopwords(resolve_language(language))
    return _file_stopwords(source)
