"""
Keyword-in-context (KWIC) lookups.

For every token matching a pattern, report up to `window` tokens before
and after it, with the matching token's position in the sequence. Tokens
are reported exactly as they appear in the input sequence.

Patterns are either "glob" (supports * and ?) or "fixed" (exact string).
Matching is case-sensitive unless `case_insensitive` is set.
"""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Callable, Iterable, List, Mapping, NamedTuple, Tuple

import pandas as pd

from nlp_primer.errors import InvalidConfiguration


VALUETYPES = ("glob", "fixed")
KWIC_COLUMNS = ["docname", "position", "pre", "keyword", "post"]


class KwicMatch(NamedTuple):
    """One keyword occurrence and its surrounding tokens."""

    position: int
    pre: Tuple[str, ...]
    keyword: str
    post: Tuple[str, ...]


def _build_matcher(pattern: str, valuetype: str, case_insensitive: bool) -> Callable[[str], bool]:
    if valuetype not in VALUETYPES:
        raise InvalidConfiguration(f"Unknown valuetype {valuetype!r}; expected one of {VALUETYPES}")
    if not isinstance(pattern, str) or not pattern:
        raise InvalidConfiguration("KWIC pattern must be a non-empty string")

    if case_insensitive:
        pattern = pattern.lower()

    def _fold(token: str) -> str:
        return token.lower() if case_insensitive else token

    if valuetype == "fixed":
        return lambda token: _fold(token) == pattern
    return lambda token: fnmatchcase(_fold(token), pattern)


def kwic(
    tokens: Iterable[str],
    pattern: str,
    window: int = 5,
    case_insensitive: bool = False,
    valuetype: str = "glob",
) -> List[KwicMatch]:
    """
    Locate a keyword in a token sequence and return its contexts.

    Parameters
    ----------
    tokens : Iterable[str]
        Token sequence (a list or a TokenSequence).
    pattern : str
        Keyword or glob pattern.
    window : int
        Number of tokens to report on each side.
    case_insensitive : bool
        Compare lowercased pattern and tokens.
    valuetype : str
        "glob" or "fixed".

    Returns
    -------
    List[KwicMatch]
        One entry per matching position, in order of position.
    """
    if window < 0:
        raise InvalidConfiguration(f"window must be non-negative, got {window}")
    matches = _build_matcher(pattern, valuetype, case_insensitive)
    sequence = list(tokens)

    results = []
    for position, token in enumerate(sequence):
        if matches(token):
            results.append(
                KwicMatch(
                    position=position,
                    pre=tuple(sequence[max(0, position - window):position]),
                    keyword=token,
                    post=tuple(sequence[position + 1:position + 1 + window]),
                )
            )
    return results


def kwic_corpus(
    tokens_by_doc: Mapping[object, Iterable[str]],
    pattern: str,
    window: int = 5,
    case_insensitive: bool = False,
    valuetype: str = "glob",
) -> pd.DataFrame:
    """
    Run `kwic` over every document and collect the hits in a table.

    Returns
    -------
    pd.DataFrame
        Columns ["docname", "position", "pre", "keyword", "post"], with
        the context windows joined by single spaces.
    """
    records = []
    for docname, tokens in tokens_by_doc.items():
        for hit in kwic(tokens, pattern, window, case_insensitive, valuetype):
            records.append(
                {
                    "docname": docname,
                    "position": hit.position,
                    "pre": " ".join(hit.pre),
                    "keyword": hit.keyword,
                    "post": " ".join(hit.post),
                }
            )
    return pd.DataFrame(records, columns=KWIC_COLUMNS)
