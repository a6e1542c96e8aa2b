"""
Tokenization of raw text into word, number, punctuation, symbol and URL tokens.

Whitespace is the primary boundary. Inside a whitespace-delimited chunk the
tokenizer separates URLs, numbers, words and single punctuation/symbol
characters, so "Hello, world!" becomes ["Hello", ",", "world", "!"].

Every token keeps its character span in the source text. Joining the
tokens with the text between them (`TokenSequence.separators`) gives back
the original string whenever nothing was removed.

Three granularities are supported through `TokenizerOptions.what`:

- "word": the default described above
- "character": every non-whitespace character (with its combining marks)
- "sentence": sentences ending in ".", "!" or "?" followed by whitespace
"""

from __future__ import annotations

import re
import sys
import unicodedata
from dataclasses import dataclass, fields
from functools import lru_cache
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Pattern

from nlp_primer.errors import InvalidConfiguration


SUPPORTED_UNITS = ("word", "character", "sentence")


class Token(NamedTuple):
    """A token with its [start, end) character span in the source text."""

    text: str
    start: int
    end: int
    kind: str


@dataclass(frozen=True)
class TokenizerOptions:
    """
    Tokenizer configuration.

    Attributes
    ----------
    what : str
        Token unit: "word", "character" or "sentence".
    remove_numbers : bool
        Drop number tokens ("42", "3.14", "1,000").
    remove_punct : bool
        Drop punctuation (Unicode category P*).
    remove_symbols : bool
        Drop symbols (Unicode category S*: currency, math, emoji, ...).
    remove_url : bool
        Drop http(s)/ftp/www URLs.
    split_hyphens : bool
        Split "self-aware" into "self", "-", "aware".
    """

    what: str = "word"
    remove_numbers: bool = False
    remove_punct: bool = False
    remove_symbols: bool = False
    remove_url: bool = False
    split_hyphens: bool = False

    def __post_init__(self) -> None:
        if self.what not in SUPPORTED_UNITS:
            raise InvalidConfiguration(
                f"Unknown token unit {self.what!r}; expected one of {SUPPORTED_UNITS}"
            )
        if self.what == "sentence" and (self.removes_any() or self.split_hyphens):
            raise InvalidConfiguration(
                "Removal flags and split_hyphens are not supported with what='sentence'"
            )
        if self.what == "character" and (self.remove_url or self.split_hyphens):
            raise InvalidConfiguration(
                "remove_url and split_hyphens are not supported with what='character'"
            )

    def removes_any(self) -> bool:
        return any(
            (self.remove_numbers, self.remove_punct, self.remove_symbols, self.remove_url)
        )

    def removed_kinds(self) -> frozenset:
        kinds = set()
        if self.remove_numbers:
            kinds.add("number")
        if self.remove_punct:
            kinds.add("punct")
        if self.remove_symbols:
            kinds.add("symbol")
        if self.remove_url:
            kinds.add("url")
        return frozenset(kinds)

    @classmethod
    def from_dict(cls, cfg: Optional[Dict[str, Any]]) -> "TokenizerOptions":
        """
        Build options from the ``preprocessing.tokenize`` config section.

        Unknown keys raise InvalidConfiguration rather than being ignored.
        """
        cfg = dict(cfg or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(cfg) - known)
        if unknown:
            raise InvalidConfiguration(f"Unknown tokenizer option(s): {unknown}")
        flags = {k: (bool(v) if k != "what" else str(v)) for k, v in cfg.items()}
        return cls(**flags)


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------


def _char_class_ranges(predicate) -> str:
    """Regex character-class body for all code points satisfying `predicate`."""
    parts = []
    start = None
    for cp in range(sys.maxunicode + 2):
        inside = cp <= sys.maxunicode and predicate(chr(cp))
        if inside and start is None:
            start = cp
        elif not inside and start is not None:
            end = cp - 1
            if start == end:
                parts.append(re.escape(chr(start)))
            else:
                parts.append(f"{re.escape(chr(start))}-{re.escape(chr(end))}")
            start = None
    return "".join(parts)


@lru_cache(maxsize=1)
def _combining_marks() -> str:
    # \w does not cover combining marks (categories Mn, Mc, Me)
    return _char_class_ranges(lambda ch: unicodedata.category(ch).startswith("M"))


_URL_PATTERN = (
    r"(?:https?://|ftp://|www\.)\S+?"
    r"(?=[.,;:!?)\]}\"'»”’]*(?:\s|$))"
)
_MULTIPART_NUMBER = r"\d+(?:[.,]\d+)+"
_NUMBER_TEXT = re.compile(r"\d+(?:[.,]\d+)*")


@lru_cache(maxsize=2)
def _word_pattern(split_hyphens: bool) -> Pattern[str]:
    word_char = rf"[\w{_combining_marks()}]"
    joiners = "'’" if split_hyphens else "'’\\-‐"
    return re.compile(
        rf"(?P<url>{_URL_PATTERN})"
        rf"|(?P<number>{_MULTIPART_NUMBER}(?!{word_char}))"
        rf"|(?P<word>{word_char}+(?:[{joiners}]{word_char}+)*)"
        rf"|(?P<other>[^\w\s]{_marks_suffix()})"
    )


@lru_cache(maxsize=1)
def _character_pattern() -> Pattern[str]:
    marks = _combining_marks()
    return re.compile(rf"[^\s{marks}][{marks}]*|[{marks}]+")


def _marks_suffix() -> str:
    return f"[{_combining_marks()}]*"


_SENTENCE_PATTERN = re.compile(
    r"\S.*?(?:[.!?]+[\"'’”)\]]*(?=\s|$)|$)",
    re.DOTALL,
)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def _kind_of_char(ch: str) -> str:
    category = unicodedata.category(ch)
    if category.startswith("P"):
        return "punct"
    if category.startswith("N"):
        return "number"
    if category.startswith("L") or category.startswith("M") or ch == "_":
        return "word"
    return "symbol"


def _kind_of_word(text: str) -> str:
    if _NUMBER_TEXT.fullmatch(text) or text.isnumeric():
        return "number"
    return "word"


# ---------------------------------------------------------------------------
# Scanning
# ---------------------------------------------------------------------------


def _scan_words(text: str, options: TokenizerOptions) -> Iterator[Token]:
    for match in _word_pattern(options.split_hyphens).finditer(text):
        group = match.lastgroup
        piece = match.group()
        if group == "word":
            kind = _kind_of_word(piece)
        elif group == "other":
            kind = _kind_of_char(piece[0])
        else:
            kind = group
        yield Token(piece, match.start(), match.end(), kind)


def _scan_characters(text: str) -> Iterator[Token]:
    for match in _character_pattern().finditer(text):
        piece = match.group()
        yield Token(piece, match.start(), match.end(), _kind_of_char(piece[0]))


def _scan_sentences(text: str) -> Iterator[Token]:
    for match in _SENTENCE_PATTERN.finditer(text):
        piece = match.group().rstrip()
        if piece:
            start = match.start()
            yield Token(piece, start, start + len(piece), "sentence")


def _iter_tokens(text: str, options: TokenizerOptions) -> Iterator[Token]:
    if options.what == "character":
        scanned = _scan_characters(text)
    elif options.what == "sentence":
        scanned = _scan_sentences(text)
    else:
        scanned = _scan_words(text, options)

    removed = options.removed_kinds()
    for token in scanned:
        if token.kind not in removed:
            yield token


class TokenSequence:
    """
    Lazy, restartable sequence of tokens over one text.

    Tokens are produced on iteration; iterating again re-scans the text, so
    the sequence can be consumed any number of times.
    """

    def __init__(self, text: str, options: TokenizerOptions):
        self.text = text
        self.options = options

    def __iter__(self) -> Iterator[str]:
        return (token.text for token in _iter_tokens(self.text, self.options))

    def spans(self) -> Iterator[Token]:
        """Iterate over `Token` records (text, start, end, kind)."""
        return _iter_tokens(self.text, self.options)

    def to_list(self) -> List[str]:
        return list(self)

    def __len__(self) -> int:
        return sum(1 for _ in self.spans())

    def separators(self) -> List[str]:
        """
        Text between consecutive kept tokens.

        Returns len(tokens) + 1 strings: the text before the first token,
        each gap, and the text after the last token. Removed tokens end up
        inside the gaps.
        """
        gaps = []
        cursor = 0
        for token in self.spans():
            gaps.append(self.text[cursor:token.start])
            cursor = token.end
        gaps.append(self.text[cursor:])
        return gaps

    def reconstruct(self) -> str:
        """Interleave separators and tokens; equals `text` when nothing is removed."""
        gaps = self.separators()
        pieces = [gaps[0]]
        for token, gap in zip(self, gaps[1:]):
            pieces.append(token)
            pieces.append(gap)
        return "".join(pieces)

    def __repr__(self) -> str:
        return f"TokenSequence({self.to_list()!r})"


def tokenize(
    text: str,
    options: Optional[TokenizerOptions] = None,
    **flags: Any,
) -> TokenSequence:
    """
    Tokenize a raw text string.

    Parameters
    ----------
    text : str
        Raw input text.
    options : Optional[TokenizerOptions]
        Tokenizer configuration. If None, one is built from `flags`.
    **flags : Any
        Keyword form of TokenizerOptions (what, remove_punct, ...); only
        allowed when `options` is None.

    Returns
    -------
    TokenSequence
        Lazy, restartable token sequence. Empty input yields no tokens.

    Raises
    ------
    InvalidConfiguration
        If `text` is not a string or the options are invalid.
    """
    if not isinstance(text, str):
        raise InvalidConfiguration(
            f"Expected text to be a str, got {type(text).__name__}"
        )
    if options is None:
        options = TokenizerOptions(**flags)
    elif flags:
        raise InvalidConfiguration("Pass either a TokenizerOptions or keyword flags, not both")
    return TokenSequence(text, options)
