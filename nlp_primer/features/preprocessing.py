"""
Text preprocessing pipeline: tokenize -> lowercase -> remove stopwords -> reduce.

The pipeline is described by an explicit `PreprocessingConfig` that is built
once (usually from the 'preprocessing' section of config/data.yaml) and
passed to every call. Stopword lists and lemma tables are loaded while the
config is built, never looked up from hidden global state.

Each document's chain is independent, so `preprocess_corpus` can fan the
work out over a joblib worker pool; results always come back in corpus
order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from joblib import Parallel, delayed

from nlp_primer.data.corpus import Corpus, DocId
from nlp_primer.errors import InvalidConfiguration
from nlp_primer.features.normalize import Normalizer, load_stopwords
from nlp_primer.features.term_reduction import (
    IdentityReducer,
    TermReducer,
    build_term_reducer,
)
from nlp_primer.features.tokenize import TokenizerOptions, tokenize


@dataclass(frozen=True)
class PreprocessingConfig:
    """
    Settings for every preprocessing stage.

    Attributes
    ----------
    tokenizer : TokenizerOptions
        Token unit and removal flags.
    lowercase : bool
        Lowercase tokens before stopword filtering.
    stopwords : frozenset
        Words removed after case folding (exact match).
    reducer : TermReducer
        Stemming or lemmatization strategy applied last.
    """

    tokenizer: TokenizerOptions = field(default_factory=TokenizerOptions)
    lowercase: bool = True
    stopwords: frozenset = field(default_factory=frozenset)
    reducer: TermReducer = field(default_factory=IdentityReducer)

    @property
    def normalizer(self) -> Normalizer:
        return Normalizer(lowercase=self.lowercase, stopwords=self.stopwords)

    @classmethod
    def from_dict(
        cls,
        cfg: Optional[Dict[str, Any]],
        lemma_registry: Optional[Mapping[str, str]] = None,
    ) -> "PreprocessingConfig":
        """
        Build a config from the 'preprocessing' section of config/data.yaml.

        Expected layout::

            tokenize: {remove_punct: true, remove_numbers: true, ...}
            lowercase: true
            stopwords: {enabled: true, language: en, source: nltk, extra: [...]}
            reduction: {method: stem, algorithm: porter, language: en}

        Parameters
        ----------
        cfg : Optional[Dict[str, Any]]
            Preprocessing configuration dictionary.
        lemma_registry : Optional[Mapping[str, str]]
            Identifier -> path registry for lemma tables.

        Returns
        -------
        PreprocessingConfig
            Fully resolved configuration.
        """
        cfg = cfg or {}
        if not isinstance(cfg, dict):
            raise InvalidConfiguration("The preprocessing section must be a mapping")

        tokenizer = TokenizerOptions.from_dict(cfg.get("tokenize"))

        stopwords: frozenset = frozenset()
        sw_cfg = cfg.get("stopwords", {}) or {}
        if bool(sw_cfg.get("enabled", False)):
            stopwords = load_stopwords(
                language=sw_cfg.get("language", "en"),
                source=sw_cfg.get("source", "nltk"),
            )
        extra = sw_cfg.get("extra") or []
        if extra:
            stopwords = stopwords | frozenset(extra)

        reducer = build_term_reducer(cfg.get("reduction"), registry=lemma_registry)

        return cls(
            tokenizer=tokenizer,
            lowercase=bool(cfg.get("lowercase", True)),
            stopwords=stopwords,
            reducer=reducer,
        )


def preprocess_text_to_tokens(
    text: str,
    config: PreprocessingConfig,
) -> List[str]:
    """
    Full preprocessing chain for one text, returning tokens.

    Parameters
    ----------
    text : str
        Raw input text.
    config : PreprocessingConfig
        Pipeline settings.

    Returns
    -------
    List[str]
        Preprocessed tokens in original order.
    """
    tokens = tokenize(text, config.tokenizer).to_list()
    if not tokens:
        return []

    tokens = config.normalizer(tokens)
    if not tokens:
        return []

    return config.reducer.reduce_all(tokens)


def preprocess_text_to_string(text: str, config: PreprocessingConfig) -> str:
    """Preprocessed tokens joined with a single space."""
    return " ".join(preprocess_text_to_tokens(text, config))


def preprocess_corpus(
    corpus: Corpus,
    config: PreprocessingConfig,
    n_jobs: int = 1,
    backend: Optional[str] = None,
) -> Dict[DocId, List[str]]:
    """
    Apply the preprocessing chain to every document of a corpus.

    Parameters
    ----------
    corpus : Corpus
        Documents to process. Raw texts are not modified.
    config : PreprocessingConfig
        Pipeline settings.
    n_jobs : int
        Number of joblib workers; 1 runs serially, -1 uses all CPUs.
    backend : Optional[str]
        joblib backend ("loky", "threading", ...); joblib picks when None.

    Returns
    -------
    Dict[DocId, List[str]]
        Document id -> tokens, in corpus order.
    """
    texts = corpus.texts
    if n_jobs == 1 or len(texts) < 2:
        results = [preprocess_text_to_tokens(text, config) for text in texts]
    else:
        results = Parallel(n_jobs=n_jobs, backend=backend)(
            delayed(preprocess_text_to_tokens)(text, config) for text in texts
        )
    return dict(zip(corpus.ids, results))
