"""
End-to-end text analysis pipeline.

This module ties the pieces together:

- loading the configured CSV dataset and building a Corpus
- preprocessing every document (tokenize, lowercase, stopwords, reduce)
- building a document-feature matrix, grouped and trimmed per config
- writing a frequency table and a corpus summary to the results directory
- optionally writing keyword-in-context reports

It is designed to be callable both as a library function and as a
standalone script (via `python -m nlp_primer.pipelines.run_analysis`).
"""

from __future__ import annotations

import os
import re
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from nlp_primer.data.corpus import Corpus, DocId, corpus_from_dataframe
from nlp_primer.data.datasets import (
    DEFAULT_DATA_CONFIG_PATH,
    get_resource_registry,
    load_data_config,
    load_text_dataset,
)
from nlp_primer.features.dfm import DocumentFeatureMatrix, build_dfm
from nlp_primer.features.preprocessing import PreprocessingConfig, preprocess_corpus
from nlp_primer.features.tokenize import tokenize
from nlp_primer.reporting.frequency import frequency
from nlp_primer.reporting.kwic import kwic_corpus
from nlp_primer.reporting.summary import summarize_corpus
from nlp_primer.utils.run_utils import (
    DEFAULT_RUN_CONFIG_PATH,
    ensure_dir_exists,
    get_logger,
    get_n_jobs,
    load_run_config,
)


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------


def load_configured_corpus(
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    csv_path: Optional[str] = None,
) -> Tuple[Corpus, PreprocessingConfig, Dict[str, Any]]:
    """
    Load the dataset as a Corpus and resolve the preprocessing config.

    Parameters
    ----------
    data_config_path : str
        Path to config/data.yaml.
    csv_path : Optional[str]
        Overrides the dataset path from the configuration.

    Returns
    -------
    Tuple[Corpus, PreprocessingConfig, Dict[str, Any]]
        (corpus, preprocessing settings, full data configuration)
    """
    data_cfg = load_data_config(data_config_path)

    df = load_text_dataset(config_path=data_config_path, csv_path=csv_path)
    id_column = "doc_id" if data_cfg["dataset"].get("id_column") else None
    corpus = corpus_from_dataframe(df, text_column="text", id_column=id_column)

    preprocessing_cfg = PreprocessingConfig.from_dict(
        data_cfg["preprocessing"],
        lemma_registry=get_resource_registry(data_cfg, "lemma_tables", data_config_path),
    )
    return corpus, preprocessing_cfg, data_cfg


def dfm_from_config(
    corpus: Corpus,
    tokens_by_doc: Dict[DocId, List[str]],
    dfm_cfg: Optional[Dict[str, Any]],
) -> DocumentFeatureMatrix:
    """Build the DFM with the grouping and trimming from the 'dfm' section."""
    dfm_cfg = dfm_cfg or {}
    return build_dfm(
        corpus,
        tokens_by_doc,
        groups=dfm_cfg.get("groups"),
        min_termfreq=dfm_cfg.get("min_termfreq"),
        min_docfreq=dfm_cfg.get("min_docfreq"),
    )


def _safe_filename(text: str) -> str:
    return re.sub(r"[^\w.-]+", "_", text).strip("_") or "pattern"


# ---------------------------------------------------------------------------
# Pipelines
# ---------------------------------------------------------------------------


def run_text_analysis(
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    run_config_path: str = DEFAULT_RUN_CONFIG_PATH,
    csv_path: Optional[str] = None,
) -> pd.DataFrame:
    """
    End-to-end pipeline producing a frequency table and a corpus summary.

    Parameters
    ----------
    data_config_path : str
        Path to config/data.yaml.
    run_config_path : str
        Path to config/run.yaml.
    csv_path : Optional[str]
        Overrides the dataset path from the data configuration.

    Returns
    -------
    pd.DataFrame
        Frequency table with columns ["feature", "frequency", "rank",
        "docfreq"].
    """
    run_cfg = load_run_config(run_config_path)
    logger = get_logger(
        name="run_analysis",
        config=run_cfg,
        log_file_suffix="frequency",
    )

    corpus, preprocessing_cfg, data_cfg = load_configured_corpus(
        data_config_path=data_config_path,
        csv_path=csv_path,
    )
    logger.info("Loaded corpus with %d documents.", len(corpus))
    logger.info(
        "Preprocessing: lowercase=%s, %d stopwords, reducer=%r",
        preprocessing_cfg.lowercase,
        len(preprocessing_cfg.stopwords),
        preprocessing_cfg.reducer,
    )

    tokens_by_doc = preprocess_corpus(corpus, preprocessing_cfg, n_jobs=get_n_jobs(run_cfg))
    logger.info(
        "Preprocessed %d tokens in total.",
        sum(len(tokens) for tokens in tokens_by_doc.values()),
    )

    dfm = dfm_from_config(corpus, tokens_by_doc, data_cfg.get("dfm"))
    logger.info("Built %r.", dfm)

    reports_cfg = run_cfg.get("reports", {}) or {}
    top_n = reports_cfg.get("top_n")
    freq_df = frequency(dfm, n=int(top_n) if top_n else None)

    results_dir = (run_cfg.get("paths", {}) or {}).get("results_dir", "outputs/results")
    ensure_dir_exists(results_dir)

    freq_path = os.path.join(results_dir, "frequency.csv")
    freq_df.to_csv(freq_path, index=False)
    logger.info("Saved frequency table to %s", freq_path)

    summary_path = os.path.join(results_dir, "corpus_summary.csv")
    summarize_corpus(corpus, tokens_by_doc).to_csv(summary_path, index=False)
    logger.info("Saved corpus summary to %s", summary_path)

    if not freq_df.empty:
        logger.info("Top features:\n%s", freq_df.head(10).to_string(index=False))
    else:
        logger.warning("Frequency table is empty; check trimming thresholds and stopwords.")

    return freq_df


def run_kwic_report(
    pattern: str,
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    run_config_path: str = DEFAULT_RUN_CONFIG_PATH,
    window: Optional[int] = None,
    case_insensitive: bool = False,
    valuetype: str = "glob",
    csv_path: Optional[str] = None,
) -> pd.DataFrame:
    """
    Keyword-in-context report over the configured dataset.

    Documents are only tokenized (not lowercased, filtered or stemmed) so
    the contexts show the original token text. The window defaults to
    ``reports.kwic_window`` from the run config. Results are written to
    ``<results_dir>/kwic_<pattern>.csv``.
    """
    run_cfg = load_run_config(run_config_path)
    logger = get_logger(
        name="run_kwic",
        config=run_cfg,
        log_file_suffix="kwic",
    )

    reports_cfg = run_cfg.get("reports", {}) or {}
    if window is None:
        window = int(reports_cfg.get("kwic_window", 5))

    corpus, preprocessing_cfg, _ = load_configured_corpus(
        data_config_path=data_config_path,
        csv_path=csv_path,
    )
    tokens_by_doc = {
        doc.doc_id: tokenize(doc.text, preprocessing_cfg.tokenizer).to_list()
        for doc in corpus
    }

    kwic_df = kwic_corpus(
        tokens_by_doc,
        pattern,
        window=window,
        case_insensitive=case_insensitive,
        valuetype=valuetype,
    )
    logger.info("Found %d matches for %r (window=%d).", len(kwic_df), pattern, window)

    results_dir = (run_cfg.get("paths", {}) or {}).get("results_dir", "outputs/results")
    ensure_dir_exists(results_dir)
    out_path = os.path.join(results_dir, f"kwic_{_safe_filename(pattern)}.csv")
    kwic_df.to_csv(out_path, index=False)
    logger.info("Saved KWIC report to %s", out_path)

    return kwic_df


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """
    Main entry point when running this module as a script.
    """
    _ = run_text_analysis()


if __name__ == "__main__":
    main()
