"""
Build a document-feature matrix and a term frequency table.

This script is a convenience wrapper around
`nlp_primer.pipelines.run_analysis.run_text_analysis`, which:

- loads the configured CSV dataset into a corpus
- tokenizes, lowercases, removes stopwords and stems/lemmatizes
- builds the document-feature matrix (grouped/trimmed per config)
- writes frequency.csv and corpus_summary.csv under outputs/results/

Usage (from project root):

    python -m scripts.run_frequency
    # or
    python scripts/run_frequency.py --csv path/to/texts.csv
"""

from __future__ import annotations

import argparse

from nlp_primer.pipelines.run_analysis import run_text_analysis
from nlp_primer.utils.run_utils import load_run_config, get_logger


def parse_args() -> argparse.Namespace:
    """
    Parse command-line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Compute term frequencies for a text dataset."
    )
    parser.add_argument(
        "--data-config",
        type=str,
        default="config/data.yaml",
        help="Path to data config YAML (default: config/data.yaml).",
    )
    parser.add_argument(
        "--run-config",
        type=str,
        default="config/run.yaml",
        help="Path to run config YAML (default: config/run.yaml).",
    )
    parser.add_argument(
        "--csv",
        type=str,
        default=None,
        help="Dataset CSV overriding dataset.path from the data config.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    run_cfg = load_run_config(args.run_config)
    logger = get_logger(
        name="run_frequency",
        config=run_cfg,
        log_file_suffix="frequency",
    )

    logger.info("=" * 80)
    logger.info("Starting frequency analysis.")
    logger.info("Configs: data=%s, run=%s", args.data_config, args.run_config)

    freq_df = run_text_analysis(
        data_config_path=args.data_config,
        run_config_path=args.run_config,
        csv_path=args.csv,
    )

    logger.info("Frequency analysis completed with %d features.", len(freq_df))


if __name__ == "__main__":
    main()
