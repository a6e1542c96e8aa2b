"""
Keyword-in-context report for a text dataset.

Wraps `nlp_primer.pipelines.run_analysis.run_kwic_report` and writes
kwic_<pattern>.csv under the configured results directory.

Usage (from project root):

    python -m scripts.run_kwic "econom*" --window 3 --ignore-case
"""

from __future__ import annotations

import argparse

from nlp_primer.pipelines.run_analysis import run_kwic_report
from nlp_primer.utils.run_utils import get_logger, load_run_config


def parse_args() -> argparse.Namespace:
    """
    Parse command-line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Show every occurrence of a keyword with its context."
    )
    parser.add_argument("pattern", type=str, help="Keyword or glob pattern (e.g. 'econom*').")
    parser.add_argument(
        "--window",
        type=int,
        default=None,
        help="Tokens of context on each side (default: reports.kwic_window).",
    )
    parser.add_argument(
        "--ignore-case",
        action="store_true",
        help="Match case-insensitively.",
    )
    parser.add_argument(
        "--fixed",
        action="store_true",
        help="Treat the pattern as an exact string instead of a glob.",
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
        name="run_kwic_script",
        config=run_cfg,
        log_file_suffix="kwic",
    )
    logger.info("=" * 80)
    logger.info("Starting KWIC report for %r.", args.pattern)

    kwic_df = run_kwic_report(
        pattern=args.pattern,
        data_config_path=args.data_config,
        run_config_path=args.run_config,
        window=args.window,
        case_insensitive=args.ignore_case,
        valuetype="fixed" if args.fixed else "glob",
        csv_path=args.csv,
    )

    if kwic_df.empty:
        logger.warning("No matches for %r.", args.pattern)
    else:
        logger.info("Matches:\n%s", kwic_df.to_string(index=False))


if __name__ == "__main__":
    main()
