"""
End-to-end tests for the analysis pipeline on the bundled sample dataset.

Configs are written to a temporary directory so outputs stay out of the
repository and stopwords come from scikit-learn (no NLTK download).
"""

from __future__ import annotations

import os

import pandas as pd
import pytest
import yaml

from nlp_primer.pipelines.run_analysis import (
    load_configured_corpus,
    run_kwic_report,
    run_text_analysis,
)
from nlp_primer.reporting.frequency import FREQUENCY_COLUMNS


ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SAMPLE_CSV = os.path.join(ROOT, "data", "sample", "speeches.csv")


@pytest.fixture
def configs(tmp_path):
    data_cfg = {
        "dataset": {
            "path": SAMPLE_CSV,
            "text_column": "text",
            "id_column": "doc_id",
            "drop_na_text": True,
        },
        "preprocessing": {
            "tokenize": {
                "remove_punct": True,
                "remove_numbers": True,
                "remove_symbols": True,
                "remove_url": True,
            },
            "lowercase": True,
            "stopwords": {"enabled": True, "language": "en", "source": "sklearn"},
            "reduction": {"method": "stem", "algorithm": "porter"},
        },
        "dfm": {"groups": None, "min_termfreq": None, "min_docfreq": None},
    }
    run_cfg = {
        "paths": {
            "results_dir": str(tmp_path / "results"),
            "logs_dir": str(tmp_path / "logs"),
        },
        "logging": {"level": "WARNING", "to_file": False},
        "parallel": {"n_jobs": 1},
        "reports": {"top_n": None, "kwic_window": 3},
    }

    data_path = tmp_path / "data.yaml"
    run_path = tmp_path / "run.yaml"
    data_path.write_text(yaml.safe_dump(data_cfg), encoding="utf-8")
    run_path.write_text(yaml.safe_dump(run_cfg), encoding="utf-8")
    return str(data_path), str(run_path), tmp_path


def test_load_configured_corpus(configs):
    data_path, _, _ = configs
    corpus, preprocessing_cfg, data_cfg = load_configured_corpus(data_path)

    assert len(corpus) == 6
    assert corpus.ids[0] == "uk_2019"
    assert "the" in preprocessing_cfg.stopwords
    assert data_cfg["dfm"]["groups"] is None


def test_run_text_analysis_writes_frequency_table(configs):
    data_path, run_path, tmp_path = configs

    freq_df = run_text_analysis(data_config_path=data_path, run_config_path=run_path)

    out_path = tmp_path / "results" / "frequency.csv"
    assert out_path.exists()
    assert (tmp_path / "results" / "corpus_summary.csv").exists()

    assert list(freq_df.columns) == FREQUENCY_COLUMNS
    counts = freq_df["frequency"].tolist()
    assert counts == sorted(counts, reverse=True)

    by_feature = freq_df.set_index("feature")
    assert by_feature.loc["economi", "frequency"] == 3
    assert by_feature.loc["health", "docfreq"] == 3
    assert "the" not in by_feature.index

    saved = pd.read_csv(out_path)
    assert saved["feature"].tolist() == freq_df["feature"].tolist()


def test_run_text_analysis_groups_and_trims(configs, tmp_path):
    data_path, run_path, _ = configs
    with open(data_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)
    cfg["dfm"] = {"groups": "country", "min_docfreq": 2}
    grouped_path = tmp_path / "grouped.yaml"
    grouped_path.write_text(yaml.safe_dump(cfg), encoding="utf-8")

    freq_df = run_text_analysis(data_config_path=str(grouped_path), run_config_path=run_path)

    # docfreq now counts countries
    assert freq_df["docfreq"].between(2, 3).all()
    assert "economi" in freq_df["feature"].tolist()


def test_run_kwic_report(configs):
    data_path, run_path, tmp_path = configs

    kwic_df = run_kwic_report(
        "econom*",
        data_config_path=data_path,
        run_config_path=run_path,
        window=2,
        case_insensitive=True,
    )

    assert len(kwic_df) == 3
    assert kwic_df["docname"].tolist() == ["uk_2019", "us_2019", "ie_2019"]
    assert kwic_df["keyword"].tolist() == ["economy", "economy", "economy"]
    # tokens keep their original case
    assert kwic_df["pre"].iloc[0] == "The"
    assert (tmp_path / "results" / "kwic_econom.csv").exists()


def test_kwic_script_logs_matches(configs, monkeypatch):
    data_path, run_path, tmp_path = configs
    with open(run_path, "r", encoding="utf-8") as f:
        run_cfg = yaml.safe_load(f)
    run_cfg["logging"] = {"level": "INFO", "to_file": True, "file_prefix": "script"}
    run_path_with_file = tmp_path / "run_file.yaml"
    run_path_with_file.write_text(yaml.safe_dump(run_cfg), encoding="utf-8")

    from scripts import run_kwic

    monkeypatch.setattr(
        "sys.argv",
        [
            "run_kwic",
            "econom*",
            "--ignore-case",
            "--data-config",
            data_path,
            "--run-config",
            str(run_path_with_file),
        ],
    )
    run_kwic.main()

    log_text = (tmp_path / "logs" / "script_kwic.log").read_text(encoding="utf-8")
    assert "Matches:" in log_text
    assert "uk_2019" in log_text
