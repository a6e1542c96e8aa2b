"""
Dataset loading utilities for tabular text collections.

This module is responsible for:
- reading the dataset configuration from config/data.yaml
- loading the raw CSV file into a pandas DataFrame
- validating the text (and optional id) columns
- applying basic cleaning (drop NA, drop duplicates) as configured

The resulting DataFrame is handed to `corpus_from_dataframe`, which keeps
every non-text column as document metadata (e.g. country, author).
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

import pandas as pd
import yaml


DEFAULT_DATA_CONFIG_PATH = "config/data.yaml"


def _load_yaml(path: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file and return it as a dictionary.

    Parameters
    ----------
    path : str
        Path to the YAML file.

    Returns
    -------
    Dict[str, Any]
        Parsed YAML content.

    Raises
    ------
    FileNotFoundError
        If the YAML file does not exist.
    ValueError
        If the YAML file is empty or cannot be parsed.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)

    if cfg is None:
        raise ValueError(f"Config file is empty or invalid: {path}")

    return cfg


def load_data_config(config_path: str = DEFAULT_DATA_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load and return the full data configuration dictionary.

    Parameters
    ----------
    config_path : str, optional
        Path to the data YAML configuration file.

    Returns
    -------
    Dict[str, Any]
        Dictionary containing the "dataset", "preprocessing" and "dfm"
        sections, plus an optional "resources" section.
    """
    cfg = _load_yaml(config_path)

    for section in ("dataset", "preprocessing", "dfm"):
        if section not in cfg:
            raise KeyError(f'Missing "{section}" section in data config: {config_path}')

    return cfg


def get_resource_registry(
    cfg: Dict[str, Any],
    kind: str,
    config_path: Optional[str] = None,
) -> Dict[str, str]:
    """
    Return the identifier -> file path registry for a resource kind.

    Relative paths in the registry are resolved against the directory that
    holds the project root (the parent of the config directory) when
    `config_path` is given, so the registry works from any working
    directory.

    Parameters
    ----------
    cfg : Dict[str, Any]
        Full data configuration.
    kind : str
        Resource kind, e.g. "lemma_tables" or "stopwords".
    config_path : Optional[str]
        Path the configuration was loaded from.

    Returns
    -------
    Dict[str, str]
        Mapping from identifier (e.g. "en") to a file path.
    """
    resources_cfg = cfg.get("resources", {}) or {}
    registry = dict(resources_cfg.get(kind, {}) or {})

    if config_path is None:
        return registry

    root = os.path.dirname(os.path.dirname(os.path.abspath(config_path)))
    return {
        key: path if os.path.isabs(path) else os.path.join(root, path)
        for key, path in registry.items()
    }


def load_text_dataset(
    config_path: str = DEFAULT_DATA_CONFIG_PATH,
    csv_path: Optional[str] = None,
) -> pd.DataFrame:
    """
    Load a tabular text dataset according to the configuration.

    This function:
    - reads the CSV specified in config/data.yaml (or `csv_path`)
    - ensures the text column (and id column, if configured) exist
    - optionally drops NA text rows and duplicates
    - renames the text column to "text" and the id column to "doc_id"

    Parameters
    ----------
    config_path : str, optional
        Path to the data YAML configuration file.
    csv_path : Optional[str]
        Overrides ``dataset.path`` from the configuration.

    Returns
    -------
    pd.DataFrame
        DataFrame with a "text" column, an optional "doc_id" column and
        all remaining columns untouched.

    Raises
    ------
    FileNotFoundError
        If the dataset CSV file cannot be found.
    ValueError
        If required columns are missing.
    """
    cfg = load_data_config(config_path)
    dataset_cfg = cfg["dataset"]

    csv_path = csv_path or dataset_cfg.get("path", "data/raw/texts.csv")
    text_column = dataset_cfg.get("text_column", "text")
    id_column = dataset_cfg.get("id_column")
    drop_duplicates = bool(dataset_cfg.get("drop_duplicates", False))
    drop_na_text = bool(dataset_cfg.get("drop_na_text", True))

    if not os.path.exists(csv_path):
        raise FileNotFoundError(f"Dataset CSV not found at: {csv_path}")

    df = pd.read_csv(csv_path)

    required = [text_column] + ([id_column] if id_column else [])
    missing_cols = [col for col in required if col not in df.columns]
    if missing_cols:
        raise ValueError(
            f"Missing required column(s) in dataset CSV: {missing_cols}. "
            f"Available columns: {list(df.columns)}"
        )

    # Text is read verbatim: "2020" stays a string and "NA" is a document.
    # Only empty cells count as missing text.
    raw_text = pd.read_csv(
        csv_path,
        usecols=[text_column],
        dtype=str,
        keep_default_na=False,
    )[text_column]
    df[text_column] = raw_text.where(raw_text != "")

    if drop_na_text:
        df = df.dropna(subset=[text_column])

    if drop_duplicates:
        df = df.drop_duplicates(subset=[text_column], keep="first")

    renames = {}
    if text_column != "text":
        renames[text_column] = "text"
    if id_column and id_column != "doc_id":
        renames[id_column] = "doc_id"
    if renames:
        df = df.rename(columns=renames)

    return df.reset_index(drop=True)
