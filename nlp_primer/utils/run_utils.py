"""
Run configuration and utility helpers.

This module centralizes common functionality used across the project:

- loading the global run configuration (config/run.yaml)
- ensuring directories exist before writing files
- constructing loggers that respect config/logging settings

The end-to-end pipeline and the scripts rely on these utilities; the
library modules themselves never configure logging.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional, Union

import yaml

from nlp_primer.errors import InvalidConfiguration


DEFAULT_RUN_CONFIG_PATH = "config/run.yaml"


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def load_run_config(
    config_path: str = DEFAULT_RUN_CONFIG_PATH,
) -> Dict[str, Any]:
    """
    Load and return the global run configuration dictionary.

    Parameters
    ----------
    config_path : str
        Path to the run YAML configuration file.

    Returns
    -------
    Dict[str, Any]
        Parsed configuration with sections such as "paths", "logging",
        "parallel" and "reports".

    Raises
    ------
    FileNotFoundError
        If the YAML file does not exist.
    ValueError
        If the YAML file is empty or cannot be parsed.
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Run config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)

    if cfg is None:
        raise ValueError(f"Run config file is empty or invalid: {config_path}")

    # Downstream code reads the keys it needs with .get() defaults.
    return cfg


# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------


def ensure_dir_exists(path: str) -> None:
    """Create directory `path` (and parents) unless it is empty or exists."""
    if path:
        os.makedirs(path, exist_ok=True)


def get_n_jobs(run_cfg: Dict[str, Any]) -> int:
    """
    Number of worker processes for per-document preprocessing.

    Reads ``parallel.n_jobs`` from the run configuration; 1 means serial,
    -1 means one worker per CPU (joblib convention).
    """
    parallel_cfg = run_cfg.get("parallel", {}) or {}
    return int(parallel_cfg.get("n_jobs", 1))


# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_log_level(level: Union[str, int, None]) -> int:
    """
    Resolve ``logging.level`` from the run config.

    Accepts a level name (case-insensitive) or a numeric level; None means
    INFO.

    Raises
    ------
    InvalidConfiguration
        If the name is not one of LOG_LEVELS.
    """
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    name = str(level).strip().upper()
    if name not in LOG_LEVELS:
        raise InvalidConfiguration(
            f"Unknown logging level {level!r}; expected one of {LOG_LEVELS}"
        )
    return getattr(logging, name)


def log_file_path(
    config: Dict[str, Any],
    log_file_suffix: Optional[str] = None,
) -> Optional[str]:
    """
    Path of the run's log file, or None when ``logging.to_file`` is off.

    The file is ``<paths.logs_dir>/<logging.file_prefix>[_<suffix>].log``.
    """
    logging_cfg = config.get("logging", {}) or {}
    if not logging_cfg.get("to_file", True):
        return None

    logs_dir = (config.get("paths", {}) or {}).get("logs_dir", "outputs/logs")
    stem = logging_cfg.get("file_prefix", "nlp_primer")
    if log_file_suffix:
        stem = f"{stem}_{log_file_suffix}"
    return os.path.join(logs_dir, f"{stem}.log")


def get_logger(
    name: str,
    config: Dict[str, Any],
    log_file_suffix: Optional[str] = None,
) -> logging.Logger:
    """
    Logger for a pipeline run, configured from the run config.

    Messages go to the console and, unless ``logging.to_file`` is false, to
    `log_file_path(config, log_file_suffix)`. A logger that already has
    handlers is returned unchanged, so repeated calls do not duplicate
    output.

    Parameters
    ----------
    name : str
        Logger name.
    config : Dict[str, Any]
        Global run configuration.
    log_file_suffix : Optional[str]
        Appended to the log file name (e.g., "frequency", "kwic").

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = _parse_log_level((config.get("logging", {}) or {}).get("level"))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    path = log_file_path(config, log_file_suffix)
    if path is not None:
        ensure_dir_exists(os.path.dirname(path))
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    logger.propagate = False
    return logger
