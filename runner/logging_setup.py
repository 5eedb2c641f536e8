"""
Logging setup for competitor-intel.

All services log through children of the "competitor_intel" logger, so a
single setup (or set_log_level call) governs the whole analysis.

This module provides:
- Console handler on stdout plus a rotating file under COMPETITOR_LOG_DIR
- Namespaced service loggers (get_logger("GapScorer") -> competitor_intel.GapScorer)
- Job-scoped adapter that prefixes records with the analysis job id

Usage:
    from runner.logging_setup import get_logger, get_job_logger

    logger = get_logger("GapScorer")
    logger.info("Starting gap analysis")

    job_logger = get_job_logger("3f2a...")
    job_logger.info("crawling")        # -> "[job 3f2a...] crawling"
"""

import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

from dotenv import load_dotenv


# Load environment
load_dotenv()

ROOT_LOGGER_NAME = "competitor_intel"
DEFAULT_LOG_DIR = "logs/competitor_intel"

CONSOLE_FORMAT = "%(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

MAX_LOG_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_BACKUP_COUNT = 5


def _resolve_level(level: Union[str, int, None]) -> int:
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def _file_logging_enabled() -> bool:
    return os.getenv("COMPETITOR_LOG_TO_FILE", "true").lower() in ("1", "true", "yes")


def setup_logging(
    log_level: Union[str, int, None] = None,
    log_dir: Optional[str] = None,
    log_to_file: Optional[bool] = None,
) -> logging.Logger:
    """
    Configure the competitor_intel root logger.

    Safe to call again: existing handlers are replaced, never duplicated.

    Args:
        log_level: Level name or number (default: LOG_LEVEL env var or INFO)
        log_dir: Directory for competitor_intel.log (default: COMPETITOR_LOG_DIR)
        log_to_file: Attach the rotating file handler (default: COMPETITOR_LOG_TO_FILE)

    Returns:
        The configured root logger
    """
    level = _resolve_level(log_level)

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    root.propagate = False

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root.addHandler(console_handler)

    if log_to_file is None:
        log_to_file = _file_logging_enabled()

    log_file = None
    if log_to_file:
        logs_dir = Path(log_dir or os.getenv("COMPETITOR_LOG_DIR", DEFAULT_LOG_DIR))
        logs_dir.mkdir(parents=True, exist_ok=True)
        log_file = logs_dir / f"{ROOT_LOGGER_NAME}.log"

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUP_COUNT,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(file_handler)

    root.debug(f"Logging initialized: level={logging.getLevelName(level)}, file={log_file or '-'}")
    return root


def get_logger(name: str) -> logging.Logger:
    """
    Service logger under the competitor_intel namespace.

    Sets up the root logger on first use.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        setup_logging()
    return root.getChild(name)


def set_log_level(level: Union[str, int]):
    """Change the level of the root logger and all of its handlers."""
    numeric_level = _resolve_level(level)
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        setup_logging(numeric_level)
        return
    root.setLevel(numeric_level)
    for handler in root.handlers:
        handler.setLevel(numeric_level)


class JobLogAdapter(logging.LoggerAdapter):
    """Prefixes every message with the owning job id."""

    def process(self, msg, kwargs):
        return f"[job {self.extra['job_id']}] {msg}", kwargs


def get_job_logger(job_id: str) -> JobLogAdapter:
    return JobLogAdapter(get_logger("AnalysisJob"), {"job_id": job_id})
