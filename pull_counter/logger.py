"""Logging for the pull counter: one dated log file per day plus the console."""
import logging
import os
import sys
import time
from pathlib import Path
from datetime import datetime
from typing import Optional

ROOT_LOGGER_NAME = 'pull_counter'
LOG_FILE_PREFIX = 'pull_counter_'

# Log files older than this are removed when logging is set up
LOG_RETENTION_DAYS = 14

DEBUG_ENV = 'PULL_COUNTER_DEBUG'
LOG_LEVEL_ENV = 'PULL_COUNTER_LOG_LEVEL'


class FlushingStreamHandler(logging.StreamHandler):
    """Console handler that flushes every record (stdout may be a pipe)."""

    def emit(self, record):
        super().emit(record)
        self.flush()


def resolve_log_level(debug: bool = False, level_name: Optional[str] = None) -> int:
    """
    Pick the log level from the command line, then the environment.

    --debug or PULL_COUNTER_DEBUG=1 wins over --log-level, which wins over
    PULL_COUNTER_LOG_LEVEL. Unknown names fall back to INFO.
    """
    if debug or os.getenv(DEBUG_ENV, '').lower() in ('1', 'true', 'yes'):
        return logging.DEBUG
    for name in (level_name, os.getenv(LOG_LEVEL_ENV)):
        if not name:
            continue
        level = getattr(logging, name.upper(), None)
        if isinstance(level, int):
            return level
    return logging.INFO


def prune_old_logs(log_dir: Path, keep_days: int = LOG_RETENTION_DAYS) -> int:
    """Delete dated log files older than keep_days. Returns how many were removed."""
    cutoff = time.time() - keep_days * 86400
    removed = 0
    for log_file in log_dir.glob(f"{LOG_FILE_PREFIX}*.log"):
        try:
            if log_file.stat().st_mtime < cutoff:
                log_file.unlink()
                removed += 1
        except OSError:
            # Still open in another instance
            continue
    return removed


def setup_logging(log_dir: Path, log_level: int = logging.INFO,
                  keep_days: int = LOG_RETENTION_DAYS) -> logging.Logger:
    """
    Configure the pull_counter logger tree.

    Args:
        log_dir: Directory for the dated log files (<data dir>/logs)
        log_level: Level for both the file and the console
        keep_days: Age after which old log files are deleted

    Returns:
        The application root logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level)
    logger.propagate = False

    # Replaces the warnings-only fallback handler, if any
    logger.handlers.clear()

    log_dir.mkdir(parents=True, exist_ok=True)
    removed = prune_old_logs(log_dir, keep_days)
    log_file = log_dir / f"{LOG_FILE_PREFIX}{datetime.now().strftime('%Y%m%d')}.log"

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(log_level)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    logger.addHandler(file_handler)

    console_handler = FlushingStreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
        datefmt='%H:%M:%S'
    ))
    logger.addHandler(console_handler)

    logger.info("=" * 60)
    logger.info(f"Pull Counter logging to {log_file} ({logging.getLevelName(log_level)})")
    if removed:
        logger.info(f"Removed {removed} log file(s) older than {keep_days} days")
    logger.info("=" * 60)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger under the pull_counter tree.

    Until setup_logging runs (tests, library use) the tree only prints
    warnings and errors to stderr.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + '.'):
        logger_name = name
    else:
        logger_name = f'{ROOT_LOGGER_NAME}.{name}'

    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(logging.WARNING)
        handler.setFormatter(logging.Formatter('%(levelname)s: %(name)s: %(message)s'))
        root.addHandler(handler)
        root.setLevel(logging.WARNING)
        root.propagate = False

    return logging.getLogger(logger_name)
