"""Logging setup for autoscorer runs."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

# HTTP stack used by the DataGolf fetcher
LIBRARY_LOGGERS = ('urllib3', 'requests')

FILE_FORMAT = '%(asctime)s %(levelname)-7s %(name)s [%(filename)s:%(lineno)d] %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'


def log_level_for(verbose: bool = False, quiet: bool = False) -> int:
    """Console level for the CLI's --verbose / --quiet flags (verbose wins)."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    run_name: str = 'pgc',
    console: bool = True,
) -> logging.Logger:
    """
    Configure the ``pgc`` logger hierarchy for one CLI run.

    Console output goes to stderr so standings printed on stdout stay
    pipeable. When ``log_dir`` is given, a ``<run_name>_<timestamp>.log``
    file captures everything at DEBUG regardless of the console level.

    Args:
        level: Console level, usually from log_level_for()
        log_dir: Directory for a per-run log file (None = no file)
        run_name: Log file prefix, e.g. the CLI subcommand
        console: Whether to attach the stderr handler

    Returns:
        The ``pgc`` logger
    """
    logger = logging.getLogger('pgc')
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []

    logger.setLevel(logging.DEBUG if log_dir is not None else level)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        file_handler = logging.FileHandler(log_dir / f'{run_name}_{stamp}.log', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    # Connection-pool chatter drowns out feed retries at DEBUG
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return logger
