"""
Logging configuration for treecarbon.

All modules obtain loggers through get_logger() so they share the
``treecarbon`` logger hierarchy. Nothing is emitted until the application
calls setup_logging() (or configures logging itself).
"""
import logging
from pathlib import Path
from typing import Optional, Union

__all__ = [
    'PACKAGE_LOGGER',
    'DEFAULT_FORMAT',
    'get_logger',
    'setup_logging',
    'log_pipeline_summary',
    'log_row_error',
]

PACKAGE_LOGGER = 'treecarbon'
DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Get a logger inside the package hierarchy.

    Args:
        name: Usually ``__name__`` of the calling module

    Returns:
        Logger instance
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + '.'):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    fmt: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Configure the package logger with a console handler and optional file.

    Calling this again replaces the handlers installed by the previous call.

    Args:
        level: Logging level name or number
        log_file: Optional path of a log file
        fmt: Log record format

    Returns:
        The configured package logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, '_treecarbon_handler', False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(fmt)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    console._treecarbon_handler = True
    logger.addHandler(console)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setFormatter(formatter)
        file_handler._treecarbon_handler = True
        logger.addHandler(file_handler)

    return logger


def log_pipeline_summary(
    logger: logging.Logger,
    pipeline: str,
    n_rows: int,
    n_records: int,
    n_errors: int,
    n_incomplete: int,
) -> None:
    """Log the outcome of one pipeline run."""
    logger.info(
        "%s pipeline: %d rows -> %d records (%d rejected, %d without a second measurement)",
        pipeline, n_rows, n_records, n_errors, n_incomplete,
    )


def log_row_error(logger: logging.Logger, index: int, team: Optional[str], error: Exception) -> None:
    """Log a rejected input row."""
    logger.warning("Skipping row %d (team %s): %s", index, team, error)
