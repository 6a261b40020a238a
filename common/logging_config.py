import logging
import os
import sys
from typing import Optional, TextIO

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
RUN_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [{run_label}] - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def resolve_log_level(log_level: Optional[str] = None) -> int:
    """
    Resolve a textual log level to a logging constant.

    Args:
        log_level: Level name. Defaults to FRAGMENTER_LOG_LEVEL, then LOG_LEVEL, then INFO

    Returns:
        Numeric logging level (unknown names fall back to INFO)
    """
    if log_level is None:
        log_level = os.getenv('FRAGMENTER_LOG_LEVEL') or os.getenv('LOG_LEVEL', 'INFO')
    return getattr(logging, log_level.upper(), logging.INFO)


def _build_formatter(run_label: Optional[str]) -> logging.Formatter:
    if run_label:
        return logging.Formatter(RUN_LOG_FORMAT.format(run_label=run_label), datefmt=DATE_FORMAT)
    return logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(
    component_name: str,
    log_level: Optional[str] = None,
    run_label: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Set up logging configuration for a component.

    Log output goes to stderr by default: stdout may be carrying a
    reconstructed stream or a digest.

    Args:
        component_name: Name of the component (e.g., 'cli', 'fragmenter', 'common')
        log_level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to env vars or INFO
        run_label: Optional label included in every line (e.g. the command being run)
        stream: Optional text stream for the handler (defaults to sys.stderr)

    Returns:
        Configured logger instance
    """
    level = resolve_log_level(log_level)

    logger = logging.getLogger(component_name)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(_build_formatter(run_label))

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def set_run_label(logger: logging.Logger, run_label: str) -> None:
    """
    Update logger handlers to include a run label in format.

    Args:
        logger: Logger instance to update
        run_label: Label to include
    """
    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler):
            handler.setFormatter(_build_formatter(run_label))
