"""
Logging configuration for memscope.

Handlers live on the ``memscope`` logger, not the root logger, so a program
that embeds the scanner keeps its own logging setup. Records render through
rich next to the result tables; an optional plain-text file log receives
the same records.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "memscope"

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# ScanConfig.verbosity -> logging level
VERBOSITY_LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}


def level_for(verbosity: str) -> int:
    """Logging level for a verbosity name (quiet, normal, verbose)."""
    try:
        return VERBOSITY_LEVELS[verbosity]
    except KeyError:
        raise ValueError(f"Unknown verbosity: {verbosity!r}") from None


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[str] = None,
    verbosity: Optional[str] = None,
) -> logging.Logger:
    """
    Install rich (and optionally file) handlers on the memscope logger.

    Calling again replaces the handlers from the previous call, so the CLI
    can set up early logging from its flags and re-apply it once the merged
    configuration (TOML files, MEMSCOPE_VERBOSITY) is known.

    Args:
        verbose: Enable DEBUG level logging
        quiet: Suppress all but ERROR level logging
        log_file: Optional file path to append logs to
        verbosity: Verbosity name from ScanConfig; overrides the two flags

    Returns:
        The configured memscope logger
    """
    if verbosity is None:
        verbosity = "quiet" if quiet else "verbose" if verbose else "normal"
    level = level_for(verbosity)
    detailed = level <= logging.DEBUG

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=detailed,
            markup=False,
            show_time=detailed,
            show_path=detailed,
        )
    )

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    logger.setLevel(level)
    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger under the memscope namespace.

    Args:
        name: Module name (e.g. ``memscope.scanning.scanner``); names outside
              the namespace are prefixed with ``memscope.``.
              If None, returns the root memscope logger

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER)

    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"

    return logging.getLogger(name)
