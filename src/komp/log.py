"""Logging setup."""

import sys

from loguru import logger


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr, debug records only when verbose."""
    logger.enable("komp")
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        colorize=True,
    )
