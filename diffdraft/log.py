"""Logging setup for diffdraft.

Library code logs through loguru's shared ``logger``; the CLI decides where
the records go by calling :func:`configure_logging`.
"""

import contextlib
import sys
from time import perf_counter

from loguru import logger

LOG_FORMAT = "<level>{level: <8}</level> | <cyan>{name}</cyan> - {message}"


def configure_logging(verbose: bool = False) -> None:
    """Route log records to stderr.

    Args:
        verbose: Emit DEBUG records when True, otherwise WARNING and above.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format=LOG_FORMAT,
        colorize=None,
    )


@contextlib.contextmanager
def time_block(label: str, level: str = "DEBUG"):
    """Log how long the wrapped block took, and whether it raised."""
    start = perf_counter()
    outcome = "failed"
    try:
        yield
        outcome = "done"
    finally:
        logger.log(level, f"{label} {outcome} in {perf_counter() - start:.2f}s")
