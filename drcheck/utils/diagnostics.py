"""
Diagnostics channel helpers.

Components never look a logger up on their own; the caller passes one in.
default_logger() provides a usable one for scripts and tests so that
messages are not silently dropped when no handler is configured.
"""

import logging
from typing import Optional, Sequence

LOGGER_NAME = "drcheck"


def default_logger(level: int = logging.INFO) -> logging.Logger:
    """
    Return the package logger, attaching a stream handler if it has none.

    Args:
        level: Level applied when the handler is first attached

    Returns:
        Standard library logging.Logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(level)
    return logger


def resolve_logger(logger: Optional[logging.Logger]) -> logging.Logger:
    return logger if logger is not None else default_logger()


def fmt(value: float) -> str:
    """Format a number with at most three decimals ("1.5", "0.333", "2")."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def fmt_xyz(vector: Optional[Sequence[float]]) -> str:
    if vector is None or len(vector) != 3:
        return "unavailable"
    return f"X={fmt(vector[0])},Y={fmt(vector[1])},Z={fmt(vector[2])}"


def fmt_euler(angles: Optional[Sequence[float]]) -> str:
    if angles is None or len(angles) != 3:
        return "unavailable"
    return f"Phi={fmt(angles[0])},Theta={fmt(angles[1])},Psi={fmt(angles[2])}"
