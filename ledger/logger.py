"""
Logging configuration for the ledger core.
Transaction labels are personal data: log them through mask_label.
"""
import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Configure and return a logger instance.

    Args:
        name: Logger name (usually __name__)
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to env LOG_LEVEL or INFO.

    Returns:
        Configured logger instance
    """
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    numeric_level = getattr(logging, log_level, logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)

    # Avoid duplicate handlers
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(numeric_level)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    return logger


def mask_label(label: Optional[str], visible: int = 3) -> str:
    """
    Mask a transaction label for logging, keeping only its first characters.

    Args:
        label: Raw transaction label
        visible: Number of leading characters left readable

    Returns:
        Masked label, e.g. "Net****" for "Netflix"
    """
    if not label:
        return "<empty>"
    label = label.strip()
    if len(label) <= visible:
        return "*" * len(label)
    return label[:visible] + "*" * (len(label) - visible)
