"""
Exception hierarchy for the ingestion and classification core.

Parsers raise these internally and turn them into result objects at their
public boundary; only the store adapter lets StoreError escape, and the
import service converts it into an ImportOutcome.
"""
from typing import Any, Dict, Optional


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception.

        Args:
            message: Human readable error message
            details: Additional context (file name, missing columns, ...)
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class FileReadError(LedgerError):
    """Raised when file contents cannot be read or decoded."""
    pass


class ParsingError(LedgerError):
    """Raised when a bank export cannot be parsed."""
    pass


class HeaderMissingError(ParsingError):
    """Raised when a CSV export lacks one of the required columns."""
    pass


class StoreError(LedgerError):
    """Raised when the transaction store rejects a read or write."""
    pass
