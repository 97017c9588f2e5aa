"""
Service layer for the ledger core.
"""
from ledger_services.import_service import TransactionImportService

__all__ = ["TransactionImportService"]
