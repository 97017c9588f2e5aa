"""
Transaction import service.
Turns a bank export into stored transactions: detect format, parse, optionally
pre-categorize, bulk insert with duplicate-ignore, then refresh dependent views.
"""
import inspect
from typing import Any, Callable, List, Optional

from ledger.config import Settings, get_settings
from ledger.db import TransactionStore
from ledger.exceptions import FileReadError
from ledger.logger import setup_logger
from ledger.matching import categorize_records
from ledger.parsing import UNSUPPORTED_FORMAT_MESSAGE, detect_file_format, parse_transactions
from ledger.schema import ImportOutcome, NormalizedTransactionRecord, RawFile

logger = setup_logger(__name__)

RefreshCallback = Callable[[], Any]


class TransactionImportService:
    """Imports bank exports into an injected transaction store."""

    def __init__(
        self,
        store: TransactionStore,
        refresh: Optional[RefreshCallback] = None,
        settings: Optional[Settings] = None,
        auto_categorize: Optional[bool] = None,
    ):
        """
        Initialize import service.

        Args:
            store: Store adapter providing bulk_insert and list_all_with_category
            refresh: Zero-argument callback (sync or async) run after a successful import
            settings: Settings override (defaults to the global settings)
            auto_categorize: Pre-fill categories from history before inserting
                (defaults to settings.auto_categorize)
        """
        self.store = store
        self.refresh = refresh
        self.settings = settings or get_settings()
        self.auto_categorize = (
            self.settings.auto_categorize if auto_categorize is None else auto_categorize
        )

    async def _notify_refresh(self) -> None:
        """Run the refresh callback; a failing view refresh never undoes the import."""
        if self.refresh is None:
            return
        try:
            result = self.refresh()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Refreshing transaction views failed: {e}", exc_info=True)

    async def _categorize(self, records: List[NormalizedTransactionRecord]):
        history = await self.store.list_all_with_category()
        return categorize_records(
            records,
            history,
            fuzzy=True,
            max_distance=self.settings.fuzzy_max_distance,
        )

    async def import_file(self, raw_file: RawFile) -> ImportOutcome:
        """
        Import one bank export.

        Args:
            raw_file: File picked by the user

        Returns:
            ImportOutcome with added/duplicate/invalid counts; error is set when
            the format is unsupported, the file cannot be read or parsed, or the
            store rejects the insert. Nothing is retried.
        """
        file_format = detect_file_format(raw_file.filename)
        if file_format is None:
            logger.warning(f"Rejected {raw_file.filename}: unsupported format")
            return ImportOutcome(error=UNSUPPORTED_FORMAT_MESSAGE)

        try:
            text = await raw_file.text()
        except FileReadError as e:
            logger.error(f"{e.message} ({e.details.get('error')})")
            return ImportOutcome(file_format=file_format, error=e.message)

        return await self._import_text(raw_file.filename, text, file_format)

    async def import_text(self, filename: str, text: str) -> ImportOutcome:
        """Import already-decoded export text; the filename selects the parser."""
        return await self.import_file(RawFile(filename=filename, content=text))

    async def _import_text(self, filename: str, text: str, file_format: str) -> ImportOutcome:
        logger.info(f"Importing {file_format} file: {filename}")

        # 1. Parse
        parsed = parse_transactions(text, file_format)
        if parsed.error:
            logger.warning(f"Parsing {filename} failed: {parsed.error}")
            return ImportOutcome(
                file_format=file_format,
                invalid_count=parsed.invalid_count,
                error=parsed.error,
            )

        records = parsed.records
        if not records:
            logger.info(f"No valid transactions in {filename}")
            return ImportOutcome(file_format=file_format, invalid_count=parsed.invalid_count)

        # 2. Store (optionally pre-categorized)
        categorized_count = 0
        try:
            if self.auto_categorize:
                records, categorized_count = await self._categorize(records)
            inserted = await self.store.bulk_insert(records)
        except Exception as e:
            logger.error(f"Storing transactions from {filename} failed: {e}", exc_info=True)
            return ImportOutcome(
                file_format=file_format,
                invalid_count=parsed.invalid_count,
                error=getattr(e, "message", None) or str(e) or type(e).__name__,
            )

        submitted = len(records)
        added = len(inserted or [])
        outcome = ImportOutcome(
            added_count=added,
            duplicate_count=max(submitted - added, 0),
            invalid_count=parsed.invalid_count,
            categorized_count=categorized_count,
            file_format=file_format,
        )
        logger.info(
            f"Imported {filename}: {outcome.added_count} added, "
            f"{outcome.duplicate_count} duplicates, {outcome.invalid_count} invalid"
        )

        # 3. Refresh dependent views
        await self._notify_refresh()
        return outcome
