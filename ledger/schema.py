"""
Pydantic models for the ingestion and classification core.
All models are value objects: produced by one step, consumed by the next.
"""
import asyncio
import re
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from ledger.exceptions import FileReadError

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

CategoryId = Union[int, str]


def normalize_amount(amount: Decimal) -> str:
    """Render an amount in plain notation without trailing zeros ("-3.50" -> "-3.5")."""
    normalized = amount.normalize()
    if normalized == 0:
        return "0"
    return format(normalized, "f")


class RawFile(BaseModel):
    """
    File handed over by the file picker.
    The filename is only used to infer the format.
    """
    filename: str
    content: Optional[Union[bytes, str]] = None
    path: Optional[Path] = None

    @model_validator(mode="after")
    def check_source(self):
        if self.content is None and self.path is None:
            raise ValueError("RawFile needs either content or a path")
        return self

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "RawFile":
        path = Path(path)
        return cls(filename=path.name, path=path)

    async def text(self) -> str:
        """
        Read and decode the file contents as UTF-8 (a leading BOM is dropped).

        Raises:
            FileReadError: If the file cannot be read or is not valid UTF-8
        """
        data = self.content
        if data is None:
            loop = asyncio.get_event_loop()
            try:
                data = await loop.run_in_executor(None, self.path.read_bytes)
            except OSError as e:
                raise FileReadError(
                    f"Unable to read file: {self.filename}",
                    details={"filename": self.filename, "error": str(e)}
                ) from e

        if isinstance(data, str):
            return data.lstrip("\ufeff")

        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FileReadError(
                f"File is not valid UTF-8 text: {self.filename}",
                details={"filename": self.filename, "error": str(e)}
            ) from e


class NormalizedTransactionRecord(BaseModel):
    """A parsed, validated transaction ready for storage."""
    label: str = Field(..., min_length=1)
    amount: Decimal = Field(..., description="Signed amount, credit positive / debit negative")
    transaction_date: str = Field(..., description="Calendar date as YYYY-MM-DD")
    category_id: Optional[CategoryId] = None

    @field_validator("label")
    @classmethod
    def validate_label(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Label cannot be empty")
        return v

    @field_validator("transaction_date")
    @classmethod
    def validate_date(cls, v):
        """Only the zero-padded shape is checked, not calendar validity."""
        if not ISO_DATE_PATTERN.match(v):
            raise ValueError(f"Transaction date must be YYYY-MM-DD, got '{v}'")
        return v

    def dedup_key(self, owner_id: str) -> Tuple[str, str, str, str]:
        """Natural key the store enforces uniqueness on."""
        return (self.label, normalize_amount(self.amount), self.transaction_date, owner_id)


class ParseResult(BaseModel):
    """Output of a format parser. Parsers never raise; they set error instead."""
    records: List[NormalizedTransactionRecord] = Field(default_factory=list)
    invalid_count: int = Field(default=0, ge=0)
    error: Optional[str] = None


class ImportOutcome(BaseModel):
    """Counts reported back to the caller after one import."""
    added_count: int = Field(default=0, ge=0)
    duplicate_count: int = Field(default=0, ge=0)
    invalid_count: int = Field(default=0, ge=0)
    categorized_count: int = Field(default=0, ge=0)
    file_format: Optional[str] = None
    error: Optional[str] = None


class Category(BaseModel):
    """Category owned by the external store; read-only here."""
    id: CategoryId
    label: str


class HistoricalTransaction(BaseModel):
    """Previously stored transaction annotated with its resolved category."""
    label: Optional[str] = None
    amount: Optional[Decimal] = None
    transaction_date: Optional[str] = None
    category: Optional[Category] = None


class RecurringEstimate(BaseModel):
    """Forecast of the next occurrence of a recurring transaction."""
    estimated_day_of_month: int = Field(..., ge=1, le=31)
    next_amount: Decimal

