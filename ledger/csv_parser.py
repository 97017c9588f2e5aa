"""
Parser for semicolon-delimited bank CSV exports.

The header row must name the columns "Date operation", "Libelle", "Debit" and
"Credit" (any order). A missing column rejects the whole file; a bad row is
skipped and counted as invalid.
"""
import re
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from ledger.config import get_settings
from ledger.dates import parse_date
from ledger.exceptions import HeaderMissingError, ParsingError
from ledger.logger import setup_logger
from ledger.schema import NormalizedTransactionRecord, ParseResult

logger = setup_logger(__name__)

DATE_COLUMN = "Date operation"
LABEL_COLUMN = "Libelle"
DEBIT_COLUMN = "Debit"
CREDIT_COLUMN = "Credit"

REQUIRED_COLUMNS: List[str] = [DATE_COLUMN, LABEL_COLUMN, DEBIT_COLUMN, CREDIT_COLUMN]

_LINE_SPLIT = re.compile(r"\r\n|\r|\n")


def clean_field(value: str) -> str:
    """Strip surrounding whitespace and one pair of surrounding double quotes."""
    value = value.strip()
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value.strip()


def parse_amount(value: str) -> Decimal:
    """
    Parse a comma-decimal amount ("1 234,56"). Blank means zero.

    Raises:
        ParsingError: If the value is not a number
    """
    cleaned = value.replace("\xa0", "").replace(" ", "").replace(",", ".")
    if not cleaned:
        return Decimal("0")

    try:
        amount = Decimal(cleaned)
    except InvalidOperation as e:
        raise ParsingError(f"Invalid amount: '{value}'", details={"value": value}) from e

    if not amount.is_finite():
        raise ParsingError(f"Invalid amount: '{value}'", details={"value": value})
    return amount


def locate_columns(header: List[str]) -> Dict[str, int]:
    """
    Map each required column to its index in the header row.

    Raises:
        HeaderMissingError: If any required column is absent
    """
    missing = [name for name in REQUIRED_COLUMNS if name not in header]
    if missing:
        raise HeaderMissingError(
            'Missing headers. Make sure the file contains "Date operation", "Libelle", "Debit", "Credit".',
            details={"missing_columns": missing, "available_columns": header}
        )
    return {name: header.index(name) for name in REQUIRED_COLUMNS}


def _parse_row(
    values: List[str],
    columns: Dict[str, int]
) -> Optional[NormalizedTransactionRecord]:
    label = values[columns[LABEL_COLUMN]]
    if not label:
        return None

    try:
        debit = parse_amount(values[columns[DEBIT_COLUMN]])
        credit = parse_amount(values[columns[CREDIT_COLUMN]])
    except ParsingError as e:
        logger.warning(e.message)
        return None

    transaction_date = parse_date(values[columns[DATE_COLUMN]])
    if not transaction_date:
        return None

    return NormalizedTransactionRecord(
        label=label,
        amount=credit - debit,
        transaction_date=transaction_date,
        category_id=None,
    )


def parse_csv_transactions(text: Optional[str], delimiter: Optional[str] = None) -> ParseResult:
    """
    Parse a CSV export into normalized transaction records.

    Args:
        text: Decoded file contents
        delimiter: Field separator (defaults to the configured one, ";")

    Returns:
        ParseResult with valid records and the number of skipped rows.
        On a fatal problem (empty file, missing headers) no records are
        returned and error is set.
    """
    if not text:
        return ParseResult(error="Unable to read file.")

    delimiter = delimiter or get_settings().csv_delimiter
    lines = [line for line in _LINE_SPLIT.split(text) if line.strip()]
    if len(lines) < 2:
        return ParseResult(error="The CSV file is empty or has no header row.")

    header = [clean_field(h) for h in lines[0].split(delimiter)]
    try:
        columns = locate_columns(header)
    except HeaderMissingError as e:
        logger.error(f"{e.message} Missing: {e.details['missing_columns']}")
        return ParseResult(error=e.message)

    min_fields = max(columns.values()) + 1
    records: List[NormalizedTransactionRecord] = []
    invalid_count = 0

    for line_number, line in enumerate(lines[1:], start=2):
        values = [clean_field(v) for v in line.split(delimiter)]
        if len(values) < min_fields:
            logger.debug(f"Line {line_number}: expected {min_fields} fields, got {len(values)}")
            invalid_count += 1
            continue

        record = _parse_row(values, columns)
        if record is None:
            logger.debug(f"Line {line_number}: skipped invalid row")
            invalid_count += 1
            continue

        records.append(record)

    logger.info(f"Parsed {len(records)} CSV transactions ({invalid_count} invalid rows)")
    return ParseResult(records=records, invalid_count=invalid_count)
