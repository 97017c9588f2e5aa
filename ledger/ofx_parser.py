"""
Minimal OFX (SGML) statement parser.

Each transaction sits in a <STMTTRN> block. Closing tags are optional in OFX 1.x,
so values are read up to the next tag or end of line.
"""
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from ledger.dates import format_ofx_date
from ledger.logger import setup_logger
from ledger.schema import NormalizedTransactionRecord, ParseResult

logger = setup_logger(__name__)

BLOCK_MARKER = "<STMTTRN>"
BLOCK_END = "</STMTTRN>"

AMOUNT_TAG = re.compile(r"<TRNAMT>([^<\n]+)")
DATE_TAG = re.compile(r"<DTPOSTED>([^<\n]+)")
MEMO_TAG = re.compile(r"<MEMO>([^<\n]+)")
NAME_TAG = re.compile(r"<NAME>([^<\n]+)")


def _tag_value(pattern: re.Pattern, block: str) -> Optional[str]:
    match = pattern.search(block)
    if not match:
        return None
    value = match.group(1).strip()
    return value or None


def _parse_block(block: str) -> Optional[NormalizedTransactionRecord]:
    """Build a record from one <STMTTRN> block, or None if it is incomplete."""
    end = block.find(BLOCK_END)
    if end != -1:
        block = block[:end]

    raw_amount = _tag_value(AMOUNT_TAG, block)
    raw_date = _tag_value(DATE_TAG, block)
    if raw_amount is None or raw_date is None:
        return None

    try:
        amount = Decimal(raw_amount.replace(",", "."))
    except InvalidOperation:
        amount = None
    if amount is None or not amount.is_finite():
        logger.warning(f"Ignoring OFX block with invalid amount: '{raw_amount}'")
        return None

    transaction_date = format_ofx_date(raw_date)
    if transaction_date is None:
        logger.warning(f"Ignoring OFX block with invalid date: '{raw_date}'")
        return None

    label = _tag_value(MEMO_TAG, block) or _tag_value(NAME_TAG, block)
    if not label:
        return None

    return NormalizedTransactionRecord(
        label=label,
        amount=amount,
        transaction_date=transaction_date,
        category_id=None,
    )


def parse_ofx_transactions(ofx_text: Optional[str]) -> ParseResult:
    """
    Parse OFX statement text into normalized transaction records.

    Blocks without an amount, a date or a label are counted as invalid.
    Any unexpected failure yields zero records and the error message.
    """
    try:
        ofx = (ofx_text or "").replace("\r", "")
        blocks = ofx.split(BLOCK_MARKER)[1:]

        records = []
        invalid_count = 0
        for block in blocks:
            record = _parse_block(block)
            if record is None:
                invalid_count += 1
                continue
            records.append(record)

        logger.info(f"Parsed {len(records)} OFX transactions ({invalid_count} invalid blocks)")
        return ParseResult(records=records, invalid_count=invalid_count)

    except Exception as e:
        logger.error(f"Failed to parse OFX content: {e}", exc_info=True)
        return ParseResult(error=str(e))
