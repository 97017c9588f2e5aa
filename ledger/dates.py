"""
Date helpers for bank exports.

CSV exports carry day-first dates (DD/MM/YYYY); OFX carries YYYYMMDD[hhmmss...].
Both are converted to the canonical YYYY-MM-DD form. Only component ranges are
checked: 31/02/2024 is accepted.
"""
import re
from typing import Any, Optional, Tuple

from ledger.logger import setup_logger

logger = setup_logger(__name__)

ISO_DATE_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:$|[T ])")


def parse_date(date_str: Optional[str]) -> Optional[str]:
    """
    Convert a DD/MM/YYYY date to YYYY-MM-DD.

    Args:
        date_str: Raw date text from the export

    Returns:
        Canonical date string, or None when the text is not a valid date
    """
    if not date_str:
        return None

    parts = [part.strip() for part in date_str.strip().split("/")]
    if len(parts) == 3:
        day, month, year = parts
        if (
            day.isdecimal()
            and month.isdecimal()
            and year.isdecimal()
            and len(year) == 4
            and 1 <= int(day) <= 31
            and 1 <= int(month) <= 12
        ):
            return f"{year}-{int(month):02d}-{int(day):02d}"

    logger.warning(f"Ignoring invalid date: '{date_str}'")
    return None


def format_ofx_date(raw: Optional[str]) -> Optional[str]:
    """
    Convert an OFX DTPOSTED value (YYYYMMDD, optionally followed by time) to YYYY-MM-DD.

    Returns:
        Canonical date string, or None when fewer than 8 leading digits are present
    """
    if not raw:
        return None

    digits = raw.strip()[:8]
    if len(digits) != 8 or not digits.isdecimal():
        return None

    return f"{digits[:4]}-{digits[4:6]}-{digits[6:8]}"


def split_iso_date(value: Any) -> Optional[Tuple[int, int, int]]:
    """
    Read (year, month, day) from an ISO date or datetime value.

    Same leniency as parse_date: "2024-02-31" gives (2024, 2, 31).

    Args:
        value: "YYYY-MM-DD" text (optionally followed by a time), or a date/datetime

    Returns:
        Tuple of ints, or None when the value is not an ISO date or a
        component is out of range
    """
    if value is None:
        return None

    match = ISO_DATE_PREFIX.match(str(value).strip())
    if not match:
        return None

    year, month, day = (int(part) for part in match.groups())
    if not (1 <= month <= 12 and 1 <= day <= 31):
        return None
    return year, month, day
