"""
Next-occurrence estimate for recurring transactions (rent, subscriptions...).

Dates are read component-wise, with the same leniency as the import parsers,
so a stored "2024-02-31" counts as day 31 of February 2024.
"""
from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from ledger.dates import split_iso_date
from ledger.logger import setup_logger
from ledger.schema import HistoricalTransaction, RecurringEstimate

logger = setup_logger(__name__)


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def _to_amount(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


def _to_frame(transactions: Iterable[Any]) -> Optional[pd.DataFrame]:
    """
    Build a date-sorted frame with year/month/day/amount columns.
    Items without a readable date or amount are skipped with a warning.
    """
    rows = []
    skipped = 0
    for t in transactions or []:
        parts = split_iso_date(_field(t, "date"))
        amount = _to_amount(_field(t, "amount"))
        if parts is None or amount is None:
            skipped += 1
            continue
        year, month, day = parts
        rows.append({"year": year, "month": month, "day": day, "amount": amount})

    if skipped:
        logger.warning(f"Skipped {skipped} transactions without a valid date or amount")
    if not rows:
        return None

    frame = pd.DataFrame(rows, columns=["year", "month", "day", "amount"])
    # Months since year 0, so December steps back to November naturally
    frame["month_index"] = frame["year"] * 12 + frame["month"] - 1
    return frame.sort_values(["month_index", "day"], kind="stable").reset_index(drop=True)


def estimate_next_recurring(transactions: Iterable[Any]) -> Optional[RecurringEstimate]:
    """
    Estimate the day of month and amount of the next occurrence.

    Args:
        transactions: Items (mappings or objects) with a "date" (ISO date)
            and an "amount"; order does not matter

    Returns:
        RecurringEstimate, or None when no item has a valid date and amount.
        The day is the rounded mean day of month. The amount is the total of the month preceding
        the latest transaction, or the latest amount if that month is empty.
    """
    frame = _to_frame(transactions)
    if frame is None:
        return None

    mean_day = Decimal(str(frame["day"].mean()))
    estimated_day = int(mean_day.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    latest = frame.iloc[-1]
    previous_month = latest["month_index"] - 1
    in_previous_month = frame["month_index"] == previous_month

    if in_previous_month.any():
        next_amount = sum(frame.loc[in_previous_month, "amount"], Decimal("0"))
    else:
        next_amount = latest["amount"]

    logger.debug(
        f"Recurring estimate over {len(frame)} transactions: day={estimated_day}, "
        f"amount={next_amount} (previous month {previous_month // 12}-{previous_month % 12 + 1:02d})"
    )
    return RecurringEstimate(estimated_day_of_month=estimated_day, next_amount=next_amount)


def estimate_by_category(history: Iterable[HistoricalTransaction]) -> Dict[str, RecurringEstimate]:
    """
    Run the estimator once per category.

    Transactions without a category, a date or an amount are ignored.

    Returns:
        Mapping of str(category id) to its estimate
    """
    grouped: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for tx in history:
        if tx.category is None or not tx.transaction_date or tx.amount is None:
            continue
        grouped[str(tx.category.id)].append({"date": tx.transaction_date, "amount": tx.amount})

    estimates = {}
    for category_id, items in grouped.items():
        estimate = estimate_next_recurring(items)
        if estimate is not None:
            estimates[category_id] = estimate

    logger.info(f"Computed recurring estimates for {len(estimates)} categories")
    return estimates
