"""
Category recommendation from previously labelled transactions.

A history row matches a target label when the normalized labels are equal or,
in fuzzy mode, within a small Levenshtein distance. Matching rows vote for
their category and the most frequent category wins.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import Levenshtein

from ledger.config import get_settings
from ledger.logger import mask_label, setup_logger
from ledger.schema import (
    Category,
    HistoricalTransaction,
    NormalizedTransactionRecord,
)

logger = setup_logger(__name__)


def normalize_label(text: Optional[str]) -> str:
    """
    Normalize a label for matching: trim and lowercase.

    Args:
        text: Input label

    Returns:
        Normalized label ("" for missing input)
    """
    if not text or not isinstance(text, str):
        return ""
    return text.strip().lower()


def as_label(target: Any) -> Optional[str]:
    """Extract a label from a string, a mapping or any object with a label attribute."""
    if target is None or isinstance(target, str):
        return target
    if isinstance(target, dict):
        return target.get("label")
    return getattr(target, "label", None)


def levenshtein_distance(a: str, b: str) -> int:
    """
    Minimum number of single-character insertions, deletions or substitutions
    turning a into b (unit costs).
    """
    return Levenshtein.distance(a, b)


def labels_match(target: str, candidate: str, fuzzy: bool, max_distance: int) -> bool:
    """Both labels are expected to be normalized already."""
    if target == candidate:
        return True
    if not fuzzy:
        return False
    # Length gap is a lower bound of the distance
    if abs(len(target) - len(candidate)) > max_distance:
        return False
    return levenshtein_distance(target, candidate) <= max_distance


@dataclass
class _Vote:
    category: Category
    count: int = 0
    latest_date: str = ""


def _pick_winner(votes: Dict[str, _Vote]) -> Category:
    """
    Highest count wins. Ties go to the category used most recently,
    then to the smallest category id.
    """
    ordered = sorted(votes.items(), key=lambda item: item[0])
    _, best = max(ordered, key=lambda item: (item[1].count, item[1].latest_date))
    return best.category


def recommend_category(
    target: Any,
    history: Iterable[HistoricalTransaction],
    fuzzy: bool = True,
    max_distance: Optional[int] = None,
) -> Optional[Category]:
    """
    Recommend a category for a transaction based on how similar labels were categorized.

    Args:
        target: Label string, or any object/mapping with a "label"
        history: Stored transactions with their resolved category
        fuzzy: Also accept labels within max_distance edits
        max_distance: Edit-distance threshold (defaults to settings.fuzzy_max_distance)

    Returns:
        Most frequent category among matching transactions, or None
    """
    label_norm = normalize_label(as_label(target))
    if not label_norm:
        return None

    if max_distance is None:
        max_distance = get_settings().fuzzy_max_distance

    votes: Dict[str, _Vote] = {}
    for tx in history:
        if not tx.label or tx.category is None:
            continue
        tx_label_norm = normalize_label(tx.label)
        if not tx_label_norm or not labels_match(label_norm, tx_label_norm, fuzzy, max_distance):
            continue

        key = str(tx.category.id)
        vote = votes.setdefault(key, _Vote(category=tx.category))
        vote.count += 1
        if tx.transaction_date and tx.transaction_date > vote.latest_date:
            vote.latest_date = tx.transaction_date

    if not votes:
        logger.debug(f"No category match for '{mask_label(label_norm)}'")
        return None

    best = _pick_winner(votes)
    logger.debug(
        f"Recommended category '{best.label}' for '{mask_label(label_norm)}' "
        f"from {sum(v.count for v in votes.values())} matches"
    )
    return best


def categorize_records(
    records: Sequence[NormalizedTransactionRecord],
    history: Sequence[HistoricalTransaction],
    fuzzy: bool = True,
    max_distance: Optional[int] = None,
) -> Tuple[List[NormalizedTransactionRecord], int]:
    """
    Fill category_id on uncategorized records with a recommendation.

    Returns:
        Tuple of (new record list, number of records that received a category).
        Records that already have a category are left untouched.
    """
    history = list(history)
    categorized: List[NormalizedTransactionRecord] = []
    filled = 0

    for record in records:
        if record.category_id is not None:
            categorized.append(record)
            continue

        category = recommend_category(record, history, fuzzy=fuzzy, max_distance=max_distance)
        if category is None:
            categorized.append(record)
            continue

        categorized.append(record.model_copy(update={"category_id": category.id}))
        filled += 1

    logger.info(f"Auto-categorized {filled}/{len(records)} transactions")
    return categorized, filled
