"""
Spending Baseline: robust average daily spending from completed transactions.

Pure functions over in-memory records. No database access and no side effects.
Every input, including an empty list, maps to a defined SpendingEstimate.
"""
import logging
from typing import Iterable

from models.spending_dto import SpendingEstimate, SpendingTransaction
from utils.dates import inclusive_day_span

logger = logging.getLogger(__name__)

DEFAULT_OUTLIER_MULTIPLIER = 3
MEDIUM_CONFIDENCE_DAYS = 14
HIGH_CONFIDENCE_DAYS = 30


def calculate_median(values: list) -> float:
    """Standard median; 0 for an empty list."""
    if not values:
        return 0.0

    ordered = sorted(values)
    mid = len(ordered) // 2

    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return ordered[mid]


def classify_confidence(days_analyzed: int) -> str:
    if days_analyzed < MEDIUM_CONFIDENCE_DAYS:
        return "none"
    if days_analyzed < HIGH_CONFIDENCE_DAYS:
        return "medium"
    return "high"


def estimate_average_daily_spending(
    transactions: Iterable[SpendingTransaction],
    outlier_multiplier: float = DEFAULT_OUTLIER_MULTIPLIER,
) -> SpendingEstimate:
    """
    Compute the average daily spending baseline.

    Steps:
        1. Keep expense transactions only (income is ignored entirely).
        2. days_analyzed = inclusive span between earliest and latest date.
        3. Median of all expense amounts is the outlier reference point.
        4. Drop amounts above median * outlier_multiplier. If that would drop
           everything, keep everything and force confidence to "low".
        5. average = included total / days_analyzed.

    Args:
        transactions: Historical transactions; never mutated.
        outlier_multiplier: Multiple of the median above which an amount is
            treated as a one-time purchase.

    Returns:
        SpendingEstimate with confidence "none", "low", "medium" or "high".
    """
    expenses = [t for t in transactions if t.type == "expense"]

    if not expenses:
        return SpendingEstimate(
            average_daily_spending=0.0,
            confidence="none",
            days_analyzed=0,
            transactions_included=0,
            transactions_excluded=0,
            total_spending=0.0,
            median_amount=0.0,
        )

    dates = [t.transaction_date for t in expenses]
    days_analyzed = inclusive_day_span(min(dates), max(dates))

    amounts = [t.amount for t in expenses]
    median_amount = calculate_median(amounts)

    threshold = median_amount * outlier_multiplier
    included = [amount for amount in amounts if not amount > threshold]

    if included:
        confidence = classify_confidence(days_analyzed)
        excluded_count = len(amounts) - len(included)
    else:
        # every amount is an "outlier": fall back to the full set
        logger.debug(
            "All %d expenses exceed %.2f (median %.2f x %s); using all of them",
            len(amounts), threshold, median_amount, outlier_multiplier,
        )
        included = amounts
        excluded_count = 0
        confidence = "low"

    total_spending = sum(included)

    estimate = SpendingEstimate(
        average_daily_spending=total_spending / days_analyzed,
        confidence=confidence,
        days_analyzed=days_analyzed,
        transactions_included=len(included),
        transactions_excluded=excluded_count,
        total_spending=total_spending,
        median_amount=median_amount,
    )
    logger.debug(
        "Spending baseline: %.2f/day over %d days (%s), %d included, %d excluded",
        estimate.average_daily_spending, days_analyzed, confidence,
        estimate.transactions_included, estimate.transactions_excluded,
    )
    return estimate
