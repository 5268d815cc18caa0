"""
Spending Trends: per-category month-over-month analysis.

Pure functions; no database access. Only expense transactions count.
"""
from calendar import monthrange
from typing import Iterable, List

from models.trends_dto import (
    CategorySpending,
    SpendingTrend,
    SpendingTrendsResult,
    TrendTransaction,
)
from utils.dates import previous_month

TREND_THRESHOLD_PERCENT = 5
UNUSUAL_DEVIATION = 0.5
ROLLING_MONTHS = 3
TOP_CATEGORY_COUNT = 3


def monthly_spending_by_category(transactions: List[TrendTransaction], year: int, month: int) -> List[CategorySpending]:
    """Group one month's expenses by category, in first-seen order."""
    by_category = {}

    for t in transactions:
        if t.type != "expense":
            continue
        if t.transaction_date.year != year or t.transaction_date.month != month:
            continue

        existing = by_category.get(t.category_id)
        if existing:
            existing.amount += t.amount
            existing.transaction_count += 1
        else:
            by_category[t.category_id] = CategorySpending(
                category_id=t.category_id,
                category_name=t.category_name,
                amount=t.amount,
                transaction_count=1,
            )

    return list(by_category.values())


def rolling_average(transactions: List[TrendTransaction], category_id: str, end_year: int, end_month: int) -> float:
    """Average monthly spending for a category over the months ending at end_month."""
    total = 0.0
    year, month = end_year, end_month

    for _ in range(ROLLING_MONTHS):
        total += sum(
            t.amount
            for t in transactions
            if t.type == "expense"
            and t.category_id == category_id
            and t.transaction_date.year == year
            and t.transaction_date.month == month
        )
        year, month = previous_month(year, month)

    return total / ROLLING_MONTHS


def percent_change(current: float, previous: float) -> float:
    if previous > 0:
        return (current - previous) / previous * 100
    if current > 0:
        return 100.0  # new spending
    return 0.0


def determine_trend(change: float) -> str:
    if change > TREND_THRESHOLD_PERCENT:
        return "increasing"
    if change < -TREND_THRESHOLD_PERCENT:
        return "decreasing"
    return "stable"


def is_unusual_spending(current: float, average: float) -> bool:
    if average == 0:
        return False
    return abs(current - average) / average > UNUSUAL_DEVIATION


def calculate_spending_trends(transactions: Iterable[TrendTransaction], year: int, month: int) -> SpendingTrendsResult:
    """
    Analyze category spending for the given month against the month before
    and the 3-month rolling average.

    Returns:
        SpendingTrendsResult with trends sorted by current spending (highest first).
    """
    transactions = list(transactions)

    current = monthly_spending_by_category(transactions, year, month)
    prev_year, prev_month = previous_month(year, month)
    previous = monthly_spending_by_category(transactions, prev_year, prev_month)

    current_by_id = {cat.category_id: cat for cat in current}
    previous_by_id = {cat.category_id: cat for cat in previous}

    category_ids = list(current_by_id)
    category_ids.extend(cid for cid in previous_by_id if cid not in current_by_id)

    trends = []
    for category_id in category_ids:
        current_cat = current_by_id.get(category_id)
        previous_cat = previous_by_id.get(category_id)

        current_amount = current_cat.amount if current_cat else 0.0
        previous_amount = previous_cat.amount if previous_cat else 0.0
        category_name = (current_cat or previous_cat).category_name

        average = rolling_average(transactions, category_id, year, month)
        change = percent_change(current_amount, previous_amount)

        trends.append(SpendingTrend(
            category_id=category_id,
            category_name=category_name,
            current_month=current_amount,
            previous_month=previous_amount,
            three_month_average=average,
            percent_change=change,
            trend=determine_trend(change),
            is_unusual=is_unusual_spending(current_amount, average),
            transaction_count=current_cat.transaction_count if current_cat else 0,
        ))

    trends.sort(key=lambda trend: trend.current_month, reverse=True)

    total_current = sum(t.current_month for t in trends)
    total_previous = sum(t.previous_month for t in trends)

    return SpendingTrendsResult(
        trends=trends,
        total_current_month=total_current,
        total_previous_month=total_previous,
        overall_percent_change=percent_change(total_current, total_previous),
        top_categories=trends[:TOP_CATEGORY_COUNT],
        unusual_categories=[t for t in trends if t.is_unusual],
        average_daily_spending=total_current / monthrange(year, month)[1],
    )
