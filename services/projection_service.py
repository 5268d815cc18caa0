import logging
from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from config import DEFAULT_SAFETY_BUFFER_DAYS
from models.projection_dto import (
    DailyBreakdown,
    DailyForecast,
    ForecastResult,
    PlannedTransaction,
    UserSettings,
)
from models.spending_dto import SpendingTransaction
from services.spending_baseline import estimate_average_daily_spending
from utils.dates import iter_days

logger = logging.getLogger(__name__)

# 10% margin on top of the baseline
CONSERVATIVE_MULTIPLIER = 1.1
HIGH_CONFIDENCE_HORIZON_DAYS = 14
MEDIUM_CONFIDENCE_HORIZON_DAYS = 30


def determine_risk_level(balance: float, settings: UserSettings, daily_spending: float) -> str:
    """Classify a projected balance against the user's thresholds.

    ``daily_spending`` is the conservative figure, so the warning buffer
    carries the same safety margin as the projection.
    """
    buffer_days = settings.safety_buffer_days
    if buffer_days is None:
        buffer_days = DEFAULT_SAFETY_BUFFER_DAYS
    warning_threshold = settings.minimum_safe_balance + daily_spending * buffer_days

    if balance < settings.minimum_safe_balance:
        return "danger"
    if balance < warning_threshold:
        return "warning"
    return "safe"


def determine_forecast_confidence(day: date, today: date, spending_confidence: str) -> str:
    if spending_confidence in ("none", "low"):
        return "low"

    days_in_future = (day - today).days

    if days_in_future > MEDIUM_CONFIDENCE_HORIZON_DAYS:
        return "low"
    if days_in_future > HIGH_CONFIDENCE_HORIZON_DAYS:
        return "medium"
    return "high" if spending_confidence == "high" else "medium"


def _bucket_planned(planned_transactions: Iterable[PlannedTransaction]):
    """Sum planned income and expenses per date."""
    income = defaultdict(float)
    expenses = defaultdict(float)
    for planned in planned_transactions:
        if planned.type == "income":
            income[planned.planned_date] += planned.amount
        elif planned.type == "expense":
            expenses[planned.planned_date] += planned.amount
    return income, expenses


def calculate_daily_forecast(
    current_balance: float,
    historical_transactions: Iterable[SpendingTransaction],
    planned_transactions: Iterable[PlannedTransaction],
    start_date: date,
    end_date: date,
    settings: UserSettings,
    today: Optional[date] = None,
) -> ForecastResult:
    """Day-by-day balance projection from start_date to end_date inclusive.

    Pure function of its arguments and ``today`` (defaults to
    ``date.today()``, read once). No writes, no side effects. A baseline
    with confidence "none" short-circuits to an empty, hidden forecast.
    """
    if today is None:
        today = date.today()

    spending = estimate_average_daily_spending(historical_transactions)

    if spending.confidence == "none":
        logger.debug(
            "Insufficient spending history (%d days); forecast suppressed",
            spending.days_analyzed,
        )
        return ForecastResult(
            forecasts=[],
            average_daily_spending=0.0,
            spending_confidence="none",
            should_display=False,
        )

    conservative_daily_spending = spending.average_daily_spending * CONSERVATIVE_MULTIPLIER
    income_by_day, expenses_by_day = _bucket_planned(planned_transactions)

    # --- build timeline ---
    forecasts = []
    running = current_balance
    for day in iter_days(start_date, end_date):
        planned_income = income_by_day.get(day, 0.0)
        planned_expenses = expenses_by_day.get(day, 0.0)

        starting_balance = running
        ending_balance = (
            starting_balance
            + planned_income
            - planned_expenses
            - conservative_daily_spending
        )

        forecasts.append(DailyForecast(
            date=day,
            projected_balance=ending_balance,
            confidence=determine_forecast_confidence(day, today, spending.confidence),
            risk_level=determine_risk_level(ending_balance, settings, conservative_daily_spending),
            breakdown=DailyBreakdown(
                starting_balance=starting_balance,
                planned_income=planned_income,
                planned_expenses=planned_expenses,
                estimated_daily_spending=conservative_daily_spending,
                ending_balance=ending_balance,
            ),
        ))
        running = ending_balance

    return ForecastResult(
        forecasts=forecasts,
        average_daily_spending=conservative_daily_spending,
        spending_confidence=spending.confidence,
        should_display=spending.confidence in ("high", "medium"),
    )
