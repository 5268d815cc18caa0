"""
Payment Risk Assessment

Checks each upcoming planned expense against the daily forecast and says
whether it can be paid without dipping into the safety buffer.

Rules:
    balance after payment < 0              -> danger, cannot afford
    balance after payment < buffer         -> warning, affordable but tight
    otherwise                              -> safe
The projected balance at a payment date is that day's *starting* balance.
"""
from datetime import date
from typing import Iterable, List, Optional

from config import CURRENCY_SYMBOL, DEFAULT_SAFETY_BUFFER_DAYS
from models.payment_risk_dto import PaymentCandidate, PaymentRisk
from models.projection_dto import DailyForecast

MISSING_FORECAST_RECOMMENDATION = "Unable to calculate - insufficient forecast data"


def _format_day(day: date) -> str:
    return f"{day.strftime('%b')} {day.day}"


def assess_payment(
    candidate: PaymentCandidate,
    forecasts_by_date: dict,
    average_daily_spending: float,
    safety_buffer_days: int,
    today: date,
) -> PaymentRisk:
    days_until = (candidate.planned_date - today).days
    forecast = forecasts_by_date.get(candidate.planned_date)

    if forecast is None:
        return PaymentRisk(
            transaction=candidate,
            days_until=days_until,
            projected_balance_at_date=0.0,
            balance_after_payment=-candidate.amount,
            risk_level="danger",
            recommendation=MISSING_FORECAST_RECOMMENDATION,
            can_afford=False,
        )

    projected_balance = forecast.breakdown.starting_balance
    balance_after_payment = projected_balance - candidate.amount
    safety_buffer = average_daily_spending * safety_buffer_days

    if balance_after_payment < 0:
        risk_level = "danger"
        shortfall = abs(balance_after_payment)
        recommendation = (
            f"Insufficient funds. Need {CURRENCY_SYMBOL}{shortfall:.2f} more "
            f"by {_format_day(candidate.planned_date)}."
        )
        can_afford = False
    elif balance_after_payment < safety_buffer:
        risk_level = "warning"
        recommendation = (
            f"Balance will be tight. Only {CURRENCY_SYMBOL}{balance_after_payment:.2f} "
            f"remaining after payment (less than {safety_buffer_days}-day buffer)."
        )
        can_afford = True
    else:
        risk_level = "safe"
        recommendation = (
            f"Sufficient funds available. {CURRENCY_SYMBOL}{balance_after_payment:.2f} "
            f"remaining after payment."
        )
        can_afford = True

    return PaymentRisk(
        transaction=candidate,
        days_until=days_until,
        projected_balance_at_date=projected_balance,
        balance_after_payment=balance_after_payment,
        risk_level=risk_level,
        recommendation=recommendation,
        can_afford=can_afford,
    )


def assess_payment_risks(
    planned: Iterable[PaymentCandidate],
    daily_forecasts: Iterable[DailyForecast],
    average_daily_spending: float,
    safety_buffer_days: int = DEFAULT_SAFETY_BUFFER_DAYS,
    today: Optional[date] = None,
) -> List[PaymentRisk]:
    """
    Assess every planned expense, soonest first.

    Args:
        planned: Planned transactions; anything but expenses is skipped.
        daily_forecasts: Output of calculate_daily_forecast.
        average_daily_spending: Daily spending used for the buffer.
        safety_buffer_days: Days of spending to keep in reserve.
        today: Reference day for days_until; defaults to date.today().

    Returns:
        List of PaymentRisk sorted by days_until (stable).
    """
    if today is None:
        today = date.today()

    forecasts_by_date = {}
    for forecast in daily_forecasts:
        forecasts_by_date.setdefault(forecast.date, forecast)

    risks = [
        assess_payment(candidate, forecasts_by_date, average_daily_spending, safety_buffer_days, today)
        for candidate in planned
        if candidate.type == "expense"
    ]

    return sorted(risks, key=lambda risk: risk.days_until)
