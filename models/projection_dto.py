from dataclasses import dataclass, field
from datetime import date
from typing import List, Literal, Optional

from models.spending_dto import SpendingConfidence, TransactionType

RiskLevel = Literal["safe", "warning", "danger"]
ForecastConfidence = Literal["high", "medium", "low"]


@dataclass(frozen=True)
class PlannedTransaction:
    amount: float
    planned_date: date
    type: TransactionType


@dataclass
class UserSettings:
    minimum_safe_balance: float
    safety_buffer_days: Optional[int] = None  # None falls back to the 7-day default


@dataclass
class DailyBreakdown:
    starting_balance: float
    planned_income: float
    planned_expenses: float
    estimated_daily_spending: float
    ending_balance: float


@dataclass
class DailyForecast:
    date: date
    projected_balance: float
    confidence: ForecastConfidence
    risk_level: RiskLevel
    breakdown: DailyBreakdown


@dataclass
class ForecastResult:
    forecasts: List[DailyForecast] = field(default_factory=list)
    average_daily_spending: float = 0.0
    spending_confidence: SpendingConfidence = "none"
    should_display: bool = False
