from dataclasses import dataclass, field
from datetime import date
from typing import List, Literal

from models.spending_dto import TransactionType

TrendDirection = Literal["increasing", "decreasing", "stable"]


@dataclass(frozen=True)
class TrendTransaction:
    amount: float
    transaction_date: date
    type: TransactionType
    category_id: str
    category_name: str


@dataclass
class CategorySpending:
    category_id: str
    category_name: str
    amount: float
    transaction_count: int


@dataclass
class SpendingTrend:
    category_id: str
    category_name: str
    current_month: float
    previous_month: float
    three_month_average: float
    percent_change: float
    trend: TrendDirection
    is_unusual: bool
    transaction_count: int


@dataclass
class SpendingTrendsResult:
    trends: List[SpendingTrend] = field(default_factory=list)
    total_current_month: float = 0.0
    total_previous_month: float = 0.0
    overall_percent_change: float = 0.0
    top_categories: List[SpendingTrend] = field(default_factory=list)
    unusual_categories: List[SpendingTrend] = field(default_factory=list)
    average_daily_spending: float = 0.0
