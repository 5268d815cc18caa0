from dataclasses import dataclass
from datetime import date
from typing import Literal

TransactionType = Literal["income", "expense"]
SpendingConfidence = Literal["high", "medium", "low", "none"]


@dataclass(frozen=True)
class SpendingTransaction:
    """Completed (historical) money movement; only expenses feed the baseline."""
    amount: float
    transaction_date: date
    type: TransactionType


@dataclass
class SpendingEstimate:
    average_daily_spending: float
    confidence: SpendingConfidence
    days_analyzed: int
    transactions_included: int
    transactions_excluded: int
    total_spending: float
    median_amount: float  # computed before outlier exclusion
