from dataclasses import dataclass
from datetime import date
from typing import Literal

from models.projection_dto import RiskLevel

PaymentType = Literal["income", "expense", "transfer_in", "transfer_out"]


@dataclass(frozen=True)
class PaymentCandidate:
    """A planned transaction with enough identity to report on."""
    id: str
    amount: float
    description: str
    type: PaymentType
    planned_date: date


@dataclass
class PaymentRisk:
    transaction: PaymentCandidate
    days_until: int
    projected_balance_at_date: float
    balance_after_payment: float
    risk_level: RiskLevel
    recommendation: str
    can_afford: bool
