# helpers/normalize.py
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional

from models.payment_risk_dto import PaymentCandidate
from models.projection_dto import PlannedTransaction
from models.spending_dto import SpendingTransaction
from utils.dates import parse_iso_date
from utils.money import parse_money

FORECAST_TYPES = {"income", "expense"}
KNOWN_TYPES = FORECAST_TYPES | {"transfer_in", "transfer_out"}


@dataclass
class LedgerSplit:
    historical: List[SpendingTransaction] = field(default_factory=list)
    planned: List[PlannedTransaction] = field(default_factory=list)
    payments: List[PaymentCandidate] = field(default_factory=list)
    skipped: int = 0


def normalize_ledger_row(row: dict) -> dict:
    """
    Convert a raw ledger row into a canonical transaction dict.

    Accepts ``transaction_date`` (or ``planned_date``) as a date or ISO string,
    and ``amount`` as a number or money string. Amounts become magnitudes;
    the direction is carried by ``type``.
    """
    raw_date = row.get("transaction_date") or row.get("planned_date")
    if raw_date is None:
        raise ValueError("missing transaction_date")

    tx_type = str(row.get("type") or "").strip().lower()
    if tx_type not in KNOWN_TYPES:
        raise ValueError(f"unknown transaction type: {row.get('type')!r}")

    return {
        "id": row.get("id"),
        "date": parse_iso_date(raw_date),
        "description": (row.get("description") or "").strip(),
        "amount": abs(parse_money(row.get("amount"))),
        "type": tx_type,
        "is_expected": bool(row.get("is_expected", False)),
    }


def split_ledger(rows: Iterable[dict], history_start: Optional[date] = None) -> LedgerSplit:
    """
    Split ledger rows into completed history and planned (expected) transactions.

    Completed rows before ``history_start`` fall outside the history window and
    are dropped. Transfers never take part in forecasting and are counted in
    ``skipped``.

    Raises:
        ValueError: naming the offending row (1-based) when a row is malformed.
    """
    split = LedgerSplit()

    for idx, row in enumerate(rows, start=1):
        try:
            tx = normalize_ledger_row(row)
        except ValueError as exc:
            raise ValueError(f"row {idx}: {exc}") from exc

        if tx["type"] not in FORECAST_TYPES:
            split.skipped += 1
            continue

        if tx["is_expected"]:
            split.planned.append(PlannedTransaction(
                amount=tx["amount"],
                planned_date=tx["date"],
                type=tx["type"],
            ))
            split.payments.append(PaymentCandidate(
                id=str(tx["id"]) if tx["id"] is not None else f"planned-{tx['date'].isoformat()}",
                amount=tx["amount"],
                description=tx["description"] or "Planned transaction",
                type=tx["type"],
                planned_date=tx["date"],
            ))
        elif history_start is None or tx["date"] >= history_start:
            split.historical.append(SpendingTransaction(
                amount=tx["amount"],
                transaction_date=tx["date"],
                type=tx["type"],
            ))
        else:
            split.skipped += 1

    return split
