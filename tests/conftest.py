"""Shared pytest configuration for the project test suite."""
from __future__ import annotations

import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Callable, List

import pytest


# Ensure the repository root (which holds the service packages) is importable.
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from models.projection_dto import PlannedTransaction  # noqa: E402
from models.spending_dto import SpendingTransaction  # noqa: E402


@pytest.fixture
def make_history() -> Callable[..., List[SpendingTransaction]]:
    """Build one transaction per day starting at ``start`` for ``days`` days."""

    def _make(days: int, start: date = date(2026, 1, 1), amount: float = 100.0,
              tx_type: str = "expense") -> List[SpendingTransaction]:
        return [
            SpendingTransaction(amount=amount, transaction_date=start + timedelta(days=i), type=tx_type)
            for i in range(days)
        ]

    return _make


@pytest.fixture
def make_planned() -> Callable[..., PlannedTransaction]:
    def _make(amount: float, planned_date: date, tx_type: str = "expense") -> PlannedTransaction:
        return PlannedTransaction(amount=amount, planned_date=planned_date, type=tx_type)

    return _make
