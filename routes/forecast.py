import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import List, Optional, Union

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from helpers.normalize import split_ledger
from services.forecast_dto import ForecastResponseDTO, SpendingEstimateDTO
from services.forecast_service import ForecastRequest, ForecastRequestError, forecast_service
from services.spending_baseline import DEFAULT_OUTLIER_MULTIPLIER, estimate_average_daily_spending
from utils.dates import parse_iso_date, parse_month

logger = logging.getLogger(__name__)

router = APIRouter()


class LedgerRow(BaseModel):
    id: Optional[str] = None
    amount: Union[float, str]
    transaction_date: str
    type: str
    description: Optional[str] = None
    is_expected: bool = False


class ForecastBody(BaseModel):
    current_balance: float
    transactions: List[LedgerRow] = []
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    month: Optional[str] = None  # YYYY-MM, alternative to start/end
    minimum_safe_balance: Optional[float] = None
    safety_buffer_days: Optional[int] = Field(None, ge=0)


class SpendingBaselineBody(BaseModel):
    transactions: List[LedgerRow] = []
    outlier_multiplier: float = DEFAULT_OUTLIER_MULTIPLIER


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def resolve_date_range(body: ForecastBody):
    """Explicit start/end wins over month; one of the two must be given."""
    if body.start_date and body.end_date:
        return parse_iso_date(body.start_date), parse_iso_date(body.end_date)
    if body.month:
        return parse_month(body.month)
    raise ValueError("Provide start_date and end_date, or month (YYYY-MM).")


@router.post("/forecast/{workspace_id}/{account_id}")
def get_forecast(workspace_id: str, account_id: str, body: ForecastBody):
    """
    Return the daily cash-flow forecast and payment risks for one account.

    Body:
        current_balance: Current account balance.
        transactions: Ledger rows; ``is_expected`` marks planned ones.
        start_date / end_date (YYYY-MM-DD) or month (YYYY-MM).
        minimum_safe_balance, safety_buffer_days: optional overrides.

    Returns:
        ForecastResponseDTO fields plus ``metadata``. When the spending
        history is too thin, ``dailyForecasts`` is empty and
        ``metadata.shouldDisplay`` is false.
    """
    try:
        start_date, end_date = resolve_date_range(body)
    except ValueError as e:
        return _error(400, f"Invalid date range: {e}")

    request = ForecastRequest(
        current_balance=body.current_balance,
        transactions=[row.model_dump() for row in body.transactions],
        start_date=start_date,
        end_date=end_date,
        minimum_safe_balance=body.minimum_safe_balance,
        safety_buffer_days=body.safety_buffer_days,
    )

    try:
        complete = forecast_service.get_forecast(workspace_id, account_id, request)
    except ForecastRequestError as e:
        return _error(400, str(e))
    except Exception as e:
        logger.exception("Forecast calculation error for %s/%s", workspace_id, account_id)
        return _error(500, f"Failed to calculate forecast: {e}")

    dto = ForecastResponseDTO.from_complete_forecast(complete)
    return {
        **asdict(dto),
        "metadata": {
            "calculatedAt": datetime.now(timezone.utc).isoformat(),
            "shouldDisplay": dto.shouldDisplay,
        },
    }


@router.delete("/forecast/{workspace_id}/{account_id}/cache")
def invalidate_forecast_cache(workspace_id: str, account_id: str):
    """Call after transactions for the account are added, updated or deleted."""
    cleared = forecast_service.invalidate_cache(workspace_id, account_id)
    return {"success": True, "entriesCleared": cleared}


@router.delete("/forecast/{workspace_id}/cache")
def invalidate_workspace_forecast_cache(workspace_id: str):
    cleared = forecast_service.invalidate_workspace_cache(workspace_id)
    return {"success": True, "entriesCleared": cleared}


@router.get("/forecast/cache/stats")
def forecast_cache_stats():
    return forecast_service.get_cache_stats()


@router.post("/forecast/spending-baseline")
def spending_baseline(body: SpendingBaselineBody):
    """Average daily spending for the posted completed transactions."""
    try:
        ledger = split_ledger(row.model_dump() for row in body.transactions)
    except ValueError as e:
        return _error(400, f"Invalid transactions: {e}")

    estimate = estimate_average_daily_spending(ledger.historical, body.outlier_multiplier)
    return asdict(SpendingEstimateDTO.from_estimate(estimate))
