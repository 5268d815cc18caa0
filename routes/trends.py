from dataclasses import asdict
from typing import List, Union

from fastapi import APIRouter, Path
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from models.trends_dto import TrendTransaction
from services.forecast_dto import SpendingTrendsDTO
from services.spending_trends_service import calculate_spending_trends
from utils.dates import parse_iso_date
from utils.money import parse_money

router = APIRouter()


class TrendRow(BaseModel):
    amount: Union[float, str]
    transaction_date: str
    type: str
    category_id: str
    category_name: str


class TrendsBody(BaseModel):
    transactions: List[TrendRow] = []


@router.post("/trends/{year}/{month}")
def spending_trends(body: TrendsBody,
                    year: int = Path(..., ge=1900, le=9999),
                    month: int = Path(..., ge=1, le=12)):
    """Category spending trends for the given month vs. the previous one."""
    transactions = []
    for idx, row in enumerate(body.transactions, start=1):
        try:
            transactions.append(TrendTransaction(
                amount=abs(parse_money(row.amount)),
                transaction_date=parse_iso_date(row.transaction_date),
                type=row.type.strip().lower(),
                category_id=row.category_id,
                category_name=row.category_name,
            ))
        except ValueError as e:
            return JSONResponse(status_code=400, content={"error": f"row {idx}: {e}"})

    result = calculate_spending_trends(transactions, year, month)
    return asdict(SpendingTrendsDTO.from_result(result))
