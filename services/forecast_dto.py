from dataclasses import dataclass
from typing import List, Optional


@dataclass
class BreakdownDTO:
    startingBalance: float
    plannedIncome: float
    plannedExpenses: float
    estimatedDailySpending: float
    endingBalance: float


@dataclass
class DailyForecastDTO:
    """Single day in the forecast timeline."""
    date: str  # ISO format YYYY-MM-DD
    projectedBalance: float
    confidence: str
    riskLevel: str
    breakdown: BreakdownDTO

    @classmethod
    def from_forecast(cls, day):
        b = day.breakdown
        return cls(
            date=day.date.isoformat(),
            projectedBalance=day.projected_balance,
            confidence=day.confidence,
            riskLevel=day.risk_level,
            breakdown=BreakdownDTO(
                startingBalance=b.starting_balance,
                plannedIncome=b.planned_income,
                plannedExpenses=b.planned_expenses,
                estimatedDailySpending=b.estimated_daily_spending,
                endingBalance=b.ending_balance,
            ),
        )


@dataclass
class PaymentRiskDTO:
    transaction: dict
    daysUntil: int
    projectedBalanceAtDate: float
    balanceAfterPayment: float
    riskLevel: str
    recommendation: str
    canAfford: bool

    @classmethod
    def from_risk(cls, risk):
        tx = risk.transaction
        return cls(
            transaction={
                "id": tx.id,
                "amount": tx.amount,
                "description": tx.description,
                "type": tx.type,
                "plannedDate": tx.planned_date.isoformat(),
            },
            daysUntil=risk.days_until,
            projectedBalanceAtDate=risk.projected_balance_at_date,
            balanceAfterPayment=risk.balance_after_payment,
            riskLevel=risk.risk_level,
            recommendation=risk.recommendation,
            canAfford=risk.can_afford,
        )


@dataclass
class ForecastResponseDTO:
    """Complete forecast response for one account."""
    dailyForecasts: List[DailyForecastDTO]
    paymentRisks: List[PaymentRiskDTO]
    averageDailySpending: float
    spendingConfidence: str
    shouldDisplay: bool
    currentBalance: float
    userSettings: Optional[dict]

    @classmethod
    def from_complete_forecast(cls, complete):
        """Convert CompleteForecast to a JSON-serializable DTO."""
        forecast = complete.forecast
        settings = complete.user_settings
        return cls(
            dailyForecasts=[DailyForecastDTO.from_forecast(day) for day in forecast.forecasts],
            paymentRisks=[PaymentRiskDTO.from_risk(risk) for risk in complete.payment_risks],
            averageDailySpending=forecast.average_daily_spending,
            spendingConfidence=forecast.spending_confidence,
            shouldDisplay=forecast.should_display,
            currentBalance=complete.current_balance,
            userSettings={
                "minimumSafeBalance": settings.minimum_safe_balance,
                "safetyBufferDays": settings.safety_buffer_days,
            } if settings else None,
        )


@dataclass
class SpendingEstimateDTO:
    averageDailySpending: float
    confidence: str
    daysAnalyzed: int
    transactionsIncluded: int
    transactionsExcluded: int
    totalSpending: float
    medianAmount: float

    @classmethod
    def from_estimate(cls, estimate):
        return cls(
            averageDailySpending=estimate.average_daily_spending,
            confidence=estimate.confidence,
            daysAnalyzed=estimate.days_analyzed,
            transactionsIncluded=estimate.transactions_included,
            transactionsExcluded=estimate.transactions_excluded,
            totalSpending=estimate.total_spending,
            medianAmount=estimate.median_amount,
        )


@dataclass
class SpendingTrendDTO:
    categoryId: str
    categoryName: str
    currentMonth: float
    previousMonth: float
    threeMonthAverage: float
    percentChange: float
    trend: str
    isUnusual: bool
    transactionCount: int

    @classmethod
    def from_trend(cls, trend):
        return cls(
            categoryId=trend.category_id,
            categoryName=trend.category_name,
            currentMonth=trend.current_month,
            previousMonth=trend.previous_month,
            threeMonthAverage=trend.three_month_average,
            percentChange=trend.percent_change,
            trend=trend.trend,
            isUnusual=trend.is_unusual,
            transactionCount=trend.transaction_count,
        )


@dataclass
class SpendingTrendsDTO:
    trends: List[SpendingTrendDTO]
    totalCurrentMonth: float
    totalPreviousMonth: float
    overallPercentChange: float
    topCategories: List[str]  # category ids, highest spending first
    unusualCategories: List[str]
    averageDailySpending: float

    @classmethod
    def from_result(cls, result):
        return cls(
            trends=[SpendingTrendDTO.from_trend(t) for t in result.trends],
            totalCurrentMonth=result.total_current_month,
            totalPreviousMonth=result.total_previous_month,
            overallPercentChange=result.overall_percent_change,
            topCategories=[t.category_id for t in result.top_categories],
            unusualCategories=[t.category_id for t in result.unusual_categories],
            averageDailySpending=result.average_daily_spending,
        )
