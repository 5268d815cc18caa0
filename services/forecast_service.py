### Forecast service ties ledger rows, user settings and the projection engine together and caches the result.
import hashlib
import json
import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, List, Optional

from config import (
    CACHE_MAX_ENTRIES,
    CACHE_TTL_SECONDS,
    DEFAULT_MINIMUM_SAFE_BALANCE,
    DEFAULT_SAFETY_BUFFER_DAYS,
    HISTORY_WINDOW_DAYS,
    MAX_FORECAST_DAYS,
)
from helpers.normalize import split_ledger
from models.payment_risk_dto import PaymentRisk
from models.projection_dto import ForecastResult, UserSettings
from services.payment_risk_service import assess_payment_risks
from services.projection_service import calculate_daily_forecast
from utils.dates import inclusive_day_span

logger = logging.getLogger(__name__)


class ForecastRequestError(ValueError):
    """The request cannot be turned into a forecast (bad rows, oversized range)."""


@dataclass
class ForecastRequest:
    current_balance: float
    transactions: List[dict]
    start_date: date
    end_date: date
    minimum_safe_balance: Optional[float] = None
    safety_buffer_days: Optional[int] = None


@dataclass
class CompleteForecast:
    forecast: ForecastResult
    payment_risks: List[PaymentRisk] = field(default_factory=list)
    current_balance: float = 0.0
    user_settings: Optional[UserSettings] = None


@dataclass
class _CacheEntry:
    data: CompleteForecast
    stored_at: float


def resolve_settings(request: ForecastRequest) -> UserSettings:
    """Request overrides win; anything missing falls back to the configured defaults."""
    minimum = request.minimum_safe_balance
    buffer_days = request.safety_buffer_days
    return UserSettings(
        minimum_safe_balance=DEFAULT_MINIMUM_SAFE_BALANCE if minimum is None else minimum,
        safety_buffer_days=DEFAULT_SAFETY_BUFFER_DAYS if buffer_days is None else buffer_days,
    )


def request_fingerprint(request: ForecastRequest, today: date) -> str:
    """Stable hash of everything in the request body that shapes the forecast."""
    payload = {
        "current_balance": request.current_balance,
        "transactions": request.transactions,
        "minimum_safe_balance": request.minimum_safe_balance,
        "safety_buffer_days": request.safety_buffer_days,
        "today": today.isoformat(),
    }
    json_str = json.dumps(payload, sort_keys=True, default=str)
    return hashlib.sha256(json_str.encode()).hexdigest()


class ForecastService:
    """Forecast orchestration with a TTL cache keyed per account, range and request body."""

    def __init__(self, cache_ttl_seconds: float = CACHE_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic,
                 max_entries: int = CACHE_MAX_ENTRIES):
        self.cache_ttl_seconds = cache_ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._cache = {}
        self._lock = threading.Lock()
        self.cache_hits = 0
        self.cache_misses = 0
        self.total_operations = 0

    # -----------------------------
    # Cache
    # -----------------------------
    def _is_fresh(self, entry: _CacheEntry, now: float) -> bool:
        return now - entry.stored_at < self.cache_ttl_seconds

    def _hit_rate(self) -> int:
        total = self.cache_hits + self.cache_misses
        return round(self.cache_hits / total * 100) if total else 0

    def _get_from_cache(self, key) -> Optional[CompleteForecast]:
        with self._lock:
            self.total_operations += 1
            entry = self._cache.get(key)

            if entry and self._is_fresh(entry, self._clock()):
                self.cache_hits += 1
                logger.debug("Cache hit for forecast %s/%s (hit rate %d%%)", key[0], key[1], self._hit_rate())
                return entry.data

            if entry:
                self._cache.pop(key, None)
                logger.debug("Cache entry expired for forecast %s/%s", key[0], key[1])

            self.cache_misses += 1
            logger.debug("Cache miss for forecast %s/%s (hit rate %d%%)", key[0], key[1], self._hit_rate())
            return None

    def _store(self, key, data: CompleteForecast) -> None:
        with self._lock:
            now = self._clock()
            expired = [k for k, entry in self._cache.items() if not self._is_fresh(entry, now)]
            for k in expired:
                del self._cache[k]

            # oldest entries go first once the cache is full
            while self._cache and len(self._cache) >= self.max_entries:
                del self._cache[next(iter(self._cache))]

            self._cache[key] = _CacheEntry(data=data, stored_at=now)

    def get_cache_hit_rate(self) -> int:
        with self._lock:
            return self._hit_rate()

    def get_cache_stats(self) -> dict:
        with self._lock:
            return {
                "size": len(self._cache),
                "hits": self.cache_hits,
                "misses": self.cache_misses,
                "hit_rate": self._hit_rate(),
                "total_operations": self.total_operations,
            }

    def _drop(self, matches) -> int:
        with self._lock:
            keys = [k for k in self._cache if matches(k)]
            for key in keys:
                del self._cache[key]
            return len(keys)

    def invalidate_cache(self, workspace_id: str, account_id: str) -> int:
        """Drop every cached forecast for one account. Call after its transactions change."""
        cleared = self._drop(lambda k: k[0] == workspace_id and k[1] == account_id)
        if cleared:
            logger.info("Forecast cache invalidated for %s/%s (%d entries)", workspace_id, account_id, cleared)
        return cleared

    def invalidate_workspace_cache(self, workspace_id: str) -> int:
        cleared = self._drop(lambda k: k[0] == workspace_id)
        if cleared:
            logger.info("Workspace forecast cache invalidated for %s (%d entries)", workspace_id, cleared)
        return cleared

    def clear_cache(self) -> int:
        with self._lock:
            size = len(self._cache)
            self._cache.clear()
        if size:
            logger.info("All forecast cache cleared (%d entries)", size)
        return size

    # -----------------------------
    # Forecast
    # -----------------------------
    def get_forecast(self, workspace_id: str, account_id: str, request: ForecastRequest,
                     today: Optional[date] = None) -> CompleteForecast:
        """
        Return the complete forecast (daily projection plus payment risks) for one account.

        Served from cache while an entry for the same range and request body is
        younger than the TTL.

        Raises:
            ForecastRequestError: malformed ledger rows or a range longer than
                MAX_FORECAST_DAYS.
        """
        if today is None:
            today = date.today()

        key = (workspace_id, account_id, request.start_date, request.end_date,
               request_fingerprint(request, today))
        cached = self._get_from_cache(key)
        if cached is not None:
            logger.info("Forecast for %s/%s served from cache", workspace_id, account_id)
            return cached

        if request.start_date <= request.end_date:
            span = inclusive_day_span(request.start_date, request.end_date)
            if span > MAX_FORECAST_DAYS:
                raise ForecastRequestError(
                    f"Forecast range of {span} days exceeds the {MAX_FORECAST_DAYS}-day limit"
                )

        logger.info(
            "Calculating new forecast for %s/%s from %s to %s",
            workspace_id, account_id, request.start_date, request.end_date,
        )

        try:
            ledger = split_ledger(request.transactions, history_start=today - timedelta(days=HISTORY_WINDOW_DAYS))
        except ValueError as exc:
            raise ForecastRequestError(f"Invalid transactions: {exc}") from exc

        settings = resolve_settings(request)
        logger.debug(
            "Data prepared for forecast %s/%s: %d historical, %d planned, %d skipped, balance %.2f",
            workspace_id, account_id, len(ledger.historical), len(ledger.planned),
            ledger.skipped, request.current_balance,
        )

        forecast = calculate_daily_forecast(
            request.current_balance,
            ledger.historical,
            ledger.planned,
            request.start_date,
            request.end_date,
            settings,
            today=today,
        )

        risk_counts = {level: 0 for level in ("safe", "warning", "danger")}
        for day in forecast.forecasts:
            risk_counts[day.risk_level] += 1
        logger.info(
            "Forecast calculated for %s/%s: display=%s confidence=%s daily=%.2f days=%d "
            "safe=%d warning=%d danger=%d",
            workspace_id, account_id, forecast.should_display, forecast.spending_confidence,
            forecast.average_daily_spending, len(forecast.forecasts),
            risk_counts["safe"], risk_counts["warning"], risk_counts["danger"],
        )

        payment_risks = []
        if forecast.should_display and forecast.forecasts:
            payment_risks = assess_payment_risks(
                ledger.payments,
                forecast.forecasts,
                forecast.average_daily_spending,
                settings.safety_buffer_days,
                today=today,
            )
            logger.info(
                "Payment risks assessed for %s/%s: %d total, %d danger",
                workspace_id, account_id, len(payment_risks),
                sum(1 for r in payment_risks if r.risk_level == "danger"),
            )

        complete = CompleteForecast(
            forecast=forecast,
            payment_risks=payment_risks,
            current_balance=request.current_balance,
            user_settings=settings,
        )
        self._store(key, complete)
        return complete


forecast_service = ForecastService()
