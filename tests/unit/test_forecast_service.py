"""
Test Suite: forecast service orchestration and cache
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta

import pytest

from config import DEFAULT_MINIMUM_SAFE_BALANCE, DEFAULT_SAFETY_BUFFER_DAYS, MAX_FORECAST_DAYS
from services.forecast_service import ForecastRequest, ForecastRequestError, ForecastService

TODAY = date(2026, 2, 1)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def ledger_rows(days=30, start=date(2026, 1, 2), amount=100):
    return [
        {"amount": amount, "transaction_date": (start + timedelta(days=i)).isoformat(), "type": "expense"}
        for i in range(days)
    ]


class TestForecastService:

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def service(self, clock):
        return ForecastService(cache_ttl_seconds=300, clock=clock)

    @pytest.fixture
    def request_(self):
        rows = ledger_rows() + [
            {"id": "rent", "amount": 1200, "transaction_date": "2026-02-05", "type": "expense",
             "description": "Rent", "is_expected": True},
            {"amount": 3000, "transaction_date": "2026-02-10", "type": "income", "is_expected": True},
        ]
        return ForecastRequest(
            current_balance=5000,
            transactions=rows,
            start_date=date(2026, 2, 1),
            end_date=date(2026, 2, 28),
        )

    def test_complete_forecast(self, service, request_):
        complete = service.get_forecast("ws1", "acc1", request_, today=TODAY)

        assert complete.current_balance == 5000
        assert complete.forecast.should_display is True
        assert len(complete.forecast.forecasts) == 28
        assert complete.forecast.forecasts[4].breakdown.planned_expenses == 1200
        assert complete.forecast.forecasts[9].breakdown.planned_income == 3000
        assert [r.transaction.id for r in complete.payment_risks] == ["rent"]

    def test_default_settings(self, service, request_):
        complete = service.get_forecast("ws1", "acc1", request_, today=TODAY)

        assert complete.user_settings.minimum_safe_balance == DEFAULT_MINIMUM_SAFE_BALANCE
        assert complete.user_settings.safety_buffer_days == DEFAULT_SAFETY_BUFFER_DAYS

    def test_setting_overrides(self, service, request_):
        request_.minimum_safe_balance = 0
        request_.safety_buffer_days = 3

        complete = service.get_forecast("ws1", "acc1", request_, today=TODAY)

        assert complete.user_settings.minimum_safe_balance == 0
        assert complete.user_settings.safety_buffer_days == 3

    def test_thin_history_has_no_payment_risks(self, service, request_):
        request_.transactions = ledger_rows(days=5, start=date(2026, 1, 25)) + request_.transactions[-2:]

        complete = service.get_forecast("ws1", "acc1", request_, today=TODAY)

        assert complete.forecast.forecasts == []
        assert complete.forecast.should_display is False
        assert complete.payment_risks == []

    def test_history_window_drops_old_rows(self, service, request_):
        # all completed rows are older than the 90-day window
        request_.transactions = ledger_rows(days=30, start=date(2025, 6, 1))

        complete = service.get_forecast("ws1", "acc1", request_, today=TODAY)

        assert complete.forecast.spending_confidence == "none"

    def test_oversized_range(self, service, request_):
        request_.end_date = request_.start_date + timedelta(days=MAX_FORECAST_DAYS)

        with pytest.raises(ForecastRequestError, match="exceeds"):
            service.get_forecast("ws1", "acc1", request_, today=TODAY)

    def test_invalid_rows(self, service, request_):
        request_.transactions = [{"amount": 10, "transaction_date": "yesterday", "type": "expense"}]

        with pytest.raises(ForecastRequestError, match="row 1"):
            service.get_forecast("ws1", "acc1", request_, today=TODAY)


class TestForecastCache:

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def service(self, clock):
        return ForecastService(cache_ttl_seconds=300, clock=clock)

    def make_request(self, start=date(2026, 2, 1), end=date(2026, 2, 7), balance=5000, **overrides):
        return ForecastRequest(
            current_balance=balance, transactions=ledger_rows(), start_date=start, end_date=end, **overrides
        )

    def test_second_call_is_cached(self, service):
        first = service.get_forecast("ws1", "acc1", self.make_request(), today=TODAY)
        second = service.get_forecast("ws1", "acc1", self.make_request(), today=TODAY)

        assert second is first
        assert service.get_cache_stats() == {
            "size": 1,
            "hits": 1,
            "misses": 1,
            "hit_rate": 50,
            "total_operations": 2,
        }

    def test_range_is_part_of_key(self, service):
        service.get_forecast("ws1", "acc1", self.make_request(), today=TODAY)
        other = service.get_forecast("ws1", "acc1", self.make_request(end=date(2026, 2, 3)), today=TODAY)

        assert len(other.forecast.forecasts) == 3
        assert service.get_cache_stats()["misses"] == 2

    def test_entry_expires(self, service, clock):
        first = service.get_forecast("ws1", "acc1", self.make_request(), today=TODAY)
        clock.now += 301

        second = service.get_forecast("ws1", "acc1", self.make_request(), today=TODAY)

        assert second is not first
        assert service.get_cache_stats()["hits"] == 0

    def test_invalidate_account(self, service):
        service.get_forecast("ws1", "acc1", self.make_request(), today=TODAY)
        service.get_forecast("ws1", "acc1", self.make_request(end=date(2026, 2, 3)), today=TODAY)
        service.get_forecast("ws1", "acc2", self.make_request(), today=TODAY)

        assert service.invalidate_cache("ws1", "acc1") == 2
        assert service.get_cache_stats()["size"] == 1
        assert service.invalidate_cache("ws1", "acc1") == 0

    def test_invalidate_workspace(self, service):
        service.get_forecast("ws1", "acc1", self.make_request(), today=TODAY)
        service.get_forecast("ws1", "acc2", self.make_request(), today=TODAY)
        service.get_forecast("ws2", "acc1", self.make_request(), today=TODAY)

        assert service.invalidate_workspace_cache("ws1") == 2
        assert service.get_cache_stats()["size"] == 1

    def test_clear(self, service):
        service.get_forecast("ws1", "acc1", self.make_request(), today=TODAY)

        assert service.clear_cache() == 1
        assert service.get_cache_stats()["size"] == 0

    def test_empty_stats(self, service):
        assert service.get_cache_stats()["hit_rate"] == 0

    def test_changed_balance_and_settings_are_a_miss(self, service):
        service.get_forecast("ws1", "acc1", self.make_request(end=date(2026, 2, 3)), today=TODAY)

        second = service.get_forecast(
            "ws1", "acc1",
            self.make_request(end=date(2026, 2, 3), balance=100, minimum_safe_balance=50),
            today=TODAY,
        )

        assert second.current_balance == 100
        assert second.forecast.forecasts[0].breakdown.starting_balance == 100
        assert second.user_settings.minimum_safe_balance == 50
        assert service.get_cache_stats()["misses"] == 2

    def test_changed_rows_are_a_miss(self, service):
        request = self.make_request()
        service.get_forecast("ws1", "acc1", request, today=TODAY)
        request.transactions = request.transactions + [
            {"amount": 900, "transaction_date": "2026-02-03", "type": "expense", "is_expected": True},
        ]

        second = service.get_forecast("ws1", "acc1", request, today=TODAY)

        assert second.forecast.forecasts[2].breakdown.planned_expenses == 900
        assert service.get_cache_stats()["hits"] == 0

    def test_new_day_is_a_miss(self, service):
        request = self.make_request(end=date(2026, 2, 16))
        first = service.get_forecast("ws1", "acc1", request, today=TODAY)
        second = service.get_forecast("ws1", "acc1", request, today=TODAY + timedelta(days=1))

        # Feb 16 is 15 days out on Feb 1 and 14 days out on Feb 2
        assert first.forecast.forecasts[-1].confidence == "medium"
        assert second.forecast.forecasts[-1].confidence == "high"
        assert service.get_cache_stats()["misses"] == 2

    def test_expired_entries_swept_on_write(self, service, clock):
        service.get_forecast("ws1", "acc1", self.make_request(), today=TODAY)
        clock.now += 301

        service.get_forecast("ws1", "acc2", self.make_request(), today=TODAY)

        assert service.get_cache_stats()["size"] == 1

    def test_size_is_bounded(self, clock):
        service = ForecastService(cache_ttl_seconds=300, clock=clock, max_entries=2)
        for day in (3, 4, 5):
            service.get_forecast("ws1", "acc1", self.make_request(end=date(2026, 2, day)), today=TODAY)

        assert service.get_cache_stats()["size"] == 2
        # the oldest range was evicted, the newest is still served
        service.get_forecast("ws1", "acc1", self.make_request(end=date(2026, 2, 5)), today=TODAY)
        service.get_forecast("ws1", "acc1", self.make_request(end=date(2026, 2, 3)), today=TODAY)
        assert service.get_cache_stats()["hits"] == 1

    def test_concurrent_access(self, service):
        errors = []

        def work(i):
            try:
                if i % 5 == 0:
                    service.invalidate_workspace_cache("ws1")
                else:
                    end = date(2026, 2, 1 + i % 7)
                    service.get_forecast("ws1", f"acc{i % 3}", self.make_request(end=end), today=TODAY)
                    service.get_cache_stats()
            except Exception as exc:
                errors.append(exc)

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(work, range(200)))

        stats = service.get_cache_stats()
        assert errors == []
        assert stats["total_operations"] == 160
        assert stats["hits"] + stats["misses"] == 160
