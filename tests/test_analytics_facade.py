"""
Unit tests for the analytics facade.

Covers snapshot consistency, caching policy and the async path.
"""

import asyncio
from datetime import timedelta

import pytest

from analytics.exceptions import StoreUnavailable
from analytics.facade import AnalyticsFacade
from analytics.models import AnalyticsResult, TrendPoint
from config import AnalyticsSettings
from tests.fakes import NEGATIVE, POSITIVE, make_review


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def facade(store, clock):
    return AnalyticsFacade(store, AnalyticsSettings(cache_ttl_seconds=45), clock=clock)


class TestGetAnalytics:
    """Test cases for the combined risk + trend call."""

    def test_risk_and_trend_share_as_of(self, facade, store, days_ago, as_of):
        store.add(make_review(days_ago(2), NEGATIVE))
        store.add(make_review(days_ago(2, hours=1), NEGATIVE))
        store.add(make_review(days_ago(5), POSITIVE))

        result = facade.get_analytics(1, as_of)

        assert isinstance(result, AnalyticsResult)
        assert result.as_of == as_of
        assert result.risk.has_risk is True
        assert result.risk.total == 3
        assert result.trend == [
            TrendPoint(date=days_ago(5).date(), count=1),
            TrendPoint(date=days_ago(2).date(), count=2),
        ]
        assert result.summary is None

    def test_single_store_fetch_per_call(self, facade, store, as_of):
        facade.get_analytics(1, as_of)

        assert store.calls == [(1, as_of - timedelta(days=30), as_of)]

    def test_fetch_covers_widest_span(self, store, as_of):
        facade = AnalyticsFacade(store, AnalyticsSettings(window_days=7, period_days=14))

        facade.get_analytics(1, as_of)

        assert store.calls == [(1, as_of - timedelta(days=14), as_of)]

    def test_risk_window_narrower_than_trend_period(self, store, days_ago, as_of):
        facade = AnalyticsFacade(store, AnalyticsSettings(window_days=7, period_days=14))
        store.add(make_review(days_ago(10), NEGATIVE))
        store.add(make_review(days_ago(1), POSITIVE))

        result = facade.get_analytics(1, as_of)

        assert result.risk.total == 1
        assert result.risk.has_risk is False
        assert sum(point.count for point in result.trend) == 2

    def test_matches_individual_components(self, facade, store, days_ago, as_of):
        store.add(make_review(days_ago(1), NEGATIVE))
        store.add(make_review(days_ago(12), POSITIVE))

        result = facade.get_analytics(1, as_of)

        assert result.risk == facade.evaluate_risk(1, as_of)
        assert result.trend == facade.trend(1, as_of)

    def test_include_summary(self, facade, store, days_ago, as_of):
        store.add(make_review(days_ago(1), POSITIVE))

        result = facade.get_analytics(1, as_of, include_summary=True)

        assert result.summary.review_count == 1
        assert "summary" in result.to_dict()

    def test_to_dict_contract(self, facade, store, days_ago, as_of):
        store.add(make_review(days_ago(1), NEGATIVE))

        payload = facade.get_analytics(1, as_of).to_dict()

        assert payload["riskSignal"] == {"hasRisk": True, "negativePercentageLast30Days": 100.0}
        assert payload["reviewTrends"] == [{"date": days_ago(1).date().isoformat(), "count": 1}]

    def test_store_failure_fails_whole_call(self, facade, store, as_of):
        store.fail = True

        with pytest.raises(StoreUnavailable):
            facade.get_analytics(1, as_of)
        assert facade.last_known(1) is None


class TestCaching:
    """Test cases for the short-lived result cache."""

    def test_repeated_reads_within_minute_hit_cache(self, facade, store, as_of):
        first = facade.get_analytics(1, as_of)
        second = facade.get_analytics(1, as_of + timedelta(seconds=20))

        assert second is first
        assert len(store.calls) == 1

    def test_next_minute_is_a_new_entry(self, facade, store, as_of):
        facade.get_analytics(1, as_of)
        facade.get_analytics(1, as_of + timedelta(minutes=1))

        assert len(store.calls) == 2

    def test_entries_expire(self, facade, store, clock, as_of):
        facade.get_analytics(1, as_of)
        clock.now += 45

        facade.get_analytics(1, as_of)

        assert len(store.calls) == 2

    def test_never_shared_across_organizations(self, facade, store, days_ago, as_of):
        store.add(make_review(days_ago(1), NEGATIVE, organization_id=1))
        store.add(make_review(days_ago(1), POSITIVE, organization_id=2))

        first = facade.get_analytics(1, as_of)
        second = facade.get_analytics(2, as_of)

        assert first.risk.has_risk is True
        assert second.risk.has_risk is False
        assert len(store.calls) == 2

    def test_failures_are_not_cached(self, facade, store, as_of):
        store.fail = True
        with pytest.raises(StoreUnavailable):
            facade.get_analytics(1, as_of)

        store.fail = False
        facade.get_analytics(1, as_of)

        assert len(store.calls) == 2

    def test_zero_ttl_disables_cache(self, store, as_of):
        facade = AnalyticsFacade(store, AnalyticsSettings(cache_ttl_seconds=0))

        facade.get_analytics(1, as_of)
        facade.get_analytics(1, as_of)

        assert len(store.calls) == 2

    def test_invalidate_single_organization(self, facade, store, as_of):
        facade.get_analytics(1, as_of)
        facade.get_analytics(2, as_of)

        assert facade.invalidate(1) == 1
        facade.get_analytics(1, as_of)
        facade.get_analytics(2, as_of)

        assert [call[0] for call in store.calls] == [1, 2, 1]

    def test_invalidate_all(self, facade, as_of):
        facade.get_analytics(1, as_of)
        facade.get_analytics(2, as_of)

        assert facade.invalidate() == 2

    def test_max_entries_evicts_oldest(self, store, clock, as_of):
        facade = AnalyticsFacade(
            store, AnalyticsSettings(cache_ttl_seconds=45, cache_max_entries=2), clock=clock
        )
        for organization_id in (1, 2, 3):
            facade.get_analytics(organization_id, as_of)
            clock.now += 1

        facade.get_analytics(3, as_of)
        facade.get_analytics(1, as_of)

        assert [call[0] for call in store.calls] == [1, 2, 3, 1]

    def test_last_known_survives_expiry_and_failure(self, facade, store, clock, as_of):
        good = facade.get_analytics(1, as_of)
        clock.now += 60
        store.fail = True

        with pytest.raises(StoreUnavailable):
            facade.get_analytics(1, as_of)

        assert facade.last_known(1) is good
        assert facade.last_known(2) is None


class TestAsyncAnalytics:
    """Test cases for aget_analytics."""

    @pytest.mark.asyncio
    async def test_matches_sync_result(self, store, days_ago, as_of):
        store.add(make_review(days_ago(1), NEGATIVE))
        store.add(make_review(days_ago(3), POSITIVE))

        async_result = await AnalyticsFacade(store).aget_analytics(1, as_of)
        sync_result = AnalyticsFacade(store).get_analytics(1, as_of)

        assert async_result.risk == sync_result.risk
        assert async_result.trend == sync_result.trend

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, facade, store, as_of):
        store.fail = True

        with pytest.raises(StoreUnavailable):
            await facade.aget_analytics(1, as_of)

    @pytest.mark.asyncio
    async def test_cancellation_reaches_store_and_caches_nothing(self, store, as_of):
        started = asyncio.Event()
        cancelled = asyncio.Event()

        class SlowStore(type(store)):
            async def afetch_reviews(self, organization_id, from_inclusive, to_exclusive):
                started.set()
                try:
                    await asyncio.sleep(3600)
                except asyncio.CancelledError:
                    cancelled.set()
                    raise
                return []

        facade = AnalyticsFacade(SlowStore())
        task = asyncio.create_task(facade.aget_analytics(1, as_of))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert cancelled.is_set()
        assert facade.last_known(1) is None
        assert facade.invalidate() == 0
