"""
Analytics Facade

Single entry point for the dashboard: returns the risk signal and the daily
volume trend of an organization computed against one as_of instant.

Results are memoized per (organization, as_of truncated to the minute) for a
short, configurable interval (AnalyticsSettings.cache_ttl_seconds) to bound
store reads under bursty dashboard refreshes. Entries are never shared across
organizations and failures are never cached.
"""

import logging
import threading
import time
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from config import AnalyticsSettings

from .aggregator import WindowAggregator
from .classifier import RatingClassifier
from .models import AnalyticsResult, Review
from .risk import RiskEvaluator, signal_from_counts
from .store import ReviewStore
from .summary import RatingSummarizer
from .trend import TrendBucketer
from .windows import ensure_utc, utc_now

logger = logging.getLogger(__name__)

CacheKey = Tuple[int, datetime, bool]


class AnalyticsFacade:
    """Composes risk evaluation and trend bucketing and owns the result cache."""

    def __init__(
        self,
        store: ReviewStore,
        settings: Optional[AnalyticsSettings] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the analytics facade.

        Args:
            store: Review store shared by all components
            settings: Analytics settings, defaults to AnalyticsSettings()
            clock: Monotonic clock used for cache expiry
        """
        self.store = store
        self.settings = settings or AnalyticsSettings()
        self.clock = clock

        self.classifier = RatingClassifier(
            negative_mean_threshold=self.settings.negative_mean_threshold,
            ignore_out_of_range=self.settings.ignore_out_of_range,
        )
        self.aggregator = WindowAggregator(store, self.classifier)
        self.risk_evaluator = RiskEvaluator(
            self.aggregator,
            window_days=self.settings.window_days,
            threshold_percent=self.settings.threshold_percent,
        )
        self.bucketer = TrendBucketer(store, self.classifier)
        self.summarizer = RatingSummarizer(store, self.classifier)

        self._cache: Dict[CacheKey, Tuple[float, AnalyticsResult]] = {}
        self._last_known: Dict[int, AnalyticsResult] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    @staticmethod
    def cache_key(organization_id: int, as_of: datetime, include_summary: bool) -> CacheKey:
        return (organization_id, as_of.replace(second=0, microsecond=0), include_summary)

    def _get_cached(self, key: CacheKey) -> Optional[AnalyticsResult]:
        if self.settings.cache_ttl_seconds <= 0:
            return None

        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            expires_at, result = entry
            if self.clock() >= expires_at:
                del self._cache[key]
                return None
            return result

    def _put_cached(self, key: CacheKey, result: AnalyticsResult) -> None:
        with self._lock:
            self._last_known[result.organization_id] = result
            if self.settings.cache_ttl_seconds <= 0:
                return

            now = self.clock()
            expired = [k for k, (expires_at, _) in self._cache.items() if now >= expires_at]
            for k in expired:
                del self._cache[k]

            while len(self._cache) >= self.settings.cache_max_entries:
                oldest = min(self._cache, key=lambda k: self._cache[k][0])
                del self._cache[oldest]

            self._cache[key] = (now + self.settings.cache_ttl_seconds, result)

    def invalidate(self, organization_id: Optional[int] = None) -> int:
        """
        Drop cached results for one organization, or all when None.

        Returns:
            Number of cache entries removed
        """
        with self._lock:
            if organization_id is None:
                removed = len(self._cache)
                self._cache.clear()
            else:
                keys = [k for k in self._cache if k[0] == organization_id]
                for k in keys:
                    del self._cache[k]
                removed = len(keys)

        logger.debug(f"Invalidated {removed} cached analytics result(s)")
        return removed

    def last_known(self, organization_id: int) -> Optional[AnalyticsResult]:
        """Most recent successful result for the organization, possibly expired."""
        with self._lock:
            return self._last_known.get(organization_id)

    # ------------------------------------------------------------------
    # Computation
    # ------------------------------------------------------------------

    def _fetch_span(self, as_of: datetime) -> Tuple[datetime, datetime]:
        span_days = max(self.settings.window_days, self.settings.period_days)
        return as_of - timedelta(days=span_days), as_of

    def _compose(
        self,
        organization_id: int,
        as_of: datetime,
        reviews: List[Review],
        include_summary: bool,
    ) -> AnalyticsResult:
        """Derive every result from one fetched snapshot and one as_of."""
        window_days = self.settings.window_days
        period_days = self.settings.period_days

        risk_start = as_of - timedelta(days=window_days)
        trend_start = as_of - timedelta(days=period_days)

        counts = self.aggregator.count(reviews, risk_start, as_of)
        risk = signal_from_counts(counts, window_days, self.settings.threshold_percent)
        trend = self.bucketer.bucket(reviews, trend_start, as_of)
        summary = (
            self.summarizer.summarize_reviews(reviews, trend_start, as_of)
            if include_summary
            else None
        )

        logger.info(
            f"Analytics for organization {organization_id} as of {as_of.isoformat()}: "
            f"risk={risk.has_risk} ({risk.negative_percentage:.2f}% of {risk.total}), "
            f"{len(trend)} trend point(s)"
        )
        return AnalyticsResult(
            organization_id=organization_id,
            as_of=as_of,
            risk=risk,
            trend=trend,
            summary=summary,
        )

    def get_analytics(
        self,
        organization_id: int,
        as_of: Optional[datetime] = None,
        include_summary: bool = False,
    ) -> AnalyticsResult:
        """
        Risk signal and trend for an organization.

        Args:
            organization_id: Organization to analyze
            as_of: Snapshot instant, defaults to now
            include_summary: Also compute the rating summary over the trend period

        Returns:
            AnalyticsResult computed against a single as_of

        Raises:
            StoreUnavailable: the review store cannot be reached; nothing is cached
        """
        as_of = ensure_utc(as_of) if as_of is not None else utc_now()
        key = self.cache_key(organization_id, as_of, include_summary)

        cached = self._get_cached(key)
        if cached is not None:
            logger.debug(f"Cache hit for organization {organization_id} at {key[1].isoformat()}")
            return cached

        logger.debug(f"Cache miss for organization {organization_id} at {key[1].isoformat()}")
        start, end = self._fetch_span(as_of)
        reviews = self.store.fetch_reviews(organization_id, start, end)

        result = self._compose(organization_id, as_of, reviews, include_summary)
        self._put_cached(key, result)
        return result

    async def aget_analytics(
        self,
        organization_id: int,
        as_of: Optional[datetime] = None,
        include_summary: bool = False,
    ) -> AnalyticsResult:
        """
        Async variant of get_analytics.

        Cancelling the awaiting task cancels the store fetch; the partial
        request leaves no trace in the cache.
        """
        as_of = ensure_utc(as_of) if as_of is not None else utc_now()
        key = self.cache_key(organization_id, as_of, include_summary)

        cached = self._get_cached(key)
        if cached is not None:
            logger.debug(f"Cache hit for organization {organization_id} at {key[1].isoformat()}")
            return cached

        start, end = self._fetch_span(as_of)
        reviews = await self.store.afetch_reviews(organization_id, start, end)

        result = self._compose(organization_id, as_of, reviews, include_summary)
        self._put_cached(key, result)
        return result

    def evaluate_risk(self, organization_id: int, as_of: Optional[datetime] = None, **overrides):
        """Risk signal only, with optional window_days / threshold_percent overrides."""
        return self.risk_evaluator.evaluate(organization_id, as_of, **overrides)

    def trend(self, organization_id: int, as_of: Optional[datetime] = None, period_days=None):
        """Daily review volume only."""
        if period_days is None:
            period_days = self.settings.period_days
        return self.bucketer.trend(organization_id, as_of, period_days)

    def summarize(self, organization_id: int, as_of: Optional[datetime] = None, period_days=None):
        """Rating summary only."""
        if period_days is None:
            period_days = self.settings.period_days
        return self.summarizer.summarize(organization_id, as_of, period_days)
