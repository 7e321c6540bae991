"""
Trend Bucketing Module

Groups an organization's reviews into UTC calendar-day buckets over a
trailing period. The series is sparse: days without reviews are omitted and
filling gaps is left to the consumer.
"""

import logging
from datetime import datetime
from typing import List, Optional

from .aggregator import build_review_frame
from .classifier import RatingClassifier
from .models import Review, TrendPoint
from .store import ReviewStore
from .windows import window_bounds

logger = logging.getLogger(__name__)

DEFAULT_PERIOD_DAYS = 30


class TrendBucketer:
    """Produces the daily review-volume series of one organization."""

    def __init__(self, store: ReviewStore, classifier: Optional[RatingClassifier] = None):
        self.store = store
        self.classifier = classifier or RatingClassifier()

    def bucket(self, reviews: List[Review], start: datetime, end: datetime) -> List[TrendPoint]:
        """
        Count reviews in [start, end) per UTC day, ascending by date.

        Every review counts toward volume, including ones without ratings.
        """
        df = build_review_frame(reviews, self.classifier, start, end)
        if df.empty:
            return []

        daily_counts = df.groupby(df["created_at"].dt.date).size().sort_index()
        return [TrendPoint(date=day, count=int(count)) for day, count in daily_counts.items()]

    def trend(
        self,
        organization_id: int,
        as_of: Optional[datetime] = None,
        period_days: int = DEFAULT_PERIOD_DAYS,
    ) -> List[TrendPoint]:
        """
        Daily review volume over [as_of - period_days, as_of).

        Raises:
            InvalidWindow: period_days <= 0
            StoreUnavailable: the review store cannot be reached
        """
        start, end = window_bounds(as_of, period_days, "period_days")
        reviews = self.store.fetch_reviews(organization_id, start, end)
        points = self.bucket(reviews, start, end)

        logger.debug(
            f"Organization {organization_id}: {len(points)} active day(s) "
            f"in the last {period_days} days"
        )
        return points
