"""
Rating Summary Module

Per-organization rating statistics over a trailing period: label breakdown,
per-dimension averages and the overall average rating.
"""

import logging
from datetime import datetime
from typing import List, Optional

from .aggregator import build_review_frame
from .classifier import RatingClassifier
from .models import RATING_DIMENSIONS, RATING_MAX, RATING_MIN, RatingLabel, RatingSummary, Review
from .store import ReviewStore
from .windows import window_bounds

logger = logging.getLogger(__name__)


class RatingSummarizer:
    """Summarizes the ratings of one organization's recent reviews."""

    def __init__(self, store: ReviewStore, classifier: Optional[RatingClassifier] = None):
        self.store = store
        self.classifier = classifier or RatingClassifier()

    def summarize_reviews(
        self, reviews: List[Review], start: datetime, end: datetime
    ) -> RatingSummary:
        df = build_review_frame(reviews, self.classifier, start, end)
        if df.empty:
            return RatingSummary(
                review_count=0,
                negative_count=0,
                non_negative_count=0,
                excluded_count=0,
                average_rating=0.0,
                dimension_averages={dimension: None for dimension in RATING_DIMENSIONS},
            )

        ratings = df[list(RATING_DIMENSIONS)]
        if self.classifier.ignore_out_of_range:
            ratings = ratings.where(ratings.ge(RATING_MIN) & ratings.le(RATING_MAX))

        # NaN means no review rated that dimension
        means = ratings.mean(skipna=True)
        dimension_averages = {
            dimension: (None if means.isna()[dimension] else float(means[dimension]))
            for dimension in RATING_DIMENSIONS
        }
        available = [value for value in dimension_averages.values() if value is not None]
        average_rating = sum(available) / len(available) if available else 0.0

        label_counts = df["label"].value_counts()
        return RatingSummary(
            review_count=len(df),
            negative_count=int(label_counts.get(RatingLabel.NEGATIVE.value, 0)),
            non_negative_count=int(label_counts.get(RatingLabel.NON_NEGATIVE.value, 0)),
            excluded_count=int(label_counts.get(RatingLabel.EXCLUDED.value, 0)),
            average_rating=average_rating,
            dimension_averages=dimension_averages,
            last_review_at=df["created_at"].max().to_pydatetime(),
        )

    def summarize(
        self,
        organization_id: int,
        as_of: Optional[datetime] = None,
        period_days: int = 30,
    ) -> RatingSummary:
        """
        Rating summary over [as_of - period_days, as_of).

        Raises:
            InvalidWindow: period_days <= 0
            StoreUnavailable: the review store cannot be reached
        """
        start, end = window_bounds(as_of, period_days, "period_days")
        reviews = self.store.fetch_reviews(organization_id, start, end)
        summary = self.summarize_reviews(reviews, start, end)

        logger.debug(
            f"Organization {organization_id}: {summary.review_count} reviews, "
            f"average rating {summary.average_rating:.2f}"
        )
        return summary
