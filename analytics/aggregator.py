"""
Window Aggregation Module

This module provides functionality to:
1. Fetch an organization's reviews for a trailing half-open window
2. Classify each review by its structured ratings
3. Count total and negative reviews in the window

Reviews without any rating are excluded from both counts.
"""

import logging
from datetime import datetime
from typing import List, Optional

import pandas as pd

from .classifier import RatingClassifier
from .models import RATING_DIMENSIONS, RatingLabel, Review, WindowCounts
from .store import ReviewStore
from .windows import in_window, window_bounds

logger = logging.getLogger(__name__)

FRAME_COLUMNS = ["id", "created_at", *RATING_DIMENSIONS, "label"]


def build_review_frame(
    reviews: List[Review],
    classifier: RatingClassifier,
    start: datetime,
    end: datetime,
) -> pd.DataFrame:
    """
    Convert reviews inside [start, end) to a labelled DataFrame.

    Reviews a store returns outside the window are dropped so adjacent
    windows never double count.

    Returns:
        DataFrame with columns: id, created_at (UTC), the five rating
        dimensions (float, NaN when absent), label (RatingLabel value)
    """
    inside = [review for review in reviews if in_window(review.created_at, start, end)]
    if len(inside) != len(reviews):
        logger.debug(
            f"Dropped {len(reviews) - len(inside)} review(s) outside "
            f"[{start.isoformat()}, {end.isoformat()})"
        )

    if not inside:
        return pd.DataFrame(columns=FRAME_COLUMNS)

    df = pd.DataFrame(
        [
            {
                "id": review.id,
                "created_at": review.created_at,
                **review.ratings,
                "label": classifier.classify(review).value,
            }
            for review in inside
        ],
        columns=FRAME_COLUMNS,
    )

    df["created_at"] = pd.to_datetime(df["created_at"], utc=True)
    for dimension in RATING_DIMENSIONS:
        df[dimension] = pd.to_numeric(df[dimension], errors="coerce")

    return df


class WindowAggregator:
    """Counts classified reviews of one organization in a trailing window."""

    def __init__(self, store: ReviewStore, classifier: Optional[RatingClassifier] = None):
        """
        Initialize the window aggregator.

        Args:
            store: Review store to read from
            classifier: Rating classifier, defaults to the mean <= 2.0 rule
        """
        self.store = store
        self.classifier = classifier or RatingClassifier()

    def count(self, reviews: List[Review], start: datetime, end: datetime) -> WindowCounts:
        """Count reviews in [start, end) without touching the store."""
        df = build_review_frame(reviews, self.classifier, start, end)
        if df.empty:
            return WindowCounts(total=0, negative=0)

        labels = df["label"]
        total = int((labels != RatingLabel.EXCLUDED.value).sum())
        negative = int((labels == RatingLabel.NEGATIVE.value).sum())
        return WindowCounts(total=total, negative=negative)

    def aggregate(
        self, organization_id: int, as_of: Optional[datetime], window_days: int
    ) -> WindowCounts:
        """
        Count total and negative reviews in [as_of - window_days, as_of).

        Raises:
            InvalidWindow: window_days <= 0
            StoreUnavailable: the review store cannot be reached
        """
        start, end = window_bounds(as_of, window_days)
        reviews = self.store.fetch_reviews(organization_id, start, end)
        counts = self.count(reviews, start, end)

        logger.debug(
            f"Organization {organization_id}: {counts.negative}/{counts.total} "
            f"negative reviews in the last {window_days} days"
        )
        return counts
