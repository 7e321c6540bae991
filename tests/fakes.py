"""
Test doubles and builders for the analytics tests.
"""

import itertools
from datetime import datetime, timezone
from typing import List

from analytics.exceptions import StoreUnavailable
from analytics.models import Review
from analytics.store import ReviewStore

AS_OF = datetime(2024, 1, 31, 12, 0, 0, tzinfo=timezone.utc)

NEGATIVE = (1, 2, 2, 3, 1)  # mean 1.8
POSITIVE = (4, 4, 5, 3, 4)  # mean 4.0
UNRATED = (None, None, None, None, None)

_review_ids = itertools.count(1)


class FakeReviewStore(ReviewStore):
    """In-memory review store honoring the half-open fetch contract."""

    def __init__(self, reviews=None):
        self.reviews: List[Review] = list(reviews or [])
        self.calls = []
        self.fail = False

    def add(self, review: Review) -> None:
        self.reviews.append(review)

    def fetch_reviews(self, organization_id, from_inclusive, to_exclusive):
        self.calls.append((organization_id, from_inclusive, to_exclusive))
        if self.fail:
            raise StoreUnavailable("review store is down")

        return sorted(
            (
                r
                for r in self.reviews
                if r.organization_id == organization_id
                and from_inclusive <= r.created_at < to_exclusive
            ),
            key=lambda r: (r.created_at, r.id),
        )


def make_review(created_at, ratings=(3, 3, 3, 3, 3), organization_id=1, review_id=None) -> Review:
    """Build a review; ratings is a 5-tuple with None for unrated dimensions."""
    work_life_balance, culture_values, career_opportunities, compensation, management = ratings
    return Review(
        id=next(_review_ids) if review_id is None else review_id,
        organization_id=organization_id,
        created_at=created_at,
        work_life_balance=work_life_balance,
        culture_values=culture_values,
        career_opportunities=career_opportunities,
        compensation=compensation,
        management=management,
    )
