"""
Rating Classifier (Deterministic)

Maps a review's five structured ratings to a negative / non-negative label.
A review is negative when the mean of its present ratings is at or below
the configured threshold (2.0 on the 1-5 scale by default). Reviews with no
present rating carry no sentiment and are EXCLUDED.
"""

import logging
from typing import List

from .models import RATING_MAX, RATING_MIN, RatingLabel, Review

logger = logging.getLogger(__name__)

DEFAULT_NEGATIVE_MEAN_THRESHOLD = 2.0


class RatingClassifier:
    """Stateless classifier over a review's present rating dimensions."""

    def __init__(
        self,
        negative_mean_threshold: float = DEFAULT_NEGATIVE_MEAN_THRESHOLD,
        ignore_out_of_range: bool = True,
    ):
        """
        Args:
            negative_mean_threshold: Mean rating at or below which a review is negative
            ignore_out_of_range: Treat ratings outside [1, 5] as absent (logged as warning)
        """
        self.negative_mean_threshold = negative_mean_threshold
        self.ignore_out_of_range = ignore_out_of_range

    def usable_ratings(self, review: Review) -> List[int]:
        ratings = review.present_ratings
        if not self.ignore_out_of_range:
            return ratings

        usable = [value for value in ratings if RATING_MIN <= value <= RATING_MAX]
        if len(usable) != len(ratings):
            logger.warning(
                f"Review {review.id}: ignoring {len(ratings) - len(usable)} "
                f"rating(s) outside [{RATING_MIN}, {RATING_MAX}]"
            )
        return usable

    def classify(self, review: Review) -> RatingLabel:
        ratings = self.usable_ratings(review)
        if not ratings:
            return RatingLabel.EXCLUDED

        mean = sum(ratings) / len(ratings)
        if mean <= self.negative_mean_threshold:
            return RatingLabel.NEGATIVE
        return RatingLabel.NON_NEGATIVE


_default_classifier = RatingClassifier()


def classify(review: Review) -> RatingLabel:
    """Classify with the default rule (mean of present ratings <= 2.0)."""
    return _default_classifier.classify(review)
