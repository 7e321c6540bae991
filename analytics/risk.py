"""
Risk Evaluation Module

Flags an organization when the share of negative reviews in the trailing
window strictly exceeds the alert threshold (default: more than 40% of the
reviews in the last 30 days).
"""

import logging
from datetime import datetime
from typing import Optional

from .aggregator import WindowAggregator
from .models import RiskSignal, WindowCounts
from .windows import validate_threshold, validate_window

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30
DEFAULT_THRESHOLD_PERCENT = 40.0


def signal_from_counts(
    counts: WindowCounts,
    window_days: int = DEFAULT_WINDOW_DAYS,
    threshold_percent: float = DEFAULT_THRESHOLD_PERCENT,
) -> RiskSignal:
    """
    Turn window counts into a risk signal.

    An empty window is never a risk. The percentage is compared unrounded
    and only a value strictly above the threshold raises the flag.
    """
    if counts.total == 0:
        return RiskSignal(
            has_risk=False,
            negative_percentage=0.0,
            total=0,
            negative=0,
            window_days=window_days,
            threshold_percent=threshold_percent,
        )

    negative_percentage = 100.0 * counts.negative / counts.total
    return RiskSignal(
        has_risk=negative_percentage > threshold_percent,
        negative_percentage=negative_percentage,
        total=counts.total,
        negative=counts.negative,
        window_days=window_days,
        threshold_percent=threshold_percent,
    )


class RiskEvaluator:
    """Applies the alert threshold to windowed review counts."""

    def __init__(
        self,
        aggregator: WindowAggregator,
        window_days: int = DEFAULT_WINDOW_DAYS,
        threshold_percent: float = DEFAULT_THRESHOLD_PERCENT,
    ):
        """
        Initialize the risk evaluator.

        Args:
            aggregator: Window aggregator used to count reviews
            window_days: Default trailing window length in days
            threshold_percent: Default alert threshold in percent, within [0, 100]
        """
        self.aggregator = aggregator
        self.window_days = validate_window(window_days, "window_days")
        self.threshold_percent = validate_threshold(threshold_percent)

    def resolve(self, window_days: Optional[int], threshold_percent: Optional[float]):
        """Per-call overrides fall back to this evaluator's configured values."""
        window_days = self.window_days if window_days is None else window_days
        threshold_percent = (
            self.threshold_percent if threshold_percent is None else threshold_percent
        )
        return (
            validate_window(window_days, "window_days"),
            validate_threshold(threshold_percent),
        )

    def evaluate(
        self,
        organization_id: int,
        as_of: Optional[datetime] = None,
        window_days: Optional[int] = None,
        threshold_percent: Optional[float] = None,
    ) -> RiskSignal:
        """
        Compute the risk signal for an organization.

        Args:
            organization_id: Organization to evaluate
            as_of: Window end (exclusive), defaults to now
            window_days: Override of the trailing window length
            threshold_percent: Override of the alert threshold

        Returns:
            RiskSignal for the window

        Raises:
            InvalidWindow: window_days <= 0 or threshold outside [0, 100]
            StoreUnavailable: the review store cannot be reached
        """
        window_days, threshold_percent = self.resolve(window_days, threshold_percent)
        counts = self.aggregator.aggregate(organization_id, as_of, window_days)
        signal = signal_from_counts(counts, window_days, threshold_percent)

        if signal.has_risk:
            logger.info(
                f"Risk signal for organization {organization_id}: "
                f"{signal.negative_percentage:.2f}% negative reviews "
                f"(threshold {threshold_percent}%, {counts.total} reviews)"
            )
        return signal
