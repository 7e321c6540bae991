"""
Analytics Data Models

Value types consumed and produced by the analytics engine. Reviews are read
from the review store and never mutated; every result type is recomputed per
query and never persisted.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .windows import ensure_utc

RATING_DIMENSIONS: Tuple[str, ...] = (
    "work_life_balance",
    "culture_values",
    "career_opportunities",
    "compensation",
    "management",
)

RATING_MIN = 1
RATING_MAX = 5


class RatingLabel(str, Enum):
    """Sentiment label derived from a review's structured ratings."""

    NEGATIVE = "negative"
    NON_NEGATIVE = "non_negative"
    EXCLUDED = "excluded"  # no rating dimension present


@dataclass(frozen=True)
class Review:
    """
    An organization review as seen by the engine.

    Each rating dimension is an integer in [1, 5] or None when not rated.
    A naive created_at is interpreted as UTC.
    """

    id: int
    organization_id: int
    created_at: datetime
    work_life_balance: Optional[int] = None
    culture_values: Optional[int] = None
    career_opportunities: Optional[int] = None
    compensation: Optional[int] = None
    management: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "created_at", ensure_utc(self.created_at))

    @property
    def ratings(self) -> Dict[str, Optional[int]]:
        """All five dimensions by name, None where absent."""
        return {name: getattr(self, name) for name in RATING_DIMENSIONS}

    @property
    def present_ratings(self) -> List[int]:
        return [value for value in self.ratings.values() if value is not None]


@dataclass(frozen=True)
class WindowCounts:
    """Classified review counts for one trailing window."""

    total: int
    negative: int

    @property
    def non_negative(self) -> int:
        return self.total - self.negative


@dataclass(frozen=True)
class RiskSignal:
    """Whether the share of negative reviews in the window exceeds the threshold."""

    has_risk: bool
    negative_percentage: float
    total: int = 0
    negative: int = 0
    window_days: int = 30
    threshold_percent: float = 40.0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the keys the dashboard consumes."""
        return {
            "hasRisk": self.has_risk,
            "negativePercentageLast30Days": self.negative_percentage,
        }


@dataclass(frozen=True)
class TrendPoint:
    """Review volume on one UTC calendar day."""

    date: date
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date.isoformat(), "count": self.count}


@dataclass(frozen=True)
class RatingSummary:
    """Rating statistics for one organization over a trailing period."""

    review_count: int
    negative_count: int
    non_negative_count: int
    excluded_count: int
    average_rating: float
    dimension_averages: Dict[str, Optional[float]] = field(default_factory=dict)
    last_review_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reviewCount": self.review_count,
            "averageRating": self.average_rating,
            "sentimentBreakdown": {
                "negative": self.negative_count,
                "nonNegative": self.non_negative_count,
                "excluded": self.excluded_count,
            },
            "dimensionAverages": dict(self.dimension_averages),
            "lastReviewDate": (
                self.last_review_at.isoformat() if self.last_review_at else None
            ),
        }


@dataclass(frozen=True)
class AnalyticsResult:
    """Risk signal and volume trend computed against one as_of instant."""

    organization_id: int
    as_of: datetime
    risk: RiskSignal
    trend: List[TrendPoint]
    summary: Optional[RatingSummary] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "organizationId": self.organization_id,
            "asOf": self.as_of.isoformat(),
            "riskSignal": self.risk.to_dict(),
            "reviewTrends": [point.to_dict() for point in self.trend],
        }
        if self.summary is not None:
            result["summary"] = self.summary.to_dict()
        return result
