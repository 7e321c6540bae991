"""
Shared fixtures for the analytics tests.
"""

from datetime import timedelta

import pytest

from tests.fakes import AS_OF, FakeReviewStore


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def store():
    return FakeReviewStore()


@pytest.fixture
def days_ago(as_of):
    """Instant `n` days before as_of."""

    def _days_ago(n, **extra):
        return as_of - timedelta(days=n, **extra)

    return _days_ago
