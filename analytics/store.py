"""
Review Store Access

The engine reads reviews through a ReviewStore. The SQLAlchemy implementation
queries the posts table of the surrounding application; connectivity failures
surface as StoreUnavailable and are never retried here.
"""

import asyncio
import logging
from abc import ABCMeta, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from typing import List

from sqlalchemy import and_, select
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from db import SessionLocal, get_async_session_factory
from db.models import REVIEW_POST_TYPE, Post

from .exceptions import StoreUnavailable
from .models import Review
from .windows import ensure_utc

logger = logging.getLogger(__name__)


class ReviewStore(metaclass=ABCMeta):
    """
    Abstract review source.

    Implementations return the reviews of one organization created in
    [from_inclusive, to_exclusive), ordered by creation time ascending.
    """

    @abstractmethod
    def fetch_reviews(
        self, organization_id: int, from_inclusive: datetime, to_exclusive: datetime
    ) -> List[Review]:
        """Fetch reviews in the half-open interval."""

    async def afetch_reviews(
        self, organization_id: int, from_inclusive: datetime, to_exclusive: datetime
    ) -> List[Review]:
        """
        Async fetch. The default runs the blocking fetch in a worker thread;
        stores with a native async driver should override this so that
        cancellation reaches the underlying query.
        """
        return await asyncio.to_thread(
            self.fetch_reviews, organization_id, from_inclusive, to_exclusive
        )


@contextmanager
def translate_store_errors(organization_id: int):
    """Raise StoreUnavailable for connectivity failures, re-raise anything else."""
    try:
        yield
    except (OperationalError, InterfaceError, PoolTimeoutError) as e:
        logger.error(f"Review store unavailable for organization {organization_id}: {e}")
        raise StoreUnavailable(f"Review store unavailable: {e}") from e
    except DBAPIError as e:
        if e.connection_invalidated:
            logger.error(f"Review store connection lost for organization {organization_id}: {e}")
            raise StoreUnavailable(f"Review store connection lost: {e}") from e
        logger.error(f"Database error fetching reviews: {e}")
        raise
    except SQLAlchemyError as e:
        logger.error(f"Database error fetching reviews: {e}")
        raise


class SQLAlchemyReviewStore(ReviewStore):
    """Reads reviews from the posts table, synchronously or through an AsyncSession."""

    def __init__(self, session_factory=None, async_session_factory=None):
        """
        Initialize the review store.

        Args:
            session_factory: Optional custom session factory, defaults to SessionLocal
            async_session_factory: Optional factory of AsyncSession objects. When
                omitted, the default store uses an async engine on DATABASE_URL and a
                store built on a custom session_factory fetches in a worker thread.
        """
        self.session_factory = session_factory or SessionLocal
        self.async_session_factory = async_session_factory

    def _query(self, organization_id: int, from_inclusive: datetime, to_exclusive: datetime):
        return (
            select(
                Post.id,
                Post.organization_id,
                Post.created_at,
                Post.work_life_balance,
                Post.culture_values,
                Post.career_opportunities,
                Post.compensation,
                Post.management,
            )
            .where(
                and_(
                    Post.organization_id == organization_id,
                    Post.type == REVIEW_POST_TYPE,
                    Post.created_at >= from_inclusive,
                    Post.created_at < to_exclusive,
                )
            )
            .order_by(Post.created_at, Post.id)
        )

    def _to_reviews(
        self, rows, organization_id: int, from_inclusive: datetime, to_exclusive: datetime
    ) -> List[Review]:
        reviews = [
            Review(
                id=row.id,
                organization_id=row.organization_id,
                created_at=row.created_at,
                work_life_balance=row.work_life_balance,
                culture_values=row.culture_values,
                career_opportunities=row.career_opportunities,
                compensation=row.compensation,
                management=row.management,
            )
            for row in rows
        ]

        logger.debug(
            f"Fetched {len(reviews)} reviews for organization {organization_id} "
            f"in [{from_inclusive.isoformat()}, {to_exclusive.isoformat()})"
        )
        return reviews

    def fetch_reviews(
        self, organization_id: int, from_inclusive: datetime, to_exclusive: datetime
    ) -> List[Review]:
        from_inclusive = ensure_utc(from_inclusive)
        to_exclusive = ensure_utc(to_exclusive)

        with translate_store_errors(organization_id):
            with self.session_factory() as session:
                rows = session.execute(
                    self._query(organization_id, from_inclusive, to_exclusive)
                ).fetchall()

        return self._to_reviews(rows, organization_id, from_inclusive, to_exclusive)

    async def afetch_reviews(
        self, organization_id: int, from_inclusive: datetime, to_exclusive: datetime
    ) -> List[Review]:
        """
        Fetch through an AsyncSession. Cancelling the awaiting task cancels the
        query and releases its connection.
        """
        factory = self.async_session_factory
        if factory is None:
            if self.session_factory is not SessionLocal:
                return await super().afetch_reviews(organization_id, from_inclusive, to_exclusive)
            factory = get_async_session_factory()

        from_inclusive = ensure_utc(from_inclusive)
        to_exclusive = ensure_utc(to_exclusive)

        with translate_store_errors(organization_id):
            async with factory() as session:
                result = await session.execute(
                    self._query(organization_id, from_inclusive, to_exclusive)
                )
                rows = result.fetchall()

        return self._to_reviews(rows, organization_id, from_inclusive, to_exclusive)
