"""
SQLAlchemy ORM Models for the Review Store

Only the columns the analytics engine reads are mapped: organizations and
the posts table, where reviews are posts of type 'review' carrying five
optional 1-5 ratings.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from . import Base

REVIEW_POST_TYPE = "review"


class Organization(Base):
    """Organization being reviewed"""

    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    posts = relationship("Post", back_populates="organization")


class Post(Base):
    """Feed post; reviews are posts with type 'review' and structured ratings"""

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(
        Integer, ForeignKey("organizations.id"), nullable=True, index=True
    )
    type = Column(String(20), nullable=False, default="discussion", index=True)
    title = Column(String(500), nullable=True)
    content = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )

    # 1-5 ratings, NULL when not rated
    work_life_balance = Column(Integer, nullable=True)
    culture_values = Column(Integer, nullable=True)
    career_opportunities = Column(Integer, nullable=True)
    compensation = Column(Integer, nullable=True)
    management = Column(Integer, nullable=True)

    # Relationships
    organization = relationship("Organization", back_populates="posts")

    # Index for windowed review queries
    __table_args__ = (
        Index("ix_posts_org_type_created", "organization_id", "type", "created_at"),
    )
