"""
SQLAlchemy ORM models for the news curation system.

These models are internal to the database layer. The public interface
uses the dataclass models from models.py.
"""

import json
from typing import Any, List, Optional

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator

from news_curation.models import CurationSession, Feedback, StoredArticle


class JSONEncodedValue(TypeDecorator):
    """Represents any JSON-serialisable value as a JSON-encoded string."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Any, dialect) -> Optional[str]:
        if value is None:
            return None
        return json.dumps(value)

    def process_result_value(self, value: Optional[str], dialect) -> Any:
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            # Rows written by hand may hold a bare string
            return value


class Base(DeclarativeBase):
    pass


class CuratedArticleORM(Base):
    """SQLAlchemy model for curated_articles table."""

    __tablename__ = "curated_articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    source_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    published_at: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    curated_at: Mapped[int] = mapped_column(Integer, nullable=False)
    curation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    relevance_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    feedback: Mapped[List["UserFeedbackORM"]] = relationship(
        back_populates="article", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        UniqueConstraint("url", name="uq_curated_articles_url"),
        Index("idx_curated_articles_curated_at", "curated_at"),
        Index("idx_curated_articles_published_at", "published_at"),
    )


class UserFeedbackORM(Base):
    """SQLAlchemy model for user_feedback table."""

    __tablename__ = "user_feedback"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    curated_article_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("curated_articles.id", ondelete="CASCADE"), nullable=False
    )
    liked: Mapped[bool] = mapped_column(Boolean, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    feedback_at: Mapped[int] = mapped_column(Integer, nullable=False)

    article: Mapped[CuratedArticleORM] = relationship(back_populates="feedback")

    __table_args__ = (
        Index("idx_user_feedback_article_id", "curated_article_id"),
        Index("idx_user_feedback_liked", "liked"),
    )


class UserPreferenceORM(Base):
    """SQLAlchemy model for user_preferences table."""

    __tablename__ = "user_preferences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    value: Mapped[Any] = mapped_column(JSONEncodedValue, nullable=True)
    updated_at: Mapped[int] = mapped_column(Integer, nullable=False)


class CurationSessionORM(Base):
    """SQLAlchemy model for curation_sessions table."""

    __tablename__ = "curation_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_date: Mapped[str] = mapped_column(Text, nullable=False)
    run_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    articles_fetched: Mapped[int] = mapped_column(Integer, default=0)
    articles_curated: Mapped[int] = mapped_column(Integer, default=0)
    agent_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("session_date", "run_number", name="uq_session_date_run"),
    )


# Conversion functions between ORM models and dataclasses


def article_orm_to_dataclass(orm: CuratedArticleORM) -> StoredArticle:
    """Convert a CuratedArticleORM instance to a StoredArticle dataclass."""
    return StoredArticle(
        id=orm.id,
        title=orm.title,
        description=orm.description,
        url=orm.url,
        source_name=orm.source_name,
        published_at=orm.published_at,
        curated_at=orm.curated_at,
        curation_reason=orm.curation_reason,
        relevance_score=orm.relevance_score,
        category=orm.category,
    )


def feedback_orm_to_dataclass(orm: UserFeedbackORM) -> Feedback:
    """Convert a UserFeedbackORM instance to a Feedback dataclass."""
    return Feedback(
        id=orm.id,
        article_id=orm.curated_article_id,
        liked=bool(orm.liked),
        notes=orm.notes,
        feedback_at=orm.feedback_at,
    )


def session_orm_to_dataclass(orm: CurationSessionORM) -> CurationSession:
    """Convert a CurationSessionORM instance to a CurationSession dataclass."""
    return CurationSession(
        id=orm.id,
        session_date=orm.session_date,
        run_number=orm.run_number,
        articles_fetched=orm.articles_fetched or 0,
        articles_curated=orm.articles_curated or 0,
        agent_notes=orm.agent_notes,
        created_at=orm.created_at,
    )
