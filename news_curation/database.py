"""
Database operations for the news curation system.

Uses SQLAlchemy ORM for database access. The public API uses dataclass models
from models.py, with conversion to/from ORM models handled internally.
"""

import copy
import time
from contextlib import nullcontext
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from news_curation.db_engine import get_engine, get_session
from news_curation.models import CurationSession, Feedback, Selection, StoredArticle
from news_curation.orm_models import (
    Base,
    CuratedArticleORM,
    CurationSessionORM,
    UserFeedbackORM,
    UserPreferenceORM,
    article_orm_to_dataclass,
    feedback_orm_to_dataclass,
    session_orm_to_dataclass,
)
from news_curation.preferences import DEFAULT_PREFERENCES
from util.logging_util import setup_logger

logger = setup_logger(__name__)


class ArticleNotFoundError(LookupError):
    """Raised when an article id does not resolve to a stored article."""

    def __init__(self, article_id: int):
        super().__init__(f"Article not found with ID: {article_id}")
        self.article_id = article_id


def init_db():
    """Initialize the database schema."""
    engine = get_engine()
    Base.metadata.create_all(engine)


def start_of_day_epoch(day: date) -> int:
    return int(datetime.combine(day, datetime.min.time()).timestamp())


# Articles


def _find_article_orm(session, url: str) -> Optional[CuratedArticleORM]:
    stmt = select(CuratedArticleORM).where(CuratedArticleORM.url == url)
    return session.execute(stmt).scalar_one_or_none()


def _in_session(db_session: Optional[Session]):
    """Join the caller's transaction, or open one that commits on exit."""
    if db_session is not None:
        return nullcontext(db_session)
    return get_session()


def _get_or_create_article(session: Session, selection: Selection) -> StoredArticle:
    candidate = selection.candidate
    existing = _find_article_orm(session, candidate.url)
    if existing is not None:
        logger.debug(f"Article already stored: {candidate.url}")
        return article_orm_to_dataclass(existing)

    orm = CuratedArticleORM(
        title=candidate.title or candidate.url,
        description=candidate.description,
        url=candidate.url,
        source_name=candidate.source_name,
        published_at=candidate.published_at,
        curated_at=int(time.time()),
        curation_reason=selection.reason,
        relevance_score=selection.relevance_score,
        category=selection.category,
    )
    session.add(orm)
    session.flush()
    return article_orm_to_dataclass(orm)


def upsert_article(selection: Selection, db_session: Optional[Session] = None) -> StoredArticle:
    """Find the stored article for the selection's URL, creating it if absent.

    An existing article is returned unmodified: the first curation of a URL
    wins and later selections of the same URL do not overwrite it. Pass
    `db_session` to write inside the caller's transaction.
    """
    try:
        with _in_session(db_session) as session:
            return _get_or_create_article(session, selection)
    except IntegrityError:
        if db_session is not None:
            raise
        # Another writer stored the URL between the lookup and the insert
        with get_session() as session:
            existing = _find_article_orm(session, selection.candidate.url)
            if existing is None:
                raise
            return article_orm_to_dataclass(existing)


def get_article_by_id(article_id: int) -> Optional[StoredArticle]:
    """Get an article by its database ID."""
    with get_session() as session:
        orm = session.get(CuratedArticleORM, article_id)
        if orm is None:
            return None
        return article_orm_to_dataclass(orm)


def get_articles_since(since_epoch: int) -> List[StoredArticle]:
    """Get articles curated at or after the given time, newest first."""
    with get_session() as session:
        stmt = (
            select(CuratedArticleORM)
            .where(CuratedArticleORM.curated_at >= since_epoch)
            .order_by(CuratedArticleORM.curated_at.desc(), CuratedArticleORM.id.desc())
        )
        orms = session.execute(stmt).scalars().all()
        return [article_orm_to_dataclass(orm) for orm in orms]


def get_todays_articles() -> List[StoredArticle]:
    """Get the articles curated since local midnight, newest first."""
    return get_articles_since(start_of_day_epoch(date.today()))


# Feedback


def attach_feedback(article_id: int, liked: bool, notes: Optional[str] = None) -> Feedback:
    """Record a like/dislike for a stored article.

    Raises:
        ArticleNotFoundError: if the article id does not exist.
    """
    with get_session() as session:
        if session.get(CuratedArticleORM, article_id) is None:
            raise ArticleNotFoundError(article_id)

        orm = UserFeedbackORM(
            curated_article_id=article_id,
            liked=liked,
            notes=notes,
            feedback_at=int(time.time()),
        )
        session.add(orm)
        session.flush()
        return feedback_orm_to_dataclass(orm)


def get_recent_feedback_articles(liked: bool, limit: int = 10) -> List[StoredArticle]:
    """Get the most recently curated articles whose latest feedback matches `liked`.

    Only the newest feedback row of each article counts (ties on feedback_at
    go to the later row), so an article liked and then disliked is disliked.
    """
    latest = (
        select(
            UserFeedbackORM.curated_article_id.label("article_id"),
            UserFeedbackORM.liked.label("liked"),
            func.row_number()
            .over(
                partition_by=UserFeedbackORM.curated_article_id,
                order_by=(UserFeedbackORM.feedback_at.desc(), UserFeedbackORM.id.desc()),
            )
            .label("position"),
        )
        .subquery()
    )

    with get_session() as session:
        stmt = (
            select(CuratedArticleORM)
            .join(latest, latest.c.article_id == CuratedArticleORM.id)
            .where(latest.c.position == 1, latest.c.liked == liked)
            .order_by(CuratedArticleORM.curated_at.desc(), CuratedArticleORM.id.desc())
            .limit(limit)
        )
        orms = session.execute(stmt).scalars().all()
        return [article_orm_to_dataclass(orm) for orm in orms]


# Preferences


def set_preference(key: str, value: Any) -> Any:
    """Create or replace a stored preference."""
    now = int(time.time())
    with get_session() as session:
        stmt = select(UserPreferenceORM).where(UserPreferenceORM.key == key)
        orm = session.execute(stmt).scalar_one_or_none()
        if orm is None:
            session.add(UserPreferenceORM(key=key, value=value, updated_at=now))
        else:
            orm.value = value
            orm.updated_at = now
    logger.info(f"Updated preference {key}")
    return value


def get_all_preferences(defaults: Mapping[str, Any] = DEFAULT_PREFERENCES) -> Dict[str, Any]:
    """Get the defaults overlaid with every stored preference."""
    preferences = {key: copy.deepcopy(value) for key, value in defaults.items()}
    with get_session() as session:
        stmt = select(UserPreferenceORM).order_by(UserPreferenceORM.key)
        for orm in session.execute(stmt).scalars().all():
            preferences[orm.key] = orm.value
    return preferences


# Curation sessions


def create_session(
    articles_fetched: int,
    articles_curated: int,
    agent_notes: Optional[str] = None,
    session_date: Optional[date] = None,
    db_session: Optional[Session] = None,
) -> CurationSession:
    """Record a curation run. Every call adds a new row for the day."""
    day = (session_date or date.today()).isoformat()
    with _in_session(db_session) as session:
        stmt = select(func.max(CurationSessionORM.run_number)).where(
            CurationSessionORM.session_date == day
        )
        last_run = session.execute(stmt).scalar()

        orm = CurationSessionORM(
            session_date=day,
            run_number=(last_run or 0) + 1,
            articles_fetched=articles_fetched,
            articles_curated=articles_curated,
            agent_notes=agent_notes,
            created_at=int(time.time()),
        )
        session.add(orm)
        session.flush()
        return session_orm_to_dataclass(orm)


def record_curation(
    selections: List[Selection],
    articles_fetched: int,
    agent_notes: Optional[str] = None,
) -> Tuple[List[StoredArticle], CurationSession]:
    """Store a run's selected articles and its session row in one transaction.

    If any write fails nothing from the run is kept.
    """
    with get_session() as session:
        articles = [upsert_article(selection, session) for selection in selections]
        run = create_session(
            articles_fetched=articles_fetched,
            articles_curated=len(articles),
            agent_notes=agent_notes,
            db_session=session,
        )
    return articles, run


def get_sessions_since(start_date: date) -> List[CurationSession]:
    """Get sessions on or after the given date, newest first."""
    with get_session() as session:
        stmt = (
            select(CurationSessionORM)
            .where(CurationSessionORM.session_date >= start_date.isoformat())
            .order_by(CurationSessionORM.session_date.desc(), CurationSessionORM.run_number.desc())
        )
        orms = session.execute(stmt).scalars().all()
        return [session_orm_to_dataclass(orm) for orm in orms]


def get_latest_session() -> Optional[CurationSession]:
    """Get the most recent curation session."""
    with get_session() as session:
        stmt = (
            select(CurationSessionORM)
            .order_by(CurationSessionORM.session_date.desc(), CurationSessionORM.run_number.desc())
            .limit(1)
        )
        orm = session.execute(stmt).scalar_one_or_none()
        if orm is None:
            return None
        return session_orm_to_dataclass(orm)
