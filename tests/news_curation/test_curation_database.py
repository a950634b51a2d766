"""Tests for news curation database operations."""

from datetime import date
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine, func, select, text
from sqlalchemy.exc import OperationalError

from news_curation import db_engine
from news_curation.database import (
    ArticleNotFoundError,
    attach_feedback,
    create_session,
    get_all_preferences,
    get_article_by_id,
    get_articles_since,
    get_latest_session,
    get_recent_feedback_articles,
    get_sessions_since,
    record_curation,
    set_preference,
    upsert_article,
)
from news_curation.models import Candidate, Selection
from news_curation.orm_models import Base, CuratedArticleORM, UserFeedbackORM
from news_curation.preferences import DEFAULT_PREFERENCES


@pytest.fixture
def temp_db():
    """Create a temporary in-memory database for testing."""
    test_engine = create_engine("sqlite:///:memory:")
    db_engine.set_engine(test_engine)
    Base.metadata.create_all(test_engine)
    yield test_engine
    db_engine.reset_engine()


def make_selection(url="https://news.example/1", title="India and Japan deepen ties", **kwargs):
    candidate = Candidate(
        title=title,
        url=url,
        description=kwargs.pop("description", "Leaders met in Tokyo"),
        source_name=kwargs.pop("source_name", "The Hindu"),
        published=kwargs.pop("published", "2025-01-18T09:30:00Z"),
    )
    return Selection(
        candidate=candidate,
        relevance_score=kwargs.pop("relevance_score", 8),
        category=kwargs.pop("category", "Bilateral Relations"),
        reason=kwargs.pop("reason", "Significant bilateral development"),
    )


class TestInitDb:
    """Tests for schema creation."""

    def test_creates_tables(self, temp_db):
        with temp_db.connect() as conn:
            result = conn.execute(text("SELECT name FROM sqlite_master WHERE type='table'"))
            tables = {row[0] for row in result.fetchall()}

        assert {"curated_articles", "user_feedback", "user_preferences", "curation_sessions"} <= tables

    def test_foreign_keys_enabled(self, temp_db):
        with temp_db.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1


class TestUpsertArticle:
    """Tests for storing curated articles."""

    def test_creates_article(self, temp_db):
        stored = upsert_article(make_selection())

        assert stored.id is not None
        assert stored.title == "India and Japan deepen ties"
        assert stored.source_name == "The Hindu"
        assert stored.published_at == 1737192600
        assert stored.relevance_score == 8
        assert stored.category == "Bilateral Relations"
        assert stored.curation_reason == "Significant bilateral development"
        assert stored.curated_at > 0

    def test_same_url_returns_existing_record(self, temp_db):
        first = upsert_article(make_selection())
        second = upsert_article(make_selection(title="Rewritten headline", reason="Other reason"))

        assert second.id == first.id
        assert second.title == "India and Japan deepen ties"
        assert second.curation_reason == "Significant bilateral development"

    def test_different_urls_create_separate_records(self, temp_db):
        first = upsert_article(make_selection(url="https://news.example/1"))
        second = upsert_article(make_selection(url="https://news.example/2"))

        assert first.id != second.id

    def test_missing_title_falls_back_to_url(self, temp_db):
        stored = upsert_article(make_selection(title=None))

        assert stored.title == "https://news.example/1"

    def test_unparseable_published_date_stored_as_none(self, temp_db):
        stored = upsert_article(make_selection(published="last tuesday"))

        assert stored.published_at is None

    def test_joins_callers_transaction(self, temp_db):
        with pytest.raises(RuntimeError):
            with db_engine.get_session() as session:
                upsert_article(make_selection(), session)
                raise RuntimeError("abort")

        assert get_articles_since(0) == []


class TestArticleLookup:
    """Tests for fetching and deleting articles."""

    def test_get_by_id(self, temp_db):
        stored = upsert_article(make_selection())

        assert get_article_by_id(stored.id).url == stored.url

    def test_get_by_id_missing(self, temp_db):
        assert get_article_by_id(999) is None

    def test_articles_since_newest_first(self, temp_db):
        with patch("news_curation.database.time") as mock_time:
            mock_time.time.return_value = 1000
            old = upsert_article(make_selection(url="https://news.example/old"))
            mock_time.time.return_value = 2000
            middle = upsert_article(make_selection(url="https://news.example/middle"))
            mock_time.time.return_value = 3000
            new = upsert_article(make_selection(url="https://news.example/new"))

        assert [a.id for a in get_articles_since(1500)] == [new.id, middle.id]
        assert [a.id for a in get_articles_since(0)] == [new.id, middle.id, old.id]

    def test_deleting_article_cascades_feedback(self, temp_db):
        stored = upsert_article(make_selection())
        attach_feedback(stored.id, liked=True)
        attach_feedback(stored.id, liked=False)

        with db_engine.get_session() as session:
            session.delete(session.get(CuratedArticleORM, stored.id))

        assert get_article_by_id(stored.id) is None

        with db_engine.get_session() as session:
            remaining = session.execute(select(func.count()).select_from(UserFeedbackORM)).scalar()
        assert remaining == 0


class TestFeedback:
    """Tests for recording feedback."""

    def test_attach_feedback(self, temp_db):
        stored = upsert_article(make_selection())

        feedback = attach_feedback(stored.id, liked=True, notes="Great analysis")

        assert feedback.id is not None
        assert feedback.article_id == stored.id
        assert feedback.liked is True
        assert feedback.notes == "Great analysis"
        assert feedback.feedback_at > 0

    def test_unknown_article_raises(self, temp_db):
        with pytest.raises(ArticleNotFoundError) as exc_info:
            attach_feedback(99999, liked=True)

        assert exc_info.value.article_id == 99999
        assert "Article not found with ID: 99999" in str(exc_info.value)

    def test_unknown_article_writes_nothing(self, temp_db):
        with pytest.raises(ArticleNotFoundError):
            attach_feedback(5, liked=False)

        with db_engine.get_session() as session:
            count = session.execute(select(func.count()).select_from(UserFeedbackORM)).scalar()
        assert count == 0

    def test_latest_feedback_tie_goes_to_later_row(self, temp_db):
        stored = upsert_article(make_selection())
        with patch("news_curation.database.time") as mock_time:
            mock_time.time.return_value = 5000
            attach_feedback(stored.id, liked=True)
            attach_feedback(stored.id, liked=False)

        assert get_recent_feedback_articles(liked=True) == []
        assert [a.id for a in get_recent_feedback_articles(liked=False)] == [stored.id]


class TestRecentFeedbackArticles:
    """Tests for selecting liked/disliked samples."""

    def test_liked_and_disliked_are_split(self, temp_db):
        liked = upsert_article(make_selection(url="https://news.example/liked"))
        disliked = upsert_article(make_selection(url="https://news.example/disliked"))
        upsert_article(make_selection(url="https://news.example/unrated"))
        attach_feedback(liked.id, liked=True)
        attach_feedback(disliked.id, liked=False)

        assert [a.id for a in get_recent_feedback_articles(liked=True)] == [liked.id]
        assert [a.id for a in get_recent_feedback_articles(liked=False)] == [disliked.id]

    def test_latest_feedback_decides(self, temp_db):
        stored = upsert_article(make_selection())
        with patch("news_curation.database.time") as mock_time:
            mock_time.time.return_value = 1000
            attach_feedback(stored.id, liked=True)
            mock_time.time.return_value = 2000
            attach_feedback(stored.id, liked=False)

        assert get_recent_feedback_articles(liked=True) == []
        assert [a.id for a in get_recent_feedback_articles(liked=False)] == [stored.id]

    def test_article_appears_once_with_repeated_feedback(self, temp_db):
        stored = upsert_article(make_selection())
        for _ in range(3):
            attach_feedback(stored.id, liked=True)

        assert len(get_recent_feedback_articles(liked=True)) == 1

    def test_most_recently_curated_first_and_limited(self, temp_db):
        ids = []
        with patch("news_curation.database.time") as mock_time:
            for i in range(5):
                mock_time.time.return_value = 1000 + i
                stored = upsert_article(make_selection(url=f"https://news.example/{i}"))
                attach_feedback(stored.id, liked=True)
                ids.append(stored.id)

        result = get_recent_feedback_articles(liked=True, limit=3)

        assert [a.id for a in result] == list(reversed(ids))[:3]


class TestPreferences:
    """Tests for preference storage."""

    def test_defaults_without_stored_values(self, temp_db):
        assert get_all_preferences()["articles_per_day"] == 2
        assert "not_a_key" not in get_all_preferences()

    def test_set_preference(self, temp_db):
        set_preference("articles_per_day", 3)

        assert get_all_preferences()["articles_per_day"] == 3

    def test_set_preference_replaces_value(self, temp_db):
        set_preference("topics", ["trade"])
        set_preference("topics", ["security", "energy"])

        assert get_all_preferences()["topics"] == ["security", "energy"]

    def test_nested_value_round_trips(self, temp_db):
        profile = {"knowledge_level": "beginner", "geographic_focus": ["South Asia"], "learning_goals": ""}
        set_preference("user_profile", profile)

        assert get_all_preferences()["user_profile"] == profile

    def test_all_preferences_overlays_defaults(self, temp_db):
        set_preference("articles_per_day", 4)
        set_preference("custom_flag", True)

        preferences = get_all_preferences()

        assert preferences["articles_per_day"] == 4
        assert preferences["custom_flag"] is True
        assert preferences["min_relevance_score"] == 7

    def test_defaults_are_not_mutated(self, temp_db):
        preferences = get_all_preferences()
        preferences["topics"].append("sports")
        preferences["user_profile"]["knowledge_level"] = "expert"

        assert "sports" not in DEFAULT_PREFERENCES["topics"]
        assert DEFAULT_PREFERENCES["user_profile"]["knowledge_level"] == "intermediate"
        assert "sports" not in get_all_preferences()["topics"]


class TestSessions:
    """Tests for curation session records."""

    def test_create_session(self, temp_db):
        session = create_session(articles_fetched=25, articles_curated=2, agent_notes="Selected 2 articles")

        assert session.id is not None
        assert session.session_date == date.today().isoformat()
        assert session.run_number == 1
        assert session.articles_fetched == 25
        assert session.articles_curated == 2
        assert session.agent_notes == "Selected 2 articles"

    def test_second_run_same_day_gets_next_run_number(self, temp_db):
        first = create_session(10, 2)
        second = create_session(12, 2)

        assert first.run_number == 1
        assert second.run_number == 2
        assert first.id != second.id

    def test_run_numbers_restart_each_day(self, temp_db):
        create_session(10, 2, session_date=date(2025, 1, 17))
        create_session(10, 2, session_date=date(2025, 1, 17))
        other_day = create_session(10, 2, session_date=date(2025, 1, 18))

        assert other_day.run_number == 1

    def test_sessions_since_newest_first(self, temp_db):
        create_session(1, 1, session_date=date(2025, 1, 10))
        create_session(2, 1, session_date=date(2025, 1, 15))
        create_session(3, 1, session_date=date(2025, 1, 15))

        sessions = get_sessions_since(date(2025, 1, 12))

        assert [(s.session_date, s.run_number) for s in sessions] == [
            ("2025-01-15", 2),
            ("2025-01-15", 1),
        ]

    def test_latest_session(self, temp_db):
        assert get_latest_session() is None

        create_session(1, 1, session_date=date(2025, 1, 10))
        create_session(2, 1, session_date=date(2025, 1, 11))

        assert get_latest_session().session_date == "2025-01-11"


class TestRecordCuration:
    """Tests for storing a run's articles and session together."""

    def test_stores_articles_and_session(self, temp_db):
        selections = [make_selection(url="https://news.example/1"), make_selection(url="https://news.example/2")]

        articles, run = record_curation(selections, articles_fetched=12, agent_notes="Selected 2 articles")

        assert [a.url for a in articles] == ["https://news.example/1", "https://news.example/2"]
        assert all(a.id is not None for a in articles)
        assert run.articles_fetched == 12
        assert run.articles_curated == 2
        assert run.run_number == 1
        assert get_latest_session().id == run.id

    def test_existing_url_kept_unmodified(self, temp_db):
        first = upsert_article(make_selection())

        articles, _ = record_curation([make_selection(title="Rewritten headline")], articles_fetched=1)

        assert articles[0].id == first.id
        assert articles[0].title == "India and Japan deepen ties"

    def test_failed_session_insert_rolls_back_articles(self, temp_db):
        with patch("news_curation.database.create_session",
                   side_effect=OperationalError("INSERT", {}, Exception("disk I/O error"))):
            with pytest.raises(OperationalError):
                record_curation([make_selection()], articles_fetched=5)

        assert get_articles_since(0) == []
        assert get_latest_session() is None
