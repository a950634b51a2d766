"""
Data models for the news curation system.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class Category(Enum):
    INDIAN_FOREIGN_POLICY = "Indian Foreign Policy"
    GLOBAL_DIPLOMACY = "Global Diplomacy"
    BILATERAL_RELATIONS = "Bilateral Relations"
    GEOPOLITICAL_ANALYSIS = "Geopolitical Analysis"


class PipelineState(Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    DEDUPLICATING = "deduplicating"
    CONTEXT_BUILDING = "context_building"
    PROMPTING = "prompting"
    AWAITING_MODEL = "awaiting_model"
    PARSING = "parsing"
    PERSISTING = "persisting"
    COMPLETED = "completed"
    FAILED = "failed"


class FailureReason(Enum):
    NO_CANDIDATES = "no articles fetched from any source"
    CONTEXT_ERROR = "failed to load preferences and feedback"
    MODEL_ERROR = "model request failed"
    NO_SELECTIONS = "no suitable articles found"
    PERSISTENCE_ERROR = "failed to save curated articles"


def parse_timestamp(value: Optional[str]) -> Optional[int]:
    """Parse an ISO-8601 timestamp (e.g. 2025-01-18T09:30:00Z) to epoch seconds.

    Returns None when the value is missing or unparseable.
    """
    if not value:
        return None
    try:
        return int(datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp())
    except (TypeError, ValueError):
        return None


@dataclass
class Candidate:
    """A fetched article that has not been stored yet."""
    title: Optional[str]
    url: str
    description: Optional[str] = None
    source_name: Optional[str] = None
    published: Optional[str] = None

    @property
    def published_at(self) -> Optional[int]:
        return parse_timestamp(self.published)

    @classmethod
    def from_api(cls, data: dict) -> "Candidate":
        """Build a candidate from a GNews article payload."""
        source = data.get("source")
        if isinstance(source, dict):
            source_name = source.get("name")
        else:
            source_name = source if isinstance(source, str) else None
        return cls(
            title=data.get("title"),
            url=data.get("url", ""),
            description=data.get("description"),
            source_name=source_name,
            published=data.get("publishedAt"),
        )


@dataclass
class Selection:
    """A candidate chosen by the model, with its score, category and reason."""
    candidate: Candidate
    relevance_score: Optional[int]
    category: Optional[str]
    reason: Optional[str]


@dataclass
class StoredArticle:
    """A curated article persisted in the database."""
    title: str
    url: str
    curated_at: int
    id: Optional[int] = None
    description: Optional[str] = None
    source_name: Optional[str] = None
    published_at: Optional[int] = None
    curation_reason: Optional[str] = None
    relevance_score: Optional[int] = None
    category: Optional[str] = None

    def formatted_date(self) -> str:
        return datetime.fromtimestamp(self.curated_at).strftime("%Y-%m-%d %H:%M")


@dataclass
class Feedback:
    """A thumbs up/down judgment on a stored article."""
    article_id: int
    liked: bool
    feedback_at: int
    id: Optional[int] = None
    notes: Optional[str] = None


@dataclass
class CurationSession:
    """Record of one curation run."""
    session_date: str
    run_number: int
    created_at: int
    id: Optional[int] = None
    articles_fetched: int = 0
    articles_curated: int = 0
    agent_notes: Optional[str] = None


@dataclass
class FeedbackSample:
    """A past article reduced to what the model needs to learn from it."""
    title: str
    category: Optional[str]
    reason: Optional[str] = None

    def as_dict(self) -> dict:
        data = {"title": self.title, "category": self.category}
        if self.reason is not None:
            data["reason"] = self.reason
        return data


@dataclass
class PreferenceContext:
    """Effective preferences plus recent liked/disliked samples."""
    preferences: Dict[str, Any]
    liked: List[FeedbackSample] = field(default_factory=list)
    disliked: List[FeedbackSample] = field(default_factory=list)


@dataclass
class CurationResult:
    """Outcome of a curation run."""
    success: bool
    state: PipelineState
    articles: List[StoredArticle] = field(default_factory=list)
    session: Optional[CurationSession] = None
    failure: Optional[FailureReason] = None
    articles_fetched: int = 0

    @property
    def error(self) -> Optional[str]:
        return self.failure.value if self.failure else None
