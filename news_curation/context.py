"""
Builds the preference and feedback context the model is conditioned on.
"""

from typing import Any, List, Mapping

from news_curation.constants import FEEDBACK_SAMPLE_LIMIT
from news_curation.database import get_all_preferences, get_recent_feedback_articles
from news_curation.models import FeedbackSample, PreferenceContext, StoredArticle
from news_curation.preferences import DEFAULT_PREFERENCES


def _liked_samples(articles: List[StoredArticle]) -> List[FeedbackSample]:
    return [
        FeedbackSample(title=a.title, category=a.category, reason=a.curation_reason)
        for a in articles
    ]


def _disliked_samples(articles: List[StoredArticle]) -> List[FeedbackSample]:
    return [FeedbackSample(title=a.title, category=a.category) for a in articles]


def build_preference_context(
    defaults: Mapping[str, Any] = DEFAULT_PREFERENCES,
    limit: int = FEEDBACK_SAMPLE_LIMIT,
) -> PreferenceContext:
    """Load effective preferences and the recent liked/disliked samples.

    Read-only: neither the stored rows nor `defaults` are modified.
    """
    return PreferenceContext(
        preferences=get_all_preferences(defaults),
        liked=_liked_samples(get_recent_feedback_articles(liked=True, limit=limit)),
        disliked=_disliked_samples(get_recent_feedback_articles(liked=False, limit=limit)),
    )
