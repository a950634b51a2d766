"""
Preference defaults and the typed curation profile derived from them.

Stored preferences are free-form JSON. Everything that shapes the prompt is
read through CurationProfile, which resolves each field on its own and falls
back to the field default when a value is missing or not recognised.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Tuple

from util.logging_util import setup_logger

logger = setup_logger(__name__)

PROFILE_VERSION = 1

DEFAULT_ARTICLES_PER_DAY = 2

KNOWLEDGE_LEVELS = ("beginner", "intermediate", "advanced", "expert")
ARTICLE_COMPLEXITIES = ("accessible", "academic", "balanced")
COVERAGE_STYLES = ("diverse", "deep_focus", "mixed")
TERMINOLOGY_STYLES = ("explain_in_article", "glossary", "standard")
CONTEXT_DEPTHS = ("progressive", "extensive", "minimal", "brief")
SOURCE_PERSPECTIVES = ("international", "indian", "balanced")

DEFAULT_PREFERENCES: Mapping[str, Any] = MappingProxyType({
    "topics": ["foreign policy", "diplomacy", "international relations"],
    "focus_areas": [
        "Indian foreign policy",
        "India bilateral relations",
        "Global diplomacy",
        "Geopolitical shifts",
    ],
    "exclude_keywords": ["bollywood", "cricket", "fashion", "entertainment"],
    "min_relevance_score": 7,
    "articles_per_day": DEFAULT_ARTICLES_PER_DAY,
    "user_profile": {
        "knowledge_level": "intermediate",
        "geographic_focus": [],
        "learning_goals": "",
    },
    "learning_approach": {
        "coverage_style": "diverse",
        "avoid_duplicate_stories": True,
        "terminology": "standard",
        "context_depth": "brief",
    },
    "content_preferences": {
        "article_complexity": "balanced",
        "source_perspective": "balanced",
    },
})


def _section(preferences: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = preferences.get(name)
    return value if isinstance(value, Mapping) else {}


def _choice(section: Mapping[str, Any], key: str, allowed: Tuple[str, ...], default: str) -> str:
    value = section.get(key)
    if value is None:
        return default
    normalised = str(value).strip().lower().replace("-", "_").replace(" ", "_")
    if normalised not in allowed:
        logger.warning(f"Unknown {key} preference {value!r}, using {default!r}")
        return default
    return normalised


def _string_list(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(v).strip() for v in value if str(v).strip())


@dataclass(frozen=True)
class CurationProfile:
    """Typed view of the prompt-shaping preferences."""
    knowledge_level: str = "intermediate"
    article_complexity: str = "balanced"
    coverage_style: str = "diverse"
    avoid_duplicate_stories: bool = True
    terminology: str = "standard"
    context_depth: str = "brief"
    source_perspective: str = "balanced"
    geographic_focus: Tuple[str, ...] = field(default_factory=tuple)
    learning_goals: str = ""
    version: int = PROFILE_VERSION

    @classmethod
    def from_preferences(cls, preferences: Mapping[str, Any]) -> "CurationProfile":
        user_profile = _section(preferences, "user_profile")
        approach = _section(preferences, "learning_approach")
        content = _section(preferences, "content_preferences")
        defaults = cls()

        avoid_duplicates = approach.get("avoid_duplicate_stories", defaults.avoid_duplicate_stories)
        goals = user_profile.get("learning_goals") or ""
        if isinstance(goals, (list, tuple)):
            goals = "; ".join(_string_list(goals))

        return cls(
            knowledge_level=_choice(user_profile, "knowledge_level", KNOWLEDGE_LEVELS, defaults.knowledge_level),
            article_complexity=_choice(content, "article_complexity", ARTICLE_COMPLEXITIES, defaults.article_complexity),
            coverage_style=_choice(approach, "coverage_style", COVERAGE_STYLES, defaults.coverage_style),
            avoid_duplicate_stories=bool(avoid_duplicates),
            terminology=_choice(approach, "terminology", TERMINOLOGY_STYLES, defaults.terminology),
            context_depth=_choice(approach, "context_depth", CONTEXT_DEPTHS, defaults.context_depth),
            source_perspective=_choice(content, "source_perspective", SOURCE_PERSPECTIVES, defaults.source_perspective),
            geographic_focus=_string_list(user_profile.get("geographic_focus")),
            learning_goals=str(goals).strip(),
        )


def resolve_articles_per_day(preferences: Mapping[str, Any]) -> int:
    """Number of articles to request, falling back to the default on bad values."""
    value = preferences.get("articles_per_day", DEFAULT_ARTICLES_PER_DAY)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        logger.warning(f"Invalid articles_per_day preference {value!r}, using {DEFAULT_ARTICLES_PER_DAY}")
        return DEFAULT_ARTICLES_PER_DAY
    return value
