"""
Renders the curation request sent to the model.

The output depends only on the candidates, the preference context and the
target count, so identical inputs always give byte-identical prompts.
"""

import json
from functools import lru_cache
from typing import Any, List, Sequence

from langchain_core.prompts import PromptTemplate

from news_curation.constants import PROMPTS_DIR
from news_curation.models import Candidate, Category, FeedbackSample, PreferenceContext
from news_curation.preferences import CurationProfile

CURATE_ARTICLES_TEMPLATE = PROMPTS_DIR / "curate_articles.jinja2"

NO_FEEDBACK_PLACEHOLDER = "No feedback yet"

KNOWLEDGE_LEVEL_INSTRUCTIONS = {
    "beginner": (
        "Knowledge level: BEGINNER. The reader is new to foreign policy. Prefer explanatory "
        "articles that introduce the countries, leaders and institutions involved and the "
        "history behind the news. Avoid articles that assume knowledge of earlier negotiations, "
        "treaties or acronyms."
    ),
    "intermediate": (
        "Knowledge level: INTERMEDIATE. The reader follows international news regularly. Prefer "
        "articles that go beyond the headline without requiring specialist background."
    ),
    "advanced": (
        "Knowledge level: ADVANCED. The reader has solid background knowledge. Prefer analytical "
        "articles with policy detail and strategic implications over introductory coverage."
    ),
    "expert": (
        "Knowledge level: EXPERT. The reader is a subject-matter expert. Select only articles with "
        "original analysis, primary-source detail or genuinely new information. Skip explainers, "
        "news summaries and background pieces."
    ),
}

ARTICLE_COMPLEXITY_INSTRUCTIONS = {
    "accessible": "Article complexity: prefer clearly written, accessible articles over dense or jargon-heavy analysis.",
    "academic": "Article complexity: prefer rigorous, in-depth analysis such as think-tank or long-form academic writing.",
    "balanced": "Article complexity: mix accessible reporting with deeper analysis.",
}

COVERAGE_STYLE_INSTRUCTIONS = {
    "diverse": (
        "Coverage: maximum topic diversity. Each selected article should cover a different "
        "country, region or issue."
    ),
    "deep_focus": (
        "Coverage: depth over breadth. Several articles on the single most significant developing "
        "story are acceptable."
    ),
    "mixed": (
        "Coverage: cover the most important story in depth and use the remaining selections for "
        "other topics."
    ),
}

DUPLICATE_STORY_INSTRUCTION = (
    "HARD CONSTRAINT: never select two articles about the same event, even if they come from "
    "different sources or take different angles."
)

TERMINOLOGY_INSTRUCTIONS = {
    "explain_in_article": "Terminology: prefer articles that explain specialist terms, acronyms and institutions within the text.",
    "glossary": "Terminology: specialist terms are fine; name the key terms a glossary would need in the reason.",
    "standard": "Terminology: standard diplomatic and policy terminology is fine without explanation.",
}

CONTEXT_DEPTH_INSTRUCTIONS = {
    "progressive": "Context: prefer articles that build on earlier developments so the reader can follow a story over time.",
    "extensive": "Context: prefer articles that provide extensive historical and political background.",
    "minimal": "Context: prefer articles that get straight to the news with minimal background.",
    "brief": "Context: prefer articles that give brief context before the main news.",
}

SOURCE_PERSPECTIVE_INSTRUCTIONS = {
    "international": "Sources: prefer international outlets and global perspectives.",
    "indian": "Sources: prefer Indian outlets and Indian perspectives.",
    "balanced": "Sources: balance Indian and international outlets and perspectives.",
}


@lru_cache(maxsize=1)
def _load_template() -> PromptTemplate:
    template_content = CURATE_ARTICLES_TEMPLATE.read_text()
    return PromptTemplate.from_template(template_content, template_format="jinja2")


def build_instructions(profile: CurationProfile) -> List[str]:
    """Turn the reader profile into one instruction line per preference."""
    instructions = [
        KNOWLEDGE_LEVEL_INSTRUCTIONS[profile.knowledge_level],
        ARTICLE_COMPLEXITY_INSTRUCTIONS[profile.article_complexity],
        COVERAGE_STYLE_INSTRUCTIONS[profile.coverage_style],
    ]
    if profile.avoid_duplicate_stories:
        instructions.append(DUPLICATE_STORY_INSTRUCTION)
    instructions += [
        TERMINOLOGY_INSTRUCTIONS[profile.terminology],
        CONTEXT_DEPTH_INSTRUCTIONS[profile.context_depth],
        SOURCE_PERSPECTIVE_INSTRUCTIONS[profile.source_perspective],
    ]
    if profile.geographic_focus:
        instructions.append(
            "Geographic focus: give extra weight to articles about " + ", ".join(profile.geographic_focus) + "."
        )
    return instructions


def _feedback_block(samples: Sequence[FeedbackSample]) -> str:
    if not samples:
        return NO_FEEDBACK_PLACEHOLDER
    return json.dumps([s.as_dict() for s in samples], indent=2, ensure_ascii=False)


def _article_params(candidate: Candidate) -> dict:
    return {
        "title": candidate.title or "",
        "source": candidate.source_name or "",
        "published": candidate.published or "",
        "description": candidate.description or "",
    }


def build_curation_prompt(
    candidates: Sequence[Candidate],
    context: PreferenceContext,
    target_count: int,
) -> str:
    """Render the selection request for `target_count` articles.

    `candidates` must not be empty; callers stop before this point when
    nothing was fetched.
    """
    profile = CurationProfile.from_preferences(context.preferences)
    params: dict[str, Any] = {
        "preferences_json": json.dumps(context.preferences, indent=2, ensure_ascii=False),
        "instructions": build_instructions(profile),
        "learning_goals": profile.learning_goals,
        "liked_json": _feedback_block(context.liked),
        "disliked_json": _feedback_block(context.disliked),
        "target_count": target_count,
        "article_count": len(candidates),
        "last_index": len(candidates) - 1,
        "articles": [_article_params(c) for c in candidates],
        "categories": ", ".join(f"'{c.value}'" for c in Category),
    }
    return _load_template().format(**params)
