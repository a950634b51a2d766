"""
Remote-callable tools for the news curator.

Each tool returns human-readable text plus an error flag. The Telegram
handler in news_bot.py calls them.
"""

import json
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, List, Optional

from news_curation.curator import CurationPipeline
from news_curation.database import (
    ArticleNotFoundError,
    get_all_preferences,
    get_article_by_id,
    get_articles_since,
    get_sessions_since,
    get_todays_articles,
    init_db,
    set_preference,
    start_of_day_epoch,
)
from news_curation.models import StoredArticle
from util.logging_util import setup_logger

logger = setup_logger(__name__)

SEPARATOR = "-" * 60


@dataclass
class ToolResponse:
    text: str
    is_error: bool = False


def format_articles(articles: List[StoredArticle]) -> str:
    """Format curated articles for display."""
    output = "Today's Curated News\n"
    output += "=" * 60 + "\n\n"

    for idx, article in enumerate(articles, start=1):
        output += f"{idx}. {article.title}\n"
        output += f"   Source: {article.source_name or 'Unknown'} | {article.formatted_date()}\n"
        output += f"   Relevance: {article.relevance_score}/10 | {article.category}\n"
        output += f"   Why selected: {article.curation_reason}\n"
        output += f"   URL: {article.url}\n"
        output += f"   Article ID: {article.id} (use this for feedback)\n"
        output += f"\n{SEPARATOR}\n\n"

    output += "Provide feedback using the news_feedback tool with the article ID\n"
    return output


def curate_news(refresh: bool = False, pipeline_factory: Callable[[], CurationPipeline] = CurationPipeline) -> ToolResponse:
    """Return today's articles, running a curation first if needed.

    A failed run is reported as an error with its reason. When a forced
    refresh fails, the articles already curated today are shown under it.
    """
    init_db()
    articles = [] if refresh else get_todays_articles()
    if articles:
        return ToolResponse(format_articles(articles))

    result = pipeline_factory().run_daily_curation()
    if result.success:
        return ToolResponse(format_articles(result.articles))

    logger.warning(f"Curation did not produce articles: {result.error}")
    message = f"[ERROR] Curation failed: {result.error}"
    earlier = get_todays_articles() if refresh else []
    if earlier:
        return ToolResponse(f"{message}\nShowing earlier picks from today.\n\n{format_articles(earlier)}", is_error=True)
    return ToolResponse(
        f"{message}\nNo curated articles available for today. Run curation manually with refresh: true",
        is_error=True,
    )


def news_feedback(article_id: int, liked: bool, notes: Optional[str] = None,
                  pipeline_factory: Callable[[], CurationPipeline] = CurationPipeline) -> ToolResponse:
    """Record thumbs up/down feedback on a curated article."""
    init_db()
    article = get_article_by_id(article_id)
    if article is None:
        return ToolResponse(f"[ERROR] Article not found with ID: {article_id}", is_error=True)

    try:
        pipeline_factory().provide_feedback(article_id, liked, notes)
    except ArticleNotFoundError:
        return ToolResponse(f"[ERROR] Article not found with ID: {article_id}", is_error=True)

    status = "LIKED" if liked else "DISLIKED"
    return ToolResponse(
        f"[{status}] Feedback recorded! The AI will learn from your preferences.\nArticle: {article.title}"
    )


def _parse_preference_value(value: str):
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def news_preferences(action: str, key: Optional[str] = None, value: Optional[str] = None) -> ToolResponse:
    """View the effective preferences or update a single key."""
    init_db()
    if action == "view":
        preferences = get_all_preferences()
        return ToolResponse(f"Your News Preferences:\n\n{json.dumps(preferences, indent=2, ensure_ascii=False)}")

    if action == "update":
        if not key or value is None:
            return ToolResponse("[ERROR] Both key and value are required for update action", is_error=True)
        parsed_value = _parse_preference_value(value)
        set_preference(key, parsed_value)
        return ToolResponse(f"[OK] Updated preference: {key} = {parsed_value!r}")

    return ToolResponse(f"[ERROR] Unknown action: {action}. Use 'view' or 'update'", is_error=True)


def news_history(days: int = 7) -> ToolResponse:
    """Summarise the curated articles and sessions of the last `days` days."""
    init_db()
    start_date = date.today() - timedelta(days=days)
    articles = get_articles_since(start_of_day_epoch(start_date))
    sessions = get_sessions_since(start_date)

    output = f"Curation History (Last {days} days)\n\n"
    output += f"Total articles curated: {len(articles)}\n"
    output += f"Curation sessions: {len(sessions)}\n\n"

    for session in sessions:
        output += f"{session.session_date} (run {session.run_number}): "
        output += f"{session.articles_curated} articles from {session.articles_fetched} fetched\n"

    return ToolResponse(output)
