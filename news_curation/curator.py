"""
Daily curation orchestration.

A run moves through fetch, dedup, context, prompt, model, parse and persist
steps. Terminal problems end the run in the FAILED state with a reason in
the returned CurationResult; nothing is raised to the caller.
"""

from typing import Any, List, Mapping, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from news_curation.constants import (
    MAX_ARTICLES_PER_QUERY,
    MODEL_NAME,
    MODEL_TEMPERATURE,
    SEARCH_QUERIES,
)
from news_curation.context import build_preference_context
from news_curation.database import attach_feedback, get_todays_articles, record_curation
from news_curation.dedup import remove_duplicates
from news_curation.models import (
    Candidate,
    CurationResult,
    FailureReason,
    Feedback,
    PipelineState,
    StoredArticle,
)
from news_curation.news_fetcher import ArticleSource, GNewsClient
from news_curation.preferences import DEFAULT_PREFERENCES, resolve_articles_per_day
from news_curation.prompt_builder import build_curation_prompt
from news_curation.selection_parser import parse_curation_response
from llm.llm_util import GeminiClient
from util.logging_util import setup_logger

logger = setup_logger(__name__)


class ModelClient(Protocol):
    def complete(self, request_text: str) -> str:
        ...


class CurationPipeline:
    """Selects, stores and records today's curated articles."""

    def __init__(
        self,
        source: Optional[ArticleSource] = None,
        model: Optional[ModelClient] = None,
        queries: Mapping[str, str] = SEARCH_QUERIES,
        defaults: Mapping[str, Any] = DEFAULT_PREFERENCES,
        max_per_query: int = MAX_ARTICLES_PER_QUERY,
    ):
        self._source = source
        self._model = model
        self.queries = dict(queries)
        self.defaults = defaults
        self.max_per_query = max_per_query
        self.state = PipelineState.IDLE

    @property
    def source(self) -> ArticleSource:
        if self._source is None:
            self._source = GNewsClient()
        return self._source

    @property
    def model(self) -> ModelClient:
        if self._model is None:
            self._model = GeminiClient(MODEL_NAME, MODEL_TEMPERATURE)
        return self._model

    def _transition(self, state: PipelineState):
        logger.debug(f"Curation state: {self.state.value} -> {state.value}")
        self.state = state

    def _fail(self, reason: FailureReason, articles_fetched: int = 0) -> CurationResult:
        logger.error(f"Curation failed in state {self.state.value}: {reason.value}")
        self._transition(PipelineState.FAILED)
        return CurationResult(
            success=False,
            state=self.state,
            failure=reason,
            articles_fetched=articles_fetched,
        )

    def fetch_candidates(self) -> List[Candidate]:
        """Search every configured query, skipping sources that fail."""
        try:
            source = self.source
        except RuntimeError as e:
            logger.error(f"Article source unavailable: {e}")
            return []

        candidates = []
        for name, query in self.queries.items():
            try:
                result = source.search(query, self.max_per_query)
            except Exception as e:
                logger.warning(f"Fetch for {name} raised: {e}")
                continue
            if result.success:
                logger.info(f"Fetched {result.count} articles for {name}")
                candidates += result.articles
            else:
                kind = result.error_kind.value if result.error_kind else "unknown"
                logger.warning(f"Fetch for {name} failed ({kind}): {result.error}")
        return candidates

    def run_daily_curation(self) -> CurationResult:
        logger.info("Starting daily news curation")

        self._transition(PipelineState.FETCHING)
        fetched = self.fetch_candidates()
        if not fetched:
            return self._fail(FailureReason.NO_CANDIDATES)

        self._transition(PipelineState.DEDUPLICATING)
        candidates = remove_duplicates(fetched)
        logger.info(f"Fetched {len(candidates)} unique articles ({len(fetched)} before dedup)")

        self._transition(PipelineState.CONTEXT_BUILDING)
        try:
            context = build_preference_context(self.defaults)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load preferences and feedback: {e}")
            return self._fail(FailureReason.CONTEXT_ERROR, len(candidates))
        target_count = resolve_articles_per_day(context.preferences)

        self._transition(PipelineState.PROMPTING)
        prompt = build_curation_prompt(candidates, context, target_count)

        self._transition(PipelineState.AWAITING_MODEL)
        try:
            response_text = self.model.complete(prompt)
        except Exception as e:
            logger.error(f"Model request failed: {e}")
            return self._fail(FailureReason.MODEL_ERROR, len(candidates))

        self._transition(PipelineState.PARSING)
        selections = parse_curation_response(response_text, candidates)
        if not selections:
            return self._fail(FailureReason.NO_SELECTIONS, len(candidates))

        self._transition(PipelineState.PERSISTING)
        try:
            saved, session = record_curation(
                selections,
                articles_fetched=len(candidates),
                agent_notes=f"Selected {len(selections)} articles with AI reasoning",
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to save curated articles: {e}")
            return self._fail(FailureReason.PERSISTENCE_ERROR, len(candidates))

        self._transition(PipelineState.COMPLETED)
        logger.info(f"Successfully curated {len(saved)} articles")
        return CurationResult(
            success=True,
            state=self.state,
            articles=saved,
            session=session,
            articles_fetched=len(candidates),
        )

    def get_todays_articles(self) -> List[StoredArticle]:
        return get_todays_articles()

    def provide_feedback(self, article_id: int, liked: bool, notes: Optional[str] = None) -> Feedback:
        """Record feedback on a stored article.

        Raises:
            ArticleNotFoundError: if the article id does not exist.
        """
        feedback = attach_feedback(article_id, liked, notes)
        status = "LIKED" if liked else "DISLIKED"
        logger.info(f"[{status}] Feedback recorded for article {article_id}")
        return feedback
