"""
GNews search client.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol

import requests

from news_curation.constants import GNEWS_SEARCH_URL, GNEWS_TIMEOUT_SECONDS
from news_curation.models import Candidate
from util.logging_util import setup_logger
from util.secrets import get_gnews_api_key

logger = setup_logger(__name__)


class SourceErrorKind(Enum):
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    API = "api"
    NETWORK = "network"


@dataclass
class FetchResult:
    """Outcome of a single search. Failed searches carry no articles."""
    success: bool
    articles: List[Candidate] = field(default_factory=list)
    error: Optional[str] = None
    error_kind: Optional[SourceErrorKind] = None

    @property
    def count(self) -> int:
        return len(self.articles)


class ArticleSource(Protocol):
    def search(self, query: str, max_results: int) -> FetchResult:
        ...


class GNewsClient:
    """Searches the GNews API for English articles, newest first."""

    def __init__(self, api_key: Optional[str] = None, timeout: int = GNEWS_TIMEOUT_SECONDS):
        self.api_key = api_key or get_gnews_api_key()
        self.timeout = timeout

    def search(self, query: str, max_results: int = 20) -> FetchResult:
        try:
            response = requests.get(
                GNEWS_SEARCH_URL,
                params={
                    "q": query,
                    "token": self.api_key,
                    "lang": "en",
                    "max": max_results,
                    "sortby": "publishedAt",
                },
                timeout=self.timeout,
            )
            return self._handle_response(response)
        except (requests.RequestException, ValueError) as e:
            return FetchResult(success=False, error=f"Network error: {e}", error_kind=SourceErrorKind.NETWORK)

    @staticmethod
    def _handle_response(response: requests.Response) -> FetchResult:
        if response.status_code == 200:
            payload = response.json() or {}
            entries = (payload.get("articles") or []) if isinstance(payload, dict) else None
            if not isinstance(entries, list):
                logger.warning(f"Unexpected GNews response body: {str(payload)[:200]}")
                return FetchResult(success=False, error="Malformed response", error_kind=SourceErrorKind.API)
            articles = [Candidate.from_api(a) for a in entries if isinstance(a, dict) and a.get("url")]
            return FetchResult(success=True, articles=articles)
        if response.status_code == 401:
            return FetchResult(success=False, error="Invalid API key", error_kind=SourceErrorKind.AUTH)
        if response.status_code == 429:
            return FetchResult(success=False, error="Rate limit exceeded", error_kind=SourceErrorKind.RATE_LIMIT)
        return FetchResult(
            success=False,
            error=f"API error: {response.status_code}",
            error_kind=SourceErrorKind.API,
        )
