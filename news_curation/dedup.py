"""
Duplicate removal for fetched candidates.
"""

from typing import Iterable, List, Optional

from news_curation.models import Candidate


def _normalise_title(title: Optional[str]) -> Optional[str]:
    if title is None:
        return None
    normalised = title.strip().lower()
    return normalised or None


def remove_duplicates(candidates: Iterable[Candidate]) -> List[Candidate]:
    """Drop candidates whose URL or normalised title was already seen.

    The first occurrence wins and the original order is kept. Candidates
    without a title are only compared by URL.
    """
    seen_urls = set()
    seen_titles = set()
    unique = []

    for candidate in candidates:
        title = _normalise_title(candidate.title)
        if candidate.url in seen_urls or (title is not None and title in seen_titles):
            continue

        seen_urls.add(candidate.url)
        if title is not None:
            seen_titles.add(title)
        unique.append(candidate)

    return unique
