"""
Parsing of the model's curation response.
"""

import json
import re
from typing import Any, List, Optional, Sequence

from news_curation.models import Candidate, Selection
from util.logging_util import setup_logger

logger = setup_logger(__name__)

# Greedy: from the first '[' to the last ']'
JSON_ARRAY_PATTERN = re.compile(r"\[.*\]", re.DOTALL)


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def parse_curation_response(response_text: str, candidates: Sequence[Candidate]) -> List[Selection]:
    """Extract the selections from the model's reply.

    Never raises: an unparseable reply gives an empty list, and entries
    whose article_index does not point at a candidate are skipped.
    Repeated indices are kept and the model's order is preserved.
    """
    match = JSON_ARRAY_PATTERN.search(response_text or "")
    if match is None:
        logger.warning("No JSON array found in curation response")
        return []

    try:
        entries = json.loads(match.group(0))
    except (ValueError, RecursionError) as e:
        logger.warning(f"Failed to parse curation response as JSON: {e}")
        logger.debug(f"Response was: {response_text}")
        return []

    if not isinstance(entries, list):
        logger.warning("Curation response is not a JSON array")
        return []

    selections = []
    for entry in entries:
        if not isinstance(entry, dict):
            logger.warning(f"Skipping non-object selection: {entry!r}")
            continue

        index = _as_int(entry.get("article_index"))
        if index is None or not 0 <= index < len(candidates):
            logger.warning(f"Skipping selection with invalid article_index: {entry.get('article_index')!r}")
            continue

        selections.append(Selection(
            candidate=candidates[index],
            relevance_score=_as_int(entry.get("relevance_score")),
            category=entry.get("category"),
            reason=entry.get("reason"),
        ))

    return selections
