"""
Constants for the news curation system.
"""

import os
from pathlib import Path

MODULE_ROOT = Path(__file__).parent

PROMPTS_DIR = MODULE_ROOT / "prompts"

DB_NAME = os.environ.get("NEWS_CURATOR_DB", "news_curator.db")

GNEWS_SEARCH_URL = "https://gnews.io/api/v4/search"
GNEWS_TIMEOUT_SECONDS = 30

# Queries searched on every curation run, in order
SEARCH_QUERIES = {
    "india_foreign_policy": 'India (diplomacy OR "foreign policy" OR "external affairs" OR bilateral OR geopolitical)',
    "global_diplomacy": '(diplomacy OR "international relations" OR "foreign policy" OR geopolitical) -India',
}
MAX_ARTICLES_PER_QUERY = 15

# How many liked/disliked articles are shown to the model
FEEDBACK_SAMPLE_LIMIT = 10

MODEL_NAME = "gemini-3-flash-preview"
MODEL_TEMPERATURE = 0.3

# Local time of the daily scheduled run
CURATION_HOUR = int(os.environ.get("CURATION_HOUR", "7"))
CURATION_MINUTE = int(os.environ.get("CURATION_MINUTE", "0"))
SCHEDULER_POLL_SECONDS = 60
