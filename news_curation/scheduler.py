"""
Daily scheduling for news curation.
"""

import time
from datetime import date, datetime
from typing import Optional

from news_curation.constants import CURATION_HOUR, CURATION_MINUTE, SCHEDULER_POLL_SECONDS
from news_curation.curator import CurationPipeline
from news_curation.database import get_latest_session, init_db
from news_curation.models import CurationResult
from util.logging_util import setup_logger

logger = setup_logger(__name__)


def is_curation_due(now: Optional[datetime] = None,
                    hour: int = CURATION_HOUR, minute: int = CURATION_MINUTE) -> bool:
    """Check whether today's scheduled run is due.

    It is due once the local time has passed hour:minute and no session has
    been recorded today.
    """
    now = now or datetime.now()
    if (now.hour, now.minute) < (hour, minute):
        return False

    latest = get_latest_session()
    return latest is None or latest.session_date < now.date().isoformat()


def run_curation_if_due(pipeline: CurationPipeline, now: Optional[datetime] = None) -> Optional[CurationResult]:
    """Run curation if it is due. Returns the result, or None if nothing ran."""
    if not is_curation_due(now):
        return None

    logger.info("Running scheduled curation")
    result = pipeline.run_daily_curation()
    if result.success:
        logger.info(f"Curation completed successfully: {len(result.articles)} articles curated")
    else:
        logger.error(f"Curation failed: {result.error}")
    return result


def run_scheduler(pipeline: Optional[CurationPipeline] = None, poll_seconds: int = SCHEDULER_POLL_SECONDS):
    """Poll forever, running the daily curation when it is due."""
    init_db()
    pipeline = pipeline or CurationPipeline()
    logger.info(f"Daily curation scheduled for {CURATION_HOUR}:{CURATION_MINUTE:02d} local time")

    # Only one attempt per day, so a failed run is not retried every poll
    attempted_on = None
    while True:
        today = date.today()
        try:
            if attempted_on != today and run_curation_if_due(pipeline) is not None:
                attempted_on = today
        except Exception as e:
            logger.exception(f"Error during scheduled curation: {e}")
        time.sleep(poll_seconds)
