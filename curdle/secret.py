"""
Where today's secret comes from.

There is no network call and nothing is stored: the code is derived from the
calendar date (UTC, so every player rolls over at the same moment).
Routes call today_utc() through this module so tests can pin the date.
"""

import logging
from datetime import date, datetime, timezone

from .engine import generate_daily_code
from .types import Code

logger = logging.getLogger(__name__)


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def secret_for(play_date: date) -> Code:
    # Deliberately no logging of the code itself
    logger.debug("Deriving secret for %s", play_date.isoformat())
    return generate_daily_code(play_date)
