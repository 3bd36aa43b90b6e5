# app/core/clock.py
from datetime import datetime
from zoneinfo import ZoneInfo

from app.core.config import settings


def now() -> datetime:
    """Current wall-clock time as a naive datetime.

    Schedules are written as local times ("Monday 09:00"), so every instant
    stored for sessions and records uses the same naive local clock.
    """
    if settings.TIMEZONE:
        return datetime.now(ZoneInfo(settings.TIMEZONE)).replace(tzinfo=None)
    return datetime.now()
