# app/core/schedule.py
"""Decides whether an attendance session can be opened for a course right now."""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from app.core.config import settings
from app.core.enums import WEEKDAYS
from app.core.exceptions import (
    IncompleteSchedule,
    NoClassScheduledToday,
    TooEarly,
    TooLate,
)


@dataclass(frozen=True)
class LectureWindow:
    day: str
    start_time: str  # "HH:MM" as written in the schedule
    lecture_start: datetime
    lecture_end: datetime


def parse_time_of_day(value: str) -> tuple[int, int]:
    hours, minutes = value.split(":")[:2]
    return int(hours), int(minutes)


def find_schedule_entry(schedule, day: str):
    # first entry wins if a weekday is listed twice
    for entry in schedule:
        if entry.day == day:
            return entry
    return None


def can_open_session(course, now: datetime, lead_minutes: Optional[int] = None) -> LectureWindow:
    """Return today's lecture window for ``course`` or raise the rejection reason.

    The returned instants are used verbatim for the new session.
    """
    if lead_minutes is None:
        lead_minutes = settings.SESSION_OPEN_LEAD_MINUTES

    day = WEEKDAYS[now.weekday()]
    entry = find_schedule_entry(course.schedule, day)
    if entry is None:
        raise NoClassScheduledToday(
            f"No class scheduled for {day}. Please select a correct lecture date."
        )

    if not entry.start_time or not entry.end_time:
        raise IncompleteSchedule()

    start_h, start_m = parse_time_of_day(entry.start_time)
    end_h, end_m = parse_time_of_day(entry.end_time)
    lecture_start = now.replace(hour=start_h, minute=start_m, second=0, microsecond=0)
    lecture_end = now.replace(hour=end_h, minute=end_m, second=0, microsecond=0)

    if now < lecture_start - timedelta(minutes=lead_minutes):
        raise TooEarly(
            f"Cannot create attendance session more than {lead_minutes} minutes "
            "before the lecture time."
        )

    if now > lecture_end:
        raise TooLate()

    return LectureWindow(
        day=day,
        start_time=entry.start_time,
        lecture_start=lecture_start,
        lecture_end=lecture_end,
    )
