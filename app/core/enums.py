# app/core/enums.py
from enum import Enum


class Role(str, Enum):
    """Capability set a user acts with; checked by ``require_role``."""

    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class AttendanceStatus(str, Enum):
    PENDING = "pending"
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"


class MarkMethod(str, Enum):
    FACE = "face"
    MANUAL = "manual"


WEEKDAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
