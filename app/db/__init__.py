# app/db/__init__.py
# Importing app.db registers every model on Base.metadata

from app.db.base import Base
from app.db.models import (
    User,
    Department,
    Course,
    CourseSchedule,
    Enrollment,
    AttendanceSession,
    Attendance,
)

__all__ = [
    "Base",
    "User",
    "Department",
    "Course",
    "CourseSchedule",
    "Enrollment",
    "AttendanceSession",
    "Attendance",
]
