from app.db.base import Base
from app.db.models.user import User
from app.db.models.department import Department
from app.db.models.course import Course, CourseSchedule, Enrollment
from app.db.models.attendance import AttendanceSession, Attendance

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
