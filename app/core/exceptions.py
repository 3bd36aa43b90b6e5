# app/core/exceptions.py
"""Expected outcomes of the attendance lifecycle.

Every rejection carries a stable ``code`` so clients can branch on it
(e.g. "too early" vs "no class today"). They are rendered by the handler
registered in ``app.main``.
"""


class AttendanceError(Exception):
    code = "ATTENDANCE_ERROR"
    status_code = 400
    message = "Attendance operation failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


# Validation
class NoClassScheduledToday(AttendanceError):
    code = "NO_CLASS_SCHEDULED_TODAY"
    message = "No class scheduled for today"


class IncompleteSchedule(AttendanceError):
    code = "INCOMPLETE_SCHEDULE"
    message = "Schedule for the day is incomplete. Start or End time is missing."


class DescriptorMismatch(AttendanceError):
    code = "DESCRIPTOR_MISMATCH"
    status_code = 422
    message = "Face descriptor has the wrong dimensionality"


# Timing
class TooEarly(AttendanceError):
    code = "TOO_EARLY"
    message = "Cannot create attendance session this early before the lecture time."


class TooLate(AttendanceError):
    code = "TOO_LATE"
    message = "Cannot create attendance session after the lecture has ended."


class SessionClosed(AttendanceError):
    code = "SESSION_CLOSED"
    status_code = 403
    message = "Attendance session is not active or out of allowed timeframe"


# State conflict
class AlreadyMarked(AttendanceError):
    code = "ALREADY_MARKED"
    status_code = 409
    message = "Attendance already marked"


# Not found
class CourseNotFound(AttendanceError):
    code = "COURSE_NOT_FOUND"
    status_code = 404
    message = "Course not found"


class SessionNotFound(AttendanceError):
    code = "SESSION_NOT_FOUND"
    status_code = 404
    message = "Session not found"


class RecordNotFound(AttendanceError):
    code = "RECORD_NOT_FOUND"
    status_code = 404
    message = "Attendance record not found"


# Verification
class NoFaceMatch(AttendanceError):
    code = "NO_FACE_MATCH"
    status_code = 401
    message = "Face did not match any student in this session"
