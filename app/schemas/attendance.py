from pydantic import BaseModel
from datetime import date, datetime
from typing import List, Optional


class MarkRequest(BaseModel):
    # No descriptor = the caller marks themself
    descriptor: Optional[List[float]] = None


class SessionOut(BaseModel):
    id: int
    course_id: int
    lecture_date: date
    start_time: datetime
    end_time: datetime
    is_active: bool
    session_identifier: str

    class Config:
        from_attributes = True


class SessionCreated(BaseModel):
    message: str
    session: SessionOut
    qr_code: Optional[str] = None
    records_created: int


class SessionDetail(SessionOut):
    counts: dict


class RecordOut(BaseModel):
    id: int
    course_id: int
    student_id: int
    session_id: int
    lecture_date: date
    status: str
    marked_at: Optional[datetime] = None
    method: Optional[str] = None

    class Config:
        from_attributes = True


class MarkResult(BaseModel):
    message: str
    record: RecordOut


class StudentCourseEntry(BaseModel):
    lecture_date: date
    status: str
    is_active: bool
    is_within_timeframe: bool


class StudentCourseAttendance(BaseModel):
    course_name: str
    course_code: str
    attendance_list: List[StudentCourseEntry]


class StudentHistoryEntry(BaseModel):
    course_name: str
    course_code: str
    lecture_date: date
    status: str


class TeacherHistoryEntry(BaseModel):
    lecture_date: date
    student_name: str
    status: str


class TeacherSummary(BaseModel):
    total_present: int
    total_absent: int


class StudentSummary(BaseModel):
    total_classes: int
    total_present: int
    total_absent: int
    total_late: int
