import re
from pydantic import BaseModel, field_validator
from datetime import date
from typing import List, Optional

from app.core.enums import WEEKDAYS
from app.schemas.user import UserBrief

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class ScheduleEntry(BaseModel):
    day: str
    start_time: Optional[str] = None  # "HH:MM"
    end_time: Optional[str] = None

    @field_validator("day")
    @classmethod
    def check_day(cls, v: str) -> str:
        v = v.strip().capitalize()
        if v not in WEEKDAYS:
            raise ValueError(f"day must be one of {', '.join(WEEKDAYS)}")
        return v

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not TIME_RE.match(v):
            raise ValueError("time must be HH:MM")
        return v

    class Config:
        from_attributes = True


class CourseCreate(BaseModel):
    name: str
    code: str
    department_id: int
    schedule: List[ScheduleEntry]
    semester_start_date: date
    semester_duration: int


class CourseUpdate(BaseModel):
    name: Optional[str] = None
    schedule: Optional[List[ScheduleEntry]] = None
    semester_start_date: Optional[date] = None
    semester_duration: Optional[int] = None


class CourseRegister(BaseModel):
    department_id: int


class CourseOut(BaseModel):
    id: int
    name: str
    code: str
    teacher_id: int
    department_id: Optional[int] = None
    schedule: List[ScheduleEntry]
    semester_start_date: date
    semester_duration: int
    student_ids: List[int] = []

    class Config:
        from_attributes = True


class CourseDetail(CourseOut):
    teacher: Optional[UserBrief] = None
    students: List[UserBrief] = []


class DateCounts(BaseModel):
    lecture_date: date
    present_count: int
    absent_count: int


class CourseReport(BaseModel):
    course_name: str
    course_code: str
    total_students: int
    attendance_by_date: List[DateCounts]
