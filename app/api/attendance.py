# app/api/attendance.py
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.api.deps import get_db, get_current_user, require_teacher
from app.core import clock
from app.core.enums import AttendanceStatus, MarkMethod, Role
from app.core.exceptions import AlreadyMarked, CourseNotFound, NoFaceMatch, SessionNotFound
from app.core.face import identify
from app.core.schedule import can_open_session
from app.crud import attendance as crud_attendance
from app.crud import course as crud_course
from app.db.models.attendance import Attendance
from app.db.models.user import User
from app.schemas.attendance import (
    MarkRequest,
    MarkResult,
    SessionCreated,
    SessionDetail,
    StudentCourseAttendance,
    StudentHistoryEntry,
    StudentSummary,
    TeacherHistoryEntry,
    TeacherSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/total-courses")
def total_courses(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    return {"total_courses": crud_course.count_courses_by_teacher(db, current_user.id)}


@router.get("/attendance-summary", response_model=TeacherSummary)
def teacher_summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    course_ids = [c.id for c in crud_course.get_courses_by_teacher(db, current_user.id)]
    counts = crud_attendance.status_counts(db, Attendance.course_id.in_(course_ids))
    return {
        "total_present": counts[AttendanceStatus.PRESENT.value],
        "total_absent": counts[AttendanceStatus.ABSENT.value],
    }


@router.get("/attendance-summary/student", response_model=StudentSummary)
def student_summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    courses = crud_course.get_courses_for_student(db, current_user.id)
    if not courses:
        raise HTTPException(status_code=404, detail="No courses found for this student")

    counts = crud_attendance.status_counts(
        db,
        Attendance.student_id == current_user.id,
        Attendance.course_id.in_([c.id for c in courses]),
    )
    return {
        "total_classes": sum(counts.values()),
        "total_present": counts[AttendanceStatus.PRESENT.value],
        "total_absent": counts[AttendanceStatus.ABSENT.value],
        "total_late": counts[AttendanceStatus.LATE.value],
    }


@router.post("/create/{course_id}", response_model=SessionCreated, status_code=status.HTTP_201_CREATED)
def create_session(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    course = crud_course.get_course(db, course_id)
    if not course:
        raise CourseNotFound()
    if course.teacher_id != current_user.id and current_user.role != Role.ADMIN.value:
        raise HTTPException(status_code=403, detail="Only the course teacher can open attendance")

    now = clock.now()
    window = can_open_session(course, now)
    session = crud_attendance.create_session(db, course, window, now)
    records = crud_attendance.materialize_roster(db, session, course, current_user.id)

    return {
        "message": "Attendance session created successfully",
        "session": session,
        "qr_code": session.qr_code,
        "records_created": len(records),
    }


@router.get("/session/{session_identifier}", response_model=SessionDetail)
def session_detail(
    session_identifier: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    session = crud_attendance.get_session_by_identifier(db, session_identifier)
    if session is None:
        raise SessionNotFound()
    counts = crud_attendance.status_counts(db, Attendance.session_id == session.id)
    return {
        "id": session.id,
        "course_id": session.course_id,
        "lecture_date": session.lecture_date,
        "start_time": session.start_time,
        "end_time": session.end_time,
        "is_active": session.is_active,
        "session_identifier": session.session_identifier,
        "counts": counts,
    }


@router.get("/student/history", response_model=List[StudentHistoryEntry])
def student_history(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return [
        {
            "course_name": r.course.name,
            "course_code": r.course.code,
            "lecture_date": r.session.lecture_date,
            "status": r.status,
        }
        for r in crud_attendance.get_student_history(db, current_user.id)
    ]


@router.get("/student/{course_id}", response_model=StudentCourseAttendance)
def student_course_attendance(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    course = crud_course.get_course(db, course_id)
    if not course:
        raise CourseNotFound()
    if not crud_course.is_enrolled(db, course_id, current_user.id):
        raise HTTPException(status_code=403, detail="You are not enrolled in this course")

    now = clock.now()
    attendance_list = []
    for record in crud_attendance.get_student_course_records(db, current_user.id, course_id):
        session = record.session
        attendance_list.append({
            "lecture_date": session.lecture_date,
            "status": record.status,
            "is_active": session.is_active,
            "is_within_timeframe": session.start_time <= now <= session.end_time,
        })

    return {
        "course_name": course.name,
        "course_code": course.code,
        "attendance_list": attendance_list,
    }


@router.get("/teacher/history/{course_id}", response_model=List[TeacherHistoryEntry])
def teacher_history(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    course = crud_course.get_course(db, course_id)
    if not course:
        raise CourseNotFound()
    if course.teacher_id != current_user.id and current_user.role != Role.ADMIN.value:
        raise HTTPException(status_code=403, detail="Not your course")

    return [
        {
            "lecture_date": r.session.lecture_date,
            "student_name": r.student.full_name,
            "status": r.status,
        }
        for r in crud_attendance.get_course_history(db, course_id)
    ]


@router.put("/mark/{session_identifier}", response_model=MarkResult)
def mark_attendance(
    session_identifier: str,
    payload: Optional[MarkRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    session = crud_attendance.get_session_by_identifier(db, session_identifier)
    if session is None:
        raise SessionNotFound()

    now = clock.now()
    descriptor = payload.descriptor if payload else None

    if descriptor:
        # Face path: staff and kiosks mark whoever matches, students only themselves
        crud_attendance.ensure_session_open(session, now)
        only = current_user.id if current_user.role == Role.STUDENT.value else None
        candidates = crud_attendance.pending_face_candidates(db, session.id, student_id=only)
        student_id = identify(candidates, descriptor)
        if student_id is None:
            resolved = crud_attendance.resolved_face_records(db, session.id, student_id=only)
            if identify(resolved, descriptor) is not None:
                raise AlreadyMarked()
            logger.info(f"No face match in session {session_identifier}")
            raise NoFaceMatch()
        return _mark(db, session, student_id, MarkMethod.FACE, now)

    if current_user.role != Role.STUDENT.value:
        raise HTTPException(status_code=403, detail="Only students can mark their own attendance")
    return _mark(db, session, current_user.id, MarkMethod.MANUAL, now)


def _mark(db: Session, session, student_id: int, method: MarkMethod, now):
    record = crud_attendance.mark_present(db, session, student_id, method, now)
    return {"message": "Attendance marked successfully", "record": record}
