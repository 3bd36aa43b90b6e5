# app/crud/attendance.py
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.enums import AttendanceStatus, MarkMethod
from app.core.exceptions import (
    AlreadyMarked,
    RecordNotFound,
    SessionClosed,
    SessionNotFound,
)
from app.core.qr import make_qr_data_url
from app.core.schedule import LectureWindow
from app.db.models.attendance import Attendance, AttendanceSession
from app.db.models.course import Course

logger = logging.getLogger(__name__)

PENDING = AttendanceStatus.PENDING.value


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

def build_session_identifier(course_id: int, window: LectureWindow, now: datetime) -> str:
    start = window.start_time.replace(":", "")
    return f"{course_id}_{window.day}_{start}_{int(now.timestamp() * 1000)}"


def create_session(db: Session, course: Course, window: LectureWindow, now: datetime) -> AttendanceSession:
    identifier = build_session_identifier(course.id, window, now)
    session = AttendanceSession(
        course_id=course.id,
        lecture_date=now.date(),
        start_time=window.lecture_start,
        end_time=window.lecture_end,
        is_active=True,
        session_identifier=identifier,
        qr_code=make_qr_data_url(identifier),
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    logger.info(f"Session {identifier} opened for course {course.code}")
    return session


def get_session_by_identifier(db: Session, identifier: str) -> Optional[AttendanceSession]:
    return db.query(AttendanceSession).filter(
        AttendanceSession.session_identifier == identifier
    ).first()


def find_active_by_identifier(db: Session, identifier: str) -> AttendanceSession:
    session = db.query(AttendanceSession).filter(
        AttendanceSession.session_identifier == identifier,
        AttendanceSession.is_active.is_(True),
    ).first()
    if session is None:
        raise SessionNotFound()
    return session


def deactivate(db: Session, session_id: int) -> bool:
    """active -> inactive. Returns False if it was already inactive."""
    updated = db.query(AttendanceSession).filter(
        AttendanceSession.id == session_id,
        AttendanceSession.is_active.is_(True),
    ).update({AttendanceSession.is_active: False}, synchronize_session=False)
    db.commit()
    return updated > 0


def deactivate_expired_sessions(db: Session, now: datetime) -> int:
    updated = db.query(AttendanceSession).filter(
        AttendanceSession.is_active.is_(True),
        AttendanceSession.end_time < now,
    ).update({AttendanceSession.is_active: False}, synchronize_session=False)
    db.commit()
    return updated


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

def get_session_records(db: Session, session_id: int) -> List[Attendance]:
    return (
        db.query(Attendance)
        .filter(Attendance.session_id == session_id)
        .order_by(Attendance.id)
        .all()
    )


def get_record(db: Session, session_id: int, student_id: int) -> Optional[Attendance]:
    return db.query(Attendance).filter(
        Attendance.session_id == session_id,
        Attendance.student_id == student_id,
    ).first()


def _new_records(db: Session, session: AttendanceSession, course: Course, teacher_id: Optional[int]) -> List[Attendance]:
    existing = {
        student_id
        for (student_id,) in db.query(Attendance.student_id).filter(
            Attendance.session_id == session.id
        )
    }
    records = []
    for enrollment in course.enrollments:
        if enrollment.student_id in existing:
            continue
        descriptor = enrollment.student.face_descriptor
        records.append(
            Attendance(
                course_id=course.id,
                student_id=enrollment.student_id,
                session_id=session.id,
                teacher_id=teacher_id,
                lecture_date=session.lecture_date,
                status=PENDING,
                # snapshot, later profile edits do not reach open sessions
                face_descriptor=list(descriptor) if descriptor else None,
            )
        )
    return records


def materialize_roster(
    db: Session,
    session: AttendanceSession,
    course: Course,
    teacher_id: Optional[int],
) -> List[Attendance]:
    """Create one pending record per enrolled student that does not have one yet.

    Safe to call again for the same session: a retry only inserts what is
    missing. New rows go in with a single commit; if a concurrent caller
    wins the (session, student) unique constraint the batch is recomputed.
    """
    for attempt in range(2):
        records = _new_records(db, session, course, teacher_id)
        if not records:
            break
        db.add_all(records)
        try:
            db.commit()
            logger.info(f"Roster for session {session.id}: {len(records)} pending records created")
            break
        except IntegrityError:
            db.rollback()
            if attempt:
                raise
            logger.warning(f"Roster for session {session.id} raced with another writer, retrying")
    return get_session_records(db, session.id)


def _face_records(db: Session, session_id: int, *filters) -> List[Attendance]:
    records = (
        db.query(Attendance)
        .filter(
            Attendance.session_id == session_id,
            Attendance.face_descriptor.isnot(None),
            *filters,
        )
        .order_by(Attendance.id)
        .all()
    )
    # JSON null / [] are not comparable
    return [r for r in records if r.face_descriptor]


def pending_face_candidates(db: Session, session_id: int, student_id: Optional[int] = None) -> List[Attendance]:
    """Pending records with a stored descriptor, in enrollment (insert) order.

    ``student_id`` narrows the search to that student's own record.
    """
    filters = [Attendance.status == PENDING]
    if student_id is not None:
        filters.append(Attendance.student_id == student_id)
    return _face_records(db, session_id, *filters)


def resolved_face_records(db: Session, session_id: int, student_id: Optional[int] = None) -> List[Attendance]:
    """Records that already left pending, for telling "already marked" apart from "unknown face"."""
    filters = [Attendance.status != PENDING]
    if student_id is not None:
        filters.append(Attendance.student_id == student_id)
    return _face_records(db, session_id, *filters)


def resolve_pending(
    db: Session,
    record_id: int,
    status: AttendanceStatus,
    now: datetime,
    method: Optional[MarkMethod] = None,
) -> bool:
    """Compare-and-set: move one record out of pending. False if it already left it."""
    values = {Attendance.status: status.value, Attendance.marked_at: now}
    if method is not None:
        values[Attendance.method] = method.value
    updated = db.query(Attendance).filter(
        Attendance.id == record_id,
        Attendance.status == PENDING,
    ).update(values, synchronize_session=False)
    db.commit()
    return updated > 0


def ensure_session_open(session: AttendanceSession, now: datetime) -> None:
    if not session.is_active or now < session.start_time or now > session.end_time:
        raise SessionClosed()


def mark_present(
    db: Session,
    session: AttendanceSession,
    student_id: int,
    method: MarkMethod,
    now: datetime,
) -> Attendance:
    ensure_session_open(session, now)

    record = get_record(db, session.id, student_id)
    if record is None:
        raise RecordNotFound()
    if record.status != PENDING:
        raise AlreadyMarked()

    if not resolve_pending(db, record.id, AttendanceStatus.PRESENT, now, method):
        # lost the race against the absent sweep or a parallel mark
        raise AlreadyMarked()

    db.refresh(record)
    return record


def mark_pending_absent(db: Session, now: datetime) -> int:
    """pending -> absent for every record whose session has ended."""
    ended = select(AttendanceSession.id).where(AttendanceSession.end_time < now)
    updated = db.query(Attendance).filter(
        Attendance.status == PENDING,
        Attendance.session_id.in_(ended),
    ).update(
        {Attendance.status: AttendanceStatus.ABSENT.value, Attendance.marked_at: now},
        synchronize_session=False,
    )
    db.commit()
    return updated


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

def status_counts(db: Session, *filters) -> dict:
    rows = (
        db.query(Attendance.status, func.count(Attendance.id))
        .filter(*filters)
        .group_by(Attendance.status)
        .all()
    )
    counts = {s.value: 0 for s in AttendanceStatus}
    counts.update({status: count for status, count in rows})
    return counts


def get_student_course_records(db: Session, student_id: int, course_id: int) -> List[Attendance]:
    return (
        db.query(Attendance)
        .join(AttendanceSession, Attendance.session_id == AttendanceSession.id)
        .filter(Attendance.student_id == student_id, Attendance.course_id == course_id)
        .order_by(AttendanceSession.start_time)
        .all()
    )


def get_student_history(db: Session, student_id: int) -> List[Attendance]:
    return (
        db.query(Attendance)
        .join(AttendanceSession, Attendance.session_id == AttendanceSession.id)
        .filter(Attendance.student_id == student_id)
        .order_by(AttendanceSession.lecture_date.desc(), AttendanceSession.start_time.desc())
        .all()
    )


def get_course_history(db: Session, course_id: int) -> List[Attendance]:
    return (
        db.query(Attendance)
        .join(AttendanceSession, Attendance.session_id == AttendanceSession.id)
        .filter(Attendance.course_id == course_id)
        .order_by(AttendanceSession.lecture_date.desc(), Attendance.id)
        .all()
    )


def get_course_report_by_date(db: Session, course_id: int) -> List[dict]:
    rows = (
        db.query(Attendance.lecture_date, Attendance.status, func.count(Attendance.id))
        .filter(Attendance.course_id == course_id)
        .group_by(Attendance.lecture_date, Attendance.status)
        .order_by(Attendance.lecture_date)
        .all()
    )
    by_date: dict = {}
    for lecture_date, status, count in rows:
        entry = by_date.setdefault(
            lecture_date,
            {"lecture_date": lecture_date, "present_count": 0, "absent_count": 0},
        )
        if status == AttendanceStatus.PRESENT.value:
            entry["present_count"] += count
        elif status == AttendanceStatus.ABSENT.value:
            entry["absent_count"] += count
    return list(by_date.values())
