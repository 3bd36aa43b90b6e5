import pytest

from app.core.enums import AttendanceStatus, MarkMethod
from app.core.exceptions import AlreadyMarked, RecordNotFound, SessionClosed, SessionNotFound
from app.core.schedule import can_open_session
from app.core.sweeper import run_expiry_sweep, sweep_once
from app.crud import attendance as crud_attendance
from app.crud import user as crud_user
from app.db.models import AttendanceSession
from app.schemas.user import FaceData, UserUpdate

from conftest import at, make_user


def open_session(db, course, now=None):
    now = now or at(9, 20)
    window = can_open_session(course, now)
    session = crud_attendance.create_session(db, course, window, now)
    crud_attendance.materialize_roster(db, session, course, course.teacher_id)
    return session


def test_session_carries_window_and_identifier(db, course):
    session = open_session(db, course)
    assert session.is_active is True
    assert session.start_time == at(9, 0)
    assert session.end_time == at(10, 0)
    assert session.lecture_date == at(9, 0).date()
    assert session.session_identifier.startswith(f"{course.id}_Monday_0900_")
    assert session.qr_code.startswith("data:image/png;base64,")


def test_roster_has_one_pending_record_per_enrolled_student(db, course, students):
    session = open_session(db, course)
    records = crud_attendance.get_session_records(db, session.id)

    assert [r.student_id for r in records] == [s.id for s in students]
    assert {r.status for r in records} == {"pending"}
    assert records[0].face_descriptor == [0.1, 0.2, 0.3, 0.4]
    assert records[1].face_descriptor == [0.9, 0.8, 0.7, 0.6]
    assert records[2].face_descriptor is None
    assert all(r.marked_at is None for r in records)


def test_materialize_twice_creates_nothing_new(db, course):
    session = open_session(db, course)
    again = crud_attendance.materialize_roster(db, session, course, course.teacher_id)
    assert len(again) == 3
    assert len(crud_attendance.get_session_records(db, session.id)) == 3


def test_materialize_recovers_from_concurrent_writer(db, session_factory, course, monkeypatch):
    now = at(9, 20)
    session = crud_attendance.create_session(db, course, can_open_session(course, now), now)
    build = crud_attendance._new_records
    calls = []

    def racing_new_records(db_, session_, course_, teacher_id):
        batch = build(db_, session_, course_, teacher_id)
        calls.append(len(batch))
        if len(calls) == 1:
            # another writer commits the full roster after our batch was computed
            other = session_factory()
            try:
                other_session = other.get(AttendanceSession, session_.id)
                other_course = other.get(type(course_), course_.id)
                other.add_all(build(other, other_session, other_course, teacher_id))
                other.commit()
            finally:
                other.close()
        return batch

    monkeypatch.setattr(crud_attendance, "_new_records", racing_new_records)
    records = crud_attendance.materialize_roster(db, session, course, course.teacher_id)

    assert calls == [3, 0]
    assert len(records) == 3
    assert len({r.student_id for r in records}) == 3


def test_materialize_fills_in_late_enrollment(db, course, teacher):
    session = open_session(db, course)
    late = make_user(db, descriptor=[0.0, 0.0, 0.0, 1.0], first_name="Dan")
    crud_user.enroll_student(db, late, [course])
    db.commit()
    db.refresh(course)

    records = crud_attendance.materialize_roster(db, session, course, teacher.id)
    assert len(records) == 4
    assert records[-1].student_id == late.id


def test_two_sessions_for_same_slot_are_distinct(db, course):
    first = open_session(db, course, at(9, 20))
    second = open_session(db, course, at(9, 21))
    assert first.session_identifier != second.session_identifier
    assert len(crud_attendance.get_session_records(db, second.id)) == 3


def test_find_active_by_identifier(db, course):
    session = open_session(db, course)
    found = crud_attendance.find_active_by_identifier(db, session.session_identifier)
    assert found.id == session.id

    with pytest.raises(SessionNotFound):
        crud_attendance.find_active_by_identifier(db, "nope")

    crud_attendance.deactivate(db, session.id)
    with pytest.raises(SessionNotFound):
        crud_attendance.find_active_by_identifier(db, session.session_identifier)


def test_deactivate_is_idempotent(db, course):
    session = open_session(db, course)
    assert crud_attendance.deactivate(db, session.id) is True
    assert crud_attendance.deactivate(db, session.id) is False
    db.refresh(session)
    assert session.is_active is False


def test_mark_present_once(db, course, students):
    session = open_session(db, course)
    alice = students[0]

    record = crud_attendance.mark_present(db, session, alice.id, MarkMethod.FACE, at(9, 30))
    assert record.status == "present"
    assert record.method == "face"
    assert record.marked_at == at(9, 30)

    with pytest.raises(AlreadyMarked):
        crud_attendance.mark_present(db, session, alice.id, MarkMethod.MANUAL, at(9, 31))


def test_mark_requires_open_window(db, course, students):
    session = open_session(db, course)
    with pytest.raises(SessionClosed):
        crud_attendance.mark_present(db, session, students[0].id, MarkMethod.MANUAL, at(10, 1))


def test_mark_unknown_student(db, course):
    session = open_session(db, course)
    outsider = make_user(db, first_name="Eve")
    with pytest.raises(RecordNotFound):
        crud_attendance.mark_present(db, session, outsider.id, MarkMethod.MANUAL, at(9, 30))


def test_sweep_marks_pending_absent_and_closes_session(db, course, students):
    session = open_session(db, course)
    crud_attendance.mark_present(db, session, students[0].id, MarkMethod.FACE, at(9, 30))

    result = run_expiry_sweep(db, at(10, 1))
    assert result.records_absent == 2
    assert result.sessions_closed == 1

    db.expire_all()
    by_student = {r.student_id: r for r in crud_attendance.get_session_records(db, session.id)}
    assert by_student[students[0].id].status == "present"
    assert by_student[students[0].id].marked_at == at(9, 30)
    assert by_student[students[1].id].status == "absent"
    assert by_student[students[1].id].marked_at == at(10, 1)
    assert by_student[students[2].id].status == "absent"
    assert db.get(AttendanceSession, session.id).is_active is False


def test_sweep_leaves_running_sessions_alone(db, course):
    session = open_session(db, course)
    result = run_expiry_sweep(db, at(10, 0))
    assert result.records_absent == 0
    assert result.sessions_closed == 0
    db.expire_all()
    assert db.get(AttendanceSession, session.id).is_active is True


def test_second_sweep_is_a_no_op(db, course):
    open_session(db, course)
    run_expiry_sweep(db, at(10, 1))
    result = run_expiry_sweep(db, at(10, 2))
    assert result.records_absent == 0
    assert result.sessions_closed == 0


def test_sweep_finishes_records_of_manually_closed_session(db, course):
    session = open_session(db, course)
    crud_attendance.deactivate(db, session.id)

    result = run_expiry_sweep(db, at(10, 1))
    assert result.records_absent == 3
    assert result.sessions_closed == 0


def test_mark_after_sweep_loses_the_race(db, course, students):
    session = open_session(db, course)
    bob = students[1]
    stale = crud_attendance.get_record(db, session.id, bob.id)
    assert stale.status == "pending"

    run_expiry_sweep(db, at(10, 1))

    # A marker that read the record before the sweep cannot overwrite it
    assert crud_attendance.resolve_pending(
        db, stale.id, AttendanceStatus.PRESENT, at(10, 1), MarkMethod.FACE
    ) is False
    db.expire_all()
    assert crud_attendance.get_record(db, session.id, bob.id).status == "absent"


def test_resolve_pending_succeeds_only_once(db, course, students):
    session = open_session(db, course)
    record = crud_attendance.get_record(db, session.id, students[0].id)
    assert crud_attendance.resolve_pending(db, record.id, AttendanceStatus.PRESENT, at(9, 30)) is True
    assert crud_attendance.resolve_pending(db, record.id, AttendanceStatus.ABSENT, at(9, 31)) is False
    db.refresh(record)
    assert record.status == "present"


def test_pending_face_candidates_skip_missing_descriptors(db, course, students):
    session = open_session(db, course)
    candidates = crud_attendance.pending_face_candidates(db, session.id)
    assert [c.student_id for c in candidates] == [students[0].id, students[1].id]

    crud_attendance.mark_present(db, session, students[0].id, MarkMethod.FACE, at(9, 30))
    candidates = crud_attendance.pending_face_candidates(db, session.id)
    assert [c.student_id for c in candidates] == [students[1].id]


def test_sweep_once_uses_its_own_session(session_factory, db, course):
    session = open_session(db, course)
    result = sweep_once(at(10, 1))
    assert result.records_absent == 3
    assert result.sessions_closed == 1

    db.expire_all()
    assert db.get(AttendanceSession, session.id).is_active is False


def test_profile_descriptor_change_does_not_touch_open_session(db, course, students):
    session = open_session(db, course)
    alice = students[0]

    update = UserUpdate(face_data=FaceData(image="data:image/png;base64,BBBB", descriptors=[1.0, 1.0, 1.0, 1.0]))
    crud_user.update_profile(db, alice, update)

    assert alice.face_descriptor == [1.0, 1.0, 1.0, 1.0]
    record = crud_attendance.get_record(db, session.id, alice.id)
    assert record.face_descriptor == [0.1, 0.2, 0.3, 0.4]


def test_course_report_by_date(db, course, students):
    session = open_session(db, course)
    crud_attendance.mark_present(db, session, students[0].id, MarkMethod.FACE, at(9, 30))
    run_expiry_sweep(db, at(10, 1))

    report = crud_attendance.get_course_report_by_date(db, course.id)
    assert report == [{"lecture_date": at(9, 0).date(), "present_count": 1, "absent_count": 2}]
