import os
from datetime import date, datetime

# Keep the app's own engine and sweep out of the way before app modules load
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SWEEP_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import app.core.clock as clock
import app.db.session as db_session
from app.api.deps import get_db
from app.core.security import create_user_token, get_password_hash
from app.db import Base
from app.db.models import Course, CourseSchedule, Department, Enrollment, User
from app.main import app

# 2026-10-19 is a Monday
MONDAY = date(2026, 10, 19)


def at(hour: int, minute: int = 0, day: date = MONDAY) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute)


class FrozenClock:
    def __init__(self, value: datetime):
        self.value = value

    def set(self, value: datetime):
        self.value = value

    def __call__(self) -> datetime:
        return self.value


@pytest.fixture()
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'attendance_test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine, monkeypatch):
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    monkeypatch.setattr(db_session, "SessionLocal", factory)
    return factory


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def frozen_clock(monkeypatch):
    fake = FrozenClock(at(9, 20))
    monkeypatch.setattr(clock, "now", fake)
    return fake


@pytest.fixture()
def client(session_factory, frozen_clock):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_user_token(user.id)}"}


_counter = {"n": 0}


def make_user(db, role="student", descriptor=None, department=None, first_name="Test"):
    _counter["n"] += 1
    n = _counter["n"]
    user = User(
        first_name=first_name,
        last_name=f"User{n}",
        email=f"{role}{n}@uni.test",
        hashed_password=get_password_hash("secret123"),
        role=role,
        unique_id=f"{'B' if role == 'student' else 'S'}{10000 + n}",
        department_id=department.id if department else None,
        face_image="data:image/png;base64,AAAA" if descriptor is not None else None,
        face_descriptor=descriptor,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_department(db, name="Computer Science"):
    department = Department(name=name)
    db.add(department)
    db.commit()
    db.refresh(department)
    return department


def make_course(db, teacher, students=(), schedule=(("Monday", "09:00", "10:00"),),
                code=None, department=None):
    _counter["n"] += 1
    course = Course(
        name="Algorithms",
        code=code or f"CS{_counter['n']}",
        teacher_id=teacher.id,
        department_id=department.id if department else None,
        semester_start_date=date(2026, 9, 1),
        semester_duration=4,
        schedule=[
            CourseSchedule(position=i, day=day, start_time=start, end_time=end)
            for i, (day, start, end) in enumerate(schedule)
        ],
    )
    db.add(course)
    db.flush()
    for student in students:
        db.add(Enrollment(course_id=course.id, student_id=student.id))
    db.commit()
    db.refresh(course)
    return course


@pytest.fixture()
def teacher(db):
    return make_user(db, role="teacher", first_name="Ada")


@pytest.fixture()
def students(db):
    return [
        make_user(db, descriptor=[0.1, 0.2, 0.3, 0.4], first_name="Alice"),
        make_user(db, descriptor=[0.9, 0.8, 0.7, 0.6], first_name="Bob"),
        make_user(db, descriptor=None, first_name="Carol"),
    ]


@pytest.fixture()
def course(db, teacher, students):
    return make_course(db, teacher, students)
