import secrets

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.enums import Role
from app.core.security import get_password_hash
from app.db.models.user import User
from app.db.models.course import Enrollment


def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email).first()


def get_user_by_id(db: Session, user_id: int):
    return db.query(User).filter(User.id == user_id).first()


def generate_unique_id(db: Session, role: str) -> str:
    """B12345 for students, S12345 for staff."""
    prefix = "B" if role == Role.STUDENT.value else "S"
    while True:
        unique_id = f"{prefix}{10000 + secrets.randbelow(90000)}"
        if not db.query(User.id).filter(User.unique_id == unique_id).first():
            return unique_id


def enroll_student(db: Session, student: User, courses) -> int:
    """Adds the student to every course they are not in yet. Caller commits."""
    enrolled = {e.course_id for e in student.enrollments}
    added = 0
    for course in courses:
        if course.id in enrolled:
            continue
        db.add(Enrollment(course_id=course.id, student_id=student.id))
        enrolled.add(course.id)
        added += 1
    return added


def create_user(db: Session, user_data, department=None):
    face = user_data.face_data
    db_user = User(
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
        role=user_data.role.value,
        unique_id=generate_unique_id(db, user_data.role.value),
        department_id=department.id if department else None,
        face_image=face.image if face and user_data.role == Role.STUDENT else None,
        face_descriptor=list(face.descriptors) if face and user_data.role == Role.STUDENT else None,
        profile_picture=settings.DEFAULT_PROFILE_PICTURE,
    )
    db.add(db_user)
    db.flush()

    # Students join every course of their department right away
    if department is not None and user_data.role == Role.STUDENT:
        enroll_student(db, db_user, department.courses)

    db.commit()
    db.refresh(db_user)
    return db_user


def update_profile(db: Session, user: User, update):
    data = update.model_dump(exclude_unset=True, exclude_none=True)
    for field in ("first_name", "last_name", "email", "department_id", "profile_picture"):
        if field in data:
            setattr(user, field, data[field])
    if "password" in data:
        user.hashed_password = get_password_hash(data["password"])
    if update.face_data is not None:
        # Only future sessions see the new descriptor
        user.face_image = update.face_data.image
        user.face_descriptor = list(update.face_data.descriptors)
    db.commit()
    db.refresh(user)
    return user
