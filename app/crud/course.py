from sqlalchemy.orm import Session

from app.db.models.attendance import Attendance, AttendanceSession
from app.db.models.course import Course, CourseSchedule, Enrollment
from app.db.models.department import Department


def get_course(db: Session, course_id: int):
    return db.query(Course).filter(Course.id == course_id).first()


def get_course_by_code(db: Session, code: str):
    return db.query(Course).filter(Course.code == code).first()


def _schedule_rows(entries):
    return [
        CourseSchedule(
            position=i,
            day=e.day,
            start_time=e.start_time,
            end_time=e.end_time,
        )
        for i, e in enumerate(entries)
    ]


def create_course(db: Session, course_in, teacher_id: int, department: Department):
    course = Course(
        name=course_in.name,
        code=course_in.code,
        teacher_id=teacher_id,
        department_id=department.id,
        semester_start_date=course_in.semester_start_date,
        semester_duration=course_in.semester_duration,
        schedule=_schedule_rows(course_in.schedule),
    )
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


def update_course(db: Session, course: Course, update):
    if update.name:
        course.name = update.name
    if update.schedule:
        course.schedule = _schedule_rows(update.schedule)
    if update.semester_start_date:
        course.semester_start_date = update.semester_start_date
    if update.semester_duration:
        course.semester_duration = update.semester_duration
    db.commit()
    db.refresh(course)
    return course


def delete_course(db: Session, course: Course):
    # attendance history goes with the course
    db.query(Attendance).filter(Attendance.course_id == course.id).delete(synchronize_session=False)
    db.query(AttendanceSession).filter(AttendanceSession.course_id == course.id).delete(synchronize_session=False)
    db.delete(course)
    db.commit()


def get_courses_by_teacher(db: Session, teacher_id: int):
    return db.query(Course).filter(Course.teacher_id == teacher_id).order_by(Course.id).all()


def count_courses_by_teacher(db: Session, teacher_id: int) -> int:
    return db.query(Course).filter(Course.teacher_id == teacher_id).count()


def get_courses_for_student(db: Session, student_id: int):
    return (
        db.query(Course)
        .join(Enrollment, Enrollment.course_id == Course.id)
        .filter(Enrollment.student_id == student_id)
        .order_by(Course.id)
        .all()
    )


def get_courses_by_department(db: Session, department_id: int):
    return db.query(Course).filter(Course.department_id == department_id).order_by(Course.id).all()


def get_all_courses(db: Session):
    return db.query(Course).order_by(Course.id).all()


def is_enrolled(db: Session, course_id: int, student_id: int) -> bool:
    return db.query(Enrollment.id).filter(
        Enrollment.course_id == course_id,
        Enrollment.student_id == student_id,
    ).first() is not None
