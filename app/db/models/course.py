# app/db/models/course.py
from sqlalchemy import (
    Column, Integer, String, Date, DateTime, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    code = Column(String, unique=True, index=True, nullable=False)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True)
    semester_start_date = Column(Date, nullable=False)
    semester_duration = Column(Integer, nullable=False)  # in months
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    teacher = relationship("User", foreign_keys=[teacher_id])
    department = relationship("Department", back_populates="courses")
    schedule = relationship(
        "CourseSchedule",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="CourseSchedule.position",
    )
    # Enrollment id order is the stable roster order
    enrollments = relationship(
        "Enrollment",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Enrollment.id",
    )

    @property
    def students(self):
        return [e.student for e in self.enrollments]

    @property
    def student_ids(self):
        return [e.student_id for e in self.enrollments]


class CourseSchedule(Base):
    __tablename__ = "course_schedule"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    day = Column(String, nullable=False)  # "Monday" ... "Sunday"
    start_time = Column(String, nullable=True)  # "HH:MM"
    end_time = Column(String, nullable=True)

    course = relationship("Course", back_populates="schedule")


class Enrollment(Base):
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("course_id", "student_id", name="uq_enrollment_course_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    enrolled_at = Column(DateTime(timezone=True), server_default=func.now())

    course = relationship("Course", back_populates="enrollments")
    student = relationship("User", back_populates="enrollments")
