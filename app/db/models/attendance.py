# app/db/models/attendance.py
from sqlalchemy import (
    Column, Integer, String, Boolean, Date, DateTime, ForeignKey, JSON, Text,
    UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base


class AttendanceSession(Base):
    __tablename__ = "attendance_sessions"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    lecture_date = Column(Date, nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    # "{course_id}_{Day}_{HHMM}_{epoch_ms}", what students scan / send to /mark
    session_identifier = Column(String, unique=True, index=True, nullable=False)
    qr_code = Column(Text, nullable=True)  # data:image/png;base64,...
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    course = relationship("Course")
    records = relationship("Attendance", back_populates="session", order_by="Attendance.id")


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("session_id", "student_id", name="uq_attendance_session_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    session_id = Column(Integer, ForeignKey("attendance_sessions.id"), nullable=False, index=True)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    lecture_date = Column(Date, nullable=False)

    # pending -> present | absent | late, never back
    status = Column(String, nullable=False, default="pending", index=True)
    marked_at = Column(DateTime, nullable=True)
    method = Column(String, nullable=True)  # face | manual

    # Copy of the student's descriptor when the session was opened
    face_descriptor = Column(JSON(none_as_null=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    course = relationship("Course")
    session = relationship("AttendanceSession", back_populates="records")
    student = relationship(
        "User", back_populates="attendance_records", foreign_keys=[student_id]
    )
    teacher = relationship("User", foreign_keys=[teacher_id])
