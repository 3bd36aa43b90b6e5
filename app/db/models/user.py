from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, JSON, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    # student | teacher | admin, see app.core.enums.Role
    role = Column(String, nullable=False)
    unique_id = Column(String, unique=True, nullable=False)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True)

    # Face data is required for students only
    face_image = Column(Text, nullable=True)
    face_descriptor = Column(JSON(none_as_null=True), nullable=True)
    profile_picture = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    department = relationship("Department")
    enrollments = relationship(
        "Enrollment",
        back_populates="student",
        cascade="all, delete-orphan",
        order_by="Enrollment.id",
    )
    attendance_records = relationship(
        "Attendance",
        back_populates="student",
        foreign_keys="Attendance.student_id",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def courses(self):
        return [e.course for e in self.enrollments]
