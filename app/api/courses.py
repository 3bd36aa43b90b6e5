# app/api/courses.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from app.api.deps import get_db, get_current_user, require_teacher, require_student
from app.core.enums import Role
from app.crud import attendance as crud_attendance
from app.crud import course as crud_course
from app.crud import department as crud_department
from app.crud.user import enroll_student
from app.db.models.user import User
from app.schemas.course import (
    CourseCreate, CourseUpdate, CourseRegister, CourseOut, CourseDetail, CourseReport
)

router = APIRouter()


def _owned_course(db: Session, course_id: int, user: User):
    course = crud_course.get_course(db, course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    if course.teacher_id != user.id and user.role != Role.ADMIN.value:
        raise HTTPException(status_code=403, detail="Not authorized to change this course")
    return course


@router.get("/student", response_model=List[CourseDetail])
def student_courses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    courses = crud_course.get_courses_for_student(db, current_user.id)
    if not courses:
        raise HTTPException(status_code=404, detail="No courses found for this student.")
    return courses


@router.post("/create", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(
    course_in: CourseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    department = crud_department.get_department(db, course_in.department_id)
    if not department:
        raise HTTPException(status_code=404, detail="Department not found")
    if crud_course.get_course_by_code(db, course_in.code):
        raise HTTPException(status_code=409, detail="Course code already exists")
    return crud_course.create_course(db, course_in, current_user.id, department)


@router.get("/teacher", response_model=List[CourseOut])
def teacher_courses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    courses = crud_course.get_courses_by_teacher(db, current_user.id)
    if not courses:
        raise HTTPException(status_code=404, detail="No courses found for this teacher.")
    return courses


@router.get("/courses-by-teacher", response_model=List[CourseReport])
def courses_report(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    report = []
    for course in crud_course.get_courses_by_teacher(db, current_user.id):
        report.append({
            "course_name": course.name,
            "course_code": course.code,
            "total_students": len(course.enrollments),
            "attendance_by_date": crud_attendance.get_course_report_by_date(db, course.id),
        })
    return report


@router.get("/", response_model=List[CourseDetail])
def list_courses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if current_user.role == Role.ADMIN.value:
        courses = crud_course.get_all_courses(db)
    elif current_user.role == Role.TEACHER.value:
        courses = crud_course.get_courses_by_teacher(db, current_user.id)
    else:
        courses = crud_course.get_courses_for_student(db, current_user.id)

    if not courses:
        raise HTTPException(status_code=404, detail="No courses found")
    return courses


@router.get("/department/{department_id}", response_model=List[CourseDetail])
def department_courses(
    department_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    courses = crud_course.get_courses_by_department(db, department_id)
    if not courses:
        raise HTTPException(status_code=404, detail="No courses found for this department")
    return courses


@router.post("/register", response_model=List[CourseOut])
def register_for_department(
    payload: CourseRegister,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_student)
):
    department = crud_department.get_department(db, payload.department_id)
    if not department:
        raise HTTPException(status_code=404, detail="Department not found")

    enroll_student(db, current_user, department.courses)
    db.commit()
    db.refresh(department)
    return department.courses


@router.put("/update/{course_id}", response_model=CourseOut)
def update_course(
    course_id: int,
    update: CourseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    course = _owned_course(db, course_id, current_user)
    return crud_course.update_course(db, course, update)


@router.delete("/delete/{course_id}")
def delete_course(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher)
):
    course = _owned_course(db, course_id, current_user)
    crud_course.delete_course(db, course)
    return {"message": "Course deleted successfully"}
