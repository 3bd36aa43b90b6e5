from sqlalchemy.orm import Session
from app.db.models.department import Department


def get_department(db: Session, department_id: int):
    return db.query(Department).filter(Department.id == department_id).first()


def get_department_by_name(db: Session, name: str):
    return db.query(Department).filter(Department.name == name).first()


def get_all_departments(db: Session):
    return db.query(Department).order_by(Department.name).all()


def create_department(db: Session, name: str):
    department = Department(name=name)
    db.add(department)
    db.commit()
    db.refresh(department)
    return department
