from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from app.api.deps import get_db
from app.crud import department as crud_department
from app.schemas.department import DepartmentCreate, DepartmentOut

router = APIRouter()


@router.get("/", response_model=List[DepartmentOut])
def list_departments(db: Session = Depends(get_db)):
    return crud_department.get_all_departments(db)


@router.post("/create", response_model=DepartmentOut, status_code=status.HTTP_201_CREATED)
def create_department(payload: DepartmentCreate, db: Session = Depends(get_db)):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Department name is required.")
    if crud_department.get_department_by_name(db, name):
        raise HTTPException(status_code=409, detail="Department already exists.")
    return crud_department.create_department(db, name)
