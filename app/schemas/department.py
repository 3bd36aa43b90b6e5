from pydantic import BaseModel
from typing import List


class DepartmentCreate(BaseModel):
    name: str


class DepartmentOut(BaseModel):
    id: int
    name: str
    course_ids: List[int] = []

    class Config:
        from_attributes = True
