# app/schemas/user.py

from pydantic import BaseModel, Field
from typing import List, Optional

from app.core.enums import Role


class FaceData(BaseModel):
    image: str  # base64 or URL, stored as-is
    descriptors: List[float] = Field(min_length=1)


class UserCreate(BaseModel):
    first_name: str
    last_name: str
    email: str
    password: str
    role: Role
    department_id: Optional[int] = None
    face_data: Optional[FaceData] = None


class UserLogin(BaseModel):
    email: str
    password: str


class UserUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    department_id: Optional[int] = None
    profile_picture: Optional[str] = None
    face_data: Optional[FaceData] = None


class UserOut(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    role: str
    unique_id: str
    department_id: Optional[int] = None
    profile_picture: Optional[str] = None

    class Config:
        from_attributes = True


class AuthOut(UserOut):
    access_token: str
    token_type: str = "bearer"


class UserBrief(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str

    class Config:
        from_attributes = True
