from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.api.deps import get_db, get_current_user
from app.core.enums import Role
from app.db.models.user import User
from app.schemas.user import UserCreate, UserLogin, UserUpdate, UserOut, AuthOut
from app.crud import user as crud_user
from app.crud import department as crud_department
from app.core.security import verify_password, create_user_token

router = APIRouter()


def _auth_payload(user: User) -> dict:
    data = UserOut.model_validate(user).model_dump()
    data["access_token"] = create_user_token(user.id)
    data["token_type"] = "bearer"
    return data


@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
def register(user_in: UserCreate, db: Session = Depends(get_db)):
    if user_in.role == Role.ADMIN:
        raise HTTPException(status_code=400, detail="Role must be 'teacher' or 'student'")
    if user_in.role == Role.STUDENT and user_in.face_data is None:
        raise HTTPException(status_code=400, detail="Face data is required for student registration.")
    if user_in.role == Role.STUDENT and user_in.department_id is None:
        raise HTTPException(status_code=400, detail="Department is required for student registration.")
    if crud_user.get_user_by_email(db, user_in.email):
        raise HTTPException(status_code=400, detail="User already exists.")

    department = None
    if user_in.department_id is not None:
        department = crud_department.get_department(db, user_in.department_id)
        if not department:
            raise HTTPException(status_code=400, detail="Invalid department.")

    user = crud_user.create_user(db, user_in, department=department)
    return _auth_payload(user)


@router.post("/login", response_model=AuthOut)
def login(form: UserLogin, db: Session = Depends(get_db)):
    user = crud_user.get_user_by_email(db, form.email)
    if not user or not verify_password(form.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid credentials.")
    return _auth_payload(user)


@router.get("/profile", response_model=UserOut)
def read_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=UserOut)
def update_profile(
    update: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if update.email and update.email != current_user.email:
        if crud_user.get_user_by_email(db, update.email):
            raise HTTPException(status_code=400, detail="Email already in use.")
    if update.department_id is not None and not crud_department.get_department(db, update.department_id):
        raise HTTPException(status_code=400, detail="Invalid department.")
    return crud_user.update_profile(db, current_user, update)
