from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from db import get_db
from models.user import User, UserLogin, UserResponse
from services.user_service import UserService
from utils.auth import create_access_token, get_current_user_dependency
from utils.response import send_response

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login")
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    user = UserService(db).authenticate_user(credentials)
    token = create_access_token(data={"sub": user.id, "role": user.role.value})

    return send_response(
        message="User logged in successfully",
        data={
            "token": token,
            "token_type": "bearer",
            "user": UserResponse.model_validate(user),
        },
    )


@router.post("/token")
def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """Form-encoded login for the OpenAPI password flow"""
    user = UserService(db).authenticate_user(
        UserLogin.model_construct(email=form_data.username, password=form_data.password)
    )
    token = create_access_token(data={"sub": user.id, "role": user.role.value})
    return {"access_token": token, "token_type": "bearer"}


@router.get("/me")
def get_me(current_user: User = Depends(get_current_user_dependency)):
    return send_response(message="User retrieved successfully", data=UserResponse.model_validate(current_user))
