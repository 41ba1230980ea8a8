from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from pydantic import BaseModel
from datetime import timedelta
import logging

from resto_pos.database import get_db
from resto_pos.config import settings
from resto_pos.models import User
from resto_pos.utils.security import create_access_token, verify_password
from resto_pos.dependencies import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: dict


@router.post("/login", response_model=LoginResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """
    Login user and return JWT token
    """
    user = db.query(User).filter(User.username == request.username).first()

    if user is None or not user.is_active or not verify_password(request.password, user.password_hash):
        logger.warning("Failed login attempt for username '%s'", request.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password"
        )

    access_token = create_access_token(
        data={
            "sub": str(user.id),
            "role": user.role,
            "outlet_id": str(user.outlet_id) if user.outlet_id else None
        },
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": {
            "id": str(user.id),
            "username": user.username,
            "name": user.name,
            "role": user.role,
            "outlet_id": str(user.outlet_id) if user.outlet_id else None
        }
    }


@router.get("/me")
def get_current_user_info(current_user: dict = Depends(get_current_user)):
    """Get current user information"""
    return current_user
