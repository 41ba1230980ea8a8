from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from uuid import UUID

from resto_pos.database import get_db
from resto_pos.models import User
from resto_pos.models.enums import UserRole
from resto_pos.utils.security import decode_access_token

# Security scheme
security = HTTPBearer()

# Roles allowed to take and void payments
CASH_HANDLING_ROLES = (
    UserRole.SUPERUSER.value,
    UserRole.OWNER.value,
    UserRole.ADMIN.value,
    UserRole.CASHIER.value,
)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> dict:
    """
    Get current authenticated user from JWT token
    Returns user data with role and bound outlet
    """
    token = credentials.credentials

    payload = decode_access_token(token)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    try:
        user = db.get(User, UUID(user_id))
    except ValueError:
        user = None

    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )

    return {
        "user_id": str(user.id),
        "username": user.username,
        "role": user.role,
        "outlet_id": str(user.outlet_id) if user.outlet_id else None
    }


def require_role(*allowed_roles: str):
    """
    Dependency to check if user has required role
    Usage: Depends(require_role("OWNER", "ADMIN"))
    """
    def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        if current_user["role"] not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join(allowed_roles)}"
            )
        return current_user
    return role_checker
