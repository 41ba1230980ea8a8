from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from resto_pos.database import get_db, transaction
from resto_pos.dependencies import get_current_user, require_role
from resto_pos.exceptions import ConflictError
from resto_pos.models import Outlet
from resto_pos.schemas.outlet import OutletCreate, OutletResponse

router = APIRouter()


@router.get("/", response_model=List[OutletResponse])
def get_all_outlets(
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Get all active outlets
    """
    outlets = db.query(Outlet).filter(Outlet.is_active == True).order_by(Outlet.created_at).all()
    return [OutletResponse.model_validate(outlet) for outlet in outlets]


@router.post("/", response_model=OutletResponse, status_code=status.HTTP_201_CREATED)
def create_outlet(
    data: OutletCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_role("SUPERUSER", "OWNER", "ADMIN"))
):
    """
    Create new outlet
    Only SUPERUSER, OWNER or ADMIN can create outlets
    """
    with transaction(db) as tx:
        existing = tx.query(Outlet).filter(Outlet.name == data.name).first()
        if existing:
            raise ConflictError(f"Outlet '{data.name}' already exists")

        outlet = Outlet(name=data.name, address=data.address, phone=data.phone, is_active=True)
        tx.add(outlet)
        tx.flush()
        response = OutletResponse.model_validate(outlet)

    return response
