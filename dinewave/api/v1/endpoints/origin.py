"""The caller's fixed origin location used for proximity targeting."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from dinewave.core.security import get_current_user
from dinewave.db.session import get_db
from dinewave.models.user import User
from dinewave.schemas.user import UserOriginRead, UserOriginResponse, UserOriginUpsert
from dinewave.services.origin_service import delete_origin, get_origin, upsert_origin

router: APIRouter = APIRouter()


@router.get("", response_model=UserOriginResponse)
def read_origin(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserOriginResponse:
    origin = get_origin(db, current_user.id)
    return UserOriginResponse(origin=UserOriginRead.model_validate(origin) if origin else None)


@router.put("", response_model=UserOriginResponse)
def save_origin(
    payload: UserOriginUpsert,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserOriginResponse:
    """Create or replace the origin; coordinates are required."""
    origin = upsert_origin(db, current_user.id, payload.model_dump())
    return UserOriginResponse(origin=UserOriginRead.model_validate(origin))


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def remove_origin(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> None:
    if not delete_origin(db, current_user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Origin not found")
