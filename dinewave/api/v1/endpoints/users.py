"""User onboarding endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dinewave.core.security import get_current_user, get_token_subject
from dinewave.db.session import get_db
from dinewave.models.user import User, normalize_user_type
from dinewave.schemas.user import UserOnboard, UserRead

router: APIRouter = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/onboard", response_model=UserRead)
def onboard(
    payload: UserOnboard,
    subject: str = Depends(get_token_subject),
    db: Session = Depends(get_db),
) -> User:
    """Create or refresh the local profile for the signed-in identity."""
    try:
        user_type = normalize_user_type(payload.user_type)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    email_owner = db.scalar(select(User).where(User.email == payload.email).limit(1))
    if email_owner is not None and email_owner.id != subject:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")

    user = db.get(User, subject)
    if user is None:
        user = User(id=subject)
        logger.info("[ONBOARDING] Creating user_id=%s as %s", subject, user_type)
    user.email = payload.email
    user.user_type = user_type
    user.first_name = payload.first_name
    user.last_name = payload.last_name
    user.phone = payload.phone
    user.is_onboarding_completed = True
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered") from exc
    db.refresh(user)
    return user


@router.get("/me", response_model=UserRead)
def me(current_user: User = Depends(get_current_user)) -> User:
    return current_user
