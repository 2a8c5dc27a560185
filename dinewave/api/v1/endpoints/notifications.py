"""In-app notification inbox."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from dinewave.core.security import get_current_user
from dinewave.db.session import get_db
from dinewave.models.user import User
from dinewave.schemas.notification import NotificationCountResponse, NotificationRead, NotificationReadAllResponse
from dinewave.services import notification_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[NotificationRead])
def list_notifications(
    filter: str = Query("all"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[NotificationRead]:
    if filter not in notification_service.NOTIFICATION_FILTERS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown notification filter")
    notifications = notification_service.list_notifications(
        db, current_user.id, filter_by=filter, limit=limit, offset=offset
    )
    return [NotificationRead.model_validate(n) for n in notifications]


@router.get("/count", response_model=NotificationCountResponse)
def unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationCountResponse:
    return NotificationCountResponse(unread_count=notification_service.count_unread(db, current_user.id))


@router.post("/read-all", response_model=NotificationReadAllResponse)
def read_all(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationReadAllResponse:
    return NotificationReadAllResponse(updated=notification_service.mark_all_read(db, current_user.id))


@router.post("/{notification_id}/read", response_model=NotificationReadAllResponse)
def read_one(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationReadAllResponse:
    updated = notification_service.mark_read(db, current_user.id, notification_id)
    return NotificationReadAllResponse(updated=int(updated))
