from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from db import get_db
from models.enums import NotificationType
from models.notification import NotificationFilters, NotificationResponse, NotificationSortField
from models.user import User
from services.notification_service import NotificationService
from utils.auth import get_current_user_dependency
from utils.response import send_response

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("")
def get_my_notifications(
    limit: int = Query(50, ge=1, le=200),
    is_read: Optional[bool] = None,
    type: Optional[NotificationType] = None,
    sort_by: NotificationSortField = "created_at",
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user_dependency),
):
    filters = NotificationFilters(limit=limit, is_read=is_read, type=type, sort_by=sort_by, sort_order=sort_order)
    result = NotificationService(db).get_notifications_by_user_id(current_user.id, filters)
    result["notifications"] = [NotificationResponse.model_validate(n) for n in result["notifications"]]
    return send_response(message="Notifications retrieved successfully", data=result)


@router.patch("/read-all")
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user_dependency),
):
    updated = NotificationService(db).mark_all_as_read(current_user.id)
    return send_response(message="Notifications marked as read", data={"updated": updated})


@router.patch("/{notification_id}/read")
def mark_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user_dependency),
):
    notification = NotificationService(db).mark_as_read(current_user.id, notification_id)
    return send_response(
        message="Notification marked as read",
        data=NotificationResponse.model_validate(notification),
    )
