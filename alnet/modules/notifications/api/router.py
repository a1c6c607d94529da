from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from alnet.db.session import get_db
from alnet.deps import get_current_user, get_page_params, PageParams
from alnet.modules.user_management.models.user import User
from alnet.modules.notifications.models.notification import Notification
from alnet.modules.notifications.schemas.notification import NotificationCount, NotificationOut, NotificationUpdate
from alnet.modules.notifications.services.notification import (
    count_unread,
    get_notification,
    get_user_notifications,
    update_notification,
    mark_all_as_read,
    delete_notification,
    delete_all_notifications
)
from alnet.schemas.response import ApiResponse, Page, StatusMessage, paginate, success_response

router = APIRouter()

def _get_own_notification(db: Session, notification_id: str, current_user: User) -> Notification:
    notification = get_notification(db, notification_id=notification_id)
    if not notification:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )

    if notification.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions"
        )
    return notification

@router.get("", response_model=ApiResponse[Page[NotificationOut]])
def read_notifications(
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    unread_only: bool = Query(False, alias="unreadOnly"),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Get user's notifications with pagination and filter options"""
    items, total = get_user_notifications(db, current_user.id, page_params.offset, page_params.limit, unread_only)
    return success_response(paginate(items, total, page_params.page, page_params.limit))

@router.get("/unread-count", response_model=ApiResponse[NotificationCount])
def read_unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Number of unread notifications"""
    return success_response({"count": count_unread(db, current_user.id)})

@router.put("/mark-all-read", response_model=ApiResponse[NotificationCount])
def mark_all_notifications_as_read(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Mark all of the user's notifications as read"""
    count = mark_all_as_read(db, current_user.id)

    return success_response({
        "message": f"Marked {count} notifications as read",
        "count": count
    })

@router.put("/{notification_id}", response_model=ApiResponse[NotificationOut])
def mark_notification_as_read(
    *,
    db: Session = Depends(get_db),
    notification_id: str,
    notification_in: NotificationUpdate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Mark a specific notification as read or unread"""
    notification = _get_own_notification(db, notification_id, current_user)
    return success_response(update_notification(db, notification, notification_in))

@router.delete("/{notification_id}", response_model=ApiResponse[StatusMessage])
def delete_notification_by_id(
    *,
    db: Session = Depends(get_db),
    notification_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Delete a specific notification"""
    notification = _get_own_notification(db, notification_id, current_user)
    delete_notification(db, notification)
    return success_response({"message": "Notification deleted"})

@router.delete("", response_model=ApiResponse[NotificationCount])
def delete_all_user_notifications(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Delete all notifications for the current user"""
    count = delete_all_notifications(db, current_user.id)

    return success_response({
        "message": f"Deleted {count} notifications",
        "count": count
    })
