from typing import List, Optional, Tuple
import uuid

from sqlalchemy.orm import Session

from alnet.modules.notifications.models.notification import Notification
from alnet.modules.notifications.schemas.notification import NotificationCreate, NotificationUpdate
from alnet.modules.profiles.services.profile import get_profiles_by_user_ids, profile_summary

def get_notification(db: Session, notification_id: str) -> Optional[Notification]:
    """Get notification by ID"""
    return db.query(Notification).filter(Notification.id == notification_id).first()

def get_user_notifications(
    db: Session, user_id: str, skip: int = 0, limit: int = 50, unread_only: bool = False
) -> Tuple[List[dict], int]:
    """Get notifications for a user, newest first, with the actor's profile"""
    query = db.query(Notification).filter(Notification.user_id == user_id)

    if unread_only:
        query = query.filter(Notification.is_read.is_(False))

    total = query.count()
    notifications = query.order_by(Notification.created_at.desc(), Notification.id).offset(skip).limit(limit).all()
    actors = get_profiles_by_user_ids(db, [n.actor_id for n in notifications if n.actor_id])

    result = []
    for notification in notifications:
        result.append({
            "id": notification.id,
            "user_id": notification.user_id,
            "actor_id": notification.actor_id,
            "actor": profile_summary(actors.get(notification.actor_id), notification.actor_id),
            "type": notification.type,
            "content": notification.content,
            "related_id": notification.related_id,
            "is_read": notification.is_read,
            "created_at": notification.created_at,
        })
    return result, total

def count_unread(db: Session, user_id: str) -> int:
    return db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read.is_(False),
    ).count()

def create_notification(db: Session, notification_in: NotificationCreate) -> Notification:
    """Create a new notification"""
    notification_data = notification_in.model_dump()
    notification_data["type"] = notification_in.type.value

    notification = Notification(
        id=str(uuid.uuid4()),
        **notification_data,
    )

    db.add(notification)
    db.commit()
    db.refresh(notification)

    return notification

def update_notification(db: Session, notification: Notification, notification_in: NotificationUpdate) -> Notification:
    """Update a notification"""
    notification.is_read = notification_in.is_read

    db.add(notification)
    db.commit()
    db.refresh(notification)

    return notification

def mark_all_as_read(db: Session, user_id: str) -> int:
    """Mark all notifications as read for a user"""
    result = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read.is_(False),
    ).update({"is_read": True}, synchronize_session=False)

    db.commit()

    return result

def delete_notification(db: Session, notification: Notification) -> None:
    """Delete a notification"""
    db.delete(notification)
    db.commit()

def delete_all_notifications(db: Session, user_id: str) -> int:
    """Delete all notifications for a user"""
    result = db.query(Notification).filter(Notification.user_id == user_id).delete(synchronize_session=False)
    db.commit()

    return result
