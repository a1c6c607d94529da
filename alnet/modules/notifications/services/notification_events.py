"""
Notification events service.
This module handles the creation of notifications for events elsewhere in the application.
A failed notification never fails the operation that triggered it.
"""
from typing import Optional
import logging

from sqlalchemy.orm import Session

from alnet.modules.notifications.schemas.notification import NotificationCreate, NotificationType
from alnet.modules.notifications.services.notification import create_notification
from alnet.modules.profiles.services.profile import get_profile_by_user_id

logger = logging.getLogger(__name__)

def _display_name(db: Session, user_id: str) -> str:
    profile = get_profile_by_user_id(db, user_id)
    if not profile:
        return "Someone"
    return f"{profile.first_name} {profile.last_name}".strip()

def _notify(
    db: Session,
    user_id: str,
    actor_id: Optional[str],
    notification_type: NotificationType,
    content: str,
    related_id: Optional[str],
) -> bool:
    try:
        create_notification(db, NotificationCreate(
            user_id=user_id,
            actor_id=actor_id,
            type=notification_type,
            content=content,
            related_id=related_id,
        ))
        logger.info(f"Created {notification_type.value} notification for user {user_id}")
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating {notification_type.value} notification: {str(e)}")
        return False

def create_connection_request_notification(db: Session, connection_id: str, requester_id: str, receiver_id: str) -> bool:
    """
    Create a notification when a connection is requested.

    Args:
        db: Database session
        connection_id: ID of the new connection
        requester_id: ID of the user who sent the request
        receiver_id: ID of the user who received the request

    Returns:
        True if notification was created, False otherwise
    """
    name = _display_name(db, requester_id)
    return _notify(
        db, receiver_id, requester_id, NotificationType.CONNECTION_REQUEST,
        f"{name} sent you a connection request", connection_id,
    )

def create_connection_accepted_notification(db: Session, connection_id: str, requester_id: str, receiver_id: str) -> bool:
    """Notify the requester that the receiver accepted"""
    name = _display_name(db, receiver_id)
    return _notify(
        db, requester_id, receiver_id, NotificationType.CONNECTION_ACCEPTED,
        f"{name} accepted your connection request", connection_id,
    )

def create_new_message_notification(db: Session, message_id: int, sender_id: str, receiver_id: str) -> bool:
    """Notify the receiver of a new direct message"""
    name = _display_name(db, sender_id)
    return _notify(
        db, receiver_id, sender_id, NotificationType.NEW_MESSAGE,
        f"New message from {name}", str(message_id),
    )

def create_job_application_notification(db: Session, job_id: str, job_title: str, applicant_id: str, poster_id: Optional[str]) -> bool:
    """Notify the poster that someone applied to their job"""
    if not poster_id or poster_id == applicant_id:
        return False
    name = _display_name(db, applicant_id)
    return _notify(
        db, poster_id, applicant_id, NotificationType.JOB_APPLICATION,
        f"{name} applied to {job_title}", job_id,
    )

def create_startup_reviewed_notification(db: Session, startup_id: str, startup_name: str, founder_id: str, reviewer_id: str, status: str) -> bool:
    """Tell the founder the outcome of the startup review"""
    return _notify(
        db, founder_id, reviewer_id, NotificationType.STARTUP_REVIEWED,
        f"Your startup {startup_name} was {status}", startup_id,
    )

def create_event_rsvp_notification(db: Session, event_id: str, event_title: str, attendee_id: str, organizer_id: Optional[str]) -> bool:
    """Tell the organizer someone is going to their event"""
    if not organizer_id or organizer_id == attendee_id:
        return False
    name = _display_name(db, attendee_id)
    return _notify(
        db, organizer_id, attendee_id, NotificationType.EVENT_RSVP,
        f"{name} is going to {event_title}", event_id,
    )
