from enum import Enum
from typing import Optional
from datetime import datetime

from alnet.modules.profiles.schemas.profile import ProfileSummary
from alnet.schemas.base import CamelModel


class NotificationType(str, Enum):
    CONNECTION_REQUEST = "connection_request"
    CONNECTION_ACCEPTED = "connection_accepted"
    NEW_MESSAGE = "new_message"
    JOB_APPLICATION = "job_application"
    STARTUP_REVIEWED = "startup_reviewed"
    EVENT_RSVP = "event_rsvp"


class NotificationBase(CamelModel):
    type: NotificationType
    content: str
    related_id: Optional[str] = None


class NotificationCreate(NotificationBase):
    user_id: str
    actor_id: Optional[str] = None  # ID of the user who triggered the notification


class NotificationUpdate(CamelModel):
    is_read: bool = True


class NotificationOut(NotificationBase):
    """Notification model returned to client"""
    id: str
    user_id: str
    actor_id: Optional[str] = None
    actor: Optional[ProfileSummary] = None
    is_read: bool
    created_at: datetime


class NotificationCount(CamelModel):
    message: Optional[str] = None
    count: int
