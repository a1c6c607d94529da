from enum import Enum
from typing import Optional
from datetime import datetime

from pydantic import field_validator

from alnet.core.config import settings
from alnet.modules.profiles.schemas.profile import ProfileSummary
from alnet.schemas.base import CamelModel


class MessageStatus(str, Enum):
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"


class MessageCreate(CamelModel):
    receiver_id: str
    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Message content cannot be empty")
        if len(v) > settings.MAX_MESSAGE_LENGTH:
            raise ValueError(f"Message content cannot exceed {settings.MAX_MESSAGE_LENGTH} characters")
        return v


class MessageOut(CamelModel):
    id: int
    sender_id: str
    receiver_id: str
    content: str
    status: MessageStatus
    delivered_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class LastMessage(CamelModel):
    id: int
    content: str
    sender_id: str
    status: MessageStatus
    created_at: datetime


class ConversationOut(CamelModel):
    """One row per counterpart in the caller's inbox"""
    partner_id: str
    partner: Optional[ProfileSummary] = None
    last_message: LastMessage
    last_message_at: datetime
    unread_count: int


class ReadReceipt(CamelModel):
    count: int
