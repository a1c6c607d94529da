from enum import Enum
from typing import Optional
from datetime import datetime

from pydantic import Field

from alnet.modules.profiles.schemas.profile import ProfileSummary
from alnet.schemas.base import CamelModel


class ConnectionStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    BLOCKED = "blocked"


class ConnectionCreate(CamelModel):
    receiver_id: str
    message: Optional[str] = Field(None, max_length=500)


class ConnectionRespond(CamelModel):
    accepted: bool


class ConnectionOut(CamelModel):
    id: str
    requester_id: str
    receiver_id: str
    status: ConnectionStatus
    message: Optional[str] = None
    responded_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ConnectionWithProfile(CamelModel):
    """A connection and the profile of the other party"""
    connection: ConnectionOut
    profile: Optional[ProfileSummary] = None


class RelationshipStatus(CamelModel):
    # none, self, pending, accepted, rejected, blocked
    status: str
    # self or other: who created the record
    initiator: Optional[str] = None
    connection_id: Optional[str] = None
