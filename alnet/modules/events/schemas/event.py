from enum import Enum
from typing import Dict, List, Optional
from datetime import datetime, timezone

from pydantic import Field, field_validator

from alnet.db.types import normalize_string_list
from alnet.modules.profiles.schemas.profile import ProfileSummary
from alnet.schemas.base import CamelModel


class EventStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RsvpStatus(str, Enum):
    GOING = "going"
    INTERESTED = "interested"
    NOT_GOING = "not_going"


class EventBase(CamelModel):
    image_url: Optional[str] = Field(None, max_length=2048)
    location: Optional[str] = Field(None, max_length=255)
    event_type: Optional[str] = Field(None, max_length=100)
    organizer_name: Optional[str] = Field(None, max_length=255)
    tags: Optional[List[str]] = None

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v):
        if v is None:
            return v
        if isinstance(v, str):
            v = v.split(",")
        return normalize_string_list(v)

    @field_validator("event_date", mode="after", check_fields=False)
    @classmethod
    def naive_utc(cls, v):
        # stored timestamps are naive UTC
        if v is None or v.tzinfo is None:
            return v
        try:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        except OverflowError:
            raise ValueError("date is out of range")


class EventCreate(EventBase):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    event_date: datetime
    capacity: int = Field(0, ge=0, le=100000)


class EventUpdate(EventBase):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    event_date: Optional[datetime] = None
    capacity: Optional[int] = Field(None, ge=0, le=100000)
    status: Optional[EventStatus] = None


class EventOut(CamelModel):
    id: str
    title: str
    description: str
    image_url: Optional[str] = None
    event_date: datetime
    location: Optional[str] = None
    event_type: Optional[str] = None
    status: EventStatus
    capacity: int
    registered_count: int
    organizer_name: Optional[str] = None
    tags: List[str] = []
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class RsvpCreate(CamelModel):
    status: RsvpStatus = RsvpStatus.GOING


class RsvpOut(CamelModel):
    id: str
    event_id: str
    user_id: str
    status: RsvpStatus
    created_at: datetime
    updated_at: datetime
    attendee: Optional[ProfileSummary] = None


class EventStatistics(CamelModel):
    total: int
    by_status: Dict[str, int]
    total_rsvps: int
    going: int
