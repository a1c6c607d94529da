from enum import Enum
from typing import Optional
from datetime import datetime

from pydantic import Field

from alnet.schemas.base import CamelModel


class TargetAudience(str, Enum):
    ALL = "all"
    STUDENTS = "students"
    ALUMNI = "alumni"


class AnnouncementStatus(str, Enum):
    PUBLISHED = "published"
    ARCHIVED = "archived"


class AnnouncementCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1, max_length=10000)
    target_audience: TargetAudience = TargetAudience.ALL


class AnnouncementOut(CamelModel):
    id: str
    title: str
    content: str
    target_audience: TargetAudience
    status: AnnouncementStatus
    published_at: datetime
    created_by: Optional[str] = None
    created_at: datetime
