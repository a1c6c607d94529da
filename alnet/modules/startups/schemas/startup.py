from enum import Enum
from typing import Dict, List, Optional
from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from alnet.db.types import normalize_string_list
from alnet.schemas.base import CamelModel


class StartupStage(str, Enum):
    IDEA = "idea"
    MVP = "mvp"
    EARLY_STAGE = "early_stage"
    GROWTH = "growth"
    SCALING = "scaling"


class FundingStage(str, Enum):
    BOOTSTRAPPED = "bootstrapped"
    PRE_SEED = "pre_seed"
    SEED = "seed"
    SERIES_A = "series_a"
    SERIES_B = "series_b"
    SERIES_C_PLUS = "series_c_plus"


class StartupStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class StartupBase(CamelModel):
    tagline: Optional[str] = Field(None, max_length=255)
    logo: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = Field(None, max_length=255)
    founded_date: Optional[datetime] = None
    location: Optional[str] = Field(None, max_length=255)
    team_members: Optional[List[str]] = None
    team_size: Optional[int] = Field(None, ge=1)
    technologies: Optional[List[str]] = None
    pitch_deck: Optional[str] = None
    linkedin_url: Optional[str] = None
    twitter_url: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=50)
    achievements: Optional[str] = None
    looking_for: Optional[str] = Field(None, max_length=255)

    @field_validator("team_members", "technologies", mode="before")
    @classmethod
    def clean_lists(cls, v):
        if v is None:
            return v
        if isinstance(v, str):
            v = v.split(",")
        return normalize_string_list(v)


class StartupCreate(StartupBase):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    stage: StartupStage = StartupStage.IDEA
    funding_stage: FundingStage = FundingStage.BOOTSTRAPPED


class StartupUpdate(StartupBase):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    stage: Optional[StartupStage] = None
    funding_stage: Optional[FundingStage] = None
    status: Optional[StartupStatus] = None


class StartupReview(CamelModel):
    note: Optional[str] = Field(None, max_length=2000)


class StartupOut(CamelModel):
    id: str
    name: str
    description: str
    tagline: Optional[str] = None
    logo: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    stage: StartupStage
    funding_stage: FundingStage
    status: StartupStatus
    founded_date: Optional[datetime] = None
    location: Optional[str] = None
    team_members: List[str] = []
    team_size: Optional[int] = None
    technologies: List[str] = []
    pitch_deck: Optional[str] = None
    linkedin_url: Optional[str] = None
    twitter_url: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    achievements: Optional[str] = None
    looking_for: Optional[str] = None
    review_note: Optional[str] = None
    founder_id: str
    created_at: datetime
    updated_at: datetime


class StartupStatistics(CamelModel):
    total: int
    pending: int
    approved: int
    rejected: int
    by_stage: Dict[str, int]
    by_funding_stage: Dict[str, int]
