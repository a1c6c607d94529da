from enum import Enum
from typing import Dict, List, Optional
from datetime import datetime

from pydantic import Field, field_validator

from alnet.db.types import normalize_string_list
from alnet.modules.profiles.schemas.profile import ProfileSummary
from alnet.schemas.base import CamelModel


class JobType(str, Enum):
    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"
    FREELANCE = "freelance"


class JobStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    FILLED = "filled"


class JobBase(CamelModel):
    salary: Optional[str] = Field(None, max_length=100)
    required_skills: Optional[List[str]] = None
    application_deadline: Optional[datetime] = None

    @field_validator("required_skills", mode="before")
    @classmethod
    def clean_skills(cls, v):
        if v is None:
            return v
        if isinstance(v, str):
            v = v.split(",")
        return normalize_string_list(v)


class JobCreate(JobBase):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    company_name: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    job_type: JobType


class JobUpdate(JobBase):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    company_name: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    job_type: Optional[JobType] = None
    status: Optional[JobStatus] = None


class JobOut(CamelModel):
    id: str
    title: str
    description: str
    company_name: str
    location: str
    job_type: JobType
    status: JobStatus
    salary: Optional[str] = None
    required_skills: List[str] = []
    application_deadline: Optional[datetime] = None
    posted_date: datetime
    posted_by_user_id: Optional[str] = None
    applications_count: int
    created_at: datetime
    updated_at: datetime


class JobApplicationCreate(CamelModel):
    cover_letter: Optional[str] = Field(None, max_length=5000)


class JobApplicationOut(CamelModel):
    id: str
    job_id: str
    applicant_id: str
    cover_letter: Optional[str] = None
    created_at: datetime
    applicant: Optional[ProfileSummary] = None


class JobStatistics(CamelModel):
    total: int
    open: int
    closed: int
    filled: int
    by_type: Dict[str, int]
