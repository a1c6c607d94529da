from enum import Enum
from typing import List, Optional
from datetime import datetime

from pydantic import Field, field_validator

from alnet.db.types import normalize_string_list
from alnet.schemas.base import CamelModel


class ProfileType(str, Enum):
    STUDENT = "student"
    ALUMNI = "alumni"


class ProfileSortField(str, Enum):
    CREATED_AT = "createdAt"
    FIRST_NAME = "firstName"
    LAST_NAME = "lastName"
    GRADUATION_YEAR = "graduationYear"
    YEARS_OF_EXPERIENCE = "yearsOfExperience"
    CURRENT_COMPANY = "currentCompany"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _clean_list(value):
    if value is None:
        return value
    if isinstance(value, str):
        value = value.split(",")
    for item in value:
        if isinstance(item, str) and "," in item:
            raise ValueError("Entries may not contain commas")
    return normalize_string_list(value)


class ProfileBase(CamelModel):
    bio: Optional[str] = Field(None, max_length=5000)
    headline: Optional[str] = Field(None, max_length=255)
    phone_number: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    linkedin_url: Optional[str] = Field(None, max_length=500)
    github_url: Optional[str] = Field(None, max_length=500)
    portfolio_url: Optional[str] = Field(None, max_length=500)
    current_company: Optional[str] = Field(None, max_length=255)
    current_position: Optional[str] = Field(None, max_length=255)
    industry: Optional[str] = Field(None, max_length=255)
    years_of_experience: Optional[int] = Field(None, ge=0, le=80)
    graduation_year: Optional[int] = Field(None, ge=1900, le=2100)
    degree_type: Optional[str] = Field(None, max_length=100)
    department_or_course: Optional[str] = Field(None, max_length=255)


class ProfileUpdate(ProfileBase):
    """Patch body: only the fields sent are changed"""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    skills: Optional[List[str]] = None
    mentorship_topics: Optional[List[str]] = None
    is_public: Optional[bool] = None
    seeking_mentorship: Optional[bool] = None
    offering_mentorship: Optional[bool] = None

    @field_validator("skills", "mentorship_topics", mode="before")
    @classmethod
    def clean_lists(cls, v):
        return _clean_list(v)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class ProfileOut(ProfileBase):
    id: str
    user_id: str
    first_name: str
    last_name: str
    profile_type: ProfileType
    profile_photo_url: Optional[str] = None
    skills: List[str] = []
    mentorship_topics: List[str] = []
    is_public: bool
    seeking_mentorship: bool
    offering_mentorship: bool
    created_at: datetime
    updated_at: datetime


class ProfileSummary(CamelModel):
    """Profile fields embedded in connection and conversation rows"""
    user_id: str
    first_name: str
    last_name: str
    profile_type: ProfileType
    headline: Optional[str] = None
    current_company: Optional[str] = None
    current_position: Optional[str] = None
    profile_photo_url: Optional[str] = None


class AlumniSearchFilters(CamelModel):
    keyword: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    location: Optional[str] = None
    industry: Optional[str] = None
    skills: List[str] = []
    years_of_experience: Optional[int] = Field(None, ge=0)
    graduation_year: Optional[int] = None
    offering_mentorship: Optional[bool] = None
    seeking_mentorship: Optional[bool] = None
    sort_by: Optional[ProfileSortField] = None
    order: SortOrder = SortOrder.DESC


class PhotoUploadOut(CamelModel):
    message: str
    photo_url: str


class BulkUploadError(CamelModel):
    row: int
    email: Optional[str] = None
    error: str


class BulkUploadResult(CamelModel):
    processed: int = 0
    created: int = 0
    updated: int = 0
    failed: int = 0
    errors: List[BulkUploadError] = []
