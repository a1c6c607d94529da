from enum import Enum
from typing import Optional
from datetime import datetime

from pydantic import EmailStr

from alnet.schemas.base import CamelModel


class UserRole(str, Enum):
    STUDENT = "student"
    ALUMNI = "alumni"
    ADMIN = "admin"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class UserBase(CamelModel):
    email: EmailStr
    role: UserRole


class UserBrief(UserBase):
    """User summary embedded in auth responses"""
    id: str


class UserOut(UserBrief):
    """User model returned to admins"""
    status: UserStatus
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    last_login_at: Optional[datetime] = None
    created_at: datetime


class UserStatusUpdate(CamelModel):
    status: UserStatus
