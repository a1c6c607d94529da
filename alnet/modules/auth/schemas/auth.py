from typing import Optional

from pydantic import EmailStr, Field, field_validator

from alnet.modules.profiles.schemas.profile import ProfileOut
from alnet.modules.user_management.schemas.user import UserBrief, UserRole, UserStatus
from alnet.schemas.base import CamelModel


def _normalize_email(email: Optional[str]) -> Optional[str]:
    """Normalize email to lowercase."""
    return email.strip().lower() if email else email


class RegisterRequest(CamelModel):
    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=6, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: UserRole = UserRole.STUDENT

    normalize_email = field_validator("email")(_normalize_email)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    normalize_email = field_validator("email")(_normalize_email)


class RefreshTokenRequest(CamelModel):
    refresh_token: str


class Token(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthResult(Token):
    message: str
    user: UserBrief


class CurrentUser(CamelModel):
    id: str
    email: str
    role: UserRole
    status: UserStatus
    profile: Optional[ProfileOut] = None
