from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from alnet.core import security
from alnet.core.config import settings
from alnet.db.session import get_db
from alnet.modules.user_management.models.user import User
from alnet.modules.user_management.services.user import get_user

# OAuth2 token URL
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/token", auto_error=False)

def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(oauth2_scheme),
) -> User:
    """
    Dependency for getting current authenticated user.

    The caller is resolved once per request and kept on request.state.
    """
    if not token:
        raise _unauthenticated("Not authenticated")

    payload = security.verify_access_token(token)
    if payload is None:
        raise _unauthenticated("Could not validate credentials")

    user = get_user(db, user_id=payload["sub"])
    if not user:
        raise _unauthenticated("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Account is {user.status}",
        )

    request.state.user = user
    return user

def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    """
    Dependency for admin-only endpoints
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user

def ensure_owner_or_admin(owner_id: Optional[str], current_user: User) -> None:
    if owner_id != current_user.id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions",
        )

@dataclass
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

def get_page_params(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
) -> PageParams:
    return PageParams(page=page, limit=limit)

@dataclass
class DateRange:
    start_date: Optional[datetime]
    end_date: Optional[datetime]

def invalid_range(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # stored timestamps are naive UTC
    if value is None or value.tzinfo is None:
        return value
    try:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    except OverflowError:
        raise invalid_range("Date is out of range")

def get_date_range(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
) -> DateRange:
    """Optional startDate/endDate filter, normalized to naive UTC"""
    date_range = DateRange(_naive_utc(start_date), _naive_utc(end_date))
    if date_range.start_date and date_range.end_date and date_range.start_date > date_range.end_date:
        raise invalid_range("startDate must not be after endDate")
    return date_range
