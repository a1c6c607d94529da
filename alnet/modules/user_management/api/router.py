from typing import Any, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status, Query
from sqlalchemy.orm import Session

from alnet.db.session import get_db
from alnet.deps import get_current_admin, get_page_params, PageParams
from alnet.modules.audit.schemas.audit import AuditAction, AuditCategory
from alnet.modules.audit.services.audit import record_audit
from alnet.modules.user_management.models.user import User
from alnet.modules.user_management.schemas.user import UserOut, UserRole, UserStatus, UserStatusUpdate
from alnet.modules.user_management.services.user import get_user, get_users, set_user_status, to_user_out
from alnet.schemas.response import ApiResponse, Page, paginate, success_response

router = APIRouter()
logger = logging.getLogger("alnet")

def _validate_user(db: Session, user_id: str) -> User:
    """Validate user exists and return user object or raise HTTPException"""
    user = get_user(db, user_id=user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user

@router.get("", response_model=ApiResponse[Page[UserOut]])
def list_users(
    *,
    db: Session = Depends(get_db),
    role: Optional[UserRole] = None,
    user_status: Optional[UserStatus] = Query(None, alias="status"),
    q: Optional[str] = None,
    page_params: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_admin),
) -> Any:
    """List users (admin only)"""
    users, total = get_users(
        db,
        skip=page_params.offset,
        limit=page_params.limit,
        role=role.value if role else None,
        status=user_status.value if user_status else None,
        q=q,
    )
    items = [to_user_out(user) for user in users]
    return success_response(paginate(items, total, page_params.page, page_params.limit))

@router.get("/{user_id}", response_model=ApiResponse[UserOut])
def read_user(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    current_user: User = Depends(get_current_admin),
) -> Any:
    """Get a user account (admin only)"""
    return success_response(to_user_out(_validate_user(db, user_id)))

@router.patch("/{user_id}/status", response_model=ApiResponse[UserOut])
def update_user_status(
    *,
    db: Session = Depends(get_db),
    request: Request,
    user_id: str,
    status_in: UserStatusUpdate,
    current_user: User = Depends(get_current_admin),
) -> Any:
    """Soft-enable or soft-disable an account (admin only). Users are never hard-deleted."""
    user = _validate_user(db, user_id)
    if user.id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Admins cannot change their own status",
        )
    previous = user.status
    user = set_user_status(db, user, status_in.status.value)
    logger.info(f"User {user.id} status set to {user.status} by {current_user.id}")
    record_audit(
        db, AuditAction.PERMISSION_CHANGE, AuditCategory.USER_MANAGEMENT, "User",
        user_id=current_user.id, user_email=current_user.email, resource_id=user.id,
        description=f"Account status changed from {previous} to {user.status}",
        old_value={"status": previous}, new_value={"status": user.status},
        request=request,
    )
    return success_response(to_user_out(user))
