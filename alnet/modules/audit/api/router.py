from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from alnet.db.session import get_db
from alnet.deps import DateRange, get_current_admin, get_date_range, get_page_params, PageParams
from alnet.modules.audit.schemas.audit import AuditAction, AuditCategory, AuditLogOut
from alnet.modules.audit.services.audit import (
    get_failed_logins,
    get_security_events,
    get_user_activity,
    query_audit_logs,
)
from alnet.modules.user_management.models.user import User
from alnet.schemas.response import ApiResponse, Page, paginate, success_response

router = APIRouter()

@router.get("", response_model=ApiResponse[Page[AuditLogOut]])
def list_audit_logs(
    *,
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    user_id: Optional[str] = Query(None, alias="userId"),
    action: Optional[AuditAction] = None,
    category: Optional[AuditCategory] = None,
    resource: Optional[str] = None,
    date_range: DateRange = Depends(get_date_range),
    current_user: User = Depends(get_current_admin),
) -> Any:
    """Audit entries, newest first (admin only)"""
    entries, total = query_audit_logs(
        db,
        skip=page_params.offset,
        limit=page_params.limit,
        user_id=user_id,
        action=action.value if action else None,
        category=category.value if category else None,
        resource=resource,
        start_date=date_range.start_date,
        end_date=date_range.end_date,
    )
    return success_response(paginate(entries, total, page_params.page, page_params.limit))

@router.get("/security", response_model=ApiResponse[List[AuditLogOut]])
def read_security_events(
    *,
    db: Session = Depends(get_db),
    hours: int = Query(24, ge=1, le=24 * 365),
    current_user: User = Depends(get_current_admin),
) -> Any:
    """Security category entries from the last `hours` hours"""
    return success_response(get_security_events(db, hours))

@router.get("/failed-logins", response_model=ApiResponse[List[AuditLogOut]])
def read_failed_logins(
    *,
    db: Session = Depends(get_db),
    hours: int = Query(1, ge=1, le=24 * 365),
    current_user: User = Depends(get_current_admin),
) -> Any:
    return success_response(get_failed_logins(db, hours))

@router.get("/users/{user_id}", response_model=ApiResponse[List[AuditLogOut]])
def read_user_activity(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    days: int = Query(30, ge=1, le=3650),
    current_user: User = Depends(get_current_admin),
) -> Any:
    """A user's latest 100 entries within the last `days` days"""
    return success_response(get_user_activity(db, user_id, days))
