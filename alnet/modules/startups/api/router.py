from typing import Any, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from alnet.db.session import get_db
from alnet.deps import ensure_owner_or_admin, get_current_admin, get_current_user, get_page_params, PageParams
from alnet.modules.notifications.services.notification_events import create_startup_reviewed_notification
from alnet.modules.startups.models.startup import Startup
from alnet.modules.startups.schemas.startup import (
    FundingStage,
    StartupCreate,
    StartupOut,
    StartupReview,
    StartupStage,
    StartupStatistics,
    StartupStatus,
    StartupUpdate,
)
from alnet.modules.startups.services.startup import (
    create_startup,
    delete_startup,
    get_startup,
    get_startup_by_founder,
    get_startup_statistics,
    get_startups,
    review_startup,
    update_startup,
)
from alnet.modules.user_management.models.user import User
from alnet.schemas.response import ApiResponse, Page, StatusMessage, paginate, success_response

router = APIRouter()
logger = logging.getLogger("alnet")

def _get_startup_or_404(db: Session, startup_id: str) -> Startup:
    startup = get_startup(db, startup_id)
    if not startup:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Startup not found",
        )
    return startup

def _already_registered() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="You already have a registered startup",
    )

@router.post("", response_model=ApiResponse[StartupOut], status_code=status.HTTP_201_CREATED)
def register_startup(
    *,
    db: Session = Depends(get_db),
    startup_in: StartupCreate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Submit a startup; it stays pending until an admin reviews it"""
    if get_startup_by_founder(db, current_user.id):
        raise _already_registered()
    try:
        startup = create_startup(db, startup_in, current_user.id)
    except IntegrityError:
        db.rollback()
        raise _already_registered()
    return success_response(startup)

@router.get("", response_model=ApiResponse[Page[StartupOut]])
def list_startups(
    *,
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    keyword: Optional[str] = None,
    stage: Optional[StartupStage] = None,
    funding_stage: Optional[FundingStage] = Query(None, alias="fundingStage"),
    industry: Optional[str] = None,
    location: Optional[str] = None,
    technology: Optional[str] = None,
    startup_status: Optional[StartupStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Browse startups; only approved ones unless a status is requested"""
    if startup_status and startup_status != StartupStatus.APPROVED and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    startups, total = get_startups(
        db,
        skip=page_params.offset,
        limit=page_params.limit,
        keyword=keyword,
        stage=stage.value if stage else None,
        funding_stage=funding_stage.value if funding_stage else None,
        industry=industry,
        location=location,
        technology=technology,
        status=startup_status.value if startup_status else None,
    )
    return success_response(paginate(startups, total, page_params.page, page_params.limit))

@router.get("/my-startup", response_model=ApiResponse[StartupOut])
def read_my_startup(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    startup = get_startup_by_founder(db, current_user.id)
    if not startup:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="You have not registered a startup",
        )
    return success_response(startup)

@router.get("/pending", response_model=ApiResponse[Page[StartupOut]])
def read_pending_startups(
    *,
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_admin),
) -> Any:
    startups, total = get_startups(db, skip=page_params.offset, limit=page_params.limit, status="pending")
    return success_response(paginate(startups, total, page_params.page, page_params.limit))

@router.get("/statistics", response_model=ApiResponse[StartupStatistics])
def read_startup_statistics(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> Any:
    return success_response(get_startup_statistics(db))

@router.get("/{startup_id}", response_model=ApiResponse[StartupOut])
def read_startup(
    *,
    db: Session = Depends(get_db),
    startup_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    startup = _get_startup_or_404(db, startup_id)
    # Unreviewed startups are visible to their founder and admins only
    if startup.status != "approved":
        ensure_owner_or_admin(startup.founder_id, current_user)
    return success_response(startup)

@router.put("/{startup_id}", response_model=ApiResponse[StartupOut])
def update_startup_details(
    *,
    db: Session = Depends(get_db),
    startup_id: str,
    startup_in: StartupUpdate,
    current_user: User = Depends(get_current_user),
) -> Any:
    startup = _get_startup_or_404(db, startup_id)
    ensure_owner_or_admin(startup.founder_id, current_user)
    if startup_in.status is not None and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only admins can change startup status",
        )
    return success_response(update_startup(db, startup, startup_in))

@router.delete("/{startup_id}", response_model=ApiResponse[StatusMessage])
def remove_startup(
    *,
    db: Session = Depends(get_db),
    startup_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    startup = _get_startup_or_404(db, startup_id)
    ensure_owner_or_admin(startup.founder_id, current_user)
    delete_startup(db, startup)
    return success_response({"message": "Startup deleted successfully"})

def _review(db: Session, startup_id: str, new_status: str, review: Optional[StartupReview], admin: User) -> Startup:
    startup = _get_startup_or_404(db, startup_id)
    startup = review_startup(db, startup, new_status, review.note if review else None)
    create_startup_reviewed_notification(db, startup.id, startup.name, startup.founder_id, admin.id, new_status)
    return startup

@router.patch("/{startup_id}/approve", response_model=ApiResponse[StartupOut])
def approve_startup(
    *,
    db: Session = Depends(get_db),
    startup_id: str,
    review: Optional[StartupReview] = None,
    current_user: User = Depends(get_current_admin),
) -> Any:
    return success_response(_review(db, startup_id, "approved", review, current_user))

@router.patch("/{startup_id}/reject", response_model=ApiResponse[StartupOut])
def reject_startup(
    *,
    db: Session = Depends(get_db),
    startup_id: str,
    review: Optional[StartupReview] = None,
    current_user: User = Depends(get_current_admin),
) -> Any:
    return success_response(_review(db, startup_id, "rejected", review, current_user))
