from typing import Any, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from alnet.db.session import get_db
from alnet.deps import get_current_admin, get_current_user, get_page_params, PageParams
from alnet.modules.audit.schemas.audit import AuditAction, AuditCategory
from alnet.modules.audit.services.audit import record_audit
from alnet.modules.donations.models.donation import Donation
from alnet.modules.donations.schemas.donation import (
    DonationCreate,
    DonationOut,
    DonationStatistics,
    DonationStatus,
    DonationStatusUpdate,
)
from alnet.modules.donations.services.donation import (
    can_cancel,
    can_transition,
    create_donation,
    get_donation,
    get_donation_statistics,
    get_donations,
    get_recent_donations,
    get_user_donations,
    set_donation_status,
)
from alnet.modules.user_management.models.user import User
from alnet.schemas.response import ApiResponse, Page, paginate, success_response

router = APIRouter()
logger = logging.getLogger("alnet")

PAYMENT_AUDIT_ACTIONS = {
    "completed": AuditAction.PAYMENT,
    "refunded": AuditAction.REFUND,
}

def _get_donation_or_404(db: Session, donation_id: str) -> Donation:
    donation = get_donation(db, donation_id)
    if not donation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Donation not found",
        )
    return donation

@router.post("", response_model=ApiResponse[DonationOut], status_code=status.HTTP_201_CREATED)
def make_donation(
    *,
    db: Session = Depends(get_db),
    donation_in: DonationCreate,
    current_user: User = Depends(get_current_user),
) -> Any:
    return success_response(create_donation(db, donation_in, current_user.id))

@router.get("/my", response_model=ApiResponse[Page[DonationOut]])
def read_my_donations(
    *,
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_user),
) -> Any:
    donations, total = get_user_donations(db, current_user.id, page_params.offset, page_params.limit)
    return success_response(paginate(donations, total, page_params.page, page_params.limit))

@router.get("/recent", response_model=ApiResponse[Page[DonationOut]])
def read_recent_donations(
    *,
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Completed donations; anonymous donors are not revealed"""
    items, total = get_recent_donations(db, page_params.offset, page_params.limit)
    return success_response(paginate(items, total, page_params.page, page_params.limit))

@router.get("/statistics", response_model=ApiResponse[DonationStatistics])
def read_donation_statistics(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> Any:
    return success_response(get_donation_statistics(db))

@router.get("", response_model=ApiResponse[Page[DonationOut]])
def list_donations(
    *,
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    donation_status: Optional[DonationStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_admin),
) -> Any:
    """All donations, admin only"""
    donations, total = get_donations(
        db, page_params.offset, page_params.limit,
        status=donation_status.value if donation_status else None,
    )
    return success_response(paginate(donations, total, page_params.page, page_params.limit))

@router.post("/{donation_id}/cancel", response_model=ApiResponse[DonationOut])
def cancel_donation(
    *,
    db: Session = Depends(get_db),
    donation_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    donation = _get_donation_or_404(db, donation_id)
    if donation.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions",
        )
    if not can_cancel(donation):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot cancel a {donation.status} donation",
        )
    return success_response(set_donation_status(db, donation, "cancelled"))

@router.patch("/{donation_id}/status", response_model=ApiResponse[DonationOut])
def update_donation_status(
    *,
    db: Session = Depends(get_db),
    request: Request,
    donation_id: str,
    status_in: DonationStatusUpdate,
    current_user: User = Depends(get_current_admin),
) -> Any:
    donation = _get_donation_or_404(db, donation_id)
    if not can_transition(donation.status, status_in.status.value):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot move a donation from {donation.status} to {status_in.status.value}",
        )
    previous = donation.status
    donation = set_donation_status(db, donation, status_in.status.value)
    if donation.status in PAYMENT_AUDIT_ACTIONS:
        record_audit(
            db, PAYMENT_AUDIT_ACTIONS[donation.status], AuditCategory.PAYMENT, "Donation",
            user_id=current_user.id, user_email=current_user.email, resource_id=donation.id,
            description=f"Donation of {donation.amount} {donation.currency} {donation.status}",
            old_value={"status": previous}, new_value={"status": donation.status},
            metadata={"donor_id": donation.user_id, "amount": str(donation.amount), "currency": donation.currency},
            request=request, is_sensitive=True,
        )
    return success_response(donation)
