from datetime import datetime
from typing import List, Optional, Tuple
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from alnet.modules.donations.models.donation import Donation
from alnet.modules.donations.schemas.donation import DonationCreate

logger = logging.getLogger(__name__)

# Allowed admin transitions, keyed by current status
STATUS_TRANSITIONS = {
    "pending": {"completed", "failed", "cancelled"},
    "completed": {"refunded"},
}

def get_donation(db: Session, donation_id: str) -> Optional[Donation]:
    return db.query(Donation).filter(Donation.id == donation_id).first()

def create_donation(db: Session, donation_in: DonationCreate, user_id: str) -> Donation:
    """Record a pledge; payment happens outside the platform"""
    data = donation_in.model_dump()
    data["type"] = donation_in.type.value
    donation = Donation(**data, user_id=user_id, status="pending")
    db.add(donation)
    db.commit()
    db.refresh(donation)
    logger.info(f"Donation {donation.id} pledged by {user_id}")
    return donation

def get_user_donations(db: Session, user_id: str, skip: int = 0, limit: int = 10) -> Tuple[List[Donation], int]:
    query = db.query(Donation).filter(Donation.user_id == user_id)
    total = query.count()
    return query.order_by(Donation.created_at.desc(), Donation.id).offset(skip).limit(limit).all(), total

def get_donations(db: Session, skip: int = 0, limit: int = 10, status: Optional[str] = None) -> Tuple[List[Donation], int]:
    query = db.query(Donation)
    if status:
        query = query.filter(Donation.status == status)
    total = query.count()
    return query.order_by(Donation.created_at.desc(), Donation.id).offset(skip).limit(limit).all(), total

def can_cancel(donation: Donation) -> bool:
    """Pending pledges and running recurring donations can be cancelled by the donor"""
    if donation.status == "pending":
        return True
    return donation.type == "recurring" and donation.status == "completed"

def can_transition(current: str, new: str) -> bool:
    return new in STATUS_TRANSITIONS.get(current, set())

def set_donation_status(db: Session, donation: Donation, status: str) -> Donation:
    donation.status = status
    now = datetime.utcnow()
    if status == "completed":
        donation.completed_at = now
    elif status == "refunded":
        donation.refunded_at = now
    db.commit()
    db.refresh(donation)
    logger.info(f"Donation {donation.id} is now {status}")
    return donation

def public_view(donation: Donation) -> dict:
    """Donation as shown outside admin views; anonymous donors are hidden"""
    return {
        "id": donation.id,
        "user_id": None if donation.is_anonymous else donation.user_id,
        "amount": donation.amount,
        "currency": donation.currency,
        "type": donation.type,
        "status": donation.status,
        "message": donation.message,
        "is_anonymous": donation.is_anonymous,
        "campaign_id": donation.campaign_id,
        "completed_at": donation.completed_at,
        "refunded_at": donation.refunded_at,
        "created_at": donation.created_at,
        "updated_at": donation.updated_at,
    }

def get_donation_statistics(db: Session) -> dict:
    by_status = dict(db.query(Donation.status, func.count(Donation.id)).group_by(Donation.status).all())
    totals = (
        db.query(Donation.currency, func.sum(Donation.amount))
        .filter(Donation.status == "completed")
        .group_by(Donation.currency)
        .all()
    )
    donors = db.query(func.count(func.distinct(Donation.user_id))).scalar() or 0
    return {
        "count": sum(by_status.values()),
        "donors": donors,
        "completed_total_by_currency": {currency: amount or 0 for currency, amount in totals},
        "by_status": by_status,
    }

def get_recent_donations(db: Session, skip: int = 0, limit: int = 10) -> Tuple[List[dict], int]:
    """Completed donations for the public feed"""
    query = db.query(Donation).filter(Donation.status == "completed")
    total = query.count()
    donations = query.order_by(Donation.completed_at.desc(), Donation.id).offset(skip).limit(limit).all()
    return [public_view(d) for d in donations], total
