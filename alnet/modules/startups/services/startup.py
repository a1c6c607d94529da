from typing import List, Optional, Tuple
import logging

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from alnet.db.filters import icontains
from alnet.modules.startups.models.startup import Startup
from alnet.modules.startups.schemas.startup import StartupCreate, StartupUpdate

logger = logging.getLogger(__name__)

ENUM_FIELDS = ("stage", "funding_stage", "status")
REQUIRED_FIELDS = ("name", "description", "stage", "funding_stage", "status")

def get_startup(db: Session, startup_id: str) -> Optional[Startup]:
    return db.query(Startup).filter(Startup.id == startup_id).first()

def get_startup_by_founder(db: Session, founder_id: str) -> Optional[Startup]:
    return db.query(Startup).filter(Startup.founder_id == founder_id).first()

def create_startup(db: Session, startup_in: StartupCreate, founder_id: str) -> Startup:
    """Submit a startup for review"""
    data = startup_in.model_dump()
    data["stage"] = startup_in.stage.value
    data["funding_stage"] = startup_in.funding_stage.value
    data["contact_email"] = str(startup_in.contact_email) if startup_in.contact_email else None
    data["team_members"] = data.get("team_members") or []
    data["technologies"] = data.get("technologies") or []
    startup = Startup(**data, status="pending", founder_id=founder_id)
    db.add(startup)
    db.commit()
    db.refresh(startup)
    logger.info(f"Startup {startup.id} submitted by {founder_id}")
    return startup

def get_startups(
    db: Session,
    skip: int = 0,
    limit: int = 10,
    keyword: Optional[str] = None,
    stage: Optional[str] = None,
    funding_stage: Optional[str] = None,
    industry: Optional[str] = None,
    location: Optional[str] = None,
    technology: Optional[str] = None,
    status: Optional[str] = None,
) -> Tuple[List[Startup], int]:
    """Filter startups; approved ones only unless a status is given"""
    query = db.query(Startup).filter(Startup.status == (status or "approved"))
    if keyword:
        query = query.filter(or_(
            icontains(Startup.name, keyword),
            icontains(Startup.description, keyword),
            icontains(Startup.tagline, keyword),
        ))
    if stage:
        query = query.filter(Startup.stage == stage)
    if funding_stage:
        query = query.filter(Startup.funding_stage == funding_stage)
    if industry:
        query = query.filter(icontains(Startup.industry, industry))
    if location:
        query = query.filter(icontains(Startup.location, location))
    if technology:
        query = query.filter(icontains(Startup.technologies, technology))

    total = query.count()
    startups = query.order_by(Startup.created_at.desc(), Startup.id).offset(skip).limit(limit).all()
    return startups, total

def update_startup(db: Session, startup: Startup, startup_in: StartupUpdate) -> Startup:
    update_data = startup_in.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        if field in ENUM_FIELDS:
            value = value.value
        elif field in ("team_members", "technologies") and value is None:
            value = []
        elif field == "contact_email" and value is not None:
            value = str(value)
        setattr(startup, field, value)
    db.commit()
    db.refresh(startup)
    return startup

def review_startup(db: Session, startup: Startup, status: str, note: Optional[str] = None) -> Startup:
    """Approve or reject a startup"""
    startup.status = status
    startup.review_note = note
    db.commit()
    db.refresh(startup)
    logger.info(f"Startup {startup.id} {status}")
    return startup

def delete_startup(db: Session, startup: Startup) -> None:
    db.delete(startup)
    db.commit()

def get_startup_statistics(db: Session) -> dict:
    by_status = dict(db.query(Startup.status, func.count(Startup.id)).group_by(Startup.status).all())
    by_stage = dict(db.query(Startup.stage, func.count(Startup.id)).group_by(Startup.stage).all())
    by_funding = dict(db.query(Startup.funding_stage, func.count(Startup.id)).group_by(Startup.funding_stage).all())
    return {
        "total": sum(by_status.values()),
        "pending": by_status.get("pending", 0),
        "approved": by_status.get("approved", 0),
        "rejected": by_status.get("rejected", 0),
        "by_stage": by_stage,
        "by_funding_stage": by_funding,
    }
