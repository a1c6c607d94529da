from datetime import datetime
from typing import List, Optional, Tuple
import logging

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from alnet.db.filters import icontains
from alnet.modules.events.models.event import Event, EventRsvp
from alnet.modules.events.schemas.event import EventCreate, EventUpdate
from alnet.modules.profiles.services.profile import get_profiles_by_user_ids, profile_summary

logger = logging.getLogger(__name__)

OPEN_STATUSES = ("upcoming", "ongoing")
REQUIRED_FIELDS = ("title", "description", "event_date", "capacity", "status")

def get_event(db: Session, event_id: str) -> Optional[Event]:
    return db.query(Event).filter(Event.id == event_id).first()

def create_event(db: Session, event_in: EventCreate, user_id: str) -> Event:
    """Create an upcoming event"""
    data = event_in.model_dump()
    data["tags"] = data.get("tags") or []
    event = Event(**data, status="upcoming", registered_count=0, created_by=user_id)
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info(f"Event {event.id} created by {user_id}")
    return event

def get_events(
    db: Session,
    skip: int = 0,
    limit: int = 10,
    keyword: Optional[str] = None,
    status: Optional[str] = None,
    event_type: Optional[str] = None,
    tag: Optional[str] = None,
    upcoming_only: bool = False,
) -> Tuple[List[Event], int]:
    """Filter events, soonest first; cancelled ones only when asked for by status"""
    query = db.query(Event)
    if status:
        query = query.filter(Event.status == status)
    else:
        query = query.filter(Event.status != "cancelled")
    if keyword:
        query = query.filter(or_(
            icontains(Event.title, keyword),
            icontains(Event.description, keyword),
            icontains(Event.location, keyword),
        ))
    if event_type:
        query = query.filter(func.lower(Event.event_type) == event_type.strip().lower())
    if tag:
        query = query.filter(icontains(Event.tags, tag))
    if upcoming_only:
        query = query.filter(Event.event_date >= datetime.utcnow())

    total = query.count()
    events = query.order_by(Event.event_date.asc(), Event.id).offset(skip).limit(limit).all()
    return events, total

def get_user_events(db: Session, user_id: str, skip: int = 0, limit: int = 10) -> Tuple[List[Event], int]:
    """Events organized by a user, any status"""
    query = db.query(Event).filter(Event.created_by == user_id)
    total = query.count()
    return query.order_by(Event.event_date.asc(), Event.id).offset(skip).limit(limit).all(), total

def update_event(db: Session, event: Event, event_in: EventUpdate) -> Event:
    """Update the fields present in the request"""
    update_data = event_in.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        if field == "status":
            value = value.value
        if field == "tags" and value is None:
            value = []
        setattr(event, field, value)
    db.commit()
    db.refresh(event)
    return event

def delete_event(db: Session, event: Event) -> None:
    """Delete an event and its RSVPs"""
    db.query(EventRsvp).filter(EventRsvp.event_id == event.id).delete(synchronize_session=False)
    db.delete(event)
    db.commit()

def is_open_for_rsvp(event: Event) -> bool:
    return event.status in OPEN_STATUSES

def is_full(event: Event) -> bool:
    return bool(event.capacity) and event.registered_count >= event.capacity

def get_rsvp(db: Session, event_id: str, user_id: str) -> Optional[EventRsvp]:
    return db.query(EventRsvp).filter(EventRsvp.event_id == event_id, EventRsvp.user_id == user_id).first()

def _recount(db: Session, event_id: str) -> None:
    going = (
        db.query(func.count(EventRsvp.id))
        .filter(EventRsvp.event_id == event_id, EventRsvp.status == "going")
        .scalar()
    ) or 0
    db.query(Event).filter(Event.id == event_id).update({"registered_count": going}, synchronize_session=False)

def set_rsvp(db: Session, event: Event, user_id: str, status: str) -> EventRsvp:
    """Create or change the caller's RSVP and refresh the event's going count in one commit"""
    rsvp = get_rsvp(db, event.id, user_id)
    if rsvp is None:
        rsvp = EventRsvp(event_id=event.id, user_id=user_id, status=status)
        db.add(rsvp)
    else:
        rsvp.status = status
    db.flush()
    _recount(db, event.id)
    db.commit()
    db.refresh(rsvp)
    db.refresh(event)
    return rsvp

def cancel_rsvp(db: Session, event: Event, rsvp: EventRsvp) -> None:
    db.delete(rsvp)
    db.flush()
    _recount(db, event.id)
    db.commit()
    db.refresh(event)

def _rsvp_to_dict(rsvp: EventRsvp, profiles: dict) -> dict:
    return {
        "id": rsvp.id,
        "event_id": rsvp.event_id,
        "user_id": rsvp.user_id,
        "status": rsvp.status,
        "created_at": rsvp.created_at,
        "updated_at": rsvp.updated_at,
        "attendee": profile_summary(profiles.get(rsvp.user_id), rsvp.user_id),
    }

def get_event_attendees(
    db: Session,
    event_id: str,
    skip: int = 0,
    limit: int = 20,
    status: Optional[str] = None,
) -> Tuple[List[dict], int]:
    """RSVPs for an event with attendee profiles, oldest first"""
    query = db.query(EventRsvp).filter(EventRsvp.event_id == event_id)
    if status:
        query = query.filter(EventRsvp.status == status)
    total = query.count()
    rsvps = query.order_by(EventRsvp.created_at.asc(), EventRsvp.id).offset(skip).limit(limit).all()
    profiles = get_profiles_by_user_ids(db, [r.user_id for r in rsvps])
    return [_rsvp_to_dict(r, profiles) for r in rsvps], total

def get_user_rsvps(db: Session, user_id: str, skip: int = 0, limit: int = 20) -> Tuple[List[Event], int]:
    """Events the user is going to or interested in, soonest first"""
    query = (
        db.query(Event)
        .join(EventRsvp, EventRsvp.event_id == Event.id)
        .filter(EventRsvp.user_id == user_id, EventRsvp.status != "not_going")
    )
    total = query.count()
    return query.order_by(Event.event_date.asc(), Event.id).offset(skip).limit(limit).all(), total

def get_event_statistics(db: Session) -> dict:
    by_status = dict(db.query(Event.status, func.count(Event.id)).group_by(Event.status).all())
    rsvps = dict(db.query(EventRsvp.status, func.count(EventRsvp.id)).group_by(EventRsvp.status).all())
    return {
        "total": sum(by_status.values()),
        "by_status": by_status,
        "total_rsvps": sum(rsvps.values()),
        "going": rsvps.get("going", 0),
    }
