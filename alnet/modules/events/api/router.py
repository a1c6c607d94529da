from typing import Any, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from alnet.db.session import get_db
from alnet.deps import ensure_owner_or_admin, get_current_admin, get_current_user, get_page_params, PageParams
from alnet.modules.analytics.services.events import log_event
from alnet.modules.events.models.event import Event
from alnet.modules.events.schemas.event import (
    EventCreate,
    EventOut,
    EventStatistics,
    EventStatus,
    EventUpdate,
    RsvpCreate,
    RsvpOut,
    RsvpStatus,
)
from alnet.modules.events.services.event import (
    cancel_rsvp,
    create_event,
    delete_event,
    get_event,
    get_event_attendees,
    get_event_statistics,
    get_events,
    get_rsvp,
    get_user_events,
    get_user_rsvps,
    is_full,
    is_open_for_rsvp,
    set_rsvp,
    update_event,
)
from alnet.modules.notifications.services.notification_events import create_event_rsvp_notification
from alnet.modules.user_management.models.user import User
from alnet.schemas.response import ApiResponse, Page, StatusMessage, paginate, success_response

router = APIRouter()
logger = logging.getLogger("alnet")

ORGANIZER_ROLES = ("alumni", "admin")

def _get_event_or_404(db: Session, event_id: str) -> Event:
    event = get_event(db, event_id)
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found",
        )
    return event

@router.post("", response_model=ApiResponse[EventOut], status_code=status.HTTP_201_CREATED)
def create_new_event(
    *,
    db: Session = Depends(get_db),
    request: Request,
    event_in: EventCreate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Create an event; alumni and admins only"""
    if current_user.role not in ORGANIZER_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only alumni can create events",
        )
    event = create_event(db, event_in, current_user.id)
    log_event(db, "event_created", user_id=current_user.id, metadata={"event_id": event.id}, request=request)
    return success_response(event)

@router.get("", response_model=ApiResponse[Page[EventOut]])
def list_events(
    *,
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    keyword: Optional[str] = None,
    event_status: Optional[EventStatus] = Query(None, alias="status"),
    event_type: Optional[str] = Query(None, alias="eventType"),
    tag: Optional[str] = None,
    upcoming: bool = False,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Browse events, soonest first"""
    events, total = get_events(
        db,
        skip=page_params.offset,
        limit=page_params.limit,
        keyword=keyword,
        status=event_status.value if event_status else None,
        event_type=event_type,
        tag=tag,
        upcoming_only=upcoming,
    )
    return success_response(paginate(events, total, page_params.page, page_params.limit))

@router.get("/my-events", response_model=ApiResponse[Page[EventOut]])
def read_my_events(
    *,
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_user),
) -> Any:
    events, total = get_user_events(db, current_user.id, page_params.offset, page_params.limit)
    return success_response(paginate(events, total, page_params.page, page_params.limit))

@router.get("/my-rsvps", response_model=ApiResponse[Page[EventOut]])
def read_my_rsvps(
    *,
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Events the caller is going to or interested in"""
    events, total = get_user_rsvps(db, current_user.id, page_params.offset, page_params.limit)
    return success_response(paginate(events, total, page_params.page, page_params.limit))

@router.get("/statistics", response_model=ApiResponse[EventStatistics])
def read_event_statistics(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> Any:
    return success_response(get_event_statistics(db))

@router.get("/{event_id}", response_model=ApiResponse[EventOut])
def read_event(
    *,
    db: Session = Depends(get_db),
    event_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    return success_response(_get_event_or_404(db, event_id))

@router.put("/{event_id}", response_model=ApiResponse[EventOut])
def update_existing_event(
    *,
    db: Session = Depends(get_db),
    event_id: str,
    event_in: EventUpdate,
    current_user: User = Depends(get_current_user),
) -> Any:
    event = _get_event_or_404(db, event_id)
    ensure_owner_or_admin(event.created_by, current_user)
    return success_response(update_event(db, event, event_in))

@router.delete("/{event_id}", response_model=ApiResponse[StatusMessage])
def delete_existing_event(
    *,
    db: Session = Depends(get_db),
    event_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    event = _get_event_or_404(db, event_id)
    ensure_owner_or_admin(event.created_by, current_user)
    delete_event(db, event)
    logger.info(f"Event {event_id} deleted by {current_user.id}")
    return success_response({"message": "Event deleted successfully"})

@router.post("/{event_id}/rsvp", response_model=ApiResponse[RsvpOut], status_code=status.HTTP_201_CREATED)
def rsvp_to_event(
    *,
    db: Session = Depends(get_db),
    request: Request,
    event_id: str,
    rsvp_in: Optional[RsvpCreate] = None,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Register for an event or change an existing RSVP; going by default"""
    event = _get_event_or_404(db, event_id)
    if not is_open_for_rsvp(event):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot RSVP to a {event.status} event",
        )

    new_status = (rsvp_in.status if rsvp_in else RsvpStatus.GOING).value
    existing = get_rsvp(db, event.id, current_user.id)
    already_going = existing is not None and existing.status == RsvpStatus.GOING.value
    if new_status == RsvpStatus.GOING.value and not already_going and is_full(event):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Event is full",
        )

    try:
        rsvp = set_rsvp(db, event, current_user.id, new_status)
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="RSVP already being recorded",
        )

    if new_status == RsvpStatus.GOING.value and not already_going:
        create_event_rsvp_notification(db, event.id, event.title, current_user.id, event.created_by)
    log_event(db, "event_rsvp", user_id=current_user.id, metadata={"event_id": event.id, "status": new_status}, request=request)
    return success_response(rsvp)

@router.delete("/{event_id}/rsvp", response_model=ApiResponse[StatusMessage])
def cancel_event_rsvp(
    *,
    db: Session = Depends(get_db),
    event_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    event = _get_event_or_404(db, event_id)
    rsvp = get_rsvp(db, event.id, current_user.id)
    if not rsvp:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="RSVP not found",
        )
    cancel_rsvp(db, event, rsvp)
    return success_response({"message": "RSVP cancelled successfully"})

@router.get("/{event_id}/attendees", response_model=ApiResponse[Page[RsvpOut]])
def read_event_attendees(
    *,
    db: Session = Depends(get_db),
    event_id: str,
    rsvp_status: Optional[RsvpStatus] = Query(None, alias="status"),
    page_params: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_user),
) -> Any:
    """RSVPs for an event; visible to its organizer and admins"""
    event = _get_event_or_404(db, event_id)
    ensure_owner_or_admin(event.created_by, current_user)
    items, total = get_event_attendees(
        db, event.id, page_params.offset, page_params.limit,
        status=rsvp_status.value if rsvp_status else None,
    )
    return success_response(paginate(items, total, page_params.page, page_params.limit))
