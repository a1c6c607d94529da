from typing import Any, Dict, Optional
import logging

from fastapi import Request
from sqlalchemy.orm import Session

from alnet.modules.analytics.models.analytics_event import AnalyticsEvent

logger = logging.getLogger(__name__)

def log_event(
    db: Session,
    event_type: str,
    user_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> bool:
    """
    Record an analytics event.

    Args:
        db: Database session
        event_type: Event name such as "login" or "message_sent"
        user_id: ID of the user the event belongs to
        metadata: Free-form JSON details
        request: Incoming request, used for IP address and user agent

    Returns:
        bool: True if the event was stored, False otherwise
    """
    try:
        event = AnalyticsEvent(
            event_type=event_type,
            user_id=user_id,
            event_metadata=metadata or {},
        )
        if request is not None:
            event.ip_address = request.client.host if request.client else None
            event.user_agent = (request.headers.get("user-agent") or "")[:512] or None
        db.add(event)
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error logging analytics event {event_type}: {str(e)}")
        return False
