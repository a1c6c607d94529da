"""
Aggregate statistics over users, profiles, connections and messages.

All figures are computed from the live tables on request; nothing is cached.
Rates are percentages rounded to two places and are 0 when the denominator is 0.
"""
import csv
import io
import json
import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Tuple

from sqlalchemy import and_, case, func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from alnet.modules.analytics.models.analytics_event import AnalyticsEvent
from alnet.modules.analytics.schemas.analytics import AnalyticsEventOut
from alnet.modules.connections.models.connection import Connection
from alnet.modules.donations.models.donation import Donation
from alnet.modules.jobs.models.job import Job
from alnet.modules.messages.models.message import Message
from alnet.modules.profiles.models.profile import Profile
from alnet.modules.startups.models.startup import Startup
from alnet.modules.user_management.models.user import User

logger = logging.getLogger(__name__)

STARTED_AT = datetime.utcnow()
DEFAULT_RANGE_DAYS = 30
EXPORT_MAX_ROWS = 10000
EXPORT_COLUMNS = ["ID", "Event Type", "User ID", "Created At", "Metadata"]

def percentage(part: float, whole: float) -> float:
    if not whole:
        return 0.0
    return round(part / whole * 100, 2)

def resolve_range(start_date: Optional[datetime], end_date: Optional[datetime]) -> Tuple[datetime, datetime]:
    """Fill in a missing bound; the default window is the last 30 days"""
    end = end_date or datetime.utcnow()
    start = start_date or end - timedelta(days=DEFAULT_RANGE_DAYS)
    return start, end

def _in_range(column, start: Optional[datetime], end: Optional[datetime]):
    clauses = []
    if start is not None:
        clauses.append(column >= start)
    if end is not None:
        clauses.append(column <= end)
    return and_(*clauses) if clauses else None

def _count(db: Session, column, *criteria) -> int:
    query = db.query(func.count(column))
    for criterion in criteria:
        if criterion is not None:
            query = query.filter(criterion)
    return query.scalar() or 0

def _as_date(value) -> date:
    # SQLite returns DATE() as text
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])

def get_user_statistics(db: Session, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None) -> dict:
    by_role = dict(db.query(User.role, func.count(User.id)).group_by(User.role).all())
    by_status = dict(db.query(User.status, func.count(User.id)).group_by(User.status).all())
    total = sum(by_role.values())
    active = by_status.get("active", 0)
    last_month_start = datetime.utcnow() - timedelta(days=30)

    return {
        "total_users": total,
        "by_role": {
            "students": by_role.get("student", 0),
            "alumni": by_role.get("alumni", 0),
            "admins": by_role.get("admin", 0),
        },
        "by_status": {
            "active": active,
            "inactive": by_status.get("inactive", 0),
            "suspended": by_status.get("suspended", 0),
        },
        "new_users_in_range": _count(db, User.id, _in_range(User.created_at, start_date, end_date)),
        "last_month_new_users": _count(db, User.id, User.created_at > last_month_start),
        "retention_rate": percentage(active, total),
    }

def get_messages_by_day(db: Session, start: datetime, end: datetime) -> List[dict]:
    """Message counts per day, one entry for every day in the range"""
    day = func.date(Message.created_at)
    rows = (
        db.query(day, func.count(Message.id))
        .filter(Message.created_at >= start, Message.created_at <= end)
        .group_by(day)
        .all()
    )
    counts: Dict[date, int] = {_as_date(d): c for d, c in rows}

    first = start.date()
    series = []
    for offset in range((end.date() - first).days + 1):
        current = first + timedelta(days=offset)
        series.append({"date": current, "count": counts.get(current, 0)})
    return series

def get_engagement_metrics(db: Session, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None) -> dict:
    start, end = resolve_range(start_date, end_date)
    created = _in_range(Connection.created_at, start, end)
    by_status = dict(
        db.query(Connection.status, func.count(Connection.id)).filter(created).group_by(Connection.status).all()
    )
    accepted = by_status.get("accepted", 0)
    pending = by_status.get("pending", 0)
    rejected = by_status.get("rejected", 0)

    active_users = (
        db.query(func.count(func.distinct(AnalyticsEvent.user_id)))
        .filter(AnalyticsEvent.event_type == "login", _in_range(AnalyticsEvent.created_at, start, end))
        .scalar()
    ) or 0

    return {
        "start_date": start,
        "end_date": end,
        "total_messages": _count(db, Message.id, _in_range(Message.created_at, start, end)),
        "accepted_connections": accepted,
        "pending_connections": pending,
        "rejected_connections": rejected,
        "acceptance_rate": percentage(accepted, accepted + rejected + pending),
        "messages_by_day": get_messages_by_day(db, start, end),
        "unique_active_users": active_users,
    }

def check_database(db: Session) -> str:
    try:
        db.execute(text("SELECT 1"))
        return "ok"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {str(e)}")
        db.rollback()
        return "unavailable"

def get_platform_health(db: Session) -> dict:
    database = check_database(db)
    now = datetime.utcnow()
    totals = {
        "users": 0, "profiles": 0, "connections": 0, "messages": 0,
        "jobs": 0, "startups": 0, "donations": 0,
    }
    recent_errors = 0
    if database == "ok":
        totals = {
            "users": _count(db, User.id),
            "profiles": _count(db, Profile.id),
            "connections": _count(db, Connection.id),
            "messages": _count(db, Message.id),
            "jobs": _count(db, Job.id),
            "startups": _count(db, Startup.id),
            "donations": _count(db, Donation.id),
        }
        recent_errors = _count(
            db, AnalyticsEvent.id,
            AnalyticsEvent.event_type == "error",
            AnalyticsEvent.created_at > now - timedelta(minutes=5),
        )

    if database != "ok":
        health = "unhealthy"
    elif recent_errors:
        health = "warning"
    else:
        health = "healthy"

    return {
        "status": health,
        "database": database,
        "uptime_seconds": round((now - STARTED_AT).total_seconds(), 3),
        "started_at": STARTED_AT,
        "recent_errors": recent_errors,
        "totals": totals,
    }

def get_connection_statistics(db: Session) -> dict:
    by_status = dict(db.query(Connection.status, func.count(Connection.id)).group_by(Connection.status).all())
    accepted = by_status.get("accepted", 0)
    pending = by_status.get("pending", 0)
    rejected = by_status.get("rejected", 0)
    return {
        "total_connections": accepted,
        "pending_requests": pending,
        "rejected_connections": rejected,
        "blocked_connections": by_status.get("blocked", 0),
        "acceptance_rate": percentage(accepted, accepted + rejected + pending),
    }

def _filled(column):
    return case((and_(column.isnot(None), column != ""), 1), else_=0)

def get_profile_completeness(db: Session) -> dict:
    """Average share of bio, photo, skills, company and location that profiles fill in"""
    filled = (
        _filled(Profile.bio)
        + _filled(Profile.profile_photo_url)
        + _filled(Profile.skills)
        + _filled(Profile.current_company)
        + _filled(Profile.location)
    )
    score = func.avg(filled)

    overall = db.query(score).scalar()
    by_role = (
        db.query(User.role, score)
        .join(User, User.id == Profile.user_id)
        .group_by(User.role)
        .all()
    )
    return {
        "average_completeness": percentage(float(overall or 0), 5),
        "by_role": {role: percentage(float(avg or 0), 5) for role, avg in by_role},
    }

def get_dashboard_summary(db: Session, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None) -> dict:
    return {
        "users": get_user_statistics(db, start_date, end_date),
        "engagement": get_engagement_metrics(db, start_date, end_date),
        "platform": get_platform_health(db),
        "connections": get_connection_statistics(db),
        "profiles": get_profile_completeness(db),
    }

def _event_query(
    db: Session,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    event_type: Optional[str] = None,
    user_id: Optional[str] = None,
):
    query = db.query(AnalyticsEvent)
    created = _in_range(AnalyticsEvent.created_at, start_date, end_date)
    if created is not None:
        query = query.filter(created)
    if event_type:
        query = query.filter(AnalyticsEvent.event_type == event_type)
    if user_id:
        query = query.filter(AnalyticsEvent.user_id == user_id)
    return query.order_by(AnalyticsEvent.created_at.desc(), AnalyticsEvent.id)

def event_to_dict(event: AnalyticsEvent) -> dict:
    return {
        "id": event.id,
        "event_type": event.event_type,
        "user_id": event.user_id,
        "metadata": event.event_metadata,
        "ip_address": event.ip_address,
        "user_agent": event.user_agent,
        "created_at": event.created_at,
    }

def get_analytics_report(db: Session, skip: int = 0, limit: int = 100, **filters) -> Tuple[List[dict], int]:
    """Filtered events, newest first"""
    query = _event_query(db, **filters)
    total = query.count()
    return [event_to_dict(e) for e in query.offset(skip).limit(limit).all()], total

def export_events_csv(db: Session, **filters) -> str:
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL)
    writer.writerow(EXPORT_COLUMNS)
    for event in _event_query(db, **filters).limit(EXPORT_MAX_ROWS):
        writer.writerow([
            event.id,
            event.event_type,
            event.user_id or "",
            event.created_at.isoformat() if event.created_at else "",
            json.dumps(event.event_metadata or {}),
        ])
    return output.getvalue()

def export_events_json(db: Session, **filters) -> str:
    events = [
        AnalyticsEventOut(**event_to_dict(e)).model_dump(by_alias=True, mode="json")
        for e in _event_query(db, **filters).limit(EXPORT_MAX_ROWS)
    ]
    return json.dumps(events)
