"""
Audit trail for security-relevant actions.

Writes never break the request that triggered them: failures are logged and
swallowed, the same way analytics events are recorded.
"""
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple
import logging

from fastapi import Request
from sqlalchemy.orm import Session

from alnet.modules.audit.models.audit_log import AuditLog
from alnet.modules.audit.schemas.audit import AuditAction, AuditCategory

logger = logging.getLogger(__name__)

REDACTED = "[REDACTED]"
SENSITIVE_FIELDS = (
    "password",
    "token",
    "secret",
    "api_key",
    "access_token",
    "refresh_token",
    "credit_card",
)
USER_ACTIVITY_LIMIT = 100

def sanitize(data: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Copy of data with credential-like keys masked"""
    if data is None:
        return None
    cleaned = {}
    for key, value in data.items():
        normalized = key.replace("-", "_").lower()
        if any(field in normalized for field in SENSITIVE_FIELDS):
            cleaned[key] = REDACTED
        elif isinstance(value, dict):
            cleaned[key] = sanitize(value)
        else:
            cleaned[key] = value
    return cleaned

def record_audit(
    db: Session,
    action: AuditAction,
    category: AuditCategory,
    resource: str,
    *,
    user_id: Optional[str] = None,
    user_email: Optional[str] = None,
    resource_id: Optional[str] = None,
    description: Optional[str] = None,
    old_value: Optional[Dict[str, Any]] = None,
    new_value: Optional[Dict[str, Any]] = None,
    metadata: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
    is_sensitive: bool = False,
) -> Optional[AuditLog]:
    """
    Store an audit entry.

    Args:
        db: Database session
        action: What happened
        category: Area the action belongs to
        resource: Kind of record acted on, e.g. "User"
        request: Incoming request, used for client address, user agent and route

    Returns:
        AuditLog: The stored entry, or None when it could not be written
    """
    try:
        entry = AuditLog(
            user_id=user_id,
            user_email=user_email,
            action=action.value,
            category=category.value,
            resource=resource,
            resource_id=resource_id,
            description=description,
            old_value=sanitize(old_value),
            new_value=sanitize(new_value),
            audit_metadata=sanitize(metadata),
            is_sensitive=is_sensitive,
        )
        if request is not None:
            entry.ip_address = request.client.host if request.client else None
            entry.user_agent = (request.headers.get("user-agent") or "")[:512] or None
            entry.request_path = request.url.path[:255]
            entry.request_method = request.method
        db.add(entry)
        db.commit()
        logger.info(f"Audit {action.value} on {resource}")
        return entry
    except Exception as e:
        db.rollback()
        logger.error(f"Error writing audit log {action.value}: {str(e)}")
        return None

def audit_to_dict(entry: AuditLog) -> dict:
    return {
        "id": entry.id,
        "user_id": entry.user_id,
        "user_email": entry.user_email,
        "action": entry.action,
        "category": entry.category,
        "resource": entry.resource,
        "resource_id": entry.resource_id,
        "description": entry.description,
        "old_value": entry.old_value,
        "new_value": entry.new_value,
        "metadata": entry.audit_metadata,
        "ip_address": entry.ip_address,
        "user_agent": entry.user_agent,
        "request_path": entry.request_path,
        "request_method": entry.request_method,
        "is_sensitive": entry.is_sensitive,
        "created_at": entry.created_at,
    }

def _newest_first(query):
    return query.order_by(AuditLog.created_at.desc(), AuditLog.id)

def query_audit_logs(
    db: Session,
    skip: int = 0,
    limit: int = 50,
    user_id: Optional[str] = None,
    action: Optional[str] = None,
    category: Optional[str] = None,
    resource: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Tuple[List[dict], int]:
    """Filtered audit entries, newest first"""
    query = db.query(AuditLog)
    if user_id:
        query = query.filter(AuditLog.user_id == user_id)
    if action:
        query = query.filter(AuditLog.action == action)
    if category:
        query = query.filter(AuditLog.category == category)
    if resource:
        query = query.filter(AuditLog.resource == resource)
    if start_date:
        query = query.filter(AuditLog.created_at >= start_date)
    if end_date:
        query = query.filter(AuditLog.created_at <= end_date)
    total = query.count()
    entries = _newest_first(query).offset(skip).limit(limit).all()
    return [audit_to_dict(e) for e in entries], total

def get_user_activity(db: Session, user_id: str, days: int = 30) -> List[dict]:
    """A user's most recent entries within the last `days` days"""
    since = datetime.utcnow() - timedelta(days=days)
    entries = (
        _newest_first(db.query(AuditLog).filter(AuditLog.user_id == user_id, AuditLog.created_at > since))
        .limit(USER_ACTIVITY_LIMIT)
        .all()
    )
    return [audit_to_dict(e) for e in entries]

def get_security_events(db: Session, hours: int = 24) -> List[dict]:
    since = datetime.utcnow() - timedelta(hours=hours)
    entries = _newest_first(
        db.query(AuditLog).filter(AuditLog.category == AuditCategory.SECURITY.value, AuditLog.created_at > since)
    ).all()
    return [audit_to_dict(e) for e in entries]

def get_failed_logins(db: Session, hours: int = 1) -> List[dict]:
    since = datetime.utcnow() - timedelta(hours=hours)
    entries = _newest_first(
        db.query(AuditLog).filter(AuditLog.action == AuditAction.FAILED_LOGIN.value, AuditLog.created_at > since)
    ).all()
    return [audit_to_dict(e) for e in entries]

def purge_audit_logs(db: Session, retention_days: int) -> int:
    """Delete non-sensitive entries older than the retention window; sensitive ones are kept"""
    cutoff = datetime.utcnow() - timedelta(days=retention_days)
    removed = (
        db.query(AuditLog)
        .filter(AuditLog.created_at < cutoff, AuditLog.is_sensitive.is_(False))
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info(f"Audit log cleanup removed {removed} entries")
    return removed
