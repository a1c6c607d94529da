from datetime import datetime
from typing import List, Optional, Tuple
import logging

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from alnet.modules.connections.models.connection import Connection, OCCUPYING_STATUSES
from alnet.modules.profiles.services.profile import get_profiles_by_user_ids, profile_summary

logger = logging.getLogger(__name__)

def get_connection(db: Session, connection_id: str) -> Optional[Connection]:
    """Get connection by ID"""
    return db.query(Connection).filter(Connection.id == connection_id).first()

def pair_filter(user_id: str, other_id: str):
    """Filter for records between two users in either direction"""
    return or_(
        and_(Connection.requester_id == user_id, Connection.receiver_id == other_id),
        and_(Connection.requester_id == other_id, Connection.receiver_id == user_id),
    )

def get_occupying_connection(db: Session, user_id: str, other_id: str) -> Optional[Connection]:
    """The pending, accepted or blocked record between two users, if any"""
    return db.query(Connection).filter(
        pair_filter(user_id, other_id),
        Connection.status.in_(OCCUPYING_STATUSES),
    ).first()

def get_latest_connection(db: Session, user_id: str, other_id: str) -> Optional[Connection]:
    return db.query(Connection).filter(pair_filter(user_id, other_id)).order_by(
        Connection.created_at.desc()
    ).first()

def are_connected(db: Session, user_id: str, other_id: str) -> bool:
    connection = get_occupying_connection(db, user_id, other_id)
    return connection is not None and connection.status == "accepted"

def is_blocked(db: Session, user_id: str, other_id: str) -> bool:
    connection = get_occupying_connection(db, user_id, other_id)
    return connection is not None and connection.status == "blocked"

def create_connection(db: Session, requester_id: str, receiver_id: str, message: Optional[str] = None) -> Connection:
    """Create a pending request; the pair key makes a second live record fail on commit"""
    connection = Connection(
        requester_id=requester_id,
        receiver_id=receiver_id,
        message=message.strip() if message and message.strip() else None,
    )
    connection.set_status("pending")
    db.add(connection)
    db.commit()
    db.refresh(connection)
    logger.info(f"Connection {connection.id} requested by {requester_id} to {receiver_id}")
    return connection

def respond_to_connection(db: Session, connection: Connection, accepted: bool) -> Connection:
    """Accept or reject a pending request"""
    connection.set_status("accepted" if accepted else "rejected")
    connection.responded_at = datetime.utcnow()
    db.commit()
    db.refresh(connection)
    logger.info(f"Connection {connection.id} {connection.status}")
    return connection

def remove_connection(db: Session, connection: Connection) -> Connection:
    """Removal is a transition to rejected, records are never hard-deleted"""
    connection.set_status("rejected")
    db.commit()
    db.refresh(connection)
    logger.info(f"Connection {connection.id} removed")
    return connection

def block_user(db: Session, blocker_id: str, blocked_id: str) -> Connection:
    """Turn the pair's record into a block owned by the blocker, creating one if needed"""
    connection = get_occupying_connection(db, blocker_id, blocked_id)
    if connection is None:
        connection = Connection(requester_id=blocker_id, receiver_id=blocked_id)
        db.add(connection)
    else:
        connection.requester_id = blocker_id
        connection.receiver_id = blocked_id
        connection.responded_at = datetime.utcnow()
    connection.set_status("blocked")
    db.commit()
    db.refresh(connection)
    logger.info(f"User {blocker_id} blocked {blocked_id}")
    return connection

def _with_partner_profiles(db: Session, connections: List[Connection], user_id: str) -> List[dict]:
    partner_ids = [
        c.receiver_id if c.requester_id == user_id else c.requester_id
        for c in connections
    ]
    profiles = get_profiles_by_user_ids(db, partner_ids)
    return [
        {"connection": connection, "profile": profile_summary(profiles.get(partner_id), partner_id)}
        for connection, partner_id in zip(connections, partner_ids)
    ]

def get_connections(db: Session, user_id: str, skip: int = 0, limit: int = 20) -> Tuple[List[dict], int]:
    """Accepted connections in either direction, newest first"""
    query = db.query(Connection).filter(
        or_(Connection.requester_id == user_id, Connection.receiver_id == user_id),
        Connection.status == "accepted",
    )
    total = query.count()
    connections = query.order_by(Connection.created_at.desc(), Connection.id).offset(skip).limit(limit).all()
    return _with_partner_profiles(db, connections, user_id), total

def get_pending_requests(db: Session, user_id: str, skip: int = 0, limit: int = 20) -> Tuple[List[dict], int]:
    """Pending requests the user has received"""
    query = db.query(Connection).filter(
        Connection.receiver_id == user_id,
        Connection.status == "pending",
    )
    total = query.count()
    connections = query.order_by(Connection.created_at.desc(), Connection.id).offset(skip).limit(limit).all()
    return _with_partner_profiles(db, connections, user_id), total

def get_sent_requests(db: Session, user_id: str, skip: int = 0, limit: int = 20) -> Tuple[List[dict], int]:
    """Pending requests the user has sent"""
    query = db.query(Connection).filter(
        Connection.requester_id == user_id,
        Connection.status == "pending",
    )
    total = query.count()
    connections = query.order_by(Connection.created_at.desc(), Connection.id).offset(skip).limit(limit).all()
    return _with_partner_profiles(db, connections, user_id), total

def relationship_status(db: Session, user_id: str, other_id: str) -> dict:
    if user_id == other_id:
        return {"status": "self", "initiator": None, "connection_id": None}
    connection = get_occupying_connection(db, user_id, other_id) or get_latest_connection(db, user_id, other_id)
    if connection is None:
        return {"status": "none", "initiator": None, "connection_id": None}
    return {
        "status": connection.status,
        "initiator": "self" if connection.requester_id == user_id else "other",
        "connection_id": connection.id,
    }
