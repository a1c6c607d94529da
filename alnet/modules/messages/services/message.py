from datetime import datetime
from typing import List, Optional, Tuple
import logging

from sqlalchemy import and_, case, func, or_
from sqlalchemy.orm import Session

from alnet.modules.messages.models.message import Message
from alnet.modules.profiles.services.profile import get_profiles_by_user_ids, profile_summary

logger = logging.getLogger(__name__)

def conversation_key(user_id: str, other_id: str) -> str:
    """Stable key for the conversation between two users"""
    first, second = sorted((user_id, other_id))
    return f"{first}:{second}"

def get_message(db: Session, message_id: int) -> Optional[Message]:
    """Get message by ID, ignoring deleted ones"""
    return db.query(Message).filter(Message.id == message_id, Message.is_deleted.is_(False)).first()

def _conversation_filter(user_id: str, other_id: str):
    return and_(
        or_(
            and_(Message.sender_id == user_id, Message.receiver_id == other_id),
            and_(Message.sender_id == other_id, Message.receiver_id == user_id),
        ),
        Message.is_deleted.is_(False),
    )

def send_message(db: Session, sender_id: str, receiver_id: str, content: str) -> Message:
    """Store a new message in the sent state"""
    message = Message(
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=content,
        status="sent",
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    logger.info(f"Message {message.id} sent from {sender_id} to {receiver_id}")
    return message

def get_conversation(
    db: Session,
    user_id: str,
    other_id: str,
    skip: int = 0,
    limit: int = 50,
    after_id: Optional[int] = None,
) -> Tuple[List[Message], int]:
    """
    Messages between two users in ascending creation order.

    Without after_id, pages count back from the newest message so page 1 is
    the latest window. With after_id, only newer messages are returned,
    oldest first, which is what a polling or resuming client needs.
    """
    query = db.query(Message).filter(_conversation_filter(user_id, other_id))

    if after_id is not None:
        query = query.filter(Message.id > after_id)
        total = query.count()
        messages = query.order_by(Message.created_at.asc(), Message.id.asc()).offset(skip).limit(limit).all()
        return messages, total

    total = query.count()
    messages = query.order_by(Message.created_at.desc(), Message.id.desc()).offset(skip).limit(limit).all()
    messages.reverse()
    return messages, total

def mark_delivered(db: Session, user_id: str, messages: List[Message]) -> int:
    """Advance messages addressed to user_id from sent to delivered"""
    ids = [m.id for m in messages if m.receiver_id == user_id and m.status == "sent"]
    if not ids:
        return 0
    now = datetime.utcnow()
    count = db.query(Message).filter(Message.id.in_(ids), Message.status == "sent").update(
        {"status": "delivered", "delivered_at": now, "updated_at": now},
        synchronize_session=False,
    )
    db.commit()
    return count

def mark_read(db: Session, message: Message) -> Message:
    """Mark a message read; status never moves backwards"""
    if message.status != "read":
        now = datetime.utcnow()
        message.status = "read"
        message.read_at = now
        if message.delivered_at is None:
            message.delivered_at = now
        db.commit()
        db.refresh(message)
    return message

def mark_conversation_read(db: Session, user_id: str, other_id: str) -> int:
    """Mark everything other_id sent to user_id as read"""
    now = datetime.utcnow()
    count = db.query(Message).filter(
        Message.sender_id == other_id,
        Message.receiver_id == user_id,
        Message.status != "read",
        Message.is_deleted.is_(False),
    ).update(
        {"status": "read", "read_at": now, "delivered_at": func.coalesce(Message.delivered_at, now), "updated_at": now},
        synchronize_session=False,
    )
    db.commit()
    return count

def delete_message(db: Session, message: Message) -> Message:
    """Soft delete; the message disappears from every read path"""
    message.is_deleted = True
    db.commit()
    db.refresh(message)
    logger.info(f"Message {message.id} deleted by sender")
    return message

def get_conversations(db: Session, user_id: str, skip: int = 0, limit: int = 20) -> Tuple[List[dict], int]:
    """One row per counterpart with last message and server-computed unread count"""
    partner_col = case(
        (Message.sender_id == user_id, Message.receiver_id),
        else_=Message.sender_id,
    ).label("partner_id")
    latest = (
        db.query(partner_col, func.max(Message.id).label("last_id"))
        .filter(
            or_(Message.sender_id == user_id, Message.receiver_id == user_id),
            Message.is_deleted.is_(False),
        )
        .group_by(partner_col)
        .subquery()
    )

    total = db.query(func.count()).select_from(latest).scalar() or 0
    rows = (
        db.query(Message, latest.c.partner_id)
        .join(latest, Message.id == latest.c.last_id)
        .order_by(Message.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )

    partner_ids = [partner_id for _, partner_id in rows]
    unread = {}
    if partner_ids:
        unread = dict(
            db.query(Message.sender_id, func.count(Message.id))
            .filter(
                Message.receiver_id == user_id,
                Message.sender_id.in_(partner_ids),
                Message.status != "read",
                Message.is_deleted.is_(False),
            )
            .group_by(Message.sender_id)
            .all()
        )
    profiles = get_profiles_by_user_ids(db, partner_ids)

    conversations = []
    for message, partner_id in rows:
        conversations.append({
            "partner_id": partner_id,
            "partner": profile_summary(profiles.get(partner_id), partner_id),
            "last_message": message,
            "last_message_at": message.created_at,
            "unread_count": unread.get(partner_id, 0),
        })
    return conversations, total
