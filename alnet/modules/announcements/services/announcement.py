from datetime import datetime
from typing import List, Optional, Tuple
import logging

from sqlalchemy.orm import Session

from alnet.modules.announcements.models.announcement import Announcement
from alnet.modules.announcements.schemas.announcement import AnnouncementCreate

logger = logging.getLogger(__name__)

# audiences each role may read
AUDIENCES_BY_ROLE = {
    "student": ("all", "students"),
    "alumni": ("all", "alumni"),
}

def get_announcement(db: Session, announcement_id: str) -> Optional[Announcement]:
    return db.query(Announcement).filter(Announcement.id == announcement_id).first()

def publish_announcement(db: Session, announcement_in: AnnouncementCreate, user_id: str) -> Announcement:
    announcement = Announcement(
        title=announcement_in.title,
        content=announcement_in.content,
        target_audience=announcement_in.target_audience.value,
        status="published",
        published_at=datetime.utcnow(),
        created_by=user_id,
    )
    db.add(announcement)
    db.commit()
    db.refresh(announcement)
    logger.info(f"Announcement {announcement.id} published by {user_id}")
    return announcement

def get_announcements_for_role(db: Session, role: str, skip: int = 0, limit: int = 20) -> Tuple[List[Announcement], int]:
    """Published announcements a role may read, newest first; admins see every audience"""
    query = db.query(Announcement).filter(Announcement.status == "published")
    if role in AUDIENCES_BY_ROLE:
        query = query.filter(Announcement.target_audience.in_(AUDIENCES_BY_ROLE[role]))
    total = query.count()
    items = query.order_by(Announcement.published_at.desc(), Announcement.id).offset(skip).limit(limit).all()
    return items, total

def archive_announcement(db: Session, announcement: Announcement) -> Announcement:
    announcement.status = "archived"
    db.commit()
    db.refresh(announcement)
    return announcement
