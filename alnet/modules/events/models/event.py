import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime, Text, Integer, ForeignKey, UniqueConstraint

from alnet.db.session import Base
from alnet.db.types import StringList

class Event(Base):
    __tablename__ = "events"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    image_url = Column(String, nullable=True)
    event_date = Column(DateTime, nullable=False, index=True)
    location = Column(String(255), nullable=True)
    event_type = Column(String(100), nullable=True)  # reunion, webinar, meetup, ...
    status = Column(String(20), default="upcoming", nullable=False, index=True)  # upcoming, ongoing, completed, cancelled
    capacity = Column(Integer, default=0, nullable=False)  # 0 means unlimited
    registered_count = Column(Integer, default=0, nullable=False)
    organizer_name = Column(String(255), nullable=True)
    tags = Column(StringList, default=list)
    created_by = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class EventRsvp(Base):
    __tablename__ = "event_rsvps"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), default="going", nullable=False)  # going, interested, not_going
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="unique_event_rsvp"),
    )
