import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime, Text, ForeignKey

from alnet.db.session import Base

class Announcement(Base):
    __tablename__ = "announcements"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    target_audience = Column(String(20), default="all", nullable=False, index=True)  # all, students, alumni
    status = Column(String(20), default="published", nullable=False)  # published, archived
    published_at = Column(DateTime, default=datetime.utcnow, index=True)
    created_by = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
