import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Text

from alnet.db.session import Base

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    actor_id = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)  # The user who triggered the notification
    type = Column(String(50))  # connection_request, connection_accepted, new_message, job_application, startup_reviewed, event_rsvp
    content = Column(Text)
    related_id = Column(String, nullable=True)  # ID of the related entity (connection, message, job, startup)
    is_read = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
