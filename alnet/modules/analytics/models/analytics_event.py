import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime, JSON

from alnet.db.session import Base

class AnalyticsEvent(Base):
    __tablename__ = "analytics_events"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=True, index=True)
    event_type = Column(String(100), nullable=False, index=True)  # login, register, message_sent, connection_requested, ...
    # "metadata" is reserved on declarative classes
    event_metadata = Column("metadata", JSON, nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
