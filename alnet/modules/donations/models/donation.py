import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, String, DateTime, Text, Numeric, ForeignKey

from alnet.db.session import Base

class Donation(Base):
    __tablename__ = "donations"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default="USD", nullable=False)
    type = Column(String(20), default="one_time", nullable=False)  # one_time, recurring
    status = Column(String(20), default="pending", nullable=False)  # pending, completed, failed, refunded, cancelled
    message = Column(Text, nullable=True)
    is_anonymous = Column(Boolean, default=False, nullable=False)
    campaign_id = Column(String(255), nullable=True)
    completed_at = Column(DateTime, nullable=True)
    refunded_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
