from datetime import datetime

from sqlalchemy import Boolean, Column, Integer, String, DateTime, Text, ForeignKey, Index

from alnet.db.session import Base

class Message(Base):
    __tablename__ = "messages"

    # Autoincrement id doubles as the stream offset of a conversation
    id = Column(Integer, primary_key=True, autoincrement=True)
    sender_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    status = Column(String(20), default="sent", nullable=False)  # sent, delivered, read
    delivered_at = Column(DateTime, nullable=True)
    read_at = Column(DateTime, nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_messages_pair", "sender_id", "receiver_id"),
        Index("ix_messages_receiver_status", "receiver_id", "status"),
    )
