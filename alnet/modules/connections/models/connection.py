import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Index, CheckConstraint

from alnet.db.session import Base

# Statuses that occupy the pair; at most one such record per unordered pair
OCCUPYING_STATUSES = ("pending", "accepted", "blocked")


def pair_key(user_a: str, user_b: str) -> str:
    first, second = sorted((user_a, user_b))
    return f"{first}:{second}"


class Connection(Base):
    __tablename__ = "connections"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    requester_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), default="pending", nullable=False)  # pending, accepted, rejected, blocked
    message = Column(Text, nullable=True)
    # Unordered pair key while the record occupies the pair, NULL once rejected
    active_pair = Column(String, unique=True, nullable=True)
    responded_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_connections_pair", "requester_id", "receiver_id"),
        Index("ix_connections_receiver_status", "receiver_id", "status"),
        CheckConstraint("requester_id != receiver_id", name="no_self_connection"),
    )

    def set_status(self, status: str) -> None:
        self.status = status
        self.active_pair = pair_key(self.requester_id, self.receiver_id) if status in OCCUPYING_STATUSES else None
