import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Index, JSON, String, Text

from alnet.db.session import Base

class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=True, index=True)
    user_email = Column(String(255), nullable=True)
    action = Column(String(30), nullable=False)  # LOGIN, FAILED_LOGIN, PERMISSION_CHANGE, REFUND, ...
    category = Column(String(30), nullable=False)  # AUTHENTICATION, SECURITY, USER_MANAGEMENT, DATA, PAYMENT, SYSTEM
    resource = Column(String(255), nullable=False)
    resource_id = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    old_value = Column(JSON, nullable=True)
    new_value = Column(JSON, nullable=True)
    # "metadata" is reserved on declarative classes
    audit_metadata = Column("metadata", JSON, nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    request_path = Column(String(255), nullable=True)
    request_method = Column(String(10), nullable=True)
    is_sensitive = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    __table_args__ = (
        Index("ix_audit_logs_user_created", "user_id", "created_at"),
        Index("ix_audit_logs_action_created", "action", "created_at"),
        Index("ix_audit_logs_category_created", "category", "created_at"),
    )
