from enum import Enum
from typing import Any, Dict, Optional
from datetime import datetime

from alnet.schemas.base import CamelModel


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    FAILED_LOGIN = "FAILED_LOGIN"
    TOKEN_REJECTED = "TOKEN_REJECTED"
    PERMISSION_CHANGE = "PERMISSION_CHANGE"
    DATA_EXPORT = "DATA_EXPORT"
    PAYMENT = "PAYMENT"
    REFUND = "REFUND"


class AuditCategory(str, Enum):
    AUTHENTICATION = "AUTHENTICATION"
    USER_MANAGEMENT = "USER_MANAGEMENT"
    DATA = "DATA"
    PAYMENT = "PAYMENT"
    SYSTEM = "SYSTEM"
    SECURITY = "SECURITY"


class AuditLogOut(CamelModel):
    id: str
    user_id: Optional[str] = None
    user_email: Optional[str] = None
    action: AuditAction
    category: AuditCategory
    resource: str
    resource_id: Optional[str] = None
    description: Optional[str] = None
    old_value: Optional[Dict[str, Any]] = None
    new_value: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    request_path: Optional[str] = None
    request_method: Optional[str] = None
    is_sensitive: bool
    created_at: datetime
