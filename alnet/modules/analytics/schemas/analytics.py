from typing import Any, Dict, List, Optional
from datetime import date as calendar_date, datetime

from pydantic import Field

from alnet.schemas.base import CamelModel


class UsersByRole(CamelModel):
    students: int
    alumni: int
    admins: int


class UsersByStatus(CamelModel):
    active: int
    inactive: int
    suspended: int


class UserStatistics(CamelModel):
    total_users: int
    by_role: UsersByRole
    by_status: UsersByStatus
    new_users_in_range: int
    last_month_new_users: int
    retention_rate: float


class DailyCount(CamelModel):
    date: calendar_date
    count: int


class EngagementMetrics(CamelModel):
    start_date: datetime
    end_date: datetime
    total_messages: int
    accepted_connections: int
    pending_connections: int
    rejected_connections: int
    acceptance_rate: float
    messages_by_day: List[DailyCount]
    unique_active_users: int


class PlatformTotals(CamelModel):
    users: int
    profiles: int
    connections: int
    messages: int
    jobs: int
    startups: int
    donations: int


class PlatformHealth(CamelModel):
    status: str
    database: str
    uptime_seconds: float
    started_at: datetime
    recent_errors: int
    totals: PlatformTotals


class ConnectionStatistics(CamelModel):
    total_connections: int
    pending_requests: int
    rejected_connections: int
    blocked_connections: int
    acceptance_rate: float


class ProfileCompleteness(CamelModel):
    average_completeness: float
    by_role: Dict[str, float]


class DashboardSummary(CamelModel):
    users: UserStatistics
    engagement: EngagementMetrics
    platform: PlatformHealth
    connections: ConnectionStatistics
    profiles: ProfileCompleteness


class AnalyticsEventOut(CamelModel):
    id: str
    event_type: str
    user_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime


class LogEventRequest(CamelModel):
    event_type: str = Field(..., min_length=1, max_length=100)
    metadata: Optional[Dict[str, Any]] = None


class LogEventResult(CamelModel):
    logged: bool
