from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional
import logging

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from alnet.core.config import settings
from alnet.db.session import get_db
from alnet.deps import (
    DateRange,
    get_current_admin,
    get_current_user,
    get_date_range,
    get_page_params,
    invalid_range,
    PageParams,
)
from alnet.modules.analytics.schemas.analytics import (
    AnalyticsEventOut,
    ConnectionStatistics,
    DashboardSummary,
    EngagementMetrics,
    LogEventRequest,
    LogEventResult,
    PlatformHealth,
    ProfileCompleteness,
    UserStatistics,
)
from alnet.modules.analytics.services.analytics import (
    export_events_csv,
    export_events_json,
    get_analytics_report,
    get_connection_statistics,
    get_dashboard_summary,
    get_engagement_metrics,
    get_platform_health,
    get_profile_completeness,
    get_user_statistics,
    resolve_range,
)
from alnet.modules.analytics.services.events import log_event
from alnet.modules.audit.schemas.audit import AuditAction, AuditCategory
from alnet.modules.audit.services.audit import record_audit
from alnet.modules.user_management.models.user import User
from alnet.schemas.response import ApiResponse, Page, paginate, success_response

router = APIRouter()
logger = logging.getLogger("alnet")


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"


def get_series_range(date_range: DateRange = Depends(get_date_range)) -> DateRange:
    """Date range for day-by-day series; the span after filling in open bounds is capped"""
    try:
        start, end = resolve_range(date_range.start_date, date_range.end_date)
    except OverflowError:
        raise invalid_range("Date is out of range")
    if end - start > timedelta(days=settings.MAX_ANALYTICS_RANGE_DAYS):
        raise invalid_range(f"Date range must not exceed {settings.MAX_ANALYTICS_RANGE_DAYS} days")
    return date_range

@router.get("/users", response_model=ApiResponse[UserStatistics])
def read_user_statistics(
    *,
    db: Session = Depends(get_db),
    date_range: DateRange = Depends(get_date_range),
    current_user: User = Depends(get_current_admin),
) -> Any:
    return success_response(get_user_statistics(db, date_range.start_date, date_range.end_date))

@router.get("/engagement", response_model=ApiResponse[EngagementMetrics])
def read_engagement_metrics(
    *,
    db: Session = Depends(get_db),
    date_range: DateRange = Depends(get_series_range),
    current_user: User = Depends(get_current_admin),
) -> Any:
    """Messaging and connection activity; defaults to the last 30 days"""
    return success_response(get_engagement_metrics(db, date_range.start_date, date_range.end_date))

@router.get("/platform", response_model=ApiResponse[PlatformHealth])
def read_platform_health(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> Any:
    return success_response(get_platform_health(db))

@router.get("/connections", response_model=ApiResponse[ConnectionStatistics])
def read_connection_statistics(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> Any:
    return success_response(get_connection_statistics(db))

@router.get("/profiles", response_model=ApiResponse[ProfileCompleteness])
def read_profile_completeness(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> Any:
    return success_response(get_profile_completeness(db))

@router.get("/dashboard", response_model=ApiResponse[DashboardSummary])
def read_dashboard(
    *,
    db: Session = Depends(get_db),
    date_range: DateRange = Depends(get_series_range),
    current_user: User = Depends(get_current_admin),
) -> Any:
    return success_response(get_dashboard_summary(db, date_range.start_date, date_range.end_date))

@router.get("/report", response_model=ApiResponse[Page[AnalyticsEventOut]])
def read_analytics_report(
    *,
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    date_range: DateRange = Depends(get_date_range),
    event_type: Optional[str] = Query(None, alias="eventType"),
    user_id: Optional[str] = Query(None, alias="userId"),
    current_user: User = Depends(get_current_admin),
) -> Any:
    """Logged events, newest first"""
    events, total = get_analytics_report(
        db,
        skip=page_params.offset,
        limit=page_params.limit,
        start_date=date_range.start_date,
        end_date=date_range.end_date,
        event_type=event_type,
        user_id=user_id,
    )
    return success_response(paginate(events, total, page_params.page, page_params.limit))

@router.post("/export")
def export_analytics(
    *,
    db: Session = Depends(get_db),
    request: Request,
    export_format: ExportFormat = Query(ExportFormat.CSV, alias="format"),
    date_range: DateRange = Depends(get_date_range),
    event_type: Optional[str] = Query(None, alias="eventType"),
    user_id: Optional[str] = Query(None, alias="userId"),
    current_user: User = Depends(get_current_admin),
) -> Response:
    """Download logged events as a CSV or JSON attachment"""
    filters = dict(start_date=date_range.start_date, end_date=date_range.end_date, event_type=event_type, user_id=user_id)
    stamp = datetime.utcnow().strftime("%Y%m%d%H%M%S")

    if export_format == ExportFormat.JSON:
        content = export_events_json(db, **filters)
        media_type = "application/json"
    else:
        content = export_events_csv(db, **filters)
        media_type = "text/csv"

    logger.info(f"Analytics export ({export_format.value}) by {current_user.id}")
    record_audit(
        db, AuditAction.DATA_EXPORT, AuditCategory.DATA, "AnalyticsEvent",
        user_id=current_user.id, user_email=current_user.email,
        description=f"Analytics export ({export_format.value})",
        metadata={key: str(value) for key, value in filters.items() if value is not None},
        request=request,
    )
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="analytics_{stamp}.{export_format.value}"'},
    )

@router.post("/log-event", response_model=ApiResponse[LogEventResult], status_code=status.HTTP_201_CREATED)
def log_client_event(
    *,
    db: Session = Depends(get_db),
    request: Request,
    event_in: LogEventRequest,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Record an event reported by a client"""
    logged = log_event(db, event_in.event_type, user_id=current_user.id, metadata=event_in.metadata, request=request)
    return success_response({"logged": logged})
