from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from alnet.db.session import get_db
from alnet.deps import get_current_admin, get_current_user, get_page_params, PageParams
from alnet.modules.announcements.schemas.announcement import AnnouncementCreate, AnnouncementOut
from alnet.modules.announcements.services.announcement import (
    archive_announcement,
    get_announcement,
    get_announcements_for_role,
    publish_announcement,
)
from alnet.modules.user_management.models.user import User
from alnet.schemas.response import ApiResponse, Page, paginate, success_response

router = APIRouter()

@router.post("", response_model=ApiResponse[AnnouncementOut], status_code=status.HTTP_201_CREATED)
def create_announcement(
    *,
    db: Session = Depends(get_db),
    announcement_in: AnnouncementCreate,
    current_user: User = Depends(get_current_admin),
) -> Any:
    """Publish an announcement to all users, students or alumni (admin only)"""
    return success_response(publish_announcement(db, announcement_in, current_user.id))

@router.get("", response_model=ApiResponse[Page[AnnouncementOut]])
def list_announcements(
    *,
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Announcements addressed to the caller, newest first"""
    items, total = get_announcements_for_role(db, current_user.role, page_params.offset, page_params.limit)
    return success_response(paginate(items, total, page_params.page, page_params.limit))

@router.patch("/{announcement_id}/archive", response_model=ApiResponse[AnnouncementOut])
def archive(
    *,
    db: Session = Depends(get_db),
    announcement_id: str,
    current_user: User = Depends(get_current_admin),
) -> Any:
    announcement = get_announcement(db, announcement_id)
    if not announcement:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Announcement not found",
        )
    return success_response(archive_announcement(db, announcement))
