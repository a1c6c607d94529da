from typing import Any, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Form, Query
from sqlalchemy.orm import Session

from alnet.core.config import settings
from alnet.core.storage import r2_storage
from alnet.db.session import get_db
from alnet.deps import ensure_owner_or_admin, get_current_admin, get_current_user, get_page_params, PageParams
from alnet.modules.profiles.models.profile import Profile
from alnet.modules.profiles.schemas.profile import (
    AlumniSearchFilters,
    BulkUploadResult,
    PhotoUploadOut,
    ProfileOut,
    ProfileSortField,
    ProfileType,
    ProfileUpdate,
    SortOrder,
)
from alnet.modules.profiles.services.bulk_upload import InvalidUploadFile, process_bulk_upload
from alnet.modules.profiles.services.profile import get_profile_by_user_id, search_alumni, set_profile_photo, update_profile
from alnet.modules.user_management.models.user import User
from alnet.schemas.response import ApiResponse, Page, StatusMessage, paginate, success_response

router = APIRouter()
logger = logging.getLogger("alnet")

def _get_visible_profile(db: Session, user_id: str, current_user: User) -> Profile:
    """Return the profile if the caller may see it, otherwise 404"""
    profile = get_profile_by_user_id(db, user_id)
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    if not profile.is_public and user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile

def _get_editable_profile(db: Session, user_id: str, current_user: User) -> Profile:
    ensure_owner_or_admin(user_id, current_user)
    profile = get_profile_by_user_id(db, user_id)
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile

def _split_values(values: Optional[List[str]]) -> List[str]:
    result = []
    for value in values or []:
        result.extend(part.strip() for part in value.split(",") if part.strip())
    return result

def get_search_filters(
    keyword: Optional[str] = None,
    company: Optional[str] = None,
    position: Optional[str] = None,
    location: Optional[str] = None,
    industry: Optional[str] = None,
    skills: Optional[List[str]] = Query(None),
    skills_list: Optional[List[str]] = Query(None, alias="skills[]", include_in_schema=False),
    years_of_experience: Optional[int] = Query(None, alias="yearsOfExperience", ge=0),
    graduation_year: Optional[int] = Query(None, alias="graduationYear"),
    offering_mentorship: Optional[bool] = Query(None, alias="offeringMentorship"),
    seeking_mentorship: Optional[bool] = Query(None, alias="seekingMentorship"),
    sort_by: Optional[ProfileSortField] = Query(None, alias="sortBy"),
    order: SortOrder = SortOrder.DESC,
) -> AlumniSearchFilters:
    """Collect directory filters from the query string"""
    return AlumniSearchFilters(
        keyword=keyword or None,
        company=company or None,
        position=position or None,
        location=location or None,
        industry=industry or None,
        skills=_split_values((skills or []) + (skills_list or [])),
        years_of_experience=years_of_experience,
        graduation_year=graduation_year,
        offering_mentorship=offering_mentorship,
        seeking_mentorship=seeking_mentorship,
        sort_by=sort_by,
        order=order,
    )

@router.get("/me", response_model=ApiResponse[ProfileOut])
def read_my_profile(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Get the caller's profile"""
    return success_response(_get_visible_profile(db, current_user.id, current_user))

@router.get("/alumni/search", response_model=ApiResponse[Page[ProfileOut]])
def search_alumni_profiles(
    *,
    db: Session = Depends(get_db),
    filters: AlumniSearchFilters = Depends(get_search_filters),
    page_params: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Search public alumni profiles"""
    profiles, total = search_alumni(db, filters, skip=page_params.offset, limit=page_params.limit)
    return success_response(paginate(profiles, total, page_params.page, page_params.limit))

@router.get("/alumni/directory", response_model=ApiResponse[Page[ProfileOut]])
def alumni_directory(
    *,
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Browse all public alumni profiles"""
    profiles, total = search_alumni(db, AlumniSearchFilters(), skip=page_params.offset, limit=page_params.limit)
    return success_response(paginate(profiles, total, page_params.page, page_params.limit))

@router.post("/bulk-upload", response_model=ApiResponse[BulkUploadResult])
async def bulk_upload_profiles(
    *,
    db: Session = Depends(get_db),
    file: UploadFile = File(...),
    default_role: ProfileType = Form(ProfileType.ALUMNI, alias="defaultRole"),
    current_user: User = Depends(get_current_admin),
) -> Any:
    """Onboard users from a CSV file (admin only)"""
    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(status_code=413, detail="File size exceeds maximum limit")
    try:
        result = process_bulk_upload(db, content, default_role)
    except InvalidUploadFile as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return success_response(result)

@router.get("/{user_id}", response_model=ApiResponse[ProfileOut])
def read_profile(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Get a user's profile"""
    return success_response(_get_visible_profile(db, user_id, current_user))

@router.patch("/{user_id}", response_model=ApiResponse[ProfileOut])
def patch_profile(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    profile_in: ProfileUpdate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Update a profile (owner or admin)"""
    profile = _get_editable_profile(db, user_id, current_user)
    return success_response(update_profile(db, profile, profile_in))

@router.post("/{user_id}/photo", response_model=ApiResponse[PhotoUploadOut])
async def upload_profile_photo(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Upload or replace a profile photo (owner or admin)"""
    profile = _get_editable_profile(db, user_id, current_user)

    if file.content_type not in settings.ALLOWED_PHOTO_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only JPEG, PNG, and WebP images are allowed",
        )
    content = await file.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty")
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(status_code=413, detail="File size exceeds maximum limit")

    old_photo = profile.profile_photo_url
    photo_url = r2_storage.upload_bytes(content, file.filename, file.content_type, prefix="profile_photos")
    set_profile_photo(db, profile, photo_url)
    if old_photo:
        r2_storage.delete_file(old_photo)

    logger.info(f"Profile photo updated for user {user_id}")
    return success_response({"message": "Profile photo uploaded successfully", "photo_url": photo_url})

@router.delete("/{user_id}/photo", response_model=ApiResponse[StatusMessage])
def delete_profile_photo(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Remove a profile photo (owner or admin)"""
    profile = _get_editable_profile(db, user_id, current_user)
    if not profile.profile_photo_url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No profile photo to delete")

    r2_storage.delete_file(profile.profile_photo_url)
    set_profile_photo(db, profile, None)
    return success_response({"message": "Profile photo deleted successfully"})
