from typing import List, Optional, Tuple
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from alnet.db.filters import icontains
from alnet.modules.profiles.models.profile import Profile
from alnet.modules.profiles.schemas.profile import AlumniSearchFilters, ProfileSortField, ProfileUpdate, SortOrder

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    ProfileSortField.CREATED_AT: Profile.created_at,
    ProfileSortField.FIRST_NAME: Profile.first_name,
    ProfileSortField.LAST_NAME: Profile.last_name,
    ProfileSortField.GRADUATION_YEAR: Profile.graduation_year,
    ProfileSortField.YEARS_OF_EXPERIENCE: Profile.years_of_experience,
    ProfileSortField.CURRENT_COMPANY: Profile.current_company,
}

def get_profile_by_user_id(db: Session, user_id: str) -> Optional[Profile]:
    """Get profile by owner ID"""
    return db.query(Profile).filter(Profile.user_id == user_id).first()

def get_profiles_by_user_ids(db: Session, user_ids: List[str]) -> dict:
    """Map user ID to profile for a batch of users"""
    if not user_ids:
        return {}
    profiles = db.query(Profile).filter(Profile.user_id.in_(set(user_ids))).all()
    return {profile.user_id: profile for profile in profiles}

def build_profile(user_id: str, first_name: str, last_name: str, profile_type: str, **fields) -> Profile:
    """Build a profile for a new user; the caller commits"""
    return Profile(
        user_id=user_id,
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        profile_type=profile_type,
        **fields,
    )

def update_profile(db: Session, profile: Profile, profile_in: ProfileUpdate) -> Profile:
    """Apply the fields present in the patch and leave the rest untouched"""
    update_data = profile_in.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        # Non-nullable columns cannot be cleared
        if value is None and field in ("first_name", "last_name", "is_public", "seeking_mentorship", "offering_mentorship"):
            continue
        if value is None and field in ("skills", "mentorship_topics"):
            value = []
        setattr(profile, field, value)

    if update_data:
        db.commit()
        db.refresh(profile)
    return profile

def set_profile_photo(db: Session, profile: Profile, photo_url: Optional[str]) -> Profile:
    profile.profile_photo_url = photo_url
    db.commit()
    db.refresh(profile)
    return profile

def search_alumni(
    db: Session,
    filters: AlumniSearchFilters,
    skip: int = 0,
    limit: int = 20,
) -> Tuple[List[Profile], int]:
    """
    Filter public alumni profiles.

    Every filter is optional and they are ANDed together. Text filters are
    case-insensitive substring matches; a profile matches the skills filter
    when any of its skills contains any requested skill. Without sort_by the
    results keep insertion order.
    """
    query = db.query(Profile).filter(
        Profile.profile_type == "alumni",
        Profile.is_public.is_(True),
    )

    if filters.keyword:
        query = query.filter(
            or_(
                icontains(Profile.first_name, filters.keyword),
                icontains(Profile.last_name, filters.keyword),
                icontains(Profile.headline, filters.keyword),
                icontains(Profile.bio, filters.keyword),
            )
        )
    if filters.company:
        query = query.filter(icontains(Profile.current_company, filters.company))
    if filters.position:
        query = query.filter(icontains(Profile.current_position, filters.position))
    if filters.location:
        query = query.filter(
            or_(
                icontains(Profile.location, filters.location),
                icontains(Profile.city, filters.location),
                icontains(Profile.country, filters.location),
            )
        )
    if filters.industry:
        query = query.filter(icontains(Profile.industry, filters.industry))
    if filters.skills:
        # skills are stored comma joined and filter skills never contain commas
        query = query.filter(or_(*[icontains(Profile.skills, skill) for skill in filters.skills]))
    if filters.years_of_experience is not None:
        query = query.filter(Profile.years_of_experience >= filters.years_of_experience)
    if filters.graduation_year is not None:
        query = query.filter(Profile.graduation_year == filters.graduation_year)
    if filters.offering_mentorship is not None:
        query = query.filter(Profile.offering_mentorship.is_(filters.offering_mentorship))
    if filters.seeking_mentorship is not None:
        query = query.filter(Profile.seeking_mentorship.is_(filters.seeking_mentorship))

    total = query.count()

    if filters.sort_by is not None:
        column = SORT_COLUMNS[filters.sort_by]
        ordered = column.asc() if filters.order == SortOrder.ASC else column.desc()
        query = query.order_by(ordered, Profile.created_at.asc(), Profile.id.asc())
    else:
        query = query.order_by(Profile.created_at.asc(), Profile.id.asc())

    return query.offset(skip).limit(limit).all(), total

def profile_summary(profile: Optional[Profile], user_id: str) -> Optional[dict]:
    if profile is None:
        return None
    return {
        "user_id": user_id,
        "first_name": profile.first_name,
        "last_name": profile.last_name,
        "profile_type": profile.profile_type,
        "headline": profile.headline,
        "current_company": profile.current_company,
        "current_position": profile.current_position,
        "profile_photo_url": profile.profile_photo_url,
    }
