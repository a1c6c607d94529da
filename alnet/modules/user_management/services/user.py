from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from alnet.core.security import get_password_hash
from alnet.db.filters import icontains
from alnet.modules.profiles.models.profile import Profile
from alnet.modules.user_management.models.user import User

def get_user(db: Session, user_id: str) -> Optional[User]:
    """Get user by ID"""
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by email (emails are stored lower-cased)"""
    return db.query(User).filter(User.email == email.strip().lower()).first()

def get_users(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    role: Optional[str] = None,
    status: Optional[str] = None,
    q: Optional[str] = None,
) -> Tuple[List[User], int]:
    """Get a page of users with the total count"""
    query = db.query(User).outerjoin(Profile, Profile.user_id == User.id)
    if role:
        query = query.filter(User.role == role)
    if status:
        query = query.filter(User.status == status)
    if q:
        query = query.filter(
            or_(
                icontains(User.email, q),
                icontains(Profile.first_name, q),
                icontains(Profile.last_name, q),
            )
        )
    total = query.count()
    users = (
        query.options(joinedload(User.profile))
        .order_by(User.created_at.desc(), User.id)
        .offset(skip)
        .limit(limit)
        .all()
    )
    return users, total

def set_user_status(db: Session, user: User, status: str) -> User:
    """Soft-enable or soft-disable an account"""
    user.status = status
    db.commit()
    db.refresh(user)
    return user

def to_user_out(user: User) -> dict:
    profile = user.profile
    return {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "status": user.status,
        "first_name": profile.first_name if profile else None,
        "last_name": profile.last_name if profile else None,
        "last_login_at": user.last_login_at,
        "created_at": user.created_at,
    }

def create_user(db: Session, email: str, password: str, role: str) -> User:
    """Add a new user to the session; the caller commits together with the profile"""
    user = User(
        email=email.strip().lower(),
        hashed_password=get_password_hash(password),
        role=role,
        status="active",
    )
    db.add(user)
    db.flush()
    return user

def touch_last_login(db: Session, user: User) -> None:
    user.last_login_at = datetime.utcnow()
    db.commit()
