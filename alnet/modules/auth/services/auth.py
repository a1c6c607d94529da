import logging
from typing import Optional

from sqlalchemy.orm import Session

from alnet.core import security
from alnet.modules.auth.schemas.auth import RegisterRequest
from alnet.modules.profiles.services.profile import build_profile
from alnet.modules.user_management.models.user import User
from alnet.modules.user_management.services.user import create_user, get_user, get_user_by_email, touch_last_login

logger = logging.getLogger("alnet")

# Compared against when the email is unknown so both failures cost one bcrypt check
_DUMMY_HASH = security.get_password_hash("alnet-timing-guard")

def register_user(db: Session, user_in: RegisterRequest) -> User:
    """Create the user and its profile in one transaction"""
    user = create_user(db, user_in.email, user_in.password, user_in.role.value)
    db.add(build_profile(user.id, user_in.first_name, user_in.last_name, profile_type=user_in.role.value))
    db.commit()
    db.refresh(user)
    logger.info(f"Registered {user.role} {user.id}")
    return user

def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user when the credentials match, None otherwise"""
    user = get_user_by_email(db, email)
    if not user:
        security.verify_password(password, _DUMMY_HASH)
        return None
    if not security.verify_password(password, user.hashed_password):
        return None
    return user

def record_login(db: Session, user: User) -> None:
    touch_last_login(db, user)

def issue_tokens(user: User) -> dict:
    return {
        "access_token": security.create_access_token(user.id, user.role),
        "refresh_token": security.create_refresh_token(user.id, user.role),
        "token_type": "bearer",
    }

def refresh_tokens(db: Session, refresh_token: str) -> Optional[dict]:
    """Rotate both tokens from a valid refresh token"""
    payload = security.verify_refresh_token(refresh_token)
    if payload is None:
        return None
    user = get_user(db, payload["sub"])
    if not user or not user.is_active:
        return None
    return issue_tokens(user)


def create_admin_account(db: Session, email: str, password: str) -> User:
    """Bootstrap an administrator; admins cannot self-register and have no profile"""
    user = create_user(db, email, password, "admin")
    db.commit()
    db.refresh(user)
    logger.info(f"Created admin {user.id}")
    return user
