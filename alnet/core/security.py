# Implements security-related functionality:
# JWT access and refresh token generation and verification
# Password hashing and verification using bcrypt
# Strong password generation for bulk onboarded accounts

from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Union
import secrets
import string
import logging

from jose import jwt, JWTError
from passlib.context import CryptContext

from alnet.core.config import settings

logger = logging.getLogger("alnet")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _create_token(
    subject: Union[str, Any],
    role: str,
    token_type: str,
    secret: str,
    expires_delta: timedelta,
) -> str:
    now = datetime.utcnow()
    to_encode = {
        "sub": str(subject),
        "role": role,
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(to_encode, secret, algorithm=settings.ALGORITHM)


def create_access_token(
    subject: Union[str, Any], role: str, expires_delta: Optional[timedelta] = None
) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _create_token(subject, role, ACCESS_TOKEN_TYPE, settings.SECRET_KEY, expires_delta)


def create_refresh_token(
    subject: Union[str, Any], role: str, expires_delta: Optional[timedelta] = None
) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES)
    return _create_token(subject, role, REFRESH_TOKEN_TYPE, settings.REFRESH_SECRET_KEY, expires_delta)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def generate_strong_password(length: int = 12) -> str:
    alphabet = string.ascii_letters + string.digits + "!@#$%^&*"
    password = ''.join(secrets.choice(alphabet) for _ in range(length))
    return password


def _decode_token(token: str, secret: str, expected_type: str) -> Optional[Dict[str, Any]]:
    try:
        # jose checks "exp" and raises ExpiredSignatureError (a JWTError)
        payload = jwt.decode(token, secret, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification error: {e}")
        return None

    if payload.get("sub") is None:
        logger.warning("Token payload missing 'sub' field")
        return None

    if payload.get("type") != expected_type:
        logger.warning(f"Expected {expected_type} token, got {payload.get('type')}")
        return None

    return payload


def verify_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the access token claims, or None when the token is unusable"""
    return _decode_token(token, settings.SECRET_KEY, ACCESS_TOKEN_TYPE)


def verify_refresh_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the refresh token claims, or None when the token is unusable"""
    return _decode_token(token, settings.REFRESH_SECRET_KEY, REFRESH_TOKEN_TYPE)
