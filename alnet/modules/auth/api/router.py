"""Authentication router: registration, login, token refresh"""
from typing import Any, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from alnet.db.session import get_db
from alnet.deps import get_current_user
from alnet.modules.analytics.services.events import log_event
from alnet.modules.audit.schemas.audit import AuditAction, AuditCategory
from alnet.modules.audit.services.audit import record_audit
from alnet.modules.auth.schemas.auth import AuthResult, CurrentUser, LoginRequest, RefreshTokenRequest, RegisterRequest, Token
from alnet.modules.auth.services.auth import authenticate, issue_tokens, record_login, refresh_tokens, register_user
from alnet.modules.user_management.models.user import User
from alnet.modules.user_management.schemas.user import UserRole
from alnet.modules.user_management.services.user import get_user_by_email
from alnet.schemas.response import ApiResponse, StatusMessage, success_response

router = APIRouter()
logger = logging.getLogger("alnet")

def _invalid_credentials() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

def _auth_result(user: User, message: str) -> dict:
    return {
        "message": message,
        "user": {"id": user.id, "email": user.email, "role": user.role},
        **issue_tokens(user),
    }

def _audit_failed_login(db: Session, request: Request, email: str, reason: str, user_id: Optional[str] = None) -> None:
    record_audit(
        db, AuditAction.FAILED_LOGIN, AuditCategory.SECURITY, "User",
        user_id=user_id, user_email=email, resource_id=user_id,
        description=f"Failed login attempt: {reason}", request=request, is_sensitive=True,
    )

def _login(db: Session, request: Request, email: str, password: str) -> User:
    user = authenticate(db, email, password)
    if not user:
        logger.warning(f"Failed login attempt for {email}")
        known = get_user_by_email(db, email)
        _audit_failed_login(db, request, email, "Invalid credentials", known.id if known else None)
        raise _invalid_credentials()
    if not user.is_active:
        _audit_failed_login(db, request, email, f"Account is {user.status}", user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Account is {user.status}",
        )
    record_login(db, user)
    log_event(db, "login", user_id=user.id, request=request)
    record_audit(
        db, AuditAction.LOGIN, AuditCategory.AUTHENTICATION, "User",
        user_id=user.id, user_email=user.email, resource_id=user.id,
        description="User logged in", request=request,
    )
    return user

@router.post("/register", response_model=ApiResponse[AuthResult], status_code=status.HTTP_201_CREATED)
def register(
    *,
    db: Session = Depends(get_db),
    request: Request,
    user_in: RegisterRequest,
) -> Any:
    """Register a student or alumni account and its profile"""
    if user_in.role == UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Admin accounts cannot be self-registered",
        )
    if get_user_by_email(db, user_in.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )
    try:
        user = register_user(db, user_in)
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    log_event(db, "register", user_id=user.id, metadata={"role": user.role}, request=request)
    return success_response(_auth_result(user, "User registered successfully"))

@router.post("/login", response_model=ApiResponse[AuthResult])
def login(
    *,
    db: Session = Depends(get_db),
    request: Request,
    credentials: LoginRequest,
) -> Any:
    """Log in with email and password"""
    user = _login(db, request, credentials.email, credentials.password)
    return success_response(_auth_result(user, "Login successful"))

@router.post("/token", response_model=Token, response_model_by_alias=False, include_in_schema=False)
def login_for_docs(
    *,
    db: Session = Depends(get_db),
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
) -> Any:
    """OAuth2 password flow used by the interactive docs"""
    user = _login(db, request, form_data.username.strip().lower(), form_data.password)
    return issue_tokens(user)

@router.post("/refresh-token", response_model=ApiResponse[Token])
def refresh_token(
    *,
    db: Session = Depends(get_db),
    request: Request,
    token_in: RefreshTokenRequest,
) -> Any:
    """Exchange a refresh token for a new token pair"""
    tokens = refresh_tokens(db, token_in.refresh_token)
    if tokens is None:
        record_audit(
            db, AuditAction.TOKEN_REJECTED, AuditCategory.SECURITY, "Token",
            description="Refresh token rejected", request=request, is_sensitive=True,
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return success_response(tokens)

@router.post("/logout", response_model=ApiResponse[StatusMessage])
def logout(
    *,
    db: Session = Depends(get_db),
    request: Request,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Log out. Tokens are stateless, the client discards them."""
    log_event(db, "logout", user_id=current_user.id, request=request)
    record_audit(
        db, AuditAction.LOGOUT, AuditCategory.AUTHENTICATION, "User",
        user_id=current_user.id, user_email=current_user.email, resource_id=current_user.id,
        description="User logged out", request=request,
    )
    return success_response({"message": "Logged out successfully"})

@router.get("/me", response_model=ApiResponse[CurrentUser])
def read_me(
    current_user: User = Depends(get_current_user),
) -> Any:
    """Get the authenticated user and profile"""
    return success_response(current_user)
