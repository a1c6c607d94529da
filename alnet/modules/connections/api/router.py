from typing import Any
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from alnet.db.session import get_db
from alnet.deps import get_current_user, get_page_params, PageParams
from alnet.modules.analytics.services.events import log_event
from alnet.modules.connections.models.connection import Connection
from alnet.modules.connections.schemas.connection import (
    ConnectionCreate,
    ConnectionOut,
    ConnectionRespond,
    ConnectionWithProfile,
    RelationshipStatus,
)
from alnet.modules.connections.services.connection import (
    block_user,
    create_connection,
    get_connection,
    get_connections,
    get_occupying_connection,
    get_pending_requests,
    get_sent_requests,
    relationship_status,
    remove_connection,
    respond_to_connection,
)
from alnet.modules.notifications.services.notification_events import (
    create_connection_accepted_notification,
    create_connection_request_notification,
)
from alnet.modules.user_management.models.user import User
from alnet.modules.user_management.services.user import get_user
from alnet.schemas.response import ApiResponse, Page, paginate, success_response

router = APIRouter()
logger = logging.getLogger("alnet")

def _check_user_exists(db: Session, user_id: str) -> User:
    """Helper to check if a user exists"""
    user = get_user(db, user_id=user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user

def _validate_connection(db: Session, connection_id: str, current_user_id: str) -> Connection:
    """Fetch a connection the caller is party to"""
    connection = get_connection(db, connection_id)
    if not connection:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Connection not found",
        )
    if current_user_id not in (connection.requester_id, connection.receiver_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions",
        )
    return connection

def _duplicate_request() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="A connection already exists between these users",
    )

@router.post("", response_model=ApiResponse[ConnectionOut], status_code=status.HTTP_201_CREATED)
def send_connection_request(
    *,
    db: Session = Depends(get_db),
    request: Request,
    connection_in: ConnectionCreate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Send a connection request"""
    if connection_in.receiver_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot send a connection request to yourself",
        )
    _check_user_exists(db, connection_in.receiver_id)

    existing = get_occupying_connection(db, current_user.id, connection_in.receiver_id)
    if existing is not None:
        if existing.status == "blocked":
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Connection is blocked",
            )
        raise _duplicate_request()

    try:
        connection = create_connection(db, current_user.id, connection_in.receiver_id, connection_in.message)
    except IntegrityError:
        # A concurrent request for the same pair won
        db.rollback()
        raise _duplicate_request()

    create_connection_request_notification(db, connection.id, current_user.id, connection.receiver_id)
    log_event(db, "connection_requested", user_id=current_user.id,
              metadata={"receiver_id": connection.receiver_id}, request=request)
    return success_response(connection)

@router.get("", response_model=ApiResponse[Page[ConnectionWithProfile]])
def read_connections(
    *,
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Accepted connections in either direction"""
    items, total = get_connections(db, current_user.id, page_params.offset, page_params.limit)
    return success_response(paginate(items, total, page_params.page, page_params.limit))

@router.get("/pending", response_model=ApiResponse[Page[ConnectionWithProfile]])
def read_pending_requests(
    *,
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Pending requests received by the caller"""
    items, total = get_pending_requests(db, current_user.id, page_params.offset, page_params.limit)
    return success_response(paginate(items, total, page_params.page, page_params.limit))

@router.get("/sent", response_model=ApiResponse[Page[ConnectionWithProfile]])
def read_sent_requests(
    *,
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Pending requests sent by the caller"""
    items, total = get_sent_requests(db, current_user.id, page_params.offset, page_params.limit)
    return success_response(paginate(items, total, page_params.page, page_params.limit))

@router.get("/status/{user_id}", response_model=ApiResponse[RelationshipStatus])
def read_relationship_status(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Relationship between the caller and another user"""
    _check_user_exists(db, user_id)
    return success_response(relationship_status(db, current_user.id, user_id))

@router.post("/block/{user_id}", response_model=ApiResponse[ConnectionOut])
def block_connection(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Block a user; blocked pairs can neither connect nor message"""
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot block yourself",
        )
    _check_user_exists(db, user_id)

    existing = get_occupying_connection(db, current_user.id, user_id)
    if existing is not None and existing.status == "blocked":
        if existing.requester_id != current_user.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Connection is blocked",
            )
        return success_response(existing)

    return success_response(block_user(db, current_user.id, user_id))

@router.delete("/block/{user_id}", response_model=ApiResponse[ConnectionOut])
def unblock_connection(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Lift a block the caller placed"""
    existing = get_occupying_connection(db, current_user.id, user_id)
    if existing is None or existing.status != "blocked":
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No block found",
        )
    if existing.requester_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions",
        )
    return success_response(remove_connection(db, existing))

@router.patch("/{connection_id}", response_model=ApiResponse[ConnectionOut])
def respond_connection_request(
    *,
    db: Session = Depends(get_db),
    request: Request,
    connection_id: str,
    response_in: ConnectionRespond,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Accept or reject a pending request. Only the receiver may respond."""
    connection = get_connection(db, connection_id)
    if not connection:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Connection not found",
        )
    if connection.receiver_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the receiver can respond to this request",
        )
    if connection.status != "pending":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Connection is already {connection.status}",
        )

    connection = respond_to_connection(db, connection, response_in.accepted)
    if response_in.accepted:
        create_connection_accepted_notification(db, connection.id, connection.requester_id, connection.receiver_id)
        log_event(db, "connection_accepted", user_id=current_user.id,
                  metadata={"requester_id": connection.requester_id}, request=request)
    return success_response(connection)

@router.delete("/{connection_id}", response_model=ApiResponse[ConnectionOut])
def delete_connection(
    *,
    db: Session = Depends(get_db),
    connection_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Remove an accepted connection (either party) or withdraw a pending request (requester)"""
    connection = _validate_connection(db, connection_id, current_user.id)
    if connection.status == "accepted":
        return success_response(remove_connection(db, connection))
    if connection.status == "pending":
        if connection.requester_id != current_user.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only the requester can withdraw a pending request",
            )
        return success_response(remove_connection(db, connection))
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"Connection is already {connection.status}",
    )
