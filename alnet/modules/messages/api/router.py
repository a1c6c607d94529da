from typing import Any, Optional
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from alnet.core.config import settings
from alnet.db.session import get_db
from alnet.deps import get_current_user, get_page_params, PageParams
from alnet.modules.analytics.services.events import log_event
from alnet.modules.connections.services.connection import are_connected, is_blocked
from alnet.modules.messages.models.message import Message
from alnet.modules.messages.schemas.message import ConversationOut, MessageCreate, MessageOut, ReadReceipt
from alnet.modules.messages.services.broker import message_broker
from alnet.modules.messages.services.message import (
    conversation_key,
    delete_message,
    get_conversation,
    get_conversations,
    get_message,
    mark_conversation_read,
    mark_delivered,
    mark_read,
    send_message,
)
from alnet.modules.messages.services.stream import message_event_stream, serialize_message
from alnet.modules.notifications.services.notification_events import create_new_message_notification
from alnet.modules.user_management.models.user import User
from alnet.modules.user_management.services.user import get_user
from alnet.schemas.response import ApiResponse, Page, StatusMessage, paginate, success_response

router = APIRouter()
logger = logging.getLogger("alnet")

def _check_user_exists(db: Session, user_id: str) -> User:
    user = get_user(db, user_id=user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user

def _get_message_or_404(db: Session, message_id: int) -> Message:
    message = get_message(db, message_id)
    if not message:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Message not found",
        )
    return message

def _publish(message: Message) -> None:
    try:
        message_broker.publish(conversation_key(message.sender_id, message.receiver_id), serialize_message(message))
    except Exception as e:
        logger.error(f"Error publishing message {message.id} to live streams: {str(e)}")

@router.post("", response_model=ApiResponse[MessageOut], status_code=status.HTTP_201_CREATED)
def create_message(
    *,
    db: Session = Depends(get_db),
    request: Request,
    message_in: MessageCreate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Send a direct message"""
    if message_in.receiver_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot send message to yourself",
        )
    _check_user_exists(db, message_in.receiver_id)

    if is_blocked(db, current_user.id, message_in.receiver_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Messaging is blocked between these users",
        )
    if settings.MESSAGING_REQUIRES_CONNECTION and not are_connected(db, current_user.id, message_in.receiver_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only message your connections",
        )

    message = send_message(db, current_user.id, message_in.receiver_id, message_in.content)
    _publish(message)
    create_new_message_notification(db, message.id, current_user.id, message.receiver_id)
    log_event(db, "message_sent", user_id=current_user.id, metadata={"receiver_id": message.receiver_id}, request=request)
    return success_response(message)

@router.get("", response_model=ApiResponse[Page[ConversationOut]])
def read_conversations(
    *,
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_user),
) -> Any:
    """The caller's conversations, most recent first"""
    items, total = get_conversations(db, current_user.id, page_params.offset, page_params.limit)
    return success_response(paginate(items, total, page_params.page, page_params.limit))

@router.patch("/conversation/{user_id}/read", response_model=ApiResponse[ReadReceipt])
def read_whole_conversation(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Mark every message from user_id to the caller as read"""
    _check_user_exists(db, user_id)
    return success_response({"count": mark_conversation_read(db, current_user.id, user_id)})

@router.get("/{user_id}/stream")
async def stream_conversation(
    *,
    request: Request,
    user_id: str,
    after_id: Optional[int] = Query(None, alias="afterId", ge=0),
    last_event_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Live server-sent events for one conversation, resumable with Last-Event-ID"""
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot open a conversation with yourself",
        )
    await run_in_threadpool(_check_user_exists, db, user_id)

    offset = after_id
    if last_event_id:
        try:
            offset = int(last_event_id)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Last-Event-ID must be a message id",
            )

    return StreamingResponse(
        message_event_stream(current_user.id, user_id, offset, request.is_disconnected),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )

@router.get("/{user_id}", response_model=ApiResponse[Page[MessageOut]])
def read_conversation(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    after_id: Optional[int] = Query(None, alias="afterId", ge=0),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Messages exchanged with user_id, oldest first"""
    _check_user_exists(db, user_id)
    page_params = PageParams(page=page, limit=limit)
    messages, total = get_conversation(
        db, current_user.id, user_id, page_params.offset, page_params.limit, after_id=after_id
    )
    mark_delivered(db, current_user.id, messages)
    return success_response(paginate(messages, total, page_params.page, page_params.limit))

@router.patch("/{message_id}/read", response_model=ApiResponse[MessageOut])
def read_message(
    *,
    db: Session = Depends(get_db),
    message_id: int,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Mark a received message as read"""
    message = _get_message_or_404(db, message_id)
    if message.receiver_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the receiver can mark a message as read",
        )
    return success_response(mark_read(db, message))

@router.delete("/{message_id}", response_model=ApiResponse[StatusMessage])
def remove_message(
    *,
    db: Session = Depends(get_db),
    message_id: int,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Delete a sent message for both parties"""
    message = _get_message_or_404(db, message_id)
    if message.sender_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the sender can delete a message",
        )
    delete_message(db, message)
    return success_response({"message": "Message deleted"})
