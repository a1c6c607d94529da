"""Server-sent event stream of one conversation, resumable by message id"""
import json
import logging
from typing import AsyncIterator, Awaitable, Callable, List, Optional

from starlette.concurrency import run_in_threadpool

from alnet.core.config import settings
from alnet.db.session import SessionLocal
from alnet.modules.messages.models.message import Message
from alnet.modules.messages.schemas.message import MessageOut
from alnet.modules.messages.services.broker import CLOSED, MessageBroker, message_broker
from alnet.modules.messages.services.message import conversation_key, get_conversation, mark_delivered

logger = logging.getLogger(__name__)

REPLAY_BATCH_SIZE = 200
RETRY_MILLISECONDS = 2000


def serialize_message(message: Message) -> dict:
    return MessageOut.model_validate(message).model_dump(mode="json", by_alias=True)


def format_event(payload: dict) -> str:
    return f"id: {payload['id']}\nevent: message\ndata: {json.dumps(payload)}\n\n"


def replay_messages(user_id: str, other_id: str, after_id: int) -> List[dict]:
    """Everything after the client's offset, marking the caller's incoming messages delivered"""
    db = SessionLocal()
    try:
        payloads = []
        cursor = after_id
        while True:
            messages, _ = get_conversation(db, user_id, other_id, limit=REPLAY_BATCH_SIZE, after_id=cursor)
            if not messages:
                break
            mark_delivered(db, user_id, messages)
            payloads.extend(serialize_message(m) for m in messages)
            cursor = messages[-1].id
            if len(messages) < REPLAY_BATCH_SIZE:
                break
        return payloads
    finally:
        db.close()


def mark_ids_delivered(user_id: str, message_ids: List[int]) -> None:
    db = SessionLocal()
    try:
        messages = db.query(Message).filter(Message.id.in_(message_ids)).all()
        mark_delivered(db, user_id, messages)
    finally:
        db.close()


async def message_event_stream(
    user_id: str,
    other_id: str,
    after_id: Optional[int],
    is_disconnected: Callable[[], Awaitable[bool]],
    broker: MessageBroker = message_broker,
    keepalive: Optional[float] = None,
) -> AsyncIterator[str]:
    """
    Yield SSE frames for the conversation between user_id and other_id.

    The subscription is taken before the replay so nothing published in
    between is lost; ids at or below the last one sent are skipped.
    """
    keepalive = settings.STREAM_KEEPALIVE_SECONDS if keepalive is None else keepalive
    subscription = broker.subscribe(conversation_key(user_id, other_id))
    last_id = after_id
    try:
        yield f"retry: {RETRY_MILLISECONDS}\n\n"

        if after_id is not None:
            for payload in await run_in_threadpool(replay_messages, user_id, other_id, after_id):
                yield format_event(payload)
                last_id = payload["id"]

        while True:
            if await is_disconnected():
                break
            item = await subscription.get(timeout=keepalive)
            if item is None:
                yield ": keepalive\n\n"
                continue
            if item is CLOSED:
                logger.info(f"Closing lagging stream for user {user_id}")
                break
            if last_id is not None and item["id"] <= last_id:
                continue
            yield format_event(item)
            last_id = item["id"]
            if item["receiverId"] == user_id:
                await run_in_threadpool(mark_ids_delivered, user_id, [item["id"]])
    finally:
        broker.unsubscribe(subscription)
