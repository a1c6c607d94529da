import asyncio
import json
import threading

import pytest

from alnet.modules.messages.models.message import Message
from alnet.modules.messages.services.broker import CLOSED, MessageBroker
from alnet.modules.messages.services.message import conversation_key, send_message
from alnet.modules.messages.services.stream import message_event_stream, serialize_message
from alnet.modules.user_management.services.user import create_user
from conftest import PASSWORD, unique_email


@pytest.fixture
def pair(db):
    first = create_user(db, unique_email(), PASSWORD, 'student')
    second = create_user(db, unique_email(), PASSWORD, 'alumni')
    db.commit()
    return first.id, second.id


class Disconnect:
    def __init__(self):
        self.flag = False

    async def __call__(self) -> bool:
        return self.flag


def test_conversation_key_is_order_independent():
    assert conversation_key('a', 'b') == conversation_key('b', 'a') == 'a:b'


async def test_publish_reaches_subscribers_of_the_key():
    broker = MessageBroker(queue_size=10)
    subscription = broker.subscribe('a:b')
    other = broker.subscribe('a:c')

    assert broker.publish('a:b', {'id': 1}) == 1
    assert await subscription.get(timeout=1) == {'id': 1}
    assert await other.get(timeout=0.01) is None

    broker.unsubscribe(subscription)
    broker.unsubscribe(other)
    assert broker.subscriber_count() == 0
    assert broker.publish('a:b', {'id': 2}) == 0


async def test_publish_from_worker_thread():
    broker = MessageBroker(queue_size=10)
    subscription = broker.subscribe('a:b')

    thread = threading.Thread(target=broker.publish, args=('a:b', {'id': 7}))
    thread.start()
    thread.join()

    assert await subscription.get(timeout=1) == {'id': 7}


async def test_overflow_closes_the_subscriber():
    broker = MessageBroker(queue_size=2)
    subscription = broker.subscribe('a:b')

    for i in range(3):
        broker.publish('a:b', {'id': i})
    await asyncio.sleep(0.01)

    assert subscription.closed
    assert await subscription.get(timeout=1) is CLOSED

    # Nothing is queued once closed
    broker.publish('a:b', {'id': 99})
    await asyncio.sleep(0.01)
    assert await subscription.get(timeout=0.01) is None


async def test_stream_replays_then_follows_live_messages(db, pair):
    first, second = pair
    m1 = send_message(db, first, second, 'one')
    m2 = send_message(db, second, first, 'two')

    broker = MessageBroker(queue_size=10)
    disconnected = Disconnect()
    stream = message_event_stream(second, first, 0, disconnected, broker=broker, keepalive=0.05)

    assert await stream.__anext__() == 'retry: 2000\n\n'
    replayed = [await stream.__anext__(), await stream.__anext__()]
    assert replayed[0].startswith(f'id: {m1.id}\nevent: message\ndata: ')
    assert replayed[1].startswith(f'id: {m2.id}\n')
    assert broker.subscriber_count(conversation_key(first, second)) == 1

    db.expire_all()
    assert db.get(Message, m1.id).status == 'delivered'
    # Messages the viewer sent stay untouched
    assert db.get(Message, m2.id).status == 'sent'

    assert await stream.__anext__() == ': keepalive\n\n'

    # Already replayed ids are skipped
    key = conversation_key(first, second)
    broker.publish(key, serialize_message(m1))
    m3 = send_message(db, first, second, 'three')
    broker.publish(key, serialize_message(m3))

    frame = await stream.__anext__()
    assert frame.startswith(f'id: {m3.id}\n')
    payload = json.loads(frame.split('data: ', 1)[1])
    assert payload['content'] == 'three'
    assert payload['senderId'] == first

    disconnected.flag = True
    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()
    assert broker.subscriber_count() == 0

    db.expire_all()
    assert db.get(Message, m3.id).status == 'delivered'


async def test_stream_resumes_after_offset(db, pair):
    first, second = pair
    messages = [send_message(db, first, second, f'm{i}') for i in range(3)]

    broker = MessageBroker(queue_size=10)
    disconnected = Disconnect()
    stream = message_event_stream(second, first, messages[0].id, disconnected, broker=broker, keepalive=0.05)

    await stream.__anext__()
    frames = [await stream.__anext__(), await stream.__anext__()]
    assert [int(f.split('\n', 1)[0][len('id: '):]) for f in frames] == [m.id for m in messages[1:]]
    await stream.aclose()
    assert broker.subscriber_count() == 0


async def test_lagging_stream_ends(db, pair):
    first, second = pair
    broker = MessageBroker(queue_size=1)
    stream = message_event_stream(second, first, None, Disconnect(), broker=broker, keepalive=1)

    assert await stream.__anext__() == 'retry: 2000\n\n'
    key = conversation_key(first, second)
    for i in range(1, 4):
        broker.publish(key, {'id': i, 'receiverId': first})

    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()
    assert broker.subscriber_count() == 0
