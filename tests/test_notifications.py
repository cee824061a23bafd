"""Tests for event delivery into the notification inbox."""
from oomf.domain.notifications.events import EventType, publish
from oomf.infra.db.repositories.notification_repo import NotificationRepository
from oomf.infra.realtime.ws_manager import ws_manager
from oomf.services.notification_service import NotificationEventPublisher


class FakeWebSocket:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(message)


class BrokenPublisher:
    async def send(self, user_id, event_type, payload):
        raise RuntimeError("broker down")


async def test_event_lands_in_inbox_and_socket(db_session, bob):
    socket = FakeWebSocket()
    await ws_manager.connect(bob, socket, already_accepted=True)
    try:
        publisher = NotificationEventPublisher(db_session)
        await publisher.send(bob, EventType.NEW_COMPLIMENT, {"compliment_id": "c1", "receiver_id": bob})
    finally:
        await ws_manager.disconnect(bob, socket)

    repo = NotificationRepository(db_session)
    [notification] = await repo.list_for_user(bob)
    assert notification.type == EventType.NEW_COMPLIMENT
    assert notification.compliment_id == "c1"
    assert notification.chat_id is None
    assert notification.payload == {"compliment_id": "c1", "receiver_id": bob}
    assert notification.is_read is False
    assert await repo.count_unread(bob) == 1

    [message] = socket.sent
    assert message["type"] == "notification.new"
    assert message["payload"]["compliment_id"] == "c1"
    assert message["payload"]["event"] == "new_compliment"
    assert message["payload"]["id"] == notification.id


async def test_dead_socket_is_dropped(db_session, bob):
    await ws_manager.connect(bob, FakeWebSocket(fail=True), already_accepted=True)
    await NotificationEventPublisher(db_session).send(bob, EventType.SECRET_ADMIRER_MESSAGE, {"chat_id": "x"})
    assert ws_manager.is_connected(bob) is False


async def test_publish_failure_is_not_raised(bob):
    await publish(BrokenPublisher(), bob, EventType.NEW_COMPLIMENT, {"compliment_id": "c1"})
    await publish(None, bob, EventType.NEW_COMPLIMENT, {"compliment_id": "c1"})


async def test_filters_by_type_and_compliment(db_session, bob):
    publisher = NotificationEventPublisher(db_session)
    await publisher.send(bob, EventType.NEW_COMPLIMENT, {"compliment_id": "c1"})
    await publisher.send(bob, EventType.NEW_COMPLIMENT, {"compliment_id": "c2"})
    await publisher.send(bob, EventType.SECRET_ADMIRER_MESSAGE, {"chat_id": "chat-1", "message_id": "m1"})

    repo = NotificationRepository(db_session)
    assert len(await repo.list_for_user(bob, event_type=EventType.NEW_COMPLIMENT)) == 2
    [only] = await repo.list_for_user(bob, compliment_id="c2")
    assert only.payload == {"compliment_id": "c2"}
    [chat_event] = await repo.list_for_user(bob, event_type=EventType.SECRET_ADMIRER_MESSAGE)
    assert chat_event.chat_id == "chat-1"


async def test_mark_read(db_session, alice, bob):
    publisher = NotificationEventPublisher(db_session)
    await publisher.send(bob, EventType.NEW_COMPLIMENT, {"compliment_id": "c1"})
    repo = NotificationRepository(db_session)
    [notification] = await repo.list_for_user(bob)

    assert await repo.mark_read(notification.id, alice) is False
    assert await repo.mark_read("missing", bob) is False
    assert await repo.mark_read(notification.id, bob) is True
    assert await repo.mark_read(notification.id, bob) is True
    assert await repo.count_unread(bob) == 0
    assert await repo.list_for_user(bob, unread_only=True) == []


async def test_mark_all_read_per_compliment(db_session, bob):
    publisher = NotificationEventPublisher(db_session)
    await publisher.send(bob, EventType.NEW_COMPLIMENT, {"compliment_id": "c1"})
    await publisher.send(bob, EventType.NEW_COMPLIMENT, {"compliment_id": "c2"})
    await publisher.send(bob, EventType.NEW_COMPLIMENT, {"compliment_id": "c3"})

    repo = NotificationRepository(db_session)
    assert await repo.mark_all_read(bob, compliment_id="c1") == 1
    assert await repo.count_unread(bob) == 2
    assert await repo.mark_all_read(bob) == 2
    assert await repo.mark_all_read(bob) == 0
