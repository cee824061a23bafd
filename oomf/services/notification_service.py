"""
Event delivery: every engine event becomes an inbox row, a socket message and a push.

Engine services publish through ``NotificationEventPublisher`` after their
transaction commits; nothing here can undo a mutation.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from oomf.domain.notifications.events import EventPublisher, EventType
from oomf.infra.db.models.notification import NotificationModel
from oomf.infra.db.repositories.notification_repo import NotificationRepository
from oomf.infra.push.sender import send_push_to_user
from oomf.infra.realtime.ws_manager import ws_manager

logger = logging.getLogger(__name__)

# Copy never names the sender: events for anonymous compliments carry ids only.
EVENT_COPY: dict[EventType, tuple[str, str]] = {
    EventType.NEW_COMPLIMENT: ("New compliment 💛", "Someone just sent you a compliment. Can you guess who?"),
    EventType.SECRET_ADMIRER_MESSAGE: ("Secret Admirer 💌", "You have a new message in your Secret Admirer chat."),
    EventType.SECRET_ADMIRER_REVEALED: ("Secret Admirer revealed 🎉", "Identities in your Secret Admirer chat are now revealed."),
}


def socket_message(notification: NotificationModel) -> dict:
    """Frame pushed to open sockets; the event's ids sit beside the inbox fields."""
    return {
        "type": "notification.new",
        "payload": {
            **(notification.payload or {}),
            "id": notification.id,
            "event": notification.type.value,
            "title": notification.title,
            "message": notification.message,
            "created_at": notification.created_at.isoformat(),
        },
    }


class NotificationEventPublisher(EventPublisher):
    """Delivers engine events to one user over every channel they have."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def send(self, user_id: str, event_type: EventType, payload: dict) -> None:
        title, message = EVENT_COPY[event_type]
        notification = await NotificationRepository(self.session).add(
            user_id, event_type, title, message, payload=payload
        )
        await ws_manager.send_to_user(user_id, socket_message(notification))
        try:
            await send_push_to_user(
                self.session,
                user_id,
                title,
                message,
                {"notification_id": notification.id, "event": event_type.value, **payload},
            )
        except Exception as e:
            logger.warning("Push send failed for user %s: %s", user_id, e)
