"""Events emitted after successful engine mutations."""
from enum import Enum
from typing import Optional, Protocol
import logging

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Event types consumed by the notification subsystem."""
    NEW_COMPLIMENT = "new_compliment"
    SECRET_ADMIRER_MESSAGE = "secret_admirer_message"
    SECRET_ADMIRER_REVEALED = "secret_admirer_revealed"


class EventPublisher(Protocol):
    """Event publisher protocol."""

    async def send(self, user_id: str, event_type: EventType, payload: dict) -> None:
        """Deliver an event to one user."""
        ...


async def publish(
    publisher: Optional[EventPublisher],
    user_id: str,
    event_type: EventType,
    payload: dict,
) -> None:
    """Send an event after commit; delivery failures never undo the mutation."""
    if publisher is None:
        return
    try:
        await publisher.send(user_id, event_type, payload)
    except Exception as e:
        logger.warning("Failed to publish %s to user %s: %s", event_type.value, user_id, e, exc_info=True)
