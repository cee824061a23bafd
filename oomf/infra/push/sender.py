"""FCM push delivery for inbox events."""
import logging
import os
from typing import Any

import firebase_admin
from firebase_admin import credentials, messaging
from sqlalchemy.ext.asyncio import AsyncSession

from oomf.infra.db.repositories.device_repo import DeviceRepository
from oomf.settings import settings

logger = logging.getLogger(__name__)

_firebase_app = None


def _get_firebase_app():
    """Firebase app, created on first use. None while push is switched off."""
    global _firebase_app
    if _firebase_app is not None:
        return _firebase_app
    if not settings.push_enabled:
        return None
    cred_path = settings.google_application_credentials or os.environ.get("GOOGLE_APPLICATION_CREDENTIALS", "")
    if not cred_path:
        logger.debug("Push disabled: no GOOGLE_APPLICATION_CREDENTIALS")
        return None
    try:
        _firebase_app = firebase_admin.initialize_app(credentials.Certificate(cred_path))
    except (ValueError, OSError) as e:
        logger.warning("Firebase init failed (push disabled): %s", e)
        return None
    return _firebase_app


async def send_push_to_user(
    session: AsyncSession,
    user_id: str,
    title: str,
    body: str,
    data: dict[str, Any],
) -> int:
    """Push to each registered device; returns the number delivered.

    Tokens FCM no longer recognises are unregistered on the way.
    """
    app = _get_firebase_app()
    if app is None:
        return 0
    repo = DeviceRepository(session)
    devices = await repo.list_for_user(user_id)
    if not devices:
        logger.debug("No push tokens for user %s", user_id)
        return 0
    # FCM data values must be strings
    data_str = {k: str(v) for k, v in data.items() if v is not None}
    sent = 0
    for device in devices:
        try:
            messaging.send(
                messaging.Message(
                    notification=messaging.Notification(title=title, body=body),
                    data=data_str,
                    token=device.push_token,
                ),
                app=app,
            )
            sent += 1
        except messaging.UnregisteredError:
            logger.info("Dropping stale %s push token for user %s", device.platform.value, user_id)
            await repo.unregister(user_id, device.push_token)
        except Exception as e:
            logger.warning("Push send failed for %s token %s...: %s", device.platform.value, device.push_token[:20], e)
    return sent
