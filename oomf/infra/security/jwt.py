"""JWT helpers for bearer tokens issued by the auth service."""
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from jose import JWTError, jwt

from oomf.settings import settings

logger = logging.getLogger(__name__)


def create_access_token(user_id: str, expires_minutes: Optional[int] = None) -> str:
    """Sign an access token for ``user_id`` (used by tooling and tests)."""
    minutes = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    payload = {
        "sub": user_id,
        "type": "access",
        "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Return the token claims, or None when the signature or expiry is invalid."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        logger.debug("Rejected token: %s", e)
        return None
