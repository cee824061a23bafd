"""User domain models."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class User(BaseModel):
    """Authenticated user as seen by the API layer."""

    id: str
    username: str
    display_name: str
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime
