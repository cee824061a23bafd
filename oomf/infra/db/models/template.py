"""Compliment template database model."""
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text

from oomf.infra.db.base import Base
from oomf.domain.compliments.models import Template


class TemplateModel(Base):
    """Curated compliment text the sender picks from."""

    __tablename__ = "templates"

    id = Column(String, primary_key=True)
    text = Column(Text, nullable=False)
    emoji = Column(String, nullable=False)
    category = Column(String, nullable=False)  # vibes, funny, looks, smart, skills, trust
    usage_count = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def to_entity(self) -> Template:
        """Convert to domain entity."""
        return Template(
            id=self.id,
            text=self.text,
            emoji=self.emoji,
            category=self.category,
            usage_count=self.usage_count,
            is_active=self.is_active,
        )
