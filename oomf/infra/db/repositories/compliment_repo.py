"""Compliment repository implementation."""
from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from oomf.domain.compliments.models import Compliment, Guess, Reaction, Template
from oomf.domain.compliments.repositories import ComplimentRepository
from oomf.domain.tokens.models import IssuedHint
from oomf.infra.db.models.compliment import ComplimentModel, ComplimentHintModel, GuessModel
from oomf.infra.db.models.template import TemplateModel


class ComplimentRepositoryImpl(ComplimentRepository):
    """Compliment repository implementation.

    Never commits: the service that opened the transaction decides.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _select_with_text(self):
        return select(ComplimentModel, TemplateModel.text).outerjoin(
            TemplateModel, ComplimentModel.template_id == TemplateModel.id
        )

    async def get(self, compliment_id: str) -> Optional[Compliment]:
        """Get compliment by ID."""
        result = await self.session.execute(
            self._select_with_text()
            .where(ComplimentModel.id == compliment_id)
            .execution_options(populate_existing=True)
        )
        row = result.one_or_none()
        if row is None:
            return None
        model, template_text = row
        return model.to_entity(template_text)

    async def get_for_update(self, compliment_id: str) -> Optional[Compliment]:
        """Get compliment by ID with a row lock (no-op on SQLite)."""
        result = await self.session.execute(
            select(ComplimentModel)
            .where(ComplimentModel.id == compliment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def create(self, compliment: Compliment) -> Compliment:
        """Create a new compliment."""
        model = ComplimentModel.from_entity(compliment)
        self.session.add(model)
        await self.session.flush()
        return model.to_entity(compliment.template_text)

    async def compare_and_set(self, compliment: Compliment, expected_version: int) -> bool:
        result = await self.session.execute(
            update(ComplimentModel)
            .where(
                ComplimentModel.id == compliment.id,
                ComplimentModel.version == expected_version,
            )
            .values(
                is_revealed=compliment.is_revealed,
                reveal_method=compliment.reveal_method,
                revealed_at=compliment.revealed_at,
                guesses_remaining=compliment.guesses_remaining,
                hints_used=compliment.hints_used,
                version=compliment.version,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def mark_read(self, compliment_id: str, read_at: datetime) -> bool:
        result = await self.session.execute(
            update(ComplimentModel)
            .where(ComplimentModel.id == compliment_id, ComplimentModel.is_read.is_(False))
            .values(is_read=True, read_at=read_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def set_reaction(self, compliment_id: str, reaction: Optional[Reaction]) -> None:
        # Not a disclosure change, so no version bump.
        await self.session.execute(
            update(ComplimentModel)
            .where(ComplimentModel.id == compliment_id)
            .values(reaction=reaction)
            .execution_options(synchronize_session=False)
        )

    async def list_received(self, receiver_id: str, limit: int = 50, offset: int = 0) -> list[Compliment]:
        """Compliments received by a user, newest first."""
        result = await self.session.execute(
            self._select_with_text()
            .where(ComplimentModel.receiver_id == receiver_id)
            .order_by(ComplimentModel.created_at.desc())
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        return [model.to_entity(text) for model, text in result.all()]

    async def list_sent(self, sender_id: str, limit: int = 50, offset: int = 0) -> list[Compliment]:
        """Compliments sent by a user, newest first."""
        result = await self.session.execute(
            self._select_with_text()
            .where(ComplimentModel.sender_id == sender_id)
            .order_by(ComplimentModel.created_at.desc())
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        return [model.to_entity(text) for model, text in result.all()]

    # Templates
    async def get_template(self, template_id: str) -> Optional[Template]:
        result = await self.session.execute(select(TemplateModel).where(TemplateModel.id == template_id))
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def list_templates(self, category: Optional[str] = None) -> list[Template]:
        """Active templates, most used first."""
        q = select(TemplateModel).where(TemplateModel.is_active.is_(True))
        if category is not None:
            q = q.where(TemplateModel.category == category)
        result = await self.session.execute(q.order_by(TemplateModel.usage_count.desc(), TemplateModel.id))
        return [m.to_entity() for m in result.scalars().all()]

    async def increment_template_usage(self, template_id: str) -> None:
        await self.session.execute(
            update(TemplateModel)
            .where(TemplateModel.id == template_id)
            .values(usage_count=TemplateModel.usage_count + 1)
            .execution_options(synchronize_session=False)
        )

    # Guesses
    async def add_guess(self, guess: Guess) -> Guess:
        model = GuessModel.from_entity(guess)
        self.session.add(model)
        await self.session.flush()
        return model.to_entity()

    async def list_guesses(self, compliment_id: str) -> list[Guess]:
        result = await self.session.execute(
            select(GuessModel)
            .where(GuessModel.compliment_id == compliment_id)
            .order_by(GuessModel.created_at)
        )
        return [m.to_entity() for m in result.scalars().all()]

    # Hints
    async def add_hint(self, hint: IssuedHint) -> IssuedHint:
        model = ComplimentHintModel.from_entity(hint)
        self.session.add(model)
        await self.session.flush()
        return model.to_entity()

    async def list_hints(self, compliment_id: str) -> list[IssuedHint]:
        result = await self.session.execute(
            select(ComplimentHintModel)
            .where(ComplimentHintModel.compliment_id == compliment_id)
            .order_by(ComplimentHintModel.hint_number)
        )
        return [m.to_entity() for m in result.scalars().all()]
