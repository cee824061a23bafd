"""Compliment ledger services."""
from datetime import datetime
from typing import Optional, Union
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from oomf.domain.common.errors import AuthorizationError, DomainError, NotFoundError, ValidationError
from oomf.domain.common.types import generate_id
from oomf.domain.compliments.models import (
    Compliment,
    ComplimentOrigin,
    ComplimentView,
    Reaction,
    Template,
)
from oomf.domain.compliments.repositories import ComplimentRepository
from oomf.domain.identity.repositories import IdentityGate, can_interact
from oomf.domain.notifications.events import EventPublisher, EventType, publish
from oomf.domain.policy.rate_limit import RateLimitAction, RateLimitPolicy
from oomf.domain.scoring.models import Stat, TokenReason
from oomf.domain.scoring.repositories import ScoringSink
from oomf.domain.scoring.rules import EconomyRules
from oomf.domain.secret_admirer.models import SecretAdmirerChat, SecretAdmirerMessage
from oomf.domain.secret_admirer.repositories import SecretAdmirerRepository
from oomf.infra.db.session import atomic

logger = logging.getLogger(__name__)

SECRET_ADMIRER_EMOJI = "💌"


class ComplimentService:
    """Creates compliments and serves them to their two parties."""

    def __init__(
        self,
        repo: ComplimentRepository,
        scoring: ScoringSink,
        identity: IdentityGate,
        chats: SecretAdmirerRepository,
        db: AsyncSession,
        rate_limit: Optional[RateLimitPolicy] = None,
        events: Optional[EventPublisher] = None,
        rules: Optional[EconomyRules] = None,
    ):
        self.repo = repo
        self.scoring = scoring
        self.identity = identity
        self.chats = chats
        self.db = db
        self.rate_limit = rate_limit
        self.events = events
        self.rules = rules or EconomyRules()

    async def send_compliment(
        self,
        sender_id: str,
        receiver_id: str,
        template_id: Optional[str] = None,
        custom_text: Optional[str] = None,
    ) -> Compliment:
        """Send a template compliment, or a Secret Admirer compliment when ``custom_text`` is given.

        Creation, the token debit, the paired chat and all point and counter
        changes commit together or not at all.
        """
        if (template_id is None) == (custom_text is None):
            raise ValidationError("Provide exactly one of template_id or custom_text")
        if sender_id == receiver_id:
            raise ValidationError("You cannot send a compliment to yourself")
        if not await can_interact(self.identity, sender_id, receiver_id):
            raise AuthorizationError("You can only send compliments to friends")
        if custom_text is not None:
            custom_text = self._validate_custom_text(custom_text)
        if self.rate_limit is not None:
            await self.rate_limit.enforce(RateLimitAction.SEND_COMPLIMENT, sender_id)
        try:
            compliment = await self._create(sender_id, receiver_id, template_id, custom_text)
        except DomainError:
            # Sends rejected inside the transaction do not use up the quota.
            if self.rate_limit is not None:
                await self.rate_limit.release(RateLimitAction.SEND_COMPLIMENT, sender_id)
            raise

        logger.info(
            "Compliment %s sent (%s) to user %s",
            compliment.id,
            compliment.origin.value,
            receiver_id,
        )
        # The receiver must not learn the sender from the event.
        await publish(
            self.events,
            receiver_id,
            EventType.NEW_COMPLIMENT,
            {"compliment_id": compliment.id, "receiver_id": receiver_id, "origin": compliment.origin.value},
        )
        return compliment

    async def _create(
        self,
        sender_id: str,
        receiver_id: str,
        template_id: Optional[str],
        custom_text: Optional[str],
    ) -> Compliment:
        is_secret_admirer = custom_text is not None
        now = datetime.utcnow()
        async with atomic(self.db):
            template: Optional[Template] = None
            if template_id is not None:
                template = await self.repo.get_template(template_id)
                if template is None or not template.is_active:
                    raise NotFoundError("Template", template_id)

            compliment = await self.repo.create(
                Compliment(
                    id=generate_id(),
                    sender_id=sender_id,
                    receiver_id=receiver_id,
                    template_id=template_id,
                    custom_text=custom_text,
                    emoji=template.emoji if template else SECRET_ADMIRER_EMOJI,
                    category=template.category if template else None,
                    origin=ComplimentOrigin.SECRET_ADMIRER if is_secret_admirer else ComplimentOrigin.NORMAL,
                    tokens_spent=self.rules.secret_admirer_cost if is_secret_admirer else 0,
                    is_read=False,
                    read_at=None,
                    is_revealed=False,
                    reveal_method=None,
                    revealed_at=None,
                    guesses_remaining=self.rules.guess_limit,
                    hints_used=0,
                    version=0,
                    created_at=now,
                    template_text=template.text if template else None,
                )
            )

            if is_secret_admirer:
                await self.scoring.debit_tokens(
                    sender_id,
                    self.rules.secret_admirer_cost,
                    TokenReason.SECRET_ADMIRER,
                    compliment_id=compliment.id,
                )
                chat = await self.chats.create_chat(
                    SecretAdmirerChat.create(compliment.id, sender_id, receiver_id, now=now)
                )
                await self.chats.add_message(
                    SecretAdmirerMessage.create(chat.id, sender_id, custom_text, now=now)
                )
            else:
                await self.repo.increment_template_usage(template_id)

            await self._apply_send_scoring(sender_id, receiver_id, is_secret_admirer, compliment.id, now)
        return compliment

    def _validate_custom_text(self, custom_text: str) -> str:
        text = custom_text.strip()
        if not (self.rules.custom_text_min_length <= len(text) <= self.rules.custom_text_max_length):
            raise ValidationError(
                f"Message must be between {self.rules.custom_text_min_length} and "
                f"{self.rules.custom_text_max_length} characters"
            )
        return text

    async def _apply_send_scoring(
        self,
        sender_id: str,
        receiver_id: str,
        is_secret_admirer: bool,
        compliment_id: str,
        now: datetime,
    ) -> None:
        sent = await self.scoring.increment_stat(sender_id, Stat.COMPLIMENTS_SENT)
        await self.scoring.add_points(
            sender_id,
            self.rules.points_secret_admirer_send if is_secret_admirer else self.rules.points_send,
        )
        if self.rules.send_reward_every and sent % self.rules.send_reward_every == 0:
            await self.scoring.credit_tokens(
                sender_id,
                self.rules.send_reward_tokens,
                TokenReason.SEND_REWARD,
                compliment_id=compliment_id,
            )
        await self.scoring.increment_stat(receiver_id, Stat.COMPLIMENTS_RECEIVED)
        await self.scoring.add_points(receiver_id, self.rules.points_receive)
        await self.scoring.record_activity(sender_id, now.date())

    async def mark_read(self, compliment_id: str, receiver_id: str) -> Compliment:
        """Idempotent read receipt; only the receiver may set it."""
        compliment = await self.repo.get(compliment_id)
        if compliment is None:
            raise NotFoundError("Compliment", compliment_id)
        if compliment.receiver_id != receiver_id:
            raise AuthorizationError("Only the receiver can mark a compliment as read")
        if compliment.is_read:
            return compliment

        async with atomic(self.db):
            await self.repo.mark_read(compliment_id, datetime.utcnow())
        return await self.repo.get(compliment_id)

    async def react(
        self,
        compliment_id: str,
        receiver_id: str,
        reaction: Optional[Union[Reaction, str]],
    ) -> Compliment:
        """Set the receiver's reaction, or clear it with None."""
        if reaction is not None and not isinstance(reaction, Reaction):
            try:
                reaction = Reaction(reaction)
            except ValueError:
                raise ValidationError("Invalid reaction. Must be fire, heart, laugh, cry, or crown") from None
        compliment = await self.repo.get(compliment_id)
        if compliment is None:
            raise NotFoundError("Compliment", compliment_id)
        if compliment.receiver_id != receiver_id:
            raise AuthorizationError("You can only react to compliments you received")

        async with atomic(self.db):
            await self.repo.set_reaction(compliment_id, reaction)
        logger.info("Reaction on compliment %s set to %s", compliment_id, reaction.value if reaction else None)
        return await self.repo.get(compliment_id)

    async def get_compliment(self, compliment_id: str, viewer_id: str) -> ComplimentView:
        compliment = await self.repo.get(compliment_id)
        if compliment is None:
            raise NotFoundError("Compliment", compliment_id)
        if viewer_id not in (compliment.sender_id, compliment.receiver_id):
            raise AuthorizationError("Not a party to this compliment")
        return await self._view(compliment, viewer_id)

    async def list_received(self, user_id: str, limit: int = 50, offset: int = 0) -> list[ComplimentView]:
        compliments = await self.repo.list_received(user_id, limit=limit, offset=offset)
        return [await self._view(c, user_id) for c in compliments]

    async def list_sent(self, user_id: str, limit: int = 50, offset: int = 0) -> list[ComplimentView]:
        compliments = await self.repo.list_sent(user_id, limit=limit, offset=offset)
        return [await self._view(c, user_id) for c in compliments]

    async def list_templates(self, category: Optional[str] = None) -> list[Template]:
        return await self.repo.list_templates(category)

    async def _view(self, compliment: Compliment, viewer_id: str) -> ComplimentView:
        chat_id = None
        if compliment.is_secret_admirer:
            chat = await self.chats.get_chat_by_compliment(compliment.id)
            chat_id = chat.id if chat else None
        if not compliment.sender_visible_to(viewer_id):
            return ComplimentView(compliment=compliment, sender_id=None, chat_id=chat_id)
        sender = None
        if compliment.is_revealed:
            sender = await self.scoring.get_public_profile(compliment.sender_id)
        return ComplimentView(
            compliment=compliment,
            sender_id=compliment.sender_id,
            sender=sender,
            chat_id=chat_id,
        )
