"""Secret Admirer chat services."""
from datetime import datetime
from typing import Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from oomf.domain.common.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from oomf.domain.compliments.disclosure import disclose
from oomf.domain.compliments.models import RevealMethod
from oomf.domain.compliments.repositories import ComplimentRepository
from oomf.domain.notifications.events import EventPublisher, EventType, publish
from oomf.domain.policy.rate_limit import RateLimitAction, RateLimitPolicy
from oomf.domain.scoring.repositories import ScoringSink
from oomf.domain.scoring.rules import EconomyRules
from oomf.domain.secret_admirer.models import (
    MASKED_SENDER_DISPLAY_NAME,
    MASKED_SENDER_USERNAME,
    ChatParticipant,
    ChatSummary,
    ChatView,
    MessageView,
    ReplyResult,
    SecretAdmirerChat,
    SecretAdmirerMessage,
    messages_until_reveal,
    record_message,
)
from oomf.domain.secret_admirer.repositories import SecretAdmirerRepository
from oomf.infra.db.session import atomic

logger = logging.getLogger(__name__)

# Compare-and-set attempts for a reply before giving up with ConflictError.
_MAX_REPLY_ATTEMPTS = 3


class _StaleChatError(Exception):
    pass


class SecretAdmirerService:
    """Anonymous two-party chat that reveals the admirer after enough replies."""

    def __init__(
        self,
        repo: SecretAdmirerRepository,
        compliments: ComplimentRepository,
        scoring: ScoringSink,
        db: AsyncSession,
        rate_limit: Optional[RateLimitPolicy] = None,
        events: Optional[EventPublisher] = None,
        rules: Optional[EconomyRules] = None,
    ):
        self.repo = repo
        self.compliments = compliments
        self.scoring = scoring
        self.db = db
        self.rate_limit = rate_limit
        self.events = events
        self.rules = rules or EconomyRules()

    async def send_reply(self, chat_id: str, sender_id: str, body: str) -> ReplyResult:
        """Append a message and advance the reveal counter.

        Reaching the threshold reveals the chat and, if it is still hidden,
        the originating compliment (reveal method ``exchange``) in the same
        transaction.
        """
        chat = await self._get_participant_chat(chat_id, sender_id)
        text = (body or "").strip()
        if not (1 <= len(text) <= self.rules.message_max_length):
            raise ValidationError(f"Message must be between 1 and {self.rules.message_max_length} characters")
        if self.rate_limit is not None:
            await self.rate_limit.enforce(RateLimitAction.SECRET_ADMIRER_REPLY, sender_id)

        for attempt in range(1, _MAX_REPLY_ATTEMPTS + 1):
            try:
                updated, message, just_revealed = await self._append(chat_id, sender_id, text)
                break
            except _StaleChatError:
                logger.info("Reply to chat %s lost a concurrent update (attempt %s)", chat_id, attempt)
        else:
            raise ConflictError("This chat is busy. Try again.")

        other_id = chat.other_party(sender_id)
        if just_revealed:
            payload = {"chat_id": chat_id, "compliment_id": updated.compliment_id}
            await publish(self.events, updated.receiver_id, EventType.SECRET_ADMIRER_REVEALED, payload)
            await publish(self.events, updated.sender_id, EventType.SECRET_ADMIRER_REVEALED, payload)
        else:
            await publish(
                self.events,
                other_id,
                EventType.SECRET_ADMIRER_MESSAGE,
                {"chat_id": chat_id, "message_id": message.id},
            )
        return ReplyResult(
            message=message,
            exchange_count=updated.exchange_count,
            is_revealed=updated.is_revealed,
            just_revealed=just_revealed,
            messages_until_reveal=messages_until_reveal(updated, self.rules.exchange_reveal_threshold),
        )

    async def _append(
        self, chat_id: str, sender_id: str, text: str
    ) -> tuple[SecretAdmirerChat, SecretAdmirerMessage, bool]:
        now = datetime.utcnow()
        async with atomic(self.db):
            chat = await self.repo.get_chat_for_update(chat_id)
            if chat is None:
                raise NotFoundError("Chat", chat_id)
            updated, just_revealed = record_message(chat, self.rules.exchange_reveal_threshold, now)
            if not await self.repo.compare_and_set(updated, expected_version=chat.version):
                raise _StaleChatError(chat_id)
            message = await self.repo.add_message(SecretAdmirerMessage.create(chat_id, sender_id, text, now=now))
            if just_revealed:
                await self._propagate_reveal(updated.compliment_id, now)
        if just_revealed:
            logger.info("Secret Admirer chat %s revealed after %s replies", chat_id, updated.exchange_count)
        return updated, message, just_revealed

    async def _propagate_reveal(self, compliment_id: str, now: datetime) -> None:
        compliment = await self.compliments.get_for_update(compliment_id)
        if compliment is None or compliment.is_revealed:
            return
        revealed = disclose(compliment, RevealMethod.EXCHANGE, now)
        if not await self.compliments.compare_and_set(revealed, expected_version=compliment.version):
            raise _StaleChatError(compliment_id)

    async def get_chat(self, chat_id: str, viewer_id: str) -> ChatView:
        """Chat with messages; the other party's messages are marked read."""
        chat = await self._get_participant_chat(chat_id, viewer_id)
        async with atomic(self.db):
            await self.repo.mark_read(chat_id, viewer_id)
        return await self._chat_view(chat, viewer_id)

    async def get_chat_by_compliment(self, compliment_id: str, viewer_id: str) -> ChatView:
        chat = await self.repo.get_chat_by_compliment(compliment_id)
        if chat is None:
            raise NotFoundError("Chat", compliment_id)
        return await self.get_chat(chat.id, viewer_id)

    async def list_chats(self, user_id: str) -> list[ChatSummary]:
        summaries = []
        for chat in await self.repo.list_chats_for_user(user_id):
            last = await self.repo.get_last_message(chat.id)
            other_id = chat.other_party(user_id)
            known = await self._identity_known(chat)
            if other_id == chat.sender_id:
                other = await self._sender_participant(chat, user_id, known)
            else:
                other = await self._participant(other_id)
            summaries.append(
                ChatSummary(
                    chat=chat,
                    other_user=other,
                    last_message=self._message_view(chat, last, user_id, known) if last else None,
                    unread_count=await self.repo.count_unread(chat.id, user_id),
                    messages_until_reveal=messages_until_reveal(chat, self.rules.exchange_reveal_threshold),
                )
            )
        return summaries

    async def mark_messages_read(self, chat_id: str, reader_id: str) -> int:
        await self._get_participant_chat(chat_id, reader_id)
        async with atomic(self.db):
            return await self.repo.mark_read(chat_id, reader_id)

    async def _get_participant_chat(self, chat_id: str, user_id: str) -> SecretAdmirerChat:
        chat = await self.repo.get_chat(chat_id)
        if chat is None:
            raise NotFoundError("Chat", chat_id)
        if not chat.is_participant(user_id):
            raise AuthorizationError("Not a participant in this chat")
        return chat

    async def _chat_view(self, chat: SecretAdmirerChat, viewer_id: str) -> ChatView:
        messages = await self.repo.list_messages(chat.id)
        known = await self._identity_known(chat)
        return ChatView(
            chat=chat,
            sender=await self._sender_participant(chat, viewer_id, known),
            # The receiver is known to both parties from the start.
            receiver=await self._participant(chat.receiver_id),
            messages=[self._message_view(chat, m, viewer_id, known) for m in messages],
            messages_until_reveal=messages_until_reveal(chat, self.rules.exchange_reveal_threshold),
        )

    async def _identity_known(self, chat: SecretAdmirerChat) -> bool:
        """The admirer is known once the chat or its compliment has been revealed by any route."""
        if chat.is_revealed:
            return True
        compliment = await self.compliments.get(chat.compliment_id)
        return compliment is not None and compliment.is_revealed

    async def _sender_participant(
        self, chat: SecretAdmirerChat, viewer_id: str, identity_known: bool
    ) -> ChatParticipant:
        if identity_known or viewer_id == chat.sender_id:
            return await self._participant(chat.sender_id)
        return ChatParticipant(
            id=None,
            username=MASKED_SENDER_USERNAME,
            display_name=MASKED_SENDER_DISPLAY_NAME,
            avatar_url=None,
        )

    async def _participant(self, user_id: str) -> ChatParticipant:
        profile = await self.scoring.get_public_profile(user_id)
        if profile is None:
            raise NotFoundError("User", user_id)
        return ChatParticipant(
            id=profile.id,
            username=profile.username,
            display_name=profile.display_name,
            avatar_url=profile.avatar_url,
        )

    @staticmethod
    def _message_view(
        chat: SecretAdmirerChat, message: SecretAdmirerMessage, viewer_id: str, identity_known: bool
    ) -> MessageView:
        is_own = message.sender_id == viewer_id
        hide_author = not identity_known and not is_own and message.sender_id == chat.sender_id
        return MessageView(
            id=message.id,
            sender_id=None if hide_author else message.sender_id,
            body=message.body,
            is_read=message.is_read,
            is_own=is_own,
            created_at=message.created_at,
        )
