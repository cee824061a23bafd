"""Token economy services: hints, paid reveals and balances."""
from datetime import datetime
from typing import Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from oomf.domain.common.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from oomf.domain.compliments.disclosure import check_hint_number, disclose, ensure_not_revealed, unlock_hint
from oomf.domain.compliments.models import Compliment, RevealMethod
from oomf.domain.compliments.repositories import ComplimentRepository
from oomf.domain.guessing.services import StaleComplimentError
from oomf.domain.scoring.models import TokenReason, TokenTransaction
from oomf.domain.scoring.repositories import ScoringSink
from oomf.domain.scoring.rules import EconomyRules
from oomf.domain.tokens.hints import HINT_TYPES, build_hint
from oomf.domain.tokens.models import HintResult, IssuedHint, RevealResult
from oomf.infra.db.session import atomic

logger = logging.getLogger(__name__)


class TokenService:
    """Balance-gated purchases of information about a compliment's sender.

    Each purchase debits the receiver and changes the compliment in the same
    transaction: any failure leaves both the balance and the compliment as
    they were.
    """

    def __init__(
        self,
        repo: ComplimentRepository,
        scoring: ScoringSink,
        db: AsyncSession,
        rules: Optional[EconomyRules] = None,
    ):
        self.repo = repo
        self.scoring = scoring
        self.db = db
        self.rules = rules or EconomyRules()

    async def get_hint(self, compliment_id: str, receiver_id: str, hint_number: int) -> HintResult:
        """Buy hint ``hint_number``. Hints unlock strictly in order 1, 2, 3."""
        if hint_number not in HINT_TYPES:
            raise ValidationError("Invalid hint number. Must be 1, 2, or 3.")
        try:
            async with atomic(self.db):
                compliment = await self._get_owned_for_update(compliment_id, receiver_id)
                check_hint_number(compliment, hint_number)
                sender = await self.scoring.get_stats(compliment.sender_id)
                if sender is None:
                    raise NotFoundError("User", compliment.sender_id)

                tokens_remaining = await self.scoring.debit_tokens(
                    receiver_id, self.rules.hint_cost, TokenReason.HINT, compliment_id=compliment_id
                )
                updated = unlock_hint(compliment, hint_number)
                if not await self.repo.compare_and_set(updated, expected_version=compliment.version):
                    raise StaleComplimentError(compliment_id)
                hint = await self.repo.add_hint(
                    build_hint(compliment_id, hint_number, sender, now=datetime.utcnow())
                )
        except StaleComplimentError:
            await self._raise_for_hint_state(compliment_id, hint_number)

        logger.info("Hint %s bought for compliment %s", hint_number, compliment_id)
        return HintResult(hint=hint, tokens_remaining=tokens_remaining)

    async def _raise_for_hint_state(self, compliment_id: str, hint_number: int) -> None:
        current = await self.repo.get(compliment_id)
        if current is None:
            raise NotFoundError("Compliment", compliment_id)
        # Re-running the sequence check reports AlreadyRevealed or AlreadyPurchased.
        check_hint_number(current, hint_number)
        raise ConflictError("This compliment changed while you were acting on it. Try again.")

    async def list_hints(self, compliment_id: str, receiver_id: str) -> list[IssuedHint]:
        """Hints already bought; re-reading them costs nothing."""
        await self._get_owned(compliment_id, receiver_id)
        return await self.repo.list_hints(compliment_id)

    async def reveal_with_tokens(self, compliment_id: str, receiver_id: str) -> RevealResult:
        """Pay to disclose the sender outright."""
        try:
            async with atomic(self.db):
                compliment = await self._get_owned_for_update(compliment_id, receiver_id)
                ensure_not_revealed(compliment)
                tokens_remaining = await self.scoring.debit_tokens(
                    receiver_id, self.rules.reveal_cost, TokenReason.REVEAL, compliment_id=compliment_id
                )
                updated = disclose(compliment, RevealMethod.TOKENS, datetime.utcnow())
                if not await self.repo.compare_and_set(updated, expected_version=compliment.version):
                    raise StaleComplimentError(compliment_id)
                sender = await self.scoring.get_public_profile(compliment.sender_id)
                if sender is None:
                    raise NotFoundError("User", compliment.sender_id)
        except StaleComplimentError:
            await self._raise_for_reveal_state(compliment_id)

        logger.info("Compliment %s revealed with tokens", compliment_id)
        return RevealResult(
            sender_id=sender.id,
            username=sender.username,
            display_name=sender.display_name,
            avatar_url=sender.avatar_url,
            tokens_remaining=tokens_remaining,
        )

    async def _raise_for_reveal_state(self, compliment_id: str) -> None:
        current = await self.repo.get(compliment_id)
        if current is None:
            raise NotFoundError("Compliment", compliment_id)
        ensure_not_revealed(current)
        raise ConflictError("This compliment changed while you were acting on it. Try again.")

    async def get_balance(self, user_id: str) -> int:
        stats = await self.scoring.get_stats(user_id)
        if stats is None:
            raise NotFoundError("User", user_id)
        return stats.tokens

    async def list_transactions(self, user_id: str, limit: int = 50) -> list[TokenTransaction]:
        return await self.scoring.list_transactions(user_id, limit=limit)

    async def credit_purchase(self, user_id: str, amount: int) -> int:
        """Credit tokens bought in-store. Receipt validation happens upstream."""
        if amount <= 0:
            raise ValidationError("Token amount must be positive")
        async with atomic(self.db):
            balance = await self.scoring.credit_tokens(user_id, amount, TokenReason.PURCHASE)
        logger.info("Credited %s purchased tokens to user %s", amount, user_id)
        return balance

    async def _get_owned(self, compliment_id: str, receiver_id: str) -> Compliment:
        compliment = await self.repo.get(compliment_id)
        return self._check_receiver(compliment, compliment_id, receiver_id)

    async def _get_owned_for_update(self, compliment_id: str, receiver_id: str) -> Compliment:
        compliment = await self.repo.get_for_update(compliment_id)
        return self._check_receiver(compliment, compliment_id, receiver_id)

    @staticmethod
    def _check_receiver(compliment: Optional[Compliment], compliment_id: str, receiver_id: str) -> Compliment:
        if compliment is None:
            raise NotFoundError("Compliment", compliment_id)
        if compliment.receiver_id != receiver_id:
            raise AuthorizationError("Only the receiver can spend tokens on this compliment")
        return compliment
