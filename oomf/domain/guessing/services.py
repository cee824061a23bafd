"""Guess engine: the three-attempt sender guessing game."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from oomf.domain.common.errors import (
    AlreadyRevealedError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    OutOfGuessesError,
)
from oomf.domain.common.types import generate_id
from oomf.domain.compliments.disclosure import DisclosureState, consume_guess, disclose, disclosure_state
from oomf.domain.compliments.models import Compliment, Guess, RevealMethod
from oomf.domain.compliments.repositories import ComplimentRepository
from oomf.domain.policy.rate_limit import RateLimitAction, RateLimitPolicy
from oomf.domain.scoring.models import PublicProfile, Stat
from oomf.domain.scoring.repositories import ScoringSink
from oomf.domain.scoring.rules import EconomyRules
from oomf.infra.db.session import atomic

logger = logging.getLogger(__name__)


class StaleComplimentError(Exception):
    """Another transaction changed the compliment between read and write."""


@dataclass
class GuessResult:
    is_correct: bool
    guesses_remaining: int
    is_revealed: bool
    sender: Optional[PublicProfile] = None  # only set on a correct guess


async def raise_for_current_state(repo: ComplimentRepository, compliment_id: str) -> None:
    """After losing a compare-and-set, report the state the winner left behind."""
    current = await repo.get(compliment_id)
    if current is None:
        raise NotFoundError("Compliment", compliment_id)
    if current.is_revealed:
        raise AlreadyRevealedError()
    if current.guesses_remaining <= 0:
        raise OutOfGuessesError()
    raise ConflictError("This compliment changed while you were acting on it. Try again.")


class GuessService:
    """Guess service for business logic."""

    def __init__(
        self,
        repo: ComplimentRepository,
        scoring: ScoringSink,
        db: AsyncSession,
        rate_limit: Optional[RateLimitPolicy] = None,
        rules: Optional[EconomyRules] = None,
    ):
        self.repo = repo
        self.scoring = scoring
        self.db = db
        self.rate_limit = rate_limit
        self.rules = rules or EconomyRules()

    async def guess(self, compliment_id: str, guesser_id: str, guessed_user_id: str) -> GuessResult:
        """Spend one guess on identifying the sender.

        The guess row, the decremented counter, a possible reveal and the
        points for a correct guess are committed as one unit. A caller that
        passed the submission check but loses a race against another guess or
        a token reveal gets OutOfGuesses or AlreadyRevealed; its attempt is
        still recorded as a Guess row, but the compliment is left as the
        winner committed it.
        """
        snapshot = await self.repo.get(compliment_id)
        self._check_guesser(snapshot, compliment_id, guesser_id)
        consume_guess(snapshot)
        if self.rate_limit is not None:
            await self.rate_limit.enforce(RateLimitAction.GUESS, guesser_id)

        try:
            async with atomic(self.db):
                compliment = await self.repo.get_for_update(compliment_id)
                self._check_guesser(compliment, compliment_id, guesser_id)
                updated = consume_guess(compliment)
                is_correct = guessed_user_id == compliment.sender_id
                if is_correct:
                    updated = disclose(updated, RevealMethod.GUESSED, datetime.utcnow())

                if not await self.repo.compare_and_set(updated, expected_version=compliment.version):
                    raise StaleComplimentError(compliment_id)

                await self.repo.add_guess(
                    Guess(
                        id=generate_id(),
                        compliment_id=compliment_id,
                        guesser_id=guesser_id,
                        guessed_user_id=guessed_user_id,
                        is_correct=is_correct,
                        created_at=datetime.utcnow(),
                    )
                )
                sender = None
                if is_correct:
                    await self.scoring.add_points(guesser_id, self.rules.points_correct_guess)
                    await self.scoring.increment_stat(guesser_id, Stat.CORRECT_GUESSES)
                    sender = await self.scoring.get_public_profile(compliment.sender_id)
        except StaleComplimentError:
            logger.info("Guess on compliment %s lost a concurrent update", compliment_id)
            current = await self.repo.get(compliment_id)
            if current is not None and disclosure_state(current) != DisclosureState.GUESSABLE:
                await self._record_lost_attempt(snapshot, guesser_id, guessed_user_id)
            await raise_for_current_state(self.repo, compliment_id)
        except (AlreadyRevealedError, OutOfGuessesError):
            # Another writer finished the game while this call waited on the row lock.
            await self._record_lost_attempt(snapshot, guesser_id, guessed_user_id)
            raise

        logger.info(
            "Guess on compliment %s by %s: correct=%s remaining=%s",
            compliment_id,
            guesser_id,
            is_correct,
            updated.guesses_remaining,
        )
        return GuessResult(
            is_correct=is_correct,
            guesses_remaining=updated.guesses_remaining,
            is_revealed=updated.is_revealed,
            sender=sender,
        )

    async def list_guesses(self, compliment_id: str, viewer_id: str) -> list[Guess]:
        compliment = await self.repo.get(compliment_id)
        self._check_guesser(compliment, compliment_id, viewer_id)
        return await self.repo.list_guesses(compliment_id)

    @staticmethod
    def _check_guesser(compliment: Optional[Compliment], compliment_id: str, user_id: str) -> None:
        if compliment is None:
            raise NotFoundError("Compliment", compliment_id)
        if compliment.receiver_id != user_id:
            raise AuthorizationError("Only the receiver can guess on this compliment")

    async def _record_lost_attempt(self, snapshot: Compliment, guesser_id: str, guessed_user_id: str) -> None:
        async with atomic(self.db):
            await self.repo.add_guess(
                Guess(
                    id=generate_id(),
                    compliment_id=snapshot.id,
                    guesser_id=guesser_id,
                    guessed_user_id=guessed_user_id,
                    is_correct=guessed_user_id == snapshot.sender_id,
                    created_at=datetime.utcnow(),
                )
            )
