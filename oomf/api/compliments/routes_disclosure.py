"""Guessing, hint and paid-reveal routes for a received compliment."""
from datetime import datetime
from typing import Optional, List
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from oomf.api.compliments.schemas import SenderResponse
from oomf.api.deps import get_current_user, get_guess_service, get_token_service
from oomf.domain.guessing.services import GuessService
from oomf.domain.tokens.models import IssuedHint
from oomf.domain.tokens.services import TokenService
from oomf.domain.users.models import User

router = APIRouter()


class GuessRequest(BaseModel):
    guessed_user_id: str


class GuessResponse(BaseModel):
    is_correct: bool
    guesses_remaining: int
    is_revealed: bool
    sender: Optional[SenderResponse] = None


class GuessRecordResponse(BaseModel):
    id: str
    guessed_user_id: str
    is_correct: bool
    created_at: datetime


class HintRequest(BaseModel):
    hint_number: int


class HintResponse(BaseModel):
    hint_number: int
    hint_type: str
    hint_label: str
    hint_value: str
    tokens_remaining: Optional[int] = None

    @classmethod
    def from_hint(cls, hint: IssuedHint, tokens_remaining: Optional[int] = None) -> "HintResponse":
        return cls(
            hint_number=hint.hint_number,
            hint_type=hint.hint_type.value,
            hint_label=hint.hint_label,
            hint_value=hint.hint_value,
            tokens_remaining=tokens_remaining,
        )


class RevealResponse(BaseModel):
    sender_id: str
    username: str
    display_name: str
    avatar_url: Optional[str] = None
    tokens_remaining: int


@router.post("/{compliment_id}/guesses", response_model=GuessResponse)
async def make_guess(
    compliment_id: str,
    request: GuessRequest,
    current_user: User = Depends(get_current_user),
    service: GuessService = Depends(get_guess_service),
):
    """Guess who sent a compliment (3 attempts)."""
    result = await service.guess(compliment_id, current_user.id, request.guessed_user_id)
    return GuessResponse(
        is_correct=result.is_correct,
        guesses_remaining=result.guesses_remaining,
        is_revealed=result.is_revealed,
        sender=SenderResponse.from_profile(result.sender) if result.sender else None,
    )


@router.get("/{compliment_id}/guesses", response_model=List[GuessRecordResponse])
async def list_guesses(
    compliment_id: str,
    current_user: User = Depends(get_current_user),
    service: GuessService = Depends(get_guess_service),
):
    guesses = await service.list_guesses(compliment_id, current_user.id)
    return [
        GuessRecordResponse(
            id=g.id,
            guessed_user_id=g.guessed_user_id,
            is_correct=g.is_correct,
            created_at=g.created_at,
        )
        for g in guesses
    ]


@router.post("/{compliment_id}/hints", response_model=HintResponse)
async def get_hint(
    compliment_id: str,
    request: HintRequest,
    current_user: User = Depends(get_current_user),
    service: TokenService = Depends(get_token_service),
):
    """Buy the next hint about the sender."""
    result = await service.get_hint(compliment_id, current_user.id, request.hint_number)
    return HintResponse.from_hint(result.hint, result.tokens_remaining)


@router.get("/{compliment_id}/hints", response_model=List[HintResponse])
async def list_hints(
    compliment_id: str,
    current_user: User = Depends(get_current_user),
    service: TokenService = Depends(get_token_service),
):
    """Hints already bought for this compliment (free)."""
    hints = await service.list_hints(compliment_id, current_user.id)
    return [HintResponse.from_hint(h) for h in hints]


@router.post("/{compliment_id}/reveal", response_model=RevealResponse)
async def reveal_with_tokens(
    compliment_id: str,
    current_user: User = Depends(get_current_user),
    service: TokenService = Depends(get_token_service),
):
    """Spend tokens to reveal the sender."""
    result = await service.reveal_with_tokens(compliment_id, current_user.id)
    return RevealResponse(
        sender_id=result.sender_id,
        username=result.username,
        display_name=result.display_name,
        avatar_url=result.avatar_url,
        tokens_remaining=result.tokens_remaining,
    )
