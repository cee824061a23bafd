"""Token balance and ledger routes."""
from datetime import datetime
from typing import Optional, List
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from oomf.api.deps import get_current_user, get_token_service
from oomf.domain.tokens.services import TokenService
from oomf.domain.users.models import User

router = APIRouter()


class BalanceResponse(BaseModel):
    tokens: int


class TransactionResponse(BaseModel):
    id: str
    category: str  # SPEND or EARN
    amount: int
    reason: str
    compliment_id: Optional[str] = None
    created_at: datetime


@router.get("/balance", response_model=BalanceResponse)
async def get_balance(
    current_user: User = Depends(get_current_user),
    service: TokenService = Depends(get_token_service),
):
    return BalanceResponse(tokens=await service.get_balance(current_user.id))


@router.get("/transactions", response_model=List[TransactionResponse])
async def list_transactions(
    limit: int = Query(50, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    service: TokenService = Depends(get_token_service),
):
    """Token ledger, newest first."""
    transactions = await service.list_transactions(current_user.id, limit=limit)
    return [
        TransactionResponse(
            id=t.id,
            category=t.category.value,
            amount=t.amount,
            reason=t.reason.value,
            compliment_id=t.compliment_id,
            created_at=t.created_at,
        )
        for t in transactions
    ]
