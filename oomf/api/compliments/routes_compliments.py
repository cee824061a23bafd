"""Compliment ledger routes: send, read receipts and inbox queries."""
from typing import Optional, List
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from oomf.api.compliments.schemas import (
    ComplimentListResponse,
    ComplimentResponse,
    OkResponse,
    ReactionRequest,
    ReactionResponse,
    SendComplimentRequest,
    SendComplimentResponse,
)
from oomf.api.deps import get_compliment_service, get_current_user
from oomf.domain.compliments.services import ComplimentService
from oomf.domain.users.models import User

router = APIRouter()


class TemplateResponse(BaseModel):
    id: str
    text: str
    emoji: str
    category: str


@router.post("", response_model=SendComplimentResponse, status_code=status.HTTP_201_CREATED)
async def send_compliment(
    request: SendComplimentRequest,
    current_user: User = Depends(get_current_user),
    service: ComplimentService = Depends(get_compliment_service),
):
    """Send an anonymous compliment (template) or a Secret Admirer compliment (custom_text)."""
    compliment = await service.send_compliment(
        sender_id=current_user.id,
        receiver_id=request.receiver_id,
        template_id=request.template_id,
        custom_text=request.custom_text,
    )
    return SendComplimentResponse(id=compliment.id, origin=compliment.origin.value)


@router.get("/templates", response_model=List[TemplateResponse])
async def list_templates(
    category: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    service: ComplimentService = Depends(get_compliment_service),
):
    """Active compliment templates, most used first."""
    templates = await service.list_templates(category)
    return [TemplateResponse(id=t.id, text=t.text, emoji=t.emoji, category=t.category) for t in templates]


@router.get("/received", response_model=ComplimentListResponse)
async def list_received(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    service: ComplimentService = Depends(get_compliment_service),
):
    views = await service.list_received(current_user.id, limit=limit, offset=offset)
    return ComplimentListResponse(compliments=[ComplimentResponse.from_view(v) for v in views])


@router.get("/sent", response_model=ComplimentListResponse)
async def list_sent(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    service: ComplimentService = Depends(get_compliment_service),
):
    views = await service.list_sent(current_user.id, limit=limit, offset=offset)
    return ComplimentListResponse(compliments=[ComplimentResponse.from_view(v) for v in views])


@router.get("/{compliment_id}", response_model=ComplimentResponse)
async def get_compliment(
    compliment_id: str,
    current_user: User = Depends(get_current_user),
    service: ComplimentService = Depends(get_compliment_service),
):
    view = await service.get_compliment(compliment_id, current_user.id)
    return ComplimentResponse.from_view(view)


@router.post("/{compliment_id}/read", response_model=OkResponse)
async def mark_read(
    compliment_id: str,
    current_user: User = Depends(get_current_user),
    service: ComplimentService = Depends(get_compliment_service),
):
    """Mark a received compliment as read (idempotent)."""
    await service.mark_read(compliment_id, current_user.id)
    return OkResponse()


@router.post("/{compliment_id}/reaction", response_model=ReactionResponse)
async def react(
    compliment_id: str,
    request: ReactionRequest,
    current_user: User = Depends(get_current_user),
    service: ComplimentService = Depends(get_compliment_service),
):
    """React to a received compliment; ``{"reaction": null}`` removes it."""
    compliment = await service.react(compliment_id, current_user.id, request.reaction)
    return ReactionResponse.from_compliment(compliment)
