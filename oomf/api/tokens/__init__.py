"""Token API routes."""
from fastapi import APIRouter

from oomf.api.tokens import routes_tokens

router = APIRouter()

router.include_router(routes_tokens.router, prefix="/tokens", tags=["tokens"])
