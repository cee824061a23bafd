"""Compliment API routes."""
from fastapi import APIRouter

from oomf.api.compliments import routes_compliments, routes_disclosure

router = APIRouter()

router.include_router(routes_compliments.router, prefix="/compliments", tags=["compliments"])
router.include_router(routes_disclosure.router, prefix="/compliments", tags=["guessing"])
