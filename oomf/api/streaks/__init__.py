"""Streak API routes."""
from fastapi import APIRouter

from oomf.api.streaks import routes_streaks

router = APIRouter()

router.include_router(routes_streaks.router, prefix="/streaks", tags=["streaks"])
