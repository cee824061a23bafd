"""Realtime API routes."""
from fastapi import APIRouter

from oomf.api.realtime import routes_ws

router = APIRouter()

router.include_router(routes_ws.router, tags=["realtime"])
