"""Notifications API."""
from fastapi import APIRouter

from oomf.api.notifications import routes_devices, routes_notifications

router = APIRouter()

router.include_router(routes_notifications.router, prefix="/notifications", tags=["notifications"])
router.include_router(routes_devices.router, prefix="/devices", tags=["devices"])
