"""Secret Admirer API routes."""
from fastapi import APIRouter

from oomf.api.secret_admirer import routes_secret_admirer

router = APIRouter()

router.include_router(routes_secret_admirer.router, prefix="/secret-admirer", tags=["secret-admirer"])
