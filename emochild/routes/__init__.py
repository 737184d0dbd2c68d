"""FastAPI API endpoints under /api.

Endpoint groups: logs (list, add, delete) and settings (health, snapshot,
clear, creature acknowledgement, customization, text colour, micro-sentence
index, storage diagnostics). Every mutating endpoint returns the fresh
snapshot.
"""

from fastapi import APIRouter

from .logs import router as logs_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(logs_router)
