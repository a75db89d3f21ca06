"""APIRouter registration for the Legislative Portal."""

from __future__ import annotations

from fastapi import APIRouter

from portal.routes.authoring import router as authoring_router
from portal.routes.feedback import router as feedback_router
from portal.routes.forms import router as forms_router
from portal.routes.me import router as me_router
from portal.routes.responses import router as responses_router
from portal.routes.roles import router as roles_router
from portal.routes.tenders import router as tenders_router

api_router = APIRouter()
api_router.include_router(me_router)
api_router.include_router(tenders_router)
api_router.include_router(forms_router)
api_router.include_router(authoring_router)
api_router.include_router(responses_router)
api_router.include_router(roles_router)
api_router.include_router(feedback_router)

__all__ = ["api_router"]
