"""Master API router — mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from app.api import health, model_list, parameters, session, settings

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(parameters.router)
api_router.include_router(session.router)
api_router.include_router(settings.router)
api_router.include_router(model_list.router)
