"""GET /api/models — proxy of the endpoint's model list."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.config import SettingsProvider
from app.dependencies import get_completion_client, get_settings_provider
from app.engine.errors import RequestFailed
from app.llm.client import CompletionClient
from app.models.responses import ModelListResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/models", response_model=ModelListResponse)
async def list_models(
    client: CompletionClient = Depends(get_completion_client),
    provider: SettingsProvider = Depends(get_settings_provider),
) -> ModelListResponse:
    try:
        models = await client.list_models(provider.current)
    except RequestFailed as e:
        logger.warning("Failed to fetch available models: %s", e)
        raise HTTPException(status_code=502, detail=str(e)) from e
    return ModelListResponse(data=models)
