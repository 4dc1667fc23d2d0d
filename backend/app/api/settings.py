"""/api/settings — completion endpoint configuration (in memory only)."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.config import CompletionSettings, SettingsProvider
from app.dependencies import get_settings_provider
from app.models.requests import SettingsUpdateRequest
from app.models.responses import SettingsResponse

router = APIRouter(prefix="/settings")


def _to_response(s: CompletionSettings) -> SettingsResponse:
    return SettingsResponse(
        api_key_set=bool(s.api_key),
        api_base_url=s.api_base_url,
        model_name=s.model_name,
        max_tokens=s.max_tokens,
        seed=s.seed,
    )


@router.get("", response_model=SettingsResponse)
async def get_settings(provider: SettingsProvider = Depends(get_settings_provider)) -> SettingsResponse:
    return _to_response(provider.current)


@router.put("", response_model=SettingsResponse)
async def save_settings(
    req: SettingsUpdateRequest,
    provider: SettingsProvider = Depends(get_settings_provider),
) -> SettingsResponse:
    return _to_response(provider.save(**req.model_dump(exclude_unset=True)))


@router.delete("", response_model=SettingsResponse)
async def clear_settings(provider: SettingsProvider = Depends(get_settings_provider)) -> SettingsResponse:
    return _to_response(provider.clear())
