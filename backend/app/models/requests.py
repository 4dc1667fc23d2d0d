"""API request models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class TextUpdateRequest(BaseModel):
    text: str = Field(..., description="Input text to rewrite")


class SliderUpdateRequest(BaseModel):
    # Non-finite JSON numbers (NaN/Infinity) are let through so the store can reject them
    value: float = Field(..., description="Raw slider value", allow_inf_nan=True)


class PointerRequest(BaseModel):
    x: float = Field(..., description="Pointer x in surface coordinates (origin top-left)")
    y: float = Field(..., description="Pointer y in surface coordinates (origin top-left)")
    normalized: bool = Field(
        default=False,
        description="Treat x/y as normalized (origin bottom-left); rectangle only",
    )


class SurfaceRequest(BaseModel):
    kind: Literal["rectangle", "polygon"] = "rectangle"
    slot_count: int = Field(default=2, ge=2, le=5)


class AxisRequest(BaseModel):
    key: str = Field(..., description="Parameter key to assign to the slot")


class SettingsUpdateRequest(BaseModel):
    api_key: str | None = None
    api_base_url: str | None = None
    model_name: str | None = None
    max_tokens: int | None = Field(default=None, ge=1)
    seed: int | None = None

    model_config = {"protected_namespaces": ()}
