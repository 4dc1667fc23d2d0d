"""GET /api/parameters — the parameter catalog."""

from __future__ import annotations

from fastapi import APIRouter

from app.engine.registry import GRID_AXES, POLYGON_AXES, registry
from app.models.responses import ParameterInfo

router = APIRouter(prefix="/parameters")


@router.get("", response_model=list[ParameterInfo])
async def list_parameters() -> list[ParameterInfo]:
    return [
        ParameterInfo(
            key=d.key,
            name=d.display_name,
            min=d.min,
            max=d.max,
            step=d.step,
            default=d.default,
            description=d.description,
        )
        for d in registry.list()
    ]


@router.get("/defaults")
async def default_subsets() -> dict[str, list[str]]:
    return {"grid": list(GRID_AXES), "polygon": list(POLYGON_AXES)}
