"""/api/session/* — live text, parameter vector, surface and generation status."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from app.dependencies import get_session
from app.engine.mapper import PolygonSurface
from app.engine.orchestrator import GenerationOrchestrator
from app.engine.session import PlaygroundSession
from app.models.requests import AxisRequest, PointerRequest, SliderUpdateRequest, SurfaceRequest, TextUpdateRequest
from app.models.responses import GenerationStatus, PointerResponse, SessionResponse, SurfaceGeometryResponse

router = APIRouter(prefix="/session")

_KEEPALIVE_S = 15.0


def _session_response(session: PlaygroundSession) -> SessionResponse:
    return SessionResponse(
        text=session.text,
        surface=session.surface_kind.value,
        slot_count=session.surface.slot_count,
        axes=list(session.axes),
        parameters=dict(session.vector),
        generation=GenerationStatus.from_status(session.orchestrator.status()),
    )


@router.get("", response_model=SessionResponse)
async def get_state(session: PlaygroundSession = Depends(get_session)) -> SessionResponse:
    return _session_response(session)


@router.put("/text", response_model=SessionResponse)
async def set_text(req: TextUpdateRequest, session: PlaygroundSession = Depends(get_session)) -> SessionResponse:
    session.set_text(req.text)
    return _session_response(session)


@router.put("/parameters/{key}", response_model=SessionResponse)
async def set_parameter(
    key: str,
    req: SliderUpdateRequest,
    session: PlaygroundSession = Depends(get_session),
) -> SessionResponse:
    session.apply_slider(key, req.value)
    return _session_response(session)


@router.delete("/parameters", response_model=SessionResponse)
async def reset_parameters(session: PlaygroundSession = Depends(get_session)) -> SessionResponse:
    session.reset_parameters()
    return _session_response(session)


@router.delete("/parameters/{key}", response_model=SessionResponse)
async def unset_parameter(key: str, session: PlaygroundSession = Depends(get_session)) -> SessionResponse:
    session.reset_parameters(key)
    return _session_response(session)


@router.post("/pointer", response_model=PointerResponse)
async def pointer(req: PointerRequest, session: PlaygroundSession = Depends(get_session)) -> PointerResponse:
    if req.normalized:
        update = session.apply_normalized(req.x, req.y)
    else:
        update = session.apply_pointer(req.x, req.y)
    return PointerResponse(
        updated=update.values,
        marker=update.marker,
        slots=update.slots,
        parameters=dict(session.vector),
    )


@router.put("/surface", response_model=SessionResponse)
async def set_surface(req: SurfaceRequest, session: PlaygroundSession = Depends(get_session)) -> SessionResponse:
    session.set_surface(req.kind, req.slot_count)
    return _session_response(session)


@router.put("/axes/{slot}", response_model=SessionResponse)
async def assign_axis(
    slot: int,
    req: AxisRequest,
    session: PlaygroundSession = Depends(get_session),
) -> SessionResponse:
    try:
        session.assign_axis(slot, req.key)
    except IndexError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return _session_response(session)


@router.get("/surface/geometry", response_model=SurfaceGeometryResponse)
async def surface_geometry(session: PlaygroundSession = Depends(get_session)) -> SurfaceGeometryResponse:
    surface = session.surface
    if not isinstance(surface, PolygonSurface):
        return SurfaceGeometryResponse(
            surface=session.surface_kind.value,
            slot_count=surface.slot_count,
            axes=list(session.axes),
            size=surface.width,
        )
    return SurfaceGeometryResponse(
        surface=session.surface_kind.value,
        slot_count=surface.slot_count,
        axes=list(session.axes),
        size=surface.size,
        outline=[(float(x), float(y)) for x, y in surface.outline()],
        outline_path=surface.outline_path(),
        anchors=[(float(x), float(y)) for x, y in surface.slot_anchors()],
    )


async def _status_events(orchestrator: GenerationOrchestrator, request: Request) -> AsyncGenerator[str, None]:
    """SSE stream of orchestrator status, one event per state change."""
    queue = orchestrator.subscribe()
    try:
        while not await request.is_disconnected():
            try:
                status = await asyncio.wait_for(queue.get(), timeout=_KEEPALIVE_S)
            except asyncio.TimeoutError:
                yield ": keep-alive\n\n"
                continue
            data = GenerationStatus.from_status(status).model_dump_json()
            yield f"event: status\ndata: {data}\n\n"
    finally:
        orchestrator.unsubscribe(queue)


@router.get("/events")
async def events(request: Request, session: PlaygroundSession = Depends(get_session)) -> StreamingResponse:
    return StreamingResponse(
        _status_events(session.orchestrator, request),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
