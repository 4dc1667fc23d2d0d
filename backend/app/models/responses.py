"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.engine.orchestrator import GenerationSnapshot, OrchestratorStatus


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    parameters_registered: int = 0


class ParameterInfo(BaseModel):
    key: str
    name: str
    min: float
    max: float
    step: float
    default: float
    description: str = ""


class SnapshotInfo(BaseModel):
    text: str
    parameters: dict[str, float] = Field(default_factory=dict)
    source_text: str = ""
    timestamp: float = 0.0

    @classmethod
    def from_snapshot(cls, snap: GenerationSnapshot | None) -> SnapshotInfo | None:
        if snap is None:
            return None
        return cls(
            text=snap.text,
            parameters=snap.parameters,
            source_text=snap.source_text,
            timestamp=snap.timestamp,
        )


class GenerationStatus(BaseModel):
    state: str = "idle"
    is_loading: bool = False
    current_output: str = ""
    previous_output: str = ""
    current: SnapshotInfo | None = None
    previous: SnapshotInfo | None = None
    last_error: str | None = None
    requests_sent: int = 0

    @classmethod
    def from_status(cls, status: OrchestratorStatus) -> GenerationStatus:
        return cls(
            state=status.state.value,
            is_loading=status.is_loading,
            current_output=status.current_output,
            previous_output=status.previous.text if status.previous else "",
            current=SnapshotInfo.from_snapshot(status.current),
            previous=SnapshotInfo.from_snapshot(status.previous),
            last_error=status.last_error,
            requests_sent=status.requests_sent,
        )


class SessionResponse(BaseModel):
    text: str = ""
    surface: str = "rectangle"
    slot_count: int = 2
    axes: list[str] = Field(default_factory=list)
    parameters: dict[str, float] = Field(default_factory=dict)
    generation: GenerationStatus = Field(default_factory=GenerationStatus)


class PointerResponse(BaseModel):
    updated: dict[str, float] = Field(default_factory=dict)
    marker: tuple[float, float] = (0.0, 0.0)
    slots: tuple[int, int] = (0, 1)
    parameters: dict[str, float] = Field(default_factory=dict)


class SurfaceGeometryResponse(BaseModel):
    surface: str
    slot_count: int
    axes: list[str] = Field(default_factory=list)
    size: float = 0.0
    outline: list[tuple[float, float]] = Field(default_factory=list)
    outline_path: str = ""
    anchors: list[tuple[float, float]] = Field(default_factory=list)


class SettingsResponse(BaseModel):
    api_key_set: bool = False
    api_base_url: str = ""
    model_name: str = ""
    max_tokens: int = 100
    seed: int | None = None

    model_config = {"protected_namespaces": ()}


class ModelInfo(BaseModel):
    id: str
    object: str = "model"
    created: int = 0
    owned_by: str = ""


class ModelListResponse(BaseModel):
    data: list[ModelInfo] = Field(default_factory=list)
