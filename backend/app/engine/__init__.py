"""Parameter playground engine: registry, geometric mapper, vector store, orchestrator."""

from app.engine.errors import InvalidValue, ParameterNotFound, PlaygroundError, RequestFailed
from app.engine.mapper import MapperUpdate, PolygonSurface, RectangularSurface
from app.engine.orchestrator import GenerationOrchestrator, GenerationSnapshot, RequestState
from app.engine.registry import ParameterDefinition, ParameterRegistry, registry
from app.engine.store import ParameterVectorStore

__all__ = [
    "InvalidValue",
    "ParameterNotFound",
    "PlaygroundError",
    "RequestFailed",
    "MapperUpdate",
    "PolygonSurface",
    "RectangularSurface",
    "GenerationOrchestrator",
    "GenerationSnapshot",
    "RequestState",
    "ParameterDefinition",
    "ParameterRegistry",
    "registry",
    "ParameterVectorStore",
]
