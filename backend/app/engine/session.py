"""PlaygroundSession — owns the live text, vector, surface and orchestrator.

Every mutation that changes the text or the vector is forwarded to the
orchestrator. Axis reassignment and surface switches only change which keys
future pointer samples drive.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable

from app.config import CompletionSettings
from app.engine.mapper import MapperUpdate, PolygonSurface, RectangularSurface, validate_axes
from app.engine.orchestrator import Completer, GenerationOrchestrator, RequestState
from app.engine.registry import INITIAL_VECTOR_KEYS, ParameterRegistry, default_axes, registry as default_registry
from app.engine.store import OutOfRangePolicy, ParameterVector, ParameterVectorStore

logger = logging.getLogger(__name__)


class SurfaceKind(str, enum.Enum):
    RECTANGLE = "rectangle"
    POLYGON = "polygon"


class PlaygroundSession:
    def __init__(
        self,
        client: Completer,
        settings_source: Callable[[], CompletionSettings],
        params: ParameterRegistry | None = None,
        debounce_s: float = 1.0,
        min_text_length: int = 4,
        out_of_range: OutOfRangePolicy | str = OutOfRangePolicy.REJECT,
    ) -> None:
        self.params = params or default_registry
        self.store = ParameterVectorStore(self.params, INITIAL_VECTOR_KEYS, out_of_range)
        self.orchestrator = GenerationOrchestrator(
            client,
            settings_source,
            debounce_s=debounce_s,
            min_text_length=min_text_length,
        )
        self.text = ""
        self.surface: RectangularSurface | PolygonSurface = RectangularSurface(params=self.params)
        self.axes: tuple[str, ...] = default_axes(self.surface.slot_count)

    @property
    def surface_kind(self) -> SurfaceKind:
        if isinstance(self.surface, PolygonSurface):
            return SurfaceKind.POLYGON
        return SurfaceKind.RECTANGLE

    @property
    def vector(self) -> ParameterVector:
        return self.store.vector

    def _notify(self) -> RequestState:
        return self.orchestrator.submit(self.text, self.store.vector)

    # --- text / parameters ---

    def set_text(self, text: str) -> RequestState:
        self.text = text
        return self._notify()

    def apply_slider(self, key: str, value: object) -> ParameterVector:
        vector = self.store.apply_slider_update(key, value)
        self._notify()
        return vector

    def apply_update(self, update: MapperUpdate) -> ParameterVector:
        vector = self.store.apply_mapper_update(update.values)
        self._notify()
        return vector

    def apply_pointer(self, x: float, y: float) -> MapperUpdate:
        update = self.surface.map_pointer(x, y, self.axes)
        self.apply_update(update)
        return update

    def apply_normalized(self, nx: float, ny: float) -> MapperUpdate:
        if not isinstance(self.surface, RectangularSurface):
            raise ValueError("Normalized pointer samples only apply to the rectangular surface")
        update = self.surface.map_normalized(nx, ny, self.axes)
        self.apply_update(update)
        return update

    def reset_parameters(self, key: str | None = None) -> ParameterVector:
        vector = self.store.reset(key)
        self._notify()
        return vector

    # --- surface / axes ---

    def assign_axis(self, slot: int, key: str) -> tuple[str, ...]:
        if not 0 <= slot < len(self.axes):
            raise IndexError(f"Slot {slot} out of range for {len(self.axes)} slots")
        axes = list(self.axes)
        axes[slot] = key
        self.axes = validate_axes(axes, self.surface.slot_count, self.params)
        logger.debug("Slot %d -> %s", slot, key)
        return self.axes

    def set_surface(self, kind: SurfaceKind | str, slot_count: int = 2) -> None:
        kind = SurfaceKind(kind)
        if kind is SurfaceKind.RECTANGLE:
            if slot_count != RectangularSurface.slot_count:
                raise ValueError("The rectangular surface has exactly 2 slots")
            surface: RectangularSurface | PolygonSurface = RectangularSurface(params=self.params)
        else:
            surface = PolygonSurface(slot_count, params=self.params)

        if surface.slot_count != len(self.axes):
            self.axes = default_axes(surface.slot_count)
        self.surface = surface
        logger.debug("Surface %s with %d slots", kind.value, surface.slot_count)
