"""Geometric mapper — pointer samples over a surface → two-parameter updates.

Two surfaces:
- RectangularSurface: X slot and Y slot map independently, origin bottom-left.
- PolygonSurface: regular 2N-gon with N slots. The angular sector a sample
  falls into picks two adjacent slots; cos/sin of the angle scaled by the
  distance from the centre drive them.

Every sample is computed from the absolute pointer position. The mapper
never touches stored state; it returns a MapperUpdate for the store to merge.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from app.engine.registry import MAX_SLOTS, MIN_SLOTS, ParameterRegistry, registry as default_registry
from app.utils.math_helpers import clamp, lerp, map_range, round2

TWO_PI = 2 * math.pi


@dataclass(frozen=True)
class MapperUpdate:
    """Partial vector produced by one pointer sample."""

    values: dict[str, float] = field(default_factory=dict)
    # Rectangle: percent position (left, top). Polygon: absolute surface coords.
    marker: tuple[float, float] = (0.0, 0.0)
    # Slot indices that produced the values (x/y → 0/1 on the rectangle)
    slots: tuple[int, int] = (0, 1)


def validate_axes(axes: Sequence[str], slot_count: int, params: ParameterRegistry) -> tuple[str, ...]:
    """Check an axis assignment against a surface. Duplicates are allowed."""
    if len(axes) != slot_count:
        raise ValueError(f"Expected {slot_count} axis keys, got {len(axes)}")
    for key in axes:
        params.get(key)
    return tuple(axes)


class RectangularSurface:
    """Axis-aligned surface, X slot 0 and Y slot 1."""

    slot_count = 2

    def __init__(
        self,
        width: float = 100.0,
        height: float = 100.0,
        params: ParameterRegistry | None = None,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("Surface dimensions must be positive")
        self.width = width
        self.height = height
        self.params = params or default_registry

    def normalize(self, x: float, y: float) -> tuple[float, float]:
        """Screen coords (origin top-left) → (nx, ny) in [0,1]², origin bottom-left."""
        nx = clamp(x / self.width, 0.0, 1.0)
        ny = clamp(1.0 - y / self.height, 0.0, 1.0)
        return nx, ny

    def map_normalized(self, nx: float, ny: float, axes: Sequence[str]) -> MapperUpdate:
        key_x, key_y = validate_axes(axes, self.slot_count, self.params)
        nx = clamp(nx, 0.0, 1.0)
        ny = clamp(ny, 0.0, 1.0)
        def_x = self.params.get(key_x)
        def_y = self.params.get(key_y)

        values = {key_x: round2(lerp(nx, def_x.min, def_x.max))}
        values[key_y] = round2(lerp(ny, def_y.min, def_y.max))
        return MapperUpdate(values=values, marker=(nx * 100, (1 - ny) * 100), slots=(0, 1))

    def map_pointer(self, x: float, y: float, axes: Sequence[str]) -> MapperUpdate:
        nx, ny = self.normalize(x, y)
        return self.map_normalized(nx, ny, axes)


class PolygonSurface:
    """Regular 2N-gon for N in [2, 5] slots, square viewport of `size` units."""

    def __init__(
        self,
        slot_count: int,
        size: float = 600.0,
        margin: float = 20.0,
        params: ParameterRegistry | None = None,
    ) -> None:
        if not MIN_SLOTS <= slot_count <= MAX_SLOTS:
            raise ValueError(f"slot_count must be in [{MIN_SLOTS}, {MAX_SLOTS}] (got {slot_count})")
        if size <= 0 or not 0 <= margin < size / 2:
            raise ValueError("Invalid polygon size/margin")
        self.slot_count = slot_count
        self.size = size
        self.margin = margin
        self.params = params or default_registry

    @property
    def center(self) -> tuple[float, float]:
        return (self.size / 2, self.size / 2)

    @property
    def radius(self) -> float:
        """Normalizing radius for pointer distance."""
        return self.size / 2

    @property
    def drawn_radius(self) -> float:
        return self.size / 2 - self.margin

    @property
    def sector(self) -> float:
        return TWO_PI / self.slot_count

    def polar(self, x: float, y: float) -> tuple[float, float]:
        """Screen coords → (angle in [0, 2π), distance / radius)."""
        cx, cy = self.center
        dx = x - cx
        dy = cy - y
        angle = math.atan2(dy, dx) % TWO_PI
        distance = math.hypot(dx, dy) / self.radius
        return angle, distance

    def slots_for_angle(self, angle: float) -> tuple[int, int]:
        slot = int(angle // self.sector) % self.slot_count
        return slot, (slot + 1) % self.slot_count

    def map_pointer(self, x: float, y: float, axes: Sequence[str]) -> MapperUpdate:
        axes = validate_axes(axes, self.slot_count, self.params)
        angle, distance = self.polar(x, y)
        slot, next_slot = self.slots_for_angle(angle)
        key_1, key_2 = axes[slot], axes[next_slot]
        def_1 = self.params.get(key_1)
        def_2 = self.params.get(key_2)

        proj_1 = clamp(math.cos(angle) * distance, -1.0, 1.0)
        proj_2 = clamp(math.sin(angle) * distance, -1.0, 1.0)

        values = {key_1: round2(map_range(proj_1, -1.0, 1.0, def_1.min, def_1.max))}
        # Duplicate keys in adjacent slots collapse; the second slot wins
        values[key_2] = round2(map_range(proj_2, -1.0, 1.0, def_2.min, def_2.max))
        return MapperUpdate(values=values, marker=(float(x), float(y)), slots=(slot, next_slot))

    def outline(self) -> NDArray[np.float64]:
        """2N vertices of the drawn polygon, (2N, 2) in surface coords."""
        cx, cy = self.center
        angles = np.arange(self.slot_count * 2) * np.pi / self.slot_count
        return np.column_stack(
            [cx + self.drawn_radius * np.cos(angles), cy - self.drawn_radius * np.sin(angles)]
        )

    def slot_anchors(self, offset: float = 14.0) -> NDArray[np.float64]:
        """Label position per slot, just outside the outline.

        Screen y points down, so the angle is mirrored the same way polar() does.
        """
        cx, cy = self.center
        angles = np.arange(self.slot_count) * self.sector
        r = self.drawn_radius + offset
        return np.column_stack([cx + r * np.cos(angles), cy - r * np.sin(angles)])

    def outline_path(self) -> str:
        """SVG path data for the outline."""
        points = self.outline()
        parts = [f"{'M' if i == 0 else 'L'} {px:.2f},{py:.2f}" for i, (px, py) in enumerate(points)]
        return " ".join(parts) + " Z"
