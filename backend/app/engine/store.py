"""Parameter vector store — the single owner of the live parameter vector.

Callers (sliders, the mapper) never edit the vector in place. They call
apply_slider_update / apply_mapper_update and get the new vector back. Each
update builds a complete new mapping and swaps it in, so readers never see a
half-applied update.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from app.engine.errors import InvalidValue
from app.engine.registry import ParameterDefinition, ParameterRegistry, registry as default_registry
from app.utils.math_helpers import clamp, is_finite_number, round2

logger = logging.getLogger(__name__)

ParameterVector = Mapping[str, float]


class OutOfRangePolicy(str, enum.Enum):
    REJECT = "reject"
    CLAMP = "clamp"


class ParameterVectorStore:
    """Holds key → value for a subset of the registry's keys."""

    def __init__(
        self,
        params: ParameterRegistry | None = None,
        initial_keys: Iterable[str] | None = None,
        out_of_range: OutOfRangePolicy | str = OutOfRangePolicy.REJECT,
    ) -> None:
        self.params = params or default_registry
        self.out_of_range = OutOfRangePolicy(out_of_range)
        self._initial: dict[str, float] = {
            key: round2(value) for key, value in self.params.defaults(initial_keys or ()).items()
        }
        self._vector: ParameterVector = MappingProxyType(dict(self._initial))

    @property
    def vector(self) -> ParameterVector:
        return self._vector

    def get(self, key: str) -> float | None:
        self.params.get(key)
        return self._vector.get(key)

    def _coerce(self, definition: ParameterDefinition, raw: object, policy: OutOfRangePolicy) -> float:
        if not is_finite_number(raw):
            raise InvalidValue(definition.key, raw, "not a finite number")
        value = float(raw)
        if not definition.contains(value):
            if policy is OutOfRangePolicy.REJECT:
                raise InvalidValue(
                    definition.key, raw, f"outside [{definition.min}, {definition.max}]"
                )
            value = clamp(value, definition.min, definition.max)
        # Rounding can't leave the range when min/max are themselves 2-decimal values
        return clamp(round2(value), definition.min, definition.max)

    def _commit(self, updates: dict[str, float]) -> ParameterVector:
        merged = dict(self._vector)
        merged.update(updates)
        self._vector = MappingProxyType(merged)
        return self._vector

    def apply_slider_update(self, key: str, raw_value: object) -> ParameterVector:
        """Set one key. Out-of-range input follows the store's policy."""
        definition = self.params.get(key)
        value = self._coerce(definition, raw_value, self.out_of_range)
        logger.debug("Slider %s=%s", key, value)
        return self._commit({key: value})

    def apply_mapper_update(self, partial: Mapping[str, object]) -> ParameterVector:
        """Merge a mapper update. Always clamps; all entries validate before any is applied."""
        updates = {
            key: self._coerce(self.params.get(key), raw, OutOfRangePolicy.CLAMP)
            for key, raw in partial.items()
        }
        logger.debug("Mapper %s", updates)
        return self._commit(updates)

    def reset(self, key: str | None = None) -> ParameterVector:
        """Unset one key, or restore the initial vector when key is None."""
        if key is None:
            self._vector = MappingProxyType(dict(self._initial))
            return self._vector
        self.params.get(key)
        remaining = {k: v for k, v in self._vector.items() if k != key}
        self._vector = MappingProxyType(remaining)
        return self._vector
