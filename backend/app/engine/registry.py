"""Parameter registry — static catalog of every generation-control parameter.

Usage:
    definition = registry.get("temperature")
    for definition in registry.list():
        ...

Declaration order is the canonical ordering. The registry never knows which
subset is "active"; surfaces and sessions pick their own subsets
(GRID_AXES, POLYGON_AXES, ...).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from app.engine.errors import ParameterNotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParameterDefinition:
    key: str
    display_name: str
    min: float
    max: float
    step: float
    default: float
    description: str = ""

    def __post_init__(self) -> None:
        if self.step <= 0:
            raise ValueError(f"{self.key}: step must be > 0 (got {self.step})")
        if not self.min <= self.default <= self.max:
            raise ValueError(
                f"{self.key}: default {self.default} outside [{self.min}, {self.max}]"
            )

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


class ParameterRegistry:
    """Read-only catalog keyed by parameter key."""

    def __init__(self, definitions: Iterable[ParameterDefinition]) -> None:
        self._definitions: dict[str, ParameterDefinition] = {}
        for definition in definitions:
            if definition.key in self._definitions:
                raise ValueError(f"Duplicate parameter key: {definition.key}")
            self._definitions[definition.key] = definition
        logger.debug("Registered %d parameters", len(self._definitions))

    def get(self, key: str) -> ParameterDefinition:
        try:
            return self._definitions[key]
        except KeyError:
            raise ParameterNotFound(key) from None

    def list(self) -> list[ParameterDefinition]:
        return list(self._definitions.values())

    def keys(self) -> list[str]:
        return list(self._definitions)

    def defaults(self, keys: Iterable[str] | None = None) -> dict[str, float]:
        """Default values for the given keys (all keys if None)."""
        selected = self.keys() if keys is None else list(keys)
        return {key: self.get(key).default for key in selected}

    def __contains__(self, key: object) -> bool:
        return key in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


_CATALOG = [
    ParameterDefinition(
        "temperature", "Temperature", 0, 2, 0.01, 0.7,
        "Controls randomness: Lower values make the output more focused and deterministic, "
        "higher values make it more random and creative.",
    ),
    ParameterDefinition(
        "top_p", "Top P", 0, 1, 0.01, 0.9,
        "Nucleus sampling: Only consider the top P probability mass of tokens when generating.",
    ),
    ParameterDefinition(
        "top_k", "Top K", 1, 100, 1, 50,
        "Limits the number of token choices considered at each step to the top K options.",
    ),
    ParameterDefinition(
        "frequency_penalty", "Frequency Penalty", -2, 2, 0.1, 0,
        "Reduces repetition by lowering the probability of tokens that have already appeared in the text.",
    ),
    ParameterDefinition(
        "presence_penalty", "Presence Penalty", -2, 2, 0.1, 0,
        "Encourages the model to talk about new topics by increasing the probability of tokens "
        "that haven't appeared yet.",
    ),
    ParameterDefinition(
        "repetition_penalty", "Repetition Penalty", 1, 2, 0.01, 1,
        "Penalises repetitions: Values above 1 decrease the likelihood of repeated tokens.",
    ),
    ParameterDefinition(
        "length_penalty", "Length Penalty", -2, 2, 0.1, 0,
        "Encourages shorter (negative values) or longer (positive values) outputs.",
    ),
    ParameterDefinition(
        "diversity_penalty", "Diversity Penalty", 0, 2, 0.1, 0,
        "Encourages the model to generate more diverse outputs.",
    ),
    ParameterDefinition(
        "mirostat", "Mirostat", 0, 2, 1, 0,
        "Enable Mirostat sampling for controlling perplexity, 0 = disabled, 1 = Mirostat, 2 = Mirostat 2.0.",
    ),
    ParameterDefinition(
        "mirostat_eta", "Mirostat Eta", 0, 1, 0.01, 0.1,
        "Influences how quickly the algorithm responds to feedback from the generated text.",
    ),
    ParameterDefinition(
        "mirostat_tau", "Mirostat Tau", 0, 10, 0.1, 5,
        "Controls the balance between coherence and diversity of the output.",
    ),
    ParameterDefinition(
        "repeat_last_n", "Repeat Last N", -1, 64, 1, 64,
        "Sets how far back for the model to look back to prevent repetition.",
    ),
    ParameterDefinition(
        "tfs_z", "Tail Free Sampling Z", 1, 2, 0.1, 1,
        "Tail free sampling is used to reduce the impact of less probable tokens from the output.",
    ),
    ParameterDefinition(
        "typical_p", "Typical P", 0, 1, 0.01, 1,
        "Local typicality measures how similar the conditional probability of predicting a target "
        "token next is to the expected conditional probability of predicting a random token next, "
        "given the partial text already generated.",
    ),
]

# Default subsets
GRID_AXES: tuple[str, ...] = ("temperature", "top_p")
POLYGON_AXES: tuple[str, ...] = (
    "temperature",
    "top_p",
    "top_k",
    "frequency_penalty",
    "presence_penalty",
)
# What the rewrite view starts out sending
INITIAL_VECTOR_KEYS: tuple[str, ...] = (
    "temperature",
    "top_p",
    "top_k",
    "frequency_penalty",
    "presence_penalty",
    "repetition_penalty",
    "length_penalty",
    "diversity_penalty",
)

MIN_SLOTS = 2
MAX_SLOTS = len(POLYGON_AXES)


def default_axes(slot_count: int) -> tuple[str, ...]:
    """Default axis assignment for a surface with slot_count slots."""
    if not MIN_SLOTS <= slot_count <= MAX_SLOTS:
        raise ValueError(f"slot_count must be in [{MIN_SLOTS}, {MAX_SLOTS}] (got {slot_count})")
    return POLYGON_AXES[:slot_count]


registry = ParameterRegistry(_CATALOG)
