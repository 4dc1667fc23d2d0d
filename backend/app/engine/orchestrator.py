"""Generation orchestrator — debounced, coalesced rewrite requests.

State machine:

    idle ──change──▶ debouncing ──timer──▶ in_flight ──ok──▶ idle
                       ▲    │ change                  │
                       │    └── restart timer          ├──fail──▶ errored ──▶ idle
                       └────── newer input pending ────┘

There is one "latest input" register. Changes arriving while a call is in
flight only overwrite that register; the call is never cancelled. When it
settles, a new debounce cycle starts if the latest input differs from what
was sent, so intermediate inputs are dropped rather than queued.

Everything runs on one asyncio event loop. submit() must be called from
inside that loop.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Protocol

from app.config import CompletionSettings

logger = logging.getLogger(__name__)

ERROR_PLACEHOLDER = "Error adjusting text"


class RequestState(str, enum.Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    IN_FLIGHT = "in_flight"
    ERRORED = "errored"


@dataclass(frozen=True)
class GenerationInput:
    text: str
    parameters: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class GenerationSnapshot:
    """One successful rewrite and the parameters that produced it."""

    text: str
    parameters: dict[str, float]
    source_text: str
    timestamp: float


@dataclass(frozen=True)
class OrchestratorStatus:
    state: RequestState
    current: GenerationSnapshot | None
    previous: GenerationSnapshot | None
    # What the "current" output slot shows (rewrite text or the error placeholder)
    current_output: str
    last_error: str | None
    requests_sent: int

    @property
    def is_loading(self) -> bool:
        return self.state is RequestState.IN_FLIGHT


class Completer(Protocol):
    async def complete(
        self,
        text: str,
        parameters: Mapping[str, float | None],
        config: CompletionSettings,
    ) -> str: ...


class GenerationOrchestrator:
    def __init__(
        self,
        client: Completer,
        settings_source: Callable[[], CompletionSettings],
        debounce_s: float = 1.0,
        min_text_length: int = 4,
    ) -> None:
        self._client = client
        self._settings_source = settings_source
        self.debounce_s = debounce_s
        self.min_text_length = min_text_length

        self._state = RequestState.IDLE
        self._latest: GenerationInput | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._flight: asyncio.Task[None] | None = None
        self._settled = asyncio.Event()
        self._settled.set()

        self._current: GenerationSnapshot | None = None
        self._previous: GenerationSnapshot | None = None
        self._current_output = ""
        self._last_error: str | None = None
        self._requests_sent = 0
        self._listeners: list[asyncio.Queue[OrchestratorStatus]] = []

    # --- public API ---

    @property
    def state(self) -> RequestState:
        return self._state

    def status(self) -> OrchestratorStatus:
        return OrchestratorStatus(
            state=self._state,
            current=self._current,
            previous=self._previous,
            current_output=self._current_output,
            last_error=self._last_error,
            requests_sent=self._requests_sent,
        )

    def submit(self, text: str, parameters: Mapping[str, float]) -> RequestState:
        """Record a text/parameter change. Returns the state after handling it."""
        incoming = GenerationInput(text=text, parameters=dict(parameters))
        if incoming == self._latest:
            return self._state
        self._latest = incoming

        if not self._passes_gate(text):
            # A pending timer re-checks the gate when it fires
            logger.debug("Input below %d chars, not scheduling", self.min_text_length)
            return self._state

        if self._state is RequestState.IN_FLIGHT:
            logger.debug("Change recorded while in flight")
        else:
            self._arm()
        return self._state

    async def settle(self) -> OrchestratorStatus:
        """Wait until nothing is debouncing or in flight."""
        await self._settled.wait()
        return self.status()

    def subscribe(self) -> asyncio.Queue[OrchestratorStatus]:
        queue: asyncio.Queue[OrchestratorStatus] = asyncio.Queue()
        self._listeners.append(queue)
        queue.put_nowait(self.status())
        return queue

    def unsubscribe(self, queue: asyncio.Queue[OrchestratorStatus]) -> None:
        if queue in self._listeners:
            self._listeners.remove(queue)

    async def close(self) -> None:
        """Drop a pending timer and cancel the running call, if any."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        flight, self._flight = self._flight, None
        if flight is not None and not flight.done():
            flight.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await flight
        self._set_state(RequestState.IDLE)

    # --- internals ---

    def _passes_gate(self, text: str) -> bool:
        return len(text) >= self.min_text_length

    def _set_state(self, state: RequestState) -> None:
        if state is not self._state:
            logger.debug("State %s -> %s", self._state.value, state.value)
        self._state = state
        if state is RequestState.IDLE:
            self._settled.set()
        else:
            self._settled.clear()
        snapshot = self.status()
        for queue in self._listeners:
            queue.put_nowait(snapshot)

    def _arm(self) -> None:
        loop = asyncio.get_running_loop()
        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(self.debounce_s, self._on_timer)
        self._set_state(RequestState.DEBOUNCING)

    def _on_timer(self) -> None:
        self._timer = None
        pending = self._latest
        if pending is None or not self._passes_gate(pending.text):
            self._set_state(RequestState.IDLE)
            return
        self._flight = asyncio.get_running_loop().create_task(self._fly(pending))

    async def _fly(self, sent: GenerationInput) -> None:
        self._requests_sent += 1
        self._set_state(RequestState.IN_FLIGHT)
        config = self._settings_source()

        try:
            output = await self._client.complete(sent.text, sent.parameters, config)
        except asyncio.CancelledError:
            logger.info("Rewrite cancelled")
            self._set_state(RequestState.IDLE)
            raise
        except Exception as e:
            logger.warning("Error adjusting text: %s", e)
            self._current_output = ERROR_PLACEHOLDER
            self._last_error = str(e) or type(e).__name__
            self._set_state(RequestState.ERRORED)
        else:
            self._previous = self._current
            self._current = GenerationSnapshot(
                text=output,
                parameters=dict(sent.parameters),
                source_text=sent.text,
                timestamp=time.time(),
            )
            self._current_output = output
            self._last_error = None
        finally:
            self._flight = None

        latest = self._latest
        if latest is not None and latest != sent and self._passes_gate(latest.text):
            self._arm()
        else:
            self._set_state(RequestState.IDLE)
