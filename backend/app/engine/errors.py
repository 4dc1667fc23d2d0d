"""Error taxonomy shared by the engine and the HTTP layer."""

from __future__ import annotations


class PlaygroundError(Exception):
    """Base class for every playground-specific failure."""


class InvalidValue(PlaygroundError, ValueError):
    """Non-finite, malformed or rejected numeric input. The vector is left unchanged."""

    def __init__(self, key: str, value: object, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid value {value!r} for {key}: {reason}")


class ParameterNotFound(PlaygroundError, KeyError):
    """Unknown parameter key requested from the registry."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"Unknown parameter: {self.key}"


class RequestFailed(PlaygroundError, RuntimeError):
    """Transport or HTTP failure talking to the completion endpoint."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
