"""Application configuration from environment variables."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "http://localhost:11434/v1"
MAX_TOKENS_LIMIT = 32768


class Settings(BaseSettings):
    # Completion endpoint
    openai_api_key: str = ""
    openai_api_base: str = DEFAULT_API_BASE
    model_name: str = ""
    max_tokens: int = Field(default=100, ge=1, le=MAX_TOKENS_LIMIT)
    seed: int | None = None
    request_timeout_s: float = 60.0

    playground_env: str = "development"
    playground_log_level: str = "debug"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Generation pipeline
    debounce_ms: int = 1000
    min_text_length: int = 4
    slider_out_of_range: Literal["reject", "clamp"] = "reject"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "protected_namespaces": ()}


class CompletionSettings(BaseModel):
    """Read-only snapshot handed to the completion client at call time."""

    api_key: str = ""
    api_base_url: str = DEFAULT_API_BASE
    model_name: str = ""
    max_tokens: int = Field(default=100, ge=1, le=MAX_TOKENS_LIMIT)
    seed: int | None = None

    model_config = {"frozen": True, "protected_namespaces": ()}

    @classmethod
    def from_settings(cls, s: Settings) -> CompletionSettings:
        return cls(
            api_key=s.openai_api_key,
            api_base_url=s.openai_api_base,
            model_name=s.model_name,
            max_tokens=s.max_tokens,
            seed=s.seed,
        )


class SettingsProvider:
    """Process-wide source of completion settings.

    Loaded once on start from the environment; save() swaps in a new frozen
    snapshot, clear() goes back to what the environment says. Nothing here is
    persisted.
    """

    def __init__(self, base: Settings | None = None) -> None:
        self._base = base or settings
        self._current = CompletionSettings.from_settings(self._base)

    @property
    def current(self) -> CompletionSettings:
        return self._current

    def __call__(self) -> CompletionSettings:
        return self._current

    def save(self, **changes: object) -> CompletionSettings:
        data = self._current.model_dump()
        data.update({k: v for k, v in changes.items() if k in data})
        # Re-validate so bounds on max_tokens still hold
        self._current = CompletionSettings.model_validate(data)
        logger.info("Settings saved (base_url=%s, model=%s)", self._current.api_base_url, self._current.model_name)
        return self._current

    def clear(self) -> CompletionSettings:
        self._current = CompletionSettings.from_settings(self._base)
        logger.info("Settings cleared")
        return self._current


settings = Settings()
