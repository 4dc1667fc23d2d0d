"""FastAPI dependency injection."""

from __future__ import annotations

from fastapi import Request

from app.config import SettingsProvider
from app.engine.session import PlaygroundSession
from app.llm.client import CompletionClient


def get_settings_provider(request: Request) -> SettingsProvider:
    return request.app.state.settings_provider


def get_session(request: Request) -> PlaygroundSession:
    return request.app.state.session


def get_completion_client(request: Request) -> CompletionClient:
    return request.app.state.completion_client
