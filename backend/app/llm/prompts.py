"""Rewrite prompts and request-body construction."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from app.config import CompletionSettings

REWRITE_SYSTEM_PROMPT = """You are a skilled writer tasked with rewriting text.
Adjust the input text while maintaining its original meaning and intent.
DO NOT mention or explain the adjustment process or parameters in your response."""

_REWRITE_USER_TEMPLATE = 'Rewrite the following text: "{text}"'

# Body keys a parameter vector is never allowed to overwrite
_RESERVED_KEYS = frozenset({"model", "messages", "max_tokens", "seed", "stream"})


def rewrite_messages(text: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": REWRITE_SYSTEM_PROMPT},
        {"role": "user", "content": _REWRITE_USER_TEMPLATE.format(text=text)},
    ]


def build_completion_body(
    text: str,
    parameters: Mapping[str, float | None],
    config: CompletionSettings,
) -> dict[str, Any]:
    """Chat-completion body: fixed fields plus every parameter that has a value.

    Unset (None) parameters are left out so the endpoint applies its own defaults.
    """
    body: dict[str, Any] = {
        "model": config.model_name,
        "messages": rewrite_messages(text),
        "max_tokens": config.max_tokens,
    }
    if config.seed is not None:
        body["seed"] = config.seed
    for key, value in parameters.items():
        if value is None or key in _RESERVED_KEYS:
            continue
        body[key] = value
    return body


def get_all_templates() -> dict[str, str]:
    return {
        "rewrite_system": REWRITE_SYSTEM_PROMPT,
        "rewrite_user": _REWRITE_USER_TEMPLATE,
    }
