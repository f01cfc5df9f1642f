"""Shared AI helper utilities."""

from __future__ import annotations

import os
from typing import Any, Optional

from dotenv import load_dotenv
from openai import OpenAI

__all__ = [
    "API_KEY_ENV",
    "resolve_api_key",
    "load_client",
    "chat_completion_content",
]

API_KEY_ENV = "OPENAI_API_KEY"


def resolve_api_key(explicit: Optional[str] = None) -> str:
    """Return ``explicit`` or the key found in the environment / ``.env``."""
    candidate = (explicit or "").strip()
    if candidate:
        return candidate
    load_dotenv()
    candidate = (os.getenv(API_KEY_ENV) or "").strip()
    if not candidate:
        raise RuntimeError(
            f"{API_KEY_ENV} not found in environment. Set it or add to .env"
        )
    return candidate


def load_client(api_key: Optional[str] = None) -> Any:
    """Initialize an OpenAI client using ``api_key`` or environment credentials."""
    return OpenAI(api_key=resolve_api_key(api_key))


def chat_completion_content(
    client: Any,
    *,
    model: str,
    prompt: str,
    temperature: float,
) -> str:
    """Send ``prompt`` as a single user message and return the reply text.

    Transport and API errors propagate to the caller. A response without
    choices or content yields an empty string.
    """

    resp = client.chat.completions.create(
        model=model,
        messages=[{"role": "user", "content": prompt}],
        temperature=temperature,
    )
    choices = getattr(resp, "choices", None) or []
    if not choices:
        return ""
    return choices[0].message.content or ""
