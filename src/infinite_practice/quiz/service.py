"""Generation-service collaborators that turn a prompt into raw model text."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, Protocol

from infinite_practice.core.ai import chat_completion_content, load_client

DEFAULT_MODEL = "gpt-4o"
DEFAULT_TEMPERATURE = 0.3

ClientFactory = Callable[[str], Any]


class QuestionService(Protocol):
    """Anything that answers a prompt with text that should hold a JSON array."""

    async def complete(self, prompt: str, *, api_key: str) -> str:
        ...


class OpenAIQuestionService:
    """Send prompts to an OpenAI chat model.

    The OpenAI client is synchronous, so each request runs in a worker thread
    to keep the event loop free while the model responds. One client is
    created per credential and reused for later rounds.
    """

    def __init__(
        self,
        *,
        model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        client_factory: ClientFactory = load_client,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self._client_factory = client_factory
        self._clients: Dict[str, Any] = {}

    def _client_for(self, api_key: str) -> Any:
        client = self._clients.get(api_key)
        if client is None:
            client = self._client_factory(api_key)
            self._clients[api_key] = client
        return client

    async def complete(self, prompt: str, *, api_key: str) -> str:
        client = self._client_for(api_key)
        return await asyncio.to_thread(
            chat_completion_content,
            client,
            model=self.model,
            prompt=prompt,
            temperature=self.temperature,
        )
