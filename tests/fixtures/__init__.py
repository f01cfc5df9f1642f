"""Shared testing fixtures and fakes for the infinite_practice test suite."""

from .openai import (  # noqa: F401
    FakeChatClient,
    FakeClientFactory,
    ScriptedService,
    question_payload,
)
from .workspace import WorkspaceBuilder, build_tree  # noqa: F401

__all__ = [
    "FakeChatClient",
    "FakeClientFactory",
    "ScriptedService",
    "WorkspaceBuilder",
    "build_tree",
    "question_payload",
]
