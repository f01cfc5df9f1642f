"""Core shared helpers for infinite-practice commands."""

from __future__ import annotations

from .ai import chat_completion_content, load_client, resolve_api_key
from .config import (
    TomlConfigError,
    env_string,
    load_toml,
    overlay,
    pick_first,
    write_packaged_template,
)
from .files import read_sources, read_text_file
from .logging import JsonLogFormatter, configure_logger
from .workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)

__all__ = [
    "load_client",
    "resolve_api_key",
    "chat_completion_content",
    "TomlConfigError",
    "load_toml",
    "overlay",
    "write_packaged_template",
    "env_string",
    "pick_first",
    "read_sources",
    "read_text_file",
    "configure_logger",
    "JsonLogFormatter",
    "ensure_workspace",
    "WorkspaceLayout",
    "WorkspaceError",
    "WORKSPACE_ENV",
]
