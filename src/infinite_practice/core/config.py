"""Shared TOML configuration helpers for infinite-practice commands."""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

try:  # Python >= 3.11 ships ``tomllib`` in the stdlib.
    import tomllib
except ModuleNotFoundError as exc:  # pragma: no cover - interpreter guard
    raise RuntimeError("Python 3.11+ is required for tomllib support.") from exc

__all__ = [
    "TomlConfigError",
    "load_toml",
    "overlay",
    "write_packaged_template",
    "env_string",
    "pick_first",
]


class TomlConfigError(RuntimeError):
    """Raised when TOML config IO or validation fails."""


def load_toml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(f"Failed to parse config TOML: {exc}") from exc


def overlay(
    defaults: Mapping[str, Any],
    override: Mapping[str, Any],
    *,
    prefix: str = "",
) -> Dict[str, Any]:
    """Return ``defaults`` with ``override`` laid on top.

    Only keys present in ``defaults`` may be overridden, and a table may only
    be replaced by a table. Neither input is modified.
    """

    merged: Dict[str, Any] = {
        key: dict(value) if isinstance(value, Mapping) else value
        for key, value in defaults.items()
    }
    for key, value in override.items():
        dotted = prefix + key
        if key not in defaults:
            raise TomlConfigError(f"Unknown configuration key '{dotted}'.")
        if not isinstance(defaults[key], Mapping):
            merged[key] = value
        elif isinstance(value, Mapping):
            merged[key] = overlay(defaults[key], value, prefix=dotted + ".")
        else:
            raise TomlConfigError(
                f"Expected table for '{dotted}', found {type(value).__name__}."
            )
    return merged


def write_packaged_template(
    package: str,
    filename: str,
    target: Path,
    *,
    overwrite: bool = False,
) -> Path:
    """Copy the ``filename`` resource of ``package`` to ``target`` (mode 0600)."""

    if target.exists() and not overwrite:
        raise TomlConfigError(f"Config already exists: {target}")
    try:
        text = resources.files(package).joinpath(filename).read_text(
            encoding="utf-8"
        )
    except (FileNotFoundError, ModuleNotFoundError) as exc:
        raise TomlConfigError(
            f"Packaged template {package}/{filename} is missing."
        ) from exc
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")
    try:
        target.chmod(0o600)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return target


def env_string(
    env: Mapping[str, str], prefix: str, key: str
) -> Optional[str]:
    """Return the stripped ``{prefix}{key}`` variable or ``None`` when blank."""

    raw = env.get(f"{prefix}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def pick_first(*candidates: object) -> object:
    """Return the first candidate that is not ``None``."""

    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
