"""Configuration loader for practice quizzes."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from infinite_practice.core import config as core_config
from infinite_practice.core import workspace as workspace_mod

from .service import DEFAULT_MODEL, DEFAULT_TEMPERATURE
from .session import MAX_BATCH, MIN_BATCH

CONFIG_FILENAME = "practice.toml"
CONFIG_ENV = "PRACTICE_QUIZ_CONFIG"
ENV_PREFIX = "PRACTICE_QUIZ_"

DEFAULT_NUM_QUESTIONS = 10
_DEFAULT_LOG_LEVEL = "INFO"
_MAX_TEMPERATURE = 2.0


class QuizConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizConfig:
    """Fully resolved settings for a practice run."""

    model: str
    temperature: float
    num_questions: int
    log_level: str


@dataclass(frozen=True)
class ConfigOverrides:
    """Values supplied on the command line; ``None`` means not given."""

    model: Optional[str] = None
    temperature: Optional[float] = None
    num_questions: Optional[int] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    config: QuizConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Resolve settings with precedence CLI > env > TOML > defaults.

    A missing default ``practice.toml`` is fine; a missing file that was
    asked for explicitly (flag or ``PRACTICE_QUIZ_CONFIG``) is an error.
    """

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise QuizConfigError(str(exc)) from exc

    explicit = _explicit_config_path(config_path, env_map)
    requested = explicit or layout.path_for("config") / CONFIG_FILENAME

    table = _default_table()
    loaded_path: Optional[Path] = None
    if requested.exists():
        try:
            table = core_config.overlay(
                table, core_config.load_toml(requested)
            )
        except core_config.TomlConfigError as exc:
            raise QuizConfigError(str(exc)) from exc
        loaded_path = requested
    elif explicit is not None:
        raise QuizConfigError(f"Config file not found: {requested}")

    generation = table["generation"]
    config = QuizConfig(
        model=_resolve_model(
            core_config.pick_first(
                overrides.model,
                core_config.env_string(env_map, ENV_PREFIX, "MODEL"),
                generation["model"],
            )
        ),
        temperature=_resolve_temperature(
            core_config.pick_first(
                overrides.temperature,
                core_config.env_string(env_map, ENV_PREFIX, "TEMPERATURE"),
                generation["temperature"],
            )
        ),
        num_questions=_resolve_num_questions(
            core_config.pick_first(
                overrides.num_questions,
                core_config.env_string(env_map, ENV_PREFIX, "NUM_QUESTIONS"),
                generation["num_questions"],
            )
        ),
        log_level=_resolve_log_level(
            core_config.pick_first(
                overrides.log_level,
                core_config.env_string(env_map, ENV_PREFIX, "LOG_LEVEL"),
                table["logging"]["level"],
            )
        ),
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def _default_table() -> Dict[str, Any]:
    return {
        "generation": {
            "model": DEFAULT_MODEL,
            "temperature": DEFAULT_TEMPERATURE,
            "num_questions": DEFAULT_NUM_QUESTIONS,
        },
        "logging": {"level": _DEFAULT_LOG_LEVEL},
    }


def _explicit_config_path(
    config_path: Optional[Path], env_map: Mapping[str, str]
) -> Optional[Path]:
    if config_path is not None:
        return Path(config_path).expanduser()
    env_candidate = (env_map.get(CONFIG_ENV) or "").strip()
    if env_candidate:
        return Path(env_candidate).expanduser()
    return None


def _resolve_model(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise QuizConfigError("generation.model must be a non-empty string.")
    return value.strip()


def _resolve_temperature(value: object) -> float:
    if isinstance(value, bool):
        raise QuizConfigError("generation.temperature must be a number.")
    try:
        temperature = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise QuizConfigError(
            "generation.temperature must be a number."
        ) from exc
    if not 0.0 <= temperature <= _MAX_TEMPERATURE:
        raise QuizConfigError(
            f"generation.temperature must be between 0 and {_MAX_TEMPERATURE}."
        )
    return temperature


def _resolve_num_questions(value: object) -> int:
    if isinstance(value, bool):
        raise QuizConfigError("generation.num_questions must be an integer.")
    if isinstance(value, float) and not value.is_integer():
        raise QuizConfigError("generation.num_questions must be an integer.")
    try:
        count = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise QuizConfigError(
            "generation.num_questions must be an integer."
        ) from exc
    if not MIN_BATCH <= count <= MAX_BATCH:
        raise QuizConfigError(
            "generation.num_questions must be between "
            f"{MIN_BATCH} and {MAX_BATCH}."
        )
    return count


def _resolve_log_level(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise QuizConfigError("logging.level must be a non-empty string.")
    return value.strip().upper()


def write_template(target: Path, *, overwrite: bool = False) -> Path:
    """Write the packaged ``practice.toml`` template to ``target``."""

    try:
        return core_config.write_packaged_template(
            __package__, CONFIG_FILENAME, target, overwrite=overwrite
        )
    except core_config.TomlConfigError as exc:
        raise QuizConfigError(str(exc)) from exc
