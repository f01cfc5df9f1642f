"""Command-line interface for ``practice quiz``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.text import Text

from infinite_practice.core import workspace as workspace_mod
from infinite_practice.core.ai import resolve_api_key
from infinite_practice.core.files import read_sources
from infinite_practice.core.logging import configure_logger
from infinite_practice.core.workspace import WorkspaceError

from .config import (
    CONFIG_FILENAME,
    ConfigOverrides,
    QuizConfig,
    QuizConfigError,
    load_config,
    write_template,
)
from .service import OpenAIQuestionService, QuestionService
from .session import MAX_BATCH, MIN_BATCH, QuizSession, SessionState
from .view import InputProvider, run_practice

LOGGER_NAME = "infinite_practice.quiz"


def _question_count(value: str) -> int:
    try:
        count = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from exc
    if not MIN_BATCH <= count <= MAX_BATCH:
        raise argparse.ArgumentTypeError(
            f"must be between {MIN_BATCH} and {MAX_BATCH}"
        )
    return count


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="practice quiz",
        description=(
            "Generate multiple-choice practice questions from study notes and "
            "answer them interactively."
        ),
        epilog=(
            "Run `practice quiz config init` to scaffold the default "
            "practice.toml template."
        ),
    )
    parser.add_argument(
        "notes",
        nargs="+",
        help="Text or Markdown files with study material ('-' reads stdin).",
    )
    parser.add_argument(
        "--num",
        type=_question_count,
        help=f"Questions per round ({MIN_BATCH}-{MAX_BATCH}).",
    )
    parser.add_argument("--model", help="Chat model used to write questions.")
    parser.add_argument(
        "--temperature",
        type=float,
        help="Sampling temperature for the model.",
    )
    parser.add_argument(
        "--api-key",
        help="OpenAI API key (defaults to OPENAI_API_KEY or .env).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help=(
            "Path to a TOML config file (defaults to the workspace config "
            "directory)."
        ),
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root used for config and logs.",
    )
    parser.add_argument(
        "--log-level",
        help="Set the logging level for the run (defaults to INFO).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Mirror log records to stderr.",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args_list = list(argv) if argv is not None else list(sys.argv[1:])

    if args_list[:1] == ["config"]:
        return _handle_config(args_list[1:])

    parser = build_arg_parser()
    args = parser.parse_args(args_list)

    overrides = ConfigOverrides(
        model=args.model,
        temperature=args.temperature,
        num_questions=args.num,
        log_level=args.log_level,
    )
    try:
        load_result = load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except QuizConfigError as exc:
        parser.error(str(exc))

    try:
        text = read_sources(args.notes)
    except OSError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 2
    if not text.strip():
        sys.stderr.write("Error: the study material is empty.\n")
        return 2

    try:
        api_key = resolve_api_key(args.api_key)
    except RuntimeError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 2

    config = load_result.config
    logger, log_path = configure_logger(
        LOGGER_NAME,
        log_dir=load_result.layout.path_for("logs"),
        level=config.log_level,
        verbose=args.verbose,
    )
    logger.debug(
        "practice quiz invoked",
        extra={
            "model": config.model,
            "num_questions": config.num_questions,
            "config_path": load_result.config_path,
        },
    )

    console = _build_console()
    session = QuizSession(logger=logger)
    result = run_practice(
        session,
        console,
        _build_input_provider(console),
        service=_build_service(config),
        api_key=api_key,
        text=text,
        count=config.num_questions,
    )
    logger.info(
        "practice quiz finished",
        extra={
            "exit_action": result.exit_action,
            "rounds": result.rounds,
            "answered": result.summary.answered_questions,
            "correct": result.summary.correct_answers,
        },
    )
    console.print(Text(f"Log file: {log_path}", style="dim"))
    return 1 if session.state is SessionState.FAILED else 0


def _build_console() -> Console:
    return Console()


def _build_input_provider(console: Console) -> InputProvider:
    return lambda: console.input("[bold cyan]> [/]")


def _build_service(config: QuizConfig) -> QuestionService:
    return OpenAIQuestionService(
        model=config.model,
        temperature=config.temperature,
    )


def _handle_config(argv: Sequence[str]) -> int:
    parser = _build_config_parser()
    args = parser.parse_args(argv)
    return _handle_config_init(args)


def _build_config_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="practice quiz config",
        description="Manage configuration files for practice quizzes.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help="Write the default practice.toml template.",
    )
    init_parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Destination for the config TOML (defaults to the workspace "
            "config directory)."
        ),
    )
    init_parser.add_argument(
        "--workspace",
        type=Path,
        help="Workspace root override used to resolve the default path.",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite the destination if a config already exists.",
    )
    return parser


def _handle_config_init(args: argparse.Namespace) -> int:
    try:
        target = _resolve_config_target(args)
    except WorkspaceError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    try:
        written = write_template(target, overwrite=args.force)
    except QuizConfigError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    sys.stdout.write(f"Wrote quiz config to {written}\n")
    return 0


def _resolve_config_target(args: argparse.Namespace) -> Path:
    if args.path is not None:
        candidate = args.path.expanduser()
        if not candidate.is_absolute():
            candidate = (Path.cwd() / candidate).resolve()
        return candidate

    layout = workspace_mod.ensure_workspace(path=args.workspace)
    return layout.path_for("config") / CONFIG_FILENAME


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
