from __future__ import annotations

import io
import logging
from pathlib import Path

import pytest
from rich.console import Console

from infinite_practice.quiz import cli
from infinite_practice.quiz.config import CONFIG_FILENAME


@pytest.fixture(autouse=True)
def _reset_quiz_logger():
    yield
    logger = logging.getLogger(cli.LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


@pytest.fixture
def practice_env(monkeypatch, scripted_service, tmp_path):
    """Route the CLI's console, input and service through test doubles."""

    console = Console(record=True, width=100, force_terminal=False)
    inputs = []
    built_configs = []

    def provider() -> str:
        if not inputs:
            raise EOFError
        return inputs.pop(0)

    def build_service(config):
        built_configs.append(config)
        return scripted_service

    monkeypatch.setattr(cli, "_build_console", lambda: console)
    monkeypatch.setattr(cli, "_build_input_provider", lambda _console: provider)
    monkeypatch.setattr(cli, "_build_service", build_service)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    return console, inputs, built_configs


def test_runs_a_practice_session(
    practice_env, scripted_service, sample_payload, workspace, tmp_path
) -> None:
    console, inputs, built_configs = practice_env
    notes = workspace.write("notes.md", "# Cells\nMitochondria make ATP.\n")
    scripted_service.queue(sample_payload)
    inputs.extend(["b", "q"])

    exit_code = cli.main(
        [str(notes), "--num", "3", "--workspace", str(tmp_path / "ws")]
    )

    assert exit_code == 0
    assert scripted_service.api_keys == ["sk-env"]
    assert "Generate 3 unique" in scripted_service.prompts[0]
    assert "Mitochondria make ATP." in scripted_service.prompts[0]
    assert built_configs[0].num_questions == 3
    output = console.export_text()
    assert "Correct!" in output
    assert "Log file:" in output
    log_file = tmp_path / "ws" / "logs" / "quiz.log"
    assert log_file.exists()
    assert "Answer recorded" in log_file.read_text(encoding="utf-8")


def test_failed_generation_exits_non_zero(
    practice_env, scripted_service, workspace, tmp_path
) -> None:
    console, inputs, _ = practice_env
    notes = workspace.write("notes.txt", "Some notes.")
    scripted_service.queue("no json here")
    inputs.append("quit")

    exit_code = cli.main(
        [str(notes), "--api-key", "sk-flag", "--workspace", str(tmp_path / "ws")]
    )

    assert exit_code == 1
    assert scripted_service.api_keys == ["sk-flag"]
    assert "Generation failed" in console.export_text()


def test_missing_api_key_returns_error(
    practice_env, monkeypatch, workspace, tmp_path, capsys
) -> None:
    monkeypatch.delenv("OPENAI_API_KEY")
    notes = workspace.write("notes.txt", "Some notes.")

    exit_code = cli.main([str(notes), "--workspace", str(tmp_path / "ws")])

    assert exit_code == 2
    assert "OPENAI_API_KEY not found" in capsys.readouterr().err


def test_missing_notes_file(practice_env, tmp_path, capsys) -> None:
    exit_code = cli.main(
        [str(tmp_path / "nope.md"), "--workspace", str(tmp_path / "ws")]
    )

    assert exit_code == 2
    assert "Input not found" in capsys.readouterr().err


def test_blank_notes_are_rejected(
    practice_env, workspace, tmp_path, capsys
) -> None:
    notes = workspace.write("blank.md", "   \n\n")

    exit_code = cli.main([str(notes), "--workspace", str(tmp_path / "ws")])

    assert exit_code == 2
    assert "study material is empty" in capsys.readouterr().err


def test_notes_from_stdin(
    practice_env, scripted_service, sample_payload, monkeypatch, tmp_path
) -> None:
    _, inputs, _ = practice_env
    monkeypatch.setattr("sys.stdin", io.StringIO("Piped study notes."))
    scripted_service.queue(sample_payload)
    inputs.append("q")

    exit_code = cli.main(["-", "--workspace", str(tmp_path / "ws")])

    assert exit_code == 0
    assert "Piped study notes." in scripted_service.prompts[0]


@pytest.mark.parametrize("value", ["0", "21", "ten"])
def test_num_must_be_in_range(practice_env, tmp_path, value) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["notes.md", "--num", value])
    assert excinfo.value.code == 2


def test_bad_config_is_a_usage_error(
    practice_env, workspace, tmp_path, capsys
) -> None:
    notes = workspace.write("notes.md", "text")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(
            [
                str(notes),
                "--config",
                str(tmp_path / "missing.toml"),
                "--workspace",
                str(tmp_path / "ws"),
            ]
        )

    assert excinfo.value.code == 2
    assert "Config file not found" in capsys.readouterr().err


def test_config_init_writes_template(tmp_path: Path, capsys) -> None:
    exit_code = cli.main(
        ["config", "init", "--workspace", str(tmp_path / "ws")]
    )

    target = (tmp_path / "ws").resolve() / "config" / CONFIG_FILENAME
    assert exit_code == 0
    assert target.exists()
    assert "[generation]" in target.read_text(encoding="utf-8")
    assert f"Wrote quiz config to {target}" in capsys.readouterr().out


def test_config_init_refuses_to_overwrite(tmp_path: Path, capsys) -> None:
    target = tmp_path / "practice.toml"
    target.write_text("# mine\n", encoding="utf-8")

    exit_code = cli.main(["config", "init", "--path", str(target)])

    assert exit_code == 1
    assert "Config already exists" in capsys.readouterr().err
    assert target.read_text(encoding="utf-8") == "# mine\n"

    assert cli.main(["config", "init", "--path", str(target), "--force"]) == 0
    assert "[generation]" in target.read_text(encoding="utf-8")
