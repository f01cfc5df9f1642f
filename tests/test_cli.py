from __future__ import annotations

import sys
import types

import pytest

from infinite_practice import cli


@pytest.fixture(autouse=True)
def reset_metadata(monkeypatch):
    """Ensure metadata.version is controllable during tests."""

    def fake_version(name: str) -> str:
        assert name == "infinite-practice"
        return "0.0-test"

    monkeypatch.setattr(cli.metadata, "version", fake_version)
    yield


def test_version_command(capsys):
    assert cli.main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == "0.0-test"


def test_version_command_handles_missing_package(monkeypatch, capsys):
    def missing(name: str) -> str:
        raise cli.metadata.PackageNotFoundError(name)

    monkeypatch.setattr(cli.metadata, "version", missing)

    assert cli.main(["version"]) == 0
    assert capsys.readouterr().out.strip() == "unknown"


def test_no_args_prints_usage_and_returns_error(capsys):
    code = cli.main([])
    captured = capsys.readouterr()
    assert code == 2
    assert "Usage: practice" in captured.out
    assert "Available commands:" in captured.out


def test_help_flag_and_list(capsys):
    assert cli.main(["--help"]) == 0
    assert "Usage: practice" in capsys.readouterr().out

    assert cli.main(["list"]) == 0
    out = capsys.readouterr().out
    assert "init" in out
    assert "quiz" in out
    assert "(TUI)" in out


def test_help_for_command(capsys):
    assert cli.main(["help", "quiz"]) == 0
    assert "practice quiz --help" in capsys.readouterr().out

    assert cli.main(["help", "bogus"]) == 2
    assert "Unknown command 'bogus'." in capsys.readouterr().err


def test_unknown_command(capsys):
    assert cli.main(["bogus"]) == 2
    assert "Unknown command 'bogus'." in capsys.readouterr().err


def test_dispatch_forwards_arguments(monkeypatch):
    seen = {}

    def fake_main(argv):
        seen["argv"] = argv
        seen["sys_argv"] = list(sys.argv)
        return 7

    module = types.SimpleNamespace(main=fake_main)
    monkeypatch.setattr(cli, "import_module", lambda name: module)

    assert cli.main(["quiz", "notes.md", "--num", "5"]) == 7
    assert seen["argv"] == ["notes.md", "--num", "5"]
    assert seen["sys_argv"] == ["practice quiz", "notes.md", "--num", "5"]


def test_dispatch_normalizes_system_exit(monkeypatch, capsys):
    def exits_with_code(argv):
        raise SystemExit(3)

    def exits_with_message(argv):
        raise SystemExit("fatal problem")

    def exits_cleanly():
        raise SystemExit()

    for target, expected in (
        (exits_with_code, 3),
        (exits_with_message, 1),
        (exits_cleanly, 0),
    ):
        module = types.SimpleNamespace(main=target)
        monkeypatch.setattr(cli, "import_module", lambda name, m=module: m)
        assert cli.main(["init"]) == expected

    assert "fatal problem" in capsys.readouterr().err


def test_init_command_runs_workspace_cli(tmp_path, capsys):
    target = tmp_path / "ws"

    assert cli.main(["init", "--path", str(target)]) == 0
    assert (target / "logs").is_dir()
    assert "Workspace ready" in capsys.readouterr().out
