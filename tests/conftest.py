from __future__ import annotations

import sys
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

ROOT = TESTS_DIR.parent
for extra in (ROOT, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import (  # noqa: E402
    FakeClientFactory,
    ScriptedService,
    WorkspaceBuilder,
    question_payload,
)


@pytest.fixture(autouse=True)
def _isolate_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Keep tests away from the real data home, .env files and API keys."""

    monkeypatch.setenv("PRACTICE_DATA_HOME", str(tmp_path / "data-home"))
    monkeypatch.delenv("PRACTICE_QUIZ_CONFIG", raising=False)
    for key in ("MODEL", "TEMPERATURE", "NUM_QUESTIONS", "LOG_LEVEL"):
        monkeypatch.delenv(f"PRACTICE_QUIZ_{key}", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    from infinite_practice.core import ai

    monkeypatch.setattr(ai, "load_dotenv", lambda *args, **kwargs: False)


@pytest.fixture
def client_factory() -> FakeClientFactory:
    """Factory producing fake OpenAI clients that record their requests."""

    return FakeClientFactory()


@pytest.fixture
def scripted_service() -> ScriptedService:
    return ScriptedService()


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def sample_payload() -> str:
    """A chatty model reply wrapping three questions in two categories."""

    questions = [
        question_payload(
            "What organelle produces ATP?",
            ["Nucleus", "Mitochondria", "Ribosome", "Golgi body"],
            "B",
            category="Cell Biology",
            excerpt="Mitochondria are the powerhouse of the cell.",
            explanation="The excerpt names mitochondria as the ATP source.",
        ),
        question_payload(
            "Which molecule carries genetic code?",
            ["DNA", "ATP", "Glucose", "Lipid"],
            "A",
            category="Genetics",
        ),
        question_payload(
            "Where are proteins assembled?",
            ["Lysosome", "Vacuole", "Ribosome", "Cell wall"],
            "C",
            category="Cell Biology",
        ),
    ]
    import json

    return "Here are your questions:\n" + json.dumps(questions) + "\nEnjoy!"
