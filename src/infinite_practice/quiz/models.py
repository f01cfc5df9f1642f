"""Question entity and choice-label helpers."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping

LABELS: tuple[str, ...] = ("A", "B", "C", "D")
DEFAULT_CATEGORY = "general"


@dataclass(frozen=True)
class Question:
    """Immutable multiple-choice question produced by one generation round."""

    question: str
    choices: tuple[str, ...]
    answer: str
    explanation: str = ""
    excerpt: str = ""
    category: str = DEFAULT_CATEGORY
    extra: Mapping[str, object] = field(
        default_factory=lambda: MappingProxyType({}), compare=False
    )

    @property
    def labels(self) -> tuple[str, ...]:
        return labels_for(self)

    def choice_for(self, label: str | None) -> str | None:
        if not label:
            return None
        normalized = str(label).strip().upper()
        if normalized not in self.labels:
            return None
        return self.choices[LABELS.index(normalized)]

    def with_answer(self, answer: str) -> "Question":
        return replace(self, answer=answer)


def labels_for(question: Question) -> tuple[str, ...]:
    """Labels a user can pick for ``question``.

    Only the first four choices map to a label; anything past ``D`` is kept
    on the entity but cannot be selected.
    """

    return LABELS[: min(len(question.choices), len(LABELS))]
