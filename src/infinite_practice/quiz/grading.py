"""Answer grading and per-choice display state."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from .models import Question


class ChoiceState(Enum):
    NEUTRAL = "neutral"
    CORRECT_CHOSEN = "correct-chosen"
    INCORRECT_CHOSEN = "incorrect-chosen"
    CORRECT_UNCHOSEN = "correct-unchosen"


def is_correct(question: Question, submitted: Optional[str]) -> bool:
    """Case-insensitive comparison of ``submitted`` with the answer label."""

    if not submitted or not question.answer:
        return False
    return submitted.upper() == question.answer.upper()


def is_locked(selected: Optional[str]) -> bool:
    """A question stops accepting input once any answer is recorded."""

    return bool(selected)


def choice_states(
    question: Question, selected: Optional[str]
) -> List[ChoiceState]:
    """Return one state per selectable label of ``question``.

    Before an answer every choice is neutral. A correct answer highlights the
    chosen option only; a wrong one marks the chosen option incorrect and
    reveals the correct option.
    """

    labels = question.labels
    states = [ChoiceState.NEUTRAL] * len(labels)
    if not is_locked(selected):
        return states
    chosen = str(selected).strip().upper()
    answer = question.answer.strip().upper()
    correct = is_correct(question, chosen)
    for position, label in enumerate(labels):
        if label == chosen:
            states[position] = (
                ChoiceState.CORRECT_CHOSEN
                if correct
                else ChoiceState.INCORRECT_CHOSEN
            )
        elif not correct and label == answer:
            states[position] = ChoiceState.CORRECT_UNCHOSEN
    return states


def feedback_text(question: Question, selected: Optional[str]) -> str:
    if not is_locked(selected):
        return ""
    if is_correct(question, selected):
        return "Correct!"
    return f"Incorrect. Correct: {question.answer}"
