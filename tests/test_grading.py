from __future__ import annotations

import pytest

from infinite_practice.quiz.grading import (
    ChoiceState,
    choice_states,
    feedback_text,
    is_correct,
    is_locked,
)
from infinite_practice.quiz.models import Question


def make_question(answer: str = "B", choices=("w", "x", "y", "z")) -> Question:
    return Question(question="Pick", choices=tuple(choices), answer=answer)


@pytest.mark.parametrize(
    "submitted, expected",
    [("b", True), ("B", True), ("a", False), ("", False), (None, False)],
)
def test_is_correct_is_case_insensitive(submitted, expected) -> None:
    assert is_correct(make_question("B"), submitted) is expected


def test_is_correct_requires_an_answer_on_the_question() -> None:
    assert is_correct(make_question(""), "A") is False


def test_choice_states_before_answer_are_neutral() -> None:
    states = choice_states(make_question(), None)

    assert states == [ChoiceState.NEUTRAL] * 4
    assert is_locked(None) is False


def test_choice_states_for_correct_answer() -> None:
    states = choice_states(make_question("B"), "B")

    assert states == [
        ChoiceState.NEUTRAL,
        ChoiceState.CORRECT_CHOSEN,
        ChoiceState.NEUTRAL,
        ChoiceState.NEUTRAL,
    ]
    assert is_locked("B") is True


def test_choice_states_for_wrong_answer_reveal_correct_choice() -> None:
    states = choice_states(make_question("B"), "d")

    assert states == [
        ChoiceState.NEUTRAL,
        ChoiceState.CORRECT_UNCHOSEN,
        ChoiceState.NEUTRAL,
        ChoiceState.INCORRECT_CHOSEN,
    ]


def test_choice_states_only_cover_selectable_labels() -> None:
    question = make_question("A", choices=("1", "2", "3", "4", "5", "6"))

    assert len(choice_states(question, None)) == 4
    assert question.labels == ("A", "B", "C", "D")
    assert question.choice_for("E") is None


def test_feedback_text() -> None:
    question = make_question("C")

    assert feedback_text(question, None) == ""
    assert feedback_text(question, "c") == "Correct!"
    assert feedback_text(question, "A") == "Incorrect. Correct: C"
