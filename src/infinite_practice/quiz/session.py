"""Quiz session state machine.

A :class:`QuizSession` owns one question set at a time. Each generation round
moves the session ``IDLE -> GENERATING -> READY | FAILED``; ``READY`` and
``FAILED`` may start a new round, which discards everything from the previous
one. Inside ``READY`` every question moves independently from unanswered to
answered, and an answer is never overwritten.

Rounds are numbered with an epoch counter. A response is only applied while
the session is still generating the round it was requested for, so a late
reply from an abandoned round cannot overwrite newer state.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union

from .grading import is_correct
from .models import LABELS, Question
from .parser import ParseFailure, parse_questions
from .prompt import build_prompt
from .service import QuestionService

MIN_BATCH = 1
MAX_BATCH = 20
ALL_CATEGORIES = "All"

ERROR_PREFIX = (
    "Failed to generate questions. Check your API key and input. Error: "
)
NO_RESPONSE_REASON = "No response from AI"
PARSE_FAILED_REASON = "Failed to parse questions from AI response"


class SessionState(Enum):
    IDLE = "idle"
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


class FailureKind(Enum):
    TRANSPORT = "transport"
    STRUCTURE = "structure"


class QuizSessionError(RuntimeError):
    """Raised when a session operation is not allowed in the current state."""


class GenerationInProgressError(QuizSessionError):
    """Raised when a round is requested while another one is in flight."""


@dataclass(frozen=True)
class GenerationError:
    kind: FailureKind
    reason: str

    @property
    def message(self) -> str:
        return ERROR_PREFIX + self.reason


@dataclass(frozen=True)
class GenerationTicket:
    """Handle for one in-flight round; pass it back when the reply arrives."""

    epoch: int
    prompt: str
    count: int


@dataclass(frozen=True)
class CategorySummary:
    category: str
    asked: int
    correct: int

    @property
    def accuracy(self) -> float:
        if self.asked == 0:
            return 0.0
        return self.correct / self.asked


@dataclass(frozen=True)
class SessionSummary:
    total_questions: int
    answered_questions: int
    correct_answers: int
    per_category: Dict[str, CategorySummary] = field(default_factory=dict)

    @property
    def accuracy(self) -> float:
        if self.answered_questions == 0:
            return 0.0
        return self.correct_answers / self.answered_questions


EpochRef = Union[GenerationTicket, int]


def validate_count(count: int) -> int:
    if isinstance(count, bool) or not isinstance(count, int):
        raise QuizSessionError("Question count must be an integer.")
    if not MIN_BATCH <= count <= MAX_BATCH:
        raise QuizSessionError(
            f"Question count must be between {MIN_BATCH} and {MAX_BATCH}."
        )
    return count


class QuizSession:
    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._state = SessionState.IDLE
        self._epoch = 0
        self._questions: Tuple[Question, ...] = ()
        self._answers: Dict[int, str] = {}
        self._seen: List[str] = []
        self._error: Optional[GenerationError] = None
        self._filter = ALL_CATEGORIES

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def questions(self) -> Tuple[Question, ...]:
        return self._questions

    @property
    def answers(self) -> Mapping[int, str]:
        return MappingProxyType(self._answers)

    @property
    def seen_questions(self) -> Tuple[str, ...]:
        return tuple(self._seen)

    @property
    def error(self) -> Optional[GenerationError]:
        return self._error

    @property
    def is_generating(self) -> bool:
        return self._state is SessionState.GENERATING

    def can_start(self, api_key: Optional[str], text: Optional[str]) -> bool:
        """Whether the start control should be enabled."""

        return bool(
            (api_key or "").strip()
            and (text or "").strip()
            and not self.is_generating
        )

    # -- generation round -------------------------------------------------

    def start_generation(
        self, api_key: str, text: str, count: int
    ) -> GenerationTicket:
        """Reset the session and open a new round.

        The prompt never carries the seen-question history: every round
        starts without exclusions.
        """

        if self.is_generating:
            raise GenerationInProgressError(
                "A generation round is already in progress."
            )
        if not (api_key or "").strip():
            raise QuizSessionError("An API key is required.")
        if not (text or "").strip():
            raise QuizSessionError("Study text is required.")
        validate_count(count)

        self._questions = ()
        self._answers = {}
        self._seen = []
        self._error = None
        self._filter = ALL_CATEGORIES
        self._epoch += 1
        self._state = SessionState.GENERATING

        prompt = build_prompt(text, count, seen_questions=())
        self._logger.info(
            "Generation round started",
            extra={
                "epoch": self._epoch,
                "count": count,
                "text_chars": len(text),
            },
        )
        return GenerationTicket(epoch=self._epoch, prompt=prompt, count=count)

    def complete_generation(
        self, ticket: EpochRef, raw: Optional[str]
    ) -> bool:
        """Apply a service reply. Returns ``False`` if it was discarded."""

        epoch = _epoch_of(ticket)
        if not self._accepts(epoch):
            return False
        if not raw or not raw.strip():
            self._fail(FailureKind.TRANSPORT, NO_RESPONSE_REASON)
            return True

        result = parse_questions(raw)
        if isinstance(result, ParseFailure):
            self._logger.debug(
                "Unparseable response",
                extra={
                    "epoch": epoch,
                    "kind": result.kind.value,
                    "detail": result.detail,
                    "raw_chars": len(raw),
                },
            )
            self._fail(
                FailureKind.STRUCTURE,
                f"{PARSE_FAILED_REASON} ({result.kind.value})",
            )
            return True

        self._questions = tuple(
            self._reachable(index, question)
            for index, question in enumerate(result.questions)
        )
        self._state = SessionState.READY
        self._logger.info(
            "Generation round ready",
            extra={"epoch": epoch, "question_count": len(self._questions)},
        )
        return True

    def fail_generation(
        self, ticket: EpochRef, reason: Union[str, BaseException]
    ) -> bool:
        """Record a transport failure for the round. ``False`` if stale."""

        epoch = _epoch_of(ticket)
        if not self._accepts(epoch):
            return False
        if isinstance(reason, BaseException):
            reason = str(reason) or type(reason).__name__
        self._fail(FailureKind.TRANSPORT, reason or NO_RESPONSE_REASON)
        return True

    async def generate(
        self,
        service: QuestionService,
        api_key: str,
        text: str,
        count: int,
    ) -> bool:
        """Run a full round against ``service``; ``True`` when it is ready."""

        ticket = self.start_generation(api_key, text, count)
        try:
            raw = await service.complete(ticket.prompt, api_key=api_key)
        except asyncio.CancelledError:
            self.fail_generation(ticket, "Generation cancelled")
            raise
        except Exception as exc:
            self.fail_generation(ticket, exc)
            return False
        self.complete_generation(ticket, raw)
        return (
            self._epoch == ticket.epoch
            and self._state is SessionState.READY
        )

    def _accepts(self, epoch: int) -> bool:
        if epoch == self._epoch and self.is_generating:
            return True
        self._logger.debug(
            "Discarded stale generation response",
            extra={"epoch": epoch, "current_epoch": self._epoch},
        )
        return False

    def _fail(self, kind: FailureKind, reason: str) -> None:
        self._error = GenerationError(kind, reason)
        self._state = SessionState.FAILED
        self._logger.warning(
            "Generation round failed",
            extra={"epoch": self._epoch, "kind": kind.value, "reason": reason},
        )

    def _reachable(self, index: int, question: Question) -> Question:
        labels = question.labels
        if question.answer in labels:
            return question
        fallback = labels[0] if labels else LABELS[0]
        if question.answer == fallback:
            return question
        self._logger.warning(
            "Answer label not selectable; using first choice",
            extra={
                "index": index,
                "answer": question.answer,
                "choice_count": len(question.choices),
            },
        )
        return question.with_answer(fallback)

    # -- answering -------------------------------------------------------

    def answer(self, index: int, letter: Optional[str]) -> bool:
        """Record ``letter`` for question ``index`` once.

        Returns ``False`` without changing anything when the question was
        already answered or ``letter`` is not one of its labels.
        """

        if self._state is not SessionState.READY:
            raise QuizSessionError("There are no questions to answer yet.")
        if not 0 <= index < len(self._questions):
            raise IndexError(f"Question index out of range: {index}")
        if index in self._answers:
            return False
        question = self._questions[index]
        label = (letter or "").strip().upper()
        if label not in question.labels:
            return False
        self._answers[index] = label
        self._seen.append(question.question)
        self._logger.info(
            "Answer recorded",
            extra={
                "epoch": self._epoch,
                "index": index,
                "correct": is_correct(question, label),
            },
        )
        return True

    def selected_for(self, index: int) -> Optional[str]:
        return self._answers.get(index)

    # -- derived reads ---------------------------------------------------

    @property
    def num_answered(self) -> int:
        return len(self._answers)

    @property
    def num_correct(self) -> int:
        return sum(
            1
            for index, label in self._answers.items()
            if is_correct(self._questions[index], label)
        )

    @property
    def categories(self) -> List[str]:
        return list(dict.fromkeys(q.category for q in self._questions))

    @property
    def filter_category(self) -> str:
        return self._filter

    def set_filter(self, category: str) -> None:
        if category != ALL_CATEGORIES and category not in self.categories:
            raise QuizSessionError(f"Unknown category '{category}'.")
        self._filter = category

    def filtered_questions(self) -> List[Tuple[int, Question]]:
        """Questions matching the filter, paired with their set index."""

        return [
            (index, question)
            for index, question in enumerate(self._questions)
            if self._filter == ALL_CATEGORIES
            or question.category == self._filter
        ]

    def summary(self) -> SessionSummary:
        asked: Dict[str, int] = {}
        correct: Dict[str, int] = {}
        for index, label in self._answers.items():
            question = self._questions[index]
            asked[question.category] = asked.get(question.category, 0) + 1
            if is_correct(question, label):
                correct[question.category] = (
                    correct.get(question.category, 0) + 1
                )
        return SessionSummary(
            total_questions=len(self._questions),
            answered_questions=self.num_answered,
            correct_answers=self.num_correct,
            per_category={
                category: CategorySummary(
                    category=category,
                    asked=asked[category],
                    correct=correct.get(category, 0),
                )
                for category in self.categories
                if category in asked
            },
        )


def _epoch_of(ticket: EpochRef) -> int:
    if isinstance(ticket, GenerationTicket):
        return ticket.epoch
    return int(ticket)
