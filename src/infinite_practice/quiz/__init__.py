from .grading import (
    ChoiceState,
    choice_states,
    feedback_text,
    is_correct,
    is_locked,
)
from .models import LABELS, Question, labels_for
from .parser import (
    ParseFailure,
    ParseFailureKind,
    ParseResult,
    ParseSuccess,
    normalize_question,
    parse_questions,
)
from .prompt import build_prompt
from .service import OpenAIQuestionService, QuestionService
from .session import (
    ALL_CATEGORIES,
    MAX_BATCH,
    FailureKind,
    GenerationError,
    GenerationInProgressError,
    GenerationTicket,
    QuizSession,
    QuizSessionError,
    SessionState,
    SessionSummary,
)

__all__ = [
    "LABELS",
    "Question",
    "labels_for",
    "build_prompt",
    "parse_questions",
    "normalize_question",
    "ParseResult",
    "ParseSuccess",
    "ParseFailure",
    "ParseFailureKind",
    "is_correct",
    "is_locked",
    "choice_states",
    "feedback_text",
    "ChoiceState",
    "QuestionService",
    "OpenAIQuestionService",
    "QuizSession",
    "QuizSessionError",
    "GenerationInProgressError",
    "GenerationTicket",
    "GenerationError",
    "FailureKind",
    "SessionState",
    "SessionSummary",
    "ALL_CATEGORIES",
    "MAX_BATCH",
]
