"""Parse untrusted model output into normalized questions.

The generation service is asked for a bare JSON array but routinely wraps it
in prose or code fences. :func:`parse_questions` slices from the first ``[``
to the last ``]`` and decodes that span. Structural problems come back as a
:class:`ParseFailure` value; per-field problems are repaired in place with
neutral defaults so a single sloppy field never discards the round.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Union

from .models import DEFAULT_CATEGORY, Question

_SCHEMA_FIELDS = frozenset(
    {"question", "choices", "answer", "explanation", "excerpt", "category"}
)
_DEFAULT_ANSWER = "A"


class ParseFailureKind(Enum):
    """Why a response could not be turned into questions."""

    NO_ARRAY_DELIMITERS = "no_array_delimiters"
    MALFORMED_JSON = "malformed_json"


@dataclass(frozen=True)
class ParseSuccess:
    questions: tuple[Question, ...]

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class ParseFailure:
    kind: ParseFailureKind
    detail: str = ""

    @property
    def ok(self) -> bool:
        return False


ParseResult = Union[ParseSuccess, ParseFailure]


def parse_questions(raw: str | None) -> ParseResult:
    """Decode the first ``[`` ... last ``]`` span of ``raw``. Never raises."""

    if not raw:
        return ParseFailure(ParseFailureKind.NO_ARRAY_DELIMITERS)
    start = raw.find("[")
    end = raw.rfind("]")
    if start == -1 or end == -1:
        return ParseFailure(ParseFailureKind.NO_ARRAY_DELIMITERS)

    try:
        decoded = json.loads(raw[start : end + 1])
    except (ValueError, RecursionError) as exc:
        return ParseFailure(ParseFailureKind.MALFORMED_JSON, str(exc))
    if not isinstance(decoded, list):
        return ParseFailure(
            ParseFailureKind.MALFORMED_JSON,
            f"expected a JSON array, got {type(decoded).__name__}",
        )

    return ParseSuccess(tuple(normalize_question(item) for item in decoded))


def normalize_question(item: Any) -> Question:
    """Coerce one decoded element into a fully populated :class:`Question`."""

    record: Mapping[str, Any] = item if isinstance(item, dict) else {}
    raw_answer = record.get("answer")
    answer = (
        raw_answer.strip().upper()
        if isinstance(raw_answer, str)
        else _DEFAULT_ANSWER
    )
    extra = {
        str(key): value
        for key, value in record.items()
        if key not in _SCHEMA_FIELDS
    }
    return Question(
        question=_stringify(record.get("question")),
        choices=_coerce_choices(record.get("choices")),
        answer=answer,
        explanation=_text_or(record.get("explanation"), ""),
        excerpt=_text_or(record.get("excerpt"), ""),
        category=_text_or(record.get("category"), DEFAULT_CATEGORY),
        extra=MappingProxyType(extra),
    )


def _coerce_choices(value: Any) -> tuple[str, ...]:
    if isinstance(value, list):
        return tuple(_choice_text(entry) for entry in value)
    return (_stringify(value),)


def _choice_text(entry: Any) -> str:
    # Some models answer with {"key": "A", "text": "..."} objects.
    if isinstance(entry, dict) and "text" in entry:
        return _stringify(entry["text"])
    return _stringify(entry)


def _text_or(value: Any, default: str) -> str:
    return _stringify(value) if value else default


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)
