"""Prompt construction for question-generation requests."""

from __future__ import annotations

from typing import Sequence

_INSTRUCTIONS = """\
You are an educational AI that creates adaptive multiple-choice questions using ONLY the provided course material.
Generate {count} unique, non-overlapping MCQs that each cover a different section or idea from the text.
Each question must:
- Be answerable based solely on the text.
- Use a supporting excerpt (quote) from the text for the correct answer.

For each question, provide:
- "question": The question text
- "choices": Four plausible answer options (do NOT prefix with A/B/C/D)
- "answer": The correct option letter (A/B/C/D)
- "explanation": 1-2 sentences referencing the excerpt as justification
- "excerpt": The supporting quote/excerpt from the text
- "category": A short topic label
"""

_EXCLUSION = (
    "Do NOT repeat or paraphrase any of the following already-used "
    "questions: {quoted}"
)

_OUTPUT_RULE = (
    "Output ONLY a JSON array of question objects. "
    "Do not add extra commentary or text."
)


def build_prompt(
    text: str,
    count: int,
    seen_questions: Sequence[str] = (),
) -> str:
    """Return the instruction string sent to the generation service.

    ``text`` and ``count`` are embedded verbatim. The exclusion clause is only
    emitted when ``seen_questions`` has entries.
    """

    sections = [_INSTRUCTIONS.format(count=count).rstrip()]
    if seen_questions:
        quoted = ", ".join(f'"{entry}"' for entry in seen_questions)
        sections.append(_EXCLUSION.format(quoted=quoted))
    sections.append(_OUTPUT_RULE)
    sections.append(f"Text:\n{text}")
    return "\n\n".join(sections).strip()
