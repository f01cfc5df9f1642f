"""Rich front end for practice sessions.

Everything stateful lives in :class:`~infinite_practice.quiz.session.QuizSession`;
this module only renders it and turns console input into session calls. The
input provider is injectable so the loop can be driven from tests.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .grading import ChoiceState, choice_states, feedback_text, is_correct
from .models import Question
from .service import QuestionService
from .session import (
    ALL_CATEGORIES,
    QuizSession,
    QuizSessionError,
    SessionState,
    SessionSummary,
)

InputProvider = Callable[[], str]
ExitAction = Literal["quit", "interrupted"]

DISCLAIMER = (
    "These questions are generated by artificial intelligence from the "
    "material you supplied. They may contain errors, inaccuracies, or "
    "hallucinations and are not a substitute for official review questions. "
    "Always verify with trusted course materials."
)

_CHOICE_STYLES = {
    ChoiceState.NEUTRAL: "",
    ChoiceState.CORRECT_CHOSEN: "bold white on green",
    ChoiceState.CORRECT_UNCHOSEN: "bold white on green",
    ChoiceState.INCORRECT_CHOSEN: "bold white on red",
}


@dataclass(frozen=True)
class PracticeCommand:
    type: Literal["select", "next", "prev", "filter", "new", "quit"]
    argument: Optional[str] = None


@dataclass(frozen=True)
class PracticeResult:
    summary: SessionSummary
    exit_action: ExitAction
    rounds: int


@dataclass
class Cursor:
    """Position within the currently filtered questions."""

    position: int = 0

    def clamp(self, size: int) -> None:
        if size <= 0:
            self.position = 0
        else:
            self.position = max(0, min(self.position, size - 1))

    def next(self, size: int) -> None:
        if self.position + 1 < size:
            self.position += 1

    def previous(self) -> None:
        if self.position > 0:
            self.position -= 1


def parse_command(raw: Optional[str]) -> Optional[PracticeCommand]:
    """Parse one line of console input."""

    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    head, _, rest = text.partition(" ")
    lowered = head.lower()
    if lowered in {"n", "next"}:
        return PracticeCommand("next")
    if lowered in {"p", "prev", "previous"}:
        return PracticeCommand("prev")
    if lowered in {"q", "quit", "exit"}:
        return PracticeCommand("quit")
    if lowered in {"new", "regen", "regenerate"}:
        return PracticeCommand("new")
    if lowered in {"f", "filter"}:
        return PracticeCommand("filter", rest.strip() or None)
    if len(head) == 1 and head.isalpha() and not rest:
        return PracticeCommand("select", head.upper())
    return None


def run_practice(
    session: QuizSession,
    console: Console,
    input_provider: InputProvider,
    *,
    service: QuestionService,
    api_key: str,
    text: str,
    count: int,
) -> PracticeResult:
    """Generate a round and let the user work through it interactively."""

    console.print(Panel(DISCLAIMER, title="Disclaimer", border_style="dim"))
    cursor = Cursor()
    rounds = 1
    _generate_round(session, console, service, api_key, text, count)

    while True:
        _render_screen(session, console, cursor)
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            exit_action: ExitAction = "interrupted"
            break
        command = parse_command(raw)
        if command is None:
            console.print("[red]Unrecognized command. Try again.[/]")
            continue
        if command.type == "quit":
            exit_action = "quit"
            break
        if command.type == "new":
            rounds += 1
            cursor.position = 0
            _generate_round(session, console, service, api_key, text, count)
            continue
        _apply_command(command, session, console, cursor)

    summary = session.summary()
    _render_summary(console, summary)
    return PracticeResult(summary=summary, exit_action=exit_action, rounds=rounds)


def _generate_round(
    session: QuizSession,
    console: Console,
    service: QuestionService,
    api_key: str,
    text: str,
    count: int,
) -> None:
    console.print(f"[dim]Generating {count} question(s)...[/]")
    try:
        asyncio.run(session.generate(service, api_key, text, count))
    except QuizSessionError as exc:
        console.print(Text(str(exc), style="red"))


def _apply_command(
    command: PracticeCommand,
    session: QuizSession,
    console: Console,
    cursor: Cursor,
) -> None:
    visible = session.filtered_questions()
    if command.type == "next":
        cursor.next(len(visible))
        return
    if command.type == "prev":
        cursor.previous()
        return
    if command.type == "filter":
        _apply_filter(command.argument, session, console)
        cursor.position = 0
        return
    if command.type == "select" and command.argument:
        if session.state is not SessionState.READY or not visible:
            console.print("[red]There is no question to answer.[/]")
            return
        cursor.clamp(len(visible))
        index, question = visible[cursor.position]
        if session.selected_for(index) is not None:
            console.print("[yellow]This question is already answered.[/]")
            return
        if not session.answer(index, command.argument):
            console.print(
                Text(
                    f"'{command.argument}' is not a valid choice for this "
                    "question.",
                    style="red",
                )
            )


def _apply_filter(
    argument: Optional[str], session: QuizSession, console: Console
) -> None:
    categories = session.categories
    if len(categories) <= 1:
        console.print("[yellow]Only one category in this round.[/]")
        return
    wanted = (argument or ALL_CATEGORIES).strip()
    if wanted.lower() == ALL_CATEGORIES.lower():
        session.set_filter(ALL_CATEGORIES)
        return
    for category in categories:
        if category.lower() == wanted.lower():
            session.set_filter(category)
            return
    console.print(
        Text(
            f"Unknown category '{wanted}'. Choose from: "
            f"{ALL_CATEGORIES}, {', '.join(categories)}",
            style="red",
        )
    )


def _render_screen(
    session: QuizSession, console: Console, cursor: Cursor
) -> None:
    if session.state is SessionState.FAILED and session.error is not None:
        console.print(
            Panel(
                Text(session.error.message),
                title="Generation failed",
                border_style="red",
            )
        )
        console.print(Text("Commands: new (retry), quit", style="dim"))
        return

    visible = session.filtered_questions()
    if session.state is not SessionState.READY or not visible:
        console.print(
            Panel(
                "No questions to show.",
                title="Practice",
                border_style="yellow",
            )
        )
        console.print(Text("Commands: new, quit", style="dim"))
        return

    cursor.clamp(len(visible))
    index, question = visible[cursor.position]
    render_question(
        console,
        question,
        number=cursor.position + 1,
        total=len(visible),
        selected=session.selected_for(index),
    )
    render_progress(console, session)


def render_question(
    console: Console,
    question: Question,
    *,
    number: int,
    total: int,
    selected: Optional[str],
) -> None:
    """Render one question card with graded choice highlighting."""

    header = Text.assemble(
        (f"Question {number}", "bold cyan"),
        (f" / {total}", "dim"),
    )
    console.print()
    console.rule(header)
    console.print(Text(question.question, style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Choice")
    states = choice_states(question, selected)
    for label, state in zip(question.labels, states):
        choice = question.choice_for(label) or ""
        table.add_row(label, Text(choice, style=_CHOICE_STYLES[state]))
    console.print(table)

    if not selected:
        return
    style = "bold green" if is_correct(question, selected) else "bold red"
    console.print(Text(feedback_text(question, selected), style=style))
    if question.explanation:
        console.print(Text(question.explanation, style="dim"))
    console.print(
        Text.assemble(("Category: ", "bold"), (question.category, "dim"))
    )
    if question.excerpt:
        console.print(
            Text.assemble(
                ("Source excerpt: ", "bold"),
                (question.excerpt, "italic"),
            )
        )


def render_progress(console: Console, session: QuizSession) -> None:
    line = Text.assemble(
        "Progress: ",
        f"{session.num_answered}/{len(session.questions)} answered, ",
        (f"{session.num_correct} correct", "bold green"),
    )
    console.print(line)

    hints = ["choices [%s]" % ", ".join(_current_labels(session)), "n", "p"]
    categories = session.categories
    if len(categories) > 1:
        hints.append(
            "f <category> (%s: %s)"
            % (session.filter_category, ", ".join(categories))
        )
    hints.extend(["new", "quit"])
    console.print(Text("Commands: " + ", ".join(hints), style="dim"))


def _current_labels(session: QuizSession) -> list[str]:
    labels: list[str] = []
    for _, question in session.filtered_questions():
        for label in question.labels:
            if label not in labels:
                labels.append(label)
    return labels


def _render_summary(console: Console, summary: SessionSummary) -> None:
    console.print()
    console.rule(Text("Practice Summary", style="bold magenta"))

    overview = Table(
        show_header=False,
        box=box.MINIMAL_DOUBLE_HEAD,
        expand=False,
    )
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Total questions", str(summary.total_questions))
    overview.add_row("Answered", str(summary.answered_questions))
    overview.add_row("Correct", str(summary.correct_answers))
    overview.add_row("Accuracy", f"{summary.accuracy * 100:.1f}%")
    console.print(overview)

    if not summary.per_category:
        return
    per_category = Table(title="Per category", box=box.SIMPLE, expand=False)
    per_category.add_column("Category")
    per_category.add_column("Answered", justify="right")
    per_category.add_column("Correct", justify="right")
    per_category.add_column("Accuracy", justify="right")
    for category, metrics in summary.per_category.items():
        per_category.add_row(
            Text(category),
            str(metrics.asked),
            str(metrics.correct),
            f"{metrics.accuracy * 100:.1f}%",
        )
    console.print(per_category)
