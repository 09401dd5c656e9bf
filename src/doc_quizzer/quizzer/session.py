"""Rich-powered console front end for the quiz workflow.

The loop reads one command per prompt from an ``input_provider`` and feeds
it to a :class:`WorkflowController`, rendering whichever phase the
controller is in. Keeping input behind a callable lets tests script a whole
session and inspect the recorded console output.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Literal, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .controller import WorkflowController
from .models import AppState, QuizSession
from .score import QuizScore
from .timer import Clock, QuestionTimer

InputProvider = Callable[[], str]
ExitAction = Literal["finished", "quit"]
CommandType = Literal[
    "select", "next", "prev", "finish", "jump", "submit", "retry", "quit"
]

_QUIT_WORDS = {"q", "quit", "exit"}


@dataclass(frozen=True)
class SessionCommand:
    """Normalized user command parsed from console input."""

    type: CommandType
    choice: Optional[str] = None
    index: Optional[int] = None


@dataclass(frozen=True)
class SessionOutcome:
    """Return value from :func:`run_console_session`."""

    exit_action: ExitAction
    score: Optional[QuizScore]
    attempts: int


def parse_quiz_command(raw: Optional[str]) -> Optional[SessionCommand]:
    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    lowered = text.lower()
    if lowered in {"n", "next"}:
        return SessionCommand("next")
    if lowered in {"p", "prev", "previous"}:
        return SessionCommand("prev")
    if lowered in {"finish", "done"}:
        return SessionCommand("finish")
    if lowered in _QUIT_WORDS:
        return SessionCommand("quit")
    if len(text) == 1 and text.isalpha():
        return SessionCommand("select", choice=text.upper())
    return None


def parse_review_command(raw: Optional[str]) -> Optional[SessionCommand]:
    if raw is None:
        return None
    lowered = raw.strip().lower()
    if not lowered:
        return None
    if lowered in {"s", "submit"}:
        return SessionCommand("submit")
    if lowered in _QUIT_WORDS:
        return SessionCommand("quit")
    if lowered.isdigit():
        return SessionCommand("jump", index=int(lowered) - 1)
    return None


def parse_results_command(raw: Optional[str]) -> Optional[SessionCommand]:
    if raw is None:
        return None
    lowered = raw.strip().lower()
    if lowered in {"r", "retry"}:
        return SessionCommand("retry")
    if lowered in _QUIT_WORDS:
        return SessionCommand("quit")
    return None


def run_console_session(
    controller: WorkflowController,
    console: Console,
    input_provider: InputProvider,
    *,
    path: Optional[Path],
    num_questions: int,
    duration_seconds: int,
    clock: Clock = time.monotonic,
) -> SessionOutcome:
    """Drive ``controller`` from console input until the user quits."""

    pending: Optional[Path] = path
    timer: Optional[QuestionTimer] = None
    shown_index: Optional[int] = None
    score: Optional[QuizScore] = None
    attempts = 0

    while True:
        state = controller.state

        if state is AppState.SETUP:
            if controller.error:
                _render_error(console, controller.error)
            if pending is None:
                pending = _prompt_for_path(console, input_provider)
                if pending is None:
                    return SessionOutcome("quit", score, attempts)
            attempts += 1
            try:
                with console.status(
                    "Generating your quiz... this may take a moment."
                ):
                    asyncio.run(
                        controller.submit(
                            pending, num_questions, duration_seconds
                        )
                    )
            except KeyboardInterrupt:
                console.print("\n[bold yellow]Quiz generation cancelled.[/]")
                return SessionOutcome("quit", score, attempts)
            pending = None
            timer = None
            continue

        if state is AppState.QUIZ:
            session = controller.session
            if timer is None:
                timer = QuestionTimer(session.timer_duration_seconds, clock)
                shown_index = session.current_index
            elif shown_index != session.current_index:
                timer.restart()
                shown_index = session.current_index
            _render_question(console, session, timer)
            raw = _read(input_provider)
            if raw is None:
                return _interrupted(console, score, attempts)
            command = parse_quiz_command(raw)
            if command is None:
                console.print("[red]Unrecognized command. Try again.[/]")
                continue
            if command.type == "quit":
                return _ended(console, score, attempts)
            _apply_quiz_command(command, controller, console)
            continue

        if state is AppState.REVIEW:
            _render_review(console, controller.session)
            raw = _read(input_provider)
            if raw is None:
                return _interrupted(console, score, attempts)
            command = parse_review_command(raw)
            if command is None:
                console.print("[red]Unrecognized command. Try again.[/]")
                continue
            if command.type == "quit":
                return _ended(console, score, attempts)
            if command.type == "submit":
                controller.final_submit()
                continue
            if command.index is not None:
                if controller.jump_to_question(command.index) is AppState.QUIZ:
                    timer = None
                else:
                    console.print(
                        f"[red]There is no question {command.index + 1}.[/]"
                    )
            continue

        if state is AppState.RESULTS:
            score = controller.score()
            _render_results(console, score, controller.session)
            raw = _read(input_provider)
            if raw is None:
                return SessionOutcome("finished", score, attempts)
            command = parse_results_command(raw)
            if command is None:
                console.print("[red]Type 'retry' or 'quit'.[/]")
                continue
            if command.type == "quit":
                return SessionOutcome("finished", score, attempts)
            controller.retry()
            timer = None
            continue

        # GENERATING never persists between prompts: submit() runs to
        # completion inside asyncio.run().
        raise RuntimeError(f"Unexpected workflow state: {state}")


def _apply_quiz_command(
    command: SessionCommand,
    controller: WorkflowController,
    console: Console,
) -> None:
    if command.type == "select" and command.choice:
        option = controller.session.current.option_for_key(command.choice)
        if option is None:
            console.print(
                "[red]'%s' is not a valid choice for this question.[/red]"
                % command.choice,
            )
            return
        controller.select_answer(option)
        console.print(f"Selected [bold]{command.choice}[/].")
    elif command.type == "next":
        controller.next_question()
    elif command.type == "prev":
        controller.prev_question()
    elif command.type == "finish":
        controller.finish()


def _read(input_provider: InputProvider) -> Optional[str]:
    try:
        return input_provider()
    except (EOFError, KeyboardInterrupt, StopIteration):
        return None


def _prompt_for_path(
    console: Console, input_provider: InputProvider
) -> Optional[Path]:
    while True:
        console.print(
            "Enter the path of a PDF, DOC or DOCX document "
            "(or 'quit' to exit):"
        )
        raw = _read(input_provider)
        if raw is None:
            return None
        text = raw.strip()
        if not text:
            continue
        if text.lower() in _QUIT_WORDS:
            return None
        return Path(text).expanduser()


def _interrupted(
    console: Console, score: Optional[QuizScore], attempts: int
) -> SessionOutcome:
    console.print("\n[bold yellow]Session interrupted.[/]")
    return SessionOutcome("quit", score, attempts)


def _ended(
    console: Console, score: Optional[QuizScore], attempts: int
) -> SessionOutcome:
    console.print("\n[bold yellow]Ending session without submission.[/]")
    return SessionOutcome("quit", score, attempts)


def _render_error(console: Console, message: str) -> None:
    console.print(
        Panel(message, title="Could not create quiz", border_style="red")
    )


def _render_question(
    console: Console, session: QuizSession, timer: QuestionTimer
) -> None:
    question = session.current
    header = Text.assemble(
        (f"Question {session.current_index + 1}", "bold cyan"),
        (f" / {session.total_questions}", "dim"),
    )
    console.print()
    console.rule(header)
    console.print(Text(question.question, style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Choice")

    selected = session.current_answer
    for index, option in enumerate(question.options):
        chosen = option == selected
        row_text = Text(("• " if chosen else "  ") + option)
        if chosen:
            row_text.stylize("bold green", 2)
        table.add_row(question.option_key(index), row_text)
    console.print(table)

    if timer.expired():
        console.print(Text("Time's up for this question.", style="bold red"))
    else:
        console.print(Text(f"Time left: {timer.remaining()}s", style="yellow"))

    keys = ", ".join(
        question.option_key(index) for index in range(len(question.options))
    )
    console.print(
        Text(
            f"Answered {session.answered_count()}/{session.total_questions} "
            f"| Commands: choices [{keys}], n (next), p (prev), finish, quit",
            style="dim",
        )
    )


def _render_review(console: Console, session: QuizSession) -> None:
    console.print()
    console.rule(Text("Review your answers", style="bold magenta"))
    table = Table(box=box.SIMPLE, expand=True)
    table.add_column("#", justify="right")
    table.add_column("Question", overflow="fold")
    table.add_column("Your answer")
    for index, (question, answer) in enumerate(
        zip(session.questions, session.user_answers), start=1
    ):
        table.add_row(
            str(index),
            question.question,
            answer or Text("-", style="dim"),
        )
    console.print(table)
    unanswered = session.total_questions - session.answered_count()
    if unanswered:
        console.print(
            Text(f"{unanswered} question(s) unanswered.", style="yellow")
        )
    console.print(
        Text(
            "Commands: question number (jump back), submit, quit",
            style="dim",
        )
    )


def _render_results(
    console: Console, score: QuizScore, session: QuizSession
) -> None:
    console.print()
    console.rule(Text("Quiz Results", style="bold magenta"))

    overview = Table(
        show_header=False,
        box=box.MINIMAL_DOUBLE_HEAD,
        expand=False,
    )
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Total questions", str(score.total))
    overview.add_row("Answered", str(score.answered))
    overview.add_row("Correct", str(score.correct))
    overview.add_row("Score", f"{score.percentage:.1f}%")
    overview.add_row(
        "Time per question", f"{session.timer_duration_seconds}s"
    )
    console.print(overview)

    responses = Table(title="Responses", box=box.SIMPLE, expand=True)
    responses.add_column("#", justify="right")
    responses.add_column("Question", overflow="fold")
    responses.add_column("Your answer")
    responses.add_column("Correct answer")
    responses.add_column("Result", justify="center")
    for result in score.results:
        responses.add_row(
            str(result.index + 1),
            result.question,
            result.selected or "-",
            result.correct_answer,
            "✅" if result.is_correct else "❌",
        )
    console.print(responses)
    console.print(Text("Commands: retry, quit", style="dim"))


__all__ = [
    "SessionCommand",
    "SessionOutcome",
    "parse_quiz_command",
    "parse_results_command",
    "parse_review_command",
    "run_console_session",
]
