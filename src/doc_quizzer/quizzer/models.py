"""Quiz data structures shared by the workflow controller and front ends."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Sequence

DEFAULT_TIMER_SECONDS = 30


class AppState(Enum):
    """Phases of a quiz workflow."""

    SETUP = "setup"
    GENERATING = "generating"
    QUIZ = "quiz"
    REVIEW = "review"
    RESULTS = "results"


@dataclass(frozen=True)
class QuizQuestion:
    """One multiple-choice question; ``correct_answer`` is an option's text."""

    question: str
    options: tuple[str, ...]
    correct_answer: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", tuple(self.options))
        if not self.options:
            raise ValueError("options must be a non-empty sequence")
        if self.correct_answer not in self.options:
            raise ValueError("correct_answer must match one of the options")

    def option_key(self, index: int) -> str:
        return chr(ord("A") + index)

    def option_for_key(self, key: str) -> str | None:
        """Return the option text for a letter key like ``"b"``."""
        normalized = str(key).strip().upper()[:1]
        if not normalized:
            return None
        index = ord(normalized) - ord("A")
        if 0 <= index < len(self.options):
            return self.options[index]
        return None


@dataclass
class QuizSession:
    """Mutable answers and position for one quiz attempt."""

    questions: list[QuizQuestion] = field(default_factory=list)
    user_answers: list[str] = field(default_factory=list)
    current_index: int = 0
    timer_duration_seconds: int = DEFAULT_TIMER_SECONDS

    @classmethod
    def empty(cls) -> "QuizSession":
        return cls()

    @classmethod
    def start(
        cls, questions: Sequence[QuizQuestion], timer_duration_seconds: int
    ) -> "QuizSession":
        """Build a fresh session: every answer blank, positioned at 0."""
        items = list(questions)
        return cls(
            questions=items,
            user_answers=[""] * len(items),
            current_index=0,
            timer_duration_seconds=timer_duration_seconds,
        )

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current(self) -> QuizQuestion:
        return self.questions[self.current_index]

    @property
    def current_answer(self) -> str:
        return self.user_answers[self.current_index]

    @property
    def is_last(self) -> bool:
        return self.current_index >= self.total_questions - 1

    def answered_count(self) -> int:
        return sum(1 for answer in self.user_answers if answer)

    def select(self, answer: str) -> None:
        self.user_answers[self.current_index] = answer

    def next(self) -> None:
        if self.current_index + 1 < self.total_questions:
            self.current_index += 1

    def previous(self) -> None:
        if self.current_index > 0:
            self.current_index -= 1

    def jump_to(self, index: int) -> bool:
        if 0 <= index < self.total_questions:
            self.current_index = index
            return True
        return False

    def copy(self) -> "QuizSession":
        return replace(
            self,
            questions=list(self.questions),
            user_answers=list(self.user_answers),
        )
