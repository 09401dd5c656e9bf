"""Score a finished quiz session."""

from __future__ import annotations

from dataclasses import dataclass

from .models import QuizSession


@dataclass(frozen=True)
class QuestionResult:
    index: int
    question: str
    selected: str
    correct_answer: str
    is_correct: bool

    @property
    def answered(self) -> bool:
        return bool(self.selected)


@dataclass(frozen=True)
class QuizScore:
    """Overall score plus one result per question, in quiz order."""

    total: int
    answered: int
    correct: int
    results: tuple[QuestionResult, ...]

    @property
    def accuracy(self) -> float:
        if self.total == 0:
            return 0.0
        return self.correct / self.total

    @property
    def percentage(self) -> float:
        return round(self.accuracy * 100, 1)


def score_session(session: QuizSession) -> QuizScore:
    results = tuple(
        QuestionResult(
            index=index,
            question=question.question,
            selected=selected,
            correct_answer=question.correct_answer,
            is_correct=bool(selected) and selected == question.correct_answer,
        )
        for index, (question, selected) in enumerate(
            zip(session.questions, session.user_answers)
        )
    )
    return QuizScore(
        total=len(results),
        answered=sum(1 for result in results if result.answered),
        correct=sum(1 for result in results if result.is_correct),
        results=results,
    )
