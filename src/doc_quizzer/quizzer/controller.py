"""Workflow controller: document submission through scoring.

One controller owns one quiz workflow. Its state moves::

    setup -> generating -> quiz <-> review -> results -> setup

Submitting runs the pipeline (extract, validate, generate) strictly in
sequence. Any pipeline failure is logged, turned into a message for the
setup screen, and leaves the previous session untouched. A new session is
installed only after the full question list has been received. A cancelled
or interrupted run also returns to setup, without an error message, before
the cancellation propagates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from .errors import (
    GenerationFailureError,
    InvalidTransitionError,
    QuizPipelineError,
)
from .extract import ExtractorDependencies, extract_text
from .models import AppState, QuizSession
from .producer import QuizProducer
from .score import QuizScore, score_session
from .validate import MIN_TEXT_LENGTH, validate_content

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred while generating the quiz."

Extractor = Callable[..., Awaitable[str]]


@dataclass(frozen=True)
class WorkflowSnapshot:
    """Point-in-time copy of a controller's observable state."""

    state: AppState
    session: QuizSession
    error: Optional[str]


class WorkflowController:
    def __init__(
        self,
        producer: QuizProducer,
        *,
        extractor_dependencies: Optional[ExtractorDependencies] = None,
        extractor: Extractor = extract_text,
        min_text_length: int = MIN_TEXT_LENGTH,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._producer = producer
        self._extractor = extractor
        self._extractor_dependencies = extractor_dependencies
        self._min_text_length = min_text_length
        self._logger = logger or logging.getLogger(__name__)
        self._state = AppState.SETUP
        self._session = QuizSession.empty()
        self._error: Optional[str] = None

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def session(self) -> QuizSession:
        return self._session

    @property
    def error(self) -> Optional[str]:
        return self._error

    def snapshot(self) -> WorkflowSnapshot:
        return WorkflowSnapshot(
            state=self._state,
            session=self._session.copy(),
            error=self._error,
        )

    async def submit(
        self,
        source: Union[str, Path],
        num_questions: int,
        duration_seconds: int,
        *,
        extension: Optional[str] = None,
    ) -> AppState:
        """Run one pipeline for ``source`` and return the resulting state."""
        self._require("submit", AppState.SETUP)
        _require_positive("num_questions", num_questions)
        _require_positive("duration_seconds", duration_seconds)

        self._error = None
        self._state = AppState.GENERATING
        run_info = {
            "source": str(source),
            "num_questions": num_questions,
            "duration_seconds": duration_seconds,
        }
        self._logger.info("Starting quiz generation", extra=run_info)

        try:
            text = await self._extractor(
                source,
                extension,
                dependencies=self._extractor_dependencies,
            )
            validate_content(text, min_length=self._min_text_length)
            self._logger.debug(
                "Extracted document text",
                extra={**run_info, "characters": len(text)},
            )
            questions = list(
                await self._producer.generate(text, num_questions)
            )
            if not questions:
                raise GenerationFailureError(
                    "The quiz generator returned no questions."
                )
        except Exception as exc:
            self._logger.exception(
                "Quiz generation failed",
                extra={**run_info, "error_type": type(exc).__name__},
            )
            self._error = _message_for(exc)
            self._state = AppState.SETUP
            return self._state
        except BaseException:
            # Cancelled or interrupted runs re-raise from SETUP.
            self._logger.warning("Quiz generation interrupted", extra=run_info)
            self._state = AppState.SETUP
            raise

        self._session = QuizSession.start(questions, duration_seconds)
        self._state = AppState.QUIZ
        self._logger.info(
            "Quiz ready",
            extra={**run_info, "question_count": len(questions)},
        )
        return self._state

    def select_answer(self, answer: str) -> None:
        self._require("select an answer", AppState.QUIZ)
        self._session.select(answer)

    def next_question(self) -> int:
        self._require("move to the next question", AppState.QUIZ)
        self._session.next()
        return self._session.current_index

    def prev_question(self) -> int:
        self._require("move to the previous question", AppState.QUIZ)
        self._session.previous()
        return self._session.current_index

    def finish(self) -> AppState:
        self._require("finish the quiz", AppState.QUIZ)
        self._state = AppState.REVIEW
        return self._state

    def jump_to_question(self, index: int) -> AppState:
        """Return to the quiz at ``index``; out-of-range stays in review."""
        self._require("jump to a question", AppState.REVIEW)
        if self._session.jump_to(index):
            self._state = AppState.QUIZ
        return self._state

    def final_submit(self) -> AppState:
        self._require("submit the quiz", AppState.REVIEW)
        self._state = AppState.RESULTS
        score = score_session(self._session)
        self._logger.info(
            "Quiz submitted",
            extra={
                "total": score.total,
                "answered": score.answered,
                "correct": score.correct,
            },
        )
        return self._state

    def retry(self) -> AppState:
        self._require("retry", AppState.RESULTS)
        self._session = QuizSession.empty()
        self._error = None
        self._state = AppState.SETUP
        return self._state

    def score(self) -> QuizScore:
        self._require("score the quiz", AppState.REVIEW, AppState.RESULTS)
        return score_session(self._session)

    def _require(self, event: str, *allowed: AppState) -> None:
        if self._state not in allowed:
            raise InvalidTransitionError(event, self._state)


def _require_positive(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive integer")


def _message_for(exc: Exception) -> str:
    if isinstance(exc, QuizPipelineError):
        return str(exc)
    message = str(exc).strip()
    return message or UNKNOWN_ERROR_MESSAGE


__all__ = [
    "UNKNOWN_ERROR_MESSAGE",
    "WorkflowController",
    "WorkflowSnapshot",
]
