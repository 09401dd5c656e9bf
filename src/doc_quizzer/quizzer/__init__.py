from .controller import WorkflowController, WorkflowSnapshot
from .errors import (
    DependencyError,
    GenerationFailureError,
    InvalidTransitionError,
    ParseFailureError,
    QuizPipelineError,
    ReadFailureError,
    TooShortError,
    UnsupportedFormatError,
)
from .extract import ExtractorDependencies, detect_format, extract_text
from .models import AppState, QuizQuestion, QuizSession
from .producer import OpenAIQuizProducer, QuizProducer
from .score import QuestionResult, QuizScore, score_session
from .session import SessionOutcome, run_console_session
from .timer import QuestionTimer
from .validate import MIN_TEXT_LENGTH, validate_content

__all__ = [
    "AppState",
    "DependencyError",
    "ExtractorDependencies",
    "GenerationFailureError",
    "InvalidTransitionError",
    "MIN_TEXT_LENGTH",
    "OpenAIQuizProducer",
    "ParseFailureError",
    "QuestionResult",
    "QuestionTimer",
    "QuizPipelineError",
    "QuizProducer",
    "QuizQuestion",
    "QuizScore",
    "QuizSession",
    "ReadFailureError",
    "SessionOutcome",
    "TooShortError",
    "UnsupportedFormatError",
    "WorkflowController",
    "WorkflowSnapshot",
    "detect_format",
    "extract_text",
    "run_console_session",
    "score_session",
    "validate_content",
]
