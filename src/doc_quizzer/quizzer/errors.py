"""Failure types raised while turning a document into a quiz."""

from __future__ import annotations

from typing import Optional

__all__ = [
    "QuizPipelineError",
    "UnsupportedFormatError",
    "ReadFailureError",
    "ParseFailureError",
    "DependencyError",
    "TooShortError",
    "GenerationFailureError",
    "InvalidTransitionError",
]


class QuizPipelineError(RuntimeError):
    """Base class for failures during a pipeline run.

    ``str(exc)`` is the human-readable message shown back on the setup
    screen, so subclasses keep it free of tracebacks and internals.
    """


class UnsupportedFormatError(QuizPipelineError):
    """Raised when the file extension is not PDF, DOC or DOCX."""

    def __init__(self, extension: Optional[str]) -> None:
        super().__init__(
            "Unsupported file type. Please upload a PDF, DOC, or DOCX file."
        )
        self.extension = extension


class ReadFailureError(QuizPipelineError):
    """Raised when the raw bytes of the document cannot be read."""

    def __init__(
        self, message: str = "An error occurred while reading the file."
    ) -> None:
        super().__init__(message)


class ParseFailureError(QuizPipelineError):
    """Raised when a supported document cannot be decoded into text."""

    _MESSAGES = {
        "pdf": (
            "Failed to parse the PDF. It might be corrupted, "
            "password-protected, or in an unsupported format."
        ),
        "word": (
            "Failed to parse the Word document. It might be corrupted or "
            "password-protected."
        ),
    }

    def __init__(self, format: str, message: Optional[str] = None) -> None:
        super().__init__(
            message
            or self._MESSAGES.get(format, "Failed to parse the document.")
        )
        self.format = format


class DependencyError(ParseFailureError):
    """Raised when the decoder library for a format is not installed."""

    def __init__(self, format: str, package: str) -> None:
        super().__init__(
            format,
            f"The '{package}' package is required to read this document. "
            "Install it and retry.",
        )
        self.package = package


class TooShortError(QuizPipelineError):
    """Raised when extracted text is too short to quiz on."""

    def __init__(self, length: int, snippet: str) -> None:
        super().__init__(
            f"Document content is too short ({length} characters) to "
            "generate a meaningful quiz. This can happen if the document is "
            "very brief or is image-based from which text cannot be "
            f'extracted.\n\nExtracted text snippet: "{snippet}..."'
        )
        self.length = length
        self.snippet = snippet


class GenerationFailureError(QuizPipelineError):
    """Raised when the quiz producer fails or returns nothing usable."""


class InvalidTransitionError(RuntimeError):
    """Raised when a workflow event is fired in a state that has no use for it."""

    def __init__(self, event: str, state: object) -> None:
        label = getattr(state, "value", state)
        super().__init__(f"Cannot {event} while in the '{label}' state.")
        self.event = event
        self.state = state
