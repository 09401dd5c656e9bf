"""Shared testing fixtures and fakes for the doc_quizzer test suite."""

from .decoders import (  # noqa: F401
    FakePdfDecoder,
    FakeWordDecoder,
    RecordingReader,
    make_dependencies,
    pdf_pages_for,
)
from .openai import OpenAIStub  # noqa: F401
from .producer import FakeProducer, make_questions  # noqa: F401
from .workspace import WorkspaceBuilder  # noqa: F401

__all__ = [
    "FakePdfDecoder",
    "FakeProducer",
    "FakeWordDecoder",
    "OpenAIStub",
    "RecordingReader",
    "WorkspaceBuilder",
    "make_dependencies",
    "make_questions",
    "pdf_pages_for",
]
