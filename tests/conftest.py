from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import (  # noqa: E402
    FakeProducer,
    OpenAIStub,
    WorkspaceBuilder,
)


@pytest.fixture(autouse=True)
def _isolate_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Keep tests away from the user's workspace and real credentials."""

    monkeypatch.setenv("DOC_QUIZZER_DATA_HOME", str(tmp_path / "data-home"))
    for key in (
        "DOC_QUIZZER_CONFIG",
        "DOC_QUIZZER_NUM_QUESTIONS",
        "DOC_QUIZZER_TIMER_SECONDS",
        "DOC_QUIZZER_MODEL",
        "DOC_QUIZZER_LOG_LEVEL",
        "OPENAI_API_KEY",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a helper bound to pytest's per-test tmp directory."""

    return WorkspaceBuilder(tmp_path / "workspace")


@pytest.fixture
def openai_stub() -> OpenAIStub:
    return OpenAIStub()


@pytest.fixture
def fake_producer() -> FakeProducer:
    return FakeProducer()


@pytest.fixture(autouse=True)
def _reset_app_logger() -> Iterator[None]:
    """Undo ``configure_logger`` so records keep reaching caplog."""

    yield
    names = [
        name
        for name in logging.root.manager.loggerDict
        if name == "doc_quizzer" or name.startswith("doc_quizzer.")
    ]
    for name in names:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)
