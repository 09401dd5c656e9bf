from __future__ import annotations

import json
import logging
from pathlib import Path

from doc_quizzer.core import logging as core_logging


def _flush(logger: logging.Logger) -> None:
    for handler in logger.handlers:
        handler.flush()


def test_configure_logger_writes_json_lines(tmp_path):
    log_dir = tmp_path / "logs"
    logger, log_path = core_logging.configure_logger(
        "doc_quizzer.test",
        log_dir=log_dir,
        level="INFO",
        filename="test.log",
    )

    logger.info("quiz ready", extra={"question_count": 5, "source": Path("a.pdf")})
    logger.debug("not written at INFO")

    class _Opaque:
        def __repr__(self):  # noqa: D401
            return "opaque"

    try:
        raise ValueError("boom")
    except ValueError:
        logger.exception(
            "generation failed",
            extra={"detail": {"items": [Path(log_dir), 1]}, "obj": _Opaque()},
        )
    _flush(logger)

    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["message"] == "quiz ready"
    assert first["level"] == "INFO"
    assert first["logger"] == "doc_quizzer.test"
    assert first["extra"] == {"question_count": 5, "source": "a.pdf"}

    last = json.loads(lines[-1])
    assert "ValueError: boom" in last["exception"]
    assert last["extra"]["obj"] == "opaque"
    assert last["extra"]["detail"]["items"] == [str(log_dir), 1]


def test_configure_logger_reuses_handler_and_toggles_console(tmp_path):
    log_dir = tmp_path / "logs"
    logger, first_path = core_logging.configure_logger(
        "doc_quizzer.reuse", log_dir=log_dir, verbose=True
    )
    assert first_path.name == "reuse.log"
    assert len(logger.handlers) == 2
    assert logger.propagate is False

    logger, second_path = core_logging.configure_logger(
        "doc_quizzer.reuse", log_dir=log_dir, verbose=False
    )

    assert second_path == first_path
    assert len(logger.handlers) == 1


def test_configure_logger_moves_to_new_directory(tmp_path):
    logger, first = core_logging.configure_logger(
        "doc_quizzer.move", log_dir=tmp_path / "one"
    )
    logger, second = core_logging.configure_logger(
        "doc_quizzer.move", log_dir=tmp_path / "two"
    )

    assert first != second
    assert len(logger.handlers) == 1
    assert Path(logger.handlers[0].baseFilename) == second


def test_unknown_level_falls_back_to_info(tmp_path):
    logger, log_path = core_logging.configure_logger(
        "doc_quizzer.level", log_dir=tmp_path, level="chatty"
    )

    logger.debug("hidden")
    logger.info("shown")
    _flush(logger)

    messages = [
        json.loads(line)["message"]
        for line in log_path.read_text(encoding="utf-8").splitlines()
    ]
    assert messages == ["shown"]


def test_permission_error_uses_fallback_dir(tmp_path, monkeypatch):
    fallback = tmp_path / "fallback"
    monkeypatch.setattr(core_logging, "_fallback_log_dir", lambda: fallback)
    original_mkdir = Path.mkdir

    def _mkdir(self, *args, **kwargs):
        if self == tmp_path / "locked":
            raise PermissionError("denied")
        return original_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", _mkdir)

    _, log_path = core_logging.configure_logger(
        "doc_quizzer.fallback", log_dir=tmp_path / "locked"
    )

    assert log_path.parent == fallback
