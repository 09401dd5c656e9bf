"""Configuration loader for quiz runs.

Values resolve with precedence CLI > environment > TOML file > defaults.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

from doc_quizzer.core import workspace as workspace_mod

from .models import DEFAULT_TIMER_SECONDS
from .producer import DEFAULT_MAX_TOKENS, DEFAULT_MODEL, DEFAULT_TEMPERATURE
from .validate import MIN_TEXT_LENGTH

CONFIG_FILENAME = "doc_quizzer.toml"
CONFIG_ENV = "DOC_QUIZZER_CONFIG"
ENV_PREFIX = "DOC_QUIZZER_"

_DEFAULT_NUM_QUESTIONS = 5
_DEFAULT_LOG_LEVEL = "INFO"

DEFAULT_TEMPLATE = f"""\
# doc-quizzer configuration

[quiz]
# Questions requested from the generator per document
num_questions = {_DEFAULT_NUM_QUESTIONS}
# Seconds allowed per question
timer_seconds = {DEFAULT_TIMER_SECONDS}
# Trimmed text shorter than this is rejected (minimum {MIN_TEXT_LENGTH})
min_text_length = {MIN_TEXT_LENGTH}

[ai]
model = "{DEFAULT_MODEL}"
temperature = {DEFAULT_TEMPERATURE}
max_tokens = {DEFAULT_MAX_TOKENS}

[logging]
level = "{_DEFAULT_LOG_LEVEL}"
"""


class QuizzerConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizzerConfig:
    """Fully resolved configuration for a quiz run."""

    num_questions: int
    timer_seconds: int
    min_text_length: int
    model: str
    temperature: float
    max_tokens: int
    log_level: str


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of file/env options."""

    num_questions: Optional[int] = None
    timer_seconds: Optional[int] = None
    model: Optional[str] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    config: QuizzerConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise QuizzerConfigError(str(exc)) from exc

    requested_path = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=layout.path_for("config") / CONFIG_FILENAME,
    )

    table = _default_table()
    loaded_path: Optional[Path] = None
    if requested_path.exists():
        loaded_path = requested_path
        _apply_file_values(table, _read_config_file(requested_path))
    elif config_path is not None or _env_string(env_map, "CONFIG"):
        raise QuizzerConfigError(f"Config file not found: {requested_path}")

    quiz = table["quiz"]
    ai = table["ai"]

    config = QuizzerConfig(
        num_questions=_positive_int(
            "quiz.num_questions",
            _pick_first(
                overrides.num_questions,
                _env_int(env_map, "NUM_QUESTIONS"),
                quiz["num_questions"],
            ),
        ),
        timer_seconds=_positive_int(
            "quiz.timer_seconds",
            _pick_first(
                overrides.timer_seconds,
                _env_int(env_map, "TIMER_SECONDS"),
                quiz["timer_seconds"],
            ),
        ),
        min_text_length=_min_text_length(quiz["min_text_length"]),
        model=_non_empty_string(
            "ai.model",
            _pick_first(
                overrides.model, _env_string(env_map, "MODEL"), ai["model"]
            ),
        ),
        temperature=_temperature(ai["temperature"]),
        max_tokens=_positive_int("ai.max_tokens", ai["max_tokens"]),
        log_level=_non_empty_string(
            "logging.level",
            _pick_first(
                overrides.log_level,
                _env_string(env_map, "LOG_LEVEL"),
                table["logging"]["level"],
            ),
        ).upper(),
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def write_config_template(path: Path, *, overwrite: bool = False) -> Path:
    """Write :data:`DEFAULT_TEMPLATE` to ``path`` with owner-only access."""

    if path.exists() and not overwrite:
        raise QuizzerConfigError(f"Config already exists: {path}")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(DEFAULT_TEMPLATE, encoding="utf-8")
    except OSError as exc:
        raise QuizzerConfigError(f"Could not write {path}: {exc}") from exc
    try:
        path.chmod(0o600)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path


def _default_table() -> MutableMapping[str, MutableMapping[str, Any]]:
    return {
        "quiz": {
            "num_questions": _DEFAULT_NUM_QUESTIONS,
            "timer_seconds": DEFAULT_TIMER_SECONDS,
            "min_text_length": MIN_TEXT_LENGTH,
        },
        "ai": {
            "model": DEFAULT_MODEL,
            "temperature": DEFAULT_TEMPERATURE,
            "max_tokens": DEFAULT_MAX_TOKENS,
        },
        "logging": {"level": _DEFAULT_LOG_LEVEL},
    }


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = _env_string(env_map, "CONFIG")
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _read_config_file(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise QuizzerConfigError(f"Failed to parse config TOML: {exc}") from exc
    except OSError as exc:
        raise QuizzerConfigError(f"Could not read {path}: {exc}") from exc


def _apply_file_values(
    table: MutableMapping[str, MutableMapping[str, Any]],
    parsed: Mapping[str, Any],
) -> None:
    """Overlay ``[section] key = value`` pairs, rejecting unknown keys."""
    for section, values in parsed.items():
        if section not in table:
            raise QuizzerConfigError(
                f"Unknown configuration key '{section}'."
            )
        if not isinstance(values, Mapping):
            raise QuizzerConfigError(
                f"Expected table for '{section}', found "
                f"{type(values).__name__}."
            )
        defaults = table[section]
        for key, value in values.items():
            if key not in defaults:
                raise QuizzerConfigError(
                    f"Unknown configuration key '{section}.{key}'."
                )
            defaults[key] = value


def _min_text_length(value: object) -> int:
    length = _positive_int("quiz.min_text_length", value)
    if length < MIN_TEXT_LENGTH:
        raise QuizzerConfigError(
            f"quiz.min_text_length must be at least {MIN_TEXT_LENGTH}."
        )
    return length


def _positive_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise QuizzerConfigError(f"{name} must be a positive integer.")
    return value


def _non_empty_string(name: str, value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise QuizzerConfigError(f"{name} must be a non-empty string.")
    return value.strip()


def _temperature(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise QuizzerConfigError("ai.temperature must be a number.")
    if not 0 <= value <= 2:
        raise QuizzerConfigError("ai.temperature must be between 0 and 2.")
    return float(value)


def _env_int(env_map: Mapping[str, str], key: str) -> Optional[int]:
    raw = _env_string(env_map, key)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise QuizzerConfigError(
            f"{ENV_PREFIX}{key} must be an integer, got '{raw}'."
        ) from exc


def _env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


__all__ = [
    "CONFIG_ENV",
    "CONFIG_FILENAME",
    "DEFAULT_TEMPLATE",
    "ConfigOverrides",
    "LoadResult",
    "QuizzerConfig",
    "QuizzerConfigError",
    "load_config",
    "write_config_template",
]
