"""OpenAI client loading for the quiz producer."""

from __future__ import annotations

import os
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

try:  # Allow module import even when the OpenAI dependency is absent.
    from openai import OpenAI  # type: ignore
except Exception:  # pragma: no cover - optional dependency guard
    OpenAI = None  # type: ignore

__all__ = ["API_KEY_ENV", "load_client"]

API_KEY_ENV = "OPENAI_API_KEY"


def load_client(*, env: Optional[Mapping[str, str]] = None) -> Any:
    """Return an OpenAI client using the key from ``env`` or ``.env``."""
    if OpenAI is None:
        raise RuntimeError(
            "The 'openai' package is required to generate quizzes. "
            "Install it and retry."
        )
    if env is None:
        load_dotenv()
        env = os.environ
    api_key = (env.get(API_KEY_ENV) or "").strip()
    if not api_key:
        raise RuntimeError(
            f"{API_KEY_ENV} not found in environment. Set it or add to .env"
        )
    return OpenAI(api_key=api_key)
