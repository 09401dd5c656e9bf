"""Quiz production: document text in, multiple-choice questions out."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple

from ..core.ai import load_client
from .errors import GenerationFailureError
from .models import QuizQuestion

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.2
DEFAULT_MAX_TOKENS = 4000

_log = logging.getLogger(__name__)


class QuizProducer(Protocol):
    """Anything that can turn text into ``num_questions`` questions."""

    async def generate(
        self, text: str, num_questions: int
    ) -> Sequence[QuizQuestion]: ...


class OpenAIQuizProducer:
    """Generate questions with an OpenAI chat-completions model.

    The client is created lazily with :func:`load_client` unless one is
    passed in. The blocking API call runs in a worker thread so the event
    loop stays responsive.
    """

    def __init__(
        self,
        client: Any = None,
        *,
        model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        client_factory: Callable[[], Any] = load_client,
    ) -> None:
        self._client = client
        self._client_factory = client_factory
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def generate(
        self, text: str, num_questions: int
    ) -> List[QuizQuestion]:
        if num_questions <= 0:
            raise GenerationFailureError(
                "The number of questions must be a positive integer."
            )
        client = self._ensure_client()
        system_prompt, user_prompt = build_prompts(text, num_questions)
        content = await asyncio.to_thread(
            self._complete, client, system_prompt, user_prompt
        )
        records = parse_question_records(content)
        questions = build_questions(records, limit=num_questions)
        if not questions:
            raise GenerationFailureError(
                "The quiz generator returned no usable questions. "
                "Please try again."
            )
        if len(questions) < num_questions:
            _log.warning(
                "Quiz generator returned fewer questions than requested",
                extra={
                    "requested": num_questions,
                    "received": len(questions),
                },
            )
        return questions

    def _ensure_client(self) -> Any:
        if self._client is None:
            try:
                self._client = self._client_factory()
            except RuntimeError as exc:
                raise GenerationFailureError(str(exc)) from exc
        return self._client

    def _complete(
        self, client: Any, system_prompt: str, user_prompt: str
    ) -> str:
        try:
            resp = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            raw_content = resp.choices[0].message.content
        except Exception as exc:
            raise GenerationFailureError(
                f"Failed to generate the quiz: {exc}"
            ) from exc
        return (raw_content or "").strip()


def build_prompts(text: str, num_questions: int) -> Tuple[str, str]:
    system_prompt = (
        "You write clear multiple-choice quiz questions from study "
        "documents."
    )
    schema_line = (
        '[{"question": str, "options": [str, str, str, str], '
        '"correctAnswer": str}]'
    )
    constraints = (
        "Constraints: exactly one correct answer per question; "
        "correctAnswer must repeat the text of one option exactly; "
        "plausible distractors; base every question only on the document."
    )
    user_prompt = (
        f"Create {num_questions} multiple-choice questions from the "
        "document below. Output only a JSON array.\n\n"
        f"Schema:\n{schema_line}\n"
        f"{constraints}\n\n"
        f"Document:\n{text}"
    )
    return system_prompt, user_prompt


def parse_question_records(content: str) -> List[Any]:
    """Decode the model reply into a list of raw records.

    Accepts a bare JSON array, one wrapped in a Markdown code fence, or an
    object holding the array under ``"questions"``.
    """
    if not content:
        raise GenerationFailureError(
            "The quiz generator returned an empty response."
        )
    fenced = re.search(r"```(?:json)?\s*(.+?)```", content, re.DOTALL)
    payload = fenced.group(1) if fenced else content
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise GenerationFailureError(
            "The quiz generator returned a response that is not valid JSON."
        ) from exc
    if isinstance(data, dict):
        data = data.get("questions")
    if not isinstance(data, list):
        raise GenerationFailureError(
            "The quiz generator response did not contain a list of "
            "questions."
        )
    return data


def build_questions(
    records: Sequence[Any], *, limit: Optional[int] = None
) -> List[QuizQuestion]:
    """Normalize raw records into questions, skipping invalid ones."""
    items: List[QuizQuestion] = []
    for rec in records:
        if limit is not None and len(items) >= limit:
            break
        question = _build_question(rec)
        if question is not None:
            items.append(question)
    return items


def _build_question(rec: Any) -> Optional[QuizQuestion]:
    if not isinstance(rec, dict):
        return None
    stem = str(rec.get("question") or rec.get("stem") or "").strip()
    if not stem:
        return None
    options = _normalize_options(rec.get("options", rec.get("choices")))
    if len(options) < 2:
        return None
    answer = _resolve_answer(
        rec.get(
            "correctAnswer", rec.get("correct_answer", rec.get("answer"))
        ),
        options,
    )
    if answer is None:
        return None
    return QuizQuestion(
        question=stem, options=tuple(options), correct_answer=answer
    )


def _normalize_options(raw_options: Any) -> List[str]:
    out: List[str] = []
    if not isinstance(raw_options, list):
        return out
    for option in raw_options:
        if isinstance(option, dict):
            text = str(option.get("text", "")).strip()
        else:
            text = str(option).strip()
        if text and text not in out:
            out.append(text)
    return out


def _resolve_answer(raw_answer: Any, options: List[str]) -> Optional[str]:
    if isinstance(raw_answer, bool):
        return None
    if isinstance(raw_answer, int):
        if 0 <= raw_answer < len(options):
            return options[raw_answer]
        return None
    if not isinstance(raw_answer, str):
        return None
    candidate = raw_answer.strip()
    if candidate in options:
        return candidate
    folded = candidate.casefold()
    for option in options:
        if option.casefold() == folded:
            return option
    if len(candidate) == 1 and candidate.isalpha():
        index = ord(candidate.upper()) - ord("A")
        if 0 <= index < len(options):
            return options[index]
    return None


__all__ = [
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_MODEL",
    "DEFAULT_TEMPERATURE",
    "OpenAIQuizProducer",
    "QuizProducer",
    "build_prompts",
    "build_questions",
    "parse_question_records",
]
