"""
Generation Client
- Input: uploaded file + difficulty + question types + question count
- Output: a validated Exam, or one of the ExamGenerationError kinds

One Gemini call per invocation, no retries. The provider's text is treated
as untrusted until validate_exam_payload() has turned it into Questions.
"""
from __future__ import annotations
import itertools
import json
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, List, Optional, Sequence, Tuple
from pydantic import ValidationError
from google import genai
from google.genai import types

from exaprep.configuration import settings
from exaprep.encoding import FileInput, encode_file
from exaprep.errors import (
    BlockedError,
    ConfigurationError,
    EmptyResponseError,
    InvalidStructureError,
    MalformedResponseError,
)
from exaprep.models import Difficulty, Exam, GenerationRequest, Question, QuestionType
from exaprep.prompts import build_prompt

logger = logging.getLogger(__name__)

_EXAM_SEQ = itertools.count(1)


def new_exam_id() -> str:
    """Time-derived id with a process-local sequence, so two calls in the same millisecond differ."""
    return f"exam_{int(time.time() * 1000)}_{next(_EXAM_SEQ)}"


# ---------------- Validation ----------------

def validate_exam_payload(text: Optional[str]) -> Tuple[str, List[Question]]:
    """Turn the provider's raw text into (title, questions) or raise a tagged error."""
    raw = (text or "").strip()
    if not raw:
        raise EmptyResponseError()

    try:
        payload: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.error("Provider returned non-JSON output: %s", exc)
        raise MalformedResponseError() from exc

    if not isinstance(payload, dict):
        raise InvalidStructureError("top-level value is not an object")
    title = payload.get("title")
    if not isinstance(title, str) or not title.strip():
        raise InvalidStructureError("missing title")
    items = payload.get("questions")
    if not isinstance(items, list) or not items:
        raise InvalidStructureError("questions must be a non-empty array")

    try:
        questions = [Question.model_validate(item) for item in items]
    except ValidationError as exc:
        logger.error("Provider returned invalid questions: %s", exc)
        raise InvalidStructureError(str(exc)) from exc
    return title, questions


def quality_warnings(questions: Sequence[Question], request: GenerationRequest) -> List[str]:
    """Best-effort checks on what the model produced; never fatal."""
    warnings: List[str] = []
    if len(questions) != request.number_of_questions:
        warnings.append(f"expected {request.number_of_questions} questions, got {len(questions)}")
    numbers = [q.question_number for q in questions]
    if len(set(numbers)) != len(numbers):
        warnings.append("duplicate questionNumber values")
    allowed = set(request.question_types)
    for q in questions:
        n = q.question_number
        if q.question_type not in allowed:
            warnings.append(f"question {n} has unrequested type {q.question_type.value}")
        if q.question_type is QuestionType.MCQ:
            opts = q.options or ()
            if len(opts) != 4 or len(set(opts)) != 4:
                warnings.append(f"question {n} does not have 4 distinct options")
            elif q.correct_answer not in opts:
                warnings.append(f"question {n} answer is not one of its options")
    return warnings


# ---------------- Client ----------------

class GenerationClient:
    """Issues the single Gemini call behind an exam and validates the result.

    `client` may be any object exposing `aio.models.generate_content`; it is
    reused as-is. Otherwise a google-genai Client is built for each call and
    closed afterwards: its async connection pool is bound to the event loop
    that opened it, and the UI runs every generation in a fresh loop.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Any = None,
        http_options: Optional[types.HttpOptions] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.google_api_key
        self.model = model or settings.llm_model
        self._client = client
        self.http_options = http_options

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[Any]:
        if self._client is not None:
            yield self._client
            return
        client = genai.Client(api_key=self.api_key, http_options=self.http_options)
        try:
            yield client
        finally:
            await client.aio.aclose()

    async def generate(
        self,
        file: FileInput,
        difficulty: Difficulty,
        question_types: Sequence[QuestionType],
        number_of_questions: int,
    ) -> Exam:
        if self._client is None and not self.api_key:
            raise ConfigurationError()
        request = GenerationRequest(
            difficulty=difficulty,
            question_types=list(question_types),
            number_of_questions=number_of_questions,
        )
        started = datetime.now(timezone.utc)

        inline = encode_file(file)
        prompt, schema = build_prompt(request.difficulty, request.question_types, request.number_of_questions)
        logger.info(
            "Generating exam: model=%s difficulty=%s types=%s n=%d mime=%s",
            self.model,
            request.difficulty.value,
            ",".join(t.value for t in request.question_types),
            request.number_of_questions,
            inline.mime_type,
        )

        async with self._session() as client:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=[
                    prompt,
                    types.Part.from_bytes(data=inline.to_bytes(), mime_type=inline.mime_type),
                ],
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=schema,
                ),
            )

        feedback = getattr(response, "prompt_feedback", None)
        reason = getattr(feedback, "block_reason", None) if feedback is not None else None
        if reason:
            reason = getattr(reason, "value", reason)
            logger.warning("Generation blocked by provider: %s", reason)
            raise BlockedError(str(reason))

        text = getattr(response, "text", None)
        if not (text or "").strip():
            logger.warning("Provider returned an empty response: %r", response)
        title, questions = validate_exam_payload(text)

        for w in quality_warnings(questions, request):
            logger.warning("Exam quality: %s", w)

        exam = Exam(
            id=new_exam_id(),
            title=title,
            created_at=datetime.now(timezone.utc),
            questions=tuple(questions),
        )
        logger.info(
            "Generated exam %s (%d questions) in %.1fs",
            exam.id,
            len(exam.questions),
            (exam.created_at - started).total_seconds(),
        )
        return exam

