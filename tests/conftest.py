import json
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from exaprep.agents.generation import GenerationClient  # noqa: E402


ALGEBRA_QUESTION: Dict[str, Any] = {
    "questionNumber": 1,
    "questionText": "2+2=?",
    "questionType": "MCQ",
    "options": ["1", "2", "3", "4"],
    "correctAnswer": "4",
}


class FakeModels:
    """Stands in for google-genai's `client.aio.models`."""

    def __init__(self, responses: List[Any], gate=None):
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []
        self.gate = gate

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.gate is not None:
            await self.gate.wait()
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


class FakeGenai:
    def __init__(self, responses: List[Any], gate=None):
        self.models = FakeModels(responses, gate=gate)
        self.aio = SimpleNamespace(models=self.models)


def make_response(text: Optional[str] = None, block_reason: Optional[str] = None):
    feedback = SimpleNamespace(block_reason=block_reason) if block_reason else None
    return SimpleNamespace(text=text, prompt_feedback=feedback)


def exam_json(title: str = "Algebra Basics", questions: Optional[List[Dict[str, Any]]] = None) -> str:
    return json.dumps({"title": title, "questions": questions if questions is not None else [ALGEBRA_QUESTION]})


@pytest.fixture
def make_client():
    def _make(*responses, gate=None):
        fake = FakeGenai(list(responses), gate=gate)
        return GenerationClient(api_key="test-key", model="gemini-test", client=fake), fake
    return _make


@pytest.fixture
def upload():
    return SimpleNamespace(name="notes.pdf", type="application/pdf", getvalue=lambda: b"%PDF-1.4 course notes")
