from datetime import datetime, timezone
from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from exaprep.models import Exam, Question, QuestionType
from exaprep.storage import MemoryHistoryStore

APP = str(Path(__file__).resolve().parents[1] / "app.py")


@pytest.fixture
def exam():
    return Exam(
        id="exam_1",
        title="Number Theory",
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        questions=(
            Question(
                question_number=1,
                question_text="Which of these is prime?",
                question_type=QuestionType.MCQ,
                options=("4", "6", "8", "9", "11"),
                correct_answer="11",
            ),
        ),
    )


@pytest.fixture
def app(exam):
    at = AppTest.from_file(APP, default_timeout=30)
    history = MemoryHistoryStore()
    history.save([exam])
    at.session_state["history_store"] = history
    at.session_state["current_exam"] = exam
    return at


def test_current_exam_lists_every_option(app, exam):
    app.run()
    assert not app.exception
    assert app.subheader[0].value == exam.title
    shown = [m.value for m in app.markdown]
    for text in ("A. 4", "D. 9", "E. 11"):
        assert text in shown


def test_new_exam_clears_the_page(app):
    app.run()
    app.button(key="new_exam").click().run()

    assert not app.exception
    assert app.session_state["current_exam"] is None
    assert app.session_state["uploader_key"] == 1
    assert len(app.subheader) == 0
    assert any("Welcome to ExaPrep AI" in m.value for m in app.markdown)
