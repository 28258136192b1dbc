import string
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from .configuration import settings


class Difficulty(str, Enum):
    """Difficulty levels offered to the user."""
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class QuestionType(str, Enum):
    """Closed set of question kinds the model may produce."""
    MCQ = "MCQ"
    SHORT_ANSWER = "ShortAnswer"
    ESSAY = "Essay"

    @property
    def label(self) -> str:
        return _TYPE_LABELS[self]


_TYPE_LABELS = {
    QuestionType.MCQ: "Multiple Choice",
    QuestionType.SHORT_ANSWER: "Short Answer",
    QuestionType.ESSAY: "Essay",
}

# option letters, on screen and in the PDF
OPTION_LETTERS = string.ascii_uppercase


class Question(BaseModel):
    """One exam item, keyed on the wire by the camelCase names the model returns."""

    question_number: int = Field(..., ge=1, alias="questionNumber")
    question_text: str = Field(..., min_length=1, alias="questionText")
    question_type: QuestionType = Field(..., alias="questionType")
    options: Optional[Tuple[str, ...]] = Field(None, description="Exactly 4 entries for MCQ; unused otherwise.")
    correct_answer: str = Field(..., min_length=1, alias="correctAnswer")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("question_text", "correct_answer")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    def lettered_options(self) -> List[Tuple[str, str]]:
        """Every option paired with its display letter (A, B, C, ...)."""
        return list(zip(OPTION_LETTERS, self.options or ()))

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Exam(BaseModel):
    """A generated exam. Immutable; regenerating yields a new Exam with a new id."""

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    created_at: datetime = Field(..., alias="createdAt")
    questions: Tuple[Question, ...] = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def sorted_questions(self) -> List[Question]:
        """Questions in display order (the provider does not guarantee it)."""
        return sorted(self.questions, key=lambda q: q.question_number)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class GenerationRequest(BaseModel):
    """Per-click generation parameters; consumed once and discarded."""

    difficulty: Difficulty = Difficulty.MEDIUM
    question_types: List[QuestionType] = Field(default_factory=lambda: [QuestionType.MCQ], min_length=1)
    number_of_questions: int = settings.default_questions

    @field_validator("question_types")
    @classmethod
    def _dedupe_types(cls, v: List[QuestionType]) -> List[QuestionType]:
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def _check_count(self) -> "GenerationRequest":
        if not settings.min_questions <= self.number_of_questions <= settings.max_questions:
            raise ValueError(
                f"number_of_questions must be between {settings.min_questions} and {settings.max_questions}"
            )
        return self
