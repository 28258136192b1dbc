"""Generation state for the UI: idle -> generating -> succeeded | failed."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Sequence

from exaprep.agents.generation import GenerationClient
from exaprep.encoding import FileInput
from exaprep.errors import UNKNOWN_ERROR_MESSAGE, ExamGenerationError, GenerationInProgressError
from exaprep.models import Difficulty, Exam, QuestionType
from exaprep.storage.history import HistoryStore, remember

logger = logging.getLogger(__name__)


class GenerationStatus(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ExamGenerator:
    """Wraps a GenerationClient with observable state.

    At most one generation is in flight per instance; a second start while
    generating is rejected with GenerationInProgressError, so only the first
    call's outcome ever becomes current state.
    """

    def __init__(self, client: Optional[GenerationClient] = None, history: Optional[HistoryStore] = None):
        self.client = client or GenerationClient()
        self.history = history
        self.status = GenerationStatus.IDLE
        self.exam: Optional[Exam] = None
        self.error: Optional[str] = None

    @property
    def is_generating(self) -> bool:
        return self.status is GenerationStatus.GENERATING

    def reset(self) -> None:
        if self.is_generating:
            raise GenerationInProgressError("Cannot reset while a generation is in flight.")
        self.status = GenerationStatus.IDLE
        self.exam = None
        self.error = None

    async def generate(
        self,
        file: FileInput,
        difficulty: Difficulty,
        question_types: Sequence[QuestionType],
        number_of_questions: int,
    ) -> Optional[Exam]:
        """Run one generation; returns the Exam, or None with `error` set."""
        if self.is_generating:
            raise GenerationInProgressError("An exam is already being generated.")

        self.status = GenerationStatus.GENERATING
        self.exam = None
        self.error = None
        try:
            exam = await self.client.generate(file, difficulty, question_types, number_of_questions)
        except ExamGenerationError as exc:
            logger.warning("Exam generation failed (%s): %s", exc.kind, exc.message)
            return self._fail(exc.message)
        except Exception:
            logger.exception("Unexpected error while generating exam")
            return self._fail(UNKNOWN_ERROR_MESSAGE)
        except BaseException:
            # cancelled: leave the instance usable again
            self.status = GenerationStatus.IDLE
            raise

        self.exam = exam
        self.status = GenerationStatus.SUCCEEDED
        if self.history is not None:
            try:
                remember(self.history, exam)
            except Exception:
                logger.exception("Could not save exam %s to history", exam.id)
        return exam

    def _fail(self, message: str) -> None:
        self.error = message
        self.exam = None
        self.status = GenerationStatus.FAILED
        return None
