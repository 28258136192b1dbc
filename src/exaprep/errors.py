"""
Failure kinds of a generation attempt.

Every error carries a user-facing message; `kind` exists so callers and tests
can tell them apart without matching on text.
"""
from typing import Optional

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred while generating the exam."


class ExamGenerationError(Exception):
    kind = "unknown"

    def __init__(self, message: str = UNKNOWN_ERROR_MESSAGE):
        super().__init__(message)
        self.message = message


class ConfigurationError(ExamGenerationError):
    kind = "configuration"

    def __init__(self, message: str = "Missing GOOGLE_API_KEY (or GEMINI_API_KEY). Put it in .env or export it."):
        super().__init__(message)


class BlockedError(ExamGenerationError):
    kind = "blocked"

    def __init__(self, reason: Optional[str]):
        self.reason = reason
        super().__init__(
            f"The request was blocked for safety reasons ({reason}). Please try with different material."
        )


class EmptyResponseError(ExamGenerationError):
    kind = "empty_response"

    def __init__(self):
        super().__init__(
            "The AI returned an empty response. This could be due to the content of your file, "
            "server load, or a content policy violation. Please try again with a different file."
        )


class MalformedResponseError(ExamGenerationError):
    kind = "malformed_response"

    def __init__(self):
        super().__init__("The AI returned a response that was not in the correct format. Please try again.")


class InvalidStructureError(ExamGenerationError):
    kind = "invalid_structure"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        super().__init__("The AI returned an invalid data structure. Please try again.")


class GenerationInProgressError(RuntimeError):
    """Raised when a generation is started while another one is in flight."""


class ExportError(Exception):
    """PDF export failed; generation state is unaffected."""
