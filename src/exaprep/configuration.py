import os
from pathlib import Path
from typing import Optional
from pydantic import BaseModel
from dotenv import load_dotenv

# Load environment variables from .env file, if present
_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(_ROOT / ".env")

def _first(*keys: str) -> Optional[str]:
    """
    Return the value of the first environment variable found in keys.
    """
    for key in keys:
        val = os.getenv(key)
        if val:
            return val
    return None

class Settings(BaseModel):
    llm_model: str = os.getenv("LLM_MODEL", "gemini-2.5-flash")
    google_api_key: Optional[str] = _first("GOOGLE_API_KEY", "GEMINI_API_KEY", "API_KEY")
    history_db: str = os.getenv("EXAPREP_HISTORY_DB", "exaprep_history.db")
    history_limit: int = int(os.getenv("EXAPREP_HISTORY_LIMIT", "10"))
    # bounds of the question-count slider
    min_questions: int = 5
    max_questions: int = 15
    default_questions: int = 7
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    debug: bool = os.getenv("DEBUG", "false").lower() in ("1", "true", "yes")


# Singleton instance for app-wide settings
settings = Settings()
