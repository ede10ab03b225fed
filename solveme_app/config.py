from __future__ import annotations
from typing import Dict, List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_TITLE = "Solve me!"
APP_SUBTITLE = "Capture or upload an image and get AI-generated insights."

LANGUAGES: Dict[str, str] = {"en": "English", "ru": "Russian", "ua": "Ukrainian"}
ANSWER_LENGTHS: Dict[str, str] = {"short": "Short", "medium": "Medium", "large": "Large"}

DEFAULT_LANGUAGE = "en"
DEFAULT_ANSWER_LENGTH = "medium"

# keys in the preferences table
LANGUAGE_KEY = "selectedLanguage"
ANSWER_LENGTH_KEY = "answerLength"

SUBMIT_PATH = "/OcrChat/Submit"
RESULT_PATH = "/OcrChat/Result/{request_id}"

MAX_UPLOAD_BYTES = 20 * 1024 * 1024
ACCEPTED_IMAGE_TYPES = ["png", "jpg", "jpeg", "webp", "gif", "bmp"]

# how often the status panel re-reads the controller
STATUS_REFRESH_SECONDS = 1.0


class Settings(BaseSettings):
    api_base_url: str = "http://localhost:8080"
    request_timeout_seconds: float = 60.0

    poll_interval_seconds: float = 2.0
    poll_max_attempts: Optional[int] = Field(default=None, ge=1)
    # a run nobody is watching any more still ends after this long
    poll_max_duration_seconds: Optional[float] = Field(default=900.0, gt=0)
    poll_max_transient_errors: Optional[int] = Field(default=30, ge=1)
    poll_hard_failure_statuses: List[int] = [400, 401, 403, 404, 410, 422]

    app_db_path: str = "solveme_state.db"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")


settings = Settings()
