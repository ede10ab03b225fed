from __future__ import annotations
import logging
from solveme_app.config import (
    ANSWER_LENGTH_KEY, ANSWER_LENGTHS, DEFAULT_ANSWER_LENGTH, DEFAULT_LANGUAGE, LANGUAGE_KEY, LANGUAGES,
)
from solveme_app.db import migrate
from solveme_app.errors import InvalidInput
from solveme_app.models import Preferences
from solveme_app.repository import load_preferences, upsert_preference

logger = logging.getLogger(__name__)


class PreferenceStore:
    """Language and answer length, persisted on every change (last write wins)."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        migrate(db_path)

    def load(self) -> Preferences:
        stored = load_preferences(self.db_path)
        language = stored.get(LANGUAGE_KEY)
        if language not in LANGUAGES:
            if language is not None:
                logger.warning("Ignoring stored language %r", language)
            language = DEFAULT_LANGUAGE
        length = stored.get(ANSWER_LENGTH_KEY)
        if length not in ANSWER_LENGTHS:
            if length is not None:
                logger.warning("Ignoring stored answer length %r", length)
            length = DEFAULT_ANSWER_LENGTH
        return Preferences(language=language, answer_length=length)

    def set_language(self, language: str) -> None:
        if language not in LANGUAGES:
            raise InvalidInput(f"unsupported language {language!r}")
        upsert_preference(self.db_path, LANGUAGE_KEY, language)

    def set_answer_length(self, answer_length: str) -> None:
        if answer_length not in ANSWER_LENGTHS:
            raise InvalidInput(f"unsupported answer length {answer_length!r}")
        upsert_preference(self.db_path, ANSWER_LENGTH_KEY, answer_length)
