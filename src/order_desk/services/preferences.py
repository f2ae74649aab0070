"""Language and theme preferences, persisted in durable storage."""
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

from ..core.storage import LANGUAGE_KEY, THEME_KEY, KeyValueStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Language:
    """A supported UI language and its text direction."""

    code: Literal["ar", "en"]
    name: str
    direction: Literal["rtl", "ltr"]


class Theme(StrEnum):
    LIGHT = "light"
    DARK = "dark"


LANGUAGES: tuple[Language, ...] = (
    Language("ar", "العربية", "rtl"),
    Language("en", "English", "ltr"),
)
DEFAULT_LANGUAGE = LANGUAGES[0]
DEFAULT_THEME = Theme.LIGHT


def find_language(code: str | None) -> Language | None:
    return next((lang for lang in LANGUAGES if lang.code == code), None)


class Preferences:
    """
    Current language and theme.

    Both are read from storage on construction and written back on every
    change. Unknown stored values fall back to the defaults.
    """

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage
        stored_code = storage.get(LANGUAGE_KEY)
        self._language = find_language(stored_code) or DEFAULT_LANGUAGE
        if stored_code is not None and self._language.code != stored_code:
            logger.warning("preferences_unknown_language code=%s", stored_code)

        stored_theme = storage.get(THEME_KEY)
        try:
            self._theme = Theme(stored_theme) if stored_theme else DEFAULT_THEME
        except ValueError:
            logger.warning("preferences_unknown_theme theme=%s", stored_theme)
            self._theme = DEFAULT_THEME

    @property
    def language(self) -> Language:
        return self._language

    @property
    def direction(self) -> str:
        return self._language.direction

    @property
    def theme(self) -> Theme:
        return self._theme

    def set_language(self, code: str) -> Language:
        """
        Switch language.

        Raises:
            ValueError: If ``code`` is not a supported language.
        """
        language = find_language(code)
        if language is None:
            supported = ", ".join(lang.code for lang in LANGUAGES)
            raise ValueError(f"Unsupported language '{code}'. Supported: {supported}")
        self._language = language
        self._storage.set(LANGUAGE_KEY, language.code)
        return language

    def set_theme(self, theme: Theme | str) -> Theme:
        self._theme = Theme(theme)
        self._storage.set(THEME_KEY, self._theme.value)
        return self._theme

    def toggle_theme(self) -> Theme:
        """Flip between light and dark."""
        return self.set_theme(Theme.DARK if self._theme is Theme.LIGHT else Theme.LIGHT)
