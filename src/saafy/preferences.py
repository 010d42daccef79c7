"""User preferences persisted in the durable store."""

from typing import Literal

from loguru import logger

from saafy.core.storage import KeyValueStore

Theme = Literal["light", "dark"]

THEME_KEY = "theme"
KEYBOARD_HINTS_KEY = "keyboard_hints_seen"
DEFAULT_THEME: Theme = "light"
THEMES = ("light", "dark")


class Preferences:
    """Theme and one-time UI flags. Bad stored values read as defaults."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    @property
    def theme(self) -> Theme:
        value = self.store.get(THEME_KEY, DEFAULT_THEME)
        if value not in THEMES:
            logger.debug(f"Ignoring unknown theme {value!r}")
            return DEFAULT_THEME
        return value

    def set_theme(self, theme: str) -> Theme:
        """Persist a theme.

        Raises:
            ValueError: If the theme is not 'light' or 'dark'
        """
        if theme not in THEMES:
            raise ValueError(f"Invalid theme: {theme!r}. Valid themes are: {THEMES}")
        self.store.set(THEME_KEY, theme)
        return theme

    def toggle_theme(self) -> Theme:
        return self.set_theme("dark" if self.theme == "light" else "light")

    @property
    def keyboard_hints_seen(self) -> bool:
        return self.store.get(KEYBOARD_HINTS_KEY, False) is True

    def mark_keyboard_hints_seen(self) -> None:
        self.store.set(KEYBOARD_HINTS_KEY, True)

    def to_dict(self) -> dict:
        return {"theme": self.theme, "keyboard_hints_seen": self.keyboard_hints_seen}
