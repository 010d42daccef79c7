"""Tests for persisted user preferences."""

import pytest

from saafy.core.storage import MemoryStore
from saafy.preferences import Preferences


class TestPreferences:
    """Tests for Preferences."""

    def test_defaults(self, store: MemoryStore) -> None:
        prefs = Preferences(store)

        assert prefs.theme == "light"
        assert prefs.keyboard_hints_seen is False
        assert prefs.to_dict() == {"theme": "light", "keyboard_hints_seen": False}

    def test_set_and_toggle_theme(self, store: MemoryStore) -> None:
        prefs = Preferences(store)

        assert prefs.set_theme("dark") == "dark"
        assert Preferences(store).theme == "dark"
        assert prefs.toggle_theme() == "light"
        assert prefs.toggle_theme() == "dark"

    def test_invalid_theme_rejected(self, store: MemoryStore) -> None:
        with pytest.raises(ValueError, match="Invalid theme"):
            Preferences(store).set_theme("sepia")

    def test_garbage_stored_theme_reads_default(self, store: MemoryStore) -> None:
        store.set("theme", "neon")
        assert Preferences(store).theme == "light"

    def test_keyboard_hints_flag(self, store: MemoryStore) -> None:
        prefs = Preferences(store)
        prefs.mark_keyboard_hints_seen()

        assert Preferences(store).keyboard_hints_seen is True

    def test_truthy_garbage_is_not_seen(self, store: MemoryStore) -> None:
        store.set("keyboard_hints_seen", "yes")
        assert Preferences(store).keyboard_hints_seen is False
