"""Tests for persisted listening history."""

from fakes import make_song
from saafy.core.storage import MemoryStore
from saafy.domain.playback.history import ListeningHistory


class TestListeningHistory:
    """Tests for ListeningHistory."""

    def test_newest_first(self, store: MemoryStore) -> None:
        history = ListeningHistory(store)
        history.record(make_song("a"))
        history.record(make_song("b"))

        assert [s.id for s in history.entries()] == ["b", "a"]

    def test_replaying_moves_to_front(self, store: MemoryStore) -> None:
        """A song appears once; playing it again moves it to the front."""
        history = ListeningHistory(store)
        for song_id in ("a", "b", "a"):
            history.record(make_song(song_id))

        assert [s.id for s in history.entries()] == ["a", "b"]

    def test_trimmed_to_max_entries(self, store: MemoryStore) -> None:
        history = ListeningHistory(store, max_entries=3)
        for song_id in "abcde":
            history.record(make_song(song_id))

        assert [s.id for s in history.entries()] == ["e", "d", "c"]
        assert len(history) == 3

    def test_entries_keep_audio_url(self, store: MemoryStore) -> None:
        history = ListeningHistory(store)
        history.record(make_song("a"))

        assert ListeningHistory(store).entries()[0].is_playable

    def test_malformed_store_value(self, store: MemoryStore) -> None:
        store.set("recently_played", {"not": "a list"})
        assert ListeningHistory(store).entries() == []

    def test_malformed_entries_skipped(self, store: MemoryStore) -> None:
        store.set("recently_played", [{"name": "no id"}, make_song("ok").to_dict(), "junk"])
        assert [s.id for s in ListeningHistory(store).entries()] == ["ok"]

    def test_clear(self, store: MemoryStore) -> None:
        history = ListeningHistory(store)
        history.record(make_song("a"))

        history.clear()

        assert history.entries() == []
        assert store.keys() == []
