"""
Playback/queue engine.

Single source of truth for what is playing and what plays next. All state
is mutated on the event loop thread; ordering races between overlapping
loads are resolved with a monotonically increasing request id, so only the
most recent load may change state.

Events (on `engine.events`):
- "state": PlaybackSnapshot after any change
- "track": Song that just started playing
- "queue": tuple of queued songs after a queue change
- "progress": (progress, duration) on position updates
- "error": PlaybackError describing a failure
"""

import asyncio
import math
import random
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Optional

from loguru import logger

from saafy.core.events import EventEmitter
from saafy.domain.catalog.exceptions import CatalogError
from saafy.domain.catalog.models import Song

from .audio import AudioBackend
from .exceptions import (
    AudioLoadError,
    NoPlayableSourceError,
    PlaybackError,
    StaleRequestError,
)
from .history import ListeningHistory
from .state import PlaybackSnapshot, PlaybackState, PlayerStatus, RepeatMode

if TYPE_CHECKING:
    from saafy.domain.catalog.client import CatalogClient
    from saafy.notifications import ToastCenter

DEFAULT_LOAD_TIMEOUT = 8.0
RESTART_THRESHOLD = 3.0  # seconds; "previous" restarts the track after this
MAX_SKIP_ATTEMPTS = 10

# Only a song that is actually playing (or paused) can end
_ENDABLE = (PlayerStatus.PLAYING, PlayerStatus.PAUSED)


class LoadOutcome(Enum):
    PLAYED = "played"
    STALE = "stale"
    UNPLAYABLE = "unplayable"
    FAILED = "failed"


class PlaybackEngine:
    """Owns the current song, the upcoming queue and transport controls."""

    def __init__(
        self,
        audio: AudioBackend,
        catalog: Optional["CatalogClient"] = None,
        history: Optional[ListeningHistory] = None,
        toasts: Optional["ToastCenter"] = None,
        volume: float = 0.7,
        load_timeout: float = DEFAULT_LOAD_TIMEOUT,
        restart_threshold: float = RESTART_THRESHOLD,
        max_skip_attempts: int = MAX_SKIP_ATTEMPTS,
        rng: Optional[random.Random] = None,
    ):
        self.audio = audio
        self.catalog = catalog
        self.history = history
        self.toasts = toasts
        self.load_timeout = load_timeout
        self.restart_threshold = restart_threshold
        self.max_skip_attempts = max(1, max_skip_attempts)
        self.events = EventEmitter()

        self._state = PlaybackState(volume=_clamp_volume(volume))
        self._context: list[Song] = []
        self._previous: list[Song] = []  # play-history stack for "previous"
        self._request_id = 0
        self._ended_handled = False
        self._rng = rng or random.Random()
        self._tasks: set[asyncio.Task] = set()

        self.audio.set_listener(self)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def snapshot(self) -> PlaybackSnapshot:
        return PlaybackSnapshot.of(self._state)

    @property
    def current_song(self) -> Optional[Song]:
        return self._state.current_song

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def progress(self) -> float:
        return self._state.progress

    @property
    def duration(self) -> float:
        return self._state.duration

    @property
    def volume(self) -> float:
        return self._state.volume

    @property
    def repeat_mode(self) -> RepeatMode:
        return self._state.repeat_mode

    @property
    def shuffle_mode(self) -> bool:
        return self._state.shuffle_mode

    @property
    def status(self) -> PlayerStatus:
        return self._state.status

    @property
    def queue(self) -> tuple[Song, ...]:
        return tuple(self._state.queue)

    @property
    def context(self) -> tuple[Song, ...]:
        return tuple(self._context)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def _emit_state(self) -> None:
        self.events.emit("state", self.snapshot())

    def _emit_queue(self) -> None:
        self.events.emit("queue", self.queue)
        self._emit_state()

    def _report(self, error: PlaybackError, toast: bool = True) -> None:
        logger.warning(str(error))
        self._state.error = str(error)
        if toast and self.toasts is not None:
            self.toasts.error(str(error))
        self.events.emit("error", error)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _check_current(self, request_id: int) -> None:
        if request_id != self._request_id:
            raise StaleRequestError(request_id, self._request_id)

    async def _resolve_playable(self, song: Song, request_id: int) -> Song:
        """Return `song`, enriched from the catalog if it lacks an audio URL.

        Raises:
            NoPlayableSourceError: If no audio URL can be found
            StaleRequestError: If a newer load started while enriching
        """
        if song.is_playable:
            return song

        resolved = song
        if self.catalog is not None:
            logger.info(f"Fetching song details for: {song.id}")
            try:
                fetched = await self.catalog.get_song(song.id)
            except CatalogError as e:
                logger.warning(f"Could not fetch details for {song.id}: {e}")
                fetched = None
            self._check_current(request_id)
            if fetched is not None:
                resolved = fetched

        if not resolved.is_playable:
            raise NoPlayableSourceError(resolved)
        return resolved

    async def _start(self, song: Song, record_previous: bool = True) -> LoadOutcome:
        """Resolve, load and play `song` as the newest request."""
        self._request_id += 1
        request_id = self._request_id

        try:
            playable = await self._resolve_playable(song, request_id)
        except StaleRequestError as e:
            logger.debug(str(e))
            return LoadOutcome.STALE
        except NoPlayableSourceError as e:
            self._report(e)
            self._emit_state()
            return LoadOutcome.UNPLAYABLE

        previous = self._state.current_song
        if record_previous and previous is not None and previous.id != playable.id:
            self._previous.append(previous)

        state = self._state
        state.current_song = playable
        state.progress = 0.0
        state.duration = playable.duration
        state.is_playing = False
        state.status = PlayerStatus.LOADING
        state.error = None
        self._ended_handled = False
        self._emit_state()

        try:
            duration = await asyncio.wait_for(
                self.audio.load(playable.download_url), timeout=self.load_timeout
            )
            self._check_current(request_id)
            await self.audio.set_volume(state.volume)
            await self.audio.play()
            self._check_current(request_id)
        except StaleRequestError as e:
            logger.debug(str(e))
            return LoadOutcome.STALE
        except (AudioLoadError, asyncio.TimeoutError) as e:
            if request_id != self._request_id:
                return LoadOutcome.STALE
            reason = str(e) or f"timed out after {self.load_timeout:g}s"
            self._fail_current(f'Couldn\'t play "{playable.name}" ({reason})')
            return LoadOutcome.FAILED

        if duration and duration > 0:
            state.duration = float(duration)
        state.is_playing = True
        state.status = PlayerStatus.PLAYING
        logger.info(f"Playing: {playable.name} - {playable.primary_artists}")

        if self.history is not None:
            self.history.record(playable)
        self.events.emit("track", playable)
        self._emit_state()
        return LoadOutcome.PLAYED

    def _fail_current(self, message: str) -> None:
        self._state.is_playing = False
        self._state.status = PlayerStatus.ERROR
        self._report(AudioLoadError(message))
        self._emit_state()

    # ------------------------------------------------------------------
    # Queue selection
    # ------------------------------------------------------------------

    def _seed_queue(self, song: Song, context_list: Iterable[Song]) -> None:
        self._context = list(context_list)
        index = next((i for i, s in enumerate(self._context) if s.id == song.id), None)
        upcoming = self._context[index + 1 :] if index is not None else []
        if self._state.shuffle_mode:
            upcoming = self._rng.sample(upcoming, len(upcoming))
        self._state.queue = upcoming

    def _shuffle_choices(self) -> list[Song]:
        current = self._state.current_song
        return [s for s in self._context if current is None or s.id != current.id]

    def has_next(self) -> bool:
        return bool(
            self._state.queue
            or (self._state.shuffle_mode and self._shuffle_choices())
            or (self._state.repeat_mode == RepeatMode.ALL and self._context)
        )

    def _next_candidate(self) -> Optional[Song]:
        state = self._state
        if state.queue:
            song = state.queue.pop(0)
            self.events.emit("queue", self.queue)
            return song
        if state.shuffle_mode:
            choices = self._shuffle_choices()
            if choices:
                return self._rng.choice(choices)
        if state.repeat_mode == RepeatMode.ALL and self._context:
            state.queue = list(self._context[1:])
            self.events.emit("queue", self.queue)
            return self._context[0]
        return None

    async def _advance(self) -> bool:
        """Move to the next track; skips unplayable candidates a bounded number of times."""
        state = self._state
        if state.current_song is None and not state.queue:
            return False

        if (
            state.repeat_mode == RepeatMode.ONE
            and state.current_song is not None
            and state.status != PlayerStatus.ERROR
        ):
            await self._restart_current()
            return True

        for _ in range(self.max_skip_attempts):
            candidate = self._next_candidate()
            if candidate is None:
                await self._stop_at_end()
                return False
            outcome = await self._start(candidate)
            if outcome is LoadOutcome.PLAYED:
                return True
            if outcome is LoadOutcome.STALE:
                return False

        logger.warning(f"Gave up after {self.max_skip_attempts} unplayable tracks")
        await self._stop_at_end()
        return False

    async def _stop_at_end(self) -> None:
        state = self._state
        state.is_playing = False
        if state.status != PlayerStatus.ERROR:
            state.status = PlayerStatus.ENDED
        await self.audio.pause()
        self._emit_state()

    async def _restart_current(self) -> None:
        state = self._state
        if state.current_song is None:
            return
        if state.status == PlayerStatus.ERROR:
            await self._start(state.current_song, record_previous=False)
            return

        state.progress = 0.0
        self._ended_handled = False
        self.events.emit("progress", state.progress, state.duration)
        await self.audio.seek(0.0)
        await self.audio.play()
        state.is_playing = True
        state.status = PlayerStatus.PLAYING
        self._emit_state()

    # ------------------------------------------------------------------
    # Public actions
    # ------------------------------------------------------------------

    async def play_song(self, song: Song, context_list: Optional[Iterable[Song]] = None) -> bool:
        """Play `song`, optionally seeding the queue from the list it was picked in.

        A song with no audio source (even after enrichment) leaves the current
        song untouched and emits NoPlayableSourceError.

        Returns:
            True if the song started playing
        """
        context = list(context_list) if context_list is not None else None

        self._request_id += 1
        request_id = self._request_id
        try:
            playable = await self._resolve_playable(song, request_id)
        except StaleRequestError as e:
            logger.debug(str(e))
            return False
        except NoPlayableSourceError as e:
            self._report(e)
            self._emit_state()
            return False

        if context is not None:
            self._seed_queue(playable, context)
            self.events.emit("queue", self.queue)

        outcome = await self._start(playable)
        if outcome is LoadOutcome.FAILED and self.has_next():
            return await self._advance()
        return outcome is LoadOutcome.PLAYED

    async def toggle_play(self) -> bool:
        """Pause or resume. Returns the new is_playing value."""
        state = self._state
        if state.current_song is None or state.status == PlayerStatus.LOADING:
            return state.is_playing

        if state.is_playing:
            await self.audio.pause()
            state.is_playing = False
            state.status = PlayerStatus.PAUSED
            self._emit_state()
        elif state.status in (PlayerStatus.ENDED, PlayerStatus.ERROR):
            await self._restart_current()
        else:
            await self.audio.play()
            state.is_playing = True
            state.status = PlayerStatus.PLAYING
            self._emit_state()
        return state.is_playing

    async def handle_next(self) -> bool:
        return await self._advance()

    skip_next = handle_next

    async def handle_previous(self) -> bool:
        """Restart after the threshold, else go back one track (or restart)."""
        state = self._state
        current = state.current_song
        if current is None:
            return False

        if state.progress > self.restart_threshold or not self._previous:
            await self._restart_current()
            return True

        previous = self._previous.pop()
        state.queue.insert(0, current)
        outcome = await self._start(previous, record_previous=False)
        if outcome is LoadOutcome.UNPLAYABLE:
            state.queue.pop(0)
        self._emit_queue()
        return outcome is LoadOutcome.PLAYED

    skip_previous = handle_previous

    async def seek_to(self, seconds: Any) -> float:
        state = self._state
        if state.current_song is None:
            return state.progress
        try:
            target = float(seconds)
        except (TypeError, ValueError):
            return state.progress
        if math.isnan(target):
            return state.progress

        target = max(0.0, target)
        if state.duration > 0:
            target = min(target, state.duration)

        state.progress = target
        if state.duration <= 0 or target < state.duration:
            self._ended_handled = False
        self.events.emit("progress", state.progress, state.duration)
        self._emit_state()
        await self.audio.seek(target)
        return target

    async def set_volume(self, volume: Any) -> float:
        self._state.volume = _clamp_volume(volume)
        await self.audio.set_volume(self._state.volume)
        self._emit_state()
        return self._state.volume

    def add_to_queue(self, song: Song, announce: bool = True) -> None:
        self._state.queue.append(song)
        if announce and self.toasts is not None:
            self.toasts.success(f'Added "{song.name}" to queue')
        self._emit_queue()

    def remove_from_queue(self, index: Any) -> bool:
        """Remove the song at `index`; out-of-range indexes are ignored."""
        if isinstance(index, bool) or not isinstance(index, int):
            return False
        if not 0 <= index < len(self._state.queue):
            return False
        self._state.queue.pop(index)
        self._emit_queue()
        return True

    def clear_queue(self) -> None:
        self._state.queue.clear()
        self._emit_queue()

    def toggle_shuffle(self) -> bool:
        self._state.shuffle_mode = not self._state.shuffle_mode
        self._emit_state()
        return self._state.shuffle_mode

    def toggle_repeat(self) -> RepeatMode:
        self._state.repeat_mode = self._state.repeat_mode.next()
        self._emit_state()
        return self._state.repeat_mode

    def clear_error(self) -> None:
        self._state.error = None
        self._emit_state()

    # ------------------------------------------------------------------
    # PlaybackListener
    # ------------------------------------------------------------------

    def on_time_update(self, seconds: float) -> None:
        state = self._state
        if state.current_song is None or state.status != PlayerStatus.PLAYING:
            return
        state.progress = max(0.0, float(seconds))
        self.events.emit("progress", state.progress, state.duration)
        if state.duration > 0 and state.progress >= state.duration:
            self.on_ended()

    def on_duration(self, seconds: float) -> None:
        if seconds and seconds > 0:
            self._state.duration = float(seconds)
            self._emit_state()

    def on_ended(self) -> None:
        state = self._state
        if self._ended_handled or state.current_song is None or state.status not in _ENDABLE:
            return
        self._ended_handled = True
        self._spawn(self._handle_ended(self._request_id))

    def on_error(self, message: str) -> None:
        if self._state.current_song is None:
            return
        self._spawn(self._handle_media_error(self._request_id, message))

    async def _handle_ended(self, request_id: int) -> None:
        state = self._state
        if request_id != self._request_id or state.status not in _ENDABLE:
            return
        state.is_playing = False
        state.status = PlayerStatus.ENDED
        state.progress = state.duration
        self._emit_state()
        await self._advance()

    async def _handle_media_error(self, request_id: int, message: str) -> None:
        if request_id != self._request_id or self._state.current_song is None:
            return
        self._fail_current(f'Playback failed for "{self._state.current_song.name}": {message}')
        if self.has_next():
            await self._advance()

    def _spawn(self, coro: Any) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.opt(exception=task.exception()).error("Playback task failed")

    async def wait_idle(self) -> None:
        """Wait for spawned end/error handling to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._tasks.clear()
        self._request_id += 1
        await self.audio.close()


def _clamp_volume(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return max(0.0, min(1.0, number))
