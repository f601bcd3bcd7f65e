"""Playback session: the deck's state machine.

Events (power, transport buttons, media "ended", door outcome) are handled one
at a time under a single asyncio lock. The door clip runs as its own task and
does not hold the lock while it plays; its outcome is applied only if the
power cycle that started it is still current. Hold-repeat ticks are plain
synchronous calls on the loop.
"""
import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional, Set

from tapedeck.config import (
    DEFAULT_ACCENT,
    HOLD_INTERVAL_MS,
    HOLD_STEP_SECONDS,
    PLAYLISTS_DIR,
    TAP_JUMP_SECONDS,
)
from tapedeck.core.display import DisplayControl
from tapedeck.core.door import DoorSequencer
from tapedeck.core.hold_timer import HoldRepeatTimer
from tapedeck.core.media import MediaTransport
from tapedeck.core.playlist_store import PlaylistLoadError, load_playlist
from tapedeck.core.status import StatusBoard
from tapedeck.models.session import (
    DeckState,
    DoorOutcome,
    HoldDirection,
    PlayOutcome,
    PointerSignal,
    Power,
    SessionSnapshot,
    Status,
)
from tapedeck.models.track import EMPTY_PLAYLIST, Playlist, Track

logger = logging.getLogger(__name__)

_POWERED_IDLE = (DeckState.READY, DeckState.PLAYING, DeckState.PAUSED)


class PlaybackSession:
    """Owns power/mode, the playlist and track index, and drives transport and door."""

    def __init__(
        self,
        *,
        transport: Optional[MediaTransport] = None,
        door: Optional[DoorSequencer] = None,
        display: Optional[DisplayControl] = None,
        status: Optional[StatusBoard] = None,
        hold_timer: Optional[HoldRepeatTimer] = None,
        tap_jump: float = TAP_JUMP_SECONDS,
        hold_step: float = HOLD_STEP_SECONDS,
        hold_interval_ms: float = HOLD_INTERVAL_MS,
    ) -> None:
        self.transport = transport or MediaTransport()
        self.door = door or DoorSequencer()
        self.display = display or DisplayControl()
        self.status = status or StatusBoard()
        self._hold_timer = hold_timer or HoldRepeatTimer()
        self._tap_jump = tap_jump
        self._hold_step = hold_step
        self._hold_interval_ms = hold_interval_ms

        self.state = DeckState.OFF
        self.playlist: Playlist = EMPTY_PLAYLIST
        self.track_index = 0
        self.hold_direction = HoldDirection.NONE

        self._lock = asyncio.Lock()
        # Bumped on every power transition; door outcomes from an older cycle are dropped
        self._epoch = 0
        self._door_task: Optional[asyncio.Task] = None
        # Bumped on every track load; "ended" for an older load is dropped
        self._track_serial = 0
        self._track_loaded = False
        self._pending: Set[asyncio.Task] = set()

        self.transport.primary.on_ended(self._on_primary_ended)

    # ----------------------------
    # State queries
    # ----------------------------

    @property
    def power(self) -> Power:
        return self.state.power

    @property
    def mode(self) -> Optional[str]:
        return self.state.mode

    @property
    def controls_enabled(self) -> bool:
        """Transport controls (everything but power) are usable."""
        return self.state in _POWERED_IDLE and bool(self.playlist)

    @property
    def hold_active(self) -> bool:
        return self._hold_timer.active

    @property
    def current_track(self) -> Optional[Track]:
        if not self.playlist:
            return None
        return self.playlist[self.track_index]

    def snapshot(self) -> SessionSnapshot:
        track = self.current_track
        return SessionSnapshot(
            power=self.power,
            mode=self.mode,
            track_index=self.track_index,
            track=track,
            track_count=len(self.playlist),
            playlist_id=self.playlist.playlist_id,
            playlist_title=self.playlist.title,
            door_uri=self.playlist.door,
            cassette_uri=self.playlist.cassette,
            status=self.status.current.value,
            controls_enabled=self.controls_enabled,
            latched=self.power is Power.ON and self.transport.playing,
            hold_direction=self.hold_direction,
            position=self.transport.position,
            duration=self.transport.duration,
            visual_running=self.transport.visual.running,
            door_overlay_visible=self.door.overlay_visible,
            fullscreen=self.display.fullscreen,
            landscape_locked=self.display.landscape_locked,
            accent=(track.accent if track and track.accent else DEFAULT_ACCENT),
        )

    # ----------------------------
    # Playlist
    # ----------------------------

    async def load_manifest(self, playlist_id: str, playlists_dir: Path = PLAYLISTS_DIR) -> Playlist:
        """Read a manifest and make it the session's playlist.

        On failure the deck is reset to OFF with an empty playlist, the status
        shows the failure, and PlaylistLoadError is re-raised for the caller.
        """
        try:
            playlist = load_playlist(playlist_id, playlists_dir)
        except PlaylistLoadError as e:
            logger.warning("Deck: %s", e)
            async with self._lock:
                await self._reset_locked()
                self.status.set(Status.PLAYLIST_LOAD_FAILED)
            raise
        await self.replace_playlist(playlist)
        return playlist

    async def replace_playlist(self, playlist: Playlist) -> None:
        """Swap the playlist wholesale: stop, rewind, back to track 0 without autoplay."""
        async with self._lock:
            self._stop_hold()
            self.transport.stop()
            self.playlist = playlist
            self.track_index = 0
            self._track_loaded = False
            self.transport.load_visual(playlist.cassette)
            self.door.load(playlist.door)
            if self.state in (DeckState.PLAYING, DeckState.PAUSED):
                self.state = DeckState.READY
            await self._set_track_locked(0, autoplay=False)
            await self._refresh_locked()

    async def reset(self) -> None:
        """Power off and forget the playlist."""
        async with self._lock:
            await self._reset_locked()

    async def _reset_locked(self) -> None:
        await self._power_off_locked()
        self.playlist = EMPTY_PLAYLIST
        self.track_index = 0
        self._track_loaded = False
        self._track_serial += 1
        self.transport.primary.load(None)
        self.transport.load_visual(None)
        self.door.load(None)

    # ----------------------------
    # Power
    # ----------------------------

    async def power_toggle(self) -> None:
        async with self._lock:
            if self.state is DeckState.OFF:
                await self._power_on_locked()
            else:
                await self._power_off_locked()

    async def power_off(self) -> None:
        """Universal cancel; safe from any state."""
        async with self._lock:
            await self._power_off_locked()

    async def _power_on_locked(self) -> None:
        self._epoch += 1
        self.state = DeckState.DOOR_OPENING
        logger.info("Deck: power on")
        self.door.begin()
        self.status.set(Status.POWER_ON)
        self._best_effort(self.display.enter_fullscreen)
        self._best_effort(self.display.lock_landscape)
        self.status.set(Status.LOADING_TAPE)
        await self._refresh_locked()
        task = asyncio.get_running_loop().create_task(self._run_door(self._epoch))
        task.add_done_callback(self._on_door_task_done)
        self._door_task = task

    async def _run_door(self, epoch: int) -> None:
        try:
            outcome = await self.door.run()
        except Exception:
            logger.exception("Deck: door sequence raised, treating as failed")
            self.door.abort()
            outcome = DoorOutcome.FAILED
        async with self._lock:
            if epoch != self._epoch or self.state is not DeckState.DOOR_OPENING:
                logger.debug("Deck: stale door outcome (%s) discarded", outcome.value)
                return
            self._door_task = None
            self.state = DeckState.READY
            logger.info("Deck: door %s, ready", outcome.value)
            self.status.set(Status.READY)
            if not self._track_loaded:
                await self._set_track_locked(self.track_index, autoplay=False)
            await self._refresh_locked()

    @staticmethod
    def _on_door_task_done(task: "asyncio.Task[None]") -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Deck: door task failed: %s", exc, exc_info=exc)

    async def _power_off_locked(self) -> None:
        self._epoch += 1
        if self._door_task is not None:
            self._door_task.cancel()
            self._door_task = None
        self.door.abort()
        self._stop_hold()
        self.transport.stop()
        if self.state is not DeckState.OFF:
            logger.info("Deck: power off (was %s)", self.state.value)
        self.state = DeckState.OFF
        self.status.set(Status.POWER_OFF)
        self._best_effort(self.display.unlock_orientation)
        self._best_effort(self.display.exit_fullscreen)
        await self._refresh_locked()

    # ----------------------------
    # Transport
    # ----------------------------

    async def play_pause(self) -> None:
        async with self._lock:
            if not self.controls_enabled:
                logger.debug("Deck: play/pause ignored in %s", self.state.value)
                return
            if self.state is DeckState.PLAYING:
                self.transport.pause()
                self.state = DeckState.PAUSED
                self.status.set(Status.PAUSED)
            else:
                outcome = await self.transport.play()
                if outcome is PlayOutcome.STARTED:
                    self.state = DeckState.PLAYING
                    self.status.set(Status.PLAYING)
                    self._best_effort(self.display.enter_fullscreen)
                    self._best_effort(self.display.lock_landscape)
                else:
                    # No retry without a new press
                    self.state = DeckState.PAUSED
                    self.status.set(Status.PLAY_REJECTED)
            await self._refresh_locked()

    async def next_track(self) -> None:
        await self._step(1)

    async def prev_track(self) -> None:
        await self._step(-1)

    async def _step(self, delta: int) -> None:
        async with self._lock:
            if not self.controls_enabled:
                logger.debug("Deck: track step ignored in %s", self.state.value)
                return
            was_playing = self.state is DeckState.PLAYING
            outcome = await self._set_track_locked(self.track_index + delta, autoplay=was_playing)
            if outcome is PlayOutcome.REJECTED:
                self.status.set(Status.PLAY_REJECTED)
            await self._refresh_locked()

    async def _set_track_locked(self, index: int, autoplay: bool) -> Optional[PlayOutcome]:
        """Single path for loading a track. Returns the play outcome if playback was attempted."""
        if not self.playlist:
            return None
        self.track_index = index % len(self.playlist)
        track = self.playlist[self.track_index]
        self.transport.load(track)
        self._track_loaded = True
        self._track_serial += 1
        logger.info("Deck: track %d/%d %s", self.track_index + 1, len(self.playlist), track.title)
        if self.state is DeckState.PLAYING:
            self.state = DeckState.PAUSED
        if not autoplay or self.state not in _POWERED_IDLE:
            return None
        outcome = await self.transport.play()
        self.state = DeckState.PLAYING if outcome is PlayOutcome.STARTED else DeckState.PAUSED
        return outcome

    # ----------------------------
    # Track end / auto-advance
    # ----------------------------

    def _on_primary_ended(self) -> None:
        task = asyncio.get_running_loop().create_task(self._advance_after_end(self._track_serial))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def audio_ended(self) -> bool:
        """Renderer reports the audible track ended. Ignored unless playing."""
        async with self._lock:
            if self.state is not DeckState.PLAYING:
                logger.debug("Deck: audio ended ignored in %s", self.state.value)
                return False
            self.transport.primary.notify_ended()
            return True

    async def track_ended(self) -> None:
        """The current track finished: advance and keep playing."""
        await self._advance_after_end(self._track_serial)

    async def _advance_after_end(self, serial: int) -> None:
        async with self._lock:
            if serial != self._track_serial:
                logger.debug("Deck: ended for a replaced track, ignored")
                return
            if self.state is not DeckState.PLAYING or not self.playlist:
                logger.debug("Deck: track end ignored in %s", self.state.value)
                return
            outcome = await self._set_track_locked(self.track_index + 1, autoplay=True)
            self.status.set(Status.PLAYING if outcome is PlayOutcome.STARTED else Status.TAP_PLAY)
            await self._refresh_locked()

    async def settle(self) -> None:
        """Wait for queued track-end handling to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    # ----------------------------
    # Seeking
    # ----------------------------

    def nudge(self, seconds: float) -> bool:
        """Shift the playhead; False when the controls are disabled."""
        if not self.controls_enabled:
            return False
        self.transport.seek_by(seconds)
        return True

    def rewind_tap(self) -> bool:
        return self.nudge(-self._tap_jump)

    def fast_forward_tap(self) -> bool:
        return self.nudge(self._tap_jump)

    def start_hold(self, direction: HoldDirection) -> bool:
        """Begin repeated nudging in direction until release_hold()."""
        if not self.controls_enabled or direction is HoldDirection.NONE:
            return False
        step = direction.sign * self._hold_step
        self.hold_direction = direction
        self._hold_timer.start(lambda: self.nudge(step), self._hold_interval_ms)
        logger.debug("Deck: hold %s", direction.value)
        return True

    def release_hold(self) -> None:
        """End of any hold gesture. Safe when nothing is held."""
        self._stop_hold()

    def pointer_signal(self, signal: PointerSignal) -> None:
        """Release, cancel, leave and lost capture all end the hold the same way."""
        logger.debug("Deck: pointer %s", signal.value)
        self.release_hold()

    def _stop_hold(self) -> None:
        self._hold_timer.stop()
        self.hold_direction = HoldDirection.NONE

    # ----------------------------
    # Helpers
    # ----------------------------

    async def refresh(self) -> None:
        """Resync the cassette visual with the audio."""
        async with self._lock:
            await self._refresh_locked()

    async def _refresh_locked(self) -> None:
        await self.transport.sync_visual(self.power is Power.ON)

    @staticmethod
    def _best_effort(call: Callable[[], None]) -> None:
        try:
            call()
        except Exception as e:
            logger.debug("Display request %s failed: %s", getattr(call, "__name__", call), e)
