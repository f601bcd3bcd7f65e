"""Media sinks (audio, cassette visual, door clip) and the audio/visual transport."""
import asyncio
import logging
import math
import time
from typing import Callable, List, Optional

from tapedeck.config import PLAY_START_TIMEOUT_SEC
from tapedeck.models.session import PlayOutcome
from tapedeck.models.track import Track

logger = logging.getLogger(__name__)


class PlaybackRejected(Exception):
    """A sink refused to start (no source, autoplay policy, timeout)."""


class MediaSink:
    """One media element: source, running flag and a clock-driven playhead.

    A non-looping sink with a known duration raises its own "ended"
    notification on the running event loop; without a duration it waits for
    notify_ended() from whoever renders it.
    """

    def __init__(
        self,
        name: str,
        *,
        loop: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.loop = loop
        self.src: Optional[str] = None
        # Set to a reason to make play() refuse, like a browser autoplay policy
        self.blocked: Optional[str] = None
        self._clock = clock
        self._duration: Optional[float] = None
        self._offset = 0.0
        self._started_at: Optional[float] = None
        self._end_handle: Optional[asyncio.TimerHandle] = None
        self._ended_callbacks: List[Callable[[], None]] = []

    @property
    def running(self) -> bool:
        return self._started_at is not None

    @property
    def duration(self) -> Optional[float]:
        return self._duration

    @property
    def position(self) -> float:
        pos = self._offset
        if self._started_at is not None:
            pos += self._clock() - self._started_at
        if self._duration:
            pos = pos % self._duration if self.loop else min(pos, self._duration)
        return pos

    def load(self, src: Optional[str], duration: Optional[float] = None) -> None:
        """Assign a new source; stops and rewinds."""
        self.pause()
        self.src = src
        self._duration = duration
        self._offset = 0.0

    def set_duration(self, duration: Optional[float]) -> None:
        """Duration reported once the renderer has read the media metadata."""
        self._duration = duration if duration and duration > 0 else None
        if self.running:
            self._schedule_end()

    async def play(self) -> None:
        if self.src is None:
            raise PlaybackRejected(f"{self.name}: no source")
        if self.blocked:
            raise PlaybackRejected(f"{self.name}: {self.blocked}")
        if self.running:
            return
        if not self.loop and self._duration is not None and self._offset >= self._duration:
            self._offset = 0.0
        self._started_at = self._clock()
        self._schedule_end()

    def pause(self) -> None:
        if not self.running:
            return
        self._offset = self.position
        self._started_at = None
        self._cancel_end()

    def seek(self, seconds: float) -> None:
        seconds = max(0.0, seconds)
        if self._duration is not None:
            seconds = min(self._duration, seconds)
        self._offset = seconds
        if self.running:
            self._started_at = self._clock()
            self._schedule_end()

    def on_ended(self, callback: Callable[[], None]) -> None:
        self._ended_callbacks.append(callback)

    def notify_ended(self) -> None:
        """Playhead reached the end of a non-looping source."""
        if self.loop:
            return
        self._cancel_end()
        self._offset = self._duration if self._duration is not None else self.position
        self._started_at = None
        logger.debug("Sink %s: ended (%s)", self.name, self.src)
        for callback in list(self._ended_callbacks):
            callback()

    def _schedule_end(self) -> None:
        self._cancel_end()
        if self.loop or self._duration is None or not self.running:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Driven outside the event loop: only external notify_ended() ends it
            return
        remaining = max(0.0, self._duration - self.position)
        self._end_handle = loop.call_later(remaining, self.notify_ended)

    def _cancel_end(self) -> None:
        if self._end_handle is not None:
            self._end_handle.cancel()
            self._end_handle = None


class MediaTransport:
    """Audible track plus the looping cassette visual slaved to it."""

    def __init__(
        self,
        primary: Optional[MediaSink] = None,
        visual: Optional[MediaSink] = None,
        *,
        play_timeout: float = PLAY_START_TIMEOUT_SEC,
    ) -> None:
        self.primary = primary or MediaSink("audio")
        self.visual = visual or MediaSink("cassette", loop=True)
        self._play_timeout = play_timeout

    @property
    def playing(self) -> bool:
        return self.primary.running

    @property
    def position(self) -> float:
        return self.primary.position

    @property
    def duration(self) -> Optional[float]:
        return self.primary.duration

    def load(self, track: Track) -> None:
        """Stop, rewind and assign the track as the new audio source."""
        self.primary.pause()
        self.primary.seek(0.0)
        self.primary.load(track.file, track.duration)

    def load_visual(self, uri: Optional[str]) -> None:
        self.visual.load(uri)

    async def play(self) -> PlayOutcome:
        """Try to start the audio; a refusal or a start that never resolves is REJECTED."""
        try:
            await asyncio.wait_for(self.primary.play(), timeout=self._play_timeout)
        except PlaybackRejected as e:
            logger.warning("Transport: play rejected: %s", e)
            return PlayOutcome.REJECTED
        except asyncio.TimeoutError:
            logger.warning("Transport: play did not start within %.1fs", self._play_timeout)
            self.primary.pause()
            return PlayOutcome.REJECTED
        return PlayOutcome.STARTED

    def pause(self) -> None:
        self.primary.pause()

    def stop(self) -> None:
        """Pause and rewind to 0."""
        self.primary.pause()
        self.primary.seek(0.0)

    def seek_by(self, seconds: float) -> float:
        """Shift the audio playhead, clamped to [0, duration]; returns the new position."""
        duration = self.primary.duration
        end = duration if duration is not None and math.isfinite(duration) else math.inf
        target = max(0.0, min(end, self.primary.position + seconds))
        self.primary.seek(target)
        return target

    async def sync_visual(self, powered: bool) -> None:
        """Run the cassette visual iff powered and the audio is running."""
        if powered and self.primary.running:
            if self.visual.running:
                return
            try:
                await self.visual.play()
            except PlaybackRejected as e:
                logger.debug("Transport: cassette visual did not start: %s", e)
        else:
            self.visual.pause()
