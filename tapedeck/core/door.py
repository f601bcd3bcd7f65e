"""Door clip played once per power-on; gates the transport until it finishes."""
import asyncio
import logging
from typing import Optional

from tapedeck.config import DOOR_DURATION_SEC, DOOR_FAILURE_GRACE_SEC, DOOR_TIMEOUT_SEC
from tapedeck.core.media import MediaSink, PlaybackRejected
from tapedeck.models.session import DoorOutcome

logger = logging.getLogger(__name__)


class DoorSequencer:
    """Runs the door sink once and reports COMPLETED or FAILED.

    COMPLETED means the sink started and then signalled "ended". FAILED means
    it refused to start (reported after a short grace delay) or never signalled
    within the timeout. The overlay flag is cleared on every outcome.
    """

    def __init__(
        self,
        sink: Optional[MediaSink] = None,
        *,
        failure_grace: float = DOOR_FAILURE_GRACE_SEC,
        timeout: float = DOOR_TIMEOUT_SEC,
        clip_duration: float = DOOR_DURATION_SEC,
    ) -> None:
        self.sink = sink or MediaSink("door")
        self.overlay_visible = False
        self.uri: Optional[str] = None
        self._failure_grace = failure_grace
        self._timeout = timeout
        self._clip_duration = clip_duration
        self._finished: Optional[asyncio.Event] = None
        self.sink.on_ended(self._on_sink_ended)

    @property
    def running(self) -> bool:
        return self._finished is not None

    def load(self, uri: Optional[str]) -> None:
        """Clip for the next run; a run in progress keeps its clip."""
        self.uri = uri

    def _on_sink_ended(self) -> None:
        if self._finished is not None:
            self._finished.set()

    def begin(self) -> None:
        """Raise the overlay and arm a fresh run; a previous run's state is dropped."""
        self.overlay_visible = True
        self._finished = asyncio.Event()

    async def run(self) -> DoorOutcome:
        if self._finished is None:
            self.begin()
        finished = self._finished
        try:
            self.sink.load(self.uri, self._clip_duration or None)
            try:
                await self.sink.play()
            except PlaybackRejected as e:
                logger.warning("Door: clip did not start (%s)", e)
                await asyncio.sleep(self._failure_grace)
                return DoorOutcome.FAILED
            try:
                await asyncio.wait_for(finished.wait(), timeout=self._timeout)
            except asyncio.TimeoutError:
                logger.warning("Door: no finished signal within %.1fs", self._timeout)
                self.sink.pause()
                return DoorOutcome.FAILED
            return DoorOutcome.COMPLETED
        finally:
            # A cancelled run may unwind after the next one has begun
            if self._finished is finished:
                self.overlay_visible = False
                self._finished = None

    def notify_finished(self) -> None:
        """Renderer reports the door clip ended."""
        if not self.running:
            logger.debug("Door: finished signal with no door running, ignored")
            return
        self.sink.notify_ended()

    def abort(self) -> None:
        """Stop the clip and drop the overlay (power-off mid-door)."""
        self.sink.pause()
        self.overlay_visible = False
        self._finished = None
