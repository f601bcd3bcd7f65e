"""Fullscreen and orientation-lock requests, forwarded to the renderer.

These are best-effort: any method may raise DisplayUnavailable and callers
must not let that change deck state.
"""
import logging

from tapedeck.config import DISPLAY_CONTROL

logger = logging.getLogger(__name__)


class DisplayUnavailable(Exception):
    pass


class DisplayControl:
    """Records what the renderer should do with the screen."""

    def __init__(self, enabled: bool = DISPLAY_CONTROL) -> None:
        self._enabled = enabled
        self.fullscreen = False
        self.landscape_locked = False

    def _check(self, what: str) -> None:
        if not self._enabled:
            raise DisplayUnavailable(f"{what}: display control disabled")

    def enter_fullscreen(self) -> None:
        self._check("fullscreen")
        self.fullscreen = True

    def exit_fullscreen(self) -> None:
        self._check("fullscreen")
        self.fullscreen = False

    def lock_landscape(self) -> None:
        self._check("orientation")
        self.landscape_locked = True

    def unlock_orientation(self) -> None:
        self._check("orientation")
        self.landscape_locked = False
