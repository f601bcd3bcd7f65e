"""Deck state, outcomes and status labels."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from tapedeck.models.track import Track


class Power(str, Enum):
    OFF = "off"
    ON = "on"


class DeckState(str, Enum):
    """Single operating state; OFF carries no mode."""
    OFF = "off"
    DOOR_OPENING = "door_opening"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"

    @property
    def power(self) -> Power:
        return Power.OFF if self is DeckState.OFF else Power.ON

    @property
    def mode(self) -> Optional[str]:
        return None if self is DeckState.OFF else self.value


class HoldDirection(str, Enum):
    NONE = "none"
    REWIND = "rewind"
    FAST_FORWARD = "fast_forward"

    @property
    def sign(self) -> int:
        if self is HoldDirection.REWIND:
            return -1
        if self is HoldDirection.FAST_FORWARD:
            return 1
        return 0


class PointerSignal(str, Enum):
    """Pointer lifecycle events that all end a hold gesture."""
    RELEASE = "release"
    CANCEL = "cancel"
    LEAVE = "leave"
    LOST_CAPTURE = "lost_capture"


class DoorOutcome(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class PlayOutcome(str, Enum):
    STARTED = "started"
    REJECTED = "rejected"


class Status(str, Enum):
    """Labels shown on the deck's status line."""
    POWER_ON = "Power on"
    POWER_OFF = "Power off"
    READY = "Ready"
    PLAYING = "Playing"
    PAUSED = "Paused"
    TAP_PLAY = "Tap Play"
    PLAY_REJECTED = "Couldn't start audio — tap again"
    LOADING_TAPE = "Loading tape…"
    PLAYLIST_LOAD_FAILED = "Playlist load failed"


@dataclass
class SessionSnapshot:
    """Point-in-time view of the deck, for renderers and the API."""
    power: Power
    mode: Optional[str]
    track_index: int
    track: Optional[Track]
    track_count: int
    playlist_id: str
    playlist_title: str
    door_uri: Optional[str]
    cassette_uri: Optional[str]
    status: str
    controls_enabled: bool
    latched: bool  # play button shows PAUSE
    hold_direction: HoldDirection
    position: float
    duration: Optional[float]
    visual_running: bool
    door_overlay_visible: bool
    fullscreen: bool
    landscape_locked: bool
    accent: str
