"""Data models for tracks, playlists and deck state."""
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

__all__ = [
    "DeckState",
    "DoorOutcome",
    "EMPTY_PLAYLIST",
    "HoldDirection",
    "PlayOutcome",
    "Playlist",
    "PointerSignal",
    "Power",
    "SessionSnapshot",
    "Status",
    "Track",
]
