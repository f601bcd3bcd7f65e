"""Core services: media transport, door clip, hold timer, playback session."""
from tapedeck.core.door import DoorSequencer
from tapedeck.core.media import MediaSink, MediaTransport
from tapedeck.core.session import PlaybackSession

__all__ = ["DoorSequencer", "MediaSink", "MediaTransport", "PlaybackSession"]
