"""Shared fixtures: deck factories with short timings."""
import asyncio
import json
import time

import pytest

from tapedeck.core.display import DisplayControl
from tapedeck.core.door import DoorSequencer
from tapedeck.core.media import MediaSink, MediaTransport
from tapedeck.core.session import PlaybackSession
from tapedeck.models.track import Playlist, Track


class FakeClock:
    """Manually advanced monotonic clock for sink playheads."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def build_playlist(n: int = 3, *, duration=None) -> Playlist:
    return Playlist(
        playlist_id="test",
        title="Test Tape",
        tracks=tuple(
            Track(title=f"Track {i + 1}", file=f"t{i + 1}.mp3", duration=duration)
            for i in range(n)
        ),
        door="door.mp4",
        cassette="cassette.mp4",
    )


def build_session(
    *,
    clock=time.monotonic,
    door_duration: float = 0.01,
    door_timeout: float = 1.0,
    display_enabled: bool = True,
    hold_interval_ms: float = 20,
) -> PlaybackSession:
    transport = MediaTransport(
        primary=MediaSink("audio", clock=clock),
        visual=MediaSink("cassette", loop=True, clock=clock),
        play_timeout=0.5,
    )
    door = DoorSequencer(
        failure_grace=0.01,
        timeout=door_timeout,
        clip_duration=door_duration,
    )
    return PlaybackSession(
        transport=transport,
        door=door,
        display=DisplayControl(enabled=display_enabled),
        hold_interval_ms=hold_interval_ms,
    )


async def wait_until(predicate, timeout: float = 1.0) -> None:
    """Yield to the loop until predicate() is true."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def playlist() -> Playlist:
    return build_playlist()


@pytest.fixture
def make_session():
    return build_session


@pytest.fixture
def playlists_dir(tmp_path):
    """Directory with a valid 'volume1' manifest."""
    manifest = {
        "title": "Volume 1",
        "door": "media/door.mp4",
        "cassette": "media/cassette.mp4",
        "tracks": [
            {"title": "One", "file": "a/1.mp3", "accent": "#ff0000"},
            {"title": "Two", "file": "a/2.mp3"},
            {"title": "Three", "file": "a/3.mp3", "duration": 200},
        ],
    }
    (tmp_path / "volume1.json").write_text(json.dumps(manifest))
    return tmp_path
