"""Tests for media sinks and the audio/visual transport."""
import asyncio

import pytest

from tapedeck.core.media import MediaSink, MediaTransport, PlaybackRejected
from tapedeck.models.session import PlayOutcome
from tapedeck.models.track import Track


def _run(coro):
    return asyncio.run(coro)


class TestMediaSink:
    def test_playhead_follows_clock(self, fake_clock) -> None:
        sink = MediaSink("audio", clock=fake_clock)
        sink.load("a.mp3", duration=60)

        async def run() -> None:
            await sink.play()
            fake_clock.advance(5)
            assert sink.position == pytest.approx(5)
            sink.pause()
            fake_clock.advance(5)
            assert sink.position == pytest.approx(5)
            assert not sink.running

        _run(run())

    def test_play_without_source_is_rejected(self) -> None:
        sink = MediaSink("audio")
        with pytest.raises(PlaybackRejected):
            _run(sink.play())

    def test_blocked_sink_is_rejected(self) -> None:
        sink = MediaSink("audio")
        sink.load("a.mp3")
        sink.blocked = "needs a user gesture"
        with pytest.raises(PlaybackRejected, match="user gesture"):
            _run(sink.play())
        assert not sink.running

    def test_looping_sink_wraps(self, fake_clock) -> None:
        sink = MediaSink("cassette", loop=True, clock=fake_clock)
        sink.load("c.mp4", duration=4)

        async def run() -> None:
            await sink.play()
            fake_clock.advance(9)
            assert sink.position == pytest.approx(1)

        _run(run())

    def test_ends_on_its_own_when_duration_known(self) -> None:
        sink = MediaSink("audio")
        sink.load("a.mp3", duration=0.02)
        ended = []
        sink.on_ended(lambda: ended.append(True))

        async def run() -> None:
            await sink.play()
            await asyncio.sleep(0.1)

        _run(run())
        assert ended == [True]
        assert not sink.running
        assert sink.position == pytest.approx(0.02)

    def test_seek_clamps(self) -> None:
        sink = MediaSink("audio")
        sink.load("a.mp3", duration=30)
        sink.seek(-3)
        assert sink.position == 0.0
        sink.seek(99)
        assert sink.position == 30.0

    def test_load_rewinds_and_stops(self, fake_clock) -> None:
        sink = MediaSink("audio", clock=fake_clock)
        sink.load("a.mp3")

        async def run() -> None:
            await sink.play()
            fake_clock.advance(3)
            sink.load("b.mp3")

        _run(run())
        assert sink.src == "b.mp3"
        assert sink.position == 0.0
        assert not sink.running


class TestMediaTransport:
    def test_seek_by_clamps_to_duration(self) -> None:
        transport = MediaTransport()
        transport.load(Track(title="t", file="t.mp3", duration=100))
        transport.primary.seek(95)
        assert transport.seek_by(10) == 100
        transport.primary.seek(5)
        assert transport.seek_by(-10) == 0

    def test_seek_by_unknown_duration_has_no_upper_bound(self) -> None:
        transport = MediaTransport()
        transport.load(Track(title="t", file="t.mp3"))
        assert transport.seek_by(500) == 500

    def test_play_outcomes(self) -> None:
        transport = MediaTransport()
        transport.load(Track(title="t", file="t.mp3"))

        async def run() -> None:
            transport.primary.blocked = "autoplay"
            assert await transport.play() is PlayOutcome.REJECTED
            transport.primary.blocked = None
            assert await transport.play() is PlayOutcome.STARTED
            assert transport.playing

        _run(run())

    def test_play_that_never_starts_is_rejected(self) -> None:
        class StallingSink(MediaSink):
            async def play(self) -> None:
                await asyncio.sleep(10)

        transport = MediaTransport(primary=StallingSink("audio"), play_timeout=0.05)
        transport.load(Track(title="t", file="t.mp3"))
        assert _run(transport.play()) is PlayOutcome.REJECTED

    def test_visual_slaved_to_primary_and_power(self) -> None:
        transport = MediaTransport()
        transport.load(Track(title="t", file="t.mp3"))
        transport.load_visual("cassette.mp4")

        async def run() -> None:
            await transport.sync_visual(True)
            assert not transport.visual.running
            await transport.play()
            await transport.sync_visual(True)
            assert transport.visual.running
            await transport.sync_visual(False)
            assert not transport.visual.running
            await transport.sync_visual(True)
            transport.pause()
            await transport.sync_visual(True)
            assert not transport.visual.running

        _run(run())

    def test_visual_failure_does_not_touch_audio(self) -> None:
        transport = MediaTransport()
        transport.load(Track(title="t", file="t.mp3"))
        transport.load_visual(None)  # no clip: visual refuses to start

        async def run() -> None:
            await transport.play()
            await transport.sync_visual(True)

        _run(run())
        assert transport.playing
        assert not transport.visual.running

    def test_stop_rewinds(self, fake_clock) -> None:
        transport = MediaTransport(primary=MediaSink("audio", clock=fake_clock))
        transport.load(Track(title="t", file="t.mp3"))

        async def run() -> None:
            await transport.play()
            fake_clock.advance(12)
            transport.stop()

        _run(run())
        assert not transport.playing
        assert transport.position == 0.0
