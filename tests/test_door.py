"""Tests for the door sequencer."""
import asyncio

from tapedeck.core.door import DoorSequencer
from tapedeck.models.session import DoorOutcome


def _run(coro):
    return asyncio.run(coro)


def test_completes_when_clip_ends() -> None:
    door = DoorSequencer(clip_duration=0.02, timeout=1.0)
    door.load("door.mp4")
    assert _run(door.run()) is DoorOutcome.COMPLETED
    assert not door.overlay_visible
    assert not door.running


def test_completes_on_renderer_notification() -> None:
    door = DoorSequencer(clip_duration=0, timeout=1.0)
    door.load("door.mp4")

    async def run() -> DoorOutcome:
        task = asyncio.create_task(door.run())
        await asyncio.sleep(0.02)
        assert door.overlay_visible
        door.notify_finished()
        return await task

    assert _run(run()) is DoorOutcome.COMPLETED
    assert not door.overlay_visible


def test_start_failure_reports_failed_after_grace() -> None:
    door = DoorSequencer(failure_grace=0.05, timeout=1.0)
    door.load("door.mp4")
    door.sink.blocked = "autoplay"

    async def run():
        loop = asyncio.get_running_loop()
        started = loop.time()
        outcome = await door.run()
        return outcome, loop.time() - started

    outcome, elapsed = _run(run())
    assert outcome is DoorOutcome.FAILED
    assert elapsed >= 0.04
    assert not door.overlay_visible


def test_missing_clip_fails() -> None:
    door = DoorSequencer(failure_grace=0.01)
    assert _run(door.run()) is DoorOutcome.FAILED


def test_no_finished_signal_times_out() -> None:
    door = DoorSequencer(clip_duration=0, timeout=0.05)
    door.load("door.mp4")
    assert _run(door.run()) is DoorOutcome.FAILED
    assert not door.sink.running
    assert not door.overlay_visible


def test_cancel_clears_overlay() -> None:
    door = DoorSequencer(clip_duration=0, timeout=5.0)
    door.load("door.mp4")

    async def run() -> None:
        task = asyncio.create_task(door.run())
        await asyncio.sleep(0.02)
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        door.abort()

    _run(run())
    assert not door.overlay_visible
    assert not door.sink.running


def test_begin_raises_overlay_before_run() -> None:
    door = DoorSequencer(clip_duration=0.02, timeout=1.0)
    door.load("door.mp4")
    door.begin()
    assert door.overlay_visible
    assert door.running
    assert _run(door.run()) is DoorOutcome.COMPLETED
    assert not door.overlay_visible


def test_cancelled_run_leaves_next_run_alone() -> None:
    door = DoorSequencer(clip_duration=0.05, timeout=1.0)
    door.load("door.mp4")

    async def run():
        first = asyncio.create_task(door.run())
        await asyncio.sleep(0.01)
        first.cancel()
        door.abort()
        door.begin()
        second = asyncio.create_task(door.run())
        try:
            await first
        except asyncio.CancelledError:
            pass
        visible_after_unwind = door.overlay_visible
        return visible_after_unwind, await asyncio.wait_for(second, timeout=0.5)

    visible_after_unwind, outcome = _run(run())
    assert visible_after_unwind
    assert outcome is DoorOutcome.COMPLETED
    assert not door.overlay_visible


def test_notify_without_run_is_ignored() -> None:
    door = DoorSequencer()
    door.notify_finished()
    assert not door.running
