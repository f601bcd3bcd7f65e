"""Transport buttons: play/pause, track skip, rewind and fast-forward."""
from typing import Literal, Optional

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel

from tapedeck.api.routes.deck import snapshot_to_dict
from tapedeck.api.state import AppState, get_state
from tapedeck.models.session import HoldDirection, PointerSignal

router = APIRouter()


class HoldBody(BaseModel):
    direction: Literal["rewind", "fast_forward"]


class ReleaseBody(BaseModel):
    signal: Literal["release", "cancel", "leave", "lost_capture"] = "release"


@router.post("/play-pause")
async def play_pause(state: AppState = Depends(get_state)):
    await state.session.play_pause()
    return snapshot_to_dict(state.session.snapshot())


@router.post("/next")
async def next_track(state: AppState = Depends(get_state)):
    await state.session.next_track()
    return snapshot_to_dict(state.session.snapshot())


@router.post("/prev")
async def prev_track(state: AppState = Depends(get_state)):
    await state.session.prev_track()
    return snapshot_to_dict(state.session.snapshot())


@router.post("/rewind")
async def rewind_tap(state: AppState = Depends(get_state)):
    """Tap: jump back a fixed offset."""
    ok = state.session.rewind_tap()
    return {"ok": ok, "position": state.session.transport.position}


@router.post("/fast-forward")
async def fast_forward_tap(state: AppState = Depends(get_state)):
    """Tap: jump ahead a fixed offset."""
    ok = state.session.fast_forward_tap()
    return {"ok": ok, "position": state.session.transport.position}


@router.post("/hold")
async def hold_start(body: HoldBody, state: AppState = Depends(get_state)):
    """Press-and-hold on rewind or fast-forward; seeks until released."""
    ok = state.session.start_hold(HoldDirection(body.direction))
    return {"ok": ok, "hold_direction": state.session.hold_direction.value}


@router.post("/hold/release")
async def hold_release(
    body: Optional[ReleaseBody] = Body(None),
    state: AppState = Depends(get_state),
):
    """Pointer up, cancel, leave or lost capture: all stop the hold."""
    signal = PointerSignal(body.signal if body else "release")
    state.session.pointer_signal(signal)
    return {"ok": True, "position": state.session.transport.position}
