"""Notifications from the renderer: audio ended, audio duration, door clip ended."""
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from tapedeck.api.routes.deck import snapshot_to_dict
from tapedeck.api.state import AppState, get_state

router = APIRouter()


class DurationBody(BaseModel):
    duration: float = Field(gt=0)


@router.post("/audio/ended")
async def audio_ended(state: AppState = Depends(get_state)):
    """The audible track reached its end; auto-advance runs before we answer.

    Ignored unless the deck is playing, so a late or duplicate report leaves
    the playhead alone.
    """
    await state.session.audio_ended()
    await state.session.settle()
    return snapshot_to_dict(state.session.snapshot())


@router.post("/audio/duration")
async def audio_duration(body: DurationBody, state: AppState = Depends(get_state)):
    """Duration read from the media metadata; bounds seeking and end detection."""
    state.session.transport.primary.set_duration(body.duration)
    return {"ok": True, "duration": state.session.transport.duration}


@router.post("/door/ended")
async def door_ended(state: AppState = Depends(get_state)):
    """The door clip finished playing."""
    state.session.door.notify_finished()
    return {"ok": True}
