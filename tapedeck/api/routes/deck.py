"""Deck snapshot and power switch."""
from fastapi import APIRouter, Depends

from tapedeck.api.state import AppState, get_state
from tapedeck.models.session import SessionSnapshot
from tapedeck.models.track import Track


def track_to_dict(t: Track) -> dict:
    return {
        "title": t.title,
        "file": t.file,
        "accent": t.accent,
        "duration": t.duration,
    }


def snapshot_to_dict(s: SessionSnapshot) -> dict:
    return {
        "power": s.power.value,
        "mode": s.mode,
        "track_index": s.track_index,
        "track": track_to_dict(s.track) if s.track else None,
        "track_count": s.track_count,
        "playlist_id": s.playlist_id,
        "playlist_title": s.playlist_title,
        "door_uri": s.door_uri,
        "cassette_uri": s.cassette_uri,
        "status": s.status,
        "controls_enabled": s.controls_enabled,
        "latched": s.latched,
        "hold_direction": s.hold_direction.value,
        "position": s.position,
        "duration": s.duration,
        "visual_running": s.visual_running,
        "door_overlay_visible": s.door_overlay_visible,
        "fullscreen": s.fullscreen,
        "landscape_locked": s.landscape_locked,
        "accent": s.accent,
    }


router = APIRouter()


@router.get("")
def get_deck(state: AppState = Depends(get_state)):
    """Return the current deck snapshot."""
    return snapshot_to_dict(state.session.snapshot())


@router.post("/power")
async def power_toggle(state: AppState = Depends(get_state)):
    """Flip the power switch."""
    await state.session.power_toggle()
    return snapshot_to_dict(state.session.snapshot())


@router.post("/power/off")
async def power_off(state: AppState = Depends(get_state)):
    """Force the deck off from any state."""
    await state.session.power_off()
    return snapshot_to_dict(state.session.snapshot())


@router.post("/refresh")
async def refresh(state: AppState = Depends(get_state)):
    """Resync the cassette visual with the audio and return the snapshot."""
    await state.session.refresh()
    return snapshot_to_dict(state.session.snapshot())
