"""Playlist manifests: list available ids, show the loaded tape, load another."""
from fastapi import APIRouter, Depends, HTTPException

from tapedeck.api.routes.deck import snapshot_to_dict, track_to_dict
from tapedeck.api.state import AppState, get_state
from tapedeck.core.playlist_store import PlaylistLoadError, normalize_playlist_id

router = APIRouter()


@router.get("/")
def list_playlists(state: AppState = Depends(get_state)):
    """List playlist ids found in the playlists directory."""
    return {
        "playlists": state.list_playlists(),
        "default": state.default_playlist,
        "current": state.session.playlist.playlist_id or None,
    }


@router.get("/current")
def get_current(state: AppState = Depends(get_state)):
    """Return the loaded playlist and its tracks."""
    p = state.session.playlist
    return {
        "playlist_id": p.playlist_id or None,
        "title": p.title,
        "door": p.door,
        "cassette": p.cassette,
        "tracks": [track_to_dict(t) for t in p.tracks],
    }


@router.post("/{playlist_id}/load")
async def load_playlist(playlist_id: str, state: AppState = Depends(get_state)):
    """Replace the session playlist; playback stops and returns to track 1."""
    playlist_id = normalize_playlist_id(playlist_id, state.default_playlist)
    try:
        await state.load_playlist(playlist_id)
    except PlaylistLoadError as e:
        raise HTTPException(status_code=404 if e.missing else 422, detail=str(e))
    return snapshot_to_dict(state.session.snapshot())
