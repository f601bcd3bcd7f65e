"""Load playlist manifests (JSON): title, door/cassette clips and tracks."""
import json
import logging
import re
from pathlib import Path
from typing import List, Optional

from tapedeck.config import PLAYLISTS_DIR
from tapedeck.models.track import Playlist, Track

logger = logging.getLogger(__name__)

_PLAYLIST_ID_REGEX = re.compile(r"^[a-z0-9_-]+$")


class PlaylistLoadError(Exception):
    """Manifest missing, unreadable or malformed."""

    def __init__(self, playlist_id: str, reason: str, *, missing: bool = False) -> None:
        super().__init__(f"Could not load playlist {playlist_id!r}: {reason}")
        self.playlist_id = playlist_id
        self.reason = reason
        self.missing = missing


def normalize_playlist_id(playlist_id: Optional[str], default: str) -> str:
    """Lower-case id from the launch context, falling back to default when blank."""
    return (playlist_id or "").strip().lower() or default


def _path(playlist_id: str, playlists_dir: Path) -> Path:
    if not _PLAYLIST_ID_REGEX.match(playlist_id):
        raise PlaylistLoadError(playlist_id, "invalid playlist id", missing=True)
    return playlists_dir / f"{playlist_id}.json"


def _parse_track(item) -> Optional[Track]:
    """Return a Track or None for entries without a usable file."""
    if not isinstance(item, dict):
        return None
    file = item.get("file")
    if not isinstance(file, str) or not file:
        return None
    duration = item.get("duration")
    try:
        duration = float(duration) if duration is not None else None
    except (TypeError, ValueError):
        duration = None
    if duration is not None and duration <= 0:
        duration = None
    return Track(
        title=str(item.get("title") or "—"),
        file=file,
        accent=item.get("accent") or None,
        duration=duration,
    )


def load_playlist(playlist_id: str, playlists_dir: Path = PLAYLISTS_DIR) -> Playlist:
    """Read <playlists_dir>/<playlist_id>.json into a Playlist."""
    p = _path(playlist_id, playlists_dir)
    if not p.exists():
        raise PlaylistLoadError(playlist_id, f"{p.name} not found", missing=True)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        raise PlaylistLoadError(playlist_id, str(e)) from e
    if not isinstance(data, dict):
        raise PlaylistLoadError(playlist_id, "manifest is not an object")

    raw_tracks = data.get("tracks")
    tracks: List[Track] = []
    if isinstance(raw_tracks, list):
        for item in raw_tracks:
            track = _parse_track(item)
            if track is None:
                logger.debug("Playlist %s: skipping malformed track %r", playlist_id, item)
                continue
            tracks.append(track)

    playlist = Playlist(
        playlist_id=playlist_id,
        title=str(data.get("title") or playlist_id),
        tracks=tuple(tracks),
        door=data.get("door") or None,
        cassette=data.get("cassette") or None,
    )
    logger.info("Loaded playlist %s (%d tracks)", playlist_id, len(playlist))
    return playlist


def list_playlists(playlists_dir: Path = PLAYLISTS_DIR) -> List[str]:
    """Return ids of the manifests available in playlists_dir."""
    if not playlists_dir.is_dir():
        return []
    return sorted(
        p.stem
        for p in playlists_dir.glob("*.json")
        if _PLAYLIST_ID_REGEX.match(p.stem)
    )
