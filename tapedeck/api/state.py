"""Shared application state (injected into routes)."""
from pathlib import Path

from tapedeck.config import DEFAULT_PLAYLIST, PLAYLISTS_DIR
from tapedeck.core.playlist_store import list_playlists
from tapedeck.core.session import PlaybackSession
from tapedeck.models.track import Playlist


class AppState:
    def __init__(
        self,
        session: PlaybackSession | None = None,
        *,
        playlists_dir: Path = PLAYLISTS_DIR,
        default_playlist: str = DEFAULT_PLAYLIST,
    ) -> None:
        self.session = session or PlaybackSession()
        self.playlists_dir = playlists_dir
        self.default_playlist = default_playlist

    def list_playlists(self) -> list[str]:
        return list_playlists(self.playlists_dir)

    async def load_playlist(self, playlist_id: str) -> Playlist:
        return await self.session.load_manifest(playlist_id, self.playlists_dir)


_state = AppState()


def get_state() -> AppState:
    return _state
