"""Track and playlist as loaded from a manifest."""
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Track:
    """One entry of a tape: title, media file and optional accent colour."""
    title: str
    file: str
    accent: Optional[str] = None
    duration: Optional[float] = None  # seconds, when the manifest knows it


@dataclass(frozen=True)
class Playlist:
    """Ordered tracks for the session plus the door and cassette clips."""
    playlist_id: str
    title: str
    tracks: Tuple[Track, ...] = ()
    door: Optional[str] = None
    cassette: Optional[str] = None

    def __len__(self) -> int:
        return len(self.tracks)

    def __bool__(self) -> bool:
        return bool(self.tracks)

    def __getitem__(self, index: int) -> Track:
        return self.tracks[index]


EMPTY_PLAYLIST = Playlist(playlist_id="", title="—")
