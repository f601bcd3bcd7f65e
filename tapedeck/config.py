"""Configuration: env, playlist location, transport timings."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Base paths (project root = parent of tapedeck package)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env from project root so TAPEDECK_* overrides are set
load_dotenv(BASE_DIR / ".env")

# API
API_HOST = os.getenv("TAPEDECK_API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("TAPEDECK_API_PORT", "8000"))

# Playlists: <PLAYLISTS_DIR>/<id>.json, id taken from the launch context
PLAYLISTS_DIR = Path(os.getenv("TAPEDECK_PLAYLISTS_DIR", str(BASE_DIR / "playlists")))
DEFAULT_PLAYLIST = os.getenv("TAPEDECK_PLAYLIST", "volume1").lower()

# Rewind / fast-forward
TAP_JUMP_SECONDS = 10.0
HOLD_STEP_SECONDS = 1.5
HOLD_INTERVAL_MS = 140

# Door animation
DOOR_FAILURE_GRACE_SEC = 0.3
# Length of the door clip when nothing reports it (simulated sink); 0 = wait for notification
DOOR_DURATION_SEC = float(os.getenv("TAPEDECK_DOOR_DURATION_SEC", "2.5"))
DOOR_TIMEOUT_SEC = float(os.getenv("TAPEDECK_DOOR_TIMEOUT_SEC", "15"))

# A play request that neither starts nor fails within this window counts as rejected
PLAY_START_TIMEOUT_SEC = float(os.getenv("TAPEDECK_PLAY_TIMEOUT_SEC", "5"))

DEFAULT_ACCENT = "rgba(255,80,80,0.9)"

# Forward fullscreen / orientation requests to the renderer; off = every request fails (ignored)
DISPLAY_CONTROL = os.getenv("TAPEDECK_DISPLAY_CONTROL", "1").lower() in ("1", "true", "yes")
