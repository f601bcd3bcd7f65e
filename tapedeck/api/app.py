"""FastAPI app, CORS, and route registration."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Configure logging in the worker process (so session transitions are visible with uvicorn --reload)
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(name)s: %(message)s",
)

from tapedeck.api.state import AppState, get_state
from tapedeck.core.playlist_store import PlaylistLoadError

# Import routes after state to avoid circular imports
from tapedeck.api.routes import deck, media, playlists, transport

__all__ = ["app", "AppState", "get_state"]

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    state = get_state()
    try:
        await state.load_playlist(state.default_playlist)
    except PlaylistLoadError:
        # Session is already reset to OFF with "Playlist load failed" on the status line
        logger.warning("Startup: no playlist loaded (%s)", state.default_playlist)

    yield

    await state.session.power_off()


app = FastAPI(
    title="tapedeck API",
    description="Local REST API for the cassette deck control surface",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(deck.router, prefix="/api/deck", tags=["deck"])
app.include_router(transport.router, prefix="/api/transport", tags=["transport"])
app.include_router(playlists.router, prefix="/api/playlists", tags=["playlists"])
app.include_router(media.router, prefix="/api/media", tags=["media"])
