"""Entry: start the deck API server."""
import logging
import uvicorn

from tapedeck.config import API_HOST, API_PORT

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    uvicorn.run(
        "tapedeck.api.app:app",
        host=API_HOST,
        port=API_PORT,
        reload=True,
    )
