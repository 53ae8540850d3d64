"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status

from setlist_board.api.admin import router as admin_router
from setlist_board.api.socket import router as socket_router
from setlist_board.app_logging import configure_logging
from setlist_board.config import preset_listings
from setlist_board.containers import AppContainer
from setlist_board.domain.errors import StorageError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Session board starting with storage backend=%s",
            app.state.container.settings.storage_backend,
        )
        yield
        logger.info("Session board shutting down")

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)
    app.include_router(socket_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/sessions")
    async def list_sessions(request: Request) -> list[dict[str, str]]:
        """Return the preset sessions shown on the index page."""
        state_container: AppContainer = request.app.state.container
        return [
            {"id": listing.id, "title": listing.title}
            for listing in preset_listings(state_container.settings)
        ]

    @app.get("/slots")
    async def list_slots(request: Request) -> dict[str, list[str]]:
        """Return the slot names in display order."""
        state_container: AppContainer = request.app.state.container
        return {"slots": list(state_container.slot_catalog.slots)}

    @app.get("/songs")
    async def list_songs(request: Request) -> dict[str, list[str]]:
        """Return the song catalog."""
        state_container: AppContainer = request.app.state.container
        try:
            songs = await state_container.song_catalog.list_songs()
        except StorageError as exc:
            logger.warning("Song catalog unavailable: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Song catalog unavailable",
            ) from exc
        return {"songs": songs}

    return app
