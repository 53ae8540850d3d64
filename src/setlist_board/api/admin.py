"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from setlist_board.domain.errors import StorageError, UnsupportedOperationError

if TYPE_CHECKING:
    from setlist_board.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str | None:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str | None = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not admin_token or not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/dbcheck", dependencies=[Depends(require_admin)])
async def dbcheck(request: Request) -> dict[str, str]:
    """Probe the configured storage backend."""
    container: AppContainer = request.app.state.container
    try:
        await container.storage.ping()
    except StorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Storage unavailable: {exc.message}",
        ) from exc
    return {"status": "ok", "backend": container.settings.storage_backend}


@router.get("/sessions", dependencies=[Depends(require_admin)])
async def live_sessions(request: Request) -> dict[str, object]:
    """Return live sessions with cached owner and participant counts."""
    container: AppContainer = request.app.state.container
    registry = container.session_registry
    sessions = []
    for session_id in registry.session_ids():
        aggregate = registry.get_or_create(session_id)
        snapshot = aggregate.snapshot
        sessions.append(
            {
                "id": session_id,
                "owner": snapshot.owner,
                "participants": len(snapshot.participants),
                "subscribers": container.broadcast_router.subscriber_count(
                    session_id
                ),
            }
        )
    return {"sessions": sessions}


@router.post("/songs/seed", dependencies=[Depends(require_admin)])
async def seed_songs(request: Request) -> dict[str, int]:
    """Seed the default song list into the configured catalog."""
    container: AppContainer = request.app.state.container
    try:
        count = await container.song_catalog.seed_defaults()
    except UnsupportedOperationError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=exc.message
        ) from exc
    except StorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.message
        ) from exc
    return {"seeded": count}
