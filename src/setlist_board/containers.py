"""Dependency container wiring for the application."""

from collections.abc import Callable
from dataclasses import dataclass

from supabase import Client, create_client

from setlist_board.adapters.memory_storage import InMemoryStorage
from setlist_board.adapters.supabase_document_storage import SupabaseDocumentStorage
from setlist_board.adapters.supabase_song_catalog import SupabaseSongCatalog
from setlist_board.adapters.supabase_storage import SupabaseStorage
from setlist_board.config import Settings, parse_song_source, parse_storage_backend
from setlist_board.domain.catalog import SlotCatalog
from setlist_board.services.broadcast import BroadcastRouter
from setlist_board.services.catalog import (
    SongCatalog,
    SongCatalogService,
    StaticSongCatalog,
)
from setlist_board.services.gateway import MutationGateway
from setlist_board.services.registry import SessionRegistry
from setlist_board.services.storage import StoragePort

ClientFactory = Callable[[str, str], Client]


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    slot_catalog: SlotCatalog
    storage: StoragePort
    song_catalog: SongCatalogService
    session_registry: SessionRegistry
    broadcast_router: BroadcastRouter
    mutation_gateway: MutationGateway


def build_container(
    settings: Settings | None = None,
    client_factory: ClientFactory = create_client,
) -> AppContainer:
    """Create the default dependency container.

    The storage backend is chosen here, once, from ``settings.storage_backend``.
    """
    resolved_settings = settings or Settings()
    backend = parse_storage_backend(resolved_settings.storage_backend)
    song_source = parse_song_source(resolved_settings.song_source)
    slot_catalog = SlotCatalog.from_names(resolved_settings.slot_names)

    supabase_client: Client | None = None
    if backend != "memory" or song_source == "supabase":
        supabase_client = _supabase_client(resolved_settings, client_factory)

    storage: StoragePort
    if backend == "supabase":
        storage = SupabaseStorage(
            client=supabase_client,
            catalog=slot_catalog,
            timeout_seconds=resolved_settings.storage_timeout_seconds,
        )
    elif backend == "supabase_documents":
        storage = SupabaseDocumentStorage(
            client=supabase_client,
            catalog=slot_catalog,
            timeout_seconds=resolved_settings.storage_timeout_seconds,
        )
    else:
        storage = InMemoryStorage(catalog=slot_catalog)

    songs: SongCatalog
    if song_source == "supabase":
        songs = SupabaseSongCatalog(
            client=supabase_client,
            timeout_seconds=resolved_settings.storage_timeout_seconds,
        )
    else:
        songs = StaticSongCatalog()

    session_registry = SessionRegistry(storage=storage, catalog=slot_catalog)
    broadcast_router = BroadcastRouter()
    mutation_gateway = MutationGateway(
        registry=session_registry,
        router=broadcast_router,
        catalog=slot_catalog,
    )

    return AppContainer(
        settings=resolved_settings,
        slot_catalog=slot_catalog,
        storage=storage,
        song_catalog=SongCatalogService(
            catalog=songs, ttl_seconds=resolved_settings.song_cache_ttl_seconds
        ),
        session_registry=session_registry,
        broadcast_router=broadcast_router,
        mutation_gateway=mutation_gateway,
    )


def _supabase_client(settings: Settings, client_factory: ClientFactory) -> Client:
    if not settings.supabase_url or not settings.supabase_service_key:
        raise ValueError(
            "SUPABASE_URL and SUPABASE_SERVICE_KEY are required for Supabase storage"
        )
    return client_factory(settings.supabase_url, settings.supabase_service_key)
