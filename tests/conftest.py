"""Shared test fixtures."""

import copy
import threading
from dataclasses import dataclass, field

import pytest

from setlist_board.adapters.memory_storage import InMemoryStorage
from setlist_board.adapters.supabase_document_storage import SupabaseDocumentStorage
from setlist_board.adapters.supabase_storage import SupabaseStorage
from setlist_board.config import Settings
from setlist_board.containers import AppContainer, build_container
from setlist_board.domain.catalog import SlotCatalog
from setlist_board.domain.errors import StorageError
from setlist_board.domain.sessions import SessionSnapshot
from setlist_board.services.broadcast import BroadcastRouter, ObserverChannel
from setlist_board.services.gateway import MutationGateway
from setlist_board.services.registry import SessionRegistry
from setlist_board.services.storage import StoragePort


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeQuery:
    """Minimal PostgREST query builder evaluated against in-memory rows."""

    store: "FakeSupabaseClient"
    name: str
    _action: str = "select"
    _columns: list[str] | None = None
    _payload: object | None = None
    _on_conflict: list[str] = field(default_factory=list)
    _ignore_duplicates: bool = False
    _filters: list[tuple[str, str, object]] = field(default_factory=list)
    _limit: int | None = None

    def select(self, columns: str = "*") -> "FakeQuery":
        self._action = "select"
        self._columns = (
            None
            if columns.strip() == "*"
            else [c.strip() for c in columns.split(",")]
        )
        return self

    def insert(self, payload) -> "FakeQuery":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self._payload = payload
        return self

    def upsert(  # type: ignore[no-untyped-def]
        self, payload, on_conflict: str = "", ignore_duplicates: bool = False
    ) -> "FakeQuery":
        self._action = "upsert"
        self._payload = payload
        self._on_conflict = [c.strip() for c in on_conflict.split(",") if c.strip()]
        self._ignore_duplicates = ignore_duplicates
        return self

    def update(self, payload) -> "FakeQuery":  # type: ignore[no-untyped-def]
        self._action = "update"
        self._payload = payload
        return self

    def delete(self) -> "FakeQuery":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeQuery":  # type: ignore[no-untyped-def]
        self._filters.append(("eq", column, value))
        return self

    def is_(self, column: str, value) -> "FakeQuery":  # type: ignore[no-untyped-def]
        self._filters.append(("is", column, value))
        return self

    def limit(self, count: int) -> "FakeQuery":
        self._limit = count
        return self

    def execute(self) -> FakeResponse:
        with self.store.lock:
            self.store.calls.append((self.name, self._action))
            if self.name in self.store.failing_tables:
                raise RuntimeError(f"connection refused: {self.name}")
            hook = self.store.before_execute.get((self.name, self._action))
            if hook is not None:
                hook(self)
            rows = self.store.rows.setdefault(self.name, [])
            return FakeResponse(data=copy.deepcopy(self._run(rows)))

    def _matches(self, row: dict[str, object]) -> bool:
        for kind, column, value in self._filters:
            if kind == "eq" and row.get(column) != value:
                return False
            if kind == "is" and value == "null" and row.get(column) is not None:
                return False
        return True

    def _run(self, rows: list[dict[str, object]]) -> list[dict[str, object]]:
        if self._action == "select":
            matched = [row for row in rows if self._matches(row)]
            if self._limit is not None:
                matched = matched[: self._limit]
            if self._columns is None:
                return matched
            return [{c: row.get(c) for c in self._columns} for row in matched]
        if self._action == "insert":
            payloads = (
                self._payload if isinstance(self._payload, list) else [self._payload]
            )
            created = [copy.deepcopy(dict(p)) for p in payloads]
            rows.extend(created)
            return created
        if self._action == "upsert":
            payloads = (
                self._payload if isinstance(self._payload, list) else [self._payload]
            )
            affected = []
            for payload in payloads:
                keys = self._on_conflict or ["id"]
                existing = next(
                    (
                        row
                        for row in rows
                        if all(row.get(k) == payload.get(k) for k in keys)
                    ),
                    None,
                )
                if existing is None:
                    created = copy.deepcopy(dict(payload))
                    rows.append(created)
                    affected.append(created)
                elif not self._ignore_duplicates:
                    existing.update(copy.deepcopy(dict(payload)))
                    affected.append(existing)
            return affected
        if self._action == "update":
            matched = [row for row in rows if self._matches(row)]
            for row in matched:
                row.update(copy.deepcopy(dict(self._payload)))
            return matched
        matched = [row for row in rows if self._matches(row)]
        for row in matched:
            rows.remove(row)
        return matched


@dataclass
class FakeSupabaseClient:
    """In-memory stand-in for the Supabase client used by the adapters."""

    rows: dict[str, list[dict[str, object]]] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)
    failing_tables: set[str] = field(default_factory=set)
    before_execute: dict[tuple[str, str], object] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(store=self, name=name)


@dataclass
class RecordingChannel(ObserverChannel):
    """Observer channel that records every event it receives."""

    events: list[dict[str, object]] = field(default_factory=list)

    async def send(self, event: dict[str, object]) -> None:
        self.events.append(event)

    def of_type(self, kind: str) -> list[dict[str, object]]:
        return [event for event in self.events if event["type"] == kind]


@dataclass
class BrokenChannel(ObserverChannel):
    """Observer channel whose connection has gone away."""

    async def send(self, event: dict[str, object]) -> None:
        raise ConnectionResetError("socket closed")


@dataclass
class FailingStorage(InMemoryStorage):
    """Memory storage that fails selected operations."""

    failing: set[str] = field(default_factory=set)

    def _maybe_fail(self, action: str) -> None:
        if action in self.failing:
            raise StorageError(
                f"Storage failed during {action}", cause=RuntimeError("down")
            )

    async def upsert_pick(
        self, session_id: str, participant: str, slot: str, value: str
    ) -> None:
        self._maybe_fail("upsert_pick")
        await super().upsert_pick(session_id, participant, slot, value)

    async def read_state(self, session_id: str) -> SessionSnapshot:
        self._maybe_fail("read_state")
        return await super().read_state(session_id)

    async def clear_session(self, session_id: str) -> None:
        self._maybe_fail("clear_session")
        await super().clear_session(session_id)


def make_storage(kind: str, catalog: SlotCatalog) -> StoragePort:
    if kind == "memory":
        return InMemoryStorage(catalog=catalog)
    if kind == "supabase":
        return SupabaseStorage(client=FakeSupabaseClient(), catalog=catalog)
    return SupabaseDocumentStorage(client=FakeSupabaseClient(), catalog=catalog)


STORAGE_KINDS = ["memory", "supabase", "supabase_documents"]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        storage_backend="memory",
        admin_token="admin-token",
        song_source="static",
    )


@pytest.fixture
def slot_catalog() -> SlotCatalog:
    return SlotCatalog()


@pytest.fixture(params=STORAGE_KINDS)
def storage(request, slot_catalog: SlotCatalog) -> StoragePort:
    return make_storage(request.param, slot_catalog)


@pytest.fixture
def memory_storage(slot_catalog: SlotCatalog) -> InMemoryStorage:
    return InMemoryStorage(catalog=slot_catalog)


@pytest.fixture
def router() -> BroadcastRouter:
    return BroadcastRouter()


@pytest.fixture
def gateway(
    memory_storage: InMemoryStorage,
    slot_catalog: SlotCatalog,
    router: BroadcastRouter,
) -> MutationGateway:
    registry = SessionRegistry(storage=memory_storage, catalog=slot_catalog)
    return MutationGateway(registry=registry, router=router, catalog=slot_catalog)


@pytest.fixture
def container(settings: Settings) -> AppContainer:
    return build_container(settings)
