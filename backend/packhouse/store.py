"""Record Store: the single owner of every persisted collection.

The store is loaded once at process start and hands out immutable
``StoreSnapshot`` objects. Mutations build a new tuple, flush it through the
key-value collaborator and only then swap the snapshot, so readers never see
a half-applied change.
"""
from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Any, Callable, Iterable
from uuid import uuid4

from pydantic import BaseModel, ValidationError

from .persistence import (
    MASTER_DATA_KEY,
    PRESTATION_ETUVAGE_KEY,
    PRESTATION_PROD_KEY,
    PRODUCTION_KEY,
    PURCHASES_KEY,
    STOCK_OUTS_KEY,
    USERS_KEY,
    KeyValueStore,
    SqlKeyValueStore,
)
from .schemas import (
    DEFAULT_MASTER_DATA,
    RECORD_MODELS,
    MasterData,
    MasterDataCategory,
    PrestationEtuvageRecord,
    PrestationProdRecord,
    ProductionRecord,
    PurchaseRecord,
    RecordKind,
    StockOutRecord,
    StoredRecord,
    User,
)

logger = logging.getLogger(__name__)


RECORD_STORAGE_KEYS: dict[RecordKind, str] = {
    RecordKind.PRODUCTION: PRODUCTION_KEY,
    RecordKind.PURCHASE: PURCHASES_KEY,
    RecordKind.STOCK_OUT: STOCK_OUTS_KEY,
    RecordKind.PRESTATION_PROD: PRESTATION_PROD_KEY,
    RecordKind.PRESTATION_ETUVAGE: PRESTATION_ETUVAGE_KEY,
}

SNAPSHOT_FIELDS: dict[RecordKind, str] = {
    RecordKind.PRODUCTION: "production",
    RecordKind.PURCHASE: "purchases",
    RecordKind.STOCK_OUT: "stock_outs",
    RecordKind.PRESTATION_PROD: "prestations_prod",
    RecordKind.PRESTATION_ETUVAGE: "prestations_etuvage",
}

# Stamped at creation, never changed by an update.
_IMMUTABLE_FIELDS = frozenset({"id", "timestamp", "user_id", "user_name"})


@dataclass(frozen=True)
class StoreSnapshot:
    production: tuple[ProductionRecord, ...] = ()
    purchases: tuple[PurchaseRecord, ...] = ()
    stock_outs: tuple[StockOutRecord, ...] = ()
    prestations_prod: tuple[PrestationProdRecord, ...] = ()
    prestations_etuvage: tuple[PrestationEtuvageRecord, ...] = ()
    master_data: MasterData = DEFAULT_MASTER_DATA
    users: tuple[User, ...] = ()

    def records(self, kind: RecordKind) -> tuple[StoredRecord, ...]:
        return getattr(self, SNAPSHOT_FIELDS[kind])


def now_ms() -> int:
    return int(time.time() * 1000)


def new_id() -> str:
    return uuid4().hex


def _dedupe(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


def parse_collection(raw: Any, model: type[BaseModel], *, key: str) -> tuple:
    """Parse a persisted list, skipping entries that no longer validate.

    ``raw`` is either JSON text or an already-decoded value.
    """
    if raw is None:
        return ()
    items = raw
    if isinstance(raw, str):
        try:
            items = json.loads(raw)
        except ValueError:
            logger.warning("Malformed JSON under key=%s; loading empty collection", key)
            return ()
    if not isinstance(items, list):
        logger.warning("Unexpected payload under key=%s; loading empty collection", key)
        return ()

    parsed = []
    for index, item in enumerate(items):
        try:
            parsed.append(model.model_validate(item))
        except ValidationError:
            logger.warning("Skipping invalid %s entry key=%s index=%s", model.__name__, key, index)
    return tuple(parsed)


def parse_master_data(raw: Any) -> MasterData:
    if raw is None:
        return DEFAULT_MASTER_DATA
    data = raw
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Malformed master data; using defaults")
            return DEFAULT_MASTER_DATA
    try:
        master = MasterData.model_validate(data)
    except ValidationError:
        logger.warning("Invalid master data; using defaults")
        return DEFAULT_MASTER_DATA
    return MasterData(**{name: _dedupe(getattr(master, name)) for name in MasterData.model_fields})


def _encode(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False)


def dump_collection(items: Iterable[BaseModel]) -> list[dict[str, Any]]:
    return [item.model_dump(mode="json", by_alias=True) for item in items]


class RecordStore:
    """In-memory collections with write-through persistence."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv
        self._lock = threading.RLock()
        self._snapshot = StoreSnapshot()

    def load(self) -> StoreSnapshot:
        with self._lock:
            collections = {
                SNAPSHOT_FIELDS[kind]: parse_collection(self._kv.get(key), RECORD_MODELS[kind], key=key)
                for kind, key in RECORD_STORAGE_KEYS.items()
            }
            self._snapshot = StoreSnapshot(
                **collections,
                master_data=parse_master_data(self._kv.get(MASTER_DATA_KEY)),
                users=parse_collection(self._kv.get(USERS_KEY), User, key=USERS_KEY),
            )
            logger.info(
                "store.load production=%s purchases=%s stock_outs=%s users=%s",
                len(self._snapshot.production),
                len(self._snapshot.purchases),
                len(self._snapshot.stock_outs),
                len(self._snapshot.users),
            )
            return self._snapshot

    def snapshot(self) -> StoreSnapshot:
        return self._snapshot

    # Ledger records
    def list_records(self, kind: RecordKind) -> tuple[StoredRecord, ...]:
        return self._snapshot.records(kind)

    def get_record(self, kind: RecordKind, record_id: str) -> StoredRecord | None:
        return next((r for r in self.list_records(kind) if r.id == record_id), None)

    def create_record(
        self,
        kind: RecordKind,
        payload: BaseModel,
        *,
        author: User | None = None,
        timestamp: int | None = None,
    ) -> StoredRecord:
        """Stamp a fresh identity and timestamp, then prepend (newest first)."""
        record = RECORD_MODELS[kind].model_validate(
            {
                **payload.model_dump(),
                "id": new_id(),
                "timestamp": timestamp if timestamp is not None else now_ms(),
                "user_id": author.id if author else None,
                "user_name": author.name if author else None,
            }
        )
        with self._lock:
            self._replace_records(kind, (record, *self.list_records(kind)))
        return record

    def create_records(self, kind: RecordKind, records: Iterable[StoredRecord]) -> None:
        with self._lock:
            self._replace_records(kind, (*records, *self.list_records(kind)))

    def update_record(self, kind: RecordKind, record_id: str, changes: dict[str, Any]) -> StoredRecord | None:
        """Replace the record with a merged copy; ``None`` when the id is unknown."""
        allowed = {k: v for k, v in changes.items() if k not in _IMMUTABLE_FIELDS}
        with self._lock:
            records = list(self.list_records(kind))
            for index, record in enumerate(records):
                if record.id != record_id:
                    continue
                updated = RECORD_MODELS[kind].model_validate({**record.model_dump(), **allowed})
                records[index] = updated
                self._replace_records(kind, records)
                return updated
        return None

    def delete_record(self, kind: RecordKind, record_id: str) -> bool:
        with self._lock:
            records = self.list_records(kind)
            remaining = tuple(r for r in records if r.id != record_id)
            if len(remaining) == len(records):
                return False
            self._replace_records(kind, remaining)
            return True

    def _replace_records(self, kind: RecordKind, records: Iterable[StoredRecord]) -> None:
        records = tuple(records)
        self._flush(RECORD_STORAGE_KEYS[kind], dump_collection(records))
        self._snapshot = replace(self._snapshot, **{SNAPSHOT_FIELDS[kind]: records})

    # Master data
    def master_data(self) -> MasterData:
        return self._snapshot.master_data

    def replace_master_data(self, master_data: MasterData) -> MasterData:
        with self._lock:
            self._flush(MASTER_DATA_KEY, master_data.model_dump(mode="json", by_alias=True))
            self._snapshot = replace(self._snapshot, master_data=master_data)
        return master_data

    def update_master_data(
        self,
        category: MasterDataCategory,
        change: Callable[[list[str]], list[str]],
    ) -> MasterData:
        """Apply ``change`` to one category's current values under the lock.

        Exceptions raised by ``change`` leave the store untouched.
        """
        with self._lock:
            master = self._snapshot.master_data
            values = change(list(master.values(category)))
            return self.replace_master_data(master.with_values(category, values))

    # Users
    def users(self) -> tuple[User, ...]:
        return self._snapshot.users

    def find_user(self, user_id: str) -> User | None:
        return next((u for u in self._snapshot.users if u.id == user_id), None)

    def find_user_by_username(self, username: str) -> User | None:
        wanted = username.strip().lower()
        return next((u for u in self._snapshot.users if u.username.lower() == wanted), None)

    def add_user(self, user: User) -> User:
        with self._lock:
            self._replace_users((*self._snapshot.users, user))
        return user

    def add_user_if_username_free(self, user: User) -> bool:
        """Add ``user`` unless the login name is taken (case-insensitive)."""
        with self._lock:
            if self.find_user_by_username(user.username) is not None:
                return False
            self._replace_users((*self._snapshot.users, user))
            return True

    def add_first_user(self, user: User) -> bool:
        """Add ``user`` only while the store has no account at all."""
        with self._lock:
            if self._snapshot.users:
                return False
            self._replace_users((user,))
            return True

    def update_user(self, user_id: str, changes: dict[str, Any]) -> User | None:
        with self._lock:
            users = list(self._snapshot.users)
            for index, user in enumerate(users):
                if user.id != user_id:
                    continue
                users[index] = User.model_validate({**user.model_dump(), **changes})
                self._replace_users(users)
                return users[index]
        return None

    def delete_user(self, user_id: str) -> bool:
        with self._lock:
            remaining = tuple(u for u in self._snapshot.users if u.id != user_id)
            if len(remaining) == len(self._snapshot.users):
                return False
            self._replace_users(remaining)
            return True

    def _replace_users(self, users: Iterable[User]) -> None:
        users = tuple(users)
        self._flush(USERS_KEY, dump_collection(users))
        self._snapshot = replace(self._snapshot, users=users)

    # Whole-store operations
    def replace_all(self, snapshot: StoreSnapshot) -> StoreSnapshot:
        """Persist every collection in one write, then swap the snapshot."""
        entries: dict[str, str | None] = {
            key: _encode(dump_collection(snapshot.records(kind))) for kind, key in RECORD_STORAGE_KEYS.items()
        }
        entries[MASTER_DATA_KEY] = _encode(snapshot.master_data.model_dump(mode="json", by_alias=True))
        entries[USERS_KEY] = _encode(dump_collection(snapshot.users))
        with self._lock:
            self._kv.set_many(entries)
            self._snapshot = snapshot
        return snapshot

    def purge(self) -> None:
        """Drop every persisted collection and reset to defaults."""
        with self._lock:
            self._kv.set_many(dict.fromkeys((*RECORD_STORAGE_KEYS.values(), MASTER_DATA_KEY, USERS_KEY)))
            self._snapshot = StoreSnapshot()

    def _flush(self, key: str, payload: Any) -> None:
        self._kv.set(key, _encode(payload))


@lru_cache()
def get_record_store() -> RecordStore:
    """Process-wide store backed by the configured database."""
    from .database import SessionLocal, init_db

    init_db()
    store = RecordStore(SqlKeyValueStore(SessionLocal))
    store.load()
    return store
