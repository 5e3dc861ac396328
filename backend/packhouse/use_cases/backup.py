"""Snapshot export/import used for backups.

The blob is keyed by the persistence key names, so a dump of the legacy
browser storage can be imported directly.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from ..auth import hash_password
from ..domain_errors import DomainError
from ..persistence import MASTER_DATA_KEY, USERS_KEY
from ..schemas import RECORD_MODELS, User
from ..store import (
    RECORD_STORAGE_KEYS,
    SNAPSHOT_FIELDS,
    RecordStore,
    StoreSnapshot,
    dump_collection,
    parse_collection,
    parse_master_data,
)

logger = logging.getLogger(__name__)

BACKUP_FORMAT_VERSION = 1


def export_snapshot_use_case(*, store: RecordStore, exported_at: datetime | None = None) -> dict[str, Any]:
    snapshot = store.snapshot()
    blob: dict[str, Any] = {
        "version": BACKUP_FORMAT_VERSION,
        "exportedAt": (exported_at or datetime.now(timezone.utc)).isoformat(),
    }
    for kind, key in RECORD_STORAGE_KEYS.items():
        blob[key] = dump_collection(snapshot.records(kind))
    blob[MASTER_DATA_KEY] = snapshot.master_data.model_dump(mode="json", by_alias=True)
    blob[USERS_KEY] = dump_collection(snapshot.users)
    return blob


def _upgrade_legacy_user(raw: Any) -> Any:
    # Browser-era accounts carried a plaintext ``password``; keep only its hash.
    if not isinstance(raw, dict) or "password" not in raw:
        return raw
    upgraded = {k: v for k, v in raw.items() if k != "password"}
    if not upgraded.get("passwordHash") and isinstance(raw["password"], str) and raw["password"]:
        upgraded["passwordHash"] = hash_password(raw["password"])
    return upgraded


def import_snapshot_use_case(*, store: RecordStore, blob: Any) -> dict[str, int]:
    """Replace every collection with the blob's content.

    Missing or malformed collections load as empty (master data as the
    defaults). A blob without a users section keeps the current accounts.
    """
    if not isinstance(blob, dict):
        raise DomainError(code="BACKUP_INVALID", http_status=422, message="Backup must be a JSON object")

    collections = {
        SNAPSHOT_FIELDS[kind]: parse_collection(blob.get(key), RECORD_MODELS[kind], key=key)
        for kind, key in RECORD_STORAGE_KEYS.items()
    }
    if USERS_KEY in blob:
        raw_users = blob[USERS_KEY]
        if isinstance(raw_users, list):
            raw_users = [_upgrade_legacy_user(item) for item in raw_users]
        users = parse_collection(raw_users, User, key=USERS_KEY)
    else:
        users = store.users()

    snapshot = StoreSnapshot(
        **collections,
        master_data=parse_master_data(blob.get(MASTER_DATA_KEY)),
        users=users,
    )
    store.replace_all(snapshot)

    counts = {key: len(snapshot.records(kind)) for kind, key in RECORD_STORAGE_KEYS.items()}
    counts[USERS_KEY] = len(snapshot.users)
    logger.info("backup.import %s", " ".join(f"{k}={v}" for k, v in counts.items()))
    return counts
