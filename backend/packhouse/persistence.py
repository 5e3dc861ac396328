"""Key-value persistence collaborator.

The Record Store keeps each collection as one JSON text value under a fixed
key. Anything that implements ``get``/``set``/``remove`` can back it.
"""
from __future__ import annotations

import logging
from typing import Callable, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .domain_errors import DomainError
from .models import KeyValueEntry

logger = logging.getLogger(__name__)


USERS_KEY = "prod_users"
PRODUCTION_KEY = "prod_records"
PURCHASES_KEY = "prod_purchases"
STOCK_OUTS_KEY = "prod_stock_outs"
PRESTATION_PROD_KEY = "prod_prestation_prod"
PRESTATION_ETUVAGE_KEY = "prod_prestation_etuvage"
MASTER_DATA_KEY = "prod_master_data"


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def set_many(self, entries: dict[str, str | None]) -> None:
        """Write every entry or none; a ``None`` value removes the key."""
        ...


class InMemoryKeyValueStore:
    """Process-local store, used by tests and throwaway runs."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def set_many(self, entries: dict[str, str | None]) -> None:
        for key, value in entries.items():
            if value is None:
                self._items.pop(key, None)
            else:
                self._items[key] = value


class SqlKeyValueStore:
    """Key-value store backed by the ``kv_entries`` table."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> str | None:
        db = self._session_factory()
        try:
            entry = db.get(KeyValueEntry, key)
            return entry.value if entry is not None else None
        except SQLAlchemyError:
            # Unreadable collections degrade to "missing" and load as empty.
            logger.exception("Failed to read key-value entry key=%s", key)
            return None
        finally:
            db.close()

    def set(self, key: str, value: str) -> None:
        db = self._session_factory()
        try:
            entry = db.get(KeyValueEntry, key)
            if entry is None:
                db.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to write key-value entry key=%s", key)
            raise DomainError(
                code="PERSISTENCE_WRITE_FAILED",
                http_status=503,
                message="Failed to persist data",
                details={"key": key},
            )
        finally:
            db.close()

    def remove(self, key: str) -> None:
        db = self._session_factory()
        try:
            db.query(KeyValueEntry).filter(KeyValueEntry.key == key).delete()
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to remove key-value entry key=%s", key)
            raise DomainError(
                code="PERSISTENCE_WRITE_FAILED",
                http_status=503,
                message="Failed to persist data",
                details={"key": key},
            )
        finally:
            db.close()

    def set_many(self, entries: dict[str, str | None]) -> None:
        db = self._session_factory()
        try:
            for key, value in entries.items():
                if value is None:
                    db.query(KeyValueEntry).filter(KeyValueEntry.key == key).delete()
                    continue
                entry = db.get(KeyValueEntry, key)
                if entry is None:
                    db.add(KeyValueEntry(key=key, value=value))
                else:
                    entry.value = value
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to write key-value entries keys=%s", ",".join(entries))
            raise DomainError(
                code="PERSISTENCE_WRITE_FAILED",
                http_status=503,
                message="Failed to persist data",
                details={"keys": list(entries)},
            )
        finally:
            db.close()
