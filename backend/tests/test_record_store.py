from __future__ import annotations

import json
from datetime import date

import pytest
from pydantic import ValidationError

from packhouse.persistence import (
    MASTER_DATA_KEY,
    PRODUCTION_KEY,
    PURCHASES_KEY,
    USERS_KEY,
    InMemoryKeyValueStore,
)
from packhouse.schemas import (
    DEFAULT_MASTER_DATA,
    MasterDataCategory,
    ProductionRecordCreate,
    RecordKind,
    User,
)
from packhouse.store import RecordStore, parse_master_data


def _store(**raw: str) -> tuple[RecordStore, InMemoryKeyValueStore]:
    kv = InMemoryKeyValueStore(raw)
    store = RecordStore(kv)
    store.load()
    return store, kv


def _lot_payload(lot_number: str = "LOT-11-1") -> ProductionRecordCreate:
    return ProductionRecordCreate(
        date=date(2024, 1, 1),
        lot_number=lot_number,
        client_name="Export France",
        product_name="Tomate Roma",
        employee_count=10,
        total_weight_kg=500,
    )


def test_missing_keys_load_empty_collections_and_default_master_data() -> None:
    store, _ = _store()

    snapshot = store.snapshot()
    assert snapshot.production == ()
    assert snapshot.users == ()
    assert snapshot.master_data == DEFAULT_MASTER_DATA


def test_malformed_json_falls_back_to_empty_collection() -> None:
    store, _ = _store(**{PRODUCTION_KEY: "{not json", MASTER_DATA_KEY: "[[["})

    assert store.list_records(RecordKind.PRODUCTION) == ()
    assert store.master_data() == DEFAULT_MASTER_DATA


def test_non_list_payload_falls_back_to_empty_collection() -> None:
    store, _ = _store(**{PURCHASES_KEY: json.dumps({"id": "x"})})

    assert store.list_records(RecordKind.PURCHASE) == ()


def test_invalid_entries_are_skipped_individually() -> None:
    raw = json.dumps(
        [
            {"id": "ok", "date": "2024-01-01", "lotNumber": "LOT-1", "totalWeightKg": 120, "employeeCount": 3},
            {"id": "bad-date", "date": "not-a-date", "lotNumber": "LOT-2"},
            "garbage",
        ]
    )
    store, _ = _store(**{PRODUCTION_KEY: raw})

    records = store.list_records(RecordKind.PRODUCTION)
    assert [r.id for r in records] == ["ok"]
    assert records[0].total_weight_kg == 120


def test_partial_master_data_keeps_missing_lists_empty_and_dedupes() -> None:
    master = parse_master_data(json.dumps({"products": ["Datte", "Datte", "Figue"]}))

    assert master.products == ["Datte", "Figue"]
    assert master.clients == []


def test_create_record_stamps_identity_prepends_and_flushes() -> None:
    store, kv = _store()
    author = User(id="u1", name="Amine", username="amine")

    first = store.create_record(RecordKind.PRODUCTION, _lot_payload("LOT-11-1"), author=author)
    second = store.create_record(RecordKind.PRODUCTION, _lot_payload("LOT-11-2"), author=author)

    assert first.id and first.id != second.id
    assert first.timestamp > 0
    assert first.user_name == "Amine"
    assert [r.id for r in store.list_records(RecordKind.PRODUCTION)] == [second.id, first.id]

    persisted = json.loads(kv.get(PRODUCTION_KEY))
    assert [item["lotNumber"] for item in persisted] == ["LOT-11-2", "LOT-11-1"]
    assert persisted[0]["userId"] == "u1"


def test_store_reloads_what_it_flushed() -> None:
    store, kv = _store()
    created = store.create_record(RecordKind.PRODUCTION, _lot_payload())

    reloaded = RecordStore(kv)
    reloaded.load()

    assert reloaded.get_record(RecordKind.PRODUCTION, created.id) == created


def test_update_record_merges_changes_and_keeps_identity() -> None:
    store, _ = _store()
    created = store.create_record(RecordKind.PRODUCTION, _lot_payload(), timestamp=42)

    updated = store.update_record(
        RecordKind.PRODUCTION,
        created.id,
        {"waste_kg": 12.5, "id": "hijack", "timestamp": 0},
    )

    assert updated is not None
    assert updated.id == created.id
    assert updated.timestamp == 42
    assert updated.waste_kg == 12.5
    assert updated.lot_number == created.lot_number


def test_update_record_rejects_invalid_merge_and_keeps_previous_state() -> None:
    store, _ = _store()
    created = store.create_record(RecordKind.PRODUCTION, _lot_payload())

    with pytest.raises(ValidationError):
        store.update_record(RecordKind.PRODUCTION, created.id, {"total_weight_kg": -5})

    assert store.get_record(RecordKind.PRODUCTION, created.id) == created


def test_update_and_delete_unknown_record() -> None:
    store, _ = _store()

    assert store.update_record(RecordKind.PRODUCTION, "missing", {"waste_kg": 1}) is None
    assert store.delete_record(RecordKind.PRODUCTION, "missing") is False


def test_delete_record_removes_it() -> None:
    store, kv = _store()
    created = store.create_record(RecordKind.PRODUCTION, _lot_payload())

    assert store.delete_record(RecordKind.PRODUCTION, created.id) is True
    assert store.list_records(RecordKind.PRODUCTION) == ()
    assert json.loads(kv.get(PRODUCTION_KEY)) == []


def test_snapshot_is_not_changed_by_later_mutations() -> None:
    store, _ = _store()
    before = store.snapshot()

    store.create_record(RecordKind.PRODUCTION, _lot_payload())

    assert before.production == ()
    assert len(store.snapshot().production) == 1


def test_master_data_removal_keeps_historical_records_readable() -> None:
    store, _ = _store()
    created = store.create_record(RecordKind.PRODUCTION, _lot_payload())
    master = store.master_data()

    store.replace_master_data(
        master.with_values(
            MasterDataCategory.CLIENTS,
            [c for c in master.clients if c != "Export France"],
        )
    )

    assert "Export France" not in store.master_data().clients
    assert store.get_record(RecordKind.PRODUCTION, created.id).client_name == "Export France"


def test_users_are_found_case_insensitively_and_persisted() -> None:
    store, kv = _store()
    store.add_user(User(id="u1", name="Amine", username="amine", password_hash="x"))

    assert store.find_user_by_username("  AMINE ").id == "u1"
    assert store.find_user("u1").name == "Amine"
    assert json.loads(kv.get(USERS_KEY))[0]["passwordHash"] == "x"

    updated = store.update_user("u1", {"name": "Amine B."})
    assert updated.name == "Amine B."
    assert store.delete_user("u1") is True
    assert store.users() == ()


def test_purge_removes_every_key() -> None:
    store, kv = _store()
    store.create_record(RecordKind.PRODUCTION, _lot_payload())
    store.add_user(User(id="u1", name="Amine", username="amine"))

    store.purge()

    assert kv.get(PRODUCTION_KEY) is None
    assert kv.get(USERS_KEY) is None
    assert store.snapshot().production == ()
    assert store.master_data() == DEFAULT_MASTER_DATA
