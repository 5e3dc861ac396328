from __future__ import annotations

from datetime import date

import pytest

from packhouse.domain_errors import DomainError
from packhouse.persistence import InMemoryKeyValueStore
from packhouse.schemas import (
    PrestationEtuvageRecordCreate,
    ProductionRecordCreate,
    ProductionRecordUpdate,
    PurchaseRecordCreate,
    RecordKind,
    Role,
    User,
    View,
)
from packhouse.store import RecordStore
from packhouse.use_cases.records import (
    create_record_use_case,
    delete_record_use_case,
    list_records_use_case,
    update_record_use_case,
    with_total_amount,
)

ADMIN = User(id="admin", name="Admin", username="admin", role=Role.ADMIN, allowed_tabs=list(View))
OPERATOR = User(id="op", name="Opérateur", username="op", role=Role.OPERATOR, allowed_tabs=[View.PRODUCTION])


def _store() -> RecordStore:
    store = RecordStore(InMemoryKeyValueStore())
    store.load()
    return store


def _create_lot(store: RecordStore, user: User = OPERATOR):
    return create_record_use_case(
        store=store,
        kind=RecordKind.PRODUCTION,
        payload=ProductionRecordCreate(date=date(2024, 1, 1), lot_number="LOT-11-1", total_weight_kg=100),
        current_user=user,
    )


def test_purchase_total_defaults_to_quantity_times_unit_price() -> None:
    payload = PurchaseRecordCreate(date=date(2024, 1, 1), item_name="Engrais", quantity=3, unit_price=12.5)

    assert with_total_amount(payload).total_amount == 37.5


def test_explicit_total_is_kept() -> None:
    payload = PurchaseRecordCreate(
        date=date(2024, 1, 1),
        item_name="Engrais",
        quantity=3,
        unit_price=10,
        total_amount=25,
    )

    assert with_total_amount(payload).total_amount == 25


def test_prestation_total_uses_quantity_kg() -> None:
    payload = PrestationEtuvageRecordCreate(
        date=date(2024, 1, 1),
        client_name="Export France",
        quantity_kg=200,
        unit_price=0.5,
    )

    assert with_total_amount(payload).total_amount == 100.0


def test_operator_creates_records_stamped_with_author() -> None:
    store = _store()

    record = _create_lot(store)

    assert record.user_id == OPERATOR.id
    assert list_records_use_case(store=store, kind=RecordKind.PRODUCTION) == [record]


def test_operator_cannot_update_or_delete() -> None:
    store = _store()
    record = _create_lot(store)

    with pytest.raises(DomainError) as exc:
        update_record_use_case(
            store=store,
            kind=RecordKind.PRODUCTION,
            record_id=record.id,
            payload=ProductionRecordUpdate(waste_kg=3),
            current_user=OPERATOR,
        )
    assert exc.value.code == "RECORD_EDIT_FORBIDDEN"
    assert exc.value.http_status == 403

    with pytest.raises(DomainError) as exc:
        delete_record_use_case(store=store, kind=RecordKind.PRODUCTION, record_id=record.id, current_user=OPERATOR)
    assert exc.value.code == "RECORD_EDIT_FORBIDDEN"


def test_admin_update_applies_only_sent_fields() -> None:
    store = _store()
    record = _create_lot(store)

    updated = update_record_use_case(
        store=store,
        kind=RecordKind.PRODUCTION,
        record_id=record.id,
        payload=ProductionRecordUpdate(waste_kg=3),
        current_user=ADMIN,
    )

    assert updated.waste_kg == 3
    assert updated.total_weight_kg == 100
    assert updated.user_id == OPERATOR.id


def test_update_that_blanks_a_required_field_is_rejected() -> None:
    store = _store()
    record = _create_lot(store)

    with pytest.raises(DomainError) as exc:
        update_record_use_case(
            store=store,
            kind=RecordKind.PRODUCTION,
            record_id=record.id,
            payload=ProductionRecordUpdate(lot_number=None),
            current_user=ADMIN,
        )

    assert exc.value.code == "RECORD_INVALID"
    assert exc.value.http_status == 422


def test_update_and_delete_unknown_record_return_404() -> None:
    store = _store()

    with pytest.raises(DomainError) as exc:
        update_record_use_case(
            store=store,
            kind=RecordKind.PRODUCTION,
            record_id="missing",
            payload=ProductionRecordUpdate(waste_kg=1),
            current_user=ADMIN,
        )
    assert exc.value.code == "RECORD_NOT_FOUND"

    with pytest.raises(DomainError) as exc:
        delete_record_use_case(store=store, kind=RecordKind.PRODUCTION, record_id="missing", current_user=ADMIN)
    assert exc.value.http_status == 404


def test_admin_delete_removes_record() -> None:
    store = _store()
    record = _create_lot(store)

    delete_record_use_case(store=store, kind=RecordKind.PRODUCTION, record_id=record.id, current_user=ADMIN)

    assert list_records_use_case(store=store, kind=RecordKind.PRODUCTION) == []
