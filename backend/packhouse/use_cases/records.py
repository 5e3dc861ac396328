"""Ledger record use-cases shared by every record kind."""
from __future__ import annotations

import logging

from pydantic import BaseModel, ValidationError

from ..domain_errors import DomainError, forbidden, not_found
from ..schemas import RecordKind, StoredRecord, User
from ..security import is_admin
from ..store import RecordStore

logger = logging.getLogger(__name__)


def _quantity_of(payload: BaseModel) -> float:
    quantity = getattr(payload, "quantity", None)
    if quantity is None:
        quantity = getattr(payload, "quantity_kg", None)
    return float(quantity or 0.0)


def with_total_amount(payload: BaseModel) -> BaseModel:
    """Fill an omitted ``total_amount`` with quantity * unit price."""
    if "total_amount" not in type(payload).model_fields or payload.total_amount is not None:
        return payload
    unit_price = float(getattr(payload, "unit_price", 0.0) or 0.0)
    return payload.model_copy(update={"total_amount": round(_quantity_of(payload) * unit_price, 2)})


def _ensure_can_edit(current_user: User) -> None:
    # Operators append; only administrators correct or remove history.
    if not is_admin(current_user):
        raise forbidden("RECORD_EDIT_FORBIDDEN", "Only administrators can modify or delete records")


def list_records_use_case(*, store: RecordStore, kind: RecordKind) -> list[StoredRecord]:
    return list(store.list_records(kind))


def create_record_use_case(
    *,
    store: RecordStore,
    kind: RecordKind,
    payload: BaseModel,
    current_user: User,
) -> StoredRecord:
    record = store.create_record(kind, with_total_amount(payload), author=current_user)
    logger.info("records.create kind=%s id=%s user=%s", kind.value, record.id, current_user.id)
    return record


def update_record_use_case(
    *,
    store: RecordStore,
    kind: RecordKind,
    record_id: str,
    payload: BaseModel,
    current_user: User,
) -> StoredRecord:
    _ensure_can_edit(current_user)
    changes = payload.model_dump(exclude_unset=True)
    try:
        updated = store.update_record(kind, record_id, changes)
    except ValidationError as exc:
        raise DomainError(
            code="RECORD_INVALID",
            http_status=422,
            message="Updated record is invalid",
            details={"errors": [err["msg"] for err in exc.errors()]},
        )
    if updated is None:
        raise not_found("RECORD_NOT_FOUND", "Record not found", kind=kind.value, id=record_id)
    logger.info("records.update kind=%s id=%s user=%s", kind.value, record_id, current_user.id)
    return updated


def delete_record_use_case(
    *,
    store: RecordStore,
    kind: RecordKind,
    record_id: str,
    current_user: User,
) -> None:
    _ensure_can_edit(current_user)
    if not store.delete_record(kind, record_id):
        raise not_found("RECORD_NOT_FOUND", "Record not found", kind=kind.value, id=record_id)
    logger.info("records.delete kind=%s id=%s user=%s", kind.value, record_id, current_user.id)
