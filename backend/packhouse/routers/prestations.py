"""Service ledgers: production services and drying-room (etuvage) jobs."""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, status

from ..auth import ViewAccessChecker
from ..schemas import (
    LedgerSummaryResponse,
    PrestationEtuvageRecord,
    PrestationEtuvageRecordCreate,
    PrestationEtuvageRecordUpdate,
    PrestationProdRecord,
    PrestationProdRecordCreate,
    PrestationProdRecordUpdate,
    RecordKind,
    User,
    View,
)
from ..store import RecordStore, get_record_store
from ..use_cases.records import (
    create_record_use_case,
    delete_record_use_case,
    list_records_use_case,
    update_record_use_case,
)
from ..use_cases.reports import get_ledger_summary_use_case

router = APIRouter(prefix="/prestations", tags=["prestations"])

can_view_prestation_prod = ViewAccessChecker(View.PRESTATION_PROD)
can_view_prestation_etuvage = ViewAccessChecker(View.PRESTATION_ETUVAGE)


# Production services
@router.get("/prod", response_model=list[PrestationProdRecord])
def get_prestations_prod(
    current_user: User = Depends(can_view_prestation_prod),
    store: RecordStore = Depends(get_record_store),
):
    return list_records_use_case(store=store, kind=RecordKind.PRESTATION_PROD)


@router.post("/prod", response_model=PrestationProdRecord, status_code=status.HTTP_201_CREATED)
def create_prestation_prod(
    payload: PrestationProdRecordCreate,
    current_user: User = Depends(can_view_prestation_prod),
    store: RecordStore = Depends(get_record_store),
):
    return create_record_use_case(
        store=store,
        kind=RecordKind.PRESTATION_PROD,
        payload=payload,
        current_user=current_user,
    )


@router.get("/prod/summary", response_model=LedgerSummaryResponse)
def get_prestation_prod_summary(
    start: Optional[date] = None,
    end: Optional[date] = None,
    current_user: User = Depends(can_view_prestation_prod),
    store: RecordStore = Depends(get_record_store),
):
    """Billed quantity and amounts per service type and client."""
    return get_ledger_summary_use_case(
        snapshot=store.snapshot(),
        kind=RecordKind.PRESTATION_PROD,
        start=start,
        end=end,
    )


@router.put("/prod/{record_id}", response_model=PrestationProdRecord)
def update_prestation_prod(
    record_id: str,
    payload: PrestationProdRecordUpdate,
    current_user: User = Depends(can_view_prestation_prod),
    store: RecordStore = Depends(get_record_store),
):
    return update_record_use_case(
        store=store,
        kind=RecordKind.PRESTATION_PROD,
        record_id=record_id,
        payload=payload,
        current_user=current_user,
    )


@router.delete("/prod/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_prestation_prod(
    record_id: str,
    current_user: User = Depends(can_view_prestation_prod),
    store: RecordStore = Depends(get_record_store),
):
    delete_record_use_case(
        store=store,
        kind=RecordKind.PRESTATION_PROD,
        record_id=record_id,
        current_user=current_user,
    )


# Etuvage
@router.get("/etuvage", response_model=list[PrestationEtuvageRecord])
def get_prestations_etuvage(
    current_user: User = Depends(can_view_prestation_etuvage),
    store: RecordStore = Depends(get_record_store),
):
    return list_records_use_case(store=store, kind=RecordKind.PRESTATION_ETUVAGE)


@router.post("/etuvage", response_model=PrestationEtuvageRecord, status_code=status.HTTP_201_CREATED)
def create_prestation_etuvage(
    payload: PrestationEtuvageRecordCreate,
    current_user: User = Depends(can_view_prestation_etuvage),
    store: RecordStore = Depends(get_record_store),
):
    return create_record_use_case(
        store=store,
        kind=RecordKind.PRESTATION_ETUVAGE,
        payload=payload,
        current_user=current_user,
    )


@router.get("/etuvage/summary", response_model=LedgerSummaryResponse)
def get_prestation_etuvage_summary(
    start: Optional[date] = None,
    end: Optional[date] = None,
    current_user: User = Depends(can_view_prestation_etuvage),
    store: RecordStore = Depends(get_record_store),
):
    return get_ledger_summary_use_case(
        snapshot=store.snapshot(),
        kind=RecordKind.PRESTATION_ETUVAGE,
        start=start,
        end=end,
    )


@router.put("/etuvage/{record_id}", response_model=PrestationEtuvageRecord)
def update_prestation_etuvage(
    record_id: str,
    payload: PrestationEtuvageRecordUpdate,
    current_user: User = Depends(can_view_prestation_etuvage),
    store: RecordStore = Depends(get_record_store),
):
    return update_record_use_case(
        store=store,
        kind=RecordKind.PRESTATION_ETUVAGE,
        record_id=record_id,
        payload=payload,
        current_user=current_user,
    )


@router.delete("/etuvage/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_prestation_etuvage(
    record_id: str,
    current_user: User = Depends(can_view_prestation_etuvage),
    store: RecordStore = Depends(get_record_store),
):
    delete_record_use_case(
        store=store,
        kind=RecordKind.PRESTATION_ETUVAGE,
        record_id=record_id,
        current_user=current_user,
    )
