"""Production ledger endpoints: lots, dashboard and traceability."""
from __future__ import annotations

from datetime import date as date_type
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..auth import ViewAccessChecker
from ..config import settings
from ..schemas import (
    DashboardResponse,
    LotTraceResponse,
    ProductionRecord,
    ProductionRecordCreate,
    ProductionRecordUpdate,
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
from ..use_cases.reports import get_production_dashboard_use_case
from ..use_cases.traceability import get_lot_trace_use_case

router = APIRouter(prefix="/production", tags=["production"])

can_view_production = ViewAccessChecker(View.PRODUCTION)


@router.get("/records", response_model=list[ProductionRecord])
def get_production_records(
    current_user: User = Depends(can_view_production),
    store: RecordStore = Depends(get_record_store),
):
    """Production lots, newest first."""
    return list_records_use_case(store=store, kind=RecordKind.PRODUCTION)


@router.post("/records", response_model=ProductionRecord, status_code=status.HTTP_201_CREATED)
def create_production_record(
    payload: ProductionRecordCreate,
    current_user: User = Depends(can_view_production),
    store: RecordStore = Depends(get_record_store),
):
    return create_record_use_case(
        store=store,
        kind=RecordKind.PRODUCTION,
        payload=payload,
        current_user=current_user,
    )


@router.put("/records/{record_id}", response_model=ProductionRecord)
def update_production_record(
    record_id: str,
    payload: ProductionRecordUpdate,
    current_user: User = Depends(can_view_production),
    store: RecordStore = Depends(get_record_store),
):
    return update_record_use_case(
        store=store,
        kind=RecordKind.PRODUCTION,
        record_id=record_id,
        payload=payload,
        current_user=current_user,
    )


@router.delete("/records/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_production_record(
    record_id: str,
    current_user: User = Depends(can_view_production),
    store: RecordStore = Depends(get_record_store),
):
    delete_record_use_case(
        store=store,
        kind=RecordKind.PRODUCTION,
        record_id=record_id,
        current_user=current_user,
    )


@router.get("/dashboard", response_model=DashboardResponse)
def get_production_dashboard(
    date: Optional[date_type] = None,
    days: Optional[int] = Query(None, ge=0, le=366),
    current_user: User = Depends(can_view_production),
    store: RecordStore = Depends(get_record_store),
):
    """Metrics for one day (default: today) and the trailing daily series."""
    return get_production_dashboard_use_case(
        snapshot=store.snapshot(),
        today=date or date_type.today(),
        days=settings.DASHBOARD_SERIES_DAYS if days is None else days,
    )


@router.get("/records/{record_id}/trace", response_model=LotTraceResponse)
def get_lot_trace(
    record_id: str,
    lookback_days: Optional[int] = Query(None, ge=0, le=36500),
    current_user: User = Depends(can_view_production),
    store: RecordStore = Depends(get_record_store),
):
    return get_lot_trace_use_case(
        snapshot=store.snapshot(),
        record_id=record_id,
        lookback_days=settings.TRACE_LOOKBACK_DAYS if lookback_days is None else lookback_days,
    )
