"""Stock ledger endpoints: purchases (stock in), stock-outs and balance."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..auth import ViewAccessChecker
from ..schemas import (
    PurchaseRecord,
    PurchaseRecordCreate,
    PurchaseRecordUpdate,
    RecordKind,
    StockBalanceResponse,
    StockOutRecord,
    StockOutRecordCreate,
    StockOutRecordUpdate,
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
from ..use_cases.reports import get_stock_balance_use_case

router = APIRouter(prefix="/stock", tags=["stock"])

can_view_stock = ViewAccessChecker(View.STOCK)


# Purchases
@router.get("/purchases", response_model=list[PurchaseRecord])
def get_purchases(
    current_user: User = Depends(can_view_stock),
    store: RecordStore = Depends(get_record_store),
):
    return list_records_use_case(store=store, kind=RecordKind.PURCHASE)


@router.post("/purchases", response_model=PurchaseRecord, status_code=status.HTTP_201_CREATED)
def create_purchase(
    payload: PurchaseRecordCreate,
    current_user: User = Depends(can_view_stock),
    store: RecordStore = Depends(get_record_store),
):
    """Record a purchase; ``totalAmount`` defaults to quantity x unit price."""
    return create_record_use_case(store=store, kind=RecordKind.PURCHASE, payload=payload, current_user=current_user)


@router.put("/purchases/{record_id}", response_model=PurchaseRecord)
def update_purchase(
    record_id: str,
    payload: PurchaseRecordUpdate,
    current_user: User = Depends(can_view_stock),
    store: RecordStore = Depends(get_record_store),
):
    return update_record_use_case(
        store=store,
        kind=RecordKind.PURCHASE,
        record_id=record_id,
        payload=payload,
        current_user=current_user,
    )


@router.delete("/purchases/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_purchase(
    record_id: str,
    current_user: User = Depends(can_view_stock),
    store: RecordStore = Depends(get_record_store),
):
    delete_record_use_case(store=store, kind=RecordKind.PURCHASE, record_id=record_id, current_user=current_user)


# Stock-outs
@router.get("/stock-outs", response_model=list[StockOutRecord])
def get_stock_outs(
    current_user: User = Depends(can_view_stock),
    store: RecordStore = Depends(get_record_store),
):
    return list_records_use_case(store=store, kind=RecordKind.STOCK_OUT)


@router.post("/stock-outs", response_model=StockOutRecord, status_code=status.HTTP_201_CREATED)
def create_stock_out(
    payload: StockOutRecordCreate,
    current_user: User = Depends(can_view_stock),
    store: RecordStore = Depends(get_record_store),
):
    return create_record_use_case(store=store, kind=RecordKind.STOCK_OUT, payload=payload, current_user=current_user)


@router.put("/stock-outs/{record_id}", response_model=StockOutRecord)
def update_stock_out(
    record_id: str,
    payload: StockOutRecordUpdate,
    current_user: User = Depends(can_view_stock),
    store: RecordStore = Depends(get_record_store),
):
    return update_record_use_case(
        store=store,
        kind=RecordKind.STOCK_OUT,
        record_id=record_id,
        payload=payload,
        current_user=current_user,
    )


@router.delete("/stock-outs/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_stock_out(
    record_id: str,
    current_user: User = Depends(can_view_stock),
    store: RecordStore = Depends(get_record_store),
):
    delete_record_use_case(store=store, kind=RecordKind.STOCK_OUT, record_id=record_id, current_user=current_user)


@router.get("/balance", response_model=list[StockBalanceResponse])
def get_stock_balance(
    current_user: User = Depends(can_view_stock),
    store: RecordStore = Depends(get_record_store),
):
    """Quantity in minus quantity out, per item and unit."""
    return get_stock_balance_use_case(snapshot=store.snapshot())
