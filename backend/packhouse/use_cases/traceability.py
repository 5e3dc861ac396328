"""Lot traceability use-case."""
from __future__ import annotations

from ..domain_errors import not_found
from ..schemas import LotTraceResponse
from ..services.traceability import resolve_lot_trace
from ..store import StoreSnapshot


def get_lot_trace_use_case(
    *,
    snapshot: StoreSnapshot,
    record_id: str,
    lookback_days: int | None = None,
) -> LotTraceResponse:
    """Resolve purchases, stock-outs and sibling lots linked to one lot."""
    lot = next((r for r in snapshot.production if r.id == record_id), None)
    if lot is None:
        raise not_found("LOT_NOT_FOUND", "Production lot not found", id=record_id)

    trace = resolve_lot_trace(
        lot,
        purchases=snapshot.purchases,
        stock_outs=snapshot.stock_outs,
        production=snapshot.production,
        lookback_days=lookback_days,
    )
    return LotTraceResponse.model_validate(trace)
