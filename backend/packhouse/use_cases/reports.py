"""Read-model use-cases: dashboard, ledger summaries and stock balance."""
from __future__ import annotations

from datetime import date

from ..domain_errors import DomainError
from ..schemas import (
    DashboardResponse,
    LedgerSummaryResponse,
    RecordKind,
    StockBalanceResponse,
)
from ..services.aggregation import dashboard_metrics, ledger_summary, stock_balance
from ..store import StoreSnapshot

# Attribute used for the per-category breakdown of each prestation ledger.
_LEDGER_CATEGORY_FIELDS: dict[RecordKind, str] = {
    RecordKind.PRESTATION_PROD: "service_type",
    RecordKind.PRESTATION_ETUVAGE: "product_name",
}


def get_production_dashboard_use_case(
    *,
    snapshot: StoreSnapshot,
    today: date,
    days: int,
) -> DashboardResponse:
    """Return today's production metrics plus the recent daily series."""
    metrics = dashboard_metrics(snapshot.production, today, days)
    return DashboardResponse.model_validate(metrics)


def get_ledger_summary_use_case(
    *,
    snapshot: StoreSnapshot,
    kind: RecordKind,
    start: date | None = None,
    end: date | None = None,
) -> LedgerSummaryResponse:
    if kind not in _LEDGER_CATEGORY_FIELDS:
        raise DomainError(
            code="LEDGER_NOT_SUMMARIZABLE",
            http_status=400,
            message=f"No summary for record kind {kind.value}",
        )
    if start is not None and end is not None and start > end:
        raise DomainError(
            code="INVALID_DATE_RANGE",
            http_status=422,
            message="start must be on or before end",
            details={"start": start.isoformat(), "end": end.isoformat()},
        )
    summary = ledger_summary(
        snapshot.records(kind),
        category_field=_LEDGER_CATEGORY_FIELDS[kind],
        start=start,
        end=end,
    )
    return LedgerSummaryResponse.model_validate(summary)


def get_stock_balance_use_case(*, snapshot: StoreSnapshot) -> list[StockBalanceResponse]:
    return [
        StockBalanceResponse.model_validate(balance)
        for balance in stock_balance(snapshot.purchases, snapshot.stock_outs)
    ]
