"""Derived production metrics computed over a record snapshot.

All functions are pure and recompute from scratch on every call. Missing
data yields zeros and empty series, never an exception.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from ..schemas import (
    PrestationEtuvageRecord,
    PrestationProdRecord,
    ProductionRecord,
    PurchaseRecord,
    StockOutRecord,
    Trend,
)


@dataclass(frozen=True)
class DailyTotals:
    date: date
    total_weight_kg: float = 0.0
    total_employees: int = 0
    total_waste_kg: float = 0.0
    record_count: int = 0


@dataclass(frozen=True)
class SeriesPoint:
    date: date
    total_weight_kg: float
    total_employees: int
    record_count: int


@dataclass(frozen=True)
class DashboardMetrics:
    date: date
    totals: DailyTotals
    productivity: float
    waste_rate: float
    trend: Trend
    previous_weight_kg: float
    series: list[SeriesPoint]


@dataclass(frozen=True)
class LedgerSummary:
    start: date | None
    end: date | None
    record_count: int
    total_quantity_kg: float
    total_amount: float
    amount_by_category: dict[str, float]
    amount_by_client: dict[str, float]


@dataclass(frozen=True)
class StockBalance:
    item_name: str
    unit: str
    quantity_in: float
    quantity_out: float
    balance: float


def _ratio(numerator: float, denominator: float) -> float:
    if not denominator:
        return 0.0
    return numerator / denominator


def daily_totals(records: Iterable[ProductionRecord], day: date) -> DailyTotals:
    """Sum weight, employees and waste over the records dated ``day``."""
    weight = 0.0
    employees = 0
    waste = 0.0
    count = 0
    for record in records:
        if record.date != day:
            continue
        weight += record.total_weight_kg or 0.0
        employees += record.employee_count or 0
        waste += record.waste_kg or 0.0
        count += 1
    return DailyTotals(
        date=day,
        total_weight_kg=weight,
        total_employees=employees,
        total_waste_kg=waste,
        record_count=count,
    )


def productivity_of(totals: DailyTotals) -> float:
    """Kilograms per employee; 0 when nobody worked."""
    return _ratio(totals.total_weight_kg, totals.total_employees)


def productivity(records: Iterable[ProductionRecord], day: date) -> float:
    return productivity_of(daily_totals(records, day))


def waste_rate(totals: DailyTotals) -> float:
    return _ratio(totals.total_waste_kg, totals.total_weight_kg)


def compare_weights(current: float, previous: float) -> Trend:
    # Equal weights count as UP.
    return Trend.UP if current >= previous else Trend.DOWN


def previous_day_weight(records: Iterable[ProductionRecord], day: date) -> float:
    # Nothing can be recorded before date.min.
    if day == date.min:
        return 0.0
    return daily_totals(records, day - timedelta(days=1)).total_weight_kg


def trend(records: Iterable[ProductionRecord], day: date) -> Trend:
    """Day-over-day direction of total weight for ``day``."""
    records = tuple(records)
    current = daily_totals(records, day).total_weight_kg
    return compare_weights(current, previous_day_weight(records, day))


def time_series(records: Iterable[ProductionRecord], n: int) -> list[SeriesPoint]:
    """Per-day totals for the ``n`` most recent days that have records.

    Days without any record are skipped rather than reported as zero.
    """
    if n <= 0:
        return []

    weight_by_day: dict[date, float] = defaultdict(float)
    employees_by_day: dict[date, int] = defaultdict(int)
    count_by_day: dict[date, int] = defaultdict(int)
    for record in records:
        weight_by_day[record.date] += record.total_weight_kg or 0.0
        employees_by_day[record.date] += record.employee_count or 0
        count_by_day[record.date] += 1

    days = sorted(count_by_day)[-n:]
    return [
        SeriesPoint(
            date=day,
            total_weight_kg=weight_by_day[day],
            total_employees=employees_by_day[day],
            record_count=count_by_day[day],
        )
        for day in days
    ]


def dashboard_metrics(records: Iterable[ProductionRecord], today: date, days: int = 10) -> DashboardMetrics:
    records = tuple(records)
    totals = daily_totals(records, today)
    previous_weight = previous_day_weight(records, today)
    return DashboardMetrics(
        date=today,
        totals=totals,
        productivity=productivity_of(totals),
        waste_rate=waste_rate(totals),
        trend=compare_weights(totals.total_weight_kg, previous_weight),
        previous_weight_kg=previous_weight,
        series=time_series(records, days),
    )


def _in_range(day: date, start: date | None, end: date | None) -> bool:
    if start is not None and day < start:
        return False
    if end is not None and day > end:
        return False
    return True


def ledger_summary(
    records: Iterable[PrestationProdRecord | PrestationEtuvageRecord],
    *,
    category_field: str,
    start: date | None = None,
    end: date | None = None,
) -> LedgerSummary:
    """Totals of one prestation ledger over an inclusive date range.

    ``category_field`` names the attribute used for the per-category
    breakdown (``service_type`` or ``product_name`` depending on the ledger).
    """
    count = 0
    quantity = 0.0
    amount = 0.0
    by_category: dict[str, float] = defaultdict(float)
    by_client: dict[str, float] = defaultdict(float)
    for record in records:
        if not _in_range(record.date, start, end):
            continue
        count += 1
        quantity += record.quantity_kg or 0.0
        amount += record.total_amount or 0.0
        by_category[getattr(record, category_field) or ""] += record.total_amount or 0.0
        by_client[record.client_name or ""] += record.total_amount or 0.0

    return LedgerSummary(
        start=start,
        end=end,
        record_count=count,
        total_quantity_kg=quantity,
        total_amount=amount,
        amount_by_category=dict(by_category),
        amount_by_client=dict(by_client),
    )


def _stock_key(item_name: str, unit: str) -> tuple[str, str]:
    return (item_name or "").strip().lower(), (unit or "").strip().lower()


def stock_balance(
    purchases: Iterable[PurchaseRecord],
    stock_outs: Iterable[StockOutRecord],
) -> list[StockBalance]:
    """Quantity in, out and on hand per item and unit."""
    labels: dict[tuple[str, str], tuple[str, str]] = {}
    quantity_in: dict[tuple[str, str], float] = defaultdict(float)
    quantity_out: dict[tuple[str, str], float] = defaultdict(float)

    for purchase in purchases:
        key = _stock_key(purchase.item_name, purchase.unit)
        labels.setdefault(key, (purchase.item_name.strip(), purchase.unit.strip()))
        quantity_in[key] += purchase.quantity or 0.0
    for stock_out in stock_outs:
        key = _stock_key(stock_out.item_name, stock_out.unit)
        labels.setdefault(key, (stock_out.item_name.strip(), stock_out.unit.strip()))
        quantity_out[key] += stock_out.quantity or 0.0

    return [
        StockBalance(
            item_name=labels[key][0],
            unit=labels[key][1],
            quantity_in=quantity_in[key],
            quantity_out=quantity_out[key],
            balance=quantity_in[key] - quantity_out[key],
        )
        for key in sorted(labels)
    ]
