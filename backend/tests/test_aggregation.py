from __future__ import annotations

from datetime import date

import pytest

from packhouse.schemas import (
    PrestationEtuvageRecord,
    PrestationProdRecord,
    ProductionRecord,
    PurchaseRecord,
    StockOutRecord,
    Trend,
)
from packhouse.services.aggregation import (
    compare_weights,
    daily_totals,
    dashboard_metrics,
    ledger_summary,
    productivity,
    stock_balance,
    time_series,
    trend,
    waste_rate,
)


def _lot(day: str, weight: float, employees: int, waste: float = 0.0, idx: int = 0) -> ProductionRecord:
    return ProductionRecord(
        id=f"lot-{day}-{idx}",
        date=date.fromisoformat(day),
        lot_number=f"LOT-{idx}",
        total_weight_kg=weight,
        employee_count=employees,
        waste_kg=waste,
    )


def test_daily_totals_productivity_and_trend_for_two_days() -> None:
    records = [_lot("2024-01-01", 100, 10), _lot("2024-01-02", 80, 10)]

    totals = daily_totals(records, date(2024, 1, 1))

    assert totals.total_weight_kg == 100
    assert totals.total_employees == 10
    assert totals.record_count == 1
    assert productivity(records, date(2024, 1, 1)) == 10.0
    assert trend(records, date(2024, 1, 2)) == Trend.DOWN


def test_empty_collection_yields_zeros_and_empty_series() -> None:
    totals = daily_totals([], date(2024, 5, 1))

    assert (totals.total_weight_kg, totals.total_employees, totals.total_waste_kg) == (0, 0, 0)
    assert time_series([], 10) == []
    assert productivity([], date(2024, 5, 1)) == 0.0
    assert waste_rate(totals) == 0.0


def test_productivity_is_zero_when_nobody_worked() -> None:
    assert productivity([_lot("2024-01-01", 120, 0)], date(2024, 1, 1)) == 0.0


def test_daily_totals_sum_every_lot_of_the_day() -> None:
    records = [
        _lot("2024-03-10", 300, 5, waste=6, idx=1),
        _lot("2024-03-10", 200, 5, waste=4, idx=2),
        _lot("2024-03-11", 999, 9, idx=3),
    ]

    totals = daily_totals(records, date(2024, 3, 10))

    assert totals.total_weight_kg == 500
    assert totals.total_employees == 10
    assert totals.total_waste_kg == 10
    assert totals.record_count == 2
    assert waste_rate(totals) == pytest.approx(0.02)


@pytest.mark.parametrize(
    ("current", "previous", "expected"),
    [
        (100.0, 80.0, Trend.UP),
        (80.0, 100.0, Trend.DOWN),
        (50.0, 50.0, Trend.UP),
        (0.0, 0.0, Trend.UP),
    ],
)
def test_compare_weights_counts_ties_as_up(current: float, previous: float, expected: Trend) -> None:
    assert compare_weights(current, previous) == expected


def test_time_series_keeps_most_recent_days_in_ascending_order() -> None:
    records = [_lot(f"2024-02-{day:02d}", day * 10, 2, idx=day) for day in range(1, 13)]
    records.append(_lot("2024-02-12", 5, 1, idx=99))

    series = time_series(records, 3)

    assert [point.date for point in series] == [date(2024, 2, 10), date(2024, 2, 11), date(2024, 2, 12)]
    assert series[-1].total_weight_kg == 125
    assert series[-1].record_count == 2


@pytest.mark.parametrize("n", [0, -3])
def test_time_series_non_positive_window_is_empty(n: int) -> None:
    assert time_series([_lot("2024-02-01", 10, 1)], n) == []


def test_time_series_shorter_history_returns_every_day() -> None:
    series = time_series([_lot("2024-02-01", 10, 1), _lot("2024-02-03", 20, 1, idx=1)], 10)

    assert [point.date for point in series] == [date(2024, 2, 1), date(2024, 2, 3)]


def test_dashboard_metrics_compares_with_previous_day() -> None:
    records = [_lot("2024-04-01", 400, 8, waste=20), _lot("2024-04-02", 450, 9, waste=9, idx=1)]

    metrics = dashboard_metrics(records, date(2024, 4, 2), days=10)

    assert metrics.totals.total_weight_kg == 450
    assert metrics.productivity == 50.0
    assert metrics.waste_rate == pytest.approx(0.02)
    assert metrics.trend == Trend.UP
    assert metrics.previous_weight_kg == 400
    assert len(metrics.series) == 2


def test_ledger_summary_filters_inclusive_range_and_groups_amounts() -> None:
    records = [
        PrestationProdRecord(id="a", date=date(2024, 6, 1), client_name="Export France", service_type="Triage", quantity_kg=100, total_amount=50),
        PrestationProdRecord(id="b", date=date(2024, 6, 5), client_name="Export France", service_type="Lavage", quantity_kg=200, total_amount=30),
        PrestationProdRecord(id="c", date=date(2024, 6, 10), client_name="Superette Center", service_type="Triage", quantity_kg=50, total_amount=20),
        PrestationProdRecord(id="d", date=date(2024, 6, 11), client_name="Superette Center", service_type="Triage", quantity_kg=70, total_amount=99),
    ]

    summary = ledger_summary(records, category_field="service_type", start=date(2024, 6, 1), end=date(2024, 6, 10))

    assert summary.record_count == 3
    assert summary.total_quantity_kg == 350
    assert summary.total_amount == 100
    assert summary.amount_by_category == {"Triage": 70, "Lavage": 30}
    assert summary.amount_by_client == {"Export France": 80, "Superette Center": 20}


def test_ledger_summary_keeps_values_removed_from_master_data() -> None:
    records = [
        PrestationEtuvageRecord(id="a", date=date(2024, 6, 1), client_name="Ancien Client", product_name="Datte", quantity_kg=10, total_amount=15),
    ]

    summary = ledger_summary(records, category_field="product_name")

    assert summary.amount_by_client == {"Ancien Client": 15}
    assert summary.amount_by_category == {"Datte": 15}


def test_stock_balance_groups_by_item_and_unit_case_insensitively() -> None:
    purchases = [
        PurchaseRecord(id="p1", date=date(2024, 1, 1), item_name="Caisse 10kg", quantity=100, unit="pcs"),
        PurchaseRecord(id="p2", date=date(2024, 1, 2), item_name="caisse 10kg ", quantity=50, unit="PCS"),
        PurchaseRecord(id="p3", date=date(2024, 1, 2), item_name="Engrais", quantity=20, unit="kg"),
    ]
    stock_outs = [
        StockOutRecord(id="s1", date=date(2024, 1, 3), item_name="Caisse 10kg", quantity=30, unit="pcs"),
        StockOutRecord(id="s2", date=date(2024, 1, 3), item_name="Film", quantity=2, unit="rouleau"),
    ]

    balances = {b.item_name: b for b in stock_balance(purchases, stock_outs)}

    assert balances["Caisse 10kg"].quantity_in == 150
    assert balances["Caisse 10kg"].quantity_out == 30
    assert balances["Caisse 10kg"].balance == 120
    assert balances["Engrais"].balance == 20
    assert balances["Film"].balance == -2


def test_first_representable_day_has_no_previous_day() -> None:
    records = [_lot("0001-01-01", 120, 4)]

    assert trend(records, date.min) == Trend.UP
    metrics = dashboard_metrics(records, date.min)
    assert metrics.previous_weight_kg == 0
    assert metrics.totals.total_weight_kg == 120
