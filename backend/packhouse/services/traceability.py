"""Best-effort lot traceability.

Purchases, stock-outs and production lots carry no real foreign keys to each
other. A lot is linked to its inputs and outputs by comparing free-text
attributes (lot number, client, product) inside a date window, so a trace is
a heuristic reconstruction, not a referential guarantee. No match is a normal
outcome and yields empty lists.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from ..schemas import ProductionRecord, PurchaseRecord, StockOutRecord

MATCH_LOT_NUMBER = "lot_number"
MATCH_LOT_PREFIX = "lot_prefix"
MATCH_CLIENT = "client"
MATCH_PRODUCT = "product"
MATCH_DESTINATION = "destination"


@dataclass(frozen=True)
class TracedPurchase:
    purchase: PurchaseRecord
    reasons: tuple[str, ...]


@dataclass(frozen=True)
class TracedStockOut:
    stock_out: StockOutRecord
    reasons: tuple[str, ...]


@dataclass(frozen=True)
class RelatedLot:
    lot: ProductionRecord
    reasons: tuple[str, ...]


@dataclass(frozen=True)
class LotTrace:
    lot: ProductionRecord
    purchases: tuple[TracedPurchase, ...] = ()
    stock_outs: tuple[TracedStockOut, ...] = ()
    related_lots: tuple[RelatedLot, ...] = ()


def normalize_key(value: str | None) -> str:
    return (value or "").strip().lower()


def _same(left: str | None, right: str | None) -> bool:
    # Blank values never link two records.
    a = normalize_key(left)
    return bool(a) and a == normalize_key(right)


def lot_prefix(lot_number: str | None) -> str:
    """Strip a trailing batch sequence: ``LOT-115-2`` -> ``lot-115``.

    Only a numeric last segment is stripped, and only when what remains still
    identifies a batch (contains a digit), so ``LOT-115`` stays ``lot-115``.
    """
    normalized = normalize_key(lot_number)
    head, sep, tail = normalized.rpartition("-")
    if sep and tail.isdigit() and any(ch.isdigit() for ch in head):
        return head
    return normalized


def _newest_first(record) -> tuple[date, int]:
    return record.date, record.timestamp


def _purchase_reasons(lot: ProductionRecord, purchase: PurchaseRecord) -> tuple[str, ...]:
    reasons = []
    if _same(purchase.lot_number, lot.lot_number):
        reasons.append(MATCH_LOT_NUMBER)
    if _same(purchase.client_name, lot.client_name):
        reasons.append(MATCH_CLIENT)
    if _same(purchase.item_name, lot.product_name):
        reasons.append(MATCH_PRODUCT)
    return tuple(reasons)


def _stock_out_reasons(lot: ProductionRecord, stock_out: StockOutRecord) -> tuple[str, ...]:
    if _same(stock_out.lot_number, lot.lot_number):
        return (MATCH_LOT_NUMBER,)
    if _same(stock_out.destination, lot.client_name) and _same(stock_out.item_name, lot.product_name):
        return (MATCH_DESTINATION, MATCH_PRODUCT)
    return ()


def _related_lot_reasons(lot: ProductionRecord, other: ProductionRecord) -> tuple[str, ...]:
    reasons = []
    prefix = lot_prefix(lot.lot_number)
    if prefix and prefix == lot_prefix(other.lot_number):
        reasons.append(MATCH_LOT_PREFIX)
    if _same(other.client_name, lot.client_name):
        reasons.append(MATCH_CLIENT)
    return tuple(reasons)


def _lookback_start(day: date, lookback_days: int | None) -> date | None:
    if lookback_days is None:
        return None
    # Windows reaching past date.min are clamped to it.
    if lookback_days >= (day - date.min).days:
        return date.min
    return day - timedelta(days=lookback_days)


def related_purchases(
    lot: ProductionRecord,
    purchases: Iterable[PurchaseRecord],
    *,
    lookback_days: int | None = None,
) -> tuple[TracedPurchase, ...]:
    """Purchases dated on or before the lot that share an attribute with it."""
    earliest = _lookback_start(lot.date, lookback_days)
    matches = []
    for purchase in purchases:
        if purchase.date > lot.date:
            continue
        if earliest is not None and purchase.date < earliest:
            continue
        reasons = _purchase_reasons(lot, purchase)
        if reasons:
            matches.append(TracedPurchase(purchase=purchase, reasons=reasons))
    matches.sort(key=lambda m: _newest_first(m.purchase), reverse=True)
    return tuple(matches)


def downstream_stock_outs(lot: ProductionRecord, stock_outs: Iterable[StockOutRecord]) -> tuple[TracedStockOut, ...]:
    matches = [
        TracedStockOut(stock_out=stock_out, reasons=reasons)
        for stock_out in stock_outs
        if stock_out.date >= lot.date
        for reasons in [_stock_out_reasons(lot, stock_out)]
        if reasons
    ]
    matches.sort(key=lambda m: _newest_first(m.stock_out), reverse=True)
    return tuple(matches)


def related_lots(lot: ProductionRecord, production: Iterable[ProductionRecord]) -> tuple[RelatedLot, ...]:
    matches = []
    for other in production:
        if other.id == lot.id:
            continue
        reasons = _related_lot_reasons(lot, other)
        if reasons:
            matches.append(RelatedLot(lot=other, reasons=reasons))
    matches.sort(key=lambda m: _newest_first(m.lot), reverse=True)
    return tuple(matches)


def resolve_lot_trace(
    lot: ProductionRecord,
    *,
    purchases: Iterable[PurchaseRecord] = (),
    stock_outs: Iterable[StockOutRecord] = (),
    production: Iterable[ProductionRecord] = (),
    lookback_days: int | None = None,
) -> LotTrace:
    return LotTrace(
        lot=lot,
        purchases=related_purchases(lot, purchases, lookback_days=lookback_days),
        stock_outs=downstream_stock_outs(lot, stock_outs),
        related_lots=related_lots(lot, production),
    )
