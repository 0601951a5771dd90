"""
Stock Ledger
============
Sequential fibre allocation across open orders.

Open orders (pending / in_progress) are walked in ascending delivery date;
ties keep their input order. Every fibre keeps one running balance for the
pass:

- the first order touching a fibre starts from the fibre's reported stock
- each later order starts from the previous order's balance after depletion
- balances are never clamped, so a negative balance carries the shortage
  forward to the next consumer

Raw cotton runs through the same ledger under its own keys and is reported
separately. A fresh ledger is built on every call; nothing is memoised.
"""
import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .models import (
    ConstituentKind,
    FibreBreakdownLine,
    Order,
    OrderFibreBreakdown,
    RawCottonOverride,
    Requirement,
    StockLedgerEntry,
    UsageBand,
)
from .parsers import parse_order, to_number
from .percentage_resolver import resolve_constituents
from .requirement_calculator import calculate_requirements
from .yield_converter import order_total_qty

logger = logging.getLogger(__name__)

# Exact cut-offs; comparisons are strict
CRITICAL_RATIO = 1.0
WARNING_RATIO = 0.8


def classify_usage(required_qty: float, available_before: float) -> UsageBand:
    """
    Band a requirement against the stock left before it.

    ratio = required / (available_before or 1)
    ratio > 1 -> critical, ratio > 0.8 -> warning, otherwise ok
    """
    ratio = required_qty / (available_before or 1)
    if ratio > CRITICAL_RATIO:
        return UsageBand.CRITICAL
    if ratio > WARNING_RATIO:
        return UsageBand.WARNING
    return UsageBand.OK


def delivery_priority(order: Order) -> Tuple[bool, date]:
    """Sort key: earliest delivery first, orders without a date last"""
    if order.delivery_date is None:
        return (True, date.max)
    return (False, order.delivery_date)


def sort_by_delivery(orders: Iterable[Order]) -> List[Order]:
    # sorted() is stable: equal delivery dates keep input order
    return sorted(orders, key=delivery_priority)


class StockLedger:
    """Running per-fibre balance for a single computation pass"""

    def __init__(self, opening_stock: Optional[Mapping[str, Any]] = None):
        self._opening_stock = {
            str(key): to_number(value) for key, value in (opening_stock or {}).items()
        }
        self._balances: Dict[str, float] = {}

    def post(self, requirement: Requirement) -> StockLedgerEntry:
        """Deplete the balance for one requirement and return the snapshot"""
        key = requirement.key

        if key in self._balances:
            available_before = self._balances[key]
        else:
            available_before = self._opening_stock.get(key, requirement.constituent.stock_source)

        available_after = available_before - requirement.required_qty
        self._balances[key] = available_after

        return StockLedgerEntry(
            fibre_id=key,
            available_before=available_before,
            required_qty=requirement.required_qty,
            available_after=available_after,
        )

    def balance(self, key: str) -> Optional[float]:
        return self._balances.get(key)

    @property
    def balances(self) -> Dict[str, float]:
        return dict(self._balances)


def _breakdown_line(requirement: Requirement, entry: StockLedgerEntry) -> FibreBreakdownLine:
    constituent = requirement.constituent
    return FibreBreakdownLine(
        key=constituent.key,
        kind=constituent.kind,
        fibre_code=constituent.label,
        percentage=constituent.percentage,
        required_qty=entry.required_qty,
        available_stock=entry.available_before,
        available_after=entry.available_after,
        shortage=entry.shortage,
        usage_band=classify_usage(entry.required_qty, entry.available_before),
        lot_number=constituent.lot_number,
        grade=constituent.grade,
        source=constituent.source,
    )


def run_stock_ledger(orders: Iterable[Any],
                     raw_cotton_overrides: Optional[Dict[str, RawCottonOverride]] = None,
                     opening_stock: Optional[Mapping[str, Any]] = None
                     ) -> List[OrderFibreBreakdown]:
    """
    Allocate fibre stock across open orders in delivery-date order.

    Args:
        orders: Order snapshots (any status; closed orders are skipped)
        raw_cotton_overrides: Manual raw cotton entries keyed by composition id
        opening_stock: Optional starting stock per ledger key, overriding the
            stock embedded in the orders

    Returns:
        One OrderFibreBreakdown per open order, in priority order
    """
    open_orders = [order for order in (parse_order(raw) for raw in orders) if order.is_open]
    ledger = StockLedger(opening_stock)
    breakdowns: List[OrderFibreBreakdown] = []

    for order in sort_by_delivery(open_orders):
        total_qty = order_total_qty(order)
        breakdown = OrderFibreBreakdown(
            order_id=order.id,
            order_number=order.order_number,
            delivery_date=order.delivery_date,
            quantity_kg=order.quantity_kg,
            realisation=order.realisation,
            total_qty=total_qty,
        )

        if total_qty <= 0:
            logger.debug(f"Order {order.order_number or order.id}: realisation not set, skipped in ledger")
            breakdowns.append(breakdown)
            continue

        constituents = resolve_constituents(order.shade, raw_cotton_overrides)
        for requirement in calculate_requirements(total_qty, constituents):
            line = _breakdown_line(requirement, ledger.post(requirement))
            if line.kind is ConstituentKind.RAW_COTTON:
                breakdown.raw_cottons.append(line)
            else:
                breakdown.fibres.append(line)

        breakdowns.append(breakdown)

    logger.debug(
        f"Stock ledger: {len(breakdowns)} open orders, "
        f"{len(ledger.balances)} fibres tracked"
    )
    return breakdowns
