"""
Shortage Aggregator
===================
Dashboard "pending fibres" summary.

Answers "across every open order, is there enough of fibre X in total?".
Each order's requirement is computed in isolation and compared to the fibre's
current reported stock, NOT to the depleted balance the stock ledger works
with. A fibre can therefore show no aggregate shortfall while a low priority
order is still flagged short in its own breakdown.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from .models import DEFAULT_CATEGORY, ConstituentKind, PendingFiberEntry
from .parsers import parse_order
from .percentage_resolver import resolve_constituents
from .requirement_calculator import calculate_requirements
from .yield_converter import order_total_qty

logger = logging.getLogger(__name__)

DISPLAY_DECIMALS = 2


@dataclass
class FibreDemand:
    """Unrounded running total for one fibre"""
    fibre_code: str
    fibre_name: str
    category: str
    available: float
    required: float = 0.0

    @property
    def shortfall(self) -> float:
        return max(0.0, self.required - self.available)

    def to_entry(self) -> PendingFiberEntry:
        return PendingFiberEntry(
            fibre_code=self.fibre_code,
            fibre_name=self.fibre_name,
            available=round(self.available, DISPLAY_DECIMALS),
            required=round(self.required, DISPLAY_DECIMALS),
            shortfall=round(self.shortfall, DISPLAY_DECIMALS),
            category=self.category,
        )


def summarize_fibre_demand(orders: Iterable[Any]) -> Dict[str, FibreDemand]:
    """
    Total fibre requirement of all open orders, keyed by fibre.

    Args:
        orders: Orders of any status; only pending / in_progress count

    Returns:
        Dict fibre key -> FibreDemand (insertion order = first appearance)
    """
    demand: Dict[str, FibreDemand] = {}

    for order in (parse_order(raw) for raw in orders):
        if not order.is_open:
            continue

        total_qty = order_total_qty(order)
        constituents = [
            constituent for constituent in resolve_constituents(order.shade)
            if constituent.kind is ConstituentKind.FIBRE
        ]

        for requirement in calculate_requirements(total_qty, constituents):
            key = requirement.key
            if key not in demand:
                fibre = requirement.constituent.fibre
                demand[key] = FibreDemand(
                    fibre_code=fibre.fibre_code or fibre.label,
                    fibre_name=fibre.fibre_name or fibre.label,
                    category=requirement.constituent.category or DEFAULT_CATEGORY,
                    available=requirement.constituent.stock_source,
                )
            demand[key].required += requirement.required_qty

    return demand


def aggregate_pending_fibres(orders: Iterable[Any], shortages_only: bool = False) -> List[PendingFiberEntry]:
    """
    Build the pending fibres summary.

    Args:
        orders: Orders of any status
        shortages_only: Keep only fibres with a positive shortfall

    Returns:
        List of PendingFiberEntry (unordered; sorting is up to the caller)
    """
    demand = summarize_fibre_demand(orders)
    entries = [item.to_entry() for item in demand.values() if not shortages_only or item.shortfall > 0]

    logger.debug(f"Pending fibres: {len(demand)} fibres in demand, {len(entries)} reported")
    return entries
