"""
Requirement Calculator
======================
Applies resolved percentages to an order's total quantity.

Quantities are returned unrounded; rounding to 2 dp is a display concern
(formatters.py) and must not happen before ledger subtraction.
"""
from typing import Dict, List, Optional

from .models import Order, RawCottonOverride, Requirement, ResolvedConstituent
from .percentage_resolver import resolve_constituents
from .yield_converter import order_total_qty


def calculate_requirements(total_qty: float,
                           constituents: List[ResolvedConstituent]) -> List[Requirement]:
    """
    Required quantity per constituent.

    Args:
        total_qty: Output of the yield converter
        constituents: Output of the percentage resolver

    Returns:
        One Requirement per constituent; empty when total_qty is 0
    """
    if total_qty <= 0:
        return []

    return [
        Requirement(constituent=constituent, required_qty=(constituent.percentage / 100) * total_qty)
        for constituent in constituents
    ]


def order_requirements(order: Order,
                       raw_cotton_overrides: Optional[Dict[str, RawCottonOverride]] = None
                       ) -> List[Requirement]:
    """Resolve, convert and decompose one order in isolation"""
    total_qty = order_total_qty(order)
    if total_qty <= 0:
        return []
    return calculate_requirements(total_qty, resolve_constituents(order.shade, raw_cotton_overrides))
