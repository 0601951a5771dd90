"""
Yield Converter
===============
Order quantity -> total raw material quantity through the realisation %.

    total_qty = quantity_kg / (realisation / 100)

Realisation above 100 is a yield gain and is accepted. Missing, zero,
negative or non-numeric realisation leaves the order not yet computable
(total_qty = 0). Always recomputed; realisation can change at any time.
"""
import math
from typing import Any, Optional

from .models import Order
from .parsers import parse_number


def compute_total_qty(quantity_kg: Any, realisation: Any) -> float:
    """
    Convert an order quantity into total raw material quantity.

    Args:
        quantity_kg: Ordered yarn quantity
        realisation: Realisation percentage (e.g. 80 for 80%)

    Returns:
        Total raw material quantity, or 0.0 when realisation is unusable
    """
    parsed_realisation = parse_number(realisation)
    if not parsed_realisation.valid or parsed_realisation.value <= 0:
        return 0.0

    quantity = parse_number(quantity_kg).value
    total_qty = quantity / (parsed_realisation.value / 100)
    return total_qty if math.isfinite(total_qty) else 0.0


def order_total_qty(order: Order) -> float:
    return compute_total_qty(order.quantity_kg, order.realisation)


def is_computable(realisation: Optional[Any]) -> bool:
    """True when realisation is a finite number above zero"""
    parsed = parse_number(realisation)
    return parsed.valid and parsed.value > 0
