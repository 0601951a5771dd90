"""
Boundary Parsers for Fibre Requirement
======================================
Maps raw order payloads (REST JSON or SQL rows) into the typed entities in
models.py. Nothing here raises on malformed data: unparseable numbers become
an invalid ParsedNumber with value 0, missing text becomes None.

Accepted payload variants:
- blend under 'blend_composition' or the older 'shade_fibres' key
- raw cotton under 'raw_cotton_compositions' (list) or the older singular
  'raw_cotton_composition' (object or list)
- fibre category as a plain string or as {'name': ...}
"""
import logging
import math
import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

import pandas as pd

from .models import (
    Fibre,
    FibreComposition,
    Order,
    RawCottonComposition,
    RawCottonOverride,
    Shade,
)

logger = logging.getLogger(__name__)

# Longest leading numeric prefix, the way parseFloat reads "60%" or " 12.5kg"
_NUMERIC_PREFIX = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')


class ParsedNumber(NamedTuple):
    value: float
    valid: bool


INVALID_NUMBER = ParsedNumber(0.0, False)


# ==================== SCALARS ====================

def parse_number(value: Any) -> ParsedNumber:
    """
    Parse a loosely typed numeric value.

    Args:
        value: int, float, Decimal, numeric string, None, NaN, pandas NA...

    Returns:
        ParsedNumber(value, True) for a finite number,
        otherwise ParsedNumber(0.0, False)
    """
    if value is None or isinstance(value, bool):
        return INVALID_NUMBER

    if isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value)
        if not match:
            return INVALID_NUMBER
        number = float(match.group(1))
    else:
        if not pd.api.types.is_scalar(value):
            return INVALID_NUMBER
        try:
            if pd.isna(value):
                return INVALID_NUMBER
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            return INVALID_NUMBER

    if not math.isfinite(number):
        return INVALID_NUMBER

    return ParsedNumber(number, True)


def to_number(value: Any) -> float:
    """Shorthand for parse_number(value).value"""
    return parse_number(value).value


def _optional_number(value: Any) -> Optional[float]:
    parsed = parse_number(value)
    return parsed.value if parsed.valid else None


def parse_text(value: Any) -> Optional[str]:
    """Normalise identifiers and labels; blank or NaN becomes None"""
    if value is None:
        return None
    if not isinstance(value, str) and pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def parse_date(value: Any) -> Optional[date]:
    """Parse a delivery date; anything unreadable becomes None"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return None if pd.isna(value) else value.date()
    if isinstance(value, date):
        return value
    if not pd.api.types.is_scalar(value):
        return None

    try:
        parsed = pd.to_datetime(value, errors='coerce')
    except (TypeError, ValueError, OverflowError):
        return None

    if parsed is None or pd.isna(parsed):
        return None
    return parsed.date()


def _as_mapping(raw: Any) -> Mapping:
    return raw if isinstance(raw, Mapping) else {}


def _as_list(raw: Any) -> List[Any]:
    if raw is None:
        return []
    if isinstance(raw, Mapping):
        return [raw]
    if isinstance(raw, (list, tuple)):
        return list(raw)
    return []


# ==================== ENTITIES ====================

def parse_fibre(raw: Any) -> Fibre:
    data = _as_mapping(raw)

    category = data.get('category')
    if isinstance(category, Mapping):
        category = category.get('name')
    if category is None:
        category = data.get('category_name')

    return Fibre(
        id=parse_text(data.get('id')),
        fibre_code=parse_text(data.get('fibre_code')),
        fibre_name=parse_text(data.get('fibre_name')),
        stock_kg=to_number(data.get('stock_kg')),
        category=parse_text(category),
    )


def parse_fibre_composition(raw: Any) -> FibreComposition:
    data = _as_mapping(raw)
    fibre = parse_fibre(data.get('fibre'))

    return FibreComposition(
        fibre_id=parse_text(data.get('fibre_id')) or fibre.id,
        percentage=to_number(data.get('percentage')),
        fibre=fibre,
    )


def parse_raw_cotton(raw: Any) -> RawCottonComposition:
    data = _as_mapping(raw)

    return RawCottonComposition(
        id=parse_text(data.get('id')),
        percentage=to_number(data.get('percentage')),
        lot_number=parse_text(data.get('lot_number')),
        grade=parse_text(data.get('grade')),
        source=parse_text(data.get('source')),
        notes=parse_text(data.get('notes')),
        stock_kg=_optional_number(data.get('stock_kg')),
    )


def parse_shade(raw: Any) -> Shade:
    if isinstance(raw, Shade):
        return raw

    data = _as_mapping(raw)

    blend = data.get('blend_composition')
    if blend is None:
        blend = data.get('shade_fibres')

    raw_cottons = data.get('raw_cotton_compositions')
    if raw_cottons is None:
        raw_cottons = data.get('raw_cotton_composition')

    return Shade(
        id=parse_text(data.get('id')),
        shade_code=parse_text(data.get('shade_code')),
        blend_composition=tuple(parse_fibre_composition(item) for item in _as_list(blend)),
        raw_cotton_compositions=tuple(parse_raw_cotton(item) for item in _as_list(raw_cottons)),
    )


def parse_order(raw: Any) -> Order:
    """
    Build an Order snapshot from a raw payload.

    Already-parsed Order objects pass through untouched.
    """
    if isinstance(raw, Order):
        return raw

    data = _as_mapping(raw)
    status = parse_text(data.get('status'))

    return Order(
        id=parse_text(data.get('id')),
        order_number=parse_text(data.get('order_number')),
        quantity_kg=to_number(data.get('quantity_kg')),
        realisation=_optional_number(data.get('realisation')),
        delivery_date=parse_date(data.get('delivery_date')),
        status=status.lower() if status else '',
        shade=parse_shade(data.get('shade')),
    )


def parse_orders(raw_orders: Optional[Iterable[Any]]) -> List[Order]:
    if raw_orders is None:
        return []
    return [parse_order(raw) for raw in raw_orders]


def parse_raw_cotton_override(raw: Any, composition_id: Optional[str] = None) -> Optional[RawCottonOverride]:
    """
    Parse one manual raw cotton entry.

    Args:
        raw: dict with stock_kg, lot_number, grade, source, notes (and id)
        composition_id: id to use when the dict itself has none

    Returns:
        RawCottonOverride, or None when no id can be determined
    """
    if isinstance(raw, RawCottonOverride):
        return raw

    data = _as_mapping(raw)
    override_id = parse_text(data.get('id')) or parse_text(composition_id)
    if not override_id:
        return None

    return RawCottonOverride(
        id=override_id,
        stock_kg=_optional_number(data.get('stock_kg')),
        lot_number=parse_text(data.get('lot_number')),
        grade=parse_text(data.get('grade')),
        source=parse_text(data.get('source')),
        notes=parse_text(data.get('notes')),
    )


def split_raw_cotton_overrides(overrides: Any) -> Tuple[Dict[str, RawCottonOverride], List[Any]]:
    """
    Normalise the manual raw cotton side-table.

    Accepts either {composition_id: {...}} or a list of dicts carrying 'id'.
    Insertion order is preserved.

    Returns:
        Tuple of (overrides keyed by composition id, raw entries that carry no id)
    """
    keyed: Dict[str, RawCottonOverride] = {}
    unkeyed: List[Any] = []
    if not overrides:
        return keyed, unkeyed

    if isinstance(overrides, Mapping):
        items = [(key, value) for key, value in overrides.items()]
    else:
        items = [(None, value) for value in _as_list(overrides)]

    for key, value in items:
        override = parse_raw_cotton_override(value, composition_id=key)
        if override is None:
            logger.warning(f"Raw cotton override without id: {value!r}")
            unkeyed.append(value)
            continue
        keyed[override.id] = override

    return keyed, unkeyed


def parse_raw_cotton_overrides(overrides: Any) -> Dict[str, RawCottonOverride]:
    """Overrides keyed by composition id; entries without an id are left out"""
    return split_raw_cotton_overrides(overrides)[0]
