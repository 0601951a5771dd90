"""
Percentage Resolver
===================
Flattens a shade's blend composition and raw cotton compositions into a list
of ResolvedConstituent, each with its percentage and the stock figure the
ledger should start from.
"""
import logging
from typing import Dict, List, Optional

from .models import (
    ConstituentKind,
    FibreComposition,
    RawCottonComposition,
    RawCottonOverride,
    ResolvedConstituent,
    Shade,
)

logger = logging.getLogger(__name__)

RAW_COTTON_KEY_PREFIX = "raw_cotton:"


def fibre_key(composition: FibreComposition) -> str:
    """Ledger key for a fibre: its id, else its display label"""
    return composition.fibre_id or composition.fibre.id or composition.fibre.label


def raw_cotton_key(raw_cotton: RawCottonComposition, position: int = 0,
                   shade: Optional[Shade] = None) -> str:
    """
    Ledger key for a raw cotton composition.

    Falls back to the lot number, then to the position within its shade.
    """
    if raw_cotton.id or raw_cotton.lot_number:
        identity = raw_cotton.id or raw_cotton.lot_number
    else:
        scope = (shade.id or shade.shade_code or "") if shade is not None else ""
        identity = f"{scope}#{position}"
    return f"{RAW_COTTON_KEY_PREFIX}{identity}"


def resolve_raw_cotton_stock(raw_cotton: RawCottonComposition,
                             override: Optional[RawCottonOverride] = None) -> float:
    """
    Backend stock when positive, else the manual override, else 0.
    """
    if raw_cotton.stock_kg is not None and raw_cotton.stock_kg > 0:
        return raw_cotton.stock_kg
    if override is not None and override.stock_kg is not None:
        return override.stock_kg
    return 0.0


def resolve_constituents(shade: Shade,
                         raw_cotton_overrides: Optional[Dict[str, RawCottonOverride]] = None
                         ) -> List[ResolvedConstituent]:
    """
    Resolve every constituent of a shade.

    Args:
        shade: Parsed shade snapshot
        raw_cotton_overrides: Manual raw cotton entries keyed by composition id

    Returns:
        Fibres in blend order followed by raw cottons with a positive share
    """
    overrides = raw_cotton_overrides or {}
    resolved: List[ResolvedConstituent] = []

    for composition in shade.blend_composition:
        fibre = composition.fibre
        resolved.append(ResolvedConstituent(
            key=fibre_key(composition),
            kind=ConstituentKind.FIBRE,
            label=fibre.label,
            percentage=composition.percentage,
            stock_source=fibre.stock_kg,
            category=fibre.category,
            fibre=fibre,
        ))

    for position, raw_cotton in enumerate(shade.raw_cotton_compositions):
        if raw_cotton.percentage <= 0:
            continue

        override = overrides.get(raw_cotton.id) if raw_cotton.id else None
        lot_number = raw_cotton.lot_number or (override.lot_number if override else None)

        resolved.append(ResolvedConstituent(
            key=raw_cotton_key(raw_cotton, position, shade),
            kind=ConstituentKind.RAW_COTTON,
            label=lot_number or "RAW COTTON",
            percentage=raw_cotton.percentage,
            stock_source=resolve_raw_cotton_stock(raw_cotton, override),
            lot_number=lot_number,
            grade=raw_cotton.grade or (override.grade if override else None),
            source=raw_cotton.source or (override.source if override else None),
        ))

    return resolved
