"""
Fibre Requirement Engine
========================
One-pass facade over the fibre requirement pipeline:

    parse -> resolve percentages -> yield conversion -> requirements
          -> stock ledger (per order)  +  shortage aggregator (dashboard)

The engine holds no state between calls. Every compute() re-derives the
ledger from the snapshot it is given, so callers can invoke it on every
refresh without caching concerns.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pandas as pd

from .models import (
    OrderFibreBreakdown,
    PendingFiberEntry,
    RawCottonOverride,
)
from .parsers import parse_orders, split_raw_cotton_overrides
from .shortage_aggregator import DISPLAY_DECIMALS, aggregate_pending_fibres
from .stock_ledger import run_stock_ledger

logger = logging.getLogger(__name__)

BREAKDOWN_COLUMNS = [
    'order_id', 'order_number', 'delivery_date', 'total_qty', 'kind',
    'fibre_code', 'percentage', 'required_qty', 'available_stock',
    'available_after', 'shortage', 'usage_band', 'lot_number',
]

PENDING_FIBRE_COLUMNS = ['fibre_code', 'fibre_name', 'available', 'required', 'shortfall', 'category']


@dataclass
class FibreRequirementResult:
    """Output of one computation pass"""
    breakdowns: List[OrderFibreBreakdown] = field(default_factory=list)
    pending_fibres: List[PendingFiberEntry] = field(default_factory=list)
    unmatched_overrides: List[RawCottonOverride] = field(default_factory=list)
    unkeyed_overrides: List[Any] = field(default_factory=list)

    def breakdown_for(self, order_id: Any) -> Optional[OrderFibreBreakdown]:
        key = None if order_id is None else str(order_id)
        return next((item for item in self.breakdowns if item.order_id == key), None)

    @property
    def orders_with_shortage(self) -> List[OrderFibreBreakdown]:
        return [item for item in self.breakdowns if item.has_shortage]

    def breakdown_frame(self) -> pd.DataFrame:
        """One row per (order, constituent), quantities rounded to 2 dp"""
        rows = []
        for breakdown in self.breakdowns:
            for line in breakdown.fibres + breakdown.raw_cottons:
                rows.append({
                    'order_id': breakdown.order_id,
                    'order_number': breakdown.order_number,
                    'delivery_date': breakdown.delivery_date,
                    'total_qty': breakdown.total_qty,
                    'kind': line.kind.value,
                    'fibre_code': line.fibre_code,
                    'percentage': line.percentage,
                    'required_qty': line.required_qty,
                    'available_stock': line.available_stock,
                    'available_after': line.available_after,
                    'shortage': line.shortage,
                    'usage_band': line.usage_band.value,
                    'lot_number': line.lot_number,
                })

        df = pd.DataFrame(rows, columns=BREAKDOWN_COLUMNS)
        qty_columns = ['total_qty', 'required_qty', 'available_stock', 'available_after']
        df[qty_columns] = df[qty_columns].astype(float).round(DISPLAY_DECIMALS)
        return df

    def pending_fibres_frame(self) -> pd.DataFrame:
        rows = [
            {column: getattr(entry, column) for column in PENDING_FIBRE_COLUMNS}
            for entry in self.pending_fibres
        ]
        return pd.DataFrame(rows, columns=PENDING_FIBRE_COLUMNS)


class FibreRequirementEngine:
    """
    Main engine for fibre requirement and stock allocation views
    """

    def __init__(self, shortages_only: bool = False):
        # Dashboard card shows only fibres that run short
        self.shortages_only = shortages_only

    def compute(self,
                orders: Optional[Iterable[Any]],
                raw_cotton_overrides: Any = None,
                opening_stock: Optional[Mapping[str, Any]] = None) -> FibreRequirementResult:
        """
        Run the full pipeline on one snapshot.

        Args:
            orders: Raw order dicts or parsed Order objects (any status)
            raw_cotton_overrides: Manual raw cotton entries, either
                {composition_id: {...}} or [{'id': ..., ...}]
            opening_stock: Optional starting stock per fibre id for the ledger

        Returns:
            FibreRequirementResult with per-order breakdowns, the pending
            fibres summary, overrides that matched no composition and
            override entries that carry no composition id
        """
        parsed_orders = parse_orders(orders)
        overrides, unkeyed = split_raw_cotton_overrides(raw_cotton_overrides)

        breakdowns = run_stock_ledger(parsed_orders, overrides, opening_stock)
        pending_fibres = aggregate_pending_fibres(parsed_orders, shortages_only=self.shortages_only)
        unmatched = self._unmatched_overrides(parsed_orders, overrides)

        if unmatched:
            logger.debug(f"{len(unmatched)} raw cotton override(s) without a matching composition")

        return FibreRequirementResult(
            breakdowns=breakdowns,
            pending_fibres=pending_fibres,
            unmatched_overrides=unmatched,
            unkeyed_overrides=unkeyed,
        )

    @staticmethod
    def _unmatched_overrides(orders, overrides: Dict[str, RawCottonOverride]) -> List[RawCottonOverride]:
        if not overrides:
            return []

        known_ids = {
            raw_cotton.id
            for order in orders if order.is_open
            for raw_cotton in order.shade.raw_cotton_compositions
            if raw_cotton.id
        }
        return [override for override_id, override in overrides.items() if override_id not in known_ids]


def compute_fibre_requirements(orders: Optional[Iterable[Any]],
                               raw_cotton_overrides: Any = None,
                               opening_stock: Optional[Mapping[str, Any]] = None,
                               shortages_only: bool = False) -> FibreRequirementResult:
    """Convenience wrapper around FibreRequirementEngine.compute()"""
    engine = FibreRequirementEngine(shortages_only=shortages_only)
    return engine.compute(orders, raw_cotton_overrides, opening_stock)
