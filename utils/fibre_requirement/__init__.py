"""
Fibre Requirement Module
========================
Fibre requirement & stock allocation engine for open yarn orders.

Components:
- parsers: Raw payload -> typed Order / Shade snapshots
- percentage_resolver: Blend + raw cotton percentages and stock sources
- yield_converter: Order quantity -> total raw material via realisation %
- requirement_calculator: Required kg per constituent
- stock_ledger: Delivery-date ordered depletion of shared fibre stock
- shortage_aggregator: Fibre-keyed dashboard summary
- engine: One-pass facade with DataFrame views
- formatters: Display helpers
- validators: Realisation update validation and payload
- fibre_data: Read-only order snapshot queries
"""

from .models import (
    OrderStatus,
    UsageBand,
    ConstituentKind,
    Fibre,
    FibreComposition,
    RawCottonComposition,
    RawCottonOverride,
    Shade,
    Order,
    StockLedgerEntry,
    FibreBreakdownLine,
    OrderFibreBreakdown,
    PendingFiberEntry,
)
from .parsers import (
    parse_number,
    parse_order,
    parse_orders,
    parse_raw_cotton_overrides,
    split_raw_cotton_overrides,
)
from .percentage_resolver import resolve_constituents
from .yield_converter import compute_total_qty
from .requirement_calculator import calculate_requirements, order_requirements
from .stock_ledger import StockLedger, classify_usage, run_stock_ledger
from .shortage_aggregator import aggregate_pending_fibres
from .engine import FibreRequirementEngine, FibreRequirementResult, compute_fibre_requirements
from .validators import RealisationUpdateValidator
from .fibre_data import FibreOrderData, assemble_order_snapshot
from .formatters import (
    format_kg,
    format_total_qty,
    format_realisation,
    format_usage_band,
    classify_stock_level,
    format_raw_cotton_label,
    format_delivery_countdown,
    format_breakdown_frame,
)

__all__ = [
    # Models
    'OrderStatus',
    'UsageBand',
    'ConstituentKind',
    'Fibre',
    'FibreComposition',
    'RawCottonComposition',
    'RawCottonOverride',
    'Shade',
    'Order',
    'StockLedgerEntry',
    'FibreBreakdownLine',
    'OrderFibreBreakdown',
    'PendingFiberEntry',

    # Pipeline
    'parse_number',
    'parse_order',
    'parse_orders',
    'parse_raw_cotton_overrides',
    'split_raw_cotton_overrides',
    'resolve_constituents',
    'compute_total_qty',
    'calculate_requirements',
    'order_requirements',
    'StockLedger',
    'classify_usage',
    'run_stock_ledger',
    'aggregate_pending_fibres',
    'FibreRequirementEngine',
    'FibreRequirementResult',
    'compute_fibre_requirements',

    # Validation
    'RealisationUpdateValidator',

    # Data
    'FibreOrderData',
    'assemble_order_snapshot',

    # Formatters
    'format_kg',
    'format_total_qty',
    'format_realisation',
    'format_usage_band',
    'classify_stock_level',
    'format_raw_cotton_label',
    'format_delivery_countdown',
    'format_breakdown_frame',
]

__version__ = '1.0.0'
