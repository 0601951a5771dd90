"""
Fibre Requirement Models
========================
Typed entities for the fibre requirement & stock allocation engine.

Input entities (Order, Shade, compositions) are frozen snapshots built by
parsers.py from loosely typed payloads. Output entities (breakdown lines,
pending fibre entries) are rebuilt on every computation pass.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional, Tuple


class OrderStatus(Enum):
    """Order lifecycle states"""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DISPATCHED = "dispatched"


# Orders in these states compete for fibre stock
OPEN_STATUSES = (OrderStatus.PENDING.value, OrderStatus.IN_PROGRESS.value)

UNKNOWN_LABEL = "Unknown"
DEFAULT_CATEGORY = "NA"


class ConstituentKind(Enum):
    FIBRE = "fibre"
    RAW_COTTON = "raw_cotton"


class UsageBand(Enum):
    """Usage-ratio band driving the colour of a fibre pill"""
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"


# ==================== INPUT ENTITIES ====================

@dataclass(frozen=True)
class Fibre:
    """Snapshot of a fibre master record with its current stock"""
    id: Optional[str]
    fibre_code: Optional[str] = None
    fibre_name: Optional[str] = None
    stock_kg: float = 0.0
    category: Optional[str] = None

    @property
    def label(self) -> str:
        return self.fibre_code or self.fibre_name or UNKNOWN_LABEL


@dataclass(frozen=True)
class FibreComposition:
    fibre_id: Optional[str]
    percentage: float
    fibre: Fibre


@dataclass(frozen=True)
class RawCottonComposition:
    """
    Raw cotton share of a shade.

    stock_kg is None when the backend did not report a figure; a manual
    override may then supply it per order.
    """
    id: Optional[str]
    percentage: float
    lot_number: Optional[str] = None
    grade: Optional[str] = None
    source: Optional[str] = None
    notes: Optional[str] = None
    stock_kg: Optional[float] = None


@dataclass(frozen=True)
class Shade:
    id: Optional[str]
    shade_code: Optional[str] = None
    blend_composition: Tuple[FibreComposition, ...] = ()
    raw_cotton_compositions: Tuple[RawCottonComposition, ...] = ()


@dataclass(frozen=True)
class Order:
    id: Optional[str]
    order_number: Optional[str]
    quantity_kg: float
    realisation: Optional[float]
    delivery_date: Optional[date]
    status: str
    shade: Shade

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES


@dataclass(frozen=True)
class RawCottonOverride:
    """Manual raw cotton details keyed by raw cotton composition id"""
    id: str
    stock_kg: Optional[float] = None
    lot_number: Optional[str] = None
    grade: Optional[str] = None
    source: Optional[str] = None
    notes: Optional[str] = None


# ==================== INTERMEDIATE RESULTS ====================

@dataclass(frozen=True)
class ResolvedConstituent:
    """One blend constituent with its normalised percentage and stock source"""
    key: str
    kind: ConstituentKind
    label: str
    percentage: float
    stock_source: float
    lot_number: Optional[str] = None
    grade: Optional[str] = None
    source: Optional[str] = None
    category: Optional[str] = None
    fibre: Optional[Fibre] = None


@dataclass(frozen=True)
class Requirement:
    constituent: ResolvedConstituent
    required_qty: float

    @property
    def key(self) -> str:
        return self.constituent.key

    @property
    def label(self) -> str:
        return self.constituent.label


@dataclass(frozen=True)
class StockLedgerEntry:
    """Running-balance snapshot for one (order, constituent) pair"""
    fibre_id: str
    available_before: float
    required_qty: float
    available_after: float

    @property
    def shortage(self) -> bool:
        return self.available_before < self.required_qty


# ==================== OUTPUTS ====================

@dataclass(frozen=True)
class FibreBreakdownLine:
    """Per-order view of one constituent after ledger depletion"""
    key: str
    kind: ConstituentKind
    fibre_code: str
    percentage: float
    required_qty: float
    available_stock: float
    available_after: float
    shortage: bool
    usage_band: UsageBand
    lot_number: Optional[str] = None
    grade: Optional[str] = None
    source: Optional[str] = None


@dataclass
class OrderFibreBreakdown:
    order_id: Optional[str]
    order_number: Optional[str]
    delivery_date: Optional[date]
    quantity_kg: float
    realisation: Optional[float]
    total_qty: float
    fibres: List[FibreBreakdownLine] = field(default_factory=list)
    raw_cottons: List[FibreBreakdownLine] = field(default_factory=list)

    @property
    def is_computable(self) -> bool:
        return self.total_qty > 0

    @property
    def has_shortage(self) -> bool:
        return any(line.shortage for line in self.fibres + self.raw_cottons)


@dataclass(frozen=True)
class PendingFiberEntry:
    """Dashboard row: total demand for a fibre against its undepleted stock"""
    fibre_code: str
    fibre_name: str
    available: float
    required: float
    shortfall: float
    category: str
