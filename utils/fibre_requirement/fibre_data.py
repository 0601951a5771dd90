"""
Fibre Order Data Repository
===========================
Read-only snapshot of open orders for the fibre requirement engine:
- orders with their shade
- shade blend joined to current fibre stock and category
- raw cotton compositions per shade

The snapshot is re-read on every call. Stock changes (realisation updates,
new raw cotton lots) are written elsewhere; the next call simply sees them.
"""
import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import bindparam, text

from .models import OPEN_STATUSES

logger = logging.getLogger(__name__)


ORDERS_QUERY = text("""
    SELECT
        o.id,
        o.order_number,
        o.quantity_kg,
        o.realisation,
        o.delivery_date,
        o.status,
        s.id AS shade_id,
        s.shade_code
    FROM orders o
    LEFT JOIN shades s ON s.id = o.shade_id
    WHERE o.status IN :statuses
    ORDER BY o.delivery_date ASC, o.id ASC
""").bindparams(bindparam('statuses', expanding=True))

BLEND_QUERY = text("""
    SELECT
        sf.shade_id,
        sf.fibre_id,
        sf.percentage,
        f.fibre_code,
        f.fibre_name,
        f.stock_kg,
        c.name AS category_name
    FROM shade_fibres sf
    LEFT JOIN fibres f ON f.id = sf.fibre_id
    LEFT JOIN fibre_categories c ON c.id = f.category_id
    WHERE sf.shade_id IN :shade_ids
    ORDER BY sf.shade_id ASC, sf.id ASC
""").bindparams(bindparam('shade_ids', expanding=True))

RAW_COTTON_QUERY = text("""
    SELECT
        rc.id,
        rc.shade_id,
        rc.lot_number,
        rc.percentage,
        rc.grade,
        rc.source,
        rc.notes,
        rc.stock_kg
    FROM raw_cotton_compositions rc
    WHERE rc.shade_id IN :shade_ids
    ORDER BY rc.shade_id ASC, rc.id ASC
""").bindparams(bindparam('shade_ids', expanding=True))


def assemble_order_snapshot(order_rows: Iterable[Dict[str, Any]],
                            blend_rows: Iterable[Dict[str, Any]],
                            raw_cotton_rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Nest flat query rows into the order payload shape the parsers accept.

    Args:
        order_rows: Rows from ORDERS_QUERY
        blend_rows: Rows from BLEND_QUERY
        raw_cotton_rows: Rows from RAW_COTTON_QUERY

    Returns:
        List of order dicts with an embedded shade
    """
    blends = defaultdict(list)
    for row in blend_rows:
        blends[row['shade_id']].append({
            'fibre_id': row.get('fibre_id'),
            'percentage': row.get('percentage'),
            'fibre': {
                'id': row.get('fibre_id'),
                'fibre_code': row.get('fibre_code'),
                'fibre_name': row.get('fibre_name'),
                'stock_kg': row.get('stock_kg'),
                'category': row.get('category_name'),
            },
        })

    raw_cottons = defaultdict(list)
    for row in raw_cotton_rows:
        raw_cottons[row['shade_id']].append({
            'id': row.get('id'),
            'lot_number': row.get('lot_number'),
            'percentage': row.get('percentage'),
            'grade': row.get('grade'),
            'source': row.get('source'),
            'notes': row.get('notes'),
            'stock_kg': row.get('stock_kg'),
        })

    orders = []
    for row in order_rows:
        shade_id = row.get('shade_id')
        orders.append({
            'id': row.get('id'),
            'order_number': row.get('order_number'),
            'quantity_kg': row.get('quantity_kg'),
            'realisation': row.get('realisation'),
            'delivery_date': row.get('delivery_date'),
            'status': row.get('status'),
            'shade': {
                'id': shade_id,
                'shade_code': row.get('shade_code'),
                'blend_composition': list(blends.get(shade_id, [])),
                'raw_cotton_compositions': list(raw_cottons.get(shade_id, [])),
            },
        })

    return orders


class FibreOrderData:
    """Repository for the order snapshot used by fibre requirement views"""

    def __init__(self, engine=None):
        if engine is None:
            from utils.db import get_db_engine
            engine = get_db_engine()
        self.engine = engine

    def get_order_snapshot(self, statuses: Optional[Sequence[str]] = None) -> List[Dict[str, Any]]:
        """
        Load orders with shade blend, fibre stock and raw cotton.

        Args:
            statuses: Order statuses to include (default: pending, in_progress)

        Returns:
            List of order dicts, empty on error
        """
        statuses = list(statuses or OPEN_STATUSES)

        try:
            with self.engine.connect() as conn:
                order_rows = [
                    dict(row._mapping)
                    for row in conn.execute(ORDERS_QUERY, {'statuses': statuses})
                ]
                if not order_rows:
                    return []

                shade_ids = sorted({row['shade_id'] for row in order_rows if row.get('shade_id') is not None})
                blend_rows = []
                raw_cotton_rows = []
                if shade_ids:
                    blend_rows = [
                        dict(row._mapping)
                        for row in conn.execute(BLEND_QUERY, {'shade_ids': shade_ids})
                    ]
                    raw_cotton_rows = [
                        dict(row._mapping)
                        for row in conn.execute(RAW_COTTON_QUERY, {'shade_ids': shade_ids})
                    ]

            logger.info(f"Loaded order snapshot: {len(order_rows)} orders, {len(shade_ids)} shades")
            return assemble_order_snapshot(order_rows, blend_rows, raw_cotton_rows)

        except Exception as e:
            logger.error(f"Error loading order snapshot: {e}")
            return []
