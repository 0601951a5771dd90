"""
Fibre Requirement Formatters
============================
Display helpers for breakdowns and the pending fibres summary.
All quantities are shown with 2 decimal places; orders whose realisation is
not set show an em dash instead of a number.
"""
import logging
from datetime import date
from typing import Any, Optional, Union

import pandas as pd

from .models import UsageBand
from .parsers import parse_date, parse_number

logger = logging.getLogger(__name__)

NOT_COMPUTABLE = "—"


def _app_setting(key: str, default: Any) -> Any:
    """Display setting from the app config, loaded on first use"""
    from utils.config import config
    return config.get_app_setting(key, default)


# ==================== Number Formatting ====================

def format_kg(value: Any, decimals: Optional[int] = None, show_unit: bool = True) -> str:
    """
    Format a quantity in kilograms.

    Args:
        value: Quantity (None or non-numeric renders as an em dash)
        decimals: Number of decimal places (default: DISPLAY_DECIMALS setting)
        show_unit: Append " kg"

    Returns:
        Formatted string like "1,250.00 kg"
    """
    parsed = parse_number(value)
    if not parsed.valid:
        return NOT_COMPUTABLE

    if decimals is None:
        decimals = _app_setting('DISPLAY_DECIMALS', 2)
    formatted = f"{parsed.value:,.{decimals}f}"
    return f"{formatted} kg" if show_unit else formatted


def format_total_qty(total_qty: Any) -> str:
    """Total raw material quantity; 0 means realisation is missing"""
    parsed = parse_number(total_qty)
    if not parsed.valid or parsed.value <= 0:
        return NOT_COMPUTABLE
    return format_kg(parsed.value)


def format_realisation(value: Any, decimals: int = 1) -> str:
    parsed = parse_number(value)
    if not parsed.valid or parsed.value <= 0:
        return NOT_COMPUTABLE
    return f"{parsed.value:.{decimals}f}%"


def format_percentage(value: Any, decimals: int = 1) -> str:
    parsed = parse_number(value)
    if not parsed.valid:
        return NOT_COMPUTABLE
    return f"{parsed.value:.{decimals}f}%"


# ==================== Bands & Badges ====================

USAGE_BAND_STYLES = {
    UsageBand.CRITICAL: ('#ef4444', 'Critical'),  # Red
    UsageBand.WARNING: ('#f59e0b', 'Warning'),    # Amber
    UsageBand.OK: ('#22c55e', 'OK'),              # Green
}


def format_usage_band(band: Union[UsageBand, str]) -> str:
    """
    Format usage band as colored badge.

    Args:
        band: UsageBand or its value ('ok', 'warning', 'critical')

    Returns:
        HTML badge string
    """
    try:
        band = UsageBand(band) if not isinstance(band, UsageBand) else band
    except ValueError:
        logger.debug(f"Unknown usage band: {band}")
        return NOT_COMPUTABLE

    color, label = USAGE_BAND_STYLES[band]
    return f'<span style="background:{color}; color:white; padding:2px 8px; border-radius:4px; font-size:11px;">{label}</span>'


def classify_stock_level(available_kg: Any, low_threshold: Optional[float] = None) -> str:
    """
    Stock colouring for the pending fibres table.

    low_threshold defaults to the LOW_STOCK_THRESHOLD_KG setting.

    Returns:
        'empty' (<= 0), 'low' (< low_threshold) or 'healthy'
    """
    if low_threshold is None:
        low_threshold = _app_setting('LOW_STOCK_THRESHOLD_KG', 20)

    available = parse_number(available_kg).value
    if available <= 0:
        return 'empty'
    if available < low_threshold:
        return 'low'
    return 'healthy'


def format_shortage_flag(shortage: bool) -> str:
    return "🔴 Short" if shortage else "🟢 OK"


# ==================== Labels & Dates ====================

def format_raw_cotton_label(lot_number: Optional[str] = None) -> str:
    return f"RAW COTTON ({lot_number})" if lot_number else "RAW COTTON"


def format_delivery_countdown(delivery_date: Any, today: Optional[date] = None) -> str:
    """
    Days remaining until delivery.

    Args:
        delivery_date: date, datetime or ISO string
        today: Reference date (defaults to today in the TIMEZONE setting)

    Returns:
        "N days left", "N days overdue", "Due today" or an em dash
    """
    target = parse_date(delivery_date)
    if target is None:
        return NOT_COMPUTABLE

    if today is None:
        today = pd.Timestamp.now(tz=_app_setting('TIMEZONE', 'Asia/Kolkata')).date()
    days = (target - today).days

    if days > 0:
        return f"{days} days left"
    if days < 0:
        return f"{abs(days)} days overdue"
    return "Due today"


def format_delivery_date(value: Any, format_str: str = "%d %b %Y") -> str:
    target = parse_date(value)
    if target is None:
        return NOT_COMPUTABLE
    return target.strftime(format_str)


def format_breakdown_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    Display copy of FibreRequirementResult.breakdown_frame().

    Quantities become "x.xx kg" strings, raw cotton rows get their lot label
    and booleans become shortage flags.
    """
    if df is None or df.empty:
        return pd.DataFrame() if df is None else df.copy()

    display_df = df.copy()
    for column in ['total_qty', 'required_qty', 'available_stock', 'available_after']:
        display_df[column] = display_df[column].apply(format_kg)

    raw_mask = display_df['kind'] == 'raw_cotton'
    display_df.loc[raw_mask, 'fibre_code'] = display_df.loc[raw_mask, 'lot_number'].apply(
        lambda lot: format_raw_cotton_label(lot if isinstance(lot, str) else None)
    )
    display_df['percentage'] = display_df['percentage'].apply(format_percentage)
    display_df['shortage'] = display_df['shortage'].apply(format_shortage_flag)
    display_df['delivery_date'] = display_df['delivery_date'].apply(format_delivery_date)
    return display_df
