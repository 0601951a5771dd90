"""Tests for display formatting helpers"""
from datetime import date

import pandas as pd
import pytest

from conftest import make_blend, make_order
from utils.fibre_requirement import compute_fibre_requirements
from utils.fibre_requirement.formatters import (
    NOT_COMPUTABLE,
    classify_stock_level,
    format_breakdown_frame,
    format_delivery_countdown,
    format_delivery_date,
    format_kg,
    format_percentage,
    format_raw_cotton_label,
    format_realisation,
    format_shortage_flag,
    format_total_qty,
    format_usage_band,
)
from utils.fibre_requirement.models import UsageBand


class TestNumberFormatting:

    def test_format_kg(self):
        assert format_kg(1250) == "1,250.00 kg"
        assert format_kg('12.346') == "12.35 kg"
        assert format_kg(-50, show_unit=False) == "-50.00"
        assert format_kg(3.14159, decimals=3) == "3.142 kg"

    def test_format_kg_invalid(self):
        assert format_kg(None) == NOT_COMPUTABLE
        assert format_kg('abc') == NOT_COMPUTABLE

    def test_total_qty_zero_is_not_computable(self):
        assert format_total_qty(0) == NOT_COMPUTABLE
        assert format_total_qty(None) == NOT_COMPUTABLE
        assert format_total_qty(1250) == "1,250.00 kg"

    def test_realisation(self):
        assert format_realisation(82.5) == "82.5%"
        assert format_realisation(None) == NOT_COMPUTABLE
        assert format_realisation(0) == NOT_COMPUTABLE
        assert format_realisation(110) == "110.0%"

    def test_percentage(self):
        assert format_percentage('60') == "60.0%"
        assert format_percentage(None) == NOT_COMPUTABLE


class TestBands:

    @pytest.mark.parametrize("band, label", [
        (UsageBand.OK, 'OK'),
        (UsageBand.WARNING, 'Warning'),
        ('critical', 'Critical'),
    ])
    def test_usage_band_badge(self, band, label):
        badge = format_usage_band(band)
        assert badge.startswith('<span')
        assert f'>{label}</span>' in badge

    def test_unknown_band(self):
        assert format_usage_band('purple') == NOT_COMPUTABLE

    @pytest.mark.parametrize("available, level", [
        (0, 'empty'), (-10, 'empty'), (None, 'empty'),
        (5, 'low'), (19.99, 'low'),
        (20, 'healthy'), (900, 'healthy'),
    ])
    def test_stock_level(self, available, level):
        assert classify_stock_level(available) == level

    def test_stock_level_custom_threshold(self):
        assert classify_stock_level(50, low_threshold=100) == 'low'

    def test_shortage_flag(self):
        assert 'Short' in format_shortage_flag(True)
        assert 'OK' in format_shortage_flag(False)


class TestLabelsAndDates:

    def test_raw_cotton_label(self):
        assert format_raw_cotton_label('L-7') == "RAW COTTON (L-7)"
        assert format_raw_cotton_label(None) == "RAW COTTON"

    @pytest.mark.parametrize("delivery, expected", [
        ('2024-07-15', "5 days left"),
        (date(2024, 7, 5), "5 days overdue"),
        ('2024-07-10', "Due today"),
        (None, NOT_COMPUTABLE),
        ('soon', NOT_COMPUTABLE),
    ])
    def test_delivery_countdown(self, delivery, expected):
        assert format_delivery_countdown(delivery, today=date(2024, 7, 10)) == expected

    def test_delivery_date(self):
        assert format_delivery_date('2024-07-10') == "10 Jul 2024"
        assert format_delivery_date(None) == NOT_COMPUTABLE


class TestDisplaySettings:

    @pytest.fixture
    def app_config(self, monkeypatch):
        from utils.config import config
        return lambda key, value: monkeypatch.setitem(config.app_config, key, value)

    def test_decimals_from_settings(self, app_config):
        app_config('DISPLAY_DECIMALS', 0)
        assert format_kg(1250.4) == "1,250 kg"
        assert format_kg(1250.4, decimals=1) == "1,250.4 kg"

    def test_low_stock_threshold_from_settings(self, app_config):
        app_config('LOW_STOCK_THRESHOLD_KG', 100)
        assert classify_stock_level(50) == 'low'
        assert classify_stock_level(50, low_threshold=10) == 'healthy'

    def test_countdown_uses_configured_timezone(self, app_config):
        app_config('TIMEZONE', 'Pacific/Kiritimati')
        today = pd.Timestamp.now(tz='Pacific/Kiritimati').date()

        assert format_delivery_countdown(today) == "Due today"


class TestBreakdownFrame:

    def test_display_copy(self, cotton):
        orders = [make_order(
            '1', 1000, 80, '2024-07-10', [make_blend(cotton, 60)],
            raw_cottons=[{'id': 'RC1', 'percentage': 40, 'lot_number': 'L-3', 'stock_kg': 100}],
        )]
        df = compute_fibre_requirements(orders).breakdown_frame()

        display_df = format_breakdown_frame(df)

        assert list(display_df['fibre_code']) == ['COT', 'RAW COTTON (L-3)']
        assert list(display_df['required_qty']) == ['750.00 kg', '500.00 kg']
        assert list(display_df['percentage']) == ['60.0%', '40.0%']
        assert list(display_df['delivery_date']) == ['10 Jul 2024', '10 Jul 2024']
        assert 'Short' in display_df.iloc[1]['shortage']
        # source frame untouched
        assert df.iloc[0]['required_qty'] == 750.0

    def test_empty_frame(self):
        assert format_breakdown_frame(None).empty
        assert format_breakdown_frame(pd.DataFrame()).empty
