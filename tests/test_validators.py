"""Tests for the realisation update validator"""
import pytest

from utils.fibre_requirement.models import RawCottonOverride
from utils.fibre_requirement.validators import RealisationUpdateValidator


@pytest.fixture
def validator():
    return RealisationUpdateValidator()


class TestValidateRealisation:

    @pytest.mark.parametrize("value", [0, 50, '82.5', 100])
    def test_accepts_range(self, validator, value):
        assert validator.validate_realisation(value) == (True, "")

    @pytest.mark.parametrize("value", [-1, 100.01, 150])
    def test_rejects_out_of_range(self, validator, value):
        is_valid, message = validator.validate_realisation(value)
        assert not is_valid
        assert "between 0 and 100" in message

    @pytest.mark.parametrize("value", [None, '', 'abc'])
    def test_rejects_non_numeric(self, validator, value):
        is_valid, message = validator.validate_realisation(value)
        assert not is_valid
        assert message == "Enter a valid realisation %"


class TestValidateOverride:

    def test_valid_override(self, validator):
        assert validator.validate_override(RawCottonOverride(id='RC1', stock_kg=0, lot_number='L-1')) == []

    def test_negative_stock(self, validator):
        errors = validator.validate_override(RawCottonOverride(id='RC1', stock_kg=-5))
        assert errors == ["Raw cotton RC1: stock cannot be negative"]

    def test_long_text(self, validator):
        errors = validator.validate_override(RawCottonOverride(id='RC1', notes='x' * 501, grade='A'))
        assert len(errors) == 1
        assert 'notes' in errors[0]


class TestBuildUpdatePayload:

    def test_payload_shape(self, validator):
        payload = validator.build_update_payload('82.5', {
            'RC1': {'stock_kg': '250', 'lot_number': 'L-1', 'grade': None},
            'RC-NEW': {'source': 'Gujarat'},
        })

        assert payload == {
            'realisation': 82.5,
            'raw_cotton_updates': [
                {'id': 'RC1', 'stock_kg': 250.0, 'lot_number': 'L-1'},
                {'id': 'RC-NEW', 'source': 'Gujarat'},
            ],
        }

    def test_without_overrides(self, validator):
        assert validator.build_update_payload(90) == {'realisation': 90.0, 'raw_cotton_updates': []}

    def test_invalid_request_raises(self, validator):
        with pytest.raises(ValueError) as exc_info:
            validator.build_update_payload(120, [{'id': 'RC1', 'stock_kg': -1}])

        message = str(exc_info.value)
        assert "between 0 and 100" in message
        assert "stock cannot be negative" in message

    def test_entries_without_id_are_rejected(self, validator):
        errors = validator.validate_update(80, [{'id': 'RC1', 'stock_kg': 10}, {'stock_kg': 5}])
        assert errors == ["1 raw cotton entry(ies) missing a composition id"]

        with pytest.raises(ValueError, match="missing a composition id"):
            validator.build_update_payload(80, [{'stock_kg': 5}])

    def test_validate_update_collects_all_errors(self, validator):
        errors = validator.validate_update('abc', {
            'RC1': {'stock_kg': -1},
            'RC2': {'lot_number': 'L' * 600},
        })
        assert len(errors) == 3
