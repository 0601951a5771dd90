"""
Realisation Update Validator
============================
Validation and payload building for the realisation / raw cotton update that
follows a fibre breakdown review. The write itself goes to the order update
endpoint; this module only checks input and shapes the payload:

    {
        "realisation": 82.5,
        "raw_cotton_updates": [{"id": ..., "stock_kg": ..., "lot_number": ...}]
    }

The calculation path accepts any positive realisation (yield gains above 100
are legitimate); the update form keeps the stricter 0-100 rule.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from .models import RawCottonOverride
from .parsers import parse_number, parse_raw_cotton_overrides, split_raw_cotton_overrides

logger = logging.getLogger(__name__)

OVERRIDE_TEXT_FIELDS = ('lot_number', 'grade', 'source', 'notes')


class RealisationUpdateValidator:
    """Validator for realisation update requests"""

    def __init__(self):
        # Configuration constants
        self.MIN_REALISATION = 0.0
        self.MAX_REALISATION = 100.0
        self.MAX_STRING_LENGTH = 500

    # ==================== Realisation ====================

    def validate_realisation(self, value: Any) -> Tuple[bool, str]:
        """
        Validate realisation entered on the update form

        Returns:
            Tuple of (is_valid, error_message)
        """
        parsed = parse_number(value)
        if not parsed.valid:
            return False, "Enter a valid realisation %"

        if parsed.value < self.MIN_REALISATION or parsed.value > self.MAX_REALISATION:
            return False, (
                f"Realisation must be between {self.MIN_REALISATION:.0f} "
                f"and {self.MAX_REALISATION:.0f}%"
            )

        return True, ""

    # ==================== Raw Cotton Overrides ====================

    def validate_override(self, override: RawCottonOverride) -> List[str]:
        """
        Validate one manual raw cotton entry

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if override.stock_kg is not None and override.stock_kg < 0:
            errors.append(f"Raw cotton {override.id}: stock cannot be negative")

        for field_name in OVERRIDE_TEXT_FIELDS:
            text = getattr(override, field_name)
            if text and len(text) > self.MAX_STRING_LENGTH:
                errors.append(
                    f"Raw cotton {override.id}: {field_name} exceeds "
                    f"{self.MAX_STRING_LENGTH} characters"
                )

        return errors

    def validate_update(self, realisation: Any, overrides: Any = None) -> List[str]:
        """Validate the full update request"""
        errors = []

        is_valid, message = self.validate_realisation(realisation)
        if not is_valid:
            errors.append(message)

        keyed, unkeyed = split_raw_cotton_overrides(overrides)
        for override in keyed.values():
            errors.extend(self.validate_override(override))

        if unkeyed:
            errors.append(f"{len(unkeyed)} raw cotton entry(ies) missing a composition id")

        return errors

    # ==================== Payload ====================

    def build_update_payload(self, realisation: Any, overrides: Any = None) -> Dict[str, Any]:
        """
        Build the order update payload.

        Every override entry is included, whether or not it matches a raw
        cotton composition yet. Unset fields are omitted.

        Raises:
            ValueError: if the request does not validate
        """
        errors = self.validate_update(realisation, overrides)
        if errors:
            raise ValueError("; ".join(errors))

        updates = []
        for override in parse_raw_cotton_overrides(overrides).values():
            update: Dict[str, Any] = {'id': override.id}
            if override.stock_kg is not None:
                update['stock_kg'] = override.stock_kg
            for field_name in OVERRIDE_TEXT_FIELDS:
                value: Optional[str] = getattr(override, field_name)
                if value is not None:
                    update[field_name] = value
            updates.append(update)

        payload = {
            'realisation': parse_number(realisation).value,
            'raw_cotton_updates': updates,
        }
        logger.info(f"Realisation update payload built with {len(updates)} raw cotton update(s)")
        return payload
