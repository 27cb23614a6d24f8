"""Input validation for athlete, training and session values.

Every numeric input passes through ``InputValidator.clamp`` so the same
out-of-range policy applies everywhere: values are clamped to the field's
bounds and a warning is logged. Non-numeric or non-finite values cannot be
clamped and raise ``InvalidNumberError``.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class NutritionInputError(ValueError):
    """Base error for inputs the calculator cannot use."""


class InvalidEnumError(NutritionInputError):
    """A categorical value (sex, day type, session type, ...) is not recognized."""

    def __init__(self, kind: str, value: Any, allowed):
        self.kind = kind
        self.value = value
        self.allowed = tuple(allowed)
        super().__init__(
            f"Invalid {kind} {value!r}; expected one of {', '.join(self.allowed)}"
        )


class InvalidNumberError(NutritionInputError):
    """A numeric field holds something that is not a finite number."""

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(f"Invalid numeric value for {field}: {value!r}")


@dataclass
class ValidationResult:
    """Result of validating a single field."""
    is_valid: bool
    reason: Optional[str] = None
    suggested_value: Optional[float] = None


class InputValidator:
    """Field bounds and the clamp policy applied to raw numeric inputs."""

    # None means unbounded on that side
    FIELD_BOUNDS: Dict[str, Dict[str, Optional[float]]] = {
        # Athlete
        'age': {'min': 0, 'max': None},
        'weight_kg': {'min': 0, 'max': None},
        'height_cm': {'min': 0, 'max': None},

        # Weekly training volume
        'weekly_run_km': {'min': 0, 'max': None},
        'weekly_bike_km': {'min': 0, 'max': None},
        'weekly_swim_km': {'min': 0, 'max': None},
        'weekly_strength_hours': {'min': 0, 'max': None},
        'double_session_days': {'min': 0, 'max': 7},

        # Day context and ratios
        'activity_factor': {'min': 0, 'max': None},
        'carb_low_per_kg': {'min': 0, 'max': None},
        'carb_high_per_kg': {'min': 0, 'max': None},
        'protein_per_kg': {'min': 0, 'max': None},
        'fat_per_kg': {'min': 0, 'max': None},

        # Sessions
        'duration_min': {'min': 0, 'max': 300},

        # Hydration
        'session_min': {'min': 0, 'max': None},
        'sweat_rate_l_per_h': {'min': 0, 'max': None},
        'ambient_c': {'min': None, 'max': None},
    }

    @classmethod
    def validate(cls, field: str, value: Any) -> ValidationResult:
        """Check a value against its field bounds without changing it."""
        if isinstance(value, bool):
            return ValidationResult(False, "Boolean is not a number")
        try:
            number = float(value)
        except (TypeError, ValueError):
            return ValidationResult(False, "Not a number")
        if not np.isfinite(number):
            return ValidationResult(False, "Invalid numeric value")

        bounds = cls.FIELD_BOUNDS.get(field)
        if bounds is None:
            return ValidationResult(True)

        low, high = bounds['min'], bounds['max']
        if low is not None and number < low:
            return ValidationResult(
                False,
                f"Value {value} below minimum {low}",
                suggested_value=low,
            )
        if high is not None and number > high:
            return ValidationResult(
                False,
                f"Value {value} above maximum {high}",
                suggested_value=high,
            )
        return ValidationResult(True)

    @classmethod
    def clamp(cls, field: str, value: Any):
        """Return value clamped to the field's bounds.

        Raises:
            InvalidNumberError: if value is not a finite number
        """
        result = cls.validate(field, value)
        if result.is_valid:
            return value if isinstance(value, (int, float)) else float(value)
        if result.suggested_value is None:
            raise InvalidNumberError(field, value)

        logger.warning(f"Clamped {field} = {value} to {result.suggested_value}: {result.reason}")
        return result.suggested_value
