"""Input checks shared by the stock-changing use cases."""

import math

from salon_inventory.core.exceptions import ValidationError


def require_positive_quantity(value: object, field: str = "quantity") -> int:
    """Reject anything but a whole number greater than zero."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(field, "must be a whole number", value)
    if value <= 0:
        raise ValidationError(field, "must be greater than zero", value)
    return value


def require_non_negative(value: object, field: str) -> None:
    """Reject negative, NaN or infinite numbers. None means 'not given'."""
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValidationError(field, "must be a number", value)
    if not math.isfinite(value):
        raise ValidationError(field, "must be a finite number", value)
    if value < 0:
        raise ValidationError(field, "must not be negative", value)
