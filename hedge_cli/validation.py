"""
Input Validation — checked before any calculation runs
======================================================

Every violated rule is reported, not just the first one.
"""

from typing import List

from hedge_cli.errors import ValidationError


def validate_inputs(
    entry_price: float,
    lp_amount: float,
    lower_range: float,
    upper_range: float,
    short_size: float,
    duration_days: float = 0,
) -> List[str]:
    """Return the list of violation messages (empty when valid)."""
    errors = []

    if entry_price <= 0:
        errors.append("Entry price must be positive")
    if lp_amount <= 0:
        errors.append("LP amount must be positive")
    if short_size < 0:
        errors.append("Short size cannot be negative")
    if lower_range >= entry_price:
        errors.append("Lower range must be below entry price")
    if upper_range <= entry_price:
        errors.append("Upper range must be above entry price")
    if lower_range >= upper_range:
        errors.append("Lower range must be below upper range")
    if lower_range <= 0:
        errors.append("Lower range must be positive")
    if duration_days < 0:
        errors.append("Duration cannot be negative")

    return errors


def require_valid_inputs(
    entry_price: float,
    lp_amount: float,
    lower_range: float,
    upper_range: float,
    short_size: float,
    duration_days: float = 0,
) -> None:
    """Raise ValidationError carrying every violation."""
    errors = validate_inputs(
        entry_price, lp_amount, lower_range, upper_range, short_size, duration_days
    )
    if errors:
        raise ValidationError(errors)
