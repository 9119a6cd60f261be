"""
Common utilities shared by the ledger services.
Pricing and argument validation live here so every settlement site computes
amounts with the same formula.
"""

from typing import Any, Optional

from errors import InvalidArgument

# Largest integer the persisted BigInteger columns hold exactly
MAX_STORED_INT = 2 ** 63 - 1


def is_integer(value: Any) -> bool:
    """True for ints, False for bools and everything else."""
    return isinstance(value, int) and not isinstance(value, bool)


def require_integer(name: str, value: Any, minimum: Optional[int] = None) -> int:
    """
    Validate an integer argument.

    Args:
        name: Argument name used in the error message
        value: Value to validate
        minimum: Optional inclusive lower bound

    Returns:
        The value unchanged

    Raises:
        InvalidArgument: if the value is not an int, is below minimum,
            or does not fit in storage
    """
    if not is_integer(value):
        raise InvalidArgument(f"{name} must be an integer, got {type(value).__name__}")
    if minimum is not None and value < minimum:
        raise InvalidArgument(f"{name} must be at least {minimum}, got {value}")
    if value > MAX_STORED_INT:
        raise InvalidArgument(f"{name} exceeds the largest storable value")
    return value


def price_per_fraction(value: int, total_fractions: int, rounding: str = "floor") -> int:
    """
    Price of one fraction of an asset.

    Args:
        value: Declared asset value
        total_fractions: Fractions the asset was split into
        rounding: "floor" (default) or "ceil"

    Returns:
        Integer price per fraction

    Examples:
        >>> price_per_fraction(100, 10)
        10
        >>> price_per_fraction(100, 3)
        33
        >>> price_per_fraction(100, 3, rounding="ceil")
        34
    """
    if total_fractions <= 0:
        raise InvalidArgument("total_fractions must be positive")
    if rounding == "floor":
        return value // total_fractions
    elif rounding == "ceil":
        return -(-value // total_fractions)
    raise ValueError(f"Unknown price rounding: {rounding}")


def settlement_amount(asset: Any, count: int, rounding: str = "floor") -> int:
    """Amount that settles `count` fractions of `asset`."""
    return count * price_per_fraction(asset.value, asset.total_fractions, rounding)


def is_valid_id(value: Any) -> bool:
    """True if value could be a stored asset id."""
    return is_integer(value) and 0 <= value <= MAX_STORED_INT
