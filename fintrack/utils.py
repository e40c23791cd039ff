"""
Utility functions shared across modules.
Rounding here follows half-up semantics so displayed amounts match what
users expect from a calculator (2.5 -> 3, not 2).
"""
import math


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round half away from zero for positive values (half-up).

    Args:
        value: Number to round
        digits: Decimal places to keep

    Returns:
        Rounded float (whole-number results are still floats)
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, lower: float, upper: float) -> float:
    """Constrain value to the closed interval [lower, upper]."""
    return max(lower, min(upper, value))


def format_amount(amount: float) -> str:
    """Format an amount without trailing zeros: 1700.0 -> '1700', 12.5 -> '12.5'."""
    if float(amount).is_integer():
        return str(int(amount))
    return f"{amount:.2f}".rstrip('0').rstrip('.')
