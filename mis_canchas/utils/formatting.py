"""
Formatting utilities for currency and numbers.

Pure functions extracted from State for reusability.
"""
import math
from decimal import Decimal, ROUND_HALF_UP


def round_currency(value: float) -> float:
    """
    Round a value to 2 decimal places using ROUND_HALF_UP.

    Args:
        value: The value to round

    Returns:
        The rounded value as a float with 2 decimal precision
    """
    return float(
        Decimal(str(value or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    )


def parse_float_safe(value: str, default: float = 0.0) -> float:
    """
    Safely parse a string to float, returning default on error.

    "nan" e "inf" tambien devuelven el valor por defecto.
    """
    try:
        number = float(value) if value else default
    except (ValueError, TypeError):
        return default
    return number if math.isfinite(number) else default
