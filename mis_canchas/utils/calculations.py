"""
Calculation utilities for cash registers and bookings.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any

MONEY_QUANT = Decimal("0.01")


def to_decimal(value: Decimal | str | int | float | None) -> Decimal:
    return Decimal(str(value or 0))


def round_money(value: Any) -> Decimal:
    """
    Round a monetary value to cents using ROUND_HALF_UP.
    """
    return to_decimal(value).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def calculate_cash_difference(actual_cash: Any, expected_cash: Any) -> Decimal:
    """
    Difference between counted cash and the cash the register should hold.

    Positive means surplus, negative means shortage.
    """
    return round_money(to_decimal(actual_cash) - to_decimal(expected_cash))


def calculate_booking_price(price_per_hour: Any, duration_minutes: int) -> Decimal:
    """
    Price of a booking from the court hourly rate.
    """
    minutes = Decimal(int(duration_minutes or 0))
    return round_money(to_decimal(price_per_hour) * minutes / Decimal(60))
