"""
Decimal helpers for the pricing phases.

Floats coming from the catalog are converted through ``str`` so the exact
catalog figure (e.g. 0.00145833333) enters the chain, not its binary
approximation.
"""
from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP
from typing import Union

Number = Union[int, float, Decimal, str]

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")


def dec(value: Number) -> Decimal:
    """Convert a catalog or request number to Decimal."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def percent_of(amount: Decimal, percentage: Number) -> Decimal:
    """``amount × percentage / 100``."""
    return amount * dec(percentage) / HUNDRED


def is_multiple(value: Number, increment: Number) -> bool:
    return dec(value) % dec(increment) == ZERO


def floor_multiple(value: Number, increment: Number) -> Decimal:
    step = dec(increment)
    return (dec(value) / step).to_integral_value(rounding=ROUND_FLOOR) * step


def ceil_multiple(value: Number, increment: Number) -> Decimal:
    step = dec(increment)
    return (dec(value) / step).to_integral_value(rounding=ROUND_CEILING) * step


def fmt_money(value: Number, places: int = 2) -> str:
    """Format as dollars, rounding half up only here at display time."""
    quantum = Decimal(1).scaleb(-places)
    return f"${dec(value).quantize(quantum, rounding=ROUND_HALF_UP):,}"


def fmt_number(value: Number) -> str:
    """Shortest plain rendering: 5.50 -> '5.5', 20.0 -> '20', 0.01 -> '0.01'."""
    d = dec(value).normalize()
    if d == d.to_integral_value():
        return str(d.quantize(ONE))
    return format(d, 'f')
