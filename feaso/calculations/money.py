"""Integer-cent helpers: rounding, conversion and display formatting."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

Number = Union[int, float]


def round_half_up(value: Number) -> int:
    """Round to the nearest whole cent, halves away from zero.

    Python's built-in ``round`` uses banker's rounding, which would move
    ``2.5`` to ``2``. Going through ``Decimal(str(value))`` also absorbs
    binary noise such as ``10000.000000000002``.

    Example:
        >>> round_half_up(2.5)
        3
        >>> round_half_up(-2.5)
        -3
    """
    if isinstance(value, int):
        return value
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def dollars_to_cents(dollars: Number) -> int:
    return round_half_up(dollars * 100)


def cents_to_dollars(cents: int) -> float:
    return cents / 100


def format_currency(cents: Number) -> str:
    """Format cents as whole dollars, e.g. ``$1,950,000``."""
    if cents == 0:
        return "$0"
    dollars = round_half_up(cents / 100)
    sign = "-" if dollars < 0 else ""
    return f"{sign}${abs(dollars):,}"


def format_pct(value: Optional[float], decimals: int = 1) -> str:
    """Format a plain-number percentage; ``None`` renders as ``N/A``."""
    if value is None:
        return "N/A"
    return f"{value:.{decimals}f}%"
