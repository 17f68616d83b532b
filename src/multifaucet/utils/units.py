"""Amount conversion between human-readable units and smallest on-chain units."""

from decimal import ROUND_DOWN, Decimal, localcontext
from typing import Union

Amount = Union[Decimal, int, str, float]


def _exact_precision(value: Decimal, shift: int) -> int:
    """Digits needed to shift ``value`` by ``shift`` places without rounding."""
    digits = len(value.as_tuple().digits)
    return max(digits + abs(shift) + abs(value.adjusted()) + 1, 28)


def to_smallest_unit(amount: Amount, decimals: int) -> int:
    """Convert a decimal amount to an integer count of smallest units.

    Sub-unit remainders are floored, never rounded up.
    """
    value = Decimal(str(amount)) if isinstance(amount, float) else Decimal(amount)
    if not value.is_finite():
        raise ValueError(f"Amount is not finite: {amount}")
    with localcontext() as ctx:
        ctx.prec = _exact_precision(value, decimals)
        scaled = value.scaleb(decimals).quantize(Decimal(1), rounding=ROUND_DOWN)
    return int(scaled)


def from_smallest_unit(raw_value: Union[int, str], decimals: int) -> Decimal:
    """Convert an integer count of smallest units to a decimal amount."""
    value = Decimal(int(raw_value))
    with localcontext() as ctx:
        ctx.prec = _exact_precision(value, decimals)
        return value.scaleb(-decimals)


def quantize_down(value: Decimal, places: Decimal) -> Decimal:
    """Floor ``value`` to the exponent of ``places`` regardless of magnitude."""
    with localcontext() as ctx:
        ctx.prec = _exact_precision(value, -places.as_tuple().exponent)
        return value.quantize(places, rounding=ROUND_DOWN)


def format_display(raw_value: Union[int, str], decimals: int) -> str:
    """Format a raw integer value as a plain decimal string ("0.5", "12")."""
    value = from_smallest_unit(raw_value, decimals)
    if value == 0:
        return "0"
    return format(value.normalize(), "f")


def hex_to_int(value: str) -> int:
    """Parse a 0x-prefixed hex quantity (empty "0x" is zero)."""
    if value in ("0x", ""):
        return 0
    return int(value, 16)


def int_to_hex(value: int) -> str:
    """Encode a non-negative integer as a 0x-prefixed hex quantity."""
    return hex(value)
