"""Utility modules for multifaucet."""

from multifaucet.utils.concurrency import gather_settled
from multifaucet.utils.units import (
    format_display,
    from_smallest_unit,
    hex_to_int,
    int_to_hex,
    quantize_down,
    to_smallest_unit,
)

__all__ = [
    "gather_settled",
    "format_display",
    "from_smallest_unit",
    "hex_to_int",
    "int_to_hex",
    "quantize_down",
    "to_smallest_unit",
]
