"""Half-up rounding shared by every score calculation.

Builtin ``round`` uses banker's rounding, which would store 40 for a 40.5
missed-day penalty where the ledger has always stored 41.
"""

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, ndigits: int = 0) -> float:
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
