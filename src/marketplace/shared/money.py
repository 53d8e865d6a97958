from decimal import ROUND_HALF_UP, Decimal

_CENT = Decimal("0.01")


def round2(value: float | int | Decimal) -> float:
    """Round to two decimals, halves away from zero.

    Goes through the shortest decimal representation of the float so that
    e.g. 1.005 rounds to 1.01 rather than 1.0.
    """
    return float(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))
