"""
Numeric helpers for derived figures (average ratings, average rent).
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Union

Number = Union[int, float, Decimal]


def round_half_up(value: Number, places: int = 0) -> Decimal:
    """
    Round away from zero on ties, unlike the built-in round().

    Args:
        value: Number to round
        places: Decimal places to keep

    Returns:
        Rounded Decimal
    """
    quantum = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)


def average_rating(ratings: Iterable[int]) -> float:
    """Mean rating to one decimal place; 0 when there are no ratings."""
    ratings = list(ratings)
    if not ratings:
        return 0
    return float(round_half_up(Decimal(sum(ratings)) / len(ratings), 1))


def rounded_mean(value: Optional[Number]) -> int:
    """Round an aggregate mean to a whole number; 0 when there was nothing to average."""
    if value is None:
        return 0
    return int(round_half_up(value))
