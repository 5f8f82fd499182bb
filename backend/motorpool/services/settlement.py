"""Cost calculation for reservations.

Duration always bills whole days, rounded up: a 25 hour trip costs two days.
Rates that are not configured contribute nothing to the total.
"""

import math
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
SECONDS_PER_HOUR = 3600


def _to_decimal(value: Optional[Number]) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 0.1 from dragging binary noise into money values
    return Decimal(str(value))


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def duration_hours(start: datetime, end: datetime) -> float:
    """Absolute elapsed hours between two instants."""
    return abs((end - start).total_seconds()) / SECONDS_PER_HOUR


def billable_days(start: datetime, end: datetime) -> int:
    """Whole days billed for the window, ``ceil(hours / 24)``."""
    return math.ceil(duration_hours(start, end) / 24)


def estimate_cost(daily_rate: Optional[Number], start: datetime, end: datetime) -> Optional[Decimal]:
    """Estimated cost at booking time. None when the vehicle has no daily rate."""
    if daily_rate is None:
        return None
    return _quantize(_to_decimal(daily_rate) * billable_days(start, end))


def calculate_cost(
    daily_rate: Optional[Number],
    distance_rate: Optional[Number],
    start: datetime,
    end: datetime,
    distance_travelled: int,
) -> Decimal:
    """Actual cost at settlement: time component plus distance component."""
    if distance_travelled < 0:
        raise ValueError("distance_travelled cannot be negative")

    time_cost = _to_decimal(daily_rate) * billable_days(start, end)
    distance_cost = _to_decimal(distance_rate) * distance_travelled
    return _quantize(time_cost + distance_cost)
