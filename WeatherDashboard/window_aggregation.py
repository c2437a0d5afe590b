"""Sum/max over a half-open time range of forecast records."""
from datetime import datetime
from typing import Callable, Iterable, TypeVar

T = TypeVar("T")


def sum_between(
    records: Iterable[T],
    start: datetime,
    end: datetime,
    value_of: Callable[[T], float],
    time_of: Callable[[T], datetime],
    initial: float = 0,
) -> float:
    """
    Sum the values of records whose time falls in [start, end).

    Args:
        records: Records to scan
        start: Inclusive range start
        end: Exclusive range end
        value_of: Extracts the value to sum from a record
        time_of: Extracts the record's time, in the same zone as start/end
        initial: Additive identity returned for an empty range

    Returns:
        Sum of the matching values
    """
    total = initial
    for record in records:
        if start <= time_of(record) < end:
            total += value_of(record)
    return total


def max_between(
    records: Iterable[T],
    start: datetime,
    end: datetime,
    value_of: Callable[[T], float],
    time_of: Callable[[T], datetime],
    default: float = 0,
) -> float:
    """
    Largest value among records whose time falls in [start, end).

    An empty range yields `default`. All dashboard values are non-negative,
    so with the default of 0 an empty range reads the same as an observed 0.
    """
    result = default
    for record in records:
        if start <= time_of(record) < end:
            value = value_of(record)
            if value > result:
                result = value
    return result
