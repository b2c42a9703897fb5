"""Latency statistics over recorded operation durations."""
import math
import sys
from typing import List


class NoDataError(ValueError):
    """Raised when a statistic is requested over an empty sequence."""


def round2(num: float) -> float:
    """Round half up to two decimal places."""
    if math.isnan(num):
        return num
    return math.floor((num + sys.float_info.epsilon) * 100 + 0.5) / 100


def mean(values: List[float]) -> float:
    if not values:
        raise NoDataError("mean requires at least one value")
    return round2(sum(values) / len(values))


def quantile(p: float, values: List[float]) -> float:
    """
    Value at proportion p of the sorted values.

    Sorts values in place. A fractional position n * p reads the element one
    past its floor; a whole position averages the element at that index with
    the next one. Positions past the end give nan.

    Raises:
        NoDataError: If values is empty
    """
    if not values:
        raise NoDataError("quantile requires at least one value")

    values.sort()

    n = len(values)
    position = n * p

    if not float(position).is_integer():
        return round2(_at(values, math.floor(position) + 1))

    index = int(position)
    return round2(0.5 * (_at(values, index) + _at(values, index + 1)))


def median(values: List[float]) -> float:
    return quantile(0.5, values)


def _at(values: List[float], index: int) -> float:
    if index >= len(values):
        return math.nan
    return values[index]
