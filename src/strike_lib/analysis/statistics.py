"""
Smoothing and order statistics shared by the range and drawdown metrics.

This is the only implementation of ``ema`` and ``weighted_percentile`` in
the package; both metric modules call into it so edge-case handling is
identical everywhere:

  - EMA is seeded with the first sample (not zero, not an SMA) and only
    the final value is returned.
  - Percentile uses linear interpolation between the two bracketing
    sorted samples, and the fractional index is clamped to ``[0, n-1]``
    instead of raising on an out-of-range position.
"""

import math
from typing import Sequence

import numpy as np

from src.strike_lib.core.errors import InsufficientData, InvalidParameter


def ema(series: Sequence[float], period: int) -> float:
    """Exponential moving average of *series*, returning the last value.

    ``m = 2 / (period + 1)``; ``ema[0] = series[0]`` and
    ``ema[i] = series[i] * m + ema[i-1] * (1 - m)``.

    Raises:
        InvalidParameter: period < 1.
        InsufficientData: fewer than *period* samples.
    """
    if period < 1:
        raise InvalidParameter(f"EMA period must be >= 1, got {period}")
    if len(series) < period:
        raise InsufficientData(period, len(series), what="ema")

    multiplier = 2.0 / (period + 1.0)
    value = float(series[0])
    for x in series[1:]:
        value = float(x) * multiplier + value * (1.0 - multiplier)
    return value


def weighted_percentile(series: Sequence[float], p: float) -> float:
    """Linearly interpolated percentile, ``p`` in ``[0, 1]``.

    ``percentile(s, 0) == min(s)`` and ``percentile(s, 1) == max(s)``.

    Raises:
        InsufficientData: empty series.
        InvalidParameter: p is NaN or outside ``[0, 1]``.
    """
    if len(series) == 0:
        raise InsufficientData(1, 0, what="percentile")
    if math.isnan(p) or p < 0.0 or p > 1.0:
        raise InvalidParameter(f"percentile must be within [0, 1], got {p}")

    values = np.sort(np.asarray(series, dtype=np.float64))
    n = len(values)
    idx = min(max(p * (n - 1), 0.0), float(n - 1))

    lower = int(math.floor(idx))
    upper = int(math.ceil(idx))
    if lower == upper:
        return float(values[lower])

    weight = idx - lower
    return float(values[lower] * (1.0 - weight) + values[upper] * weight)
