"""
Candle resampling: fold consecutive daily candles into fixed-size bars.

With the default bar size of 5, a series of trading days becomes a series
of (approximately) weekly bars.  The final chunk is kept even when it is
shorter than ``bar_size``; it is never padded or dropped.
"""

import logging
from typing import Iterator, Sequence

from src.strike_lib.core.errors import InsufficientData, InvalidParameter
from src.strike_lib.core.models import Candle

logger = logging.getLogger("strike.aggregation")


def chunk(candles: Sequence[Candle], size: int) -> Iterator[Sequence[Candle]]:
    """Yield consecutive, non-overlapping slices of *size* candles."""
    if size < 1:
        raise InvalidParameter(f"chunk size must be >= 1, got {size}")
    for start in range(0, len(candles), size):
        yield candles[start : start + size]


def _merge(group: Sequence[Candle]) -> Candle:
    first = group[0]
    last = group[-1]
    return Candle(
        symbol=first.symbol,
        open=first.open,
        high=max(c.high for c in group),
        low=min(c.low for c in group),
        close=last.close,
        volume=sum(c.volume for c in group),
        timestamp=first.timestamp,
    )


def resample(candles: Sequence[Candle], bar_size: int) -> list[Candle]:
    """Aggregate *candles* into bars of *bar_size* elements.

    Output length is ``ceil(len(candles) / bar_size)``; ``bar_size == 1``
    returns an equal copy of the input.

    Raises:
        InvalidParameter: bar_size < 1.
        InsufficientData: empty input.
    """
    if bar_size < 1:
        raise InvalidParameter(f"bar_size must be >= 1, got {bar_size}")
    if not candles:
        raise InsufficientData(1, 0, what="resample")

    if bar_size == 1:
        return list(candles)

    bars = [_merge(group) for group in chunk(candles, bar_size)]
    logger.debug(
        "Resampled %d candles into %d bars (bar_size=%d, symbol=%s)",
        len(candles),
        len(bars),
        bar_size,
        candles[0].symbol,
    )
    return bars
