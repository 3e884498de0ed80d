"""
True-range volatility statistics on aggregated bars.

True range is expressed as a ratio of price rather than in price units so
that a $20 stock and a $500 stock can share thresholds:

    r1 = (high - low) / low
    r2 = |high - prev_close| / min(high, prev_close)
    r3 = |low  - prev_close| / min(low,  prev_close)
    ratio = max(r1, r2, r3)

The per-bar ratios are summarised with an EMA (recency-weighted typical
range) and a percentile (tail range).  Both end up as the two legs of the
strike band.
"""

import logging
from typing import Sequence

from src.strike_lib.analysis.aggregation import resample
from src.strike_lib.analysis.statistics import ema, weighted_percentile
from src.strike_lib.core.config import EngineConfig
from src.strike_lib.core.errors import DivisionByZeroPrice, InsufficientData
from src.strike_lib.core.models import Candle, RangeMetric

logger = logging.getLogger("strike.true_range")


def _gap_ratio(value: float, reference: float, symbol: str) -> float:
    denominator = min(value, reference)
    if denominator <= 0:
        raise DivisionByZeroPrice("price", symbol)
    return abs(value - reference) / denominator


def true_range_ratio(current: Candle, previous: Candle) -> float:
    """Largest of the bar's own spread and its gaps against the prior close."""
    if current.low <= 0:
        raise DivisionByZeroPrice("low", current.symbol)
    spread = (current.high - current.low) / current.low
    gap_high = _gap_ratio(current.high, previous.close, current.symbol)
    gap_low = _gap_ratio(current.low, previous.close, current.symbol)
    return max(spread, gap_high, gap_low)


def true_range_ratios(bars: Sequence[Candle]) -> list[float]:
    """``len(bars) - 1`` ratios, one per consecutive (previous, current) pair."""
    return [true_range_ratio(cur, prev) for prev, cur in zip(bars, bars[1:])]


def compute_range_metric(candles: Sequence[Candle], config: EngineConfig) -> RangeMetric:
    """Resample *candles* and summarise their true-range ratios.

    At least ``max(range_min_bars, ema_period + 1)`` aggregated bars are
    needed, so that the ratio series covers the EMA period.

    Raises:
        InsufficientData: too few candles / bars.
        DivisionByZeroPrice: a zero price in the data.
    """
    bars = resample(candles, config.bar_size)
    required = max(config.range_min_bars, config.ema_period + 1)
    if len(bars) < required:
        raise InsufficientData(required, len(bars), what="aggregated bars")

    ratios = true_range_ratios(bars)
    metric = RangeMetric(
        symbol=bars[-1].symbol,
        percentile_range=weighted_percentile(ratios, config.percentile),
        ema_range=ema(ratios, config.ema_period),
        timestamp=bars[-1].timestamp,
    )
    logger.debug(
        "%s: range pct=%.4f ema=%.4f over %d bars",
        metric.symbol,
        metric.percentile_range,
        metric.ema_range,
        len(bars),
    )
    return metric
