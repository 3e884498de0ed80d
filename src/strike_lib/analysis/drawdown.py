"""
Peak-to-trough drop statistics over fixed-length periods of raw candles.

For each period-sized chunk the first candle only seeds the running peak
(its high) and trough (its low); every later candle updates both and
measures ``peak - low``.  The chunk's drop ratio is the largest of those
drops divided by the chunk's lowest low.  Because the peak never falls
and the trough never rises, growing the window from a fixed start can
only increase the ratio.

Chunks with a ratio of exactly ``0.0`` (single candle, flat prices) carry
no information and are discarded before the EMA / percentile step.
"""

import logging
from typing import Sequence

from src.strike_lib.analysis.aggregation import chunk
from src.strike_lib.analysis.statistics import ema, weighted_percentile
from src.strike_lib.core.config import EngineConfig
from src.strike_lib.core.errors import DivisionByZeroPrice, InsufficientData, InvalidParameter
from src.strike_lib.core.models import Candle, DropMetric

logger = logging.getLogger("strike.drawdown")


def max_drop_ratio(candles: Sequence[Candle]) -> float:
    """Largest drop from a running peak, relative to the running trough."""
    if not candles:
        return 0.0

    peak = candles[0].high
    trough = candles[0].low
    max_drop = 0.0
    for candle in candles[1:]:
        peak = max(peak, candle.high)
        trough = min(trough, candle.low)
        max_drop = max(max_drop, peak - candle.low)

    if max_drop == 0.0:
        return 0.0
    if trough <= 0:
        raise DivisionByZeroPrice("trough", candles[0].symbol)
    return max_drop / trough


def drop_ratios(candles: Sequence[Candle], period: int) -> list[float]:
    """Per-chunk drop ratios with degenerate (zero) chunks removed."""
    if period < 1:
        raise InvalidParameter(f"drop period must be >= 1, got {period}")
    ratios = [max_drop_ratio(group) for group in chunk(candles, period)]
    return [r for r in ratios if r != 0.0]


def compute_drop_metric(
    candles: Sequence[Candle], period: int, config: EngineConfig
) -> DropMetric:
    """EMA / percentile summary of the drop ratios for one *period*.

    Raises:
        InsufficientData: fewer than ``config.drop_min_periods`` valid chunks.
        DivisionByZeroPrice: a zero trough in the data.
    """
    if not candles:
        raise InsufficientData(config.drop_min_periods, 0, what=f"drop periods ({period})")

    ratios = drop_ratios(candles, period)
    if len(ratios) < config.drop_min_periods:
        raise InsufficientData(config.drop_min_periods, len(ratios), what=f"drop periods ({period})")

    window = min(config.drop_ema_window, len(ratios))
    return DropMetric(
        symbol=candles[-1].symbol,
        period=period,
        percentile_drop=weighted_percentile(ratios, config.percentile),
        ema_drop=ema(ratios, window),
        timestamp=candles[-1].timestamp,
    )


def compute_drop_metrics(candles: Sequence[Candle], config: EngineConfig) -> list[DropMetric]:
    """One ``DropMetric`` per configured period.

    Periods without enough valid chunks are logged and left out; a zero
    price still propagates because it poisons every period alike.
    """
    metrics: list[DropMetric] = []
    for period in config.drop_periods:
        try:
            metrics.append(compute_drop_metric(candles, period, config))
        except InsufficientData as exc:
            symbol = candles[0].symbol if candles else "?"
            logger.warning("%s: skipping drop period %d: %s", symbol, period, exc)
    return metrics
