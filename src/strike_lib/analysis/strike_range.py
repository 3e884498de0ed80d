"""
Strike-band projection.

A volatility or drawdown statistic measured over ``period`` days is
scaled linearly to the option's days-to-expiry and applied to the anchor
price (latest close):

    adj   = max(dte, 1) / period
    v1    = P * (1 - ema * adj)          # puts: band below the price
    v2    = P * (1 - pct * adj)
    low, high = sorted(v1, v2)

Calls mirror the band above the price (``1 + x * adj``).

The gap between the two legs, ``|pct - ema| * adj``, times
``config.safety_coefficient`` is a safety margin that pulls one edge of
the band inward.  ``SafetyBound.UPPER`` (default) lowers the high strike,
``SafetyBound.LOWER`` raises the low strike.  Both keep ``low <= high``
while the coefficient is within ``[0, 1]``.

Usage::

    band = project_strike_band("AAPL", 190.0, pct=0.06, ema=0.04,
                               period=5, days_to_expiry=9, config=config)
    min_strike, max_strike = band.as_filter()
"""

from src.strike_lib.core.config import EngineConfig
from src.strike_lib.core.errors import DivisionByZeroPrice, InvalidParameter
from src.strike_lib.core.models import (
    DropMetric,
    OptionSide,
    RangeMetric,
    SafetyBound,
    StrikeBand,
)


def project_strike_band(
    symbol: str,
    anchor_price: float,
    pct: float,
    ema: float,
    period: int,
    days_to_expiry: int,
    config: EngineConfig,
    side: OptionSide = OptionSide.PUT,
) -> StrikeBand:
    """Fuse a ``(pct, ema)`` statistic pair into a strike band."""
    side = OptionSide.parse(side)
    if anchor_price <= 0:
        raise DivisionByZeroPrice("anchor price", symbol)
    if period < 1:
        raise InvalidParameter(f"period must be >= 1, got {period}")
    if days_to_expiry < 0:
        raise InvalidParameter(f"days_to_expiry must be >= 0, got {days_to_expiry}")
    if pct < 0 or ema < 0:
        raise InvalidParameter(f"statistics must be >= 0, got pct={pct} ema={ema}")

    adj_factor = max(days_to_expiry, 1) / period
    adj_pct = pct * adj_factor
    adj_ema = ema * adj_factor

    direction = -1.0 if side is OptionSide.PUT else 1.0
    v1 = anchor_price * (1.0 + direction * adj_ema)
    v2 = anchor_price * (1.0 + direction * adj_pct)
    low, high = min(v1, v2), max(v1, v2)

    safety = abs(adj_pct - adj_ema) * config.safety_coefficient
    if config.safety_bound is SafetyBound.UPPER:
        high = high * (1.0 - safety)
    else:
        low = low * (1.0 + safety)

    low = max(low, 0.0)
    high = max(high, low)

    return StrikeBand(
        symbol=symbol,
        low=low,
        high=high,
        anchor_price=anchor_price,
        days_to_expiry=days_to_expiry,
        period=period,
        side=side,
    )


def band_from_range_metric(
    metric: RangeMetric,
    anchor_price: float,
    days_to_expiry: int,
    config: EngineConfig,
    side: OptionSide = OptionSide.PUT,
) -> StrikeBand:
    """Project from a true-range metric; its period is the aggregation bar size."""
    return project_strike_band(
        metric.symbol,
        anchor_price,
        metric.percentile_range,
        metric.ema_range,
        config.bar_size,
        days_to_expiry,
        config,
        side=side,
    )


def band_from_drop_metric(
    metric: DropMetric,
    anchor_price: float,
    days_to_expiry: int,
    config: EngineConfig,
    side: OptionSide = OptionSide.PUT,
) -> StrikeBand:
    return project_strike_band(
        metric.symbol,
        anchor_price,
        metric.percentile_drop,
        metric.ema_drop,
        metric.period,
        days_to_expiry,
        config,
        side=side,
    )
