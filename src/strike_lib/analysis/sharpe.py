"""
Annualised Sharpe ratio from daily closes.

    returns[i] = (close[i+1] - close[i]) / close[i]
    excess     = returns - annual_risk_free / 252
    sharpe     = mean(excess) * 252 / (std(excess) * sqrt(252))

``std`` is the population standard deviation.  Scaling every return by a
positive constant (with a zero risk-free rate) leaves the ratio unchanged;
shifting every return does not.

A series whose returns are equal up to float rounding (closes compounding
at a fixed rate) has a std of pure noise, so a std within
``_STD_REL_TOL`` of the mean return counts as zero.
"""

import math
from typing import Sequence

import numpy as np

from src.strike_lib.core.config import TRADING_DAYS_PER_YEAR, EngineConfig
from src.strike_lib.core.errors import DegenerateStdDev, DivisionByZeroPrice, InsufficientData
from src.strike_lib.core.models import Candle, SharpeMetric

_STD_REL_TOL = 1e-9


def period_returns(candles: Sequence[Candle]) -> list[float]:
    """Close-to-close simple returns (``len(candles) - 1`` values)."""
    returns = []
    for prev, cur in zip(candles, candles[1:]):
        if prev.close <= 0:
            raise DivisionByZeroPrice("close", prev.symbol)
        returns.append((cur.close - prev.close) / prev.close)
    return returns


def sharpe_from_returns(returns: Sequence[float], annual_risk_free: float) -> float:
    """Annualised Sharpe ratio of a daily return series.

    Raises:
        InsufficientData: fewer than two returns.
        DegenerateStdDev: returns are constant (up to float rounding).
    """
    if len(returns) < 2:
        raise InsufficientData(2, len(returns), what="returns")

    raw = np.asarray(returns, dtype=np.float64)
    raw_mean = float(raw.mean())
    mean = raw_mean - annual_risk_free / TRADING_DAYS_PER_YEAR
    # std(excess) == std(returns)
    std = float(raw.std())
    if std <= _STD_REL_TOL * abs(raw_mean):
        raise DegenerateStdDev()

    return (mean * TRADING_DAYS_PER_YEAR) / (std * math.sqrt(TRADING_DAYS_PER_YEAR))


def compute_sharpe_metric(candles: Sequence[Candle], config: EngineConfig) -> SharpeMetric:
    """Sharpe ratio over the whole (unaggregated) candle series."""
    if len(candles) < config.sharpe_min_candles:
        raise InsufficientData(config.sharpe_min_candles, len(candles), what="sharpe candles")

    value = sharpe_from_returns(period_returns(candles), config.annual_risk_free_rate)
    return SharpeMetric(symbol=candles[-1].symbol, value=value, timestamp=candles[-1].timestamp)
