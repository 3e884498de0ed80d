"""
Shared pytest fixtures for the strike-engine test suite.

Provides synthetic daily OHLCV data (as DataFrames and as candle lists)
so every test module can exercise the metrics without a database or a
market-data API.
"""

import numpy as np
import pandas as pd
import pytest

from src.strike_lib.core.config import EngineConfig
from src.strike_lib.core.models import Candle, candles_from_ohlcv

# ---------------------------------------------------------------------------
# Synthetic data generators
# ---------------------------------------------------------------------------


def _make_timestamps(n: int, start: str = "2025-01-02") -> pd.DatetimeIndex:
    """Business-day UTC DatetimeIndex for *n* daily bars."""
    return pd.date_range(start=start, periods=n, freq="B", tz="UTC")


def _random_walk_ohlcv(
    n: int = 100,
    start_price: float = 100.0,
    volatility: float = 0.015,
    drift: float = 0.0,
    seed: int = 42,
    volume_mean: int = 1_000_000,
) -> pd.DataFrame:
    """Daily OHLCV DataFrame via geometric random walk.

    Returns a DataFrame with columns: Open, High, Low, Close, Volume
    and a tz-aware DatetimeIndex.
    """
    rng = np.random.default_rng(seed)
    returns = rng.normal(drift, volatility, n)
    close = start_price * np.exp(np.cumsum(returns))

    spread = close * rng.uniform(0.002, 0.02, n)
    high = close + rng.uniform(0, 1, n) * spread
    low = close - rng.uniform(0, 1, n) * spread
    opn = close + rng.uniform(-0.5, 0.5, n) * spread

    # Ensure H >= max(O, C) and L <= min(O, C)
    high = np.maximum(high, np.maximum(opn, close))
    low = np.minimum(low, np.minimum(opn, close))

    volume = rng.poisson(volume_mean, n)

    return pd.DataFrame(
        {"Open": opn, "High": high, "Low": low, "Close": close, "Volume": volume},
        index=_make_timestamps(n),
    )


def make_candles(n: int = 100, symbol: str = "TEST", **kwargs) -> list[Candle]:
    """Random-walk candles for *symbol* (see ``_random_walk_ohlcv``)."""
    return candles_from_ohlcv(_random_walk_ohlcv(n=n, **kwargs), symbol)


def flat_candles(n: int, price: float = 100.0, symbol: str = "FLAT") -> list[Candle]:
    """``open == high == low == close == price`` for every bar."""
    return [
        Candle(symbol, price, price, price, price, volume=100, timestamp=1_700_000_000 + i * 86_400)
        for i in range(n)
    ]


def candles_from_closes(closes, symbol: str = "TEST") -> list[Candle]:
    """Candles whose OHLC all equal the given close (returns-only tests)."""
    return [
        Candle(symbol, c, c, c, c, volume=0, timestamp=1_700_000_000 + i * 86_400)
        for i, c in enumerate(closes)
    ]


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config() -> EngineConfig:
    """Default engine configuration."""
    return EngineConfig()


@pytest.fixture()
def daily_df() -> pd.DataFrame:
    """100 daily bars around $100."""
    return _random_walk_ohlcv(n=100, seed=42)


@pytest.fixture()
def daily_candles() -> list[Candle]:
    """100 random-walk candles for symbol TEST."""
    return make_candles(100, seed=42)


@pytest.fixture()
def trending_candles() -> list[Candle]:
    """100 candles with a clear positive drift."""
    return make_candles(100, symbol="TREND", drift=0.004, volatility=0.008, seed=123)


@pytest.fixture()
def short_candles() -> list[Candle]:
    """12 candles — below the range and Sharpe minimums."""
    return make_candles(12, symbol="SHORT", seed=7)
