"""
Data model for the strike-band risk engine.

Records are frozen dataclasses so a computed metric can be handed to the
persistence layer without anyone mutating it in between.  String-typed
fields coming from the outside world (option side, market status, safety
bound) are parsed into closed enums at the boundary via ``parse()``.

pandas helpers convert between the OHLCV DataFrame shape used throughout
the data layer (``Open/High/Low/Close/Volume`` columns) and candle lists.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import pandas as pd

from src.strike_lib.core.errors import InvalidParameter

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class _ParseableEnum(str, Enum):
    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if member.value == key:
                    return member
        allowed = ", ".join(m.value for m in cls)
        raise InvalidParameter(f"invalid {cls.__name__} {value!r} (expected one of: {allowed})")


class OptionSide(_ParseableEnum):
    PUT = "put"
    CALL = "call"


class MarketStatus(_ParseableEnum):
    OPEN = "open"
    CLOSED = "closed"
    NULL = "null"


class SafetyBound(_ParseableEnum):
    """Which edge of the strike band the safety adjustment pulls inward."""

    UPPER = "upper"
    LOWER = "lower"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Candle:
    """One OHLCV bar.  ``timestamp`` is epoch seconds."""

    symbol: str
    open: float
    high: float
    low: float
    close: float
    volume: int = 0
    timestamp: int = 0

    def __post_init__(self):
        if min(self.open, self.high, self.low, self.close) < 0:
            raise InvalidParameter(f"{self.symbol}: negative price in candle @ {self.timestamp}")
        if self.volume < 0:
            raise InvalidParameter(f"{self.symbol}: negative volume in candle @ {self.timestamp}")
        if self.high < max(self.open, self.close, self.low):
            raise InvalidParameter(
                f"{self.symbol}: high {self.high} below open/close/low @ {self.timestamp}"
            )
        if self.low > min(self.open, self.close, self.high):
            raise InvalidParameter(
                f"{self.symbol}: low {self.low} above open/close/high @ {self.timestamp}"
            )


@dataclass(frozen=True)
class RangeMetric:
    symbol: str
    percentile_range: float
    ema_range: float
    timestamp: int


@dataclass(frozen=True)
class DropMetric:
    symbol: str
    period: int
    percentile_drop: float
    ema_drop: float
    timestamp: int


@dataclass(frozen=True)
class SharpeMetric:
    symbol: str
    value: float
    timestamp: int


@dataclass(frozen=True)
class StrikeBand:
    """Strike price interval handed to the option-chain query."""

    symbol: str
    low: float
    high: float
    anchor_price: float
    days_to_expiry: int
    period: int
    side: OptionSide = OptionSide.PUT

    def as_filter(self) -> tuple[float, float]:
        """Return ``(min_strike, max_strike)``."""
        return self.low, self.high


# ---------------------------------------------------------------------------
# DataFrame conversion
# ---------------------------------------------------------------------------

_OHLCV_COLUMNS = ["Open", "High", "Low", "Close", "Volume"]


def candles_from_ohlcv(df: pd.DataFrame, symbol: str) -> list[Candle]:
    """Build an ascending candle list from an OHLCV DataFrame.

    Timestamps come from an integer ``timestamp`` column when present,
    otherwise from the DatetimeIndex (converted to epoch seconds).
    A missing ``Volume`` column is treated as zero volume.
    """
    if df is None or df.empty:
        return []

    missing = [c for c in _OHLCV_COLUMNS[:4] if c not in df.columns]
    if missing:
        raise InvalidParameter(f"OHLCV frame is missing columns: {missing}")

    if "timestamp" in df.columns:
        stamps = df["timestamp"].astype("int64").tolist()
    elif isinstance(df.index, pd.DatetimeIndex):
        idx = df.index
        if idx.tz is not None:
            idx = idx.tz_convert("UTC").tz_localize(None)
        stamps = [int(s) for s in (idx - pd.Timestamp("1970-01-01")) // pd.Timedelta(seconds=1)]
    else:
        raise InvalidParameter("OHLCV frame needs a DatetimeIndex or a 'timestamp' column")

    _check_ascending(stamps, symbol)

    volumes = df["Volume"] if "Volume" in df.columns else pd.Series(0, index=df.index)
    return [
        Candle(
            symbol=symbol,
            open=float(o),
            high=float(h),
            low=float(lo),
            close=float(c),
            volume=int(v),
            timestamp=int(ts),
        )
        for o, h, lo, c, v, ts in zip(
            df["Open"], df["High"], df["Low"], df["Close"], volumes.fillna(0), stamps
        )
    ]


def candles_to_frame(candles: list[Candle]) -> pd.DataFrame:
    """Inverse of :func:`candles_from_ohlcv` (integer ``timestamp`` column)."""
    if not candles:
        return pd.DataFrame(columns=["symbol", "timestamp", *_OHLCV_COLUMNS])
    _check_ascending([c.timestamp for c in candles], candles[0].symbol)
    return pd.DataFrame(
        {
            "symbol": [c.symbol for c in candles],
            "timestamp": [c.timestamp for c in candles],
            "Open": [c.open for c in candles],
            "High": [c.high for c in candles],
            "Low": [c.low for c in candles],
            "Close": [c.close for c in candles],
            "Volume": [c.volume for c in candles],
        }
    )


def _check_ascending(stamps: list[int], symbol: Optional[str]) -> None:
    for prev, cur in zip(stamps, stamps[1:]):
        if cur <= prev:
            raise InvalidParameter(
                f"{symbol}: timestamps must strictly increase ({prev} -> {cur})"
            )
