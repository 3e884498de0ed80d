"""
Engine configuration.

Every computation takes an explicit ``EngineConfig``; nothing in the
engine reads the environment on its own.  ``EngineConfig.from_env()`` is
the single place where environment variables are consulted, and the
process entry point calls it once.

Usage::

    from src.strike_lib.core.config import EngineConfig

    config = EngineConfig.from_env()
    config = EngineConfig(percentile=0.9, drop_periods=(5, 10))
"""

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.strike_lib.core.models import SafetyBound

TRADING_DAYS_PER_YEAR = 252

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_BAR_SIZE = 5  # 5 daily candles -> one weekly bar
DEFAULT_EMA_PERIOD = 4
DEFAULT_PERCENTILE = 0.75
DEFAULT_RISK_FREE_RATE = 0.04
DEFAULT_RANGE_MIN_BARS = 4
DEFAULT_DROP_MIN_PERIODS = 2
DEFAULT_DROP_PERIODS = (5, 10, 20)
DEFAULT_DROP_EMA_WINDOW = 5
DEFAULT_SHARPE_MIN_CANDLES = 20
DEFAULT_CANDLE_COUNT = 100
DEFAULT_SAFETY_COEFFICIENT = 0.05


class EngineConfig(BaseModel):
    """Immutable, validated engine settings."""

    model_config = ConfigDict(frozen=True)

    bar_size: int = Field(DEFAULT_BAR_SIZE, ge=1, description="Raw candles per aggregated bar")
    ema_period: int = Field(DEFAULT_EMA_PERIOD, ge=1)
    percentile: float = Field(DEFAULT_PERCENTILE, ge=0.0, le=1.0)
    annual_risk_free_rate: float = Field(DEFAULT_RISK_FREE_RATE, ge=0.0, le=1.0)
    range_min_bars: int = Field(DEFAULT_RANGE_MIN_BARS, ge=2)
    drop_min_periods: int = Field(DEFAULT_DROP_MIN_PERIODS, ge=1)
    drop_periods: tuple[int, ...] = DEFAULT_DROP_PERIODS
    drop_ema_window: int = Field(DEFAULT_DROP_EMA_WINDOW, ge=1)
    sharpe_min_candles: int = Field(DEFAULT_SHARPE_MIN_CANDLES, ge=3)
    candle_count: int = Field(DEFAULT_CANDLE_COUNT, ge=1, description="Candles loaded per symbol")
    safety_coefficient: float = Field(DEFAULT_SAFETY_COEFFICIENT, ge=0.0, le=1.0)
    safety_bound: SafetyBound = SafetyBound.UPPER

    @field_validator("drop_periods")
    @classmethod
    def _positive_periods(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if not value:
            raise ValueError("drop_periods must not be empty")
        if any(p < 1 for p in value):
            raise ValueError(f"drop periods must be >= 1, got {value}")
        return tuple(sorted(set(value)))

    @field_validator("safety_bound", mode="before")
    @classmethod
    def _parse_bound(cls, value):
        return SafetyBound.parse(value)

    @property
    def daily_risk_free_rate(self) -> float:
        return self.annual_risk_free_rate / TRADING_DAYS_PER_YEAR

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "EngineConfig":
        """Build a config from ``STRIKE_*`` / ``RISK_FREE_RATE`` variables.

        Unset variables keep their defaults.  Malformed values raise
        ``pydantic.ValidationError`` right here, before any symbol is
        processed.
        """
        env = os.environ if environ is None else environ
        mapping = {
            "bar_size": "STRIKE_BAR_SIZE",
            "ema_period": "STRIKE_EMA_PERIOD",
            "percentile": "STRIKE_PERCENTILE",
            "annual_risk_free_rate": "RISK_FREE_RATE",
            "range_min_bars": "STRIKE_RANGE_MIN_BARS",
            "drop_min_periods": "STRIKE_DROP_MIN_PERIODS",
            "drop_ema_window": "STRIKE_DROP_EMA_WINDOW",
            "sharpe_min_candles": "SHARPE_MIN_CANDLES",
            "candle_count": "STRIKE_CANDLE_COUNT",
            "safety_coefficient": "STRIKE_SAFETY_COEFFICIENT",
            "safety_bound": "STRIKE_SAFETY_BOUND",
        }
        values: dict = {}
        for field, var in mapping.items():
            raw = env.get(var)
            if raw is not None and raw.strip() != "":
                values[field] = raw.strip()

        periods = env.get("STRIKE_DROP_PERIODS", "").strip()
        if periods:
            values["drop_periods"] = tuple(p.strip() for p in periods.split(",") if p.strip())

        return cls(**values)
