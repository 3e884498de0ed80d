"""
strike_lib.analysis — risk metrics and strike-band projection.

Re-exports the public API from each sub-module so callers can do:

    from src.strike_lib.analysis import compute_range_metric, project_strike_band
"""

from src.strike_lib.analysis.aggregation import chunk, resample
from src.strike_lib.analysis.drawdown import (
    compute_drop_metric,
    compute_drop_metrics,
    drop_ratios,
    max_drop_ratio,
)
from src.strike_lib.analysis.sharpe import (
    compute_sharpe_metric,
    period_returns,
    sharpe_from_returns,
)
from src.strike_lib.analysis.statistics import ema, weighted_percentile
from src.strike_lib.analysis.strike_range import (
    band_from_drop_metric,
    band_from_range_metric,
    project_strike_band,
)
from src.strike_lib.analysis.true_range import (
    compute_range_metric,
    true_range_ratio,
    true_range_ratios,
)

__all__ = [
    # aggregation
    "chunk",
    "resample",
    # drawdown
    "compute_drop_metric",
    "compute_drop_metrics",
    "drop_ratios",
    "max_drop_ratio",
    # sharpe
    "compute_sharpe_metric",
    "period_returns",
    "sharpe_from_returns",
    # statistics
    "ema",
    "weighted_percentile",
    # strike_range
    "band_from_drop_metric",
    "band_from_range_metric",
    "project_strike_band",
    # true_range
    "compute_range_metric",
    "true_range_ratio",
    "true_range_ratios",
]
