"""
strike_lib — risk metrics for a systematic options-selling strategy.

Daily candles go in; true-range, drawdown and Sharpe statistics come out,
and are fused with the latest price and days-to-expiry into a strike band
used to filter option chains.

    # Core
    from src.strike_lib.core.config import EngineConfig
    from src.strike_lib.core.models import Candle, StrikeBand, OptionSide
    from src.strike_lib.core.errors import InsufficientData, RECOVERABLE_ERRORS
    from src.strike_lib.core.logging_config import setup_logging, get_logger

    # Analysis (pure functions, no I/O)
    from src.strike_lib.analysis import (
        resample, ema, weighted_percentile,
        compute_range_metric, compute_drop_metrics, compute_sharpe_metric,
        project_strike_band,
    )

    # Collaborators and batch jobs
    from src.strike_lib.services import store, runner
    from src.strike_lib.services.main import main

Install in editable mode for development:

    pip install -e ".[test]"
"""
