"""
Batch jobs: run the metric computations over a list of symbols.

Each job takes the symbols, a ``load_candles(symbol)`` callable (normally
backed by the SQLite store) and an ``EngineConfig``.  A recoverable error
for one symbol (too little data, zero prices, flat returns) is logged with
the symbol bound to the event and the symbol is skipped; the batch always
runs to the end.  Configuration errors (``InvalidParameter``) propagate.

Usage:
    from src.strike_lib.services import runner, store

    result = runner.run_range_metrics(
        symbols,
        lambda s: store.get_candles(s, config.candle_count),
        config,
    )
    store.save_true_ranges(result.items)
    for symbol, reason in result.skipped.items():
        print(symbol, reason)
"""

from dataclasses import dataclass, field
from typing import Callable, Generic, Iterable, Optional, Sequence, TypeVar, Union

from src.strike_lib.analysis.drawdown import compute_drop_metrics
from src.strike_lib.analysis.sharpe import compute_sharpe_metric
from src.strike_lib.analysis.strike_range import band_from_drop_metric, band_from_range_metric
from src.strike_lib.analysis.true_range import compute_range_metric
from src.strike_lib.core.config import EngineConfig
from src.strike_lib.core.errors import RECOVERABLE_ERRORS, InsufficientData
from src.strike_lib.core.logging_config import get_logger, symbol_context
from src.strike_lib.core.models import (
    Candle,
    DropMetric,
    OptionSide,
    RangeMetric,
    SharpeMetric,
    StrikeBand,
)

logger = get_logger("strike.runner")

T = TypeVar("T")
CandleLoader = Callable[[str], Sequence[Candle]]
MetricLoader = Callable[[str], Optional[Union[RangeMetric, DropMetric]]]


@dataclass
class BatchResult(Generic[T]):
    """Items computed by a job plus ``{symbol: reason}`` for skipped symbols."""

    items: list[T] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)

    def skip(self, symbol: str, exc: Exception) -> None:
        # symbol and job come from the enclosing symbol_context
        self.skipped[symbol] = str(exc)
        logger.warning("symbol_skipped", error=type(exc).__name__, reason=str(exc))


@dataclass
class RunSummary:
    ranges: BatchResult[RangeMetric]
    drops: BatchResult[DropMetric]
    sharpes: BatchResult[SharpeMetric]
    bands: BatchResult[StrikeBand]


def run_range_metrics(
    symbols: Iterable[str], load_candles: CandleLoader, config: EngineConfig
) -> BatchResult[RangeMetric]:
    result: BatchResult[RangeMetric] = BatchResult()
    for symbol in symbols:
        with symbol_context(symbol, job="range"):
            try:
                result.items.append(compute_range_metric(load_candles(symbol), config))
            except RECOVERABLE_ERRORS as exc:
                result.skip(symbol, exc)
    logger.info("batch_complete", job="range", computed=len(result.items), skipped=len(result.skipped))
    return result


def run_drop_metrics(
    symbols: Iterable[str], load_candles: CandleLoader, config: EngineConfig
) -> BatchResult[DropMetric]:
    """Drop metrics for every configured period; a symbol with no usable
    period at all is reported as skipped."""
    result: BatchResult[DropMetric] = BatchResult()
    for symbol in symbols:
        with symbol_context(symbol, job="drop"):
            try:
                metrics = compute_drop_metrics(load_candles(symbol), config)
                if not metrics:
                    raise InsufficientData(
                        config.drop_min_periods, 0, what=f"drop periods {list(config.drop_periods)}"
                    )
                result.items.extend(metrics)
            except RECOVERABLE_ERRORS as exc:
                result.skip(symbol, exc)
    logger.info("batch_complete", job="drop", computed=len(result.items), skipped=len(result.skipped))
    return result


def run_sharpe_metrics(
    symbols: Iterable[str], load_candles: CandleLoader, config: EngineConfig
) -> BatchResult[SharpeMetric]:
    result: BatchResult[SharpeMetric] = BatchResult()
    for symbol in symbols:
        with symbol_context(symbol, job="sharpe"):
            try:
                result.items.append(compute_sharpe_metric(load_candles(symbol), config))
            except RECOVERABLE_ERRORS as exc:
                result.skip(symbol, exc)
    logger.info("batch_complete", job="sharpe", computed=len(result.items), skipped=len(result.skipped))
    return result


def _project(
    metric: Union[RangeMetric, DropMetric],
    candles: Sequence[Candle],
    days_to_expiry: int,
    config: EngineConfig,
    side: OptionSide,
) -> StrikeBand:
    if not candles:
        raise InsufficientData(1, 0, what="latest candle")
    anchor = candles[-1].close
    if isinstance(metric, DropMetric):
        return band_from_drop_metric(metric, anchor, days_to_expiry, config, side=side)
    return band_from_range_metric(metric, anchor, days_to_expiry, config, side=side)


def run_strike_bands(
    symbols: Iterable[str],
    load_candles: CandleLoader,
    load_metric: MetricLoader,
    days_to_expiry: int,
    config: EngineConfig,
    side: OptionSide = OptionSide.PUT,
) -> BatchResult[StrikeBand]:
    """Project a strike band per symbol from its stored metric and latest close.

    *load_metric* returns a ``RangeMetric`` or ``DropMetric`` (or ``None``
    when nothing is stored yet, which skips the symbol).
    """
    side = OptionSide.parse(side)
    result: BatchResult[StrikeBand] = BatchResult()
    for symbol in symbols:
        with symbol_context(symbol, job="strike_band"):
            try:
                metric = load_metric(symbol)
                if metric is None:
                    raise InsufficientData(1, 0, what="stored metric")
                band = _project(metric, load_candles(symbol), days_to_expiry, config, side)
            except RECOVERABLE_ERRORS as exc:
                result.skip(symbol, exc)
                continue
            result.items.append(band)
            logger.debug(
                "strike_band",
                side=side.value,
                min_strike=round(band.low, 2),
                max_strike=round(band.high, 2),
            )
    logger.info(
        "batch_complete", job="strike_band", computed=len(result.items), skipped=len(result.skipped)
    )
    return result


def run_all(
    symbols: Sequence[str],
    load_candles: CandleLoader,
    config: EngineConfig,
    days_to_expiry: int,
    side: OptionSide = OptionSide.PUT,
) -> RunSummary:
    """Compute every metric, then project bands from the fresh range metrics.

    Candles are loaded once per symbol and reused across the jobs.  A
    recoverable load failure is replayed to each job, so every job reports
    that symbol as skipped.
    """
    loaded: dict[str, Sequence[Candle]] = {}
    failed: dict[str, Exception] = {}
    for symbol in symbols:
        try:
            loaded[symbol] = load_candles(symbol)
        except RECOVERABLE_ERRORS as exc:
            failed[symbol] = exc

    def cached(symbol: str) -> Sequence[Candle]:
        if symbol in failed:
            raise failed[symbol]
        return loaded[symbol]

    ranges = run_range_metrics(symbols, cached, config)
    drops = run_drop_metrics(symbols, cached, config)
    sharpes = run_sharpe_metrics(symbols, cached, config)

    by_symbol = {m.symbol: m for m in ranges.items}
    bands = run_strike_bands(symbols, cached, by_symbol.get, days_to_expiry, config, side=side)
    return RunSummary(ranges=ranges, drops=drops, sharpes=sharpes, bands=bands)
