"""
Error taxonomy for the strike-band risk engine.

Recoverable errors (``InsufficientData``, ``DegenerateStdDev``, ``InvalidCandle``,
``DivisionByZeroPrice``) mean "skip this symbol / metric and carry on";
the batch runner catches exactly ``RECOVERABLE_ERRORS``.

``InvalidParameter`` is a programmer or configuration error and is never
caught by the runner.
"""


class StrikeEngineError(Exception):
    """Base class for every error raised by the engine."""


class InsufficientData(StrikeEngineError):
    """Not enough samples to compute a statistic."""

    def __init__(self, required: int, got: int, what: str = ""):
        self.required = required
        self.got = got
        self.what = what
        label = f"{what}: " if what else ""
        super().__init__(f"{label}need at least {required} samples, got {got}")


class DegenerateStdDev(StrikeEngineError):
    """Standard deviation of excess returns is zero; Sharpe is undefined."""

    def __init__(self, message: str = "standard deviation of excess returns is zero"):
        super().__init__(message)


class InvalidParameter(StrikeEngineError, ValueError):
    """Out-of-range argument or configuration value."""


class DivisionByZeroPrice(StrikeEngineError):
    """A zero price (or trough) would have produced NaN / inf."""

    def __init__(self, field: str, symbol: str = ""):
        self.field = field
        self.symbol = symbol
        where = f" for {symbol}" if symbol else ""
        super().__init__(f"zero {field}{where}")


class InvalidCandle(StrikeEngineError):
    """A stored candle row breaks the OHLC invariants; the symbol's data is unusable."""

    def __init__(self, symbol: str, reason: str):
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"corrupt candle data for {symbol}: {reason}")


RECOVERABLE_ERRORS = (InsufficientData, DegenerateStdDev, DivisionByZeroPrice, InvalidCandle)
