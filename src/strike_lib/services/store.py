"""
SQLite persistence for candles and computed metrics.

Tables:
  - candle            unique (symbol, timestamp)
  - true_range        unique (symbol)          — latest RangeMetric
  - max_drop_periods  primary key (symbol, period)
  - sharpe_ratio      unique (symbol)

All writes are upserts (``REPLACE``), so re-running a job overwrites the
previous value for the same key.  The database path defaults to the
``DB_PATH`` environment variable.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional

from src.strike_lib.core.errors import InvalidCandle, InvalidParameter
from src.strike_lib.core.models import Candle, DropMetric, RangeMetric, SharpeMetric

logger = logging.getLogger("strike.store")

DB_PATH = os.getenv("DB_PATH", "strike_metrics.db")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS candle (
    symbol      TEXT    NOT NULL,
    open        REAL    NOT NULL,
    high        REAL    NOT NULL,
    low         REAL    NOT NULL,
    close       REAL    NOT NULL,
    volume      INTEGER NOT NULL DEFAULT 0,
    timestamp   INTEGER NOT NULL
);
CREATE UNIQUE INDEX IF NOT EXISTS idx_candle_symbol_timestamp ON candle (symbol, timestamp);

CREATE TABLE IF NOT EXISTS true_range (
    symbol            TEXT NOT NULL,
    percentile_range  REAL NOT NULL,
    ema_range         REAL NOT NULL,
    timestamp         INTEGER NOT NULL
);
CREATE UNIQUE INDEX IF NOT EXISTS idx_true_range_symbol ON true_range (symbol);

CREATE TABLE IF NOT EXISTS max_drop_periods (
    symbol           TEXT    NOT NULL,
    period           INTEGER NOT NULL,
    percentile_drop  REAL    NOT NULL,
    ema_drop         REAL    NOT NULL,
    timestamp        INTEGER NOT NULL,
    PRIMARY KEY (symbol, period)
);
CREATE INDEX IF NOT EXISTS idx_max_drop_periods_symbol ON max_drop_periods (symbol);

CREATE TABLE IF NOT EXISTS sharpe_ratio (
    symbol     TEXT NOT NULL,
    value      REAL NOT NULL,
    timestamp  INTEGER NOT NULL
);
CREATE UNIQUE INDEX IF NOT EXISTS idx_sharpe_symbol ON sharpe_ratio (symbol);
"""


def _get_sqlite_conn(db_path: str) -> sqlite3.Connection:
    """Create a SQLite connection with WAL mode and row factory."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    return conn


@contextmanager
def _connect(db_path: Optional[str]) -> Iterator[sqlite3.Connection]:
    conn = _get_sqlite_conn(db_path or DB_PATH)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(db_path: Optional[str] = None) -> None:
    """Create all tables and indexes (idempotent)."""
    with _connect(db_path) as conn:
        conn.executescript(_SCHEMA)
    logger.info("Metric tables initialised at %s", db_path or DB_PATH)


# ---------------------------------------------------------------------------
# Candles
# ---------------------------------------------------------------------------


def save_candles(candles: Iterable[Candle], db_path: Optional[str] = None) -> int:
    """Upsert candles; returns the number of rows written."""
    rows = [(c.symbol, c.open, c.high, c.low, c.close, c.volume, c.timestamp) for c in candles]
    with _connect(db_path) as conn:
        conn.executemany(
            "REPLACE INTO candle (symbol, open, high, low, close, volume, timestamp) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            rows,
        )
    return len(rows)


def get_candles(symbol: str, count: int, db_path: Optional[str] = None) -> list[Candle]:
    """The most recent *count* candles for *symbol*, in ascending time order.

    Raises:
        InvalidCandle: a stored row breaks the OHLC invariants.
    """
    with _connect(db_path) as conn:
        cur = conn.execute(
            "SELECT symbol, open, high, low, close, volume, timestamp FROM candle "
            "WHERE symbol = ? ORDER BY timestamp DESC LIMIT ?",
            (symbol, count),
        )
        rows = cur.fetchall()
    try:
        candles = [
            Candle(
                symbol=r["symbol"],
                open=r["open"],
                high=r["high"],
                low=r["low"],
                close=r["close"],
                volume=r["volume"],
                timestamp=r["timestamp"],
            )
            for r in rows
        ]
    except InvalidParameter as exc:
        raise InvalidCandle(symbol, str(exc)) from exc
    candles.reverse()
    return candles


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


def save_true_ranges(metrics: Iterable[RangeMetric], db_path: Optional[str] = None) -> None:
    rows = [(m.symbol, m.percentile_range, m.ema_range, m.timestamp) for m in metrics]
    with _connect(db_path) as conn:
        conn.executemany(
            "REPLACE INTO true_range (symbol, percentile_range, ema_range, timestamp) "
            "VALUES (?, ?, ?, ?)",
            rows,
        )


def get_true_range(symbol: str, db_path: Optional[str] = None) -> Optional[RangeMetric]:
    with _connect(db_path) as conn:
        row = conn.execute(
            "SELECT symbol, percentile_range, ema_range, timestamp FROM true_range "
            "WHERE symbol = ?",
            (symbol,),
        ).fetchone()
    if row is None:
        return None
    return RangeMetric(**{k: row[k] for k in row.keys()})


def save_max_drops(metrics: Iterable[DropMetric], db_path: Optional[str] = None) -> None:
    rows = [(m.symbol, m.period, m.percentile_drop, m.ema_drop, m.timestamp) for m in metrics]
    with _connect(db_path) as conn:
        conn.executemany(
            "REPLACE INTO max_drop_periods (symbol, period, percentile_drop, ema_drop, timestamp) "
            "VALUES (?, ?, ?, ?, ?)",
            rows,
        )


def get_max_drop(symbol: str, period: int, db_path: Optional[str] = None) -> Optional[DropMetric]:
    with _connect(db_path) as conn:
        row = conn.execute(
            "SELECT symbol, period, percentile_drop, ema_drop, timestamp FROM max_drop_periods "
            "WHERE symbol = ? AND period = ?",
            (symbol, period),
        ).fetchone()
    if row is None:
        return None
    return DropMetric(**{k: row[k] for k in row.keys()})


def get_all_drop_periods(symbol: str, db_path: Optional[str] = None) -> list[DropMetric]:
    """Every stored period for *symbol*, ordered by period."""
    with _connect(db_path) as conn:
        rows = conn.execute(
            "SELECT symbol, period, percentile_drop, ema_drop, timestamp FROM max_drop_periods "
            "WHERE symbol = ? ORDER BY period",
            (symbol,),
        ).fetchall()
    return [DropMetric(**{k: r[k] for k in r.keys()}) for r in rows]


def save_sharpe_ratios(metrics: Iterable[SharpeMetric], db_path: Optional[str] = None) -> None:
    rows = [(m.symbol, m.value, m.timestamp) for m in metrics]
    with _connect(db_path) as conn:
        conn.executemany(
            "REPLACE INTO sharpe_ratio (symbol, value, timestamp) VALUES (?, ?, ?)",
            rows,
        )


def get_sharpe_ratio(symbol: str, db_path: Optional[str] = None) -> Optional[SharpeMetric]:
    with _connect(db_path) as conn:
        row = conn.execute(
            "SELECT symbol, value, timestamp FROM sharpe_ratio WHERE symbol = ?",
            (symbol,),
        ).fetchone()
    if row is None:
        return None
    return SharpeMetric(**{k: row[k] for k in row.keys()})
