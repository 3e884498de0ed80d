"""
Tests for runner.py — per-symbol batch jobs.

A failing symbol must never abort the batch: recoverable errors are
recorded in ``BatchResult.skipped`` and processing continues, while
configuration errors propagate.
"""

import sqlite3
from unittest.mock import MagicMock

import pytest

from conftest import flat_candles, make_candles
from src.strike_lib.core.config import EngineConfig
from src.strike_lib.core.errors import RECOVERABLE_ERRORS, InvalidCandle, InvalidParameter
from src.strike_lib.core.models import Candle, DropMetric, OptionSide, RangeMetric
from src.strike_lib.services import runner, store


def _zero_price_candles(n: int = 30) -> list[Candle]:
    candles = make_candles(n, symbol="ZERO", seed=17)
    candles[10] = Candle("ZERO", 1.0, 2.0, 0.0, 1.0, timestamp=candles[10].timestamp)
    return candles


@pytest.fixture()
def universe() -> dict[str, list[Candle]]:
    return {
        "GOOD": make_candles(100, symbol="GOOD", seed=42),
        "SHORT": make_candles(12, symbol="SHORT", seed=7),
        "ZERO": _zero_price_candles(),
        "FLAT": flat_candles(40, symbol="FLAT"),
        "EMPTY": [],
    }


class TestRangeJob:
    def test_bad_symbols_skipped(self, universe, config):
        result = runner.run_range_metrics(list(universe), universe.__getitem__, config)
        assert [m.symbol for m in result.items] == ["GOOD", "FLAT"]
        assert set(result.skipped) == {"SHORT", "ZERO", "EMPTY"}
        assert "got 3" in result.skipped["SHORT"]

    def test_config_error_propagates(self, config):
        def loader(symbol):
            raise InvalidParameter("bad timestamps")

        with pytest.raises(InvalidParameter):
            runner.run_range_metrics(["X"], loader, config)


class TestDropJob:
    def test_metrics_per_period(self, universe, config):
        result = runner.run_drop_metrics(["GOOD", "SHORT", "FLAT", "ZERO"], universe.__getitem__, config)
        good = [m for m in result.items if m.symbol == "GOOD"]
        assert [m.period for m in good] == [5, 10, 20]
        # SHORT: 12 candles -> chunks 5,5,2 and 10,2; too short for 20
        assert {m.period for m in result.items if m.symbol == "SHORT"} == {5, 10}
        assert set(result.skipped) == {"FLAT", "ZERO"}


class TestSharpeJob:
    def test_degenerate_and_short_skipped(self, universe, config):
        result = runner.run_sharpe_metrics(["GOOD", "FLAT", "SHORT"], universe.__getitem__, config)
        assert [m.symbol for m in result.items] == ["GOOD"]
        assert set(result.skipped) == {"FLAT", "SHORT"}


class TestStrikeBandJob:
    def test_range_and_drop_metrics(self, universe, config):
        metrics = {
            "GOOD": RangeMetric("GOOD", 0.06, 0.04, 0),
            "SHORT": DropMetric("SHORT", 10, 0.06, 0.04, 0),
        }
        result = runner.run_strike_bands(
            ["GOOD", "SHORT", "MISSING"],
            lambda s: universe.get(s, []),
            metrics.get,
            5,
            config,
            side="put",
        )
        bands = {b.symbol: b for b in result.items}
        assert bands["GOOD"].period == config.bar_size
        assert bands["GOOD"].anchor_price == universe["GOOD"][-1].close
        assert bands["SHORT"].period == 10
        assert all(b.side is OptionSide.PUT for b in result.items)
        assert list(result.skipped) == ["MISSING"]

    def test_no_candles_skipped(self, config):
        result = runner.run_strike_bands(
            ["EMPTY"], lambda s: [], lambda s: RangeMetric(s, 0.1, 0.1, 0), 5, config
        )
        assert result.items == []
        assert "EMPTY" in result.skipped


class TestRunAll:
    def test_end_to_end(self, universe):
        config = EngineConfig(sharpe_min_candles=20)
        loader = MagicMock(side_effect=universe.__getitem__)
        summary = runner.run_all(list(universe), loader, config, days_to_expiry=7)

        assert loader.call_count == len(universe)
        assert [m.symbol for m in summary.ranges.items] == ["GOOD", "FLAT"]
        assert [b.symbol for b in summary.bands.items] == ["GOOD", "FLAT"]
        assert [m.symbol for m in summary.sharpes.items] == ["GOOD", "ZERO"]

        flat_band = next(b for b in summary.bands.items if b.symbol == "FLAT")
        assert flat_band.low == flat_band.high == 100.0

        good_band = next(b for b in summary.bands.items if b.symbol == "GOOD")
        assert good_band.low <= good_band.high < good_band.anchor_price


class TestCorruptStoredCandles:
    """A corrupt row in the candle table skips that symbol only."""

    @pytest.fixture()
    def db(self, tmp_path) -> str:
        path = str(tmp_path / "corrupt.db")
        store.init_db(path)
        store.save_candles(make_candles(60, symbol="GOOD", seed=42), db_path=path)
        conn = sqlite3.connect(path)
        with conn:
            conn.execute(
                "INSERT INTO candle (symbol, open, high, low, close, volume, timestamp) "
                "VALUES ('BAD', 10.0, 9.0, 11.0, 10.0, 0, 1)"
            )
        conn.close()
        return path

    def test_store_raises_recoverable_error(self, db):
        with pytest.raises(InvalidCandle) as exc_info:
            store.get_candles("BAD", 10, db_path=db)
        assert exc_info.value.symbol == "BAD"
        assert isinstance(exc_info.value, RECOVERABLE_ERRORS)

    def test_range_job_continues(self, db, config):
        result = runner.run_range_metrics(
            ["BAD", "GOOD"], lambda s: store.get_candles(s, config.candle_count, db_path=db), config
        )
        assert [m.symbol for m in result.items] == ["GOOD"]
        assert "corrupt candle data" in result.skipped["BAD"]

    def test_run_all_skips_in_every_job(self, db, config):
        summary = runner.run_all(
            ["BAD", "GOOD"],
            lambda s: store.get_candles(s, config.candle_count, db_path=db),
            config,
            days_to_expiry=7,
        )
        for batch in (summary.ranges, summary.drops, summary.sharpes, summary.bands):
            assert "BAD" in batch.skipped
        assert [m.symbol for m in summary.ranges.items] == ["GOOD"]
        assert [b.symbol for b in summary.bands.items] == ["GOOD"]
