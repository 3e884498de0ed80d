"""
Tests for main.py — the command-line jobs against a temporary SQLite file.
"""

import pandas as pd
import pytest

from conftest import make_candles
from src.strike_lib.core.errors import InvalidParameter
from src.strike_lib.services import store
from src.strike_lib.services.main import build_parser, main


@pytest.fixture()
def workspace(tmp_path, monkeypatch):
    for var in ("STRIKE_PERCENTILE", "STRIKE_DROP_PERIODS", "SHARPE_MIN_CANDLES"):
        monkeypatch.delenv(var, raising=False)
    db = str(tmp_path / "data.db")
    store.init_db(db)
    store.save_candles(make_candles(100, symbol="GOOD", seed=42), db_path=db)
    store.save_candles(make_candles(12, symbol="SHORT", seed=7), db_path=db)
    symbols = tmp_path / "symbols.csv"
    symbols.write_text("GOOD\nSHORT\n")
    return {"db": db, "symbols": str(symbols), "tmp": tmp_path}


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args(["calc-range", "symbols.csv"])
        assert args.side == "put"
        assert args.period is None
        assert args.report == ""

    def test_unknown_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["pull-quotes", "symbols.csv"])


class TestCommands:
    def test_calc_range(self, workspace):
        assert main(["calc-range", workspace["symbols"], "--db", workspace["db"]]) == 0
        assert store.get_true_range("GOOD", db_path=workspace["db"]) is not None
        assert store.get_true_range("SHORT", db_path=workspace["db"]) is None

    def test_calc_drop_then_strike_bands_by_period(self, workspace):
        db = workspace["db"]
        assert main(["calc-drop", workspace["symbols"], "--db", db]) == 0
        assert [m.period for m in store.get_all_drop_periods("GOOD", db_path=db)] == [5, 10, 20]

        report = workspace["tmp"] / "bands.csv"
        argv = ["strike-bands", workspace["symbols"], "--db", db, "--period", "10", "--dte", "7"]
        assert main(argv + ["--report", str(report)]) == 0
        df = pd.read_csv(report)
        assert set(df["symbol"]) == {"GOOD", "SHORT"}
        assert (df["period"] == 10).all()

    def test_calc_sharpe(self, workspace):
        assert main(["calc-sharpe", workspace["symbols"], "--db", workspace["db"]]) == 0
        assert store.get_sharpe_ratio("GOOD", db_path=workspace["db"]) is not None
        assert store.get_sharpe_ratio("SHORT", db_path=workspace["db"]) is None

    def test_perform_all(self, workspace):
        report = workspace["tmp"] / "all.csv"
        argv = ["perform-all", workspace["symbols"], "--db", workspace["db"], "--dte", "9"]
        assert main(argv + ["--side", "call", "--report", str(report)]) == 0
        df = pd.read_csv(report)
        assert df["symbol"].tolist() == ["GOOD"]
        assert df.loc[0, "side"] == "call"
        assert df.loc[0, "min_strike"] > df.loc[0, "anchor_price"]

    def test_missing_symbols_file(self, workspace):
        missing = str(workspace["tmp"] / "missing.csv")
        assert main(["calc-range", missing, "--db", workspace["db"]]) == 2

    def test_invalid_side_fails_fast(self, workspace):
        with pytest.raises(InvalidParameter):
            main(["strike-bands", workspace["symbols"], "--db", workspace["db"], "--side", "both"])
