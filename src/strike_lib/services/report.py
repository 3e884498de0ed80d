"""CSV report of strike bands (one row per symbol/period/side)."""

import logging
from pathlib import Path
from typing import Iterable, Union

import pandas as pd

from src.strike_lib.core.models import StrikeBand

logger = logging.getLogger("strike.report")

REPORT_COLUMNS = [
    "symbol",
    "side",
    "period",
    "days_to_expiry",
    "anchor_price",
    "min_strike",
    "max_strike",
]


def strike_bands_to_frame(bands: Iterable[StrikeBand]) -> pd.DataFrame:
    rows = [
        {
            "symbol": b.symbol,
            "side": b.side.value,
            "period": b.period,
            "days_to_expiry": b.days_to_expiry,
            "anchor_price": b.anchor_price,
            "min_strike": round(b.low, 2),
            "max_strike": round(b.high, 2),
        }
        for b in bands
    ]
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def write_strike_report(bands: Iterable[StrikeBand], path: Union[str, Path]) -> Path:
    """Write *bands* to a CSV file and return its path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = strike_bands_to_frame(bands)
    df.to_csv(path, index=False)
    logger.info("Wrote %d strike bands to %s", len(df), path)
    return path
