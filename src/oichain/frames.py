"""Tabular views of a strike window.

The option-chain table puts calls on the left, the strike in the
middle and puts on the right; the charts plot OI, change in OI and
volume per strike in lakhs.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from oichain.data.schema import Strike, StrikeQuote
from oichain.formatting import LAKH

CHAIN_COLUMNS = [
    "ce_oi",
    "ce_change_oi",
    "ce_volume",
    "ce_ltp",
    "ce_change",
    "ce_iv",
    "strike",
    "pe_iv",
    "pe_change",
    "pe_ltp",
    "pe_volume",
    "pe_change_oi",
    "pe_oi",
    "is_atm",
]

SERIES_COLUMNS = [
    "call_oi",
    "put_oi",
    "call_change_oi",
    "put_change_oi",
    "call_volume",
    "put_volume",
]


def _side(prefix: str, quote: StrikeQuote | None) -> dict:
    if quote is None:
        return {
            f"{prefix}_oi": 0,
            f"{prefix}_change_oi": 0,
            f"{prefix}_volume": 0,
            f"{prefix}_ltp": 0.0,
            f"{prefix}_change": 0.0,
            f"{prefix}_iv": None,
        }
    return {
        f"{prefix}_oi": quote.open_interest,
        f"{prefix}_change_oi": quote.change_in_open_interest,
        f"{prefix}_volume": quote.total_traded_volume,
        f"{prefix}_ltp": quote.last_traded_price,
        f"{prefix}_change": quote.change,
        f"{prefix}_iv": quote.implied_volatility,
    }


def chain_frame(strikes: Sequence[Strike], atm_price: float | None = None) -> pd.DataFrame:
    """One row per strike, calls left and puts right of the strike column.

    Args:
        strikes: Windowed strikes.
        atm_price: ATM strike price, flagged in the ``is_atm`` column.
    """
    rows = []
    for s in strikes:
        row = {"strike": s.strike_price, "is_atm": s.strike_price == atm_price}
        row.update(_side("ce", s.call))
        row.update(_side("pe", s.put))
        rows.append(row)
    return pd.DataFrame(rows, columns=CHAIN_COLUMNS)


def chart_series(strikes: Sequence[Strike]) -> pd.DataFrame:
    """Per-strike OI, change in OI and volume in lakhs, indexed by strike."""
    frame = chain_frame(strikes)
    series = pd.DataFrame(
        {
            "call_oi": frame["ce_oi"],
            "put_oi": frame["pe_oi"],
            "call_change_oi": frame["ce_change_oi"],
            "put_change_oi": frame["pe_change_oi"],
            "call_volume": frame["ce_volume"],
            "put_volume": frame["pe_volume"],
        },
        columns=SERIES_COLUMNS,
    ).astype(float) / LAKH
    series.index = pd.Index(frame["strike"], name="strike")
    return series


def export_csv(strikes: Sequence[Strike], path: str | Path, atm_price: float | None = None) -> Path:
    """Write the option-chain table to CSV and return the path."""
    path = Path(path)
    chain_frame(strikes, atm_price).to_csv(path, index=False)
    return path
