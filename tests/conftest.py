"""Shared test fixtures for oichain tests."""

from __future__ import annotations

import pytest

from oichain.data.schema import Strike, StrikeQuote
from oichain.metrics import MetricsSnapshot

# Five-strike ladder used across the suite.
LADDER = [
    # strike, ce_oi, ce_chg, ce_vol, ce_ltp, pe_oi, pe_chg, pe_vol, pe_ltp
    (23700.0, 150, 10, 1200, 180.5, 500, -20, 900, 40.25),
    (23750.0, 100, -5, 1500, 140.0, 400, 30, 1100, 55.0),
    (23800.0, 200, 25, 2500, 105.75, 300, 15, 2000, 75.5),
    (23850.0, 300, 40, 1800, 72.0, 200, -10, 1300, 100.0),
    (23900.0, 250, -15, 1000, 48.1, 100, 5, 700, 130.0),
]


def make_strike(price: float, call_oi: int | None = 0, put_oi: int | None = 0,
                call_change: int = 0, put_change: int = 0) -> Strike:
    """Strike with the given OI; pass None to omit a side."""
    call = (
        StrikeQuote(strike_price=price, open_interest=call_oi, change_in_open_interest=call_change)
        if call_oi is not None
        else None
    )
    put = (
        StrikeQuote(strike_price=price, open_interest=put_oi, change_in_open_interest=put_change)
        if put_oi is not None
        else None
    )
    return Strike(strike_price=price, call=call, put=put)


def make_ladder(prices, call_oi=None, put_oi=None) -> list[Strike]:
    """Ascending strikes with optional per-strike OI lists."""
    call_oi = call_oi or [0] * len(prices)
    put_oi = put_oi or [0] * len(prices)
    return [make_strike(p, c, q) for p, c, q in zip(prices, call_oi, put_oi)]


def nse_payload(ladder=LADDER, spot=23810.0, symbol="NIFTY", expiry="09-Jan-2026",
                envelope=True, expiry_dates=("09-Jan-2026", "16-Jan-2026")) -> dict:
    """NSE-shaped payload for a ladder."""
    rows = []
    for strike, ce_oi, ce_chg, ce_vol, ce_ltp, pe_oi, pe_chg, pe_vol, pe_ltp in ladder:
        rows.append({
            "strikePrice": strike,
            "expiryDate": expiry,
            "CE": {
                "strikePrice": strike,
                "openInterest": ce_oi,
                "changeinOpenInterest": ce_chg,
                "totalTradedVolume": ce_vol,
                "lastPrice": ce_ltp,
                "change": 1.5,
                "impliedVolatility": 14.2,
                "bidQty": 75,
                "bidprice": ce_ltp - 0.5,
                "askQty": 150,
                "askPrice": ce_ltp + 0.5,
                "underlyingValue": spot,
            },
            "PE": {
                "strikePrice": strike,
                "openInterest": pe_oi,
                "changeinOpenInterest": pe_chg,
                "totalTradedVolume": pe_vol,
                "lastPrice": pe_ltp,
                "change": -2.0,
                "impliedVolatility": 15.8,
                "bidQty": 50,
                "bidprice": pe_ltp - 0.5,
                "askQty": 25,
                "askPrice": pe_ltp + 0.5,
                "underlyingValue": spot,
            },
        })
    records = {
        "data": rows,
        "expiryDates": list(expiry_dates),
        "underlyingValue": spot,
        "timestamp": "09-Jan-2026 15:30:00",
    }
    if envelope:
        return {"success": True, "symbol": symbol, "expiry": expiry,
                "data": {"records": records}}
    return {"records": records, "symbol": symbol, "expiry": expiry}


def _bse_num(value: float, decimals: int = 2) -> str:
    return f"{value:,.{decimals}f}"


def bse_payload(ladder=LADDER, spot=23810.0, symbol="SENSEX", expiry="09 Jan 2026",
                dt_tm="07 Jan 2026 | 19:11 ", expiry_dates=None) -> dict:
    """BSE-shaped payload for a ladder (comma-formatted strings)."""
    table = []
    for strike, ce_oi, ce_chg, ce_vol, ce_ltp, pe_oi, pe_chg, pe_vol, pe_ltp in ladder:
        table.append({
            "Strike_Price": _bse_num(strike),
            "End_TimeStamp": expiry,
            "UlaValue": _bse_num(spot),
            "C_Open_Interest": _bse_num(ce_oi, 0),
            "C_Absolute_Change_OI": _bse_num(ce_chg, 0),
            "C_Vol_Traded": _bse_num(ce_vol, 0),
            "C_Last_Trd_Price": _bse_num(ce_ltp),
            "C_NetChange": "1.50",
            "C_IV": "14.20",
            "C_BIdQty": "",
            "C_BidPrice": "",
            "C_OfferPrice": "",
            "C_OfferQty": "",
            "Open_Interest": _bse_num(pe_oi, 0),
            "Absolute_Change_OI": _bse_num(pe_chg, 0),
            "Vol_Traded": _bse_num(pe_vol, 0),
            "Last_Trd_Price": _bse_num(pe_ltp),
            "NetChange": "-2.00",
            "IV": "0",
            "BIdQty": "",
            "BidPrice": "",
            "OfferPrice": "",
            "OfferQty": "",
        })
    data = {
        "Table": table,
        "ASON": {"DT_TM": dt_tm},
        "UlaValue": _bse_num(spot),
    }
    if expiry_dates is not None:
        data["expiryDates"] = list(expiry_dates)
    return {"success": True, "symbol": symbol, "expiry": expiry, "source": "BSE", "data": data}


def metrics(pcr=1.0, max_pain=23800.0, call_dominance=50.0, call_oi=1000.0) -> MetricsSnapshot:
    """MetricsSnapshot with only the alert-relevant fields varied."""
    return MetricsSnapshot(
        pcr=pcr,
        max_pain=max_pain,
        total_call_oi=call_oi,
        total_put_oi=call_oi * pcr,
        total_call_change_oi=0.0,
        total_put_change_oi=0.0,
        call_dominance=call_dominance,
        put_dominance=100.0 - call_dominance,
    )


@pytest.fixture
def nse_raw():
    """NSE payload for the five-strike ladder."""
    return nse_payload()


@pytest.fixture
def bse_raw():
    """BSE payload for the five-strike ladder."""
    return bse_payload()


@pytest.fixture
def scenario_strikes():
    """Five strikes 23700-23900 with call OI rising and put OI falling."""
    return make_ladder(
        [23700.0, 23750.0, 23800.0, 23850.0, 23900.0],
        call_oi=[50, 100, 200, 300, 400],
        put_oi=[500, 400, 300, 200, 100],
    )
