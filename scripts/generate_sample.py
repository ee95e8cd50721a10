#!/usr/bin/env python3
"""Generate synthetic option-chain payloads for testing.

Creates one random strike ladder around a base price and writes it in
both upstream shapes:
- nse_<symbol>.json: NSE-shaped ``records.data`` rows with CE/PE objects
- bse_<symbol>.json: BSE-shaped flat ``Table`` rows, comma-formatted
  strings, ``C_`` prefixed call fields

Both files describe the same strikes, so normalizing either gives the
same chain.

Output: data/sample/ directory.
"""

from __future__ import annotations

import json
import os
import random
import sys
from datetime import datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from oichain.symbols import round_to_strike, strike_interval_of


def _generate_ladder(base_price: float, symbol: str, num_strikes: int) -> list[dict]:
    """Random OI/volume/LTP for strikes centered on the base price."""
    interval = strike_interval_of(symbol)
    atm = round_to_strike(base_price, symbol)
    half = num_strikes // 2

    ladder = []
    for i in range(-half, half + 1):
        strike = atm + i * interval
        sides = {}
        for side, itm_sign in (("ce", -1), ("pe", 1)):
            intrinsic = max(0.0, itm_sign * (strike - base_price))
            ltp = max(1.0, intrinsic + 150 - abs(i) * 10 + random.uniform(0, 20))
            sides[side] = {
                "oi": random.randint(100_000, 600_000),
                "change_oi": random.randint(-50_000, 50_000),
                "volume": random.randint(50_000, 250_000),
                "ltp": round(ltp, 2),
                "change": round(random.uniform(-5, 5), 2),
                "iv": round(random.uniform(12, 20), 2),
            }
        ladder.append({"strike": strike, **sides})
    return ladder


def to_nse_payload(symbol: str, expiry: str, spot: float, ladder: list[dict], when: datetime) -> dict:
    """Render a ladder as an NSE-shaped payload."""

    def side(strike: float, q: dict) -> dict:
        return {
            "strikePrice": strike,
            "expiryDate": expiry,
            "underlying": symbol,
            "openInterest": q["oi"],
            "changeinOpenInterest": q["change_oi"],
            "totalTradedVolume": q["volume"],
            "impliedVolatility": q["iv"],
            "lastPrice": q["ltp"],
            "change": q["change"],
            "bidQty": random.randint(50, 1000),
            "bidprice": round(q["ltp"] * 0.99, 2),
            "askQty": random.randint(50, 1000),
            "askPrice": round(q["ltp"] * 1.01, 2),
            "underlyingValue": spot,
        }

    return {
        "success": True,
        "symbol": symbol,
        "expiry": expiry,
        "data": {
            "records": {
                "expiryDates": [expiry],
                "data": [
                    {
                        "strikePrice": row["strike"],
                        "expiryDate": expiry,
                        "CE": side(row["strike"], row["ce"]),
                        "PE": side(row["strike"], row["pe"]),
                    }
                    for row in ladder
                ],
                "underlyingValue": spot,
                "timestamp": when.strftime("%d-%b-%Y %H:%M:%S"),
            }
        },
    }


def to_bse_payload(symbol: str, expiry: str, spot: float, ladder: list[dict], when: datetime) -> dict:
    """Render a ladder as a BSE-shaped payload."""

    def num(value: float, decimals: int = 2) -> str:
        return f"{value:,.{decimals}f}"

    table = []
    for row in ladder:
        entry = {
            "Strike_Price": num(row["strike"]),
            "End_TimeStamp": expiry,
            "UlaValue": num(spot),
        }
        for prefix, q in (("C_", row["ce"]), ("", row["pe"])):
            entry.update({
                f"{prefix}Open_Interest": num(q["oi"], 0),
                f"{prefix}Absolute_Change_OI": num(q["change_oi"], 0),
                f"{prefix}Vol_Traded": num(q["volume"], 0),
                f"{prefix}Last_Trd_Price": num(q["ltp"]),
                f"{prefix}NetChange": num(q["change"]),
                f"{prefix}IV": num(q["iv"]),
                f"{prefix}BIdQty": "",
                f"{prefix}BidPrice": "",
                f"{prefix}OfferPrice": "",
                f"{prefix}OfferQty": "",
            })
        table.append(entry)

    return {
        "success": True,
        "symbol": symbol,
        "expiry": expiry,
        "source": "BSE",
        "data": {
            "Table": table,
            "ASON": {"DT_TM": when.strftime("%d %b %Y | %H:%M ")},
            "UlaValue": num(spot),
            "expiryDates": [expiry],
        },
    }


def generate_sample_data(
    output_dir: str | None = None,
    symbol: str = "NIFTY",
    base_price: float = 23750.0,
    expiry: str = "09-Jan-2026",
    num_strikes: int = 31,
    seed: int = 42,
) -> None:
    """Write matching NSE and BSE sample payloads.

    Args:
        output_dir: Output directory (default: data/sample/).
        symbol: Index symbol.
        base_price: Underlying price to center the ladder on.
        expiry: Expiry label stamped on every row.
        num_strikes: Number of strikes in the ladder.
        seed: Random seed.
    """
    if output_dir is None:
        output_dir = str(Path(__file__).parent.parent / "data" / "sample")

    os.makedirs(output_dir, exist_ok=True)
    random.seed(seed)  # Reproducible

    spot = round(base_price + random.uniform(-50, 50), 2)
    ladder = _generate_ladder(spot, symbol, num_strikes)
    when = datetime.now().replace(second=0, microsecond=0)

    outputs = {
        f"nse_{symbol.lower()}.json": to_nse_payload(symbol, expiry, spot, ladder, when),
        f"bse_{symbol.lower()}.json": to_bse_payload(symbol, expiry, spot, ladder, when),
    }
    for name, payload in outputs.items():
        with open(os.path.join(output_dir, name), "w") as f:
            json.dump(payload, f, indent=2)

    print(f"Generated {len(ladder)} strikes for {symbol} around {spot}")
    print(f"   Strikes: {ladder[0]['strike']:.0f} - {ladder[-1]['strike']:.0f}")
    print(f"   Output: {output_dir}/ ({', '.join(outputs)})")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Generate synthetic option-chain payloads")
    parser.add_argument("--output", "-o", help="Output directory")
    parser.add_argument("--symbol", default="NIFTY", help="Index symbol")
    parser.add_argument("--price", type=float, default=23750.0, help="Underlying price")
    parser.add_argument("--expiry", default="09-Jan-2026", help="Expiry label")
    parser.add_argument("--strikes", type=int, default=31, help="Number of strikes")
    args = parser.parse_args()

    generate_sample_data(
        output_dir=args.output,
        symbol=args.symbol.upper(),
        base_price=args.price,
        expiry=args.expiry,
        num_strikes=args.strikes,
    )
