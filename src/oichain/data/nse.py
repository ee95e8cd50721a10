"""NSE option-chain normalizer.

NSE rows are already split by strike, with nested ``CE``/``PE``
objects whose keys map almost 1:1 onto StrikeQuote::

    {
        "records": {
            "data": [{"strikePrice": 23800, "expiryDate": "09-Jan-2026",
                      "CE": {...}, "PE": {...}}, ...],
            "expiryDates": ["09-Jan-2026", ...],
            "underlyingValue": 23810.5,
            "timestamp": "09-Jan-2026 15:30:00"
        },
        "symbol": "NIFTY",
        "expiry": "09-Jan-2026"
    }

The proxy may also wrap this as ``{"success": true, "data": {"records":
...}}``, and newer upstream versions put rows under ``filtered.data``
and a per-row ``expiryDates`` string instead of ``expiryDate``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from oichain.data.base import (
    IST,
    ChainNormalizer,
    ChainRow,
    RawChain,
    build_quote,
    parse_iso_timestamp,
)
from oichain.data.schema import Exchange
from oichain.errors import DataError
from oichain.formatting import parse_lenient_float

logger = logging.getLogger(__name__)

NSE_QUOTE_FIELDS = {
    "open_interest": "openInterest",
    "change_in_open_interest": "changeinOpenInterest",
    "total_traded_volume": "totalTradedVolume",
    "last_traded_price": "lastPrice",
    "change": "change",
    "implied_volatility": "impliedVolatility",
    "bid_price": "bidprice",
    "bid_quantity": "bidQty",
    "ask_price": "askPrice",
    "ask_quantity": "askQty",
}

NSE_TIMESTAMP_FORMATS = ("%d-%b-%Y %H:%M:%S", "%d-%b-%Y %H:%M", "%d-%b-%Y")


@dataclass
class NseRow:
    """One strike row of an NSE payload."""

    strike_price: object
    expiry: str | None
    ce: dict | None
    pe: dict | None

    @classmethod
    def from_json(cls, row: dict) -> NseRow:
        ce = row.get("CE") if isinstance(row.get("CE"), dict) else None
        pe = row.get("PE") if isinstance(row.get("PE"), dict) else None
        expiry = row.get("expiryDate") or row.get("expiryDates")
        return cls(
            strike_price=row.get("strikePrice"),
            expiry=expiry if isinstance(expiry, str) else None,
            ce=ce,
            pe=pe,
        )


@dataclass
class NsePayload:
    """Typed view of an NSE option-chain payload."""

    symbol: str
    expiry: str
    rows: list[NseRow] = field(default_factory=list)
    underlying_value: object = None
    expiry_dates: list[str] = field(default_factory=list)
    timestamp: object = None

    @classmethod
    def from_json(cls, raw: dict) -> NsePayload:
        """Parse a decoded NSE payload.

        Raises:
            DataError: If the payload has no records or row list.
        """
        if not isinstance(raw, dict):
            raise DataError("NSE payload must be a JSON object")

        container = raw
        if "records" not in container and isinstance(raw.get("data"), dict):
            container = raw["data"]

        records = container.get("records")
        if not isinstance(records, dict):
            records = {}
        filtered = container.get("filtered")
        if not isinstance(filtered, dict):
            filtered = {}

        rows = records.get("data")
        if not rows:
            rows = filtered.get("data")
        if not isinstance(rows, list):
            raise DataError("NSE payload has no records.data rows")

        expiry_dates = records.get("expiryDates")
        return cls(
            symbol=str(raw.get("symbol") or container.get("symbol") or "").upper(),
            expiry=str(raw.get("expiry") or container.get("expiry") or ""),
            rows=[NseRow.from_json(r) for r in rows if isinstance(r, dict)],
            underlying_value=records.get("underlyingValue"),
            expiry_dates=expiry_dates if isinstance(expiry_dates, list) else [],
            timestamp=records.get("timestamp") or raw.get("timestamp"),
        )


def parse_nse_timestamp(value) -> datetime:
    """Parse an NSE timestamp such as '09-Jan-2026 15:30:00'.

    ISO-8601 strings (as re-emitted by the proxy) are accepted too.
    Unparseable input falls back to the current time with a warning.
    """
    if isinstance(value, str) and value.strip():
        text = value.strip()
        for fmt in NSE_TIMESTAMP_FORMATS:
            try:
                return datetime.strptime(text, fmt).replace(tzinfo=IST)
            except ValueError:
                continue
        parsed = parse_iso_timestamp(text)
        if parsed is not None:
            return parsed

    logger.warning("Cannot parse NSE timestamp %r, using current time", value)
    return datetime.now(timezone.utc)


class NseNormalizer(ChainNormalizer):
    """Normalizer for NSE-shaped payloads."""

    exchange = Exchange.NSE

    def extract(self, raw: dict) -> RawChain:
        payload = NsePayload.from_json(raw)
        return RawChain(
            symbol=payload.symbol,
            expiry=payload.expiry,
            rows=[self._convert_row(row) for row in payload.rows],
            underlying_price=parse_lenient_float(payload.underlying_value, None),
            expiry_dates=payload.expiry_dates,
            timestamp=parse_nse_timestamp(payload.timestamp),
        )

    @staticmethod
    def _convert_row(row: NseRow) -> ChainRow:
        strike = parse_lenient_float(row.strike_price, None)
        if strike is None:
            for side in (row.ce, row.pe):
                if side:
                    strike = parse_lenient_float(side.get("strikePrice"), None)
                    if strike is not None:
                        break
        if strike is None:
            return ChainRow(strike_price=None, expiry=row.expiry)

        embedded = None
        for side in (row.ce, row.pe):
            if side:
                embedded = parse_lenient_float(side.get("underlyingValue"), None)
                if embedded:
                    break

        return ChainRow(
            strike_price=strike,
            call=build_quote(row.ce, NSE_QUOTE_FIELDS, strike) if row.ce else None,
            put=build_quote(row.pe, NSE_QUOTE_FIELDS, strike) if row.pe else None,
            expiry=row.expiry,
            underlying_price=embedded,
        )
