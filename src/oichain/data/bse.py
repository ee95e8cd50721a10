"""BSE option-chain normalizer.

BSE sends one flat row per strike. Call-side fields carry a ``C_``
prefix, put-side fields use the bare name, and every number is a
comma-grouped string (or an empty string)::

    {
        "data": {
            "Table": [{"Strike_Price": "81,000.00", "C_Open_Interest": "1,250",
                       "Open_Interest": "980", "End_TimeStamp": "09 Jan 2026",
                       "UlaValue": "81,234.56", ...}, ...],
            "ASON": {"DT_TM": "07 Jan 2026 | 19:11 "},
            "UlaValue": "81,234.56",
            "expiryDates": ["09 Jan 2026", ...]
        },
        "symbol": "SENSEX",
        "expiry": "09 Jan 2026",
        "source": "BSE"
    }
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone

from oichain.data.base import IST, ChainNormalizer, ChainRow, RawChain, build_quote
from oichain.data.schema import Exchange
from oichain.errors import DataError
from oichain.formatting import parse_lenient_float

logger = logging.getLogger(__name__)

_SIDE_FIELDS = {
    "open_interest": "Open_Interest",
    "change_in_open_interest": "Absolute_Change_OI",
    "total_traded_volume": "Vol_Traded",
    "last_traded_price": "Last_Trd_Price",
    "change": "NetChange",
    "implied_volatility": "IV",
    "bid_price": "BidPrice",
    "bid_quantity": "BIdQty",
    "ask_price": "OfferPrice",
    "ask_quantity": "OfferQty",
}

BSE_PUT_FIELDS = dict(_SIDE_FIELDS)
BSE_CALL_FIELDS = {canonical: f"C_{name}" for canonical, name in _SIDE_FIELDS.items()}

BSE_STRIKE_FIELDS = ("Strike_Price", "Strike_Price1")

BSE_TIMESTAMP_FORMATS = ("%d %b %Y %H:%M:%S", "%d %b %Y %H:%M", "%d %b %Y")


@dataclass
class BseRow:
    """One flat row of a BSE ``Table``."""

    fields: dict
    expiry: str | None
    underlying_value: object

    @classmethod
    def from_json(cls, row: dict) -> BseRow:
        expiry = row.get("End_TimeStamp")
        return cls(
            fields=row,
            expiry=expiry.strip() if isinstance(expiry, str) and expiry.strip() else None,
            underlying_value=row.get("UlaValue"),
        )

    def strike_price(self) -> float | None:
        """First non-zero strike among the candidate columns."""
        for name in BSE_STRIKE_FIELDS:
            value = parse_lenient_float(self.fields.get(name), None)
            if value:
                return value
        return None


@dataclass
class BsePayload:
    """Typed view of a BSE option-chain payload."""

    symbol: str
    expiry: str
    rows: list[BseRow] = field(default_factory=list)
    underlying_value: object = None
    expiry_dates: list[str] = field(default_factory=list)
    as_on: object = None

    @classmethod
    def from_json(cls, raw: dict) -> BsePayload:
        """Parse a decoded BSE payload, enveloped or bare.

        Raises:
            DataError: If the payload has no ``Table`` list.
        """
        if not isinstance(raw, dict):
            raise DataError("BSE payload must be a JSON object")

        data = raw.get("data") if isinstance(raw.get("data"), dict) else raw
        table = data.get("Table")
        if not isinstance(table, list):
            raise DataError("BSE payload has no data.Table rows")

        ason = data.get("ASON")
        expiry_dates = data.get("expiryDates")
        return cls(
            symbol=str(raw.get("symbol") or "").upper(),
            expiry=str(raw.get("expiry") or ""),
            rows=[BseRow.from_json(r) for r in table if isinstance(r, dict)],
            underlying_value=data.get("UlaValue"),
            expiry_dates=expiry_dates if isinstance(expiry_dates, list) else [],
            as_on=ason.get("DT_TM") if isinstance(ason, dict) else None,
        )


def parse_bse_timestamp(value) -> datetime:
    """Parse a BSE display timestamp such as '07 Jan 2026 | 19:11 '.

    Unparseable input falls back to the current time with a warning;
    it never fails the transform.
    """
    if isinstance(value, str):
        text = re.sub(r"\s+", " ", value.replace("|", " ")).strip()
        for fmt in BSE_TIMESTAMP_FORMATS:
            try:
                return datetime.strptime(text, fmt).replace(tzinfo=IST)
            except ValueError:
                continue

    logger.warning("Cannot parse BSE timestamp %r, using current time", value)
    return datetime.now(timezone.utc)


class BseNormalizer(ChainNormalizer):
    """Normalizer for BSE-shaped payloads."""

    exchange = Exchange.BSE

    def extract(self, raw: dict) -> RawChain:
        payload = BsePayload.from_json(raw)
        return RawChain(
            symbol=payload.symbol,
            expiry=payload.expiry,
            rows=[self._convert_row(row) for row in payload.rows],
            underlying_price=parse_lenient_float(payload.underlying_value, None),
            expiry_dates=payload.expiry_dates,
            timestamp=parse_bse_timestamp(payload.as_on),
        )

    @staticmethod
    def _convert_row(row: BseRow) -> ChainRow:
        strike = row.strike_price()
        if strike is None:
            return ChainRow(strike_price=None, expiry=row.expiry)

        return ChainRow(
            strike_price=strike,
            call=build_quote(row.fields, BSE_CALL_FIELDS, strike, zero_iv_is_absent=True),
            put=build_quote(row.fields, BSE_PUT_FIELDS, strike, zero_iv_is_absent=True),
            expiry=row.expiry,
            underlying_price=parse_lenient_float(row.underlying_value, None),
        )
