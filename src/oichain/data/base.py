"""Abstract base class for exchange normalizers.

Each exchange sends a structurally different payload. A normalizer's
only job is to read its own shape into a RawChain of typed rows; the
shared assembly steps (dedupe, ordering, expiry list, underlying price)
live here so both exchanges behave identically downstream.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from oichain.data.schema import ChainSnapshot, Exchange, Strike, StrikeQuote
from oichain.errors import DataError
from oichain.formatting import parse_lenient_float

logger = logging.getLogger(__name__)

IST = timezone(timedelta(hours=5, minutes=30), "IST")


@dataclass
class ChainRow:
    """One upstream row after field extraction.

    Attributes:
        strike_price: Parsed strike, or None when neither candidate field
            yielded a number.
        call: Call-side quote, if the row has one.
        put: Put-side quote, if the row has one.
        expiry: Row-level expiry string, if any.
        underlying_price: Underlying value embedded in the row, if any.
    """

    strike_price: float | None
    call: StrikeQuote | None = None
    put: StrikeQuote | None = None
    expiry: str | None = None
    underlying_price: float | None = None


@dataclass
class RawChain:
    """Exchange-agnostic intermediate produced by ChainNormalizer.extract."""

    symbol: str
    expiry: str
    rows: list[ChainRow] = field(default_factory=list)
    underlying_price: float | None = None
    expiry_dates: list[str] = field(default_factory=list)
    timestamp: datetime | None = None


class ChainNormalizer(ABC):
    """Converts one exchange's raw payload into a ChainSnapshot.

    Subclasses implement ``extract``; ``normalize`` is shared.
    """

    exchange: Exchange

    @abstractmethod
    def extract(self, raw: dict) -> RawChain:
        """Read an exchange payload into typed rows.

        Args:
            raw: Decoded JSON payload as delivered by the proxy layer.

        Returns:
            RawChain with every row the payload contains, including rows
            whose strike could not be parsed.

        Raises:
            DataError: If the payload is not a mapping or lacks its row
                container entirely.
        """

    def normalize(self, raw: dict) -> ChainSnapshot:
        """Build a ChainSnapshot from a raw payload.

        Raises:
            DataError: If no usable strikes or no positive underlying
                price can be derived.
        """
        chain = self.extract(raw)
        return assemble_snapshot(chain, self.exchange)


def assemble_snapshot(chain: RawChain, exchange: Exchange) -> ChainSnapshot:
    """Apply the shared dedupe/sort/derive steps to an extracted chain."""
    strikes = _collect_strikes(chain.rows)
    if not strikes:
        raise DataError(
            f"No usable strikes in {exchange.value} payload for {chain.symbol or '?'}"
        )

    return ChainSnapshot(
        symbol=chain.symbol,
        exchange=exchange,
        underlying_price=_derive_underlying(chain),
        timestamp=chain.timestamp or datetime.now(timezone.utc),
        expiry=chain.expiry,
        strikes=tuple(strikes),
        available_expiries=tuple(_derive_expiries(chain)),
    )


def _collect_strikes(rows: list[ChainRow]) -> list[Strike]:
    seen: dict[float, Strike] = {}
    skipped = 0
    duplicates = 0

    for row in rows:
        if row.strike_price is None or (row.call is None and row.put is None):
            skipped += 1
            continue
        if row.strike_price in seen:
            duplicates += 1
            continue
        seen[row.strike_price] = Strike(
            strike_price=row.strike_price, call=row.call, put=row.put
        )

    if skipped:
        logger.debug("Discarded %d rows without a strike price or quotes", skipped)
    if duplicates:
        logger.warning("Dropped %d duplicate strike rows (kept first seen)", duplicates)

    return sorted(seen.values(), key=lambda s: s.strike_price)


def _derive_expiries(chain: RawChain) -> list[str]:
    listed = [e.strip() for e in chain.expiry_dates if isinstance(e, str) and e.strip()]
    if listed:
        return list(dict.fromkeys(listed))
    return sorted({row.expiry for row in chain.rows if row.expiry})


def _derive_underlying(chain: RawChain) -> float:
    if chain.underlying_price and chain.underlying_price > 0:
        return chain.underlying_price

    if chain.rows:
        embedded = chain.rows[0].underlying_price
        if embedded and embedded > 0:
            return embedded

    raise DataError(f"No positive underlying price for {chain.symbol or '?'}")


def parse_iso_timestamp(value) -> datetime | None:
    """Parse an ISO-8601 string (with optional trailing Z), else None."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=IST)
    return parsed


_INT_FIELDS = frozenset({
    "open_interest",
    "change_in_open_interest",
    "total_traded_volume",
    "bid_quantity",
    "ask_quantity",
})


def build_quote(
    source,
    field_names: dict[str, str],
    strike_price: float,
    zero_iv_is_absent: bool = False,
) -> StrikeQuote:
    """Build a StrikeQuote from an upstream mapping.

    Every numeric field passes through parse_lenient_float and defaults
    to 0, except implied volatility which defaults to None.

    Args:
        source: Upstream mapping for one side of a strike.
        field_names: Canonical StrikeQuote field -> upstream key.
        strike_price: Parsed strike shared by both sides.
        zero_iv_is_absent: Treat an IV of exactly 0 as not quoted.
    """
    values: dict = {}
    for canonical, upstream in field_names.items():
        raw = source.get(upstream)
        if canonical == "implied_volatility":
            iv = parse_lenient_float(raw, None)
            if zero_iv_is_absent and iv == 0:
                iv = None
            values[canonical] = iv
        elif canonical in _INT_FIELDS:
            values[canonical] = int(round(parse_lenient_float(raw, 0.0)))
        else:
            values[canonical] = parse_lenient_float(raw, 0.0)

    return StrikeQuote(strike_price=strike_price, **values)
