"""Exchange normalizers and the canonical option-chain schema."""

from __future__ import annotations

from oichain.data.base import ChainNormalizer
from oichain.data.bse import BseNormalizer
from oichain.data.nse import NseNormalizer
from oichain.data.schema import ChainSnapshot, Exchange, Strike, StrikeQuote
from oichain.errors import ConfigError

NORMALIZERS: dict[Exchange, type[ChainNormalizer]] = {
    Exchange.NSE: NseNormalizer,
    Exchange.BSE: BseNormalizer,
}


def to_exchange(exchange: Exchange | str) -> Exchange:
    """Coerce an exchange name to the enum.

    Raises:
        ConfigError: For an unknown exchange name.
    """
    if isinstance(exchange, Exchange):
        return exchange
    try:
        return Exchange(str(exchange).strip().upper())
    except ValueError:
        raise ConfigError(f"Unknown exchange: {exchange!r}") from None


def detect_exchange(raw: dict) -> Exchange:
    """Guess the exchange of a proxy payload.

    The proxy tags BSE responses with ``source: "BSE"``; a ``Table`` row
    list is also unambiguous. Anything else is treated as NSE.
    """
    if isinstance(raw, dict):
        if str(raw.get("source", "")).upper() == "BSE":
            return Exchange.BSE
        data = raw.get("data") if isinstance(raw.get("data"), dict) else raw
        if "Table" in data:
            return Exchange.BSE
    return Exchange.NSE


def normalize(exchange: Exchange | str, raw: dict) -> ChainSnapshot:
    """Convert a raw exchange payload into a ChainSnapshot.

    Args:
        exchange: Exchange the payload came from.
        raw: Decoded JSON payload.

    Raises:
        ConfigError: If the exchange is unknown.
        DataError: If the payload cannot yield a usable snapshot.
    """
    return NORMALIZERS[to_exchange(exchange)]().normalize(raw)


__all__ = [
    "BseNormalizer",
    "ChainNormalizer",
    "ChainSnapshot",
    "Exchange",
    "NseNormalizer",
    "Strike",
    "StrikeQuote",
    "detect_exchange",
    "normalize",
    "to_exchange",
]
