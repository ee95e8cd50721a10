"""Static per-symbol contract metadata.

Lot size converts OI/volume counted in lots into share-equivalent
units. Strike interval is the spacing of the listed strike ladder.
Adding a symbol is a one-line change to SYMBOL_METADATA.
"""

from __future__ import annotations

from dataclasses import dataclass

from oichain.errors import ConfigError

DEFAULT_LOT_SIZE = 1
DEFAULT_STRIKE_INTERVAL = 50.0


@dataclass(frozen=True)
class SymbolMetadata:
    """Contract specification for one index.

    Attributes:
        exchange: 'NSE' or 'BSE'.
        lot_size: Contract multiplier.
        strike_interval: Distance between adjacent listed strikes.
    """

    exchange: str
    lot_size: int
    strike_interval: float


SYMBOL_METADATA: dict[str, SymbolMetadata] = {
    "NIFTY": SymbolMetadata("NSE", lot_size=65, strike_interval=50.0),
    "BANKNIFTY": SymbolMetadata("NSE", lot_size=30, strike_interval=100.0),
    "FINNIFTY": SymbolMetadata("NSE", lot_size=60, strike_interval=50.0),
    "MIDCPNIFTY": SymbolMetadata("NSE", lot_size=120, strike_interval=25.0),
    "SENSEX": SymbolMetadata("BSE", lot_size=20, strike_interval=100.0),
    "BANKEX": SymbolMetadata("BSE", lot_size=15, strike_interval=100.0),
}


def _lookup(symbol: str | None) -> SymbolMetadata | None:
    if not symbol:
        return None
    return SYMBOL_METADATA.get(symbol.strip().upper())


def lot_size_of(symbol: str | None, override: int | None = None) -> int:
    """Lot size for a symbol (case-insensitive), 1 if unknown.

    Args:
        symbol: Index symbol, e.g. 'nifty'.
        override: Caller-supplied lot size; must be positive.

    Raises:
        ConfigError: If ``override`` is not positive.
    """
    if override is not None:
        if override <= 0:
            raise ConfigError(f"Lot size override must be positive, got {override}")
        return int(override)
    meta = _lookup(symbol)
    return meta.lot_size if meta else DEFAULT_LOT_SIZE


def strike_interval_of(symbol: str | None, override: float | None = None) -> float:
    """Strike spacing for a symbol (case-insensitive), 50 if unknown.

    Raises:
        ConfigError: If ``override`` is not positive.
    """
    if override is not None:
        if override <= 0:
            raise ConfigError(
                f"Strike interval override must be positive, got {override}"
            )
        return float(override)
    meta = _lookup(symbol)
    return meta.strike_interval if meta else DEFAULT_STRIKE_INTERVAL


def exchange_of(symbol: str | None) -> str | None:
    """Exchange listing the symbol, or None if unknown."""
    meta = _lookup(symbol)
    return meta.exchange if meta else None


def supported_symbols(exchange: str | None = None) -> list[str]:
    """List known symbols, optionally for one exchange."""
    return sorted(
        name
        for name, meta in SYMBOL_METADATA.items()
        if exchange is None or meta.exchange == exchange.upper()
    )


def round_to_strike(price: float, symbol: str | None) -> float:
    """Round a price to the nearest strike on the symbol's ladder."""
    interval = strike_interval_of(symbol)
    return round(price / interval) * interval
