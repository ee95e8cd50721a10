"""Canonical option-chain schema.

Both exchange normalizers produce these dataclasses; nothing downstream
looks at the raw upstream shapes again. All types are frozen: a
snapshot is built once per fetch and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Exchange(str, Enum):
    """Upstream exchange a payload came from."""

    NSE = "NSE"
    BSE = "BSE"


@dataclass(frozen=True)
class StrikeQuote:
    """One side (call or put) of a strike.

    Attributes:
        strike_price: Strike price, shared with the sibling side.
        open_interest: Outstanding contracts, in lots.
        change_in_open_interest: Signed OI change since the prior session.
        total_traded_volume: Contracts traded today.
        last_traded_price: Last traded premium.
        change: Signed absolute premium change.
        implied_volatility: IV in percent, or None when not quoted.
        bid_price: Best bid.
        bid_quantity: Quantity at best bid.
        ask_price: Best offer.
        ask_quantity: Quantity at best offer.
    """

    strike_price: float
    open_interest: int = 0
    change_in_open_interest: int = 0
    total_traded_volume: int = 0
    last_traded_price: float = 0.0
    change: float = 0.0
    implied_volatility: float | None = None
    bid_price: float = 0.0
    bid_quantity: int = 0
    ask_price: float = 0.0
    ask_quantity: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "strike_price": self.strike_price,
            "open_interest": self.open_interest,
            "change_in_open_interest": self.change_in_open_interest,
            "total_traded_volume": self.total_traded_volume,
            "last_traded_price": self.last_traded_price,
            "change": self.change,
            "implied_volatility": self.implied_volatility,
            "bid_price": self.bid_price,
            "bid_quantity": self.bid_quantity,
            "ask_price": self.ask_price,
            "ask_quantity": self.ask_quantity,
        }


@dataclass(frozen=True)
class Strike:
    """A strike price with its call and put quotes.

    At least one side is present.
    """

    strike_price: float
    call: StrikeQuote | None = None
    put: StrikeQuote | None = None

    def __post_init__(self) -> None:
        if self.call is None and self.put is None:
            raise ValueError(f"Strike {self.strike_price} has neither call nor put")

    @property
    def call_oi(self) -> int:
        """Call open interest, 0 when the call side is absent."""
        return self.call.open_interest if self.call else 0

    @property
    def put_oi(self) -> int:
        """Put open interest, 0 when the put side is absent."""
        return self.put.open_interest if self.put else 0

    @property
    def call_change_oi(self) -> int:
        return self.call.change_in_open_interest if self.call else 0

    @property
    def put_change_oi(self) -> int:
        return self.put.change_in_open_interest if self.put else 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "strike_price": self.strike_price,
            "call": self.call.to_dict() if self.call else None,
            "put": self.put.to_dict() if self.put else None,
        }


@dataclass(frozen=True)
class ChainSnapshot:
    """Normalized option chain for one symbol and expiry at a point in time.

    Attributes:
        symbol: Index symbol (e.g. NIFTY).
        exchange: Source exchange.
        underlying_price: Spot price of the index, always positive.
        timestamp: When the upstream data was valid.
        expiry: Expiry the chain belongs to ("" when unknown).
        strikes: Strikes in ascending price order, unique by price.
        available_expiries: Expiries the upstream offers.
    """

    symbol: str
    exchange: Exchange
    underlying_price: float
    timestamp: datetime
    expiry: str = ""
    strikes: tuple[Strike, ...] = field(default_factory=tuple)
    available_expiries: tuple[str, ...] = field(default_factory=tuple)

    def get_strike(self, strike_price: float) -> Strike | None:
        """Look up a strike by price."""
        for s in self.strikes:
            if s.strike_price == strike_price:
                return s
        return None

    @property
    def strike_prices(self) -> list[float]:
        return [s.strike_price for s in self.strikes]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "symbol": self.symbol,
            "exchange": self.exchange.value,
            "underlying_price": self.underlying_price,
            "timestamp": self.timestamp.isoformat(),
            "expiry": self.expiry,
            "available_expiries": list(self.available_expiries),
            "strikes": [s.to_dict() for s in self.strikes],
        }
