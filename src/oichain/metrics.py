"""Key option-chain metrics over a strike window.

All totals are multiplied by the lot size when the lot multiplier is
enabled (pass ``lot_size=1`` otherwise).

Max pain here is a simplified measure restricted to the strikes passed
in, i.e. the visible window, not the full chain:

    pain(K) = |K - underlying| * (callOI(K) + putOI(K)) * lot_size

Call ``compute_max_pain(snapshot.strikes, ...)`` for the same measure
over every listed strike.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from oichain.data.schema import Strike
from oichain.errors import ConfigError

NEUTRAL_DOMINANCE = 50.0
BULLISH_PCR = 1.2
BEARISH_PCR = 0.8


@dataclass(frozen=True)
class MetricsSnapshot:
    """Derived metrics for one strike window.

    Attributes:
        pcr: Put-call OI ratio. 0.0 is a sentinel meaning undefined
            (no call OI in the window).
        max_pain: Strike minimizing the simplified pain function.
        total_call_oi: Sum of call OI (times lot size).
        total_put_oi: Sum of put OI (times lot size).
        total_call_change_oi: Sum of call change-in-OI (times lot size).
        total_put_change_oi: Sum of put change-in-OI (times lot size).
        call_dominance: Call share of combined OI, percent.
        put_dominance: Put share of combined OI, percent.
    """

    pcr: float
    max_pain: float
    total_call_oi: float
    total_put_oi: float
    total_call_change_oi: float
    total_put_change_oi: float
    call_dominance: float
    put_dominance: float

    @property
    def pcr_defined(self) -> bool:
        """False when pcr is the zero-call-OI sentinel."""
        return self.total_call_oi > 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "pcr": round(self.pcr, 4),
            "pcr_sentiment": pcr_sentiment(self.pcr),
            "max_pain": self.max_pain,
            "total_call_oi": self.total_call_oi,
            "total_put_oi": self.total_put_oi,
            "total_call_change_oi": self.total_call_change_oi,
            "total_put_change_oi": self.total_put_change_oi,
            "call_dominance": round(self.call_dominance, 2),
            "put_dominance": round(self.put_dominance, 2),
        }

    @classmethod
    def from_dict(cls, data: dict) -> MetricsSnapshot:
        """Restore from ``to_dict`` output (used for persisted baselines)."""
        return cls(
            pcr=float(data["pcr"]),
            max_pain=float(data["max_pain"]),
            total_call_oi=float(data["total_call_oi"]),
            total_put_oi=float(data["total_put_oi"]),
            total_call_change_oi=float(data["total_call_change_oi"]),
            total_put_change_oi=float(data["total_put_change_oi"]),
            call_dominance=float(data["call_dominance"]),
            put_dominance=float(data["put_dominance"]),
        )


def pcr_sentiment(pcr: float) -> str:
    """Sentiment label shown next to PCR."""
    if pcr > BULLISH_PCR:
        return "Bullish"
    if pcr < BEARISH_PCR:
        return "Bearish"
    return "Neutral"


def compute_max_pain(
    strikes: Sequence[Strike], underlying_price: float, lot_size: int = 1
) -> float:
    """Strike with the lowest simplified pain; ties go to the lower strike.

    Returns 0.0 for an empty sequence.
    """
    best_strike = 0.0
    best_pain: float | None = None
    for s in strikes:
        pain = abs(s.strike_price - underlying_price) * (
            s.call_oi * lot_size + s.put_oi * lot_size
        )
        if best_pain is None or pain < best_pain:
            best_pain = pain
            best_strike = s.strike_price
    return best_strike


def compute_metrics(
    strikes: Sequence[Strike], lot_size: int, underlying_price: float
) -> MetricsSnapshot:
    """Compute PCR, max pain, OI totals and dominance for a window.

    Args:
        strikes: Windowed strikes (ascending).
        lot_size: Contract multiplier, 1 when the multiplier is off.
        underlying_price: Live underlying price.

    Raises:
        ConfigError: If ``lot_size`` is not positive.
    """
    if lot_size <= 0:
        raise ConfigError(f"lot_size must be positive, got {lot_size}")

    total_call_oi = float(sum(s.call_oi for s in strikes) * lot_size)
    total_put_oi = float(sum(s.put_oi for s in strikes) * lot_size)
    total_call_change = float(sum(s.call_change_oi for s in strikes) * lot_size)
    total_put_change = float(sum(s.put_change_oi for s in strikes) * lot_size)

    pcr = total_put_oi / total_call_oi if total_call_oi > 0 else 0.0

    combined = total_call_oi + total_put_oi
    if combined > 0:
        call_dominance = 100.0 * total_call_oi / combined
        put_dominance = 100.0 - call_dominance
    else:
        call_dominance = put_dominance = NEUTRAL_DOMINANCE

    return MetricsSnapshot(
        pcr=pcr,
        max_pain=compute_max_pain(strikes, underlying_price, lot_size),
        total_call_oi=total_call_oi,
        total_put_oi=total_put_oi,
        total_call_change_oi=total_call_change,
        total_put_change_oi=total_put_change,
        call_dominance=call_dominance,
        put_dominance=put_dominance,
    )
