"""Normalize -> window -> metrics -> alerts, as one explicit call.

``run_cycle`` is the pure pipeline for a single fetched payload.
``ChainSession`` is the caller-side state an integrator keeps between
fetch cycles: the current symbol selection, the previous metrics
baseline, the last good result and the accumulated alerts.

Usage:
    from oichain.pipeline import ChainSession
    from oichain.window import WindowConfig

    session = ChainSession("NIFTY", config=WindowConfig(window_size=10))
    tag = session.begin_fetch()
    raw = fetch_somehow(tag.symbol, tag.expiry)  # outside this package
    result = session.receive(tag, raw)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from oichain.alerts import Alert, diff_metrics
from oichain.data import normalize, to_exchange
from oichain.data.schema import ChainSnapshot, Exchange, Strike
from oichain.errors import DataError
from oichain.metrics import MetricsSnapshot, compute_metrics
from oichain.symbols import exchange_of, lot_size_of
from oichain.window import WindowConfig, find_atm_index, select_window

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleResult:
    """Everything the rendering layer needs from one fetch cycle."""

    snapshot: ChainSnapshot
    window: list[Strike]
    atm_strike: Strike
    metrics: MetricsSnapshot
    lot_size: int
    alerts: list[Alert] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "symbol": self.snapshot.symbol,
            "exchange": self.snapshot.exchange.value,
            "expiry": self.snapshot.expiry,
            "timestamp": self.snapshot.timestamp.isoformat(),
            "underlying_price": self.snapshot.underlying_price,
            "available_expiries": list(self.snapshot.available_expiries),
            "atm_strike": self.atm_strike.strike_price,
            "lot_size": self.lot_size,
            "window": [s.to_dict() for s in self.window],
            "metrics": self.metrics.to_dict(),
            "alerts": [a.to_dict() for a in self.alerts],
        }


def analyze_snapshot(
    snapshot: ChainSnapshot,
    config: WindowConfig,
    previous: MetricsSnapshot | None = None,
    use_lot_size: bool = False,
    lot_size: int | None = None,
) -> CycleResult:
    """Window, aggregate and diff an already-normalized snapshot.

    Args:
        snapshot: Normalized chain.
        config: Window settings.
        previous: Baseline metrics from the prior cycle, if any.
        use_lot_size: Multiply OI totals by the symbol's lot size.
        lot_size: Optional lot size override (validated even when the
            multiplier is off).

    Raises:
        ConfigError: If ``lot_size`` is not positive.
    """
    multiplier = lot_size_of(snapshot.symbol, lot_size)
    lots = multiplier if use_lot_size else 1

    window = select_window(snapshot.strikes, snapshot.underlying_price, config)
    atm = snapshot.strikes[find_atm_index(snapshot.strikes, snapshot.underlying_price)]
    metrics = compute_metrics(window, lots, snapshot.underlying_price)

    return CycleResult(
        snapshot=snapshot,
        window=window,
        atm_strike=atm,
        metrics=metrics,
        lot_size=lots,
        alerts=diff_metrics(metrics, previous),
    )


def run_cycle(
    exchange: Exchange | str,
    raw: dict,
    config: WindowConfig,
    previous: MetricsSnapshot | None = None,
    use_lot_size: bool = False,
    lot_size: int | None = None,
) -> CycleResult:
    """Run the full pipeline on one raw payload.

    Raises:
        DataError: If the payload cannot be normalized. Nothing partial
            is returned.
        ConfigError: On invalid exchange or lot size.
    """
    snapshot = normalize(exchange, raw)
    return analyze_snapshot(snapshot, config, previous, use_lot_size, lot_size)


@dataclass(frozen=True)
class FetchTag:
    """Identifies what a fetch was issued for."""

    symbol: str
    expiry: str
    exchange: Exchange
    sequence: int


class ChainSession:
    """Caller-side state across fetch cycles for one dashboard view.

    Responses are tagged with the symbol/expiry they were requested for;
    a response whose tag no longer matches the current selection is
    discarded. A DataError keeps the last good result on display and is
    reported separately from "never loaded".

    Args:
        symbol: Index symbol.
        expiry: Expiry to request ("" for the nearest).
        exchange: Source exchange; looked up from the symbol table when
            omitted, defaulting to NSE.
        config: Window settings.
        use_lot_size: Apply the lot-size multiplier to totals.
        lot_size: Optional lot size override.
    """

    def __init__(
        self,
        symbol: str,
        expiry: str = "",
        exchange: Exchange | str | None = None,
        config: WindowConfig | None = None,
        use_lot_size: bool = False,
        lot_size: int | None = None,
    ) -> None:
        self.config = config or WindowConfig()
        self.use_lot_size = use_lot_size
        self.lot_size = lot_size_of(symbol, lot_size) if lot_size is not None else None
        self.alerts: list[Alert] = []
        self.last_result: CycleResult | None = None
        self.last_error: Exception | None = None
        self._sequence = 0
        self._current = self._next_tag(symbol, expiry, exchange)

    @property
    def current(self) -> FetchTag:
        return self._current

    @property
    def status(self) -> str:
        """One of 'idle', 'ok', 'error' or 'stale'.

        'error' means nothing has loaded yet; 'stale' means the last
        fetch failed but an older good result is still shown.
        """
        if self.last_error is None:
            return "ok" if self.last_result else "idle"
        return "stale" if self.last_result else "error"

    def select(
        self,
        symbol: str,
        expiry: str = "",
        exchange: Exchange | str | None = None,
    ) -> FetchTag:
        """Switch to a new symbol/expiry; in-flight fetches become stale."""
        tag = self._next_tag(symbol, expiry, exchange)
        changed = (tag.symbol, tag.expiry, tag.exchange) != (
            self._current.symbol,
            self._current.expiry,
            self._current.exchange,
        )
        self._current = tag

        if changed:
            # Metrics of a different chain are not a valid baseline.
            self.last_result = None
            self.last_error = None
        return self._current

    def _next_tag(
        self,
        symbol: str,
        expiry: str,
        exchange: Exchange | str | None,
    ) -> FetchTag:
        symbol = symbol.strip().upper()
        if exchange is None:
            exchange = exchange_of(symbol) or Exchange.NSE
        self._sequence += 1
        return FetchTag(symbol, expiry, to_exchange(exchange), self._sequence)

    def begin_fetch(self) -> FetchTag:
        """Tag to attach to the next fetch request."""
        return self.current

    def is_stale(self, tag: FetchTag) -> bool:
        """True when ``tag`` no longer matches the current selection."""
        cur = self.current
        return (tag.symbol, tag.expiry, tag.exchange, tag.sequence) != (
            cur.symbol,
            cur.expiry,
            cur.exchange,
            cur.sequence,
        )

    def receive(self, tag: FetchTag, raw: dict) -> CycleResult | None:
        """Process a fetched payload.

        Returns:
            The new CycleResult, or None if the response was stale.

        Raises:
            DataError: If the payload is unusable. The previous result
                is kept and ``status`` reports the failure.
        """
        if self.is_stale(tag):
            logger.info(
                "Discarding stale response for %s %s (now showing %s %s)",
                tag.symbol,
                tag.expiry or "-",
                self.current.symbol,
                self.current.expiry or "-",
            )
            return None

        previous = self.last_result.metrics if self.last_result else None
        try:
            result = run_cycle(
                tag.exchange,
                raw,
                self.config,
                previous=previous,
                use_lot_size=self.use_lot_size,
                lot_size=self.lot_size,
            )
        except DataError as e:
            self.last_error = e
            logger.info("Fetch for %s failed, keeping last good snapshot: %s", tag.symbol, e)
            raise

        self.last_error = None
        return self._accept(result)

    def reconfigure(self, config: WindowConfig) -> CycleResult | None:
        """Apply new window settings to the last good snapshot."""
        self.config = config
        if self.last_result is None:
            return None
        result = analyze_snapshot(
            self.last_result.snapshot,
            config,
            previous=self.last_result.metrics,
            use_lot_size=self.use_lot_size,
            lot_size=self.lot_size,
        )
        return self._accept(result)

    def drain_alerts(self) -> list[Alert]:
        """Return and clear accumulated alerts."""
        drained, self.alerts = self.alerts, []
        return drained

    def _accept(self, result: CycleResult) -> CycleResult:
        self.alerts.extend(result.alerts)
        self.last_result = result
        return result
