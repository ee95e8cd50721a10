"""ATM-centered strike window selection.

Picks a fixed number of strikes around the at-the-money strike. When
the ATM strike sits near either end of the strike ladder the window is
extended on the other side, so the caller still sees the requested
number of strikes.

Usage:
    from oichain.window import WindowConfig, select_window

    window = select_window(snapshot.strikes, snapshot.underlying_price,
                           WindowConfig(window_size=10))
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from oichain.data.schema import Strike
from oichain.errors import ConfigError, DataError

logger = logging.getLogger(__name__)

MIN_WINDOW_SIZE = 3
HIGH_OI_FACTOR = 1.5


@dataclass(frozen=True)
class WindowConfig:
    """Strike window settings supplied by the caller.

    Attributes:
        window_size: Total number of strikes wanted (at least 3).
        high_oi_only: Keep only strikes with unusually high OI.
    """

    window_size: int = 10
    high_oi_only: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.window_size, bool) or not isinstance(self.window_size, int):
            raise ConfigError(f"window_size must be an integer, got {self.window_size!r}")
        if self.window_size < MIN_WINDOW_SIZE:
            raise ConfigError(
                f"window_size must be at least {MIN_WINDOW_SIZE}, got {self.window_size}"
            )


def find_atm_index(strikes: Sequence[Strike], underlying_price: float) -> int:
    """Index of the strike closest to the underlying price.

    Ties go to the first (lower-priced) strike.

    Raises:
        DataError: If ``strikes`` is empty.
    """
    if not strikes:
        raise DataError("Cannot locate ATM strike in an empty strike list")

    best = 0
    best_diff = abs(strikes[0].strike_price - underlying_price)
    for i in range(1, len(strikes)):
        diff = abs(strikes[i].strike_price - underlying_price)
        if diff < best_diff:
            best = i
            best_diff = diff
    return best


def _split(window_size: int) -> tuple[int, int]:
    """Strikes taken before and after ATM for a window size."""
    before = (window_size - 1) // 2
    after = window_size - 1 - before
    return before, after


def _window_bounds(n: int, atm: int, window_size: int) -> tuple[int, int]:
    """Inclusive [start, end] index bounds of the window."""
    if n <= window_size:
        return 0, n - 1

    before, after = _split(window_size)
    start = max(0, atm - before)
    end = min(n - 1, atm + after)

    # Compensate at the ladder edges by growing the other side.
    missing = window_size - (end - start + 1)
    if missing > 0 and start == 0:
        end = min(n - 1, end + missing)
    elif missing > 0 and end == n - 1:
        start = max(0, start - missing)

    # Only one side grows, so the window never exceeds window_size.
    return start, end


def filter_high_oi(window: Sequence[Strike], atm_strike: Strike) -> list[Strike]:
    """Keep strikes whose call or put OI exceeds 1.5x the window mean.

    The ATM strike is always kept. An empty result falls back to the
    unfiltered window.
    """
    if not window:
        return []

    mean_call = sum(s.call_oi for s in window) / len(window)
    mean_put = sum(s.put_oi for s in window) / len(window)

    kept = [
        s
        for s in window
        if s.call_oi > HIGH_OI_FACTOR * mean_call or s.put_oi > HIGH_OI_FACTOR * mean_put
    ]

    forced = False
    if all(s.strike_price != atm_strike.strike_price for s in kept):
        kept.append(atm_strike)
        kept.sort(key=lambda s: s.strike_price)
        forced = True

    if not kept:
        return list(window)

    logger.debug(
        "High-OI filter kept %d of %d strikes (ATM forced: %s)",
        len(kept),
        len(window),
        forced,
    )
    return kept


def select_window(
    strikes: Sequence[Strike],
    underlying_price: float,
    config: WindowConfig,
) -> list[Strike]:
    """Select a symmetric window of strikes around ATM.

    Args:
        strikes: Ascending, de-duplicated strikes of a snapshot.
        underlying_price: Live underlying price.
        config: Window settings.

    Returns:
        Ascending subsequence of ``strikes`` that always contains the
        ATM strike. Without the high-OI filter its length is
        ``min(len(strikes), config.window_size)``.

    Raises:
        DataError: If ``strikes`` is empty.
    """
    atm = find_atm_index(strikes, underlying_price)
    start, end = _window_bounds(len(strikes), atm, config.window_size)
    window = list(strikes[start : end + 1])

    logger.debug(
        "ATM %s at index %d, window [%d, %d] of %d strikes",
        strikes[atm].strike_price,
        atm,
        start,
        end,
        len(strikes),
    )

    if config.high_oi_only:
        return filter_high_oi(window, strikes[atm])
    return window
