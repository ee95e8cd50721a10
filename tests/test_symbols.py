"""Tests for the symbol metadata table."""

from __future__ import annotations

import pytest

from oichain.errors import ConfigError
from oichain.symbols import (
    SYMBOL_METADATA,
    exchange_of,
    lot_size_of,
    round_to_strike,
    strike_interval_of,
    supported_symbols,
)


class TestLotSize:
    """Tests for lot_size_of."""

    @pytest.mark.parametrize("symbol,expected", [
        ("NIFTY", 65),
        ("BANKNIFTY", 30),
        ("FINNIFTY", 60),
        ("MIDCPNIFTY", 120),
        ("SENSEX", 20),
        ("BANKEX", 15),
    ])
    def test_known_symbols(self, symbol, expected):
        assert lot_size_of(symbol) == expected

    def test_case_insensitive(self):
        assert lot_size_of("nifty") == 65
        assert lot_size_of(" BankNifty ") == 30

    def test_unknown_defaults_to_one(self):
        assert lot_size_of("RELIANCE") == 1
        assert lot_size_of("") == 1
        assert lot_size_of(None) == 1

    def test_override(self):
        assert lot_size_of("NIFTY", override=75) == 75

    def test_non_positive_override_rejected(self):
        with pytest.raises(ConfigError):
            lot_size_of("NIFTY", override=0)
        with pytest.raises(ConfigError):
            lot_size_of("NIFTY", override=-5)


class TestStrikeInterval:
    """Tests for strike_interval_of."""

    def test_known(self):
        assert strike_interval_of("NIFTY") == 50.0
        assert strike_interval_of("banknifty") == 100.0
        assert strike_interval_of("MIDCPNIFTY") == 25.0
        assert strike_interval_of("SENSEX") == 100.0

    def test_unknown_defaults_to_fifty(self):
        assert strike_interval_of("UNKNOWN") == 50.0

    def test_override_validation(self):
        assert strike_interval_of("NIFTY", override=25) == 25.0
        with pytest.raises(ConfigError):
            strike_interval_of("NIFTY", override=0)


class TestTableHelpers:

    def test_exchange_of(self):
        assert exchange_of("sensex") == "BSE"
        assert exchange_of("NIFTY") == "NSE"
        assert exchange_of("XYZ") is None

    def test_supported_symbols_filter(self):
        assert supported_symbols("BSE") == ["BANKEX", "SENSEX"]
        assert len(supported_symbols()) == len(SYMBOL_METADATA)

    def test_round_to_strike(self):
        assert round_to_strike(23810.0, "NIFTY") == 23800.0
        assert round_to_strike(23830.0, "NIFTY") == 23850.0
        assert round_to_strike(51260.0, "BANKNIFTY") == 51300.0
