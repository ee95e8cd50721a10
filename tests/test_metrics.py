"""Tests for the metrics aggregator."""

from __future__ import annotations

from dataclasses import asdict

import pytest

from oichain.errors import ConfigError
from oichain.metrics import (
    MetricsSnapshot,
    compute_max_pain,
    compute_metrics,
    pcr_sentiment,
)
from oichain.window import WindowConfig, select_window
from tests.conftest import make_ladder, make_strike


class TestScenario:
    """The five-strike end-to-end scenario."""

    @pytest.fixture
    def window(self, scenario_strikes):
        return select_window(scenario_strikes, 23810.0, WindowConfig(window_size=3))

    def test_totals(self, window):
        m = compute_metrics(window, 1, 23810.0)
        assert m.total_call_oi == 600
        assert m.total_put_oi == 900

    def test_pcr(self, window):
        m = compute_metrics(window, 1, 23810.0)
        assert m.pcr == pytest.approx(1.5)

    def test_dominance(self, window):
        m = compute_metrics(window, 1, 23810.0)
        assert m.call_dominance == pytest.approx(40.0)
        assert m.put_dominance == pytest.approx(60.0)

    def test_max_pain(self, window):
        m = compute_metrics(window, 1, 23810.0)
        assert m.max_pain == 23800.0

    def test_lot_size_multiplier(self, window):
        m = compute_metrics(window, 65, 23810.0)
        assert m.total_call_oi == 600 * 65
        assert m.total_put_oi == 900 * 65
        assert m.pcr == pytest.approx(1.5)
        assert m.max_pain == 23800.0


class TestEdgeCases:
    """Degenerate windows."""

    def test_zero_oi_neutral_dominance(self):
        m = compute_metrics(make_ladder([100.0, 110.0, 120.0]), 1, 110.0)
        assert m.pcr == 0.0
        assert m.call_dominance == 50.0
        assert m.put_dominance == 50.0
        assert m.pcr_defined is False

    def test_zero_call_oi_pcr_sentinel(self):
        strikes = make_ladder([100.0, 110.0], call_oi=[0, 0], put_oi=[10, 20])
        m = compute_metrics(strikes, 1, 105.0)
        assert m.pcr == 0.0
        assert m.put_dominance == 100.0

    def test_absent_sides_contribute_zero(self):
        strikes = [
            make_strike(100.0, call_oi=None, put_oi=40),
            make_strike(110.0, call_oi=20, put_oi=None),
        ]
        m = compute_metrics(strikes, 1, 105.0)
        assert m.total_call_oi == 20
        assert m.total_put_oi == 40
        assert m.pcr == pytest.approx(2.0)

    def test_change_oi_totals(self):
        strikes = [
            make_strike(100.0, 10, 10, call_change=-5, put_change=7),
            make_strike(110.0, 10, 10, call_change=12, put_change=-3),
        ]
        m = compute_metrics(strikes, 2, 105.0)
        assert m.total_call_change_oi == 14
        assert m.total_put_change_oi == 8

    def test_invalid_lot_size(self):
        with pytest.raises(ConfigError):
            compute_metrics(make_ladder([100.0]), 0, 100.0)

    @pytest.mark.parametrize("call_oi,put_oi", [
        ([1, 2, 3], [3, 2, 1]),
        ([1000, 0, 7], [0, 0, 1]),
        ([123456, 789, 42], [99999, 1, 31337]),
    ])
    def test_dominance_sums_to_100(self, call_oi, put_oi):
        strikes = make_ladder([100.0, 110.0, 120.0], call_oi, put_oi)
        m = compute_metrics(strikes, 1, 110.0)
        assert m.call_dominance + m.put_dominance == pytest.approx(100.0, abs=1e-9)
        assert m.pcr >= 0


class TestMaxPain:
    """Tests for compute_max_pain."""

    def test_tie_goes_to_lower_strike(self):
        strikes = make_ladder([100.0, 120.0], call_oi=[10, 10], put_oi=[0, 0])
        assert compute_max_pain(strikes, 110.0) == 100.0

    def test_empty(self):
        assert compute_max_pain([], 100.0) == 0.0

    def test_full_chain(self, scenario_strikes):
        """Works on an entire snapshot's strikes too."""
        assert compute_max_pain(scenario_strikes, 23810.0) == 23800.0


class TestSerialization:

    def test_round_trip_dict(self, scenario_strikes):
        m = compute_metrics(scenario_strikes, 1, 23810.0)
        assert MetricsSnapshot.from_dict(asdict(m)) == m

    def test_to_dict_has_sentiment(self, scenario_strikes):
        d = compute_metrics(scenario_strikes, 1, 23810.0).to_dict()
        assert d["pcr_sentiment"] == "Bullish"

    @pytest.mark.parametrize("pcr,label", [(1.3, "Bullish"), (0.7, "Bearish"), (1.0, "Neutral")])
    def test_pcr_sentiment(self, pcr, label):
        assert pcr_sentiment(pcr) == label
