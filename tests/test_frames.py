"""Tests for the pandas table and chart views."""

import pandas as pd
import pytest

from oichain.frames import CHAIN_COLUMNS, SERIES_COLUMNS, chain_frame, chart_series, export_csv
from tests.conftest import make_ladder, make_strike


class TestChainFrame:
    """Tests for chain_frame."""

    def test_columns_and_order(self, scenario_strikes):
        frame = chain_frame(scenario_strikes, atm_price=23800.0)
        assert list(frame.columns) == CHAIN_COLUMNS
        assert list(frame["strike"]) == [23700.0, 23750.0, 23800.0, 23850.0, 23900.0]

    def test_atm_flag(self, scenario_strikes):
        frame = chain_frame(scenario_strikes, atm_price=23800.0)
        assert frame["is_atm"].sum() == 1
        assert frame.loc[frame["is_atm"], "strike"].iloc[0] == 23800.0

    def test_no_atm(self, scenario_strikes):
        assert not chain_frame(scenario_strikes)["is_atm"].any()

    def test_oi_values(self, scenario_strikes):
        frame = chain_frame(scenario_strikes)
        assert list(frame["ce_oi"]) == [50, 100, 200, 300, 400]
        assert list(frame["pe_oi"]) == [500, 400, 300, 200, 100]

    def test_missing_side_zero_filled(self):
        frame = chain_frame([make_strike(23800.0, call_oi=None, put_oi=250)])
        assert frame["ce_oi"].iloc[0] == 0
        assert frame["pe_oi"].iloc[0] == 250
        assert pd.isna(frame["ce_iv"].iloc[0])

    def test_empty(self):
        frame = chain_frame([])
        assert frame.empty
        assert list(frame.columns) == CHAIN_COLUMNS


class TestChartSeries:
    """Tests for chart_series."""

    def test_values_in_lakhs(self):
        strikes = make_ladder([23750.0, 23800.0], call_oi=[250_000, 50_000], put_oi=[100_000, 0])
        series = chart_series(strikes)
        assert list(series.columns) == SERIES_COLUMNS
        assert series.loc[23750.0, "call_oi"] == pytest.approx(2.5)
        assert series.loc[23800.0, "call_oi"] == pytest.approx(0.5)
        assert series.loc[23750.0, "put_oi"] == pytest.approx(1.0)

    def test_indexed_by_strike(self, scenario_strikes):
        series = chart_series(scenario_strikes)
        assert series.index.name == "strike"
        assert list(series.index) == [23700.0, 23750.0, 23800.0, 23850.0, 23900.0]


class TestExportCsv:
    """Tests for export_csv."""

    def test_writes_file(self, tmp_path, scenario_strikes):
        path = export_csv(scenario_strikes, tmp_path / "window.csv", atm_price=23800.0)
        assert path.exists()
        loaded = pd.read_csv(path)
        assert list(loaded.columns) == CHAIN_COLUMNS
        assert len(loaded) == 5
        assert loaded["is_atm"].tolist() == [False, False, True, False, False]
