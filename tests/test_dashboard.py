"""Tests for the downtime / satisfaction chart."""

import pandas as pd
import pytest

from line_analytics.dashboard import build_dashboard, timeseries_view, write_dashboard
from line_analytics.errors import InvalidArgument, MalformedInput


class TestTimeseriesView:
    def test_parses_and_sorts_dates(self, tiny_table):
        view = timeseries_view(tiny_table.iloc[::-1])
        assert pd.api.types.is_datetime64_any_dtype(view["Date"])
        assert view["Date"].is_monotonic_increasing
        assert list(view.columns) == ["Date", "Line_ID", "Downtime_Hours", "Worker_Satisfaction"]

    def test_filter_by_line(self, tiny_table):
        view = timeseries_view(tiny_table, line_id="Assembly")
        assert set(view["Line_ID"]) == {"Assembly"}
        assert len(view) == 3

    def test_leaves_table_untouched(self, tiny_table):
        timeseries_view(tiny_table)
        assert tiny_table["Date"].iloc[0] == "2024-01-01"

    def test_unknown_line(self, tiny_table):
        with pytest.raises(InvalidArgument):
            timeseries_view(tiny_table, line_id="Packaging")

    def test_missing_column(self, tiny_table):
        with pytest.raises(MalformedInput):
            timeseries_view(tiny_table.drop(columns=["Worker_Satisfaction"]))


class TestBuildDashboard:
    def test_two_traces_per_line(self, production):
        fig = build_dashboard(production)
        assert len(fig.data) == 6
        assert fig.data[0].name == "Assembly - Downtime (h)"
        assert fig.data[1].yaxis == "y2"

    def test_toggle_buttons(self, production):
        fig = build_dashboard(production)
        buttons = fig.layout.updatemenus[0].buttons
        assert [b.label for b in buttons] == ["All Lines", "Assembly", "Painting", "Welding"]
        assert list(buttons[0].args[0]["visible"]) == [True] * 6
        assert list(buttons[3].args[0]["visible"]) == [False, False, False, False, True, True]

    def test_write_html(self, production, tmp_path):
        path = write_dashboard(build_dashboard(production), tmp_path / "out" / "dashboard.html")
        assert path.exists()
        assert "plotly" in path.read_text()
