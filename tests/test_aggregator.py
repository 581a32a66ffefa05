"""Tests for folding leads into daily buckets and KPIs."""

from datetime import date, datetime

import pytest

from models.lead_models import KpiSnapshot, TimeWindow
from scripts.lib.errors import SchemaValidationError
from scripts.leads.aggregator import aggregate, get_chart_series, get_kpis

from conftest import SAO_PAULO, make_lead, window_for


class TestAggregate:
    def test_worked_example(self, march_leads, march_window):
        result = aggregate(march_leads, march_window, threshold=3, tz=SAO_PAULO)

        assert [b.date_key for b in result.series] == ["01/03", "02/03", "03/03"]
        first, second, third = (b.counts for b in result.series)
        assert first["total"] == 2 and first["connected"] == 1
        assert second["total"] == 0 and second["connected"] == 0
        assert third["total"] == 1 and third["connected"] == 0

        assert result.current.total_leads == 3
        assert result.current.connected_leads == 1
        assert result.current.connectivity_rate == pytest.approx(33.33)

    def test_agent_series(self, march_leads, march_window):
        result = aggregate(march_leads, march_window, series_keys=["A", "B"], tz=SAO_PAULO)
        first, _, third = (b.counts for b in result.series)
        assert first["A"] == 1 and first["A_connected"] == 1
        assert first["B"] == 1 and first["B_connected"] == 0
        assert third["A"] == 1 and third["A_connected"] == 0

    def test_unselected_agent_still_counts_in_totals(self, march_leads, march_window):
        result = aggregate(march_leads, march_window, series_keys=["A"], tz=SAO_PAULO)
        first = result.series[0].counts
        assert "B" not in first
        assert first["total"] == 2
        assert result.current.total_leads == 3

    def test_conservation(self, march_leads, march_window):
        outside = [
            make_lead("2024-02-29T23:59", "A", 9),
            make_lead("2024-03-04T00:00", "A", 9),
        ]
        result = aggregate(march_leads + outside, march_window, tz=SAO_PAULO)
        assert sum(b.counts["total"] for b in result.series) == 3
        assert sum(b.counts["connected"] for b in result.series) == 1

    def test_malformed_timestamp_skipped(self, march_leads, march_window):
        bad = make_lead("not a date", "A", 9)
        result = aggregate(march_leads + [bad], march_window, tz=SAO_PAULO)
        assert result.current.total_leads == 3
        assert result.skipped_records == 1

    def test_empty_input_gives_zero_skeleton(self, march_window):
        result = aggregate([], march_window, series_keys=["A"], tz=SAO_PAULO)
        assert len(result.series) == 3
        assert all(v == 0 for b in result.series for v in b.counts.values())
        assert result.current == KpiSnapshot()
        assert result.previous == KpiSnapshot()

    def test_previous_kpis_restricted_to_previous_window(self, march_leads, march_window):
        previous_leads = [
            make_lead("2024-02-27T08:00", "A", 4),
            make_lead("2024-02-29T20:00", "B", 0),
            make_lead("2024-02-20T08:00", "B", 9),
        ]
        result = aggregate(march_leads, march_window, previous_leads, tz=SAO_PAULO)
        assert result.previous.total_leads == 2
        assert result.previous.connected_leads == 1
        assert result.previous.connectivity_rate == 50.0

    def test_unbounded_window_starts_at_earliest_lead(self, march_leads):
        end = datetime(2024, 3, 5, 12, 0, tzinfo=SAO_PAULO)
        result = aggregate(march_leads, TimeWindow(start=None, end=end), tz=SAO_PAULO)
        assert result.window.start == datetime(2024, 3, 1, tzinfo=SAO_PAULO)
        assert [b.day for b in result.series][0] == date(2024, 3, 1)
        assert len(result.series) == 5
        assert result.current.total_leads == 3
        assert result.previous == KpiSnapshot()

    def test_unknown_mode_rejected(self, march_leads, march_window):
        with pytest.raises(SchemaValidationError):
            aggregate(march_leads, march_window, metric_mode="weekly", tz=SAO_PAULO)

    def test_reserved_agent_id_counted_once(self, march_window):
        leads = [make_lead("2024-03-02T10:00", "total", 9)]
        result = aggregate(leads, march_window, tz=SAO_PAULO)
        assert result.series[1].counts["total"] == 1
        assert result.series[1].counts["connected"] == 1
        assert result.current.total_leads == 1

    def test_reserved_agent_id_cannot_be_a_series(self, march_window):
        with pytest.raises(SchemaValidationError):
            aggregate([], march_window, series_keys=["connected"], tz=SAO_PAULO)

    def test_every_mode_gets_the_same_counts(self, march_leads, march_window):
        results = [
            aggregate(march_leads, march_window, series_keys=["A"], metric_mode=mode, tz=SAO_PAULO)
            for mode in ("total", "connected", "comparison")
        ]
        assert results[0].series == results[1].series == results[2].series
        assert results[2].metric_mode == "comparison"

    def test_threshold_changes_connected_only(self, march_leads, march_window):
        strict = aggregate(march_leads, march_window, threshold=5, tz=SAO_PAULO)
        loose = aggregate(march_leads, march_window, threshold=0, tz=SAO_PAULO)
        assert strict.current.connected_leads == 0
        assert loose.current.connected_leads == 2
        assert strict.current.total_leads == loose.current.total_leads == 3


class TestGetKpis:
    def test_counts_every_readable_lead(self, march_leads):
        kpis = get_kpis(march_leads + [make_lead(None, "A", 9)], threshold=3, tz=SAO_PAULO)
        assert kpis.total_leads == 3
        assert kpis.connected_leads == 1

    def test_zero_total_has_zero_rate(self):
        assert get_kpis([], threshold=3, tz=SAO_PAULO).connectivity_rate == 0
        assert KpiSnapshot.from_counts(0, 0).connectivity_rate == 0


class TestGetChartSeries:
    def test_matches_aggregate(self, march_leads, march_window):
        series = get_chart_series(march_leads, march_window, ["A"], threshold=3, tz=SAO_PAULO)
        assert series == aggregate(march_leads, march_window, series_keys=["A"], tz=SAO_PAULO).series

    def test_window_of_single_day(self, march_leads):
        series = get_chart_series(
            march_leads, window_for(date(2024, 3, 3)), ["A"], threshold=3, tz=SAO_PAULO,
        )
        assert len(series) == 1
        assert series[0].counts["A"] == 1
