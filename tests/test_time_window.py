"""Tests for range resolution and previous-period windows."""

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from models.lead_models import RangeSpec, TimeWindow
from scripts.lib.errors import WindowError
from scripts.leads.bucketing import build_skeleton
from scripts.leads.time_window import (
    ALL_TIME_FALLBACK_DAYS,
    iter_days,
    materialize_window,
    previous_window,
    resolve_window,
)

from conftest import SAO_PAULO, window_for

NOW = datetime(2024, 3, 15, 12, 30, tzinfo=SAO_PAULO)


class TestResolveWindow:
    @pytest.mark.parametrize("code,days", [("7d", 7), ("15d", 15), ("30d", 30), ("60d", 60), ("90d", 90)])
    def test_relative_codes_end_now(self, code, days):
        window = resolve_window(code, now=NOW, tz=SAO_PAULO)
        assert window.end == NOW
        assert window.start == NOW - timedelta(days=days)

    def test_code_is_case_insensitive(self):
        window = resolve_window(RangeSpec(code=" 7D "), now=NOW, tz=SAO_PAULO)
        assert window.start == NOW - timedelta(days=7)

    def test_all_is_unbounded(self):
        window = resolve_window("all", now=NOW, tz=SAO_PAULO)
        assert window.is_unbounded
        assert window.start is None
        assert window.end == NOW
        assert window.duration_days is None

    def test_unknown_code_raises(self):
        with pytest.raises(WindowError) as exc:
            resolve_window("45d", now=NOW, tz=SAO_PAULO)
        assert exc.value.code == "INVALID_WINDOW"
        assert exc.value.details["range"] == "45d"

    def test_explicit_range_covers_whole_days(self):
        window = window_for(date(2024, 3, 1), date(2024, 3, 3))
        assert window.start == datetime(2024, 3, 1, tzinfo=SAO_PAULO)
        assert window.end == datetime.combine(date(2024, 3, 3), time.max, tzinfo=SAO_PAULO)
        assert window.duration_days == 3

    def test_single_date_is_one_day(self):
        window = window_for(date(2024, 3, 1))
        assert window.duration_days == 1
        assert window.start.date() == window.end.date() == date(2024, 3, 1)

    def test_start_after_end_raises(self):
        with pytest.raises(WindowError):
            window_for(date(2024, 3, 5), date(2024, 3, 1))

    def test_naive_now_is_wall_time(self):
        window = resolve_window("7d", now=datetime(2024, 3, 15, 12, 30), tz=SAO_PAULO)
        assert window.end == NOW


class TestRangeSpec:
    def test_requires_a_selection(self):
        with pytest.raises(ValidationError):
            RangeSpec()

    def test_code_and_dates_are_exclusive(self):
        with pytest.raises(ValidationError):
            RangeSpec(code="7d", date_from=date(2024, 3, 1))


class TestTimeWindowModel:
    def test_days_counted_in_the_dashboard_zone(self):
        utc = ZoneInfo("UTC")
        window = TimeWindow(
            start=datetime(2024, 3, 1, 1, 0, tzinfo=utc),
            end=datetime(2024, 3, 1, 23, 0, tzinfo=utc),
        )
        # 01:00 UTC is 22:00 on 29 Feb in São Paulo
        assert window.days_in(SAO_PAULO) == 2
        assert window.days_in(utc) == 1
        assert window.duration_days == len(build_skeleton(window, [], SAO_PAULO))

    def test_rejects_naive_bounds(self):
        with pytest.raises(ValidationError):
            TimeWindow(start=datetime(2024, 3, 1), end=datetime(2024, 3, 2))

    def test_rejects_inverted_bounds(self):
        with pytest.raises(ValidationError):
            TimeWindow(
                start=datetime(2024, 3, 2, tzinfo=SAO_PAULO),
                end=datetime(2024, 3, 1, tzinfo=SAO_PAULO),
            )


class TestPreviousWindow:
    def test_adjacent_and_same_length(self):
        window = window_for(date(2024, 3, 1), date(2024, 3, 3))
        prior = previous_window(window)
        assert prior.end + timedelta(microseconds=1) == window.start
        assert prior.duration_days == window.duration_days
        assert prior.start == datetime(2024, 2, 27, tzinfo=SAO_PAULO)

    @pytest.mark.parametrize("first,last", [
        (date(2024, 1, 1), date(2024, 1, 31)),
        (date(2023, 12, 25), date(2024, 1, 7)),
        (date(2024, 2, 29), date(2024, 2, 29)),
    ])
    def test_adjacency_holds_across_months(self, first, last):
        window = window_for(first, last)
        prior = previous_window(window)
        assert prior.end + timedelta(microseconds=1) == window.start
        assert prior.duration_days == window.duration_days

    @pytest.mark.parametrize("code", ["7d", "15d", "30d", "60d", "90d"])
    def test_relative_window_is_adjacent(self, code):
        window = resolve_window(code, now=NOW, tz=SAO_PAULO)
        prior = previous_window(window, SAO_PAULO)
        assert prior.end + timedelta(microseconds=1) == window.start
        assert prior.end - prior.start == window.end - window.start

    def test_relative_window_leaves_no_gap(self):
        window = resolve_window("7d", now=NOW, tz=SAO_PAULO)
        prior = previous_window(window, SAO_PAULO)
        assert prior.start == datetime(2024, 3, 1, 12, 30, tzinfo=SAO_PAULO) - timedelta(microseconds=1)
        midnight = datetime(2024, 3, 8, 0, 0, tzinfo=SAO_PAULO)
        assert prior.start <= midnight <= prior.end

    def test_day_aligned_across_dst(self):
        new_york = ZoneInfo("America/New_York")
        window = window_for(date(2024, 3, 10), date(2024, 3, 12), tz=new_york)
        prior = previous_window(window, new_york)
        assert prior.start == datetime(2024, 3, 7, tzinfo=new_york)
        assert prior.end + timedelta(microseconds=1) == window.start
        assert prior.days_in(new_york) == 3

    def test_unbounded_has_no_previous(self):
        with pytest.raises(WindowError):
            previous_window(resolve_window("all", now=NOW, tz=SAO_PAULO))


class TestMaterializeWindow:
    def test_bounded_window_unchanged(self):
        window = window_for(date(2024, 3, 1), date(2024, 3, 3))
        assert materialize_window(window, tz=SAO_PAULO) is window

    def test_starts_at_earliest_record_day(self):
        window = resolve_window("all", now=NOW, tz=SAO_PAULO)
        earliest = datetime(2024, 2, 10, 15, 45, tzinfo=SAO_PAULO)
        result = materialize_window(window, earliest, tz=SAO_PAULO)
        assert result.start == datetime(2024, 2, 10, tzinfo=SAO_PAULO)
        assert result.end == NOW

    def test_falls_back_without_records(self):
        window = resolve_window("all", now=NOW, tz=SAO_PAULO)
        result = materialize_window(window, None, tz=SAO_PAULO)
        assert result.start == NOW - timedelta(days=ALL_TIME_FALLBACK_DAYS)


class TestIterDays:
    def test_lists_every_day(self):
        window = window_for(date(2024, 2, 28), date(2024, 3, 1))
        assert list(iter_days(window, SAO_PAULO)) == [
            date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1),
        ]

    def test_uses_the_dashboard_zone(self):
        utc = ZoneInfo("UTC")
        window = TimeWindow(
            start=datetime(2024, 3, 1, 1, 0, tzinfo=utc),
            end=datetime(2024, 3, 1, 23, 0, tzinfo=utc),
        )
        # 01:00 UTC is still 29 Feb in São Paulo
        assert list(iter_days(window, SAO_PAULO)) == [date(2024, 2, 29), date(2024, 3, 1)]

    def test_unbounded_raises(self):
        with pytest.raises(WindowError):
            list(iter_days(resolve_window("all", now=NOW, tz=SAO_PAULO), SAO_PAULO))
