"""Tests for monthly target proration and goal progress."""

from datetime import date, datetime
from fractions import Fraction

import pytest

from models.lead_models import TimeWindow
from scripts.leads.targets import days_in_month, goal_progress, proportional_target

from conftest import SAO_PAULO, window_for


class TestProportionalTarget:
    def test_full_non_leap_february(self):
        window = window_for(date(2023, 2, 1), date(2023, 2, 28))
        assert proportional_target(100, window, SAO_PAULO) == 100

    def test_full_leap_february(self):
        window = window_for(date(2024, 2, 1), date(2024, 2, 29))
        assert proportional_target(100, window, SAO_PAULO) == 100

    @pytest.mark.parametrize("days", range(1, 32))
    def test_single_month_is_linear(self, days):
        window = window_for(date(2024, 3, 1), date(2024, 3, days))
        expected = int(Fraction(100 * days, 31) + Fraction(1, 2))
        assert proportional_target(100, window, SAO_PAULO) == expected

    def test_crossing_months_uses_each_month_length(self):
        # 100/31 + 100/28
        window = window_for(date(2023, 1, 31), date(2023, 2, 1))
        assert proportional_target(100, window, SAO_PAULO) == 7

    def test_rounds_half_up(self):
        # 15 / 30 days = 0.5
        window = window_for(date(2024, 4, 10))
        assert proportional_target(15, window, SAO_PAULO) == 1

    def test_fractional_target(self):
        window = window_for(date(2024, 4, 1), date(2024, 4, 30))
        assert proportional_target(12.5, window, SAO_PAULO) == 13

    @pytest.mark.parametrize("target", [0, -10])
    def test_non_positive_target(self, target):
        assert proportional_target(target, window_for(date(2024, 3, 1)), SAO_PAULO) == 0

    def test_unbounded_window_gets_whole_target(self):
        window = TimeWindow(start=None, end=datetime(2024, 3, 15, tzinfo=SAO_PAULO))
        assert proportional_target(100, window, SAO_PAULO) == 100
        assert proportional_target(100, None, SAO_PAULO) == 100

    def test_days_in_month(self):
        assert days_in_month(date(2023, 2, 10)) == 28
        assert days_in_month(date(2024, 2, 10)) == 29
        assert days_in_month(date(2024, 4, 1)) == 30


class TestGoalProgress:
    def test_partial(self):
        progress = goal_progress(5, 10)
        assert progress.percent == 50.0
        assert progress.met is False

    def test_met(self):
        assert goal_progress(10, 10).met is True
        assert goal_progress(12, 10).percent == 120.0

    def test_zero_goal(self):
        progress = goal_progress(5, 0)
        assert progress.percent == 0
        assert progress.target == 0
        assert progress.met is False
