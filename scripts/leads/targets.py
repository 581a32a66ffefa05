"""
Leads Dashboard Hub — Targets
================================

Monthly goals prorated to arbitrary ranges, and progress against them.

A flat monthly target is spread day by day: each calendar day in the range
contributes target / (days in that day's month), so a range crossing a
31-day and a 28-day month gets its fair share of each. The sum is kept
exact (Fraction) and rounded half-up once at the end.
"""
from __future__ import annotations

import calendar
import math
from datetime import date, tzinfo
from fractions import Fraction
from typing import Optional, Union

from models.lead_models import GoalProgress, TimeWindow
from scripts.leads.time_window import iter_days

Number = Union[int, float]


def days_in_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


def _round_half_up(value: Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


def proportional_target(
    monthly_target: Number,
    window: Optional[TimeWindow],
    tz: Optional[tzinfo] = None,
) -> int:
    """
    Share of a monthly target that falls inside the window.

    Returns 0 for a zero or negative target, and the monthly target itself
    when the window has no start.
    """
    if monthly_target is None or monthly_target <= 0:
        return 0
    if window is None or window.start is None:
        return _round_half_up(Fraction(str(monthly_target)))

    target = Fraction(str(monthly_target))
    total = Fraction(0)
    for day in iter_days(window, tz):
        total += target / days_in_month(day)
    return _round_half_up(total)


def goal_progress(current: Number, goal: Number) -> GoalProgress:
    """Percent of the goal reached; a goal of 0 or less reads as 0%."""
    percent = (current / goal) * 100 if goal and goal > 0 else 0.0
    return GoalProgress(target=goal or 0, percent=round(percent, 1), met=percent >= 100)
