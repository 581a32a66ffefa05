"""
Leads Dashboard Hub — Trend Calculator
=========================================

Signed change of a KPI against the previous period.
"""
from __future__ import annotations

from typing import Union

from models.lead_models import TrendResult

Number = Union[int, float]


def trend(current: Number, previous: Number) -> TrendResult:
    """
    Percent change from previous to current.

    A zero previous value has no true ratio: any growth reports 100% up,
    and zero against zero is flat.
    """
    if previous == 0:
        if current > 0:
            return TrendResult(percent=100.0, direction="up")
        if current < 0:
            return TrendResult(percent=100.0, direction="down")
        return TrendResult(percent=0.0, direction="flat")

    percent = abs((current - previous) / previous * 100)
    if current > previous:
        direction = "up"
    elif current < previous:
        direction = "down"
    else:
        direction = "flat"
    return TrendResult(percent=percent, direction=direction)
