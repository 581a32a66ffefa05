"""
Leads Dashboard Hub — Lead Metrics Pydantic Models
=====================================================

Lead records, time windows, day buckets, KPI snapshots, trends, goals,
dashboard settings and the request/response shapes built from them.
"""
from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from scripts.lib.config import get_timezone

MetricMode = Literal["total", "connected", "comparison"]
TrendDirection = Literal["up", "down", "flat"]
LeadStatus = Literal["all", "connected", "cold"]

METRIC_MODES = ("total", "connected", "comparison")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp from the lead store.

    Accepts datetimes, dates and ISO-8601 strings (trailing Z, offsets or
    naive). Anything unparsable returns None instead of raising.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def _safe_count(value: Any) -> int:
    """Non-negative int from whatever the store returned, 0 when missing."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        return max(0, int(float(value)))
    except (ValueError, TypeError):
        return 0


# ─── Lead Records ───────────────────────────────────────────

class LeadRecord(BaseModel):
    """A lead as read from the store. created_at is None when unparsable."""
    model_config = ConfigDict(frozen=True)

    id: Any = None
    created_at: Optional[datetime] = None
    agent_id: Optional[str] = None
    interaction_count: int = 0

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_created_at(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)

    @field_validator("agent_id", mode="before")
    @classmethod
    def _normalise_agent(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator("interaction_count", mode="before")
    @classmethod
    def _coerce_count(cls, value: Any) -> int:
        return _safe_count(value)


class LeadListItem(BaseModel):
    """One row of the lead table."""
    lead: LeadRecord
    status: Literal["connected", "cold"]
    data: Dict[str, Any] = Field(default_factory=dict)


class LeadPage(BaseModel):
    items: List[LeadListItem]
    count: int
    page: int
    page_size: int


class LeadFilter(BaseModel):
    """Query passed to the lead store. A None bound means unbounded."""
    window_start: Optional[datetime] = None
    window_end: Optional[datetime] = None
    agent_ids: Optional[List[str]] = None
    status: LeadStatus = "all"
    threshold: int = 3


# ─── Windows ────────────────────────────────────────────────

class RangeSpec(BaseModel):
    """Either a relative code ("7d" ... "90d", "all") or an explicit date range."""
    code: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @model_validator(mode="after")
    def _one_form(self) -> "RangeSpec":
        if self.code is None and self.date_from is None:
            raise ValueError("either a range code or a start date is required")
        if self.code is not None and self.date_from is not None:
            raise ValueError("a range code and an explicit date range are mutually exclusive")
        return self


class TimeWindow(BaseModel):
    """
    Concrete [start, end] instant pair, both ends inclusive.

    start=None is the unbounded ("all available history") sentinel; it is
    replaced by a concrete start before bucketing.
    """
    model_config = ConfigDict(frozen=True)

    start: Optional[datetime] = None
    end: datetime

    @model_validator(mode="after")
    def _check_bounds(self) -> "TimeWindow":
        if self.end.tzinfo is None or (self.start is not None and self.start.tzinfo is None):
            raise ValueError("window bounds must be timezone-aware")
        if self.start is not None and self.start > self.end:
            raise ValueError("window start must not be after its end")
        return self

    @property
    def is_unbounded(self) -> bool:
        return self.start is None

    @property
    def duration_days(self) -> Optional[int]:
        """Calendar days covered in the dashboard timezone, counting both endpoint days."""
        return self.days_in(get_timezone())

    def days_in(self, tz: tzinfo) -> Optional[int]:
        """Calendar days covered in tz, counting both endpoint days."""
        if self.start is None:
            return None
        first = self.start.astimezone(tz).date()
        last = self.end.astimezone(tz).date()
        return (last - first).days + 1


# ─── Buckets & KPIs ─────────────────────────────────────────

class DayBucket(BaseModel):
    day: date
    date_key: str
    counts: Dict[str, int] = Field(default_factory=dict)


class KpiSnapshot(BaseModel):
    total_leads: int = 0
    connected_leads: int = 0
    connectivity_rate: float = 0.0

    @classmethod
    def from_counts(cls, total: int, connected: int) -> "KpiSnapshot":
        rate = round(connected / total * 100, 2) if total > 0 else 0.0
        return cls(total_leads=total, connected_leads=connected, connectivity_rate=rate)


class TrendResult(BaseModel):
    percent: float
    direction: TrendDirection


class GoalProgress(BaseModel):
    target: float
    percent: float
    met: bool


class AggregateResult(BaseModel):
    window: TimeWindow
    series: List[DayBucket]
    current: KpiSnapshot
    previous: KpiSnapshot
    metric_mode: MetricMode = "total"
    skipped_records: int = 0


# ─── Settings ───────────────────────────────────────────────

class DashboardSettings(BaseModel):
    """Dashboard configuration row (dashboard_config.settings)."""
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    interaction_threshold: int = Field(3, ge=0)
    connectivity_target: float = 30
    total_leads_target: float = 100
    connected_leads_target: float = 50
    mql_target: float = 10
    agent_names: Dict[str, str] = Field(default_factory=dict)

    @field_validator("agent_names", mode="before")
    @classmethod
    def _names_default(cls, value: Any) -> Dict[str, str]:
        return value or {}


class SettingsUpdate(BaseModel):
    """Fields that can be updated on the settings row."""
    interaction_threshold: Optional[int] = Field(None, ge=0)
    connectivity_target: Optional[float] = None
    total_leads_target: Optional[float] = None
    connected_leads_target: Optional[float] = None
    mql_target: Optional[float] = None
    agent_names: Optional[Dict[str, str]] = None


# ─── Dashboard Response ─────────────────────────────────────

class DashboardSnapshot(BaseModel):
    """Everything the dashboard page renders for one filter state."""
    window: TimeWindow
    previous_window: Optional[TimeWindow] = None
    metric_mode: MetricMode
    threshold: int
    series: List[DayBucket]
    series_labels: Dict[str, str] = Field(default_factory=dict)
    chart_keys: Dict[str, List[str]] = Field(default_factory=dict)
    current: KpiSnapshot
    previous: KpiSnapshot
    trends: Dict[str, TrendResult]
    goals: Dict[str, GoalProgress]
    skipped_records: int = 0
