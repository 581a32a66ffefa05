"""Shared fixtures for the lead metrics tests."""

import os

os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("DASHBOARD_TIMEZONE", "America/Sao_Paulo")

from datetime import date
from zoneinfo import ZoneInfo

import pytest

from models.lead_models import LeadRecord, RangeSpec
from scripts.leads.time_window import resolve_window

SAO_PAULO = ZoneInfo("America/Sao_Paulo")


def make_lead(created_at, agent_id=None, interactions=0, lead_id=None):
    return LeadRecord(
        id=lead_id,
        created_at=created_at,
        agent_id=agent_id,
        interaction_count=interactions,
    )


def window_for(first: date, last: date = None, tz=SAO_PAULO):
    return resolve_window(RangeSpec(date_from=first, date_to=last), tz=tz)


@pytest.fixture
def tz():
    return SAO_PAULO


@pytest.fixture
def march_leads():
    """Three leads over 1-3 March 2024; only the first is connected at threshold 3."""
    return [
        make_lead("2024-03-01T10:00", "A", 5, 1),
        make_lead("2024-03-01T11:00", "B", 1, 2),
        make_lead("2024-03-03T09:00", "A", 0, 3),
    ]


@pytest.fixture
def march_window():
    return window_for(date(2024, 3, 1), date(2024, 3, 3))
