"""Tests for the connected/cold lead classification."""

import pytest

from scripts.leads.classifier import is_connected, lead_status

from conftest import make_lead


class TestIsConnected:
    @pytest.mark.parametrize("threshold", [0, 1, 3, 7, 50])
    def test_threshold_is_exclusive(self, threshold):
        on_threshold = make_lead("2024-03-01T10:00", interactions=threshold)
        above = make_lead("2024-03-01T10:00", interactions=threshold + 1)
        assert is_connected(on_threshold, threshold) is False
        assert is_connected(above, threshold) is True

    def test_missing_count_is_cold(self):
        lead = make_lead("2024-03-01T10:00", interactions=None)
        assert lead.interaction_count == 0
        assert is_connected(lead, 0) is False


class TestLeadStatus:
    def test_labels(self):
        assert lead_status(make_lead(None, interactions=4), 3) == "connected"
        assert lead_status(make_lead(None, interactions=3), 3) == "cold"
