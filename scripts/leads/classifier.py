"""
Leads Dashboard Hub — Lead Classifier
========================================

A lead is "connected" once its interaction count is strictly greater than
the configured threshold. A lead sitting exactly on the threshold is still
cold; the lead table's server-side filters (gt / lte) follow the same rule.
"""
from __future__ import annotations

from models.lead_models import LeadRecord


def is_connected(lead: LeadRecord, threshold: int) -> bool:
    return lead.interaction_count > threshold


def lead_status(lead: LeadRecord, threshold: int) -> str:
    """'connected' or 'cold'."""
    return "connected" if is_connected(lead, threshold) else "cold"
