"""
Leads Dashboard Hub — Campaign Names
=======================================

Display names for the campaign log. UTM campaign strings arrive as runs
of bracketed groups, e.g. "[fb][cpc][br][2024][lp][v2][Black+Friday]";
the seventh group is the human-readable campaign name.
"""
from __future__ import annotations

import re
from collections import Counter
from typing import Dict, Iterable, List, Optional

DIRECT_ORGANIC = "Direto / Orgânico"
CAMPAIGN_NAME_GROUP = 6

# Column spellings seen in campaign_log, in lookup order
CAMPAIGN_FIELDS = ("utm_campaign", "camping", "campaign_name", "camping name")

_BRACKET_GROUP = re.compile(r"\[([^\]]+)\]")


def _clean(value: str) -> str:
    return value.replace("[", "").replace("]", "").replace("+", " ")


def extract_campaign_name(campaign: Optional[str]) -> str:
    if not campaign or not campaign.strip():
        return DIRECT_ORGANIC

    groups = _BRACKET_GROUP.findall(campaign)
    if len(groups) > CAMPAIGN_NAME_GROUP:
        return _clean(groups[CAMPAIGN_NAME_GROUP])
    if campaign.startswith("[") and groups:
        return _clean(groups[-1])
    return campaign.replace("+", " ")


def campaign_value(log: dict) -> str:
    """First non-empty campaign column of a campaign_log row."""
    for field in CAMPAIGN_FIELDS:
        value = log.get(field)
        if value:
            return value
    return ""


def summarize_campaigns(logs: Iterable[dict], search: Optional[str] = None) -> Dict:
    """
    Count campaign_log rows per display name, busiest first.

    Args:
        logs: campaign_log rows.
        search: Case-insensitive substring filter on the display name.
    """
    enriched: List[dict] = []
    for log in logs:
        enriched.append({**log, "display_campaign": extract_campaign_name(campaign_value(log))})

    if search:
        needle = search.lower()
        enriched = [log for log in enriched if needle in log["display_campaign"].lower()]

    counts = Counter(log["display_campaign"] for log in enriched)
    campaigns = [
        {"name": name, "value": value}
        for name, value in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    ]
    return {"logs": enriched, "campaigns": campaigns, "total": len(enriched)}
