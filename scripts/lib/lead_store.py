"""
Lead Store for the Leads Dashboard Hub.
Read-only queries against the Supabase lead table.

Column names differ between deployments (agent_id / id_agent,
contador_interacoes / interaction_count), so rows are mapped through a
LeadFieldMap instead of being read by hard-coded keys.

Usage:
    from scripts.lib.lead_store import fetch_leads

    leads = await fetch_leads(LeadFilter(window_start=start, window_end=end))
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from models.lead_models import LeadFilter, LeadListItem, LeadPage, LeadRecord
from scripts.lib.config import (
    LEADS_AGENT_COLUMN,
    LEADS_CREATED_AT_COLUMN,
    LEADS_ID_COLUMN,
    LEADS_INTERACTIONS_COLUMN,
    LEADS_SOFT_DELETE_COLUMN,
    LEADS_TABLE,
)
from scripts.lib.errors import DataFetchError
from scripts.lib.logger import setup_logger
from scripts.lib.supabase_client import get_client
from scripts.leads.classifier import lead_status

logger = setup_logger("lead_store")

# PostgREST caps a single response; larger windows are read page by page
FETCH_PAGE_SIZE = 1000
DEFAULT_PAGE_SIZE = 10

FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "id": ("id",),
    "created_at": ("created_at",),
    "agent_id": ("agent_id", "id_agent"),
    "interaction_count": ("contador_interacoes", "interaction_count"),
}


@dataclass(frozen=True)
class LeadFieldMap:
    """Store column backing each LeadRecord field."""
    id: str = LEADS_ID_COLUMN
    created_at: str = LEADS_CREATED_AT_COLUMN
    agent_id: str = LEADS_AGENT_COLUMN
    interaction_count: str = LEADS_INTERACTIONS_COLUMN

    def _read(self, row: Dict[str, Any], field: str) -> Any:
        column = getattr(self, field)
        if column in row:
            return row[column]
        for alias in FIELD_ALIASES[field]:
            if alias in row:
                return row[alias]
        return None

    def adapt(self, row: Dict[str, Any]) -> LeadRecord:
        """Map one store row to a LeadRecord."""
        return LeadRecord(
            id=self._read(row, "id"),
            created_at=self._read(row, "created_at"),
            agent_id=self._read(row, "agent_id"),
            interaction_count=self._read(row, "interaction_count"),
        )


DEFAULT_FIELD_MAP = LeadFieldMap()


def adapt_rows(rows: List[Dict[str, Any]], field_map: LeadFieldMap = None) -> List[LeadRecord]:
    field_map = field_map or DEFAULT_FIELD_MAP
    return [field_map.adapt(row) for row in rows]


def _apply_filter(query, lead_filter: LeadFilter, field_map: LeadFieldMap):
    """Add window, agent, soft-delete and status filters to a query."""
    if lead_filter.window_start is not None:
        query = query.gte(field_map.created_at, lead_filter.window_start.isoformat())
    if lead_filter.window_end is not None:
        query = query.lte(field_map.created_at, lead_filter.window_end.isoformat())
    if lead_filter.agent_ids:
        query = query.in_(field_map.agent_id, list(lead_filter.agent_ids))
    if LEADS_SOFT_DELETE_COLUMN:
        query = query.is_(LEADS_SOFT_DELETE_COLUMN, "null")

    if lead_filter.status == "connected":
        query = query.gt(field_map.interaction_count, lead_filter.threshold)
    elif lead_filter.status == "cold":
        query = query.lte(field_map.interaction_count, lead_filter.threshold)
    return query


def fetch_leads_sync(
    lead_filter: LeadFilter,
    field_map: LeadFieldMap = None,
) -> List[LeadRecord]:
    """
    Fetch every lead matching the filter, oldest first.

    Raises:
        DataFetchError: The store could not be queried. Nothing is
            substituted for a failed fetch.
    """
    field_map = field_map or DEFAULT_FIELD_MAP
    rows: List[Dict[str, Any]] = []
    try:
        client = get_client()
        offset = 0
        while True:
            query = client.table(LEADS_TABLE).select("*")
            query = _apply_filter(query, lead_filter, field_map)
            # id breaks created_at ties so offsets stay stable between pages
            query = query.order(field_map.created_at, desc=False).order(field_map.id, desc=False)
            result = query.range(offset, offset + FETCH_PAGE_SIZE - 1).execute()
            page = result.data or []
            rows.extend(page)
            if len(page) < FETCH_PAGE_SIZE:
                break
            offset += FETCH_PAGE_SIZE
    except Exception as e:
        logger.error("Lead fetch failed on %s: %s", LEADS_TABLE, e)
        raise DataFetchError(f"Lead fetch failed: {e}", source=LEADS_TABLE) from e

    logger.info(
        "Fetched %d lead(s) from %s (%s .. %s)",
        len(rows), LEADS_TABLE, lead_filter.window_start, lead_filter.window_end,
    )
    return adapt_rows(rows, field_map)


async def fetch_leads(
    lead_filter: LeadFilter,
    field_map: LeadFieldMap = None,
) -> List[LeadRecord]:
    """Async wrapper; the Supabase client call runs in a worker thread."""
    return await asyncio.to_thread(fetch_leads_sync, lead_filter, field_map)


def list_leads(
    lead_filter: LeadFilter,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    field_map: LeadFieldMap = None,
) -> LeadPage:
    """
    One page of the lead table, newest first, with the exact match count.

    The connected/cold status filter runs in the store with the same
    strict-greater rule the classifier uses.
    """
    field_map = field_map or DEFAULT_FIELD_MAP
    page = max(1, page)
    offset = (page - 1) * page_size
    try:
        client = get_client()
        query = client.table(LEADS_TABLE).select("*", count="exact")
        query = _apply_filter(query, lead_filter, field_map)
        query = query.order(field_map.created_at, desc=True).order(field_map.id, desc=True)
        result = query.range(offset, offset + page_size - 1).execute()
    except Exception as e:
        logger.error("Lead list query failed on %s: %s", LEADS_TABLE, e)
        raise DataFetchError(f"Lead list failed: {e}", source=LEADS_TABLE) from e

    items = []
    for row in result.data or []:
        lead = field_map.adapt(row)
        items.append(LeadListItem(
            lead=lead,
            status=lead_status(lead, lead_filter.threshold),
            data=row,
        ))
    return LeadPage(
        items=items,
        count=result.count or 0,
        page=page,
        page_size=page_size,
    )


def list_agents(field_map: LeadFieldMap = None) -> List[str]:
    """Distinct agent ids that own at least one lead."""
    field_map = field_map or DEFAULT_FIELD_MAP
    try:
        client = get_client()
        result = (
            client.table(LEADS_TABLE)
            .select(field_map.agent_id)
            .not_.is_(field_map.agent_id, "null")
            .execute()
        )
    except Exception as e:
        logger.error("Agent list query failed on %s: %s", LEADS_TABLE, e)
        raise DataFetchError(f"Agent list failed: {e}", source=LEADS_TABLE) from e

    agents: List[str] = []
    for row in result.data or []:
        agent = field_map.adapt(row).agent_id
        if agent:
            agents.append(agent)
    return sorted(set(agents))

