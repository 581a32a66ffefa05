"""
Supabase Client Helper for the Leads Dashboard Hub.
Provides the shared connection and a generic table query function.

Usage:
    from scripts.lib.supabase_client import get_client, query_table

    client = get_client()
    rows = query_table("campaign_log", order_by="created_at", limit=500)
"""
from typing import Any, Dict, List

from scripts.lib.config import SUPABASE_KEY, SUPABASE_URL
from scripts.lib.errors import ConfigError, DataFetchError
from scripts.lib.logger import setup_logger

logger = setup_logger(__name__)

_client = None


def get_client():
    """Create and return a Supabase client (singleton)."""
    global _client
    if _client is not None:
        return _client

    if not SUPABASE_URL or not SUPABASE_KEY:
        raise ConfigError(
            "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set in .env",
            config_path=".env",
        )

    from supabase import create_client
    _client = create_client(SUPABASE_URL, SUPABASE_KEY)
    logger.info("Supabase client connected to %s", SUPABASE_URL)
    return _client


def reset_client():
    """Drop the cached client (tests and credential rotation)."""
    global _client
    _client = None


def query_table(
    table: str,
    select: str = "*",
    filters: Dict[str, Any] = None,
    order_by: str = None,
    desc: bool = True,
    limit: int = 100,
    offset: int = 0,
) -> List[Dict]:
    """
    Query a Supabase table with optional filters, ordering, and pagination.

    Args:
        table: Table name.
        select: Columns to select (default "*").
        filters: Dict of column=value equality filters.
        order_by: Column to order by.
        desc: Descending order (default True).
        limit: Max rows to return.
        offset: Rows to skip.

    Returns:
        List of row dicts.

    Raises:
        DataFetchError: The query failed.
    """
    try:
        client = get_client()
        query = client.table(table).select(select)

        if filters:
            for col, val in filters.items():
                query = query.eq(col, val)

        if order_by:
            query = query.order(order_by, desc=desc)

        query = query.range(offset, offset + limit - 1)
        result = query.execute()
        return result.data or []
    except Exception as e:
        logger.error("Supabase query failed on %s: %s", table, e)
        raise DataFetchError(f"Query failed on {table}: {e}", source=table) from e
