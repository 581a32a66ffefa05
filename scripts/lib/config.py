"""
Runtime configuration for the Leads Dashboard Hub.
Values come from the environment (optionally a project-root .env file).

Usage:
    from scripts.lib.config import DASHBOARD_TIMEZONE, get_timezone
    tz = get_timezone()
"""
import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from scripts.lib.errors import ConfigError

# Project root: Leads Dashboard Hub/
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(PROJECT_ROOT / ".env")

SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_KEY = (
    os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")
    or os.environ.get("SUPABASE_KEY", "")
)

# Calendar days are bucketed in this zone (the zone the sales team reads the dashboard in)
DASHBOARD_TIMEZONE = os.environ.get("DASHBOARD_TIMEZONE", "America/Sao_Paulo")

LEADS_TABLE = os.environ.get("LEADS_TABLE", "info_lead")
LEADS_ID_COLUMN = os.environ.get("LEADS_ID_COLUMN", "id")
LEADS_CREATED_AT_COLUMN = os.environ.get("LEADS_CREATED_AT_COLUMN", "created_at")
LEADS_AGENT_COLUMN = os.environ.get("LEADS_AGENT_COLUMN", "agent_id")
LEADS_INTERACTIONS_COLUMN = os.environ.get("LEADS_INTERACTIONS_COLUMN", "contador_interacoes")
LEADS_SOFT_DELETE_COLUMN = os.environ.get("LEADS_SOFT_DELETE_COLUMN", "")
CAMPAIGN_LOG_TABLE = os.environ.get("CAMPAIGN_LOG_TABLE", "campaign_log")

SETTINGS_SCHEMA = os.environ.get("SETTINGS_SCHEMA", "dashboard_config")
SETTINGS_TABLE = os.environ.get("SETTINGS_TABLE", "settings")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_TO_FILE = os.environ.get("LOG_TO_FILE", "true").lower() == "true"


def get_timezone(name: str = None) -> ZoneInfo:
    """
    Resolve the dashboard timezone.

    Args:
        name: IANA zone name. Defaults to DASHBOARD_TIMEZONE.

    Raises:
        ConfigError: If the zone name is unknown.
    """
    zone = name or DASHBOARD_TIMEZONE
    try:
        return ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"Unknown timezone '{zone}': {e}", config_path="DASHBOARD_TIMEZONE")
