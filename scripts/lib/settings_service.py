"""
Dashboard Settings for the Leads Dashboard Hub.
Reads and writes the single settings row (id 1) in dashboard_config.settings.

The threshold and targets read here are passed explicitly into every metrics
call; nothing in the metrics engine reads settings on its own.

Usage:
    from scripts.lib.settings_service import get_settings, update_settings

    settings = get_settings()
    update_settings(SettingsUpdate(interaction_threshold=4))
"""
from __future__ import annotations

from models.lead_models import DashboardSettings, SettingsUpdate
from scripts.lib.config import SETTINGS_SCHEMA, SETTINGS_TABLE
from scripts.lib.errors import DataError
from scripts.lib.logger import setup_logger
from scripts.lib.supabase_client import get_client

logger = setup_logger("settings_service")

SETTINGS_ROW_ID = 1


def default_settings() -> DashboardSettings:
    return DashboardSettings()


def get_settings() -> DashboardSettings:
    """
    Load the dashboard settings.

    Falls back to defaults (with a warning) when the row is missing or the
    store is unreachable, so the dashboard still renders.
    """
    try:
        client = get_client()
        result = (
            client.schema(SETTINGS_SCHEMA)
            .table(SETTINGS_TABLE)
            .select("*")
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.warning("Using default settings (settings fetch failed): %s", e)
        return default_settings()

    if not result.data:
        logger.warning("Using default settings (no settings row found)")
        return default_settings()
    return DashboardSettings.model_validate(result.data[0])


def update_settings(update: SettingsUpdate) -> DashboardSettings:
    """
    Upsert changed fields into the settings row and return the merged settings.

    Raises:
        DataError: The upsert failed.
    """
    payload = update.model_dump(exclude_none=True)
    try:
        client = get_client()
        (
            client.schema(SETTINGS_SCHEMA)
            .table(SETTINGS_TABLE)
            .upsert({"id": SETTINGS_ROW_ID, **payload})
            .execute()
        )
    except Exception as e:
        logger.error("Settings update failed: %s", e)
        raise DataError(f"Settings update failed: {e}", code="SETTINGS_UPDATE_FAILED") from e

    logger.info("Settings updated: %s", ", ".join(sorted(payload)) or "(no changes)")
    return get_settings()
