"""
Custom error classes for the Leads Dashboard Hub.
Structured error handling with error codes across all modules.

Hierarchy:
    HubError
    ├── DataError
    │   ├── ConfigError
    │   ├── SchemaValidationError
    │   └── DataFetchError
    └── WindowError
"""


class HubError(Exception):
    """Base exception for all Leads Dashboard Hub errors."""

    def __init__(self, message: str, code: str = "UNKNOWN", details: dict = None):
        self.code = code
        self.details = details or {}
        super().__init__(f"[{code}] {message}")


# --- Data Errors ---

class DataError(HubError):
    """Base class for data processing errors."""
    pass


class ConfigError(DataError):
    """Configuration value error."""

    def __init__(self, message: str, config_path: str = None):
        super().__init__(
            message, code="CONFIG_ERROR",
            details={"config_path": config_path},
        )


class SchemaValidationError(DataError):
    """Data doesn't match expected schema."""

    def __init__(self, message: str, field: str = None):
        super().__init__(
            message, code="SCHEMA_INVALID", details={"field": field},
        )


class DataFetchError(DataError):
    """Failed to fetch or load data from storage."""

    def __init__(self, message: str, source: str = None):
        super().__init__(
            message, code="DATA_FETCH_FAILED", details={"source": source},
        )


# --- Window Errors ---

class WindowError(HubError):
    """A date range could not be resolved into a time window."""

    def __init__(self, message: str, range_spec: str = None):
        super().__init__(
            message, code="INVALID_WINDOW", details={"range": range_spec},
        )
