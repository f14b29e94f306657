"""I/O utilities (configuration, telemetry table access, setting writes)."""

from .settings import (
    DEFAULT_FIELD_MAP,
    DEFAULT_SETTINGS_PATH,
    ChartSettings,
    DashboardSettings,
    SettingsError,
    StoreSettings,
    find_project_root,
    load_dashboard_settings,
    load_settings,
    parse_dashboard_settings,
    update_settings_value,
)
from .store import (
    DynamoTableClient,
    SettingWriter,
    StoreError,
    TableClient,
    fetch_records,
    map_item,
    scan_all,
    sort_records,
)

__all__ = [
    "DEFAULT_FIELD_MAP",
    "DEFAULT_SETTINGS_PATH",
    "ChartSettings",
    "DashboardSettings",
    "SettingsError",
    "StoreSettings",
    "find_project_root",
    "load_dashboard_settings",
    "load_settings",
    "parse_dashboard_settings",
    "update_settings_value",
    "DynamoTableClient",
    "SettingWriter",
    "StoreError",
    "TableClient",
    "fetch_records",
    "map_item",
    "scan_all",
    "sort_records",
]
