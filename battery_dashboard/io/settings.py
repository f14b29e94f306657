import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import yaml

PROJECT_MARKERS: Iterable[str] = (".git", "pyproject.toml", "config")
DEFAULT_SETTINGS_PATH = Path("config/dashboard.yml")

PathLike = Union[str, os.PathLike]

ENV_REGION = "AWS_REGION"
ENV_TABLE_NAME = "AWS_TABLE_NAME"
ENV_SETTING_ENDPOINT = "BATTERY_DASHBOARD_SETTING_ENDPOINT"

DEFAULT_FIELD_MAP: Dict[str, str] = {
    "time": "Time",
    "soc": "Actual SOC",
    "socPredicted": "Predicted SOC",
    "soh": "Actual SOH",
    "sohPredicted": "Predicted SOH",
    "packSOC": "Pack SOC",
    "packVoltage": "Pack Voltage",
}


class SettingsError(RuntimeError):
    """Raised when the dashboard settings file is missing or malformed."""


@dataclass
class StoreSettings:
    region: Optional[str] = None
    table_name: Optional[str] = None
    setting_endpoint: str = "/api/send-to-dynamodb"
    request_timeout_s: float = 5.0
    field_map: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_FIELD_MAP))


@dataclass
class ChartSettings:
    min_window_size: int = 10
    zoom_step: int = 30
    refresh_interval_ms: int = 60000
    fallback_points: int = 24
    prediction_points: int = 12


@dataclass
class DashboardSettings:
    store: StoreSettings = field(default_factory=StoreSettings)
    chart: ChartSettings = field(default_factory=ChartSettings)


def find_project_root(markers: Iterable[str] = PROJECT_MARKERS) -> Path:
    """Attempt to locate the repository root by walking up until a marker file/dir appears."""
    start = Path(__file__).resolve().parent
    for candidate in [start] + list(start.parents):
        for marker in markers:
            if (candidate / marker).exists():
                return candidate
    return start


def _resolve(path: PathLike, project_root: Path) -> Path:
    target = Path(path)
    if not target.is_absolute():
        target = project_root / target
    return target


def _load_yaml(target: Path) -> Dict[str, Any]:
    if not target.exists():
        raise FileNotFoundError(f"settings file not found: {target}")
    try:
        with open(target, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise SettingsError(f"Invalid YAML in settings file {target}: {exc}") from exc
    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {target} must contain a mapping")
    return data


def load_settings(path: Optional[PathLike] = None) -> Dict[str, Any]:
    """Load the raw YAML settings, defaulting to ``config/dashboard.yml`` under the project root."""
    project_root = find_project_root()
    target = _resolve(path or DEFAULT_SETTINGS_PATH, project_root)
    return _load_yaml(target)


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise SettingsError(f"'{key}' must be a mapping")
    return section


def _positive_int(section: Mapping[str, Any], key: str, default: int) -> int:
    raw = section.get(key, default)
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"'{key}' must be an integer, got {raw!r}") from exc
    if value < 1:
        raise SettingsError(f"'{key}' must be at least 1, got {value}")
    return value


def parse_dashboard_settings(
    data: Mapping[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> DashboardSettings:
    """Build typed settings from raw YAML data, letting the environment override store values."""
    env = os.environ if environ is None else environ
    store_raw = _section(data, "store")
    chart_raw = _section(data, "chart")

    field_map = dict(DEFAULT_FIELD_MAP)
    field_map.update({str(k): str(v) for k, v in _section(store_raw, "field_map").items()})

    try:
        timeout = float(store_raw.get("request_timeout_s", 5.0))
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"'request_timeout_s' must be a number: {exc}") from exc

    store = StoreSettings(
        region=env.get(ENV_REGION) or store_raw.get("region"),
        table_name=env.get(ENV_TABLE_NAME) or store_raw.get("table_name"),
        setting_endpoint=env.get(ENV_SETTING_ENDPOINT) or store_raw.get("setting_endpoint", StoreSettings.setting_endpoint),
        request_timeout_s=timeout,
        field_map=field_map,
    )
    chart = ChartSettings(
        min_window_size=_positive_int(chart_raw, "min_window_size", ChartSettings.min_window_size),
        zoom_step=_positive_int(chart_raw, "zoom_step", ChartSettings.zoom_step),
        refresh_interval_ms=_positive_int(chart_raw, "refresh_interval_ms", ChartSettings.refresh_interval_ms),
        fallback_points=_positive_int(chart_raw, "fallback_points", ChartSettings.fallback_points),
        prediction_points=_positive_int(chart_raw, "prediction_points", ChartSettings.prediction_points),
    )
    return DashboardSettings(store=store, chart=chart)


def load_dashboard_settings(path: Optional[PathLike] = None) -> DashboardSettings:
    """Load ``config/dashboard.yml`` (or ``path``) into :class:`DashboardSettings`."""
    return parse_dashboard_settings(load_settings(path))


def update_settings_value(identifier: str, value: Any, path: Optional[PathLike] = None) -> None:
    """Update a value inside the settings file given a dotted identifier, e.g. ``chart.zoom_step``.

    Intermediate mappings are created when missing.
    """

    project_root = find_project_root()
    target = _resolve(path or DEFAULT_SETTINGS_PATH, project_root)
    data = _load_yaml(target)

    parts = identifier.split(".") if identifier else []
    if not parts or not all(parts):
        raise ValueError("Identifier must not be empty")

    cursor = data
    for key in parts[:-1]:
        nested = cursor.setdefault(key, {})
        if not isinstance(nested, dict):
            raise TypeError(f"Expected mapping at '{key}' but found {type(nested).__name__}")
        cursor = nested
    cursor[parts[-1]] = value

    with open(target, "w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False)
