"""Thin wrappers over the battery telemetry table and the setting endpoint."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Protocol

import boto3
import requests
from botocore.exceptions import BotoCoreError, ClientError

from battery_dashboard.io.settings import DEFAULT_FIELD_MAP, StoreSettings
from battery_dashboard.telemetry import TimedRecord, TimestampParser

logger = logging.getLogger(__name__)

TIME_FIELD = "time"


class StoreError(RuntimeError):
    """Raised when the table cannot be read or a setting cannot be written."""


class TableClient(Protocol):
    """Minimal interface of a DynamoDB table used by the dashboard."""

    def scan(self, **kwargs: Any) -> Dict[str, Any]:
        ...


class DynamoTableClient:
    """Scans a DynamoDB table through boto3."""

    def __init__(self, table_name: str, region: Optional[str] = None, table=None) -> None:
        if table is None:
            try:
                table = boto3.resource("dynamodb", region_name=region).Table(table_name)
            except BotoCoreError as exc:
                raise StoreError(f"Cannot open table {table_name!r}: {exc}") from exc
        self.table_name = table_name
        self._table = table

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> "DynamoTableClient":
        if not settings.table_name:
            raise StoreError("No table name configured (set store.table_name or AWS_TABLE_NAME)")
        return cls(settings.table_name, region=settings.region)

    def scan(self, **kwargs: Any) -> Dict[str, Any]:
        return self._table.scan(**kwargs)


def scan_all(client: TableClient) -> List[Dict[str, Any]]:
    """Return every item of the table, following ``LastEvaluatedKey`` pages."""
    items: List[Dict[str, Any]] = []
    kwargs: Dict[str, Any] = {}
    while True:
        try:
            response = client.scan(**kwargs)
        except (BotoCoreError, ClientError) as exc:
            raise StoreError(f"Table scan failed: {exc}") from exc
        items.extend(response.get("Items") or [])
        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            return items
        kwargs["ExclusiveStartKey"] = last_key


def _to_float(raw: Any) -> Optional[float]:
    if raw is None or raw == "" or isinstance(raw, bool):
        return None
    try:
        value = float(Decimal(str(raw)))
    except (InvalidOperation, ValueError):
        return None
    return value if value == value else None


def map_item(item: Mapping[str, Any], field_map: Optional[Mapping[str, str]] = None) -> TimedRecord:
    """Convert one table item into a :class:`TimedRecord` using ``field_map``."""
    fields = field_map or DEFAULT_FIELD_MAP
    time_attr = fields.get(TIME_FIELD, "Time")
    values = {
        metric: _to_float(item.get(attribute))
        for metric, attribute in fields.items()
        if metric != TIME_FIELD
    }
    return TimedRecord(time=str(item.get(time_attr, "")), values=values)


def sort_records(records: List[TimedRecord], parser: Optional[TimestampParser] = None) -> List[TimedRecord]:
    """Sort by instant; records without a readable timestamp keep their order at the end."""
    parser = parser or TimestampParser()
    dated = []
    undated = []
    for record in records:
        instant = parser.parse_or_none(record.time)
        if instant is None:
            undated.append(record)
        else:
            dated.append((instant, record))
    dated.sort(key=lambda pair: pair[0])
    return [record for _, record in dated] + undated


def fetch_records(
    client: TableClient,
    field_map: Optional[Mapping[str, str]] = None,
    parser: Optional[TimestampParser] = None,
) -> List[TimedRecord]:
    """Scan the table and return its rows as records sorted by time."""
    items = scan_all(client)
    if not items:
        logger.warning("No data returned from the telemetry table")
        return []
    records = [map_item(item, field_map) for item in items]
    logger.debug("Fetched %d telemetry rows", len(records))
    return sort_records(records, parser)


class SettingWriter:
    """Posts the dashboard's on/off setting to the write endpoint."""

    def __init__(self, endpoint: str, timeout: float = 5.0, session: Optional[requests.Session] = None) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> "SettingWriter":
        return cls(settings.setting_endpoint, timeout=settings.request_timeout_s)

    def send(self, enabled: bool) -> int:
        """Write the toggle as ``0``/``1``; returns the value sent."""
        value = 1 if enabled else 0
        try:
            resp = self._session.post(self.endpoint, json={"value": value}, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            logger.error("Error sending setting value %d", value, exc_info=True)
            raise StoreError(f"Failed to send setting value {value}: {exc}") from exc
        logger.info("Successfully sent setting value %d", value)
        return value
