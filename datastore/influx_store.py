from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from functools import lru_cache
from typing import Iterable, List, Protocol

from influxdb_client import InfluxDBClient, Point, WritePrecision
from influxdb_client.client.exceptions import InfluxDBError
from influxdb_client.client.flux_table import FluxRecord
from influxdb_client.client.write_api import SYNCHRONOUS, PointSettings
from influxdb_client.rest import ApiException
from urllib3.exceptions import HTTPError

from models.records import FIELD, MEASUREMENT, Reading
from services.errors import UpstreamError
from settings import get_settings

logger = logging.getLogger(__name__)

TRAILING_WINDOW_DAYS = 30
DEFAULT_TAGS = {"app": "db_api"}

_DRIVER_ERRORS = (ApiException, InfluxDBError, HTTPError, OSError)


class ReadingStore(Protocol):
    def write_reading(self, value: float, at: datetime) -> None: ...

    def query_readings(self) -> List[Reading]: ...

    def close(self) -> None: ...


def build_range_query(bucket: str, window_days: int = TRAILING_WINDOW_DAYS) -> str:
    return (
        f'from(bucket: "{bucket}")\n'
        f"  |> range(start: -{window_days}d)\n"
        f'  |> filter(fn: (r) => r._measurement == "{MEASUREMENT}")\n'
        f'  |> filter(fn: (r) => r._field == "{FIELD}")\n'
    )


class InfluxReadingStore:
    """Reads and writes the humidity series in an InfluxDB bucket."""

    def __init__(self, client: InfluxDBClient, org: str, bucket: str) -> None:
        self.org = org
        self.bucket = bucket
        self._client = client
        self._write_api = client.write_api(
            write_options=SYNCHRONOUS, point_settings=PointSettings(**DEFAULT_TAGS)
        )

    def write_reading(self, value: float, at: datetime) -> None:
        """Write one point and return only once the server has acknowledged it."""
        point = Point(MEASUREMENT).field(FIELD, float(value)).time(at, WritePrecision.NS)
        try:
            self._write_api.write(bucket=self.bucket, org=self.org, record=point)
        except _DRIVER_ERRORS as exc:
            raise UpstreamError(f"Failed to write reading to bucket {self.bucket!r}.") from exc

    def query_readings(self) -> List[Reading]:
        """Return every reading in the trailing window, ordered by time.

        The record stream is drained before anything is returned, so a failure
        part-way through never yields a partial list.
        """
        query = build_range_query(self.bucket)
        try:
            records = list(self._client.query_api().query_stream(query, org=self.org))
        except _DRIVER_ERRORS as exc:
            raise UpstreamError(f"Failed to query bucket {self.bucket!r}.") from exc
        return sorted(_to_readings(records), key=lambda reading: reading.time)

    def close(self) -> None:
        self._write_api.close()
        self._client.close()


def _to_readings(records: Iterable[FluxRecord]) -> Iterable[Reading]:
    for record in records:
        raw_value = record.get_value()
        raw_time = record.get_time()
        if raw_value is None or raw_time is None:
            continue
        try:
            value = float(raw_value)
        except (TypeError, ValueError) as exc:
            raise UpstreamError(f"Store returned a non-numeric value {raw_value!r}.") from exc
        if not math.isfinite(value):
            logger.warning("Skipping non-finite value from store", extra={"value": raw_value})
            continue
        if raw_time.tzinfo is None:
            raw_time = raw_time.replace(tzinfo=timezone.utc)
        yield Reading(
            value=value,
            time=raw_time.astimezone(timezone.utc),
            measurement=record.get_measurement() or MEASUREMENT,
            field=record.get_field() or FIELD,
        )


@lru_cache
def build_default_store() -> InfluxReadingStore:
    """Factory that wires the store from the process settings."""
    settings = get_settings()
    client = InfluxDBClient(
        url=settings.influx_host,
        token=settings.influx_token,
        org=settings.influx_org,
    )
    logger.info("Connected store client", extra={"upstream_url": settings.influx_host})
    return InfluxReadingStore(client=client, org=settings.influx_org, bucket=settings.influx_bucket)
