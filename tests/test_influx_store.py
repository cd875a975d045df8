from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from influxdb_client.client.flux_table import FluxRecord
from influxdb_client.rest import ApiException

from datastore.influx_store import InfluxReadingStore, build_default_store, build_range_query
from services.errors import UpstreamError
from settings import get_settings

_START = datetime(2024, 3, 1, tzinfo=timezone.utc)


def _record(minutes: int, value: float | str | None) -> FluxRecord:
    return FluxRecord(
        table=0,
        values={
            "_time": _START + timedelta(minutes=minutes),
            "_value": value,
            "_measurement": "qparams",
            "_field": "value",
            "app": "db_api",
        },
    )


def _store() -> tuple[InfluxReadingStore, MagicMock]:
    client = MagicMock()
    return InfluxReadingStore(client=client, org="home", bucket="humidity"), client


def test_range_query_targets_trailing_window_and_series() -> None:
    query = build_range_query("humidity")

    assert 'from(bucket: "humidity")' in query
    assert "range(start: -30d)" in query
    assert 'r._measurement == "qparams"' in query
    assert 'r._field == "value"' in query


def test_write_reading_sends_one_point_with_default_tags() -> None:
    store, client = _store()
    write_api = client.write_api.return_value

    store.write_reading(55.5, _START)

    write_api.write.assert_called_once()
    kwargs = write_api.write.call_args.kwargs
    assert kwargs["bucket"] == "humidity"
    assert kwargs["org"] == "home"
    line = kwargs["record"].to_line_protocol()
    assert line.startswith("qparams value=55.5 ")
    point_settings = client.write_api.call_args.kwargs["point_settings"]
    assert point_settings.defaultTags == {"app": "db_api"}


def test_write_failure_raises_upstream_error() -> None:
    store, client = _store()
    client.write_api.return_value.write.side_effect = ApiException(status=500, reason="boom")

    with pytest.raises(UpstreamError):
        store.write_reading(1.0, _START)


def test_query_returns_readings_ordered_by_time() -> None:
    store, client = _store()
    client.query_api.return_value.query_stream.return_value = iter(
        [_record(5, 61.0), _record(1, 40.5), _record(3, None)]
    )

    readings = store.query_readings()

    assert [reading.value for reading in readings] == [40.5, 61.0]
    assert readings[0].time == _START + timedelta(minutes=1)
    assert readings[0].measurement == "qparams"
    query_call = client.query_api.return_value.query_stream.call_args
    assert query_call.kwargs["org"] == "home"


def test_query_drops_non_finite_values() -> None:
    store, client = _store()
    client.query_api.return_value.query_stream.return_value = iter(
        [_record(0, float("nan")), _record(1, 47.0), _record(2, float("inf")), _record(3, float("-inf"))]
    )

    readings = store.query_readings()

    assert [reading.value for reading in readings] == [47.0]


def test_query_non_numeric_value_raises_upstream_error() -> None:
    store, client = _store()
    client.query_api.return_value.query_stream.return_value = iter([_record(0, "wet")])

    with pytest.raises(UpstreamError):
        store.query_readings()


def test_query_failure_mid_stream_raises_upstream_error() -> None:
    store, client = _store()

    def broken_stream():
        yield _record(0, 50.0)
        raise ApiException(status=503, reason="unavailable")

    client.query_api.return_value.query_stream.return_value = broken_stream()

    with pytest.raises(UpstreamError):
        store.query_readings()


def test_close_releases_client_resources() -> None:
    store, client = _store()

    store.close()

    client.write_api.return_value.close.assert_called_once()
    client.close.assert_called_once()


def test_default_store_uses_environment(monkeypatch) -> None:
    monkeypatch.setenv("INFLUX_HOST", "http://influx.local:8086")
    monkeypatch.setenv("INFLUX_TOKEN", "secret")
    monkeypatch.setenv("INFLUX_ORG", "greenhouse")
    monkeypatch.setenv("INFLUX_BUCKET", "sensors")
    monkeypatch.setenv("HOST", "127.0.0.1")
    monkeypatch.setenv("PORT", "8000")
    get_settings.cache_clear()
    build_default_store.cache_clear()

    store = build_default_store()
    try:
        assert store.org == "greenhouse"
        assert store.bucket == "sensors"
    finally:
        store.close()
        build_default_store.cache_clear()
        get_settings.cache_clear()
