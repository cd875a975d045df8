from datetime import datetime, timezone
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app.main import create_app, run
from settings import get_settings


@pytest.fixture
def api_client(fake_store) -> Iterator[TestClient]:
    app = create_app(store=fake_store)
    with TestClient(app) as client:
        yield client


def test_health_returns_empty_body(api_client: TestClient) -> None:
    response = api_client.get("/api/v1/")

    assert response.status_code == 200
    assert response.content == b""


def test_root_and_echo_endpoints(api_client: TestClient) -> None:
    assert api_client.get("/").text == "OK"

    response = api_client.get("/test", params={"sensor": "dht22"})

    assert response.status_code == 200
    assert response.text == "received queryparams!"


def test_embed_then_get_data(api_client: TestClient) -> None:
    before = datetime.now(timezone.utc)
    response = api_client.get("/api/v1/embed", params={"value": "55.5"})

    assert response.status_code == 200
    assert response.text == "Value: '55.5' written."

    response = api_client.get("/api/v1/getData")

    assert response.status_code == 200
    payload = response.json()
    assert len(payload) == 1
    assert payload[0]["value"] == 55.5
    assert payload[0]["measurement"] == "qparams"
    assert payload[0]["field"] == "value"
    written_at = datetime.fromisoformat(payload[0]["time"].replace("Z", "+00:00"))
    assert before <= written_at <= datetime.now(timezone.utc)


def test_get_data_on_empty_series_returns_not_found(api_client: TestClient) -> None:
    response = api_client.get("/api/v1/getData")

    assert response.status_code == 404
    assert response.json()["detail"] == "No data found"


@pytest.mark.parametrize("params", [{"value": "abc"}, {"value": "nan"}, {}])
def test_embed_rejects_non_numeric_values(api_client: TestClient, fake_store, params) -> None:
    response = api_client.get("/api/v1/embed", params=params)

    assert response.status_code == 400
    assert "detail" in response.json()
    assert fake_store.readings == []


def test_embed_write_failure_returns_server_error(api_client: TestClient, fake_store) -> None:
    fake_store.fail_writes = True

    response = api_client.get("/api/v1/embed", params={"value": "20"})

    assert response.status_code == 500


def test_get_data_query_failure_returns_server_error(api_client: TestClient, fake_store) -> None:
    fake_store.fail_queries = True

    response = api_client.get("/api/v1/getData")

    assert response.status_code == 500
    assert response.json()["detail"] == "Error fetching data from InfluxDB"


def test_injected_store_is_not_closed_on_shutdown(fake_store) -> None:
    with TestClient(create_app(store=fake_store)):
        pass

    assert fake_store.closed is False


def test_run_fails_fast_without_configuration(monkeypatch) -> None:
    for name in ("INFLUX_HOST", "INFLUX_TOKEN", "INFLUX_ORG", "INFLUX_BUCKET", "HOST", "PORT"):
        monkeypatch.delenv(name, raising=False)
    served = []
    monkeypatch.setattr("app.main.uvicorn.run", lambda *args, **kwargs: served.append(kwargs))
    get_settings.cache_clear()

    try:
        with pytest.raises(SystemExit) as excinfo:
            run()
    finally:
        get_settings.cache_clear()

    assert "INFLUX_HOST is not set" in str(excinfo.value)
    assert served == []


def test_run_serves_on_configured_address(monkeypatch) -> None:
    monkeypatch.setenv("INFLUX_HOST", "http://influx:8086")
    monkeypatch.setenv("INFLUX_TOKEN", "token")
    monkeypatch.setenv("INFLUX_ORG", "org")
    monkeypatch.setenv("INFLUX_BUCKET", "humidity")
    monkeypatch.setenv("HOST", "0.0.0.0")
    monkeypatch.setenv("PORT", "8080")
    served = []
    monkeypatch.setattr("app.main.uvicorn.run", lambda *args, **kwargs: served.append(kwargs))
    get_settings.cache_clear()

    try:
        run()
    finally:
        get_settings.cache_clear()

    assert served == [{"host": "0.0.0.0", "port": 8080}]
