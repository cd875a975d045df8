from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List


_INFLUX_HOST_ENV = "INFLUX_HOST"
_INFLUX_TOKEN_ENV = "INFLUX_TOKEN"
_INFLUX_ORG_ENV = "INFLUX_ORG"
_INFLUX_BUCKET_ENV = "INFLUX_BUCKET"
_HOST_ENV = "HOST"
_PORT_ENV = "PORT"
_GATEWAY_URL_ENV = "STORE_GATEWAY_URL"
_DASHBOARD_HOST_ENV = "DASHBOARD_HOST"
_DASHBOARD_PORT_ENV = "DASHBOARD_PORT"
_LOG_LEVEL_ENV = "LOG_LEVEL"


class ConfigurationError(RuntimeError):
    """Raised at startup when required environment variables are missing or invalid."""


@dataclass(frozen=True)
class Settings:
    influx_host: str
    influx_token: str
    influx_org: str
    influx_bucket: str
    host: str
    port: int


@dataclass(frozen=True)
class DashboardSettings:
    gateway_url: str
    host: str
    port: int


def _read_required_env(name: str, problems: List[str]) -> str:
    value = os.getenv(name)
    candidate = (value or "").strip()
    if not candidate:
        problems.append(f"{name} is not set")
    return candidate


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _parse_port(name: str, raw: str, problems: List[str]) -> int:
    try:
        parsed = int(raw)
    except ValueError:
        problems.append(f"{name} must be an integer, got {raw!r}")
        return 0
    if not 0 < parsed < 65536:
        problems.append(f"{name} must be between 1 and 65535, got {parsed}")
    return parsed


def _raise_if_problems(problems: List[str]) -> None:
    if problems:
        raise ConfigurationError("Invalid configuration: " + "; ".join(problems))


def read_log_level(default: str = "INFO") -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    """Load the store gateway settings, reporting every missing variable at once."""
    problems: List[str] = []
    values: Dict[str, str] = {
        name: _read_required_env(name, problems)
        for name in (
            _INFLUX_HOST_ENV,
            _INFLUX_TOKEN_ENV,
            _INFLUX_ORG_ENV,
            _INFLUX_BUCKET_ENV,
            _HOST_ENV,
            _PORT_ENV,
        )
    }
    port = _parse_port(_PORT_ENV, values[_PORT_ENV], problems) if values[_PORT_ENV] else 0
    _raise_if_problems(problems)
    return Settings(
        influx_host=values[_INFLUX_HOST_ENV],
        influx_token=values[_INFLUX_TOKEN_ENV],
        influx_org=values[_INFLUX_ORG_ENV],
        influx_bucket=values[_INFLUX_BUCKET_ENV],
        host=values[_HOST_ENV],
        port=port,
    )


@lru_cache
def get_dashboard_settings() -> DashboardSettings:
    problems: List[str] = []
    gateway_url = _read_required_env(_GATEWAY_URL_ENV, problems)
    port = _parse_port(
        _DASHBOARD_PORT_ENV, _read_str_env(_DASHBOARD_PORT_ENV, "3000"), problems
    )
    _raise_if_problems(problems)
    return DashboardSettings(
        gateway_url=gateway_url.rstrip("/"),
        host=_read_str_env(_DASHBOARD_HOST_ENV, "127.0.0.1"),
        port=port,
    )

