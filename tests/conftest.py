from __future__ import annotations

from datetime import datetime
from typing import List

import pytest

from models.records import Reading
from services.errors import UpstreamError


class FakeStore:
    """In-memory stand-in for the InfluxDB-backed store."""

    def __init__(self, readings: List[Reading] | None = None) -> None:
        self.readings: List[Reading] = list(readings or [])
        self.fail_writes = False
        self.fail_queries = False
        self.closed = False

    def write_reading(self, value: float, at: datetime) -> None:
        if self.fail_writes:
            raise UpstreamError("write rejected")
        self.readings.append(Reading(value=value, time=at))

    def query_readings(self) -> List[Reading]:
        if self.fail_queries:
            raise UpstreamError("query failed")
        return sorted(self.readings, key=lambda reading: reading.time)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()
