"""Store gateway operations: ingest one value, query the trailing window."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Callable, List, Optional

from datastore.influx_store import ReadingStore
from models.records import Reading
from services.errors import InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GatewayService:
    """Coordinates input parsing, the store and result classification."""

    def __init__(
        self,
        store: ReadingStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self._clock = clock

    def ingest(self, raw_value: Optional[str]) -> str:
        """Parse and persist one reading, returning a confirmation message."""
        value = self.parse_value(raw_value)
        self.store.write_reading(value, self._clock())
        logger.info("Reading written", extra={"value": value})
        return f"Value: '{raw_value}' written."

    def query(self) -> List[Reading]:
        readings = self.store.query_readings()
        if not readings:
            logger.info("Query matched no readings", extra={"row_count": 0})
            raise NotFoundError("No data found")
        return readings

    def close(self) -> None:
        self.store.close()

    @staticmethod
    def parse_value(raw_value: Optional[str]) -> float:
        candidate = (raw_value or "").strip()
        if not candidate:
            raise InvalidInputError("Query parameter 'value' is required.")
        try:
            value = float(candidate)
        except ValueError as exc:
            raise InvalidInputError(f"Value {raw_value!r} is not a number.") from exc
        if not math.isfinite(value):
            raise InvalidInputError(f"Value {raw_value!r} is not a finite number.")
        return value
