"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

MEASUREMENT = "qparams"
FIELD = "value"


@dataclass(frozen=True, slots=True)
class Reading:
    """A single humidity reading stored in the series."""

    value: float
    time: datetime
    measurement: str = MEASUREMENT
    field: str = FIELD
