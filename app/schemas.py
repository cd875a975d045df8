"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from models.records import FIELD, MEASUREMENT, Reading


class ReadingOut(BaseModel):
    """Wire representation of a stored reading."""

    time: datetime = Field(..., description="Instant the reading was captured.")
    value: float = Field(..., allow_inf_nan=False, description="Humidity percentage.")
    measurement: str = MEASUREMENT
    field: str = FIELD

    @classmethod
    def from_record(cls, reading: Reading) -> "ReadingOut":
        return cls(
            time=reading.time,
            value=reading.value,
            measurement=reading.measurement,
            field=reading.field,
        )

    def to_record(self) -> Reading:
        moment = self.time
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return Reading(
            value=self.value,
            time=moment.astimezone(timezone.utc),
            measurement=self.measurement,
            field=self.field,
        )
