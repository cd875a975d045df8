"""Aggregation logic for humidity readings."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from models.records import Reading

_CENTS = Decimal("0.01")


@dataclass
class HumiditySummary:
    """Computed statistics for a series of readings."""

    row_count: int = 0
    highest: Optional[Reading] = None
    lowest: Optional[Reading] = None
    mean_value: Optional[float] = None


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(self, readings: Iterable[Reading]) -> HumiditySummary:
        summary = HumiditySummary()
        total = 0.0

        for reading in readings:
            summary.row_count += 1
            total += reading.value

            # Strict comparisons keep the earliest reading on ties.
            if summary.highest is None or reading.value > summary.highest.value:
                summary.highest = reading
            if summary.lowest is None or reading.value < summary.lowest.value:
                summary.lowest = reading

        if summary.row_count:
            mean = Decimal(total / summary.row_count)
            summary.mean_value = float(mean.quantize(_CENTS, rounding=ROUND_HALF_UP))

        return summary
