from __future__ import annotations

from typing import Any, Iterable, Optional

import typer

from models.records import Reading
from services.aggregator import HumiditySummary


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _describe(reading: Optional[Reading]) -> str:
    if reading is None:
        return "n/a"
    return f"{reading.value}% on {reading.time.isoformat()}"


def render_readings(readings: list[Reading], summary: HumiditySummary) -> None:
    echo_heading("Readings")
    if not readings:
        typer.echo("No readings found.")
        return
    for reading in readings:
        typer.echo(f"  - {reading.time.isoformat()}  {reading.value}")

    typer.echo()
    echo_heading("Aggregates")
    echo_key_values(
        [
            ("row_count", summary.row_count),
            ("highest", _describe(summary.highest)),
            ("lowest", _describe(summary.lowest)),
            ("mean_value", summary.mean_value),
        ]
    )
