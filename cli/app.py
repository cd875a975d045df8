from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer
from pydantic import TypeAdapter, ValidationError

from app.schemas import ReadingOut
from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_readings
from services.aggregator import Aggregator


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the humidity store gateway.",
    context_settings={"help_option_names": ["-h", "--help"]},
)

_readings_adapter = TypeAdapter(list[ReadingOut])


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Store gateway base URL (defaults to STORE_GATEWAY_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("health")
def health_command(ctx: typer.Context) -> None:
    """Check that the store gateway is alive."""
    state = _get_state(ctx)
    status_code = state.client.health()
    typer.secho(f"{state.config.base_url} is up (status {status_code}).", fg=typer.colors.GREEN)


@app.command("embed")
def embed_command(
    ctx: typer.Context,
    value: str = typer.Argument(..., help="Humidity value to store."),
) -> None:
    """Write one humidity value."""
    state = _get_state(ctx)
    typer.echo(state.client.embed(value))


@app.command("readings")
def readings_command(ctx: typer.Context) -> None:
    """List readings from the trailing window with their aggregates."""
    state = _get_state(ctx)
    payload = state.client.get_readings()
    try:
        parsed = _readings_adapter.validate_python(payload)
    except ValidationError as exc:
        typer.secho(f"Unexpected readings payload: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    readings = [item.to_record() for item in parsed]
    render_readings(readings, Aggregator().aggregate(readings))
