from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the store gateway."""

    def __init__(self, config: CLIConfig, transport: Optional[httpx.BaseTransport] = None) -> None:
        self._config = config
        self._client = httpx.Client(
            base_url=config.base_url, timeout=config.timeout, transport=transport
        )

    def close(self) -> None:
        self._client.close()

    def health(self) -> int:
        response = self._request("/api/v1/")
        return response.status_code

    def embed(self, value: str) -> str:
        response = self._request("/api/v1/embed", params={"value": value})
        return response.text

    def get_readings(self) -> List[Dict[str, Any]]:
        """Return the gateway's readings, or an empty list when it reports none."""
        try:
            response = self._client.get("/api/v1/getData")
            if response.status_code == 404:
                return []
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            self._handle_transport_error(exc)
        try:
            payload = response.json()
        except ValueError as exc:
            raise typer.BadParameter("Unexpected response payload when fetching readings.") from exc
        if not isinstance(payload, list):
            raise typer.BadParameter("Unexpected response payload when fetching readings.")
        return payload

    def _request(self, path: str, params: Optional[Dict[str, str]] = None) -> httpx.Response:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            self._handle_transport_error(exc)
        return response

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except (ValueError, AttributeError):
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    @staticmethod
    def _handle_transport_error(exc: httpx.TransportError) -> None:
        typer.secho(f"Could not reach the store gateway: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
