"""Forwarding client used by the dashboard's proxy endpoint."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from services.errors import NetworkError

logger = logging.getLogger(__name__)

GET_DATA_PATH = "/api/v1/getData"


class ProxyService:
    """Calls the store gateway's query route and hands the payload back untouched."""

    def __init__(self, gateway_url: str, client: Optional[httpx.AsyncClient] = None) -> None:
        self.gateway_url = gateway_url.rstrip("/")
        self._client = client or httpx.AsyncClient()

    @property
    def upstream_url(self) -> str:
        return f"{self.gateway_url}{GET_DATA_PATH}"

    async def forward(self) -> List[Any]:
        try:
            response = await self._client.get(self.upstream_url)
        except httpx.HTTPError as exc:
            logger.error(
                "Store gateway unreachable",
                extra={"upstream_url": self.upstream_url, "reason": str(exc)},
            )
            raise NetworkError(f"Failed to reach the store gateway: {exc}") from exc

        if not response.is_success:
            logger.error(
                "Store gateway returned an error",
                extra={"upstream_url": self.upstream_url, "status": response.status_code},
            )
            raise NetworkError("Failed to fetch from the store gateway")

        try:
            payload = response.json()
        except ValueError as exc:
            raise NetworkError("Store gateway returned a malformed body") from exc
        if not isinstance(payload, list):
            raise NetworkError("Store gateway returned a malformed body")
        return payload

    async def aclose(self) -> None:
        await self._client.aclose()
