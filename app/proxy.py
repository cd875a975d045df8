"""Proxy route republishing the store gateway's query result."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from services.errors import NetworkError
from services.proxy import ProxyService

router = APIRouter()


def get_proxy(request: Request) -> ProxyService:
    return request.app.state.proxy


@router.get(
    "/api/proxy",
    summary="Forward the store gateway's readings verbatim.",
)
async def forward_readings(proxy: ProxyService = Depends(get_proxy)) -> JSONResponse:
    try:
        payload = await proxy.forward()
    except NetworkError as exc:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc)},
        )
    return JSONResponse(status_code=status.HTTP_200_OK, content=payload)
