"""HTTP route definitions for the store gateway."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import PlainTextResponse

from app.schemas import ReadingOut
from services.errors import InvalidInputError, NotFoundError, UpstreamError
from services.gateway import GatewayService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")
base_router = APIRouter(include_in_schema=False)


def get_gateway(request: Request) -> GatewayService:
    return request.app.state.gateway


@router.get(
    "/",
    summary="Liveness check.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> Response:
    return Response(status_code=status.HTTP_200_OK)


@router.get(
    "/embed",
    response_class=PlainTextResponse,
    summary="Write one humidity value as a timestamped reading.",
)
def embed_value(
    value: Optional[str] = Query(None, description="Humidity value to store."),
    gateway: GatewayService = Depends(get_gateway),
) -> str:
    try:
        return gateway.ingest(value)
    except InvalidInputError as exc:
        logger.info("Rejected ingest value", extra={"value": value, "reason": str(exc)})
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except UpstreamError as exc:
        logger.exception("Write to store failed", extra={"value": value})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error writing data to InfluxDB",
        ) from exc


@router.get(
    "/getData",
    response_model=List[ReadingOut],
    summary="Fetch every reading in the trailing 30 day window.",
)
def get_data(gateway: GatewayService = Depends(get_gateway)) -> List[ReadingOut]:
    try:
        readings = gateway.query()
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except UpstreamError as exc:
        logger.exception("Query against store failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error fetching data from InfluxDB",
        ) from exc
    return [ReadingOut.from_record(reading) for reading in readings]


@base_router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return "OK"


@base_router.get("/test", response_class=PlainTextResponse)
async def echo_query_params(request: Request) -> str:
    logger.info("Received query parameters", extra={"query_params": dict(request.query_params)})
    return "received queryparams!"
