from __future__ import annotations

from pathlib import Path
from typing import Any, List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import TypeAdapter, ValidationError

from app.proxy import get_proxy
from app.schemas import ReadingOut
from models.records import Reading
from services.aggregator import Aggregator
from services.errors import NetworkError
from services.proxy import ProxyService


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

_readings_adapter = TypeAdapter(List[ReadingOut])


def get_aggregator() -> Aggregator:
    return Aggregator()


def _parse_readings(payload: List[Any]) -> list[Reading]:
    try:
        parsed = _readings_adapter.validate_python(payload)
    except ValidationError as exc:
        raise NetworkError("Store gateway returned malformed readings") from exc
    return [item.to_record() for item in parsed]


def _chart_data(readings: list[Reading]) -> dict[str, list]:
    return {
        "times": [reading.time.isoformat() for reading in readings],
        "values": [reading.value for reading in readings],
    }


router = APIRouter(include_in_schema=False)


@router.get("/", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    proxy: ProxyService = Depends(get_proxy),
    aggregator: Aggregator = Depends(get_aggregator),
) -> HTMLResponse:
    context: dict[str, Any] = {"state": "ready"}
    try:
        readings = _parse_readings(await proxy.forward())
    except NetworkError as exc:
        context = {"state": "error", "error": str(exc)}
    else:
        if not readings:
            context = {"state": "empty"}
        else:
            context["summary"] = aggregator.aggregate(readings)
            context["chart"] = _chart_data(readings)

    return templates.TemplateResponse(request, "ui/index.html", context)
