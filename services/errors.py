"""Error taxonomy shared by the gateway, the proxy and the dashboard."""

from __future__ import annotations


class HumidityError(Exception):
    """Base class for failures detected by a component."""


class InvalidInputError(HumidityError, ValueError):
    """An ingest value could not be parsed as a finite number."""


class UpstreamError(HumidityError):
    """The time-series database rejected a write or failed a query."""


class NotFoundError(HumidityError, LookupError):
    """A query completed without matching any reading."""


class NetworkError(HumidityError):
    """The proxy could not obtain a usable response from the store gateway."""
