"""Routing source client for candidate route geometries."""

from safewalk.routing.client import OsrmClient
from safewalk.routing.errors import RoutingError, RoutingSourceUnavailable

__all__ = ["OsrmClient", "RoutingError", "RoutingSourceUnavailable"]
