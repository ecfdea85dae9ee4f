"""SafeWalk: rank walking routes by exposure to reported hazards."""

from safewalk.models import (
    CorridorSegment,
    CorridorType,
    DangerZone,
    HighRiskRange,
    LatLng,
    Recommendation,
    RouteGeometry,
    RoutePlanResult,
    ScoredRoute,
)
from safewalk.planner import RoutePlanner, plan_safe_route
from safewalk.routing.errors import RoutingSourceUnavailable

__all__ = [
    "LatLng",
    "RouteGeometry",
    "DangerZone",
    "CorridorType",
    "CorridorSegment",
    "HighRiskRange",
    "Recommendation",
    "ScoredRoute",
    "RoutePlanResult",
    "RoutePlanner",
    "plan_safe_route",
    "RoutingSourceUnavailable",
]
