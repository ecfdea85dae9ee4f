"""Safe route planning: fetch candidates, score them, rank them."""

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Protocol

import structlog

from safewalk.config import get_config
from safewalk.models import (
    CorridorSegment,
    DangerZone,
    LatLng,
    RouteGeometry,
    RoutePlanResult,
    ScoredRoute,
)
from safewalk.risk.ranking import rank_routes
from safewalk.risk.scoring import RouteRiskScorer
from safewalk.routing.client import OsrmClient

logger = structlog.get_logger()


class RoutingSource(Protocol):
    """Anything that can supply candidate route geometries."""

    def fetch_routes(self, start: LatLng, end: LatLng, alternatives: int = 3) -> list[RouteGeometry]:
        ...


class RoutePlanner:
    """Plans the safest walking route between two points."""

    def __init__(
        self,
        routing_client: RoutingSource | None = None,
        scorer: RouteRiskScorer | None = None,
        max_workers: int | None = None,
    ):
        """Initialize the planner.

        Args:
            routing_client: Source of candidate geometries. Defaults to OSRM.
            scorer: Route scorer. Defaults to one using the global configuration.
            max_workers: Thread pool size for scoring candidates.
        """
        config = get_config()
        self._owns_client = routing_client is None
        self.routing_client = routing_client or OsrmClient()
        self.scorer = scorer or RouteRiskScorer()
        self.max_workers = max_workers or config.planning.max_workers
        self.default_alternatives = config.routing.alternatives

    def close(self) -> None:
        """Close the routing client if the planner created it."""
        if self._owns_client:
            self.routing_client.close()

    def __enter__(self) -> "RoutePlanner":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def score_candidates(
        self,
        candidates: Sequence[RouteGeometry],
        danger_zones: Sequence[DangerZone],
        corridors: Sequence[CorridorSegment] = (),
    ) -> list[ScoredRoute]:
        """Score candidates concurrently, keeping candidate order."""
        if not candidates:
            return []
        if len(candidates) == 1:
            return [self.scorer.score_route(candidates[0], danger_zones, corridors)]

        zones = tuple(danger_zones)
        corridor_set = tuple(corridors)
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(pool.map(
                lambda geometry: self.scorer.score_route(geometry, zones, corridor_set),
                candidates,
            ))

    def plan(
        self,
        start: LatLng,
        end: LatLng,
        danger_zones: Sequence[DangerZone],
        corridors: Sequence[CorridorSegment] = (),
        alternatives: int | None = None,
    ) -> RoutePlanResult:
        """Plan routes from ``start`` to ``end`` and rank them by safety.

        Args:
            start: Route origin.
            end: Route destination.
            danger_zones: Current danger zones.
            corridors: Current safe/unsafe corridors.
            alternatives: Number of alternatives to request from the routing source.

        Returns:
            RoutePlanResult with routes sorted safest first. ``routes`` is
            empty when the routing source finds no route.

        Raises:
            RoutingSourceUnavailable: If the routing source fails.
        """
        alternatives = alternatives if alternatives is not None else self.default_alternatives

        candidates = self.routing_client.fetch_routes(start, end, alternatives)
        scored = self.score_candidates(candidates, danger_zones, corridors)
        ranked = rank_routes(scored)

        logger.info(
            "Route planning complete",
            num_candidates=len(candidates),
            num_danger_zones=len(danger_zones),
            num_corridors=len(corridors),
            safest_score=ranked[0].safety_score if ranked else None,
        )

        return RoutePlanResult(start_point=start, end_point=end, routes=tuple(ranked))


# Convenience function with default planner
def plan_safe_route(
    start: LatLng,
    end: LatLng,
    danger_zones: Sequence[DangerZone],
    corridors: Sequence[CorridorSegment] = (),
    alternatives: int | None = None,
) -> RoutePlanResult:
    """Plan a safe route using the default OSRM client and scorer."""
    with OsrmClient() as client:
        planner = RoutePlanner(routing_client=client)
        return planner.plan(start, end, danger_zones, corridors, alternatives)
