"""Ranking and labelling of scored routes."""

from collections.abc import Sequence
from dataclasses import replace

from safewalk.models import Recommendation, ScoredRoute


def _sort_key(route: ScoredRoute) -> tuple[int, int, float]:
    return (-route.safety_score, route.danger_zones_count, route.distance_meters)


def rank_routes(routes: Sequence[ScoredRoute]) -> list[ScoredRoute]:
    """Order routes safest first and attach recommendation labels.

    Routes are sorted by safety score (descending), then by number of danger
    hits and by distance (both ascending). The first route is labelled
    ``safest``. The shortest route, taken in input order so the first of
    several equally short routes wins, is labelled ``fastest`` unless it is
    already the safest one. The input routes are not modified.

    Args:
        routes: Scored routes for one planning request, in routing-source order.

    Returns:
        New list of labelled routes, safest first.
    """
    if not routes:
        return []

    order = sorted(range(len(routes)), key=lambda i: _sort_key(routes[i]))
    safest_idx = order[0]
    fastest_idx = min(range(len(routes)), key=lambda i: routes[i].distance_meters)

    labels = {safest_idx: Recommendation.SAFEST}
    if fastest_idx != safest_idx:
        labels[fastest_idx] = Recommendation.FASTEST

    return [
        replace(routes[i], recommendation=labels.get(i, Recommendation.NONE))
        for i in order
    ]
