"""Route risk scoring, proximity analysis and ranking."""

from safewalk.risk.proximity import point_to_polyline_distance, point_to_segment_distance
from safewalk.risk.ranking import rank_routes
from safewalk.risk.scoring import RouteRiskScorer, score_route

__all__ = [
    "point_to_segment_distance",
    "point_to_polyline_distance",
    "RouteRiskScorer",
    "score_route",
    "rank_routes",
]
