"""Risk scoring for candidate walking routes."""

import math
from collections.abc import Sequence

import numpy as np

from safewalk.config import ScoringConfig, get_config
from safewalk.models import (
    CorridorSegment,
    CorridorType,
    DangerZone,
    HighRiskRange,
    RouteGeometry,
    ScoredRoute,
)
from safewalk.risk.proximity import (
    as_latlng_array,
    points_to_polyline_distances,
    segment_distances,
)


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round to ``ndigits`` decimals with halves rounded towards +infinity."""
    scale = 10 ** ndigits
    return math.floor(value * scale + 0.5) / scale


class RouteRiskScorer:
    """Scores a route against danger zones and administrator corridors."""

    def __init__(self, config: ScoringConfig | None = None):
        """Initialize the scorer.

        Args:
            config: Scoring thresholds. Defaults to the global configuration.
        """
        self.config = config or get_config().scoring

    def score_route(
        self,
        geometry: RouteGeometry,
        danger_zones: Sequence[DangerZone],
        corridors: Sequence[CorridorSegment] = (),
    ) -> ScoredRoute:
        """Score one route.

        Each segment collects the priority of every danger zone within
        ``signal_proximity_m`` of it, plus a penalty for every unsafe corridor
        (or a bonus for every safe corridor) within ``corridor_proximity_m``
        of its leading point. Positive segment danger adds to the route total;
        segments at or above ``high_risk_threshold`` are grouped into runs.

        Args:
            geometry: The candidate route.
            danger_zones: Current danger zones.
            corridors: Current safe/unsafe corridors.

        Returns:
            ScoredRoute with no recommendation label.
        """
        num_segments = geometry.num_segments
        if num_segments == 0:
            # Nothing to evaluate; a degenerate candidate scores as risk-free
            return ScoredRoute(
                geometry=geometry,
                danger_score=0.0,
                safety_score=int(round_half_up(geometry.distance_meters)),
                danger_zones_count=0,
            )

        segment_danger, hit_counts = self._segment_contributions(geometry, danger_zones, corridors)

        total_danger = 0.0
        high_risk: list[HighRiskRange] = []
        for i, danger in enumerate(segment_danger.tolist()):
            if danger <= 0:
                continue
            total_danger += danger
            if danger >= self.config.high_risk_threshold:
                if high_risk and high_risk[-1].end == i:
                    high_risk[-1] = HighRiskRange(high_risk[-1].start, i + 1)
                else:
                    high_risk.append(HighRiskRange(i, i + 1))

        # Safe-corridor bonuses must not make a risky route look net-beneficial
        total_danger = max(0.0, total_danger)

        safety_score = geometry.distance_meters / (1.0 + total_danger)

        return ScoredRoute(
            geometry=geometry,
            danger_score=round_half_up(total_danger, 1),
            safety_score=int(round_half_up(safety_score)),
            danger_zones_count=int(hit_counts.sum()),
            high_risk_segments=tuple(high_risk),
        )

    def _segment_contributions(
        self,
        geometry: RouteGeometry,
        danger_zones: Sequence[DangerZone],
        corridors: Sequence[CorridorSegment],
    ) -> tuple[np.ndarray, np.ndarray]:
        """Per-segment danger and per-segment hit counts."""
        coords = as_latlng_array(geometry.coordinates)
        starts = coords[:-1]
        ends = coords[1:]

        segment_danger = np.zeros(len(starts), dtype=np.float64)
        hit_counts = np.zeros(len(starts), dtype=np.int64)

        for zone in danger_zones:
            distances = segment_distances(zone.location, starts, ends)
            within = distances <= self.config.signal_proximity_m
            segment_danger[within] += zone.priority_score
            hit_counts += within

        for corridor in corridors:
            if len(corridor.polyline) < 2:
                continue
            distances = points_to_polyline_distances(starts, as_latlng_array(corridor.polyline))
            near = distances <= self.config.corridor_proximity_m
            if corridor.type is CorridorType.UNSAFE:
                segment_danger[near] += self.config.unsafe_corridor_penalty
                hit_counts += near
            else:
                segment_danger[near] -= self.config.safe_corridor_bonus

        return segment_danger, hit_counts


# Convenience function with default scorer
def score_route(
    geometry: RouteGeometry,
    danger_zones: Sequence[DangerZone],
    corridors: Sequence[CorridorSegment] = (),
) -> ScoredRoute:
    """Score a route using the default scorer."""
    scorer = RouteRiskScorer()
    return scorer.score_route(geometry, danger_zones, corridors)
