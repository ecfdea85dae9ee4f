"""Tests for the route risk scoring module."""

import random

import pytest

from safewalk.config import ScoringConfig
from safewalk.models import (
    CorridorSegment,
    CorridorType,
    HighRiskRange,
    LatLng,
    Recommendation,
    RouteGeometry,
)
from safewalk.risk.scoring import RouteRiskScorer, round_half_up, score_route


@pytest.fixture
def scorer():
    return RouteRiskScorer(ScoringConfig())


# ---------------------------------------------------------------------------
# Baseline and degenerate routes
# ---------------------------------------------------------------------------

class TestBaseline:
    """Routes with nothing around them."""

    def test_two_point_route_without_hazards(self, scorer, make_route):
        route = make_route(2, spacing_m=500.0, distance=640.0)

        scored = scorer.score_route(route, [], [])

        assert scored.danger_score == 0
        assert scored.safety_score == 640
        assert scored.danger_zones_count == 0
        assert scored.high_risk_segments == ()
        assert scored.recommendation is Recommendation.NONE
        assert scored.geometry is route

    def test_distant_zone_ignored(self, scorer, make_route, make_zone, shift, origin):
        route = make_route(2)
        zone = make_zone(shift(origin, north_m=400.0), priority=50.0)

        scored = scorer.score_route(route, [zone], [])

        assert scored.danger_score == 0
        assert scored.danger_zones_count == 0

    @pytest.mark.parametrize("num_points", [0, 1], ids=["empty", "single_point"])
    def test_degenerate_route_scores_as_risk_free(self, scorer, make_zone, origin, num_points):
        coords = (origin,) * num_points
        route = RouteGeometry(coordinates=coords, distance_meters=812.6, duration_seconds=600.0)
        zone = make_zone(origin, priority=40.0)

        scored = scorer.score_route(route, [zone], [])

        assert scored.danger_score == 0
        assert scored.safety_score == 813
        assert scored.danger_zones_count == 0
        assert scored.high_risk_segments == ()


# ---------------------------------------------------------------------------
# Danger zones
# ---------------------------------------------------------------------------

class TestDangerZones:
    """Danger zone contributions."""

    def test_zone_on_segment_triggers_high_risk(self, scorer, make_route, make_zone, shift, origin):
        route = make_route(2, spacing_m=500.0)
        zone = make_zone(shift(origin, east_m=250.0), priority=12.0)

        scored = scorer.score_route(route, [zone], [])

        assert scored.danger_score == 12.0
        assert scored.danger_zones_count == 1
        assert scored.high_risk_segments == (HighRiskRange(0, 1),)
        assert scored.safety_score == round(500 / 13)

    @pytest.mark.parametrize(
        "north_m, counted",
        [(0.0, True), (100.0, True), (149.0, True), (151.0, False), (300.0, False)],
        ids=["on_route", "100m", "149m", "151m", "300m"],
    )
    def test_signal_proximity_threshold(self, scorer, make_route, make_zone, shift, origin, north_m, counted):
        route = make_route(2, spacing_m=500.0)
        zone = make_zone(shift(origin, east_m=250.0, north_m=north_m), priority=4.0)

        scored = scorer.score_route(route, [zone], [])

        assert scored.danger_zones_count == (1 if counted else 0)
        assert scored.danger_score == (4.0 if counted else 0.0)

    def test_zone_counted_once_per_nearby_segment(self, scorer, make_route, make_zone, shift, origin):
        # A zone at a shared vertex is near both segments
        route = make_route(3, spacing_m=500.0)
        zone = make_zone(shift(origin, east_m=500.0), priority=4.0)

        scored = scorer.score_route(route, [zone], [])

        assert scored.danger_zones_count == 2
        assert scored.danger_score == 8.0

    def test_zones_accumulate_within_segment(self, scorer, make_route, make_zone, shift, origin):
        route = make_route(2, spacing_m=500.0)
        zones = [
            make_zone(shift(origin, east_m=200.0), priority=4.0),
            make_zone(shift(origin, east_m=300.0), priority=7.0),
        ]

        scored = scorer.score_route(route, zones, [])

        assert scored.danger_score == 11.0
        assert scored.danger_zones_count == 2
        assert scored.high_risk_segments == (HighRiskRange(0, 1),)

    def test_danger_score_rounded_to_one_decimal(self, scorer, make_route, make_zone, shift, origin):
        route = make_route(2, spacing_m=500.0, distance=1000.0)
        zone = make_zone(shift(origin, east_m=250.0), priority=2.25)

        scored = scorer.score_route(route, [zone], [])

        assert scored.danger_score == 2.3
        assert scored.safety_score == 308  # 1000 / 3.25 = 307.69


# ---------------------------------------------------------------------------
# High-risk runs
# ---------------------------------------------------------------------------

class TestHighRiskRuns:
    """Detection and merging of high-risk segment runs."""

    def test_adjacent_segments_below_threshold(self, scorer, make_route, make_zone, shift, origin):
        route = make_route(3, spacing_m=500.0)
        zones = [
            make_zone(shift(origin, east_m=250.0), priority=6.0),
            make_zone(shift(origin, east_m=750.0), priority=6.0),
        ]

        scored = scorer.score_route(route, zones, [])

        assert scored.danger_score == 12.0
        assert scored.high_risk_segments == ()

    def test_adjacent_high_risk_segments_merge(self, scorer, make_route, make_zone, shift, origin):
        route = make_route(3, spacing_m=500.0)
        zones = [
            make_zone(shift(origin, east_m=250.0), priority=10.0),
            make_zone(shift(origin, east_m=750.0), priority=10.0),
        ]

        scored = scorer.score_route(route, zones, [])

        assert scored.high_risk_segments == (HighRiskRange(0, 2),)

    def test_separated_runs_stay_apart(self, scorer, make_route, make_zone, shift, origin):
        route = make_route(6, spacing_m=500.0)
        zones = [
            make_zone(shift(origin, east_m=250.0), priority=15.0),
            make_zone(shift(origin, east_m=1250.0), priority=15.0),
            make_zone(shift(origin, east_m=1750.0), priority=15.0),
        ]

        scored = scorer.score_route(route, zones, [])

        assert scored.high_risk_segments == (HighRiskRange(0, 1), HighRiskRange(2, 4))

    def test_threshold_is_inclusive(self, make_route, make_zone, shift, origin):
        scorer = RouteRiskScorer(ScoringConfig(high_risk_threshold=8.0))
        route = make_route(2, spacing_m=500.0)
        zone = make_zone(shift(origin, east_m=250.0), priority=8.0)

        scored = scorer.score_route(route, [zone], [])

        assert scored.high_risk_segments == (HighRiskRange(0, 1),)


# ---------------------------------------------------------------------------
# Corridors
# ---------------------------------------------------------------------------

class TestCorridors:
    """Administrator corridor contributions."""

    @pytest.mark.parametrize("north_m", [0.0, 20.0, 45.0], ids=["on_route", "20m", "45m"])
    def test_unsafe_corridor_fixed_penalty(self, scorer, make_route, make_corridor, shift, origin, north_m):
        route = make_route(2, spacing_m=500.0)
        corridor = make_corridor(shift(origin, north_m=north_m), "unsafe")

        scored = scorer.score_route(route, [], [corridor])

        assert scored.danger_score == 20.0
        assert scored.danger_zones_count == 1
        assert scored.high_risk_segments == (HighRiskRange(0, 1),)

    def test_unsafe_corridor_outside_radius(self, scorer, make_route, make_corridor, shift, origin):
        route = make_route(2, spacing_m=500.0)
        corridor = make_corridor(shift(origin, north_m=60.0), "unsafe")

        scored = scorer.score_route(route, [], [corridor])

        assert scored.danger_score == 0
        assert scored.danger_zones_count == 0

    def test_corridor_measured_from_leading_point(self, scorer, make_route, make_corridor, shift, origin):
        # Near the middle of the segment but far from its leading point
        route = make_route(2, spacing_m=500.0)
        corridor = make_corridor(shift(origin, east_m=250.0), "unsafe")

        scored = scorer.score_route(route, [], [corridor])

        assert scored.danger_score == 0

    def test_safe_corridor_alone_clamps_to_zero(self, scorer, make_route, make_corridor, origin):
        route = make_route(2, spacing_m=500.0)
        corridor = make_corridor(origin, "safe")

        scored = scorer.score_route(route, [], [corridor])

        assert scored.danger_score == 0
        assert scored.safety_score == 500
        assert scored.danger_zones_count == 0

    def test_safe_corridor_offsets_segment_danger(
        self, scorer, make_route, make_zone, make_corridor, shift, origin,
    ):
        route = make_route(2, spacing_m=500.0)
        zone = make_zone(shift(origin, east_m=100.0), priority=12.0)
        corridor = make_corridor(origin, "safe")

        scored = scorer.score_route(route, [zone], [corridor])

        # 12 - 5 = 7: still dangerous but below the high-risk threshold
        assert scored.danger_score == 7.0
        assert scored.danger_zones_count == 1
        assert scored.high_risk_segments == ()

    def test_safe_bonus_does_not_cancel_other_segments(
        self, scorer, make_route, make_zone, make_corridor, shift, origin,
    ):
        route = make_route(3, spacing_m=500.0)
        zone = make_zone(shift(origin, east_m=750.0), priority=4.0)
        corridor = make_corridor(origin, "safe")

        scored = scorer.score_route(route, [zone], [corridor])

        assert scored.danger_score == 4.0

    @pytest.mark.parametrize("num_points", [0, 1], ids=["empty", "single_point"])
    def test_short_corridor_skipped(self, scorer, make_route, origin, num_points):
        route = make_route(2, spacing_m=500.0)
        corridor = CorridorSegment(type=CorridorType.UNSAFE, polyline=(origin,) * num_points)

        scored = scorer.score_route(route, [], [corridor])

        assert scored.danger_score == 0
        assert scored.danger_zones_count == 0

    def test_custom_corridor_settings(self, make_route, make_corridor, shift, origin):
        config = ScoringConfig(corridor_proximity_m=100.0, unsafe_corridor_penalty=7.0)
        route = make_route(2, spacing_m=500.0)
        corridor = make_corridor(shift(origin, north_m=80.0), "unsafe")

        scored = RouteRiskScorer(config).score_route(route, [], [corridor])

        assert scored.danger_score == 7.0
        assert scored.high_risk_segments == ()


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

def _random_inputs(seed: int, origin: LatLng, shift, make_zone, make_corridor):
    rng = random.Random(seed)
    coords = [origin]
    for _ in range(rng.randint(2, 25)):
        coords.append(shift(coords[-1], north_m=rng.uniform(-80, 80), east_m=rng.uniform(20, 200)))
    route = RouteGeometry(coordinates=tuple(coords), distance_meters=rng.uniform(500, 5000), duration_seconds=0.0)

    zones = [
        make_zone(shift(origin, north_m=rng.uniform(-300, 300), east_m=rng.uniform(0, 3000)),
                  priority=rng.choice([2.0, 4.0, 6.0, 10.0, 12.5]))
        for _ in range(rng.randint(0, 15))
    ]
    corridors = [
        make_corridor(shift(origin, north_m=rng.uniform(-100, 100), east_m=rng.uniform(0, 3000)),
                      rng.choice(["safe", "unsafe"]), half_length_m=rng.uniform(10, 200))
        for _ in range(rng.randint(0, 6))
    ]
    return route, zones, corridors


class TestScoringProperties:
    """Invariants over randomly generated inputs."""

    @pytest.mark.parametrize("seed", range(20))
    def test_invariants(self, scorer, origin, shift, make_zone, make_corridor, seed):
        route, zones, corridors = _random_inputs(seed, origin, shift, make_zone, make_corridor)

        scored = scorer.score_route(route, zones, corridors)

        assert scored.danger_score >= 0
        assert scored.danger_zones_count >= 0
        assert scored.safety_score <= round(route.distance_meters) + 1

        ranges = scored.high_risk_segments
        for r in ranges:
            assert 0 <= r.start < r.end <= route.num_segments
        for prev, nxt in zip(ranges, ranges[1:]):
            # Sorted, disjoint and never touching
            assert prev.end < nxt.start

    @pytest.mark.parametrize("seed", range(5))
    def test_idempotent(self, scorer, origin, shift, make_zone, make_corridor, seed):
        route, zones, corridors = _random_inputs(seed, origin, shift, make_zone, make_corridor)

        assert scorer.score_route(route, zones, corridors) == scorer.score_route(route, zones, corridors)


class TestHelpers:
    """Tests for module-level helpers."""

    @pytest.mark.parametrize(
        "value, ndigits, expected",
        [(2.25, 1, 2.3), (2.24, 1, 2.2), (307.5, 0, 308.0), (307.49, 0, 307.0), (0.0, 1, 0.0)],
    )
    def test_round_half_up(self, value, ndigits, expected):
        assert round_half_up(value, ndigits) == expected

    def test_score_route_uses_default_config(self, make_route, make_zone, shift, origin):
        route = make_route(2, spacing_m=500.0)
        zone = make_zone(shift(origin, east_m=250.0, north_m=140.0), priority=3.0)

        scored = score_route(route, [zone])

        assert scored.danger_score == 3.0
