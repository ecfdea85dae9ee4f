"""Shared test fixtures for safewalk tests."""

import math

import pytest

from safewalk.config import reload_config
from safewalk.models import (
    CorridorSegment,
    CorridorType,
    DangerZone,
    LatLng,
    RouteGeometry,
)

ORIGIN = LatLng(45.75, 21.23)
METERS_PER_DEG_LAT = 6_371_000.0 * math.pi / 180


def offset(point: LatLng, north_m: float = 0.0, east_m: float = 0.0) -> LatLng:
    """Shift a point by a number of meters north and east."""
    dlat = north_m / METERS_PER_DEG_LAT
    dlng = east_m / (METERS_PER_DEG_LAT * math.cos(math.radians(point.lat)))
    return LatLng(point.lat + dlat, point.lng + dlng)


@pytest.fixture(autouse=True)
def default_config():
    """Reset the global configuration to built-in defaults for every test."""
    return reload_config(None)


@pytest.fixture
def origin():
    return ORIGIN


@pytest.fixture
def make_route():
    """Factory for an eastbound route with evenly spaced vertices.

    ``make_route(num_points, spacing_m)`` starts at ORIGIN; the distance
    defaults to the length of the polyline.
    """
    def _make(num_points: int = 2, spacing_m: float = 500.0, distance: float | None = None) -> RouteGeometry:
        coords = tuple(offset(ORIGIN, east_m=i * spacing_m) for i in range(num_points))
        length = max(0, num_points - 1) * spacing_m
        return RouteGeometry(
            coordinates=coords,
            distance_meters=length if distance is None else distance,
            duration_seconds=length / 1.4,
        )
    return _make


@pytest.fixture
def make_zone():
    """Factory for a danger zone at a given point."""
    def _make(point: LatLng, priority: float = 4.0, severity: int = 2, category: str = "safety") -> DangerZone:
        return DangerZone(
            lat=point.lat,
            lng=point.lng,
            severity=severity,
            priority_score=priority,
            category=category,
        )
    return _make


@pytest.fixture
def make_corridor():
    """Factory for a short east-west corridor centred on a point."""
    def _make(center: LatLng, corridor_type: str = "unsafe", half_length_m: float = 20.0) -> CorridorSegment:
        return CorridorSegment(
            type=CorridorType(corridor_type),
            polyline=(
                offset(center, east_m=-half_length_m),
                offset(center, east_m=half_length_m),
            ),
            corridor_id=f"{corridor_type}-1",
            name=f"Test {corridor_type} corridor",
        )
    return _make


@pytest.fixture
def shift():
    """The ``offset`` helper, for tests that build their own geometry."""
    return offset
