"""Value types shared by the geometry, scoring and planning modules."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


def _require_finite(name: str, value: float) -> None:
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value!r}")


@dataclass(frozen=True)
class LatLng:
    """A WGS84 coordinate in degrees."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        _require_finite("lat", self.lat)
        _require_finite("lng", self.lng)

    @classmethod
    def from_lnglat(cls, pair: Any) -> "LatLng":
        """Create from a GeoJSON-ordered ``[lng, lat]`` pair."""
        lng, lat = pair
        return cls(lat=float(lat), lng=float(lng))

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class RouteGeometry:
    """A candidate route as returned by the routing source."""

    coordinates: tuple[LatLng, ...]
    distance_meters: float
    duration_seconds: float

    def __post_init__(self) -> None:
        # Accept any sequence but store a tuple so the geometry stays hashable
        object.__setattr__(self, "coordinates", tuple(self.coordinates))
        for name in ("distance_meters", "duration_seconds"):
            value = getattr(self, name)
            _require_finite(name, value)
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value!r}")

    @property
    def num_segments(self) -> int:
        return max(0, len(self.coordinates) - 1)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a GeoJSON-like dictionary (``[lng, lat]`` pairs)."""
        return {
            "coordinates": [[c.lng, c.lat] for c in self.coordinates],
            "distance": self.distance_meters,
            "duration": self.duration_seconds,
        }


@dataclass(frozen=True)
class DangerZone:
    """A hazard point derived from a crowd-reported signal."""

    lat: float
    lng: float
    severity: int
    priority_score: float
    category: str

    def __post_init__(self) -> None:
        _require_finite("lat", self.lat)
        _require_finite("lng", self.lng)
        _require_finite("priority_score", self.priority_score)

    @property
    def location(self) -> LatLng:
        return LatLng(self.lat, self.lng)


class CorridorType(str, Enum):
    """Administrator label for a corridor polyline."""

    SAFE = "safe"
    UNSAFE = "unsafe"


@dataclass(frozen=True)
class CorridorSegment:
    """An administrator-drawn polyline labelled safe or unsafe."""

    type: CorridorType
    polyline: tuple[LatLng, ...]
    corridor_id: str | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", CorridorType(self.type))
        object.__setattr__(self, "polyline", tuple(self.polyline))


@dataclass(frozen=True)
class HighRiskRange:
    """A run of consecutive high-risk segments.

    ``start`` and ``end`` are coordinate indices: segment ``i`` spans
    coordinates ``i`` and ``i + 1``, so a run over segments ``i..j`` is
    ``HighRiskRange(i, j + 1)``.
    """

    start: int
    end: int

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end}


class Recommendation(str, Enum):
    """Label attached to a ranked route."""

    SAFEST = "safest"
    FASTEST = "fastest"
    BALANCED = "balanced"  # Reserved for an external advisory overlay
    NONE = "none"


@dataclass(frozen=True)
class ScoredRoute:
    """A candidate route with its risk assessment."""

    geometry: RouteGeometry
    danger_score: float
    safety_score: int
    danger_zones_count: int
    high_risk_segments: tuple[HighRiskRange, ...] = ()
    recommendation: Recommendation = Recommendation.NONE

    @property
    def distance_meters(self) -> float:
        return self.geometry.distance_meters

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses (camelCase)."""
        return {
            "geometry": self.geometry.to_dict(),
            "dangerScore": self.danger_score,
            "safetyScore": self.safety_score,
            "dangerZonesCount": self.danger_zones_count,
            "highRiskSegments": [r.to_dict() for r in self.high_risk_segments],
            "recommendation": (
                None if self.recommendation is Recommendation.NONE
                else self.recommendation.value
            ),
        }


@dataclass(frozen=True)
class RoutePlanResult:
    """Scored and ranked routes for one planning request."""

    start_point: LatLng
    end_point: LatLng
    routes: tuple[ScoredRoute, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "routes", tuple(self.routes))

    @property
    def safest(self) -> ScoredRoute | None:
        return next((r for r in self.routes if r.recommendation is Recommendation.SAFEST), None)

    @property
    def fastest(self) -> ScoredRoute | None:
        return next((r for r in self.routes if r.recommendation is Recommendation.FASTEST), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "routes": [r.to_dict() for r in self.routes],
            "startPoint": self.start_point.to_dict(),
            "endPoint": self.end_point.to_dict(),
        }
