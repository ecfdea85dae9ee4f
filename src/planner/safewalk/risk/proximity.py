"""Point-to-segment and point-to-polyline distances for route risk analysis.

Distances use a local equirectangular projection centred on the query point:
longitude deltas are scaled by ``cos(latitude)`` and the point is projected
onto each segment with the projection parameter clamped to ``[0, 1]``. The
approximation is accurate at the sub-kilometre scales of walking routes.
"""

from collections.abc import Sequence

import numpy as np

from safewalk.models import LatLng

EARTH_RADIUS_M = 6_371_000.0


def as_latlng_array(points: Sequence[LatLng]) -> np.ndarray:
    """Convert coordinates to an ``(n, 2)`` float array of ``[lat, lng]`` degrees."""
    if not points:
        return np.empty((0, 2), dtype=np.float64)
    return np.array([(p.lat, p.lng) for p in points], dtype=np.float64)


def _canonical_order(starts: np.ndarray, ends: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Order each segment's endpoints lexicographically by (lat, lng).

    Projecting from a fixed endpoint makes the distance bit-identical when a
    segment is given in either direction.
    """
    swap = (starts[:, 0] > ends[:, 0]) | (
        (starts[:, 0] == ends[:, 0]) & (starts[:, 1] > ends[:, 1])
    )
    swap = swap[:, np.newaxis]
    return np.where(swap, ends, starts), np.where(swap, starts, ends)


def _distance_matrix(points: np.ndarray, starts: np.ndarray, ends: np.ndarray) -> np.ndarray:
    """Distances in meters from every point to every segment.

    Args:
        points: ``(m, 2)`` array of ``[lat, lng]`` degrees.
        starts: ``(n, 2)`` array of segment start coordinates.
        ends: ``(n, 2)`` array of segment end coordinates.

    Returns:
        ``(m, n)`` array of distances.
    """
    starts, ends = _canonical_order(starts, ends)

    p_lat = points[:, 0:1]
    p_lng = points[:, 1:2]
    cos_lat = np.cos(np.radians(p_lat))

    # Segment endpoints in a local plane (radians) with the point at the origin
    ax = np.radians(starts[np.newaxis, :, 1] - p_lng) * cos_lat
    ay = np.radians(starts[np.newaxis, :, 0] - p_lat)
    bx = np.radians(ends[np.newaxis, :, 1] - p_lng) * cos_lat
    by = np.radians(ends[np.newaxis, :, 0] - p_lat)

    dx = bx - ax
    dy = by - ay
    length_sq = dx * dx + dy * dy

    # Degenerate segments (length 0) keep t = 0, i.e. point-to-point distance
    t = np.divide(
        -(ax * dx + ay * dy),
        length_sq,
        out=np.zeros_like(length_sq),
        where=length_sq > 0,
    )
    t = np.clip(t, 0.0, 1.0)

    closest_x = ax + t * dx
    closest_y = ay + t * dy
    return EARTH_RADIUS_M * np.hypot(closest_x, closest_y)


def segment_distances(point: LatLng, starts: np.ndarray, ends: np.ndarray) -> np.ndarray:
    """Distances from one point to many segments.

    Args:
        point: Query point.
        starts: ``(n, 2)`` array of segment start ``[lat, lng]`` degrees.
        ends: ``(n, 2)`` array of segment end ``[lat, lng]`` degrees.

    Returns:
        ``(n,)`` array of distances in meters.
    """
    if len(starts) == 0:
        return np.empty(0, dtype=np.float64)
    origin = np.array([[point.lat, point.lng]], dtype=np.float64)
    return _distance_matrix(origin, starts, ends)[0]


def points_to_polyline_distances(points: np.ndarray, polyline: np.ndarray) -> np.ndarray:
    """Distances from many points to one polyline.

    Args:
        points: ``(m, 2)`` array of ``[lat, lng]`` degrees.
        polyline: ``(k, 2)`` array of polyline vertices, ``k >= 2``.

    Returns:
        ``(m,)`` array with each point's minimum distance to any polyline segment.

    Raises:
        ValueError: If the polyline has fewer than 2 vertices.
    """
    if len(polyline) < 2:
        raise ValueError(f"Polyline needs at least 2 points, got {len(polyline)}")
    if len(points) == 0:
        return np.empty(0, dtype=np.float64)
    return _distance_matrix(points, polyline[:-1], polyline[1:]).min(axis=1)


def point_to_segment_distance(point: LatLng, seg_start: LatLng, seg_end: LatLng) -> float:
    """Distance in meters from a point to the segment ``seg_start``-``seg_end``.

    A degenerate segment (both endpoints equal) yields the point-to-point
    distance. The result does not depend on endpoint order.
    """
    starts = np.array([[seg_start.lat, seg_start.lng]], dtype=np.float64)
    ends = np.array([[seg_end.lat, seg_end.lng]], dtype=np.float64)
    return float(segment_distances(point, starts, ends)[0])


def point_to_polyline_distance(point: LatLng, polyline: Sequence[LatLng]) -> float:
    """Minimum distance in meters from a point to any segment of a polyline.

    Raises:
        ValueError: If the polyline has fewer than 2 points. Callers are
            expected to skip such polylines.
    """
    vertices = as_latlng_array(polyline)
    origin = np.array([[point.lat, point.lng]], dtype=np.float64)
    return float(points_to_polyline_distances(origin, vertices)[0])
