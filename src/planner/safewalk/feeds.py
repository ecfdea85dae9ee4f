"""Adapters from raw hazard reports and corridor records to scoring inputs."""

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog

from safewalk.config import get_config
from safewalk.models import CorridorSegment, CorridorType, DangerZone, LatLng

logger = structlog.get_logger()


def signals_to_danger_zones(
    signals: Iterable[dict[str, Any]],
    categories: Iterable[str] | None = None,
    min_severity: int | None = None,
) -> list[DangerZone]:
    """Convert hazard reports into danger zones.

    Only reports in a safety-relevant category with at least ``min_severity``
    are kept. ``priorityScore`` falls back to severity times the configured
    priority multiplier when a report does not carry one.

    Args:
        signals: Hazard report dictionaries (``lat``, ``lng``, ``severity``,
            ``category`` and optionally ``priorityScore``).
        categories: Categories to keep. Defaults to the configured set.
        min_severity: Minimum severity to keep. Defaults to the configured value.

    Returns:
        List of DangerZone objects in input order.
    """
    config = get_config().feeds
    keep = set(categories) if categories is not None else set(config.safety_categories)
    threshold = min_severity if min_severity is not None else config.min_severity

    zones = []
    for signal in signals:
        if signal.get("category") not in keep:
            continue

        try:
            severity = int(signal["severity"])
        except (KeyError, TypeError, ValueError):
            logger.warning(
                "Skipping signal with invalid severity",
                signal_id=signal.get("id"),
                severity=signal.get("severity"),
            )
            continue
        if severity < threshold:
            continue

        try:
            location = LatLng(lat=float(signal["lat"]), lng=float(signal["lng"]))
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping signal without valid coordinates", signal_id=signal.get("id"))
            continue

        priority = signal.get("priorityScore")
        if priority is None:
            priority = severity * config.priority_multiplier

        zones.append(DangerZone(
            lat=location.lat,
            lng=location.lng,
            severity=severity,
            priority_score=float(priority),
            category=signal["category"],
        ))

    return zones


def corridors_from_records(records: Iterable[dict[str, Any]]) -> list[CorridorSegment]:
    """Convert administrator corridor records into corridor segments.

    Args:
        records: Dictionaries with ``type`` ("safe"/"unsafe"), ``points``
            (list of ``{lat, lng}``) and optionally ``id`` and ``name``.

    Returns:
        List of CorridorSegment objects. Records with an unknown type or
        invalid points are skipped.
    """
    corridors = []
    for record in records:
        try:
            corridor_type = CorridorType(record.get("type"))
        except ValueError:
            logger.warning(
                "Skipping corridor with unknown type",
                corridor_id=record.get("id"),
                type=record.get("type"),
            )
            continue

        try:
            polyline = tuple(
                LatLng(lat=float(p["lat"]), lng=float(p["lng"]))
                for p in record.get("points") or []
            )
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping corridor with invalid points", corridor_id=record.get("id"))
            continue

        corridors.append(CorridorSegment(
            type=corridor_type,
            polyline=polyline,
            corridor_id=record.get("id"),
            name=record.get("name"),
        ))

    return corridors


def load_json_records(path: Path) -> list[dict[str, Any]]:
    """Load a list of records from a JSON file.

    Accepts either a top-level list or an object with an ``items`` list.
    """
    with open(path) as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("items", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON list of records in {path}")
    return data
