"""Command-line interface for the SafeWalk route planner."""

import json
import logging
import sys
from pathlib import Path

import click
import structlog

from safewalk.config import get_config, reload_config
from safewalk.feeds import corridors_from_records, load_json_records, signals_to_danger_zones
from safewalk.models import CorridorSegment, DangerZone, LatLng, RouteGeometry, RoutePlanResult
from safewalk.planner import RoutePlanner
from safewalk.risk.ranking import rank_routes
from safewalk.risk.scoring import RouteRiskScorer
from safewalk.routing.client import OsrmClient

# Configure structlog for CLI output
logging.basicConfig(format="%(message)s", level=logging.INFO)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger()


def _parse_latlng(ctx: click.Context, param: click.Parameter, value: str | None) -> LatLng | None:
    """Parse a "LAT,LNG" option value."""
    if value is None:
        return None
    try:
        lat, lng = (float(part) for part in value.split(","))
        return LatLng(lat=lat, lng=lng)
    except ValueError:
        raise click.BadParameter("expected LAT,LNG (e.g. 45.7601,21.2301)")


def _load_inputs(
    signals: Path | None,
    corridors: Path | None,
) -> tuple[list[DangerZone], list[CorridorSegment]]:
    zones = signals_to_danger_zones(load_json_records(signals)) if signals else []
    corridor_set = corridors_from_records(load_json_records(corridors)) if corridors else []
    return zones, corridor_set


def _echo_result(result: RoutePlanResult, as_json: bool, output: Path | None) -> None:
    data = result.to_dict()

    if output:
        with open(output, "w") as f:
            json.dump(data, f, indent=2)

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    if not result.routes:
        click.echo("No route found")
        return

    click.echo(f"Found {len(result.routes)} routes:")
    for idx, route in enumerate(result.routes, start=1):
        label = route.to_dict()["recommendation"] or "-"
        click.echo(
            f"  {idx}. {label:<8} | safety {route.safety_score:>6} | "
            f"danger {route.danger_score:>6.1f} | hits {route.danger_zones_count:>3} | "
            f"{route.distance_meters:,.0f} m | "
            f"{len(route.high_risk_segments)} high-risk runs"
        )

    if output:
        click.echo(f"\nResults saved to: {output}")


@click.group()
@click.option("--config-dir", type=click.Path(exists=True, path_type=Path), help="Configuration directory")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, config_dir: Path | None, verbose: bool) -> None:
    """SafeWalk safe route planner."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    if config_dir:
        reload_config(config_dir)

    if verbose:
        click.echo("Configuration loaded", err=True)


@cli.command()
@click.option("--start", required=True, callback=_parse_latlng, help="Start point as LAT,LNG")
@click.option("--end", required=True, callback=_parse_latlng, help="End point as LAT,LNG")
@click.option("--signals", type=click.Path(exists=True, path_type=Path), help="Hazard reports JSON file")
@click.option("--corridors", type=click.Path(exists=True, path_type=Path), help="Safe/unsafe corridors JSON file")
@click.option("--alternatives", type=int, help="Number of route alternatives to request")
@click.option("--json", "as_json", is_flag=True, help="Print the plan as JSON")
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Output JSON file")
def plan(
    start: LatLng,
    end: LatLng,
    signals: Path | None,
    corridors: Path | None,
    alternatives: int | None,
    as_json: bool,
    output: Path | None,
) -> None:
    """Plan and rank walking routes between two points."""
    try:
        zones, corridor_set = _load_inputs(signals, corridors)

        with OsrmClient() as client:
            planner = RoutePlanner(routing_client=client)
            result = planner.plan(start, end, zones, corridor_set, alternatives)

        _echo_result(result, as_json, output)

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option("--routes", "routes_file", required=True, type=click.Path(exists=True, path_type=Path),
              help="JSON file of route geometries ({coordinates: [[lng, lat], ...], distance, duration})")
@click.option("--signals", type=click.Path(exists=True, path_type=Path), help="Hazard reports JSON file")
@click.option("--corridors", type=click.Path(exists=True, path_type=Path), help="Safe/unsafe corridors JSON file")
@click.option("--start", callback=_parse_latlng, help="Start point as LAT,LNG (default: first route's first point)")
@click.option("--end", callback=_parse_latlng, help="End point as LAT,LNG (default: first route's last point)")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Output JSON file")
def score(
    routes_file: Path,
    signals: Path | None,
    corridors: Path | None,
    start: LatLng | None,
    end: LatLng | None,
    as_json: bool,
    output: Path | None,
) -> None:
    """Score and rank pre-fetched route geometries (no network access)."""
    try:
        zones, corridor_set = _load_inputs(signals, corridors)

        geometries = [
            RouteGeometry(
                coordinates=tuple(LatLng.from_lnglat(pair) for pair in record["coordinates"]),
                distance_meters=float(record["distance"]),
                duration_seconds=float(record.get("duration", 0.0)),
            )
            for record in load_json_records(routes_file)
        ]

        scorer = RouteRiskScorer()
        ranked = rank_routes([scorer.score_route(g, zones, corridor_set) for g in geometries])

        if start is None or end is None:
            if not geometries:
                click.echo("No route found")
                return
            first = next((g.coordinates for g in geometries if g.coordinates), None)
            if first is None:
                raise click.UsageError("routes have no coordinates; pass --start and --end")
            start = start or first[0]
            end = end or first[-1]

        result = RoutePlanResult(start_point=start, end_point=end, routes=tuple(ranked))
        _echo_result(result, as_json, output)

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
def check() -> None:
    """Check that the routing source is reachable."""
    config = get_config()
    with OsrmClient() as client:
        ok = client.health_check()

    if not ok:
        click.echo(f"Routing source: unreachable ({config.routing.base_url})", err=True)
        sys.exit(1)
    click.echo(f"Routing source: ok ({config.routing.base_url}, profile={config.routing.profile})")


if __name__ == "__main__":
    cli()
