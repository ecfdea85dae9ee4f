"""HTTP client for an OSRM routing service."""

from typing import Any

import httpx
import structlog

from safewalk.config import get_config
from safewalk.models import LatLng, RouteGeometry
from safewalk.routing.errors import RoutingSourceUnavailable

logger = structlog.get_logger()

# OSRM response codes meaning "no route between these points"
NO_ROUTE_CODES = {"NoRoute", "NoSegment"}


class OsrmClient:
    """Client for fetching walking route alternatives from OSRM."""

    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the routing client.

        Args:
            base_url: OSRM base URL.
            profile: Routing profile (e.g. "foot").
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        config = get_config()
        self.base_url = (base_url or config.routing.base_url).rstrip("/")
        self.profile = profile or config.routing.profile
        self.timeout = timeout or config.routing.timeout
        self._transport = transport

        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "OsrmClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def health_check(self) -> bool:
        """Check that the routing service answers a trivial request."""
        try:
            response = self.client.get(f"/route/v1/{self.profile}/0,0;0,0")
        except httpx.HTTPError as e:
            logger.warning("Routing source unreachable", url=self.base_url, error=str(e))
            return False
        return response.status_code < 500

    def fetch_routes(
        self,
        start: LatLng,
        end: LatLng,
        alternatives: int = 3,
    ) -> list[RouteGeometry]:
        """Fetch candidate route geometries between two points.

        Args:
            start: Route origin.
            end: Route destination.
            alternatives: Number of alternatives to request.

        Returns:
            Route geometries in the order returned by OSRM. Empty when OSRM
            reports that no route exists.

        Raises:
            RoutingSourceUnavailable: On transport failure, unexpected status
                or code, or a malformed response.
        """
        path = f"/route/v1/{self.profile}/{start.lng},{start.lat};{end.lng},{end.lat}"
        params = {
            "alternatives": alternatives,
            "geometries": "geojson",
            "overview": "full",
        }

        logger.info(
            "Requesting routes",
            profile=self.profile,
            start=(start.lat, start.lng),
            end=(end.lat, end.lng),
            alternatives=alternatives,
        )

        try:
            response = self.client.get(path, params=params)
        except httpx.HTTPError as e:
            raise RoutingSourceUnavailable(f"OSRM request failed: {e}") from e

        data = self._decode(response)
        code = data.get("code")

        if code in NO_ROUTE_CODES:
            logger.info("No route found", code=code)
            return []

        if not response.is_success:
            raise RoutingSourceUnavailable(f"OSRM API error: {response.status_code} ({code})")

        if code != "Ok":
            raise RoutingSourceUnavailable(f"OSRM error: {code or 'missing response code'}")

        routes = [self._parse_route(route) for route in data.get("routes") or []]
        logger.info("Routes received", num_routes=len(routes))
        return routes

    @staticmethod
    def _decode(response: httpx.Response) -> dict[str, Any]:
        """Decode a JSON object body, tolerating error bodies that aren't JSON."""
        try:
            data = response.json()
        except ValueError as e:
            if not response.is_success:
                raise RoutingSourceUnavailable(f"OSRM API error: {response.status_code}") from e
            raise RoutingSourceUnavailable("OSRM returned invalid JSON") from e

        if not isinstance(data, dict):
            raise RoutingSourceUnavailable("OSRM response is not a JSON object")
        return data

    @staticmethod
    def _parse_route(route: dict[str, Any]) -> RouteGeometry:
        """Convert an OSRM route object to a RouteGeometry."""
        try:
            coordinates = route["geometry"]["coordinates"]
            return RouteGeometry(
                coordinates=tuple(LatLng.from_lnglat(pair) for pair in coordinates),
                distance_meters=float(route["distance"]),
                duration_seconds=float(route["duration"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise RoutingSourceUnavailable(f"Malformed route in OSRM response: {e}") from e
