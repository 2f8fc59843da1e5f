"""
Distance and duration estimation using the Haversine formula.

Assumption
----------
We use great-circle (Haversine) distance scaled by a fixed road factor
instead of a real routing engine (OSRM / Google Maps) to keep the service
self-contained and runnable without external API keys.  Both results are
rounded *up*, so the estimate only ever overestimates.

Complexity: O(1) per call.
"""

import math

from .entities import GeoPoint, RouteEstimate

EARTH_RADIUS_M = 6_371_000.0
ROAD_FACTOR = 1.4  # urban roads are rarely straight
AVG_SPEED_MPS = 8.33  # ~30 km/h urban average


def haversine_m(
    lat1: float, lng1: float, lat2: float, lng2: float
) -> float:
    """Return the great-circle distance in **meters** between two points."""
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    a = min(a, 1.0)  # float drift near antipodes
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def road_distance_m(straight_line_m: float) -> int:
    """Scale a straight-line distance to an approximate road distance."""
    return math.ceil(straight_line_m * ROAD_FACTOR)


def travel_seconds(distance_m: int) -> int:
    return math.ceil(distance_m / AVG_SPEED_MPS)


def estimate_route(origin: GeoPoint, destination: GeoPoint) -> RouteEstimate:
    """Approximate road distance and driving time between two points."""
    straight = haversine_m(
        origin.latitude, origin.longitude,
        destination.latitude, destination.longitude,
    )
    distance = road_distance_m(straight)
    return RouteEstimate(
        distance_meters=distance,
        duration_seconds=travel_seconds(distance),
    )
