"""Geographic filtering of search results.

Bounding boxes are tested with a ray-casting point-in-polygon check against
their four corners; circles with the haversine great-circle distance. A
document without a coordinate is never excluded by a geofence.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
import math
from typing import TypeVar

from emoji_search.domain.model import Document, Geolocation
from emoji_search.domain.search import BoundingBoxFence, CircleFence, GeoFence


EARTH_RADIUS_METERS = 6_378_137.0

T = TypeVar("T")


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in metres between two (lat, lon) points in degrees."""

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # rounding can push a marginally above 1 for antipodal points
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_METERS * math.asin(math.sqrt(a))


def is_point_inside(latitude: float, longitude: float, polygon: Sequence[tuple[float, float]]) -> bool:
    """Ray-casting point-in-polygon test on (latitude, longitude) vertices."""

    inside = False
    count = len(polygon)
    j = count - 1
    for i in range(count):
        lat_i, lon_i = polygon[i]
        lat_j, lon_j = polygon[j]
        crosses = (lon_i <= longitude < lon_j) or (lon_j <= longitude < lon_i)
        if crosses and latitude < (lat_j - lat_i) * (longitude - lon_i) / (lon_j - lon_i) + lat_i:
            inside = not inside
        j = i
    return inside


def is_within(point: Geolocation | None, geofence: GeoFence | None) -> bool:
    """Return True when ``point`` satisfies ``geofence``.

    Missing point or missing geofence both mean "no constraint applies".
    """

    if geofence is None or point is None:
        return True
    if isinstance(geofence, CircleFence):
        distance = haversine_distance(geofence.latitude, geofence.longitude, point.latitude, point.longitude)
        return distance <= geofence.radius
    if isinstance(geofence, BoundingBoxFence):
        return is_point_inside(point.latitude, point.longitude, geofence.corners())
    msg = f"Unsupported geofence type: {type(geofence).__name__}"
    raise TypeError(msg)


class GeoFilter:
    """Callable filter bound to one request's geofence."""

    def __init__(self, geofence: GeoFence | None) -> None:
        self.geofence = geofence

    @property
    def active(self) -> bool:
        return self.geofence is not None

    def accepts(self, document: Document) -> bool:
        return is_within(document.geolocation, self.geofence)

    def filter(self, items: Iterable[T], *, key: Callable[[T], Document]) -> Iterator[T]:
        for item in items:
            if self.accepts(key(item)):
                yield item
