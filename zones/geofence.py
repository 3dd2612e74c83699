#Purpose: Straight-line geofencing math.
#Used by:
#the courier locator (radius search, nearest-first ordering)
#the zone registry (is a delivery point inside a served zone?)
#Typical responsibilities:
#great-circle distance in meters between two (lat, lon) points
#cheap bounding box for a radius, so stores can prefilter before exact distance
#ray-casting point-in-polygon for zone boundaries
#No road network here: straight-line distance only.

import math
from typing import Sequence, Tuple

#internal coordinate type :(lat,lon)
LatLon = Tuple[float, float]

EARTH_RADIUS_M = 6_371_000.0


def haversine_meters(a: LatLon, b: LatLon) -> float:
    """Great-circle distance between two (lat, lon) points, in meters."""
    lat1, lon1 = a
    lat2, lon2 = b

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def bounding_box(center: LatLon, radius_m: float) -> Tuple[float, float, float, float]:
    """
    (min_lat, max_lat, min_lon, max_lon) enclosing a circle of radius_m.
    Always a superset of the circle, so an exact haversine check must follow.
    """
    lat, lon = center
    d_lat = math.degrees(radius_m / EARTH_RADIUS_M)

    # longitude degrees shrink towards the poles
    cos_lat = math.cos(math.radians(lat))
    if cos_lat < 1e-9:
        d_lon = 180.0
    else:
        d_lon = min(180.0, math.degrees(radius_m / (EARTH_RADIUS_M * cos_lat)))

    return lat - d_lat, lat + d_lat, lon - d_lon, lon + d_lon


def point_in_polygon(point: LatLon, boundary: Sequence[LatLon]) -> bool:
    """
    Ray casting on the (lon, lat) plane. Points exactly on an edge may land on
    either side; zones are expected to overlap slightly rather than share edges.
    """
    if len(boundary) < 3:
        return False

    lat, lon = point
    inside = False
    j = len(boundary) - 1
    for i in range(len(boundary)):
        lat_i, lon_i = boundary[i]
        lat_j, lon_j = boundary[j]
        crosses = (lat_i > lat) != (lat_j > lat)
        if crosses:
            lon_at_lat = lon_i + (lat - lat_i) * (lon_j - lon_i) / (lat_j - lat_i)
            if lon < lon_at_lat:
                inside = not inside
        j = i
    return inside
