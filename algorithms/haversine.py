"""
Haversine Algorithm - Calculate distance between two geographical points
Used to find donors nearest to a blood request and requests nearest to a donor
"""

import math
from collections import namedtuple

import numpy as np

EARTH_RADIUS_KM = 6371


class GeoPoint(namedtuple('GeoPoint', ['latitude', 'longitude'])):
    """A (latitude, longitude) pair; either part may be None when the location is unknown."""
    __slots__ = ()

    def __new__(cls, latitude=None, longitude=None):
        return super().__new__(cls, latitude, longitude)

    @property
    def is_known(self):
        return self.latitude is not None and self.longitude is not None


def haversine_distance(lat1, lon1, lat2, lon2):
    """
    Calculate straight-line distance between two points.
    Note: This is "as the crow flies" distance, not road distance.

    Args:
        lat1, lon1: Latitude and longitude of point 1
        lat2, lon2: Latitude and longitude of point 2

    Returns:
        Distance in kilometers (unrounded)
    """
    # Convert decimal degrees to radians
    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.asin(math.sqrt(min(1.0, a)))

    return c * EARTH_RADIUS_KM


def distance_km(p1: GeoPoint, p2: GeoPoint) -> float:
    """Great-circle distance between two known points"""
    return haversine_distance(p1.latitude, p1.longitude, p2.latitude, p2.longitude)


def distances_from(origin: GeoPoint, points):
    """
    Distance from one origin to many points in a single vectorised pass.

    Args:
        origin: known GeoPoint
        points: sequence of GeoPoints, any of which may be unknown

    Returns:
        numpy array of kilometers, NaN where the point is unknown
    """
    result = np.full(len(points), np.nan)
    known = [i for i, p in enumerate(points) if p.is_known]
    if not known:
        return result

    coords = np.radians(np.array([[points[i].latitude, points[i].longitude] for i in known], dtype=float))
    lat1, lon1 = math.radians(origin.latitude), math.radians(origin.longitude)
    lat2, lon2 = coords[:, 0], coords[:, 1]

    a = np.sin((lat2 - lat1) / 2) ** 2 + math.cos(lat1) * np.cos(lat2) * np.sin((lon2 - lon1) / 2) ** 2
    result[known] = 2 * np.arcsin(np.sqrt(np.minimum(1.0, a))) * EARTH_RADIUS_KM
    return result
