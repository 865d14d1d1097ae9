"""
SwachhSathi - Geospatial Utilities
Distance calculations between report and worker coordinates.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0


@dataclass
class Point:
    """Geographic point with latitude and longitude."""
    latitude: float
    longitude: float

    @classmethod
    def from_mapping(cls, data: Optional[Dict[str, Any]]) -> Optional["Point"]:
        """
        Build a point from a ``{latitude, longitude}`` mapping.

        Returns None when either coordinate is missing or not numeric.
        """
        if not data:
            return None
        lat = data.get("latitude")
        lon = data.get("longitude")
        if lat is None or lon is None:
            return None
        try:
            return cls(latitude=float(lat), longitude=float(lon))
        except (TypeError, ValueError):
            return None


def haversine_distance(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate the great-circle distance between two points on Earth.

    No input validation is performed.

    Args:
        lat1, lon1: First point coordinates in decimal degrees
        lat2, lon2: Second point coordinates in decimal degrees

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def distance_between(a: Point, b: Point) -> float:
    """Haversine distance in kilometers between two points."""
    return haversine_distance(a.latitude, a.longitude, b.latitude, b.longitude)
