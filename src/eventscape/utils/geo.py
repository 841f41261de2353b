"""Geolocation utilities for distance calculations and coordinate checks."""

import math

# Approximate bounding box of Singapore
SINGAPORE_MIN_LAT = 1.1
SINGAPORE_MAX_LAT = 1.5
SINGAPORE_MIN_LNG = 103.6
SINGAPORE_MAX_LNG = 104.0


def is_within_singapore(latitude: float, longitude: float) -> bool:
    """Check that a coordinate falls inside Singapore's bounding box."""
    return (
        SINGAPORE_MIN_LAT <= latitude <= SINGAPORE_MAX_LAT
        and SINGAPORE_MIN_LNG <= longitude <= SINGAPORE_MAX_LNG
    )


def calculate_haversine_distance(
    lat1: float, lon1: float, lat2: float, lon2: float
) -> float:
    """
    Calculate straight-line distance between two points using Haversine formula.

    Args:
        lat1: Latitude of first point in decimal degrees
        lon1: Longitude of first point in decimal degrees
        lat2: Latitude of second point in decimal degrees
        lon2: Longitude of second point in decimal degrees

    Returns:
        Distance in kilometers (float)

    Example:
        >>> # Marina Bay Sands to ION Orchard (~4km)
        >>> distance = calculate_haversine_distance(1.2834, 103.8607, 1.3040, 103.8318)
        >>> 3.5 < distance < 4.5
        True
    """
    # Earth's radius in kilometers
    R = 6371.0

    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = lat2_rad - lat1_rad
    dlon = math.radians(lon2 - lon1)

    # d = 2r × arcsin(√(sin²(Δφ/2) + cos(φ1)×cos(φ2)×sin²(Δλ/2)))
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    )
    return 2 * R * math.asin(math.sqrt(a))
