"""Geographic calculations - Pure functions.

This module provides distance calculations and the distance-aware
magnitude threshold used to decide whether a quake is significant.
All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass

from src.core.earthquake import QuakeRecord, parse_float


# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0

# Defaults centered on Metro Cebu
DEFAULT_REF_LATITUDE = 10.32
DEFAULT_REF_LONGITUDE = 123.90
DEFAULT_REF_RADIUS_KM = 110.0
DEFAULT_LOCAL_THRESHOLD = 4.0
DEFAULT_GLOBAL_THRESHOLD = 4.5


@dataclass(frozen=True)
class ThresholdPolicy:
    """Magnitude thresholds relative to a reference area.

    Quakes within radius_km of the reference point only need to reach
    local_threshold; everything else must reach global_threshold.

    Attributes:
        reference_latitude: Reference point latitude
        reference_longitude: Reference point longitude
        radius_km: Radius of the reference area in kilometers
        local_threshold: Minimum magnitude inside the reference area
        global_threshold: Minimum magnitude elsewhere
    """
    reference_latitude: float = DEFAULT_REF_LATITUDE
    reference_longitude: float = DEFAULT_REF_LONGITUDE
    radius_km: float = DEFAULT_REF_RADIUS_KM
    local_threshold: float = DEFAULT_LOCAL_THRESHOLD
    global_threshold: float = DEFAULT_GLOBAL_THRESHOLD


def calculate_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate distance between two points using Haversine formula.

    Pure function.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in kilometers
    """
    # Convert to radians
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    # Haversine formula
    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def magnitude_threshold_for(
    latitude: str,
    longitude: str,
    policy: ThresholdPolicy,
) -> float:
    """Determine the minimum significant magnitude for a location.

    Pure function.

    Coordinates that fail to parse fall back to the global threshold, so
    a record is never dropped just because of bad coordinates.

    Args:
        latitude: Latitude text
        longitude: Longitude text
        policy: Threshold policy

    Returns:
        Magnitude threshold
    """
    lat = parse_float(latitude)
    lon = parse_float(longitude)
    if lat is None or lon is None or math.isnan(lat) or math.isnan(lon):
        return policy.global_threshold

    distance = calculate_distance(
        lat,
        lon,
        policy.reference_latitude,
        policy.reference_longitude,
    )
    if distance <= policy.radius_km:
        return policy.local_threshold
    return policy.global_threshold


def is_significant(quake: QuakeRecord, policy: ThresholdPolicy) -> bool:
    """Check if a quake's magnitude reaches its location's threshold.

    Pure function. An unparsable magnitude is never significant.
    """
    magnitude = quake.magnitude_value
    if magnitude is None:
        return False
    return magnitude >= magnitude_threshold_for(quake.latitude, quake.longitude, policy)
