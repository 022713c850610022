"""Shared pytest fixtures."""

from datetime import datetime

import pytest

from src.core.earthquake import QuakeRecord, extract_origin


BULLETIN_DIR = (
    "https://earthquake.phivolcs.dost.gov.ph/2025_Earthquake_Information/October"
)


def build_quake(
    timestamp: str = "01 October 2025 - 12:48:54 AM",
    magnitude: str = "4.6",
    location: str = "015 km N 45° W of Tabuelan (Cebu)",
    latitude: str = "10.92",
    longitude: str = "123.79",
    depth: str = "010",
    bulletin: str | None = None,
    bulletin_number: int | None = 1,
) -> QuakeRecord:
    """Build a quake record with sensible defaults."""
    if bulletin is None:
        bulletin = (
            f"{BULLETIN_DIR}/2025_0930_164854_B{bulletin_number}.html"
            if bulletin_number is not None
            else ""
        )
    return QuakeRecord(
        timestamp=timestamp,
        latitude=latitude,
        longitude=longitude,
        depth=depth,
        magnitude=magnitude,
        location=location,
        origin=extract_origin(location),
        bulletin=bulletin,
    )


@pytest.fixture
def make_quake():
    """Factory fixture for quake records."""
    return build_quake


@pytest.fixture
def now():
    """Fixed local time used for retention checks."""
    return datetime(2025, 10, 18, 12, 0, 0)
