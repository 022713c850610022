"""Earthquake record model and parsing - Pure functions.

This module turns the PHIVOLCS latest-earthquake HTML table into typed
QuakeRecord objects. All functions are pure with no side effects.

PHIVOLCS offers no stable event ID, so every field is kept exactly as the
source formats it; identity is resolved later from these text values.
"""

import re
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Any

from bs4 import BeautifulSoup

from src.core.temporal import format_timestamp


# Bulletin file names embed the UTC origin time: 2025_0930_164854_B1.html
BULLETIN_TIME_PATTERN = re.compile(r"(\d{4})_(\d{2})(\d{2})_(\d{6})")

# Revision counter after "_B", optionally followed by F (final bulletin)
BULLETIN_NUMBER_PATTERN = re.compile(r"_B(\d+)F?\.html$")

# Table times only carry minutes: "30 September 2025 - 04:48 PM"
TABLE_TIME_PATTERN = re.compile(r" - \d{1,2}:\d{2} [AP]M$")

# Bulletin times are UTC; records use Philippine time
BULLETIN_UTC_OFFSET = timedelta(hours=8)

# Minimum number of cells in a quake table row
MIN_ROW_CELLS = 6


class QuakeTableError(ValueError):
    """Raised when a page does not contain a parsable quake table."""


@dataclass(frozen=True)
class QuakeRecord:
    """Immutable snapshot of one seismic event as listed by PHIVOLCS.

    Attributes:
        timestamp: Local event time, "30 September 2025 - 04:48:54 PM"
        latitude: Latitude in decimal degrees (source text)
        longitude: Longitude in decimal degrees (source text)
        depth: Depth in kilometers (source text)
        magnitude: Magnitude (source text, e.g. "5.2")
        location: Location description with relative position
        origin: Location without the relative position
        bulletin: Bulletin URL (empty when the row has no link)
    """
    timestamp: str
    latitude: str
    longitude: str
    depth: str
    magnitude: str
    location: str
    origin: str
    bulletin: str = ""

    @property
    def magnitude_value(self) -> float | None:
        """Magnitude as a float, or None if unparsable."""
        return parse_float(self.magnitude)

    @property
    def bulletin_number(self) -> int | None:
        """Bulletin revision number, or None if unknown."""
        return get_bulletin_number(self.bulletin)

    def to_dict(self) -> dict[str, str]:
        """Serialize using the ledger file field names."""
        data = asdict(self)
        data["datetime"] = data.pop("timestamp")
        return data


def parse_float(value: str) -> float | None:
    """Parse source-formatted decimal text, returning None on failure."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def extract_origin(location: str) -> str:
    """Strip the relative-direction qualifier from a location.

    Pure function.

    "015 km N 45° W of Tabuelan (Cebu)" becomes "Tabuelan (Cebu)".
    Locations without an "of " marker are returned unchanged.
    """
    start = location.find("of ")
    if start == -1:
        return location
    return location[start + 3:].strip()


def get_bulletin_number(bulletin: str) -> int | None:
    """Extract the bulletin revision number from a bulletin URL.

    Pure function.

    Args:
        bulletin: Bulletin URL, e.g. ".../2025_0930_164854_B2F.html"

    Returns:
        Revision number, or None if the URL carries none
    """
    if not bulletin:
        return None

    match = BULLETIN_NUMBER_PATTERN.search(bulletin)
    if match is None:
        return None
    return int(match.group(1))


def timestamp_from_bulletin(bulletin: str) -> str | None:
    """Derive a second-precision local timestamp from a bulletin URL.

    Pure function.

    The bulletin file name encodes the origin time in UTC; it is shifted
    to Philippine time before formatting.

    Args:
        bulletin: Bulletin URL

    Returns:
        Timestamp text, or None if the URL holds no valid time
    """
    match = BULLETIN_TIME_PATTERN.search(bulletin)
    if match is None:
        return None

    year, month, day, clock = match.groups()
    try:
        utc_time = datetime(
            int(year), int(month), int(day),
            int(clock[0:2]), int(clock[2:4]), int(clock[4:6]),
        )
    except ValueError:
        return None

    return format_timestamp(utc_time + BULLETIN_UTC_OFFSET)


def normalize_table_datetime(text: str) -> str:
    """Give minute-precision table times an explicit ":00" seconds part.

    Pure function.
    """
    text = text.strip()
    if TABLE_TIME_PATTERN.search(text):
        text = text.replace(" AM", ":00 AM", 1).replace(" PM", ":00 PM", 1)
    return text


def build_bulletin_url(href: str, base_url: str) -> str:
    """Turn a table href (with Windows separators) into an absolute URL."""
    if not href:
        return ""
    path = href.replace("\\", "/").lstrip("/")
    return f"{base_url.rstrip('/')}/{path}"


def make_record(
    date_text: str,
    latitude: str,
    longitude: str,
    depth: str,
    magnitude: str,
    location: str,
    bulletin: str = "",
) -> QuakeRecord:
    """Build a QuakeRecord from raw cell text.

    Pure function.

    The bulletin URL time is preferred because it has second precision;
    the table text is the fallback.
    """
    location = " ".join(location.split())
    timestamp = normalize_table_datetime(date_text)
    if bulletin:
        timestamp = timestamp_from_bulletin(bulletin) or timestamp

    return QuakeRecord(
        timestamp=timestamp,
        latitude=latitude.strip(),
        longitude=longitude.strip(),
        depth=depth.strip(),
        magnitude=magnitude.strip(),
        location=location,
        origin=extract_origin(location),
        bulletin=bulletin,
    )


def record_from_dict(data: dict[str, Any]) -> QuakeRecord | None:
    """Rebuild a QuakeRecord from a ledger file entry.

    Pure function. Missing fields become empty strings and the origin is
    re-derived when absent.

    Returns:
        QuakeRecord, or None if the entry is not a mapping
    """
    if not isinstance(data, dict):
        return None

    def text(key: str) -> str:
        value = data.get(key)
        return "" if value is None else str(value)

    location = text("location")
    return QuakeRecord(
        timestamp=text("datetime"),
        latitude=text("latitude"),
        longitude=text("longitude"),
        depth=text("depth"),
        magnitude=text("magnitude"),
        location=location,
        origin=text("origin") or extract_origin(location),
        bulletin=text("bulletin"),
    )


def _cell_text(cell: Any) -> str:
    return " ".join(cell.get_text(" ").split())


def parse_quake_table(html: str, base_url: str, limit: int) -> list[QuakeRecord]:
    """Parse the PHIVOLCS latest-earthquake page into records.

    Pure function.

    Rows with fewer than six cells (headers, layout rows) are skipped.

    Args:
        html: Raw page HTML
        base_url: Site root used to absolutize bulletin links
        limit: Maximum number of records to return

    Returns:
        Records in page order (newest first)

    Raises:
        QuakeTableError: If the page contains no quake rows at all
    """
    soup = BeautifulSoup(html, "html.parser")
    records: list[QuakeRecord] = []
    found_rows = False

    for row in soup.find_all("tr"):
        cells = row.find_all("td", recursive=False)
        if len(cells) < MIN_ROW_CELLS:
            continue

        found_rows = True
        if len(records) >= limit:
            break

        link = cells[0].find("a")
        href = link.get("href", "") if link is not None else ""

        records.append(make_record(
            date_text=_cell_text(cells[0]),
            latitude=_cell_text(cells[1]),
            longitude=_cell_text(cells[2]),
            depth=_cell_text(cells[3]),
            magnitude=_cell_text(cells[4]),
            location=_cell_text(cells[5]),
            bulletin=build_bulletin_url(href, base_url),
        ))

    if not found_rows:
        raise QuakeTableError("No earthquake rows found in page")

    return records
