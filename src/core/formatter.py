"""Message formatting - Pure functions.

This module formats quake records into Matrix message payloads, with a
plain-text body and an HTML formatted body. All functions are pure with
no side effects.
"""

from typing import Any

from src.core.earthquake import QuakeRecord


# Google Maps link for coordinates
MAPS_BASE_URL = "https://www.google.com/maps?q="

TEST_MARKER = "[TEST] "


def format_magnitude(magnitude: str) -> str:
    """Format magnitude text with one decimal, keeping unparsable text as is."""
    try:
        return f"{float(magnitude):.1f}"
    except ValueError:
        return magnitude


def format_coordinates(latitude: str, longitude: str) -> str:
    """Plain-text coordinates, e.g. "10.32°N, 123.90°E"."""
    return f"{latitude}°N, {longitude}°E"


def format_maps_link(latitude: str, longitude: str) -> str:
    """HTML link to the coordinates on Google Maps."""
    return (
        f'<a href="{MAPS_BASE_URL}{latitude},{longitude}">'
        f"{format_coordinates(latitude, longitude)}</a>"
    )


def format_quake_summary(quake: QuakeRecord) -> str:
    """Format a one-line summary of a quake.

    Pure function.

    Args:
        quake: Quake to summarize

    Returns:
        One-line summary string
    """
    return (
        f"M{format_magnitude(quake.magnitude)} - {quake.location} "
        f"at {quake.timestamp} (depth: {quake.depth}km)"
    )


def _payload(body: str, formatted_body: str) -> dict[str, Any]:
    return {
        "msgtype": "m.text",
        "body": body,
        "format": "org.matrix.custom.html",
        "formatted_body": formatted_body,
    }


def format_new_quake_message(quake: QuakeRecord, is_test: bool = False) -> dict[str, Any]:
    """Format a new-quake alert as a Matrix message payload.

    Pure function.

    Args:
        quake: Newly detected quake
        is_test: Prefix the message with a [TEST] marker

    Returns:
        Matrix m.room.message content dict
    """
    prefix = TEST_MARKER if is_test else ""
    magnitude = format_magnitude(quake.magnitude)

    body = "\n".join([
        f"{prefix}🚨 New Earthquake Alert!",
        f"Date & Time: {quake.timestamp}",
        f"Location: {quake.location}",
        f"Magnitude: {magnitude}",
        f"Depth: {quake.depth}km",
        f"Coordinates: {format_coordinates(quake.latitude, quake.longitude)}",
        f"Bulletin: {quake.bulletin}",
        "Stay safe! ⚠️",
    ])

    formatted = "<br>".join([
        f"{prefix}🚨 <b>New Earthquake Alert!</b><br>",
        f"📅 <b>Date & Time:</b> {quake.timestamp}",
        f"📍 <b>Location:</b> {quake.location}",
        f"📈 <b>Magnitude:</b> {magnitude}",
        f"📊 <b>Depth:</b> {quake.depth}km",
        f"🧭 <b>Coordinates:</b> {format_maps_link(quake.latitude, quake.longitude)}",
        f'📄 <b>Bulletin:</b> <a href="{quake.bulletin}">View PHIVOLCS report</a><br>',
        "Stay safe! ⚠️",
    ])

    return _payload(body, formatted)


def format_revision_message(
    quake: QuakeRecord,
    previous: QuakeRecord,
    is_test: bool = False,
) -> dict[str, Any]:
    """Format a bulletin revision as a Matrix message payload.

    Pure function.

    Each changed field is shown as "old → new"; unchanged fields show the
    previous value.

    Args:
        quake: Revised snapshot
        previous: Earlier snapshot
        is_test: Prefix the message with a [TEST] marker

    Returns:
        Matrix m.room.message content dict
    """
    prefix = TEST_MARKER if is_test else ""

    location_plain = f"Location: {previous.location}"
    location_html = f"📍 <b>Location:</b> {previous.location}"
    if quake.location != previous.location:
        location_plain = f"New Location: {quake.location}\nPrevious: {previous.location}"
        location_html = (
            f"<b>📍 New Location: {quake.location}</b><br>Old: {previous.location}"
        )

    magnitude_plain = magnitude_html = format_magnitude(previous.magnitude)
    if quake.magnitude != previous.magnitude:
        old_mag = format_magnitude(previous.magnitude)
        new_mag = format_magnitude(quake.magnitude)
        magnitude_plain = f"{old_mag} → {new_mag}"
        magnitude_html = f"{old_mag} → <b>{new_mag}</b>"

    depth_plain = depth_html = previous.depth
    if quake.depth != previous.depth:
        depth_plain = f"{previous.depth} → {quake.depth}"
        depth_html = f"{previous.depth} → <b>{quake.depth}</b>"

    coords_plain = format_coordinates(previous.latitude, previous.longitude)
    coords_html = format_maps_link(previous.latitude, previous.longitude)
    if quake.latitude != previous.latitude or quake.longitude != previous.longitude:
        coords_plain = (
            f"{coords_plain} → {format_coordinates(quake.latitude, quake.longitude)}"
        )
        coords_html = (
            f"{coords_html} → <b>{format_maps_link(quake.latitude, quake.longitude)}</b>"
        )

    body = "\n".join([
        f"{prefix}💡 Earthquake Bulletin Update!",
        f"Date & Time: {quake.timestamp}",
        location_plain,
        f"Magnitude: {magnitude_plain}",
        f"Depth: {depth_plain}km",
        f"Coordinates: {coords_plain}",
        f"Bulletin: {quake.bulletin}",
        "Revised by PHIVOLCS 🔄",
    ])

    formatted = "<br>".join([
        f"{prefix}💡 <b>Earthquake Bulletin Update!</b><br>",
        f"📅 <b>Date & Time:</b> {quake.timestamp}",
        location_html,
        f"📈 <b>Magnitude:</b> {magnitude_html}",
        f"📊 <b>Depth:</b> {depth_html}km",
        f"🧭 <b>Coordinates:</b> {coords_html}",
        f'📄 <b>Bulletin:</b> <a href="{quake.bulletin}">View PHIVOLCS report</a><br>',
        "Revised by PHIVOLCS 🔄",
    ])

    return _payload(body, formatted)


def format_matrix_message(
    quake: QuakeRecord,
    is_revision: bool,
    previous: QuakeRecord | None = None,
    is_test: bool = False,
) -> dict[str, Any]:
    """Format a quake notification as a Matrix message payload.

    Pure function. Dispatches to the new-quake or revision layout; a
    revision without a previous snapshot is compared against itself.
    """
    if is_revision:
        return format_revision_message(quake, previous or quake, is_test=is_test)
    return format_new_quake_message(quake, is_test=is_test)
