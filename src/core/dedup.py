"""Deduplication logic - Pure functions.

This module decides whether a quake snapshot differs from an earlier one
and whether it has already been announced. All functions are pure with
no side effects.

Note: The actual persistence of the notified ledger is handled by the
imperative shell (ledger store). This module only contains the pure logic.
"""

from src.core.earthquake import QuakeRecord
from src.core.ledger import RecordSet, fine_key
from src.core.temporal import same_minute


# Fields compared when deciding if a bulletin changed anything
TRACKED_FIELDS = (
    "magnitude",
    "depth",
    "location",
    "latitude",
    "longitude",
    "bulletin",
)


def quake_changed(old: QuakeRecord, new: QuakeRecord) -> bool:
    """Check if any tracked field differs between two snapshots.

    Pure function.

    Comparison is on source text, so formatting changes such as "5.0" vs
    "5" count as changes.

    Args:
        old: Earlier snapshot
        new: Later snapshot of the same quake

    Returns:
        True if anything tracked changed
    """
    return any(getattr(old, name) != getattr(new, name) for name in TRACKED_FIELDS)


def changed_fields(old: QuakeRecord, new: QuakeRecord) -> list[str]:
    """List the tracked fields that differ between two snapshots."""
    return [name for name in TRACKED_FIELDS if getattr(old, name) != getattr(new, name)]


def already_notified(quake: QuakeRecord, notified: RecordSet) -> bool:
    """Check if this exact quake (timestamp and location) was announced.

    Pure function.
    """
    return fine_key(quake) in notified


def bulletin_already_notified(quake: QuakeRecord, notified: RecordSet) -> bool:
    """Check if this exact bulletin was already announced.

    Pure function.

    Matches an entry with the same minute-precision timestamp and the
    same bulletin URL. Records without a bulletin URL never match.

    Args:
        quake: Revised snapshot
        notified: Notified ledger

    Returns:
        True if the bulletin has been announced before
    """
    if not quake.bulletin:
        return False

    return any(
        entry.bulletin == quake.bulletin and same_minute(quake.timestamp, entry.timestamp)
        for entry in notified.values()
    )
