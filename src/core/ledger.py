"""Ledger keys, retention and ordering - Pure functions.

A ledger is a snapshot of quake records keyed by a caller-chosen key
function. Two ledgers exist: the last-poll ledger (coarse key) and the
notified ledger (fine key). Their keys are never mixed.

Note: Reading and writing ledger files is handled by the imperative
shell (ledger store). This module only contains the pure logic.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from src.core.earthquake import QuakeRecord
from src.core.temporal import months_before, parse_timestamp


logger = logging.getLogger(__name__)


RecordSet = dict[str, QuakeRecord]
KeyFunction = Callable[[QuakeRecord], str]

# Notified entries older than this are dropped
DEFAULT_RETENTION_MONTHS = 2


def coarse_key(quake: QuakeRecord) -> str:
    """Key by timestamp and origin, used to follow a quake across polls."""
    return f"{quake.timestamp}|{quake.origin}"


def fine_key(quake: QuakeRecord) -> str:
    """Key by timestamp and full location, used for notification dedup."""
    return f"{quake.timestamp}|{quake.location}"


def index_records(
    records: Iterable[QuakeRecord],
    key_fn: KeyFunction,
) -> RecordSet:
    """Build a ledger from records.

    Pure function. Later records win when two share a key.

    Args:
        records: Records to index
        key_fn: Ledger key function

    Returns:
        RecordSet keyed by key_fn
    """
    return {key_fn(record): record for record in records}


def order_newest_first(records: Iterable[QuakeRecord]) -> list[QuakeRecord]:
    """Sort records by parsed timestamp, newest first.

    Pure function. The sort is stable, and records with unparsable
    timestamps go last in their original order.
    """
    records = list(records)
    dated = [(parse_timestamp(r.timestamp), r) for r in records]
    valid = [(t, r) for t, r in dated if t is not None]
    invalid = [r for t, r in dated if t is None]

    valid.sort(key=lambda item: item[0], reverse=True)
    return [r for _, r in valid] + invalid


def prune_expired(
    records: Iterable[QuakeRecord],
    now: datetime,
    retention_months: int = DEFAULT_RETENTION_MONTHS,
) -> list[QuakeRecord]:
    """Drop records older than the retention window.

    Pure function (apart from logging). Records whose timestamp cannot be
    parsed are dropped as well, since their age is unknown.

    Args:
        records: Records to filter
        now: Current local time
        retention_months: Window size in calendar months

    Returns:
        Records still inside the window, in input order
    """
    cutoff = months_before(now, retention_months)
    kept = []

    for record in records:
        moment = parse_timestamp(record.timestamp)
        if moment is None:
            logger.warning("Dropping ledger entry with bad timestamp %r", record.timestamp)
            continue
        if moment < cutoff:
            continue
        kept.append(record)

    return kept


def prune_and_order(
    records: Iterable[QuakeRecord],
    now: datetime,
    retention_months: int = DEFAULT_RETENTION_MONTHS,
) -> list[QuakeRecord]:
    """Apply retention and return the surviving records newest first."""
    return order_newest_first(prune_expired(records, now, retention_months))
