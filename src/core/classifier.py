"""Quake classification - Pure functions.

This module labels every freshly scraped record as new, revised,
duplicate or insignificant, and computes the ledger snapshots to persist
at the end of the poll cycle. All functions are pure with no side effects.

Ledgers go in and snapshots come out; nothing is kept between calls.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from src.core.dedup import already_notified, bulletin_already_notified, quake_changed
from src.core.earthquake import QuakeRecord
from src.core.geo import ThresholdPolicy, is_significant
from src.core.identity import MatchMethod, MatchPolicy, resolve_identity
from src.core.ledger import (
    DEFAULT_RETENTION_MONTHS,
    RecordSet,
    fine_key,
    order_newest_first,
    prune_and_order,
)


logger = logging.getLogger(__name__)


class Classification(str, Enum):
    """What a scraped record means for this poll cycle."""
    NEW = "new"
    REVISED = "revised"
    DUPLICATE = "duplicate"
    INSIGNIFICANT = "insignificant"


@dataclass(frozen=True)
class ClassificationResult:
    """Classification of a single scraped record.

    Attributes:
        kind: The classification
        quake: The scraped record
        previous: Earlier snapshot for revisions (None otherwise)
        match_method: How the earlier snapshot was found, if at all
        reason: Short human-readable explanation, used in logs
    """
    kind: Classification
    quake: QuakeRecord
    previous: QuakeRecord | None = None
    match_method: MatchMethod | None = None
    reason: str = ""

    @property
    def should_notify(self) -> bool:
        """Returns True for new quakes and revisions."""
        return self.kind in (Classification.NEW, Classification.REVISED)

    @property
    def is_revision(self) -> bool:
        """Returns True if this is a revision of an earlier bulletin."""
        return self.kind == Classification.REVISED


@dataclass
class CycleOutcome:
    """Result of classifying a whole scraped batch.

    Attributes:
        results: One classification per scraped record, in batch order
        last_poll_snapshot: Records to persist as the last-poll ledger
        notified_snapshot: Records to persist as the notified ledger
    """
    results: list[ClassificationResult] = field(default_factory=list)
    last_poll_snapshot: list[QuakeRecord] = field(default_factory=list)
    notified_snapshot: list[QuakeRecord] = field(default_factory=list)

    def of_kind(self, kind: Classification) -> list[ClassificationResult]:
        """Get results with the given classification."""
        return [r for r in self.results if r.kind == kind]

    @property
    def to_notify(self) -> list[ClassificationResult]:
        """Results that should trigger a notification."""
        return [r for r in self.results if r.should_notify]

    @property
    def notified_changed(self) -> bool:
        """Returns True if the notified ledger gained entries."""
        return bool(self.to_notify)


def classify_quake(
    quake: QuakeRecord,
    last_poll: RecordSet,
    notified: RecordSet,
    threshold_policy: ThresholdPolicy,
    match_policy: MatchPolicy,
    ordered_candidates: list[QuakeRecord] | None = None,
) -> ClassificationResult:
    """Classify a single scraped record.

    Pure function.

    Args:
        quake: Freshly scraped record
        last_poll: Last-poll ledger (coarse key)
        notified: Notified ledger (fine key)
        threshold_policy: Magnitude threshold settings
        match_policy: Identity heuristic settings
        ordered_candidates: last_poll values newest first (optional)

    Returns:
        ClassificationResult for the record
    """
    resolution = resolve_identity(quake, last_poll, match_policy, ordered_candidates)

    if not resolution.found:
        if already_notified(quake, notified):
            return ClassificationResult(
                kind=Classification.DUPLICATE,
                quake=quake,
                reason="already notified",
            )

        if is_significant(quake, threshold_policy):
            return ClassificationResult(
                kind=Classification.NEW,
                quake=quake,
                reason="new quake above threshold",
            )

        return ClassificationResult(
            kind=Classification.INSIGNIFICANT,
            quake=quake,
            reason="below magnitude threshold",
        )

    previous = resolution.previous

    if not quake_changed(previous, quake):
        return ClassificationResult(
            kind=Classification.DUPLICATE,
            quake=quake,
            previous=previous,
            match_method=resolution.method,
            reason="unchanged since last poll",
        )

    if bulletin_already_notified(quake, notified):
        return ClassificationResult(
            kind=Classification.DUPLICATE,
            quake=quake,
            previous=previous,
            match_method=resolution.method,
            reason="bulletin already notified",
        )

    # A downgrade below threshold is still worth one correction
    if is_significant(quake, threshold_policy) or is_significant(previous, threshold_policy):
        return ClassificationResult(
            kind=Classification.REVISED,
            quake=quake,
            previous=previous,
            match_method=resolution.method,
            reason="bulletin revised",
        )

    return ClassificationResult(
        kind=Classification.INSIGNIFICANT,
        quake=quake,
        previous=previous,
        match_method=resolution.method,
        reason="revision below magnitude threshold",
    )


def merge_notified(
    newly_notified: list[QuakeRecord],
    notified: RecordSet,
    now: datetime,
    retention_months: int = DEFAULT_RETENTION_MONTHS,
) -> list[QuakeRecord]:
    """Build the notified ledger snapshot to persist.

    Pure function.

    New entries come first in batch order, followed by the surviving
    older entries newest first. Older entries sharing a fine key with a
    new entry are replaced by it.

    Args:
        newly_notified: Records notified in this cycle
        notified: Notified ledger loaded at the start of the cycle
        now: Current local time
        retention_months: Retention window for older entries

    Returns:
        Records to persist
    """
    new_keys = {fine_key(q) for q in newly_notified}
    carried = [q for q in notified.values() if fine_key(q) not in new_keys]
    return list(newly_notified) + prune_and_order(carried, now, retention_months)


def classify_batch(
    scraped: list[QuakeRecord],
    last_poll: RecordSet,
    notified: RecordSet,
    threshold_policy: ThresholdPolicy,
    match_policy: MatchPolicy,
    now: datetime,
    retention_months: int = DEFAULT_RETENTION_MONTHS,
) -> CycleOutcome:
    """Classify a scraped batch and compute the next ledger snapshots.

    Pure function (apart from logging).

    The raw batch always becomes the next last-poll ledger. New and
    revised records are added to the notified ledger.

    Args:
        scraped: Records from this poll, newest first
        last_poll: Last-poll ledger (coarse key)
        notified: Notified ledger (fine key)
        threshold_policy: Magnitude threshold settings
        match_policy: Identity heuristic settings
        now: Current local time, for retention
        retention_months: Retention window for the notified ledger

    Returns:
        CycleOutcome with per-record results and ledger snapshots
    """
    candidates = order_newest_first(last_poll.values())
    results = []

    for quake in scraped:
        result = classify_quake(
            quake,
            last_poll,
            notified,
            threshold_policy,
            match_policy,
            ordered_candidates=candidates,
        )
        results.append(result)

        if result.should_notify:
            logger.info(
                "Classified %s: %s | M%s | %s (%s)",
                result.kind.value,
                quake.timestamp,
                quake.magnitude,
                quake.location,
                result.reason,
            )
        else:
            logger.debug(
                "Classified %s: %s | M%s | %s (%s)",
                result.kind.value,
                quake.timestamp,
                quake.magnitude,
                quake.location,
                result.reason,
            )

    newly_notified = [r.quake for r in results if r.should_notify]

    return CycleOutcome(
        results=results,
        last_poll_snapshot=list(scraped),
        notified_snapshot=merge_notified(newly_notified, notified, now, retention_months),
    )
