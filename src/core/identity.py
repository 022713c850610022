"""Identity resolution - Pure functions.

PHIVOLCS gives no stable event ID. A revised bulletin can shift the
timestamp by seconds or minutes and reword the location, so the coarse
ledger key alone misses some revisions. This module links a freshly
scraped record to its previous snapshot:

1. Exact coarse-key lookup in the last-poll ledger.
2. For later bulletins only (number > 1):
   a. same minute, same origin, lower bulletin number;
   b. within the time window, similar origin, lower bulletin number.

Heuristic scans walk the ledger newest first and take the first
acceptable candidate, not the best-scoring one.
"""

from dataclasses import dataclass
from enum import Enum

from src.core.earthquake import QuakeRecord
from src.core.ledger import RecordSet, coarse_key, order_newest_first
from src.core.similarity import address_similarity
from src.core.temporal import same_minute, within_minutes


DEFAULT_SIMILARITY_THRESHOLD = 60.0
DEFAULT_TIME_WINDOW_MINUTES = 3


@dataclass(frozen=True)
class MatchPolicy:
    """Tuning for the heuristic identity fallback.

    Attributes:
        similarity_threshold: Minimum origin similarity (0-100)
        time_window_minutes: Allowed timestamp drift between bulletins
    """
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    time_window_minutes: int = DEFAULT_TIME_WINDOW_MINUTES


class MatchMethod(str, Enum):
    """How a previous snapshot was found."""
    EXACT_KEY = "exact_key"
    REVISION = "revision"
    SIMILAR_ORIGIN = "similar_origin"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a scraped record against the last poll.

    Attributes:
        previous: Earlier snapshot of the same quake, None if unseen
        method: How the match was made, None if unseen
    """
    previous: QuakeRecord | None = None
    method: MatchMethod | None = None

    @property
    def found(self) -> bool:
        """Returns True if a previous snapshot was found."""
        return self.previous is not None


def is_revised_quake(current: QuakeRecord, past: QuakeRecord) -> bool:
    """Check if current is a later bulletin of past.

    Pure function.

    Requires the same minute, the same origin text and a strictly higher
    bulletin number. Records without bulletin numbers never qualify.
    """
    current_number = current.bulletin_number
    past_number = past.bulletin_number
    if current_number is None or past_number is None:
        return False

    return (
        same_minute(current.timestamp, past.timestamp)
        and current.origin == past.origin
        and current_number > past_number
    )


def is_similar_quake(
    current: QuakeRecord,
    past: QuakeRecord,
    policy: MatchPolicy,
) -> bool:
    """Check if past looks like an earlier bulletin of current.

    Pure function.

    Used when upstream has moved the timestamp itself between bulletins.

    Args:
        current: Freshly scraped record
        past: Candidate from the last poll
        policy: Similarity and time window settings

    Returns:
        True if past is within the window, its origin is similar enough
        and its bulletin number is lower (a candidate without a bulletin
        counts as number 0)
    """
    current_number = current.bulletin_number
    if current_number is None:
        return False
    past_number = past.bulletin_number or 0
    if past_number >= current_number:
        return False

    if not within_minutes(current.timestamp, past.timestamp, policy.time_window_minutes):
        return False

    return address_similarity(current.origin, past.origin) >= policy.similarity_threshold


def find_revision_of(
    current: QuakeRecord,
    candidates: list[QuakeRecord],
) -> QuakeRecord | None:
    """Return the first candidate current is a revision of."""
    for past in candidates:
        if is_revised_quake(current, past):
            return past
    return None


def find_similar_to(
    current: QuakeRecord,
    candidates: list[QuakeRecord],
    policy: MatchPolicy,
) -> QuakeRecord | None:
    """Return the first candidate that passes the similarity fallback."""
    for past in candidates:
        if is_similar_quake(current, past, policy):
            return past
    return None


def is_heuristic_eligible(quake: QuakeRecord) -> bool:
    """Only later bulletins (number above 1) can be matched by heuristics."""
    number = quake.bulletin_number
    return number is not None and number > 1


def resolve_identity(
    current: QuakeRecord,
    last_poll: RecordSet,
    policy: MatchPolicy | None = None,
    ordered_candidates: list[QuakeRecord] | None = None,
) -> Resolution:
    """Find the previous snapshot of a scraped record, if any.

    Pure function.

    Args:
        current: Freshly scraped record
        last_poll: Last-poll ledger keyed by coarse key
        policy: Heuristic settings (defaults if None)
        ordered_candidates: last_poll values newest first; computed if
            None, callers resolving a whole batch pass it once

    Returns:
        Resolution with the previous snapshot and match method
    """
    policy = policy or MatchPolicy()

    previous = last_poll.get(coarse_key(current))
    if previous is not None:
        return Resolution(previous=previous, method=MatchMethod.EXACT_KEY)

    if not is_heuristic_eligible(current):
        return Resolution()

    if ordered_candidates is None:
        ordered_candidates = order_newest_first(last_poll.values())

    previous = find_revision_of(current, ordered_candidates)
    if previous is not None:
        return Resolution(previous=previous, method=MatchMethod.REVISION)

    previous = find_similar_to(current, ordered_candidates, policy)
    if previous is not None:
        return Resolution(previous=previous, method=MatchMethod.SIMILAR_ORIGIN)

    return Resolution()
