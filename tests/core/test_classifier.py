"""Unit tests for quake classification.

Pure function tests - ledgers go in, snapshots come out.
"""

import pytest

from src.core.classifier import (
    Classification,
    classify_batch,
    classify_quake,
    merge_notified,
)
from src.core.geo import ThresholdPolicy
from src.core.identity import MatchMethod, MatchPolicy
from src.core.ledger import coarse_key, fine_key, index_records


# Philippine Sea, outside the reference radius
FAR = {"latitude": "5.00", "longitude": "127.00"}


@pytest.fixture
def thresholds():
    return ThresholdPolicy()


@pytest.fixture
def matching():
    return MatchPolicy()


def run_cycle(scraped, outcome, thresholds, matching, now):
    """Run one cycle against the snapshots of a previous outcome."""
    last_poll = index_records(outcome.last_poll_snapshot, coarse_key) if outcome else {}
    notified = index_records(outcome.notified_snapshot, fine_key) if outcome else {}
    return classify_batch(scraped, last_poll, notified, thresholds, matching, now=now)


class TestClassificationCycles:
    """Classification across consecutive poll cycles."""

    def test_new_then_duplicate_then_revised(self, make_quake, thresholds, matching, now):
        """A quake is announced once, ignored while unchanged, then revised."""
        quake = make_quake(magnitude="4.6", bulletin_number=None, **FAR)

        first = run_cycle([quake], None, thresholds, matching, now)
        assert [r.kind for r in first.results] == [Classification.NEW]
        assert first.notified_snapshot == [quake]

        second = run_cycle([quake], first, thresholds, matching, now)
        assert [r.kind for r in second.results] == [Classification.DUPLICATE]
        assert second.notified_changed is False

        revised = make_quake(magnitude="5.1", bulletin_number=None, **FAR)
        third = run_cycle([revised], second, thresholds, matching, now)
        result = third.results[0]
        assert result.kind == Classification.REVISED
        assert result.previous == quake
        assert result.match_method == MatchMethod.EXACT_KEY

    def test_small_distant_quake_is_insignificant(self, make_quake, thresholds, matching, now):
        """M3.0 outside the reference radius is not announced."""
        quake = make_quake(magnitude="3.0", **FAR)

        outcome = run_cycle([quake], None, thresholds, matching, now)

        assert outcome.results[0].kind == Classification.INSIGNIFICANT
        assert outcome.to_notify == []
        assert outcome.notified_snapshot == []
        assert outcome.last_poll_snapshot == [quake]

    def test_revision_with_shifted_seconds(self, make_quake, thresholds, matching, now):
        """Bulletin 2 in the same minute revises bulletin 1 instead of being new."""
        original = make_quake(magnitude="4.6", bulletin_number=1, **FAR)
        first = run_cycle([original], None, thresholds, matching, now)

        update = make_quake(
            timestamp="01 October 2025 - 12:48:10 AM",
            magnitude="5.1",
            bulletin_number=2,
            **FAR,
        )
        second = run_cycle([update], first, thresholds, matching, now)

        result = second.results[0]
        assert result.kind == Classification.REVISED
        assert result.previous == original
        assert result.match_method == MatchMethod.REVISION
        assert second.notified_snapshot == [update, original]

    def test_revised_bulletin_announced_once(self, make_quake, thresholds, matching, now):
        """A revision already announced for its bulletin is not repeated."""
        original = make_quake(magnitude="4.6", bulletin_number=1, **FAR)
        update = make_quake(magnitude="5.1", bulletin_number=2, **FAR)
        moved = make_quake(magnitude="5.1", bulletin_number=2, depth="012", **FAR)

        first = run_cycle([original], None, thresholds, matching, now)
        second = run_cycle([update], first, thresholds, matching, now)
        assert second.results[0].kind == Classification.REVISED

        # Last poll lost the update (e.g. an older state file); the bulletin is known
        third = classify_batch(
            [moved],
            index_records([original], coarse_key),
            index_records(second.notified_snapshot, fine_key),
            thresholds,
            matching,
            now=now,
        )
        assert third.results[0].kind == Classification.DUPLICATE
        assert third.results[0].reason == "bulletin already notified"


class TestClassifyQuake:
    """Tests for classify_quake() single-record decisions."""

    def test_already_notified_after_restart(self, make_quake, thresholds, matching):
        """Empty last poll but an existing notification is a duplicate."""
        quake = make_quake(magnitude="4.6", **FAR)
        notified = index_records([quake], fine_key)

        result = classify_quake(quake, {}, notified, thresholds, matching)

        assert result.kind == Classification.DUPLICATE
        assert result.should_notify is False

    def test_local_quake_uses_local_threshold(self, make_quake, thresholds, matching):
        """M4.2 near the reference point is new."""
        quake = make_quake(magnitude="4.2", latitude="10.40", longitude="123.95")

        result = classify_quake(quake, {}, {}, thresholds, matching)

        assert result.kind == Classification.NEW
        assert result.should_notify is True
        assert result.is_revision is False

    def test_downgrade_below_threshold_is_revised(self, make_quake, thresholds, matching):
        """A significant quake revised below threshold still gets a correction."""
        previous = make_quake(magnitude="4.6", bulletin_number=1, **FAR)
        quake = make_quake(magnitude="4.2", bulletin_number=2, **FAR)

        result = classify_quake(
            quake, index_records([previous], coarse_key), {}, thresholds, matching
        )

        assert result.kind == Classification.REVISED
        assert result.previous == previous

    def test_insignificant_revision(self, make_quake, thresholds, matching):
        """Changes to a quake that never reached threshold are ignored."""
        previous = make_quake(magnitude="3.0", bulletin_number=1, **FAR)
        quake = make_quake(magnitude="3.2", bulletin_number=2, **FAR)

        result = classify_quake(
            quake, index_records([previous], coarse_key), {}, thresholds, matching
        )

        assert result.kind == Classification.INSIGNIFICANT
        assert result.previous == previous


class TestMergeNotified:
    """Tests for merge_notified() function."""

    def test_new_entries_first(self, make_quake, now):
        """New entries lead, older entries follow newest first."""
        older = make_quake(timestamp="20 September 2025 - 08:00:00 AM")
        old = make_quake(timestamp="25 September 2025 - 08:00:00 AM")
        new = make_quake(timestamp="01 October 2025 - 12:48:54 AM")

        merged = merge_notified([new], index_records([older, old], fine_key), now)

        assert merged == [new, old, older]

    def test_replaces_same_fine_key(self, make_quake, now):
        """An entry with the same fine key is replaced by the new one."""
        old = make_quake(magnitude="4.6")
        new = make_quake(magnitude="5.1")

        merged = merge_notified([new], index_records([old], fine_key), now)

        assert merged == [new]

    def test_prunes_expired(self, make_quake, now):
        """Entries past retention are dropped."""
        expired = make_quake(timestamp="01 June 2025 - 08:00:00 AM")

        assert merge_notified([], index_records([expired], fine_key), now) == []


class TestClassifyBatch:
    """Tests for classify_batch() function."""

    def test_results_in_batch_order(self, make_quake, thresholds, matching, now):
        """Every scraped record gets a result in order."""
        big = make_quake(timestamp="02 October 2025 - 03:00:00 PM", magnitude="5.0", **FAR)
        small = make_quake(magnitude="2.5", **FAR)

        outcome = classify_batch([big, small], {}, {}, thresholds, matching, now=now)

        assert [r.quake for r in outcome.results] == [big, small]
        assert [r.kind for r in outcome.results] == [
            Classification.NEW,
            Classification.INSIGNIFICANT,
        ]
        assert outcome.of_kind(Classification.NEW)[0].quake == big
        assert outcome.notified_changed is True

    def test_last_poll_is_raw_batch(self, make_quake, thresholds, matching, now):
        """The last-poll snapshot is the scraped batch, notified or not."""
        batch = [make_quake(magnitude="1.8", **FAR), make_quake(magnitude="2.0")]

        outcome = classify_batch(batch, {}, {}, thresholds, matching, now=now)

        assert outcome.last_poll_snapshot == batch

    def test_keeps_notified_ledger_without_news(self, make_quake, thresholds, matching, now):
        """Nothing to announce leaves the notified ledger unchanged."""
        known = make_quake(magnitude="4.6", **FAR)
        notified = index_records([known], fine_key)

        outcome = classify_batch([known], {}, notified, thresholds, matching, now=now)

        assert outcome.notified_changed is False
        assert outcome.notified_snapshot == [known]
