"""Unit tests for deduplication logic.

Pure function tests - no mocks needed, fast execution.
"""

from dataclasses import replace

import pytest

from src.core.dedup import (
    TRACKED_FIELDS,
    already_notified,
    bulletin_already_notified,
    changed_fields,
    quake_changed,
)
from src.core.ledger import fine_key, index_records


class TestQuakeChanged:
    """Tests for quake_changed() and changed_fields()."""

    def test_identical_snapshots(self, make_quake):
        """Equal snapshots are unchanged."""
        quake = make_quake()
        assert quake_changed(quake, make_quake()) is False
        assert changed_fields(quake, make_quake()) == []

    @pytest.mark.parametrize("field_name,value", [
        ("magnitude", "5.1"),
        ("depth", "012"),
        ("location", "016 km N 44° W of Tabuelan (Cebu)"),
        ("latitude", "10.95"),
        ("longitude", "123.80"),
        ("bulletin", "https://example.com/2025_0930_164854_B2.html"),
    ])
    def test_each_tracked_field(self, make_quake, field_name, value):
        """Changing any single tracked field is detected."""
        old = make_quake()
        new = replace(old, **{field_name: value})
        assert quake_changed(old, new) is True
        assert changed_fields(old, new) == [field_name]

    def test_text_comparison(self, make_quake):
        """Formatting differences count as changes."""
        assert quake_changed(make_quake(magnitude="5.0"), make_quake(magnitude="5")) is True

    def test_timestamp_not_tracked(self, make_quake):
        """Timestamp drift alone is not a change."""
        old = make_quake()
        new = replace(old, timestamp="01 October 2025 - 12:49:10 AM")
        assert "timestamp" not in TRACKED_FIELDS
        assert quake_changed(old, new) is False


class TestAlreadyNotified:
    """Tests for already_notified() function."""

    def test_same_timestamp_and_location(self, make_quake):
        """Fine key match means already notified."""
        notified = index_records([make_quake()], fine_key)
        assert already_notified(make_quake(), notified) is True

    def test_different_location(self, make_quake):
        """Same time but reworded location is a different fine key."""
        notified = index_records([make_quake()], fine_key)
        quake = make_quake(location="016 km N 44° W of Tabuelan (Cebu)")
        assert already_notified(quake, notified) is False

    def test_empty_ledger(self, make_quake):
        """Nothing is notified in an empty ledger."""
        assert already_notified(make_quake(), {}) is False


class TestBulletinAlreadyNotified:
    """Tests for bulletin_already_notified() function."""

    def test_same_bulletin_same_minute(self, make_quake):
        """Same bulletin URL within the same minute matches."""
        notified = index_records([make_quake(bulletin_number=2)], fine_key)
        quake = make_quake(
            timestamp="01 October 2025 - 12:48:10 AM",
            magnitude="5.1",
            bulletin_number=2,
        )
        assert bulletin_already_notified(quake, notified) is True

    def test_different_bulletin(self, make_quake):
        """A later bulletin number is not yet notified."""
        notified = index_records([make_quake(bulletin_number=1)], fine_key)
        assert bulletin_already_notified(make_quake(bulletin_number=2), notified) is False

    def test_different_minute(self, make_quake):
        """Same bulletin in another minute does not match."""
        notified = index_records([make_quake(bulletin_number=2)], fine_key)
        quake = make_quake(timestamp="01 October 2025 - 12:50:54 AM", bulletin_number=2)
        assert bulletin_already_notified(quake, notified) is False

    def test_missing_bulletin_never_matches(self, make_quake):
        """Records without a bulletin URL are never considered notified."""
        notified = index_records([make_quake(bulletin_number=None)], fine_key)
        assert bulletin_already_notified(make_quake(bulletin_number=None), notified) is False
