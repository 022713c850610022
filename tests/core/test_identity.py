"""Unit tests for identity resolution.

Pure function tests - no mocks needed, fast execution.
"""

from src.core.identity import (
    MatchMethod,
    MatchPolicy,
    Resolution,
    is_revised_quake,
    is_similar_quake,
    resolve_identity,
)
from src.core.ledger import coarse_key, index_records


def ledger(*records):
    """Build a last-poll ledger."""
    return index_records(records, coarse_key)


class TestIsRevisedQuake:
    """Tests for is_revised_quake() function."""

    def test_same_minute_higher_bulletin(self, make_quake):
        """A later bulletin in the same minute with the same origin."""
        past = make_quake(bulletin_number=1)
        current = make_quake(timestamp="01 October 2025 - 12:48:10 AM", bulletin_number=2)
        assert is_revised_quake(current, past) is True

    def test_lower_bulletin(self, make_quake):
        """The current bulletin must be strictly higher."""
        past = make_quake(bulletin_number=2)
        current = make_quake(bulletin_number=2)
        assert is_revised_quake(current, past) is False

    def test_missing_bulletin_number(self, make_quake):
        """Records without bulletin numbers never qualify."""
        past = make_quake(bulletin_number=None)
        current = make_quake(bulletin_number=2)
        assert is_revised_quake(current, past) is False


class TestIsSimilarQuake:
    """Tests for is_similar_quake() function."""

    def test_drifted_time_and_reworded_origin(self, make_quake):
        """Within the window with a similar origin."""
        past = make_quake(bulletin_number=1)
        current = make_quake(
            timestamp="01 October 2025 - 12:50:30 AM",
            location="014 km N 45° W of Tabuelan, Cebu",
            bulletin_number=2,
        )
        assert is_similar_quake(current, past, MatchPolicy()) is True

    def test_candidate_without_bulletin_counts_as_zero(self, make_quake):
        """An earlier row with no bulletin link can still be revised."""
        past = make_quake(bulletin_number=None)
        current = make_quake(
            timestamp="01 October 2025 - 12:50:30 AM",
            location="014 km N 45° W of Tabuelan, Cebu",
            bulletin_number=2,
        )
        assert is_similar_quake(current, past, MatchPolicy()) is True

    def test_current_without_bulletin_never_matches(self, make_quake):
        """A scraped record with no bulletin skips the fallback."""
        past = make_quake(bulletin_number=None)
        current = make_quake(
            timestamp="01 October 2025 - 12:50:30 AM",
            bulletin_number=None,
        )
        assert is_similar_quake(current, past, MatchPolicy()) is False

    def test_threshold_is_configurable(self, make_quake):
        """A stricter threshold rejects partial matches."""
        past = make_quake(bulletin_number=1, location="010 km N of Tabuelan (Cebu)")
        current = make_quake(
            timestamp="01 October 2025 - 12:50:30 AM",
            location="010 km N of Tabogon (Cebu)",
            bulletin_number=2,
        )
        assert is_similar_quake(current, past, MatchPolicy(similarity_threshold=99.0)) is False


class TestResolveIdentity:
    """Tests for resolve_identity() function."""

    def test_exact_key(self, make_quake):
        """Same coarse key resolves directly."""
        past = make_quake(bulletin_number=1)
        current = make_quake(magnitude="5.1", bulletin_number=2)

        resolution = resolve_identity(current, ledger(past))

        assert resolution.previous == past
        assert resolution.method == MatchMethod.EXACT_KEY

    def test_exact_key_for_first_bulletin(self, make_quake):
        """Exact lookup does not depend on the bulletin number."""
        past = make_quake(bulletin_number=None)
        current = make_quake(magnitude="4.7", bulletin_number=None)

        assert resolve_identity(current, ledger(past)).method == MatchMethod.EXACT_KEY

    def test_revision_same_minute(self, make_quake):
        """Later bulletin with shifted seconds is found as a revision."""
        past = make_quake(bulletin_number=1)
        current = make_quake(
            timestamp="01 October 2025 - 12:48:10 AM",
            magnitude="5.1",
            bulletin_number=2,
        )

        resolution = resolve_identity(current, ledger(past))

        assert resolution.previous == past
        assert resolution.method == MatchMethod.REVISION

    def test_similar_origin_within_window(self, make_quake):
        """Later bulletin with drifted minute and reworded origin."""
        past = make_quake(bulletin_number=1)
        current = make_quake(
            timestamp="01 October 2025 - 12:50:30 AM",
            location="014 km N 45° W of Tabuelan, Cebu",
            bulletin_number=2,
        )

        resolution = resolve_identity(current, ledger(past))

        assert resolution.previous == past
        assert resolution.method == MatchMethod.SIMILAR_ORIGIN

    def test_similar_origin_from_unlinked_row(self, make_quake):
        """Same-minute revision needs both numbers, the fallback does not."""
        past = make_quake(bulletin_number=None)
        current = make_quake(
            timestamp="01 October 2025 - 12:48:10 AM",
            magnitude="5.1",
            bulletin_number=2,
        )

        resolution = resolve_identity(current, ledger(past))

        assert resolution.previous == past
        assert resolution.method == MatchMethod.SIMILAR_ORIGIN

    def test_first_bulletin_skips_heuristics(self, make_quake):
        """Bulletin 1 with a shifted timestamp is a different quake."""
        past = make_quake(bulletin_number=1)
        current = make_quake(timestamp="01 October 2025 - 12:48:10 AM", bulletin_number=1)

        assert resolve_identity(current, ledger(past)) == Resolution()

    def test_outside_time_window(self, make_quake):
        """Too much drift is not a match."""
        past = make_quake(bulletin_number=1)
        current = make_quake(timestamp="01 October 2025 - 12:53:00 AM", bulletin_number=2)

        assert resolve_identity(current, ledger(past)).found is False

    def test_just_outside_time_window(self, make_quake):
        """Seconds beyond the window are not a match."""
        past = make_quake(timestamp="01 October 2025 - 12:48:00 AM", bulletin_number=1)
        current = make_quake(timestamp="01 October 2025 - 12:51:50 AM", bulletin_number=2)

        assert resolve_identity(current, ledger(past)).found is False

    def test_dissimilar_origin(self, make_quake):
        """An unrelated origin inside the window is not a match."""
        past = make_quake(bulletin_number=1)
        current = make_quake(
            timestamp="01 October 2025 - 12:49:30 AM",
            location="010 km S 12° E of Sulat (Eastern Samar)",
            bulletin_number=2,
        )

        assert resolve_identity(current, ledger(past)).found is False

    def test_custom_window(self, make_quake):
        """The time window comes from the policy."""
        past = make_quake(bulletin_number=1)
        current = make_quake(timestamp="01 October 2025 - 12:53:00 AM", bulletin_number=2)

        resolution = resolve_identity(current, ledger(past), MatchPolicy(time_window_minutes=5))

        assert resolution.method == MatchMethod.SIMILAR_ORIGIN

    def test_newest_candidate_wins(self, make_quake):
        """The first acceptable candidate newest first is chosen."""
        older = make_quake(timestamp="01 October 2025 - 12:47:30 AM", bulletin_number=1)
        newer = make_quake(
            timestamp="01 October 2025 - 12:48:40 AM",
            location="015 km N 45° W of Tabuelan, Cebu",
            bulletin_number=1,
        )
        current = make_quake(timestamp="01 October 2025 - 12:50:00 AM", bulletin_number=2)

        resolution = resolve_identity(current, ledger(older, newer))

        assert resolution.previous == newer

    def test_empty_ledger(self, make_quake):
        """Nothing resolves against an empty ledger."""
        assert resolve_identity(make_quake(bulletin_number=3), {}).found is False
