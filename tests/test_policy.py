"""Tests for compaction policy and stats."""

import dataclasses
import pytest

from compacting_queue import CompactionPolicy, CompactionStats


class TestCompactionPolicy:
    """Tests for CompactionPolicy."""

    def test_default_values(self):
        """Defaults are 32 slots and 60% empty."""
        policy = CompactionPolicy()
        assert policy.small_queue_threshold == 32
        assert policy.empty_fraction_threshold == 0.6

    def test_frozen(self):
        """Policies are immutable."""
        policy = CompactionPolicy()
        with pytest.raises(dataclasses.FrozenInstanceError):
            policy.small_queue_threshold = 1

    def test_invalid_values(self):
        """Out-of-range values are rejected."""
        with pytest.raises(ValueError):
            CompactionPolicy(small_queue_threshold=-1)
        with pytest.raises(ValueError):
            CompactionPolicy(empty_fraction_threshold=-0.1)
        with pytest.raises(ValueError):
            CompactionPolicy(empty_fraction_threshold=1.0)

    def test_small_storage_skipped(self):
        """Storage at or below the threshold is never compacted."""
        policy = CompactionPolicy()
        assert not policy.should_compact(32, 32)
        assert not policy.should_compact(0, 0)

    def test_fraction_is_strict(self):
        """Exactly the threshold fraction does not compact."""
        policy = CompactionPolicy()
        assert not policy.should_compact(60, 100)
        assert policy.should_compact(61, 100)

    def test_below_fraction(self):
        """A small empty prefix is left in place."""
        assert not CompactionPolicy().should_compact(10, 100)

    def test_zero_fraction_rejected(self):
        """A zero fraction would compact on every dequeue and is rejected."""
        with pytest.raises(ValueError):
            CompactionPolicy(empty_fraction_threshold=0.0)

    def test_non_integer_threshold_rejected(self):
        """small_queue_threshold must be an int, not a float or bool."""
        with pytest.raises(TypeError):
            CompactionPolicy(small_queue_threshold=3.7)
        with pytest.raises(TypeError):
            CompactionPolicy(small_queue_threshold=True)

    def test_non_numeric_fraction_rejected(self):
        """empty_fraction_threshold must be a number."""
        with pytest.raises(TypeError):
            CompactionPolicy(empty_fraction_threshold="0.5")
        with pytest.raises(TypeError):
            CompactionPolicy(empty_fraction_threshold=False)

    def test_zero_size_threshold(self):
        """A zero size threshold compacts any storage past the fraction."""
        policy = CompactionPolicy(small_queue_threshold=0, empty_fraction_threshold=0.01)
        assert policy.should_compact(1, 1)
        assert not policy.should_compact(0, 5)
        assert not policy.should_compact(0, 0)


class TestCompactionStats:
    """Tests for CompactionStats."""

    def test_default_values(self):
        """All counters start at zero."""
        stats = CompactionStats()
        assert stats.compactions == 0
        assert stats.total_work == 0
        assert stats.enqueues == 0

    def test_record_compaction(self):
        """record_compaction accumulates."""
        stats = CompactionStats()
        stats.record_compaction(61, 39)
        stats.record_compaction(30, 10)
        assert stats.compactions == 2
        assert stats.slots_reclaimed == 91
        assert stats.elements_moved == 49
        assert stats.total_work == 140
