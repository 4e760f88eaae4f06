"""
policy - Compaction policy and accounting for CompactingQueue

This module decides when a queue should physically drop the prefix of
logically removed slots, and keeps the counters used to check that the
work spent compacting stays linear in the number of operations.
"""

from dataclasses import dataclass


DEFAULT_SMALL_QUEUE_THRESHOLD = 32
DEFAULT_EMPTY_FRACTION_THRESHOLD = 0.6


def validate_small_queue_threshold(value: int) -> int:
    """Check a small-queue threshold.

    Raises:
        TypeError: If value is not an integer (bools are rejected)
        ValueError: If value is negative
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(
            f"small_queue_threshold must be an int, not {type(value).__name__}"
        )
    if value < 0:
        raise ValueError("small_queue_threshold must be >= 0")
    return value


def validate_empty_fraction_threshold(value: float) -> float:
    """Check an empty-fraction threshold.

    Raises:
        TypeError: If value is not a real number (bools are rejected)
        ValueError: If value is outside (0.0, 1.0)
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(
            f"empty_fraction_threshold must be a float, not {type(value).__name__}"
        )
    if not 0.0 < value < 1.0:
        raise ValueError("empty_fraction_threshold must be in (0.0, 1.0)")
    return float(value)


@dataclass(frozen=True)
class CompactionPolicy:
    """Threshold-triggered compaction policy.

    Attributes:
        small_queue_threshold: Storage lengths at or below this are never
            compacted.
        empty_fraction_threshold: Compact once the empty prefix is
            strictly larger than this fraction of storage.
    """
    small_queue_threshold: int = DEFAULT_SMALL_QUEUE_THRESHOLD
    empty_fraction_threshold: float = DEFAULT_EMPTY_FRACTION_THRESHOLD

    def __post_init__(self) -> None:
        validate_small_queue_threshold(self.small_queue_threshold)
        object.__setattr__(
            self,
            'empty_fraction_threshold',
            validate_empty_fraction_threshold(self.empty_fraction_threshold),
        )

    def should_compact(self, head: int, length: int) -> bool:
        """Return True if a storage of ``length`` slots whose first ``head``
        slots are empty should be compacted.
        """
        if length <= self.small_queue_threshold:
            return False
        return head / length > self.empty_fraction_threshold


@dataclass
class CompactionStats:
    """Per-queue compaction and operation counters."""
    compactions: int = 0
    slots_reclaimed: int = 0
    elements_moved: int = 0

    # Only maintained when the queue tracks operations
    enqueues: int = 0
    dequeues: int = 0
    empty_dequeues: int = 0

    @property
    def total_work(self) -> int:
        """Slots touched by all compactions so far."""
        return self.slots_reclaimed + self.elements_moved

    def record_compaction(self, reclaimed: int, moved: int) -> None:
        self.compactions += 1
        self.slots_reclaimed += reclaimed
        self.elements_moved += moved
