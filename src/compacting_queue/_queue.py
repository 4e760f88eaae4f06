"""
queue - Thread-safe FIFO queue with lazy compaction

This module provides CompactingQueue, an unbounded non-blocking FIFO queue.
Dequeue does not shift the remaining elements; it marks the head slot empty
and advances a head index. The empty prefix is dropped in one step once it
grows past the configured fraction of storage, which keeps dequeue
amortized O(1) while bounding wasted memory.
"""

import time
from dataclasses import replace
from typing import Any, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar

from compacting_queue._config import config
from compacting_queue._policy import CompactionPolicy, CompactionStats
from compacting_queue._profiler import get_active_profiler
from compacting_queue._rwlock import RWLock


T = TypeVar('T')


class _EmptySlot:
    """Marker for a logically removed slot."""

    __slots__ = ()

    def __repr__(self) -> str:
        return '<empty>'


_EMPTY: Any = _EmptySlot()

# (reclaimed, moved, duration_ns) of a compaction awaiting report
_Compaction = Tuple[int, int, int]


__all__ = ['CompactingQueue']


class CompactingQueue(Generic[T]):
    """Unbounded thread-safe FIFO queue with lazy compaction.

    Example:
        >>> q = CompactingQueue([1, 2, 3])
        >>> q.dequeue()
        1
        >>> q.enqueue(4)
        4
        >>> q.front(), q.tail()
        (2, 4)
        >>> len(q)
        3

    Empty Queue:
        dequeue(), front() and tail() never raise on an empty queue. They
        return ``default`` (None unless given). Pass a sentinel as
        ``default`` when None is a meaningful element.

    Thread Safety:
        Every operation runs under a per-queue readers-writer lock.
        enqueue, dequeue, drain and clear (and any compaction they trigger)
        are exclusive; front, tail, len, iteration and equality share the
        lock with each other but never overlap a writer.

    Equality:
        Two queues are equal when their live elements are equal and in the
        same order, regardless of how much empty prefix either one carries.
    """

    __slots__ = (
        '_storage',
        '_head',
        '_lock',
        '_policy',
        '_stats',
        '_track_operations',
        '_name',
    )

    # Mutable with value equality
    __hash__ = None  # type: ignore[assignment]

    def __init__(
        self,
        iterable: Iterable[T] = (),
        *,
        small_queue_threshold: Optional[int] = None,
        empty_fraction_threshold: Optional[float] = None,
        policy: Optional[CompactionPolicy] = None,
        name: Optional[str] = None,
        track_operations: Optional[bool] = None,
    ):
        """Initialize the queue.

        Args:
            iterable: Initial elements, enqueued in order
            small_queue_threshold: Never compact storage of this length or
                less (default from config)
            empty_fraction_threshold: Compact once more than this fraction
                of storage is empty prefix (default from config)
            policy: Complete policy, instead of the two thresholds
            name: Label used in profiler reports
            track_operations: Count enqueues and dequeues in ``stats``
                (default from config.enable_statistics)

        Raises:
            ValueError: If policy is combined with a threshold, or a
                threshold is out of range
            TypeError: If a threshold has the wrong type
        """
        if policy is not None:
            if small_queue_threshold is not None or empty_fraction_threshold is not None:
                raise ValueError("Pass either policy or thresholds, not both")
        else:
            default = config.default_policy()
            policy = CompactionPolicy(
                small_queue_threshold=(
                    default.small_queue_threshold
                    if small_queue_threshold is None else small_queue_threshold
                ),
                empty_fraction_threshold=(
                    default.empty_fraction_threshold
                    if empty_fraction_threshold is None else empty_fraction_threshold
                ),
            )

        if track_operations is None:
            track_operations = config.enable_statistics

        self._storage: List[Any] = []
        self._head = 0
        self._lock = RWLock()
        self._policy = policy
        self._stats = CompactionStats()
        self._track_operations = track_operations
        self._name = name if name is not None else f"queue-{id(self):x}"

        for element in iterable:
            self.enqueue(element)

    @property
    def policy(self) -> CompactionPolicy:
        """Compaction policy in effect."""
        return self._policy

    @property
    def name(self) -> str:
        """Label used in profiler reports."""
        return self._name

    @property
    def stats(self) -> CompactionStats:
        """Snapshot of this queue's counters."""
        with self._lock.read_locked():
            return replace(self._stats)

    def enqueue(self, element: T) -> T:
        """Append an element at the tail.

        Args:
            element: Element to append (any value, including None)

        Returns:
            The element, for chaining or logging
        """
        with self._lock.write_locked():
            self._storage.append(element)
            if self._track_operations:
                self._stats.enqueues += 1
        return element

    def dequeue(self, default: Optional[T] = None) -> Optional[T]:
        """Remove and return the head element.

        Args:
            default: Value returned when the queue is empty

        Returns:
            The oldest element, or ``default`` if the queue is empty
        """
        with self._lock.write_locked():
            element = self._pop_head()
            if element is _EMPTY:
                if self._track_operations:
                    self._stats.empty_dequeues += 1
                return default
            compaction = self._compact_if_needed()
        self._report_compaction(compaction)
        return element

    def drain(self, max_items: int = -1) -> List[T]:
        """Dequeue several elements in one exclusive step.

        Args:
            max_items: Maximum elements to take (-1 for all)

        Returns:
            Elements in FIFO order
        """
        items: List[T] = []
        with self._lock.write_locked():
            while max_items < 0 or len(items) < max_items:
                element = self._pop_head()
                if element is _EMPTY:
                    break
                items.append(element)
            compaction = self._compact_if_needed() if items else None
        self._report_compaction(compaction)
        return items

    def clear(self) -> None:
        """Remove all elements."""
        with self._lock.write_locked():
            self._storage = []
            self._head = 0

    def front(self, default: Optional[T] = None) -> Optional[T]:
        """Return the head element without removing it, or ``default``."""
        with self._lock.read_locked():
            if self._head >= len(self._storage):
                return default
            element = self._storage[self._head]
        return default if element is _EMPTY else element

    def tail(self, default: Optional[T] = None) -> Optional[T]:
        """Return the most recently enqueued live element, or ``default``."""
        with self._lock.read_locked():
            if self._head >= len(self._storage):
                return default
            element = self._storage[-1]
        return default if element is _EMPTY else element

    @property
    def count(self) -> int:
        """Number of live elements."""
        with self._lock.read_locked():
            return len(self._storage) - self._head

    @property
    def capacity(self) -> int:
        """Physical slots in storage, including the empty prefix."""
        with self._lock.read_locked():
            return len(self._storage)

    @property
    def is_empty(self) -> bool:
        """True if the queue holds no elements."""
        return self.count == 0

    def __len__(self) -> int:
        return self.count

    def __bool__(self) -> bool:
        return self.count > 0

    def __iter__(self) -> Iterator[T]:
        """Iterate over a snapshot of the live elements, front to tail."""
        return iter(self._snapshot())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompactingQueue):
            return NotImplemented
        if other is self:
            return True
        # Never hold two queue locks at once
        return self._snapshot() == other._snapshot()

    def __repr__(self) -> str:
        with self._lock.read_locked():
            count = len(self._storage) - self._head
            head = self._head
            capacity = len(self._storage)
        return f"CompactingQueue(count={count}, head={head}, capacity={capacity})"

    def _snapshot(self) -> List[T]:
        with self._lock.read_locked():
            return self._storage[self._head:]

    def _pop_head(self) -> Any:
        """Mark the head slot empty and return its element.

        Returns _EMPTY without changing anything if there is no head
        element. Caller must hold the write lock.
        """
        head = self._head
        if head >= len(self._storage):
            return _EMPTY
        element = self._storage[head]
        if element is _EMPTY:
            return _EMPTY
        self._storage[head] = _EMPTY
        self._head = head + 1
        if self._track_operations:
            self._stats.dequeues += 1
        return element

    def _compact_if_needed(self) -> Optional[_Compaction]:
        """Drop the empty prefix if the policy asks for it.

        Caller must hold the write lock. Returns the compaction to hand to
        _report_compaction() once the lock is released, or None.
        """
        head = self._head
        length = len(self._storage)
        if not self._policy.should_compact(head, length):
            return None

        start_ns = time.perf_counter_ns()

        del self._storage[:head]
        self._head = 0

        moved = length - head
        self._stats.record_compaction(head, moved)
        return head, moved, time.perf_counter_ns() - start_ns

    def _report_compaction(self, compaction: Optional[_Compaction]) -> None:
        """Pass a compaction to the active profiler.

        Must be called without the lock held.
        """
        if compaction is None:
            return
        profiler = get_active_profiler()
        if profiler is not None:
            profiler.record_compaction(self._name, *compaction)
