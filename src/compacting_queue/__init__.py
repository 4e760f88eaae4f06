"""
compacting_queue - Thread-safe FIFO queue with lazy compaction

This package provides an unbounded, non-blocking FIFO queue whose dequeue
is amortized O(1): removed slots are marked empty and the empty prefix is
dropped only once it exceeds a configurable fraction of storage.
"""

__version__ = "0.1.0"

from compacting_queue._config import config, Config

from compacting_queue._policy import (
    CompactionPolicy,
    CompactionStats,
)

from compacting_queue._rwlock import RWLock

from compacting_queue._profiler import (
    CompactionProfiler,
    CompactionReport,
    QueueCompactionStats,
    get_active_profiler,
    set_active_profiler,
)

from compacting_queue._queue import CompactingQueue

__all__ = [
    # Version
    "__version__",
    # config
    "config",
    "Config",
    # policy
    "CompactionPolicy",
    "CompactionStats",
    # rwlock
    "RWLock",
    # profiler
    "CompactionProfiler",
    "CompactionReport",
    "QueueCompactionStats",
    "get_active_profiler",
    "set_active_profiler",
    # queue
    "CompactingQueue",
]
