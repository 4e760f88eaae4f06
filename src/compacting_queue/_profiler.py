"""
profiler - Instrumentation for measuring compaction cost

This module records the compactions performed by CompactingQueue
instances between two points in a program, so users can judge whether
their compaction thresholds suit the workload.
"""

import logging
import time
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union
from pathlib import Path


@dataclass
class QueueCompactionStats:
    """Per-queue compaction statistics."""
    name: str
    compactions: int = 0
    slots_reclaimed: int = 0
    elements_moved: int = 0
    time_sec: float = 0.0


@dataclass
class CompactionReport:
    """Compaction cost report from CompactionProfiler."""
    wall_time_sec: float = 0.0
    compaction_time_sec: float = 0.0
    compaction_time_pct: float = 0.0

    compaction_count: int = 0
    slots_reclaimed: int = 0
    elements_moved: int = 0
    avg_compaction_ns: float = 0.0
    max_compaction_ns: float = 0.0

    # Per-queue breakdown
    queues: Dict[str, QueueCompactionStats] = field(default_factory=dict)

    @property
    def avg_elements_moved(self) -> float:
        """Average number of live elements shifted per compaction."""
        if self.compaction_count == 0:
            return 0.0
        return self.elements_moved / self.compaction_count

    def __str__(self) -> str:
        """Human-readable report."""
        lines = [
            "CompactionProfiler Report",
            "=========================",
            f"Wall time:              {self.wall_time_sec:.3f} sec",
            f"  Compaction time:      {self.compaction_time_sec:.3f} sec ({self.compaction_time_pct:.1f}%)",
            "",
            f"Compactions:            {self.compaction_count:,}",
            f"  Slots reclaimed:      {self.slots_reclaimed:,}",
            f"  Elements moved:       {self.elements_moved:,}",
            f"  Avg per compaction:   {self.avg_compaction_ns:.0f} ns",
            f"  Max compaction:       {self.max_compaction_ns:,.0f} ns",
        ]

        if self.queues:
            lines.extend(["", "Per queue:"])
            for stats in self.queues.values():
                lines.append(
                    f"  {stats.name}: {stats.compactions:,} compactions, "
                    f"{stats.elements_moved:,} moved"
                )

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Machine-readable format."""
        return {
            'wall_time_sec': self.wall_time_sec,
            'compaction_time_sec': self.compaction_time_sec,
            'compaction_time_pct': self.compaction_time_pct,
            'compaction_count': self.compaction_count,
            'slots_reclaimed': self.slots_reclaimed,
            'elements_moved': self.elements_moved,
            'avg_compaction_ns': self.avg_compaction_ns,
            'max_compaction_ns': self.max_compaction_ns,
            'queues': {
                name: {
                    'compactions': s.compactions,
                    'slots_reclaimed': s.slots_reclaimed,
                    'elements_moved': s.elements_moved,
                    'time_sec': s.time_sec,
                }
                for name, s in self.queues.items()
            },
        }

    def to_json(self, path: Optional[Union[str, Path]] = None) -> str:
        """Export as JSON."""
        import json
        data = self.to_dict()
        json_str = json.dumps(data, indent=2)
        if path:
            Path(path).write_text(json_str)
        return json_str


class CompactionProfiler:
    """Measure compaction work between two points in a program.

    Usage:
        profiler = CompactionProfiler()
        set_active_profiler(profiler)
        profiler.start()

        for item in data:
            queue.enqueue(item)
        ...

        report = profiler.stop()
        print(report)

    Or using context manager (which also installs the profiler as the
    active one for its duration):
        with CompactionProfiler() as profiler:
            ...
        print(profiler.report)
    """

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        log_interval: Optional[float] = None,
    ):
        """Initialize profiler.

        Args:
            logger: Logger for per-compaction debug records and periodic
                summaries during long workloads
            log_interval: Seconds between summary messages (requires logger)
        """
        self._logger = logger
        self._log_interval = log_interval

        self._lock = threading.Lock()
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None
        self._last_log_time: Optional[float] = None
        self._previous: Optional['CompactionProfiler'] = None
        self._compaction_count = 0
        self._compaction_time_ns = 0
        self._max_compaction_ns = 0
        self._slots_reclaimed = 0
        self._elements_moved = 0
        self._queue_stats: Dict[str, QueueCompactionStats] = {}
        self._report: Optional[CompactionReport] = None

    def start(self) -> None:
        """Begin profiling."""
        with self._lock:
            self._start_time = time.perf_counter()
            self._last_log_time = self._start_time
            self._end_time = None
            self._reset_counters()
            self._report = None

    def stop(self) -> CompactionReport:
        """End profiling and return the report."""
        with self._lock:
            self._end_time = time.perf_counter()
            self._report = self._compute_report()
            return self._report

    def reset(self) -> None:
        """Reset counters without stopping."""
        with self._lock:
            self._reset_counters()

    def _reset_counters(self) -> None:
        self._compaction_count = 0
        self._compaction_time_ns = 0
        self._max_compaction_ns = 0
        self._slots_reclaimed = 0
        self._elements_moved = 0
        self._queue_stats = {}

    @property
    def report(self) -> CompactionReport:
        """Get current report without stopping."""
        with self._lock:
            if self._report is not None:
                return self._report
            return self._compute_report()

    def record_compaction(
        self,
        queue_name: str,
        reclaimed: int,
        moved: int,
        duration_ns: int,
    ) -> None:
        """Record one compaction (called by CompactingQueue).

        Args:
            queue_name: Name of the compacted queue
            reclaimed: Empty slots dropped from the front of storage
            moved: Live elements shifted down
            duration_ns: Compaction duration in nanoseconds
        """
        with self._lock:
            self._compaction_count += 1
            self._compaction_time_ns += duration_ns
            self._max_compaction_ns = max(self._max_compaction_ns, duration_ns)
            self._slots_reclaimed += reclaimed
            self._elements_moved += moved

            stats = self._queue_stats.get(queue_name)
            if stats is None:
                stats = self._queue_stats[queue_name] = QueueCompactionStats(name=queue_name)
            stats.compactions += 1
            stats.slots_reclaimed += reclaimed
            stats.elements_moved += moved
            stats.time_sec += duration_ns / 1e9

            if self._logger is None:
                return

            self._logger.debug(
                "compacted %s: reclaimed=%d moved=%d in %d ns",
                queue_name, reclaimed, moved, duration_ns,
            )

            if self._log_interval is not None:
                now = time.perf_counter()
                if self._last_log_time is None or now - self._last_log_time >= self._log_interval:
                    self._last_log_time = now
                    self._logger.info(
                        "compaction summary: %d compactions, %d slots reclaimed, %d elements moved",
                        self._compaction_count, self._slots_reclaimed, self._elements_moved,
                    )

    def _compute_report(self) -> CompactionReport:
        """Compute report from collected data."""
        end_time = self._end_time or time.perf_counter()
        wall_time = end_time - (self._start_time or end_time)

        compaction_time_sec = self._compaction_time_ns / 1e9
        compaction_time_pct = (compaction_time_sec / wall_time * 100) if wall_time > 0 else 0

        avg_ns = (
            self._compaction_time_ns / self._compaction_count
            if self._compaction_count > 0 else 0
        )

        return CompactionReport(
            wall_time_sec=wall_time,
            compaction_time_sec=compaction_time_sec,
            compaction_time_pct=compaction_time_pct,
            compaction_count=self._compaction_count,
            slots_reclaimed=self._slots_reclaimed,
            elements_moved=self._elements_moved,
            avg_compaction_ns=avg_ns,
            max_compaction_ns=self._max_compaction_ns,
            queues=dict(self._queue_stats),
        )

    def __enter__(self) -> 'CompactionProfiler':
        """Context manager entry."""
        self._previous = get_active_profiler()
        set_active_profiler(self)
        self.start()
        return self

    def __exit__(self, *args) -> None:
        """Context manager exit."""
        self.stop()
        set_active_profiler(self._previous)
        self._previous = None


# Global profiler instance for simple use cases
_active_profiler: Optional[CompactionProfiler] = None
_profiler_lock = threading.Lock()


def get_active_profiler() -> Optional[CompactionProfiler]:
    """Get the currently active profiler, if any."""
    with _profiler_lock:
        return _active_profiler


def set_active_profiler(profiler: Optional[CompactionProfiler]) -> None:
    """Set the active profiler that queues report compactions to."""
    global _active_profiler
    with _profiler_lock:
        _active_profiler = profiler
