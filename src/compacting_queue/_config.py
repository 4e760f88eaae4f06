"""
config - Runtime configuration and GIL detection

This module provides the process-wide defaults used when a CompactingQueue
is created without explicit compaction thresholds. Defaults are read once
from ``COMPACTING_QUEUE_*`` environment variables at import time.
"""

import os
import sys
import threading
from typing import Optional

from compacting_queue._policy import (
    CompactionPolicy,
    DEFAULT_EMPTY_FRACTION_THRESHOLD,
    DEFAULT_SMALL_QUEUE_THRESHOLD,
    validate_empty_fraction_threshold,
    validate_small_queue_threshold,
)


def _detect_gil_disabled() -> bool:
    """Detect whether GIL is disabled in current runtime.

    Returns:
        True if running free-threaded Python (GIL disabled)
    """
    # sys._is_gil_enabled() exists on 3.13+
    if hasattr(sys, '_is_gil_enabled'):
        try:
            return not sys._is_gil_enabled()
        except Exception:
            pass

    # Fallback: check abiflags for 't' suffix (free-threaded build)
    abiflags = getattr(sys, 'abiflags', '')
    if 't' in abiflags:
        return True

    return False


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Get environment variable with prefix."""
    full_name = f"COMPACTING_QUEUE_{name}"
    return os.environ.get(full_name, default)


def _get_env_bool(name: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    value = _get_env(name)
    if value is None:
        return default
    return value.lower() in ('1', 'true', 'yes', 'on')


def _get_env_int(name: str, default: int) -> int:
    """Get integer environment variable."""
    value = _get_env(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    """Get float environment variable."""
    value = _get_env(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


class Config:
    """Global configuration for compacting_queue.

    Thread Safety:
        All reads are thread-safe. Writes use a lock and affect
        only queues created after the write.
    """

    __slots__ = (
        '_lock',
        '_gil_disabled',
        '_small_queue_threshold',
        '_empty_fraction_threshold',
        '_enable_statistics',
    )

    def __init__(self) -> None:
        """Initialize configuration (called once at module import)."""
        self._lock = threading.Lock()
        self._gil_disabled = _detect_gil_disabled()
        self.reload()

    def reload(self) -> None:
        """Re-read settings from the environment.

        Values that are malformed or out of range fall back to defaults.
        """
        small = _get_env_int('SMALL_QUEUE_THRESHOLD', DEFAULT_SMALL_QUEUE_THRESHOLD)
        if small < 0:
            small = DEFAULT_SMALL_QUEUE_THRESHOLD

        fraction = _get_env_float('EMPTY_FRACTION_THRESHOLD', DEFAULT_EMPTY_FRACTION_THRESHOLD)
        if not 0.0 < fraction < 1.0:
            fraction = DEFAULT_EMPTY_FRACTION_THRESHOLD

        with self._lock:
            self._small_queue_threshold = small
            self._empty_fraction_threshold = fraction
            self._enable_statistics = _get_env_bool('ENABLE_STATS', False)

    @property
    def gil_disabled(self) -> bool:
        """True if running free-threaded Python (GIL disabled)."""
        return self._gil_disabled

    @property
    def small_queue_threshold(self) -> int:
        """Default storage length at or below which queues never compact."""
        return self._small_queue_threshold

    @small_queue_threshold.setter
    def small_queue_threshold(self, value: int) -> None:
        """Set default small-queue threshold.

        Args:
            value: Non-negative integer

        Raises:
            TypeError: If value is not an integer
            ValueError: If value is negative
        """
        value = validate_small_queue_threshold(value)
        with self._lock:
            self._small_queue_threshold = value

    @property
    def empty_fraction_threshold(self) -> float:
        """Default empty-prefix fraction above which queues compact."""
        return self._empty_fraction_threshold

    @empty_fraction_threshold.setter
    def empty_fraction_threshold(self, value: float) -> None:
        """Set default empty-fraction threshold.

        Args:
            value: Fraction in (0.0, 1.0)

        Raises:
            TypeError: If value is not a number
            ValueError: If value is out of range
        """
        value = validate_empty_fraction_threshold(value)
        with self._lock:
            self._empty_fraction_threshold = value

    @property
    def enable_statistics(self) -> bool:
        """Whether new queues count enqueues and dequeues by default."""
        return self._enable_statistics

    @enable_statistics.setter
    def enable_statistics(self, value: bool) -> None:
        """Enable or disable operation counting for new queues."""
        with self._lock:
            self._enable_statistics = bool(value)

    def default_policy(self) -> CompactionPolicy:
        """Build a CompactionPolicy from the current defaults."""
        with self._lock:
            return CompactionPolicy(
                small_queue_threshold=self._small_queue_threshold,
                empty_fraction_threshold=self._empty_fraction_threshold,
            )

    def __repr__(self) -> str:
        """String representation of configuration."""
        return (
            f"Config("
            f"gil_disabled={self.gil_disabled}, "
            f"small_queue_threshold={self.small_queue_threshold}, "
            f"empty_fraction_threshold={self.empty_fraction_threshold})"
        )


# Global configuration instance (initialized at module import)
config = Config()
