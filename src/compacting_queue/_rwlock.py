"""
rwlock - Writer-priority readers-writer lock

Readers may hold the lock together; a writer holds it alone. Once a writer
is waiting, newly arriving readers wait behind it so a steady stream of
readers cannot starve writers.
"""

import threading
from contextlib import contextmanager
from typing import Iterator


class RWLock:
    """Readers-writer lock with writer priority.

    Example:
        >>> lock = RWLock()
        >>> with lock.read_locked():
        ...     pass
        >>> with lock.write_locked():
        ...     pass

    The lock is not reentrant: a thread holding it in write mode must not
    acquire it again in either mode.
    """

    __slots__ = ('_cond', '_readers', '_writer_active', '_writers_waiting')

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer_active = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        """Block until no writer holds or is waiting for the lock."""
        with self._cond:
            while self._writer_active or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        """Release a read hold.

        Raises:
            RuntimeError: If no read hold is outstanding
        """
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read() without acquire_read()")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        """Block until the lock is free of readers and writers."""
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer_active or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer_active = True

    def release_write(self) -> None:
        """Release the write hold.

        Raises:
            RuntimeError: If the lock is not held for writing
        """
        with self._cond:
            if not self._writer_active:
                raise RuntimeError("release_write() without acquire_write()")
            self._writer_active = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Hold the lock in shared mode for the duration of the block."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Hold the lock in exclusive mode for the duration of the block."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    @property
    def readers(self) -> int:
        """Number of threads currently holding a read lock."""
        return self._readers

    @property
    def writer_active(self) -> bool:
        """True while a writer holds the lock."""
        return self._writer_active

    @property
    def writers_waiting(self) -> int:
        """Number of writers blocked in acquire_write()."""
        return self._writers_waiting

    def __repr__(self) -> str:
        return (
            f"RWLock(readers={self._readers}, "
            f"writer_active={self._writer_active}, "
            f"writers_waiting={self._writers_waiting})"
        )
