"""Exclusive repository lock.

Twig assumes a single writer. Commands that read and then rewrite HEAD,
branch refs or the index hold this lock for the whole read-modify-write
sequence, so two processes cannot interleave those writes.
"""

import logging
import warnings
from pathlib import Path

try:
    import fcntl  # POSIX

    HAVE_FCNTL = True
except ImportError:
    HAVE_FCNTL = False

try:
    import msvcrt  # Windows

    HAVE_MSVCRT = True
except ImportError:
    HAVE_MSVCRT = False


logger = logging.getLogger(__name__)


class RepositoryLock:
    """
    Re-entrant advisory file lock.

    The first ``__enter__`` opens the lock file and takes an exclusive
    lock; nested entries on the same instance only bump a counter. The
    lock is released when the outermost block exits, including on errors.
    """

    def __init__(self, lock_path: Path):
        self.lock_path = Path(lock_path)
        self._depth = 0
        self._lock_file = None

    @property
    def held(self) -> bool:
        return self._depth > 0

    def acquire(self) -> None:
        if self._depth == 0:
            self.lock_path.parent.mkdir(parents=True, exist_ok=True)
            self._lock_file = open(self.lock_path, 'a+')

            if HAVE_FCNTL:
                fcntl.flock(self._lock_file.fileno(), fcntl.LOCK_EX)
            elif HAVE_MSVCRT:
                self._lock_file.seek(0)
                msvcrt.locking(self._lock_file.fileno(), msvcrt.LK_LOCK, 1)
            else:
                warnings.warn("File locking not available on this platform", stacklevel=2)

            logger.debug("Acquired lock %s", self.lock_path)
        self._depth += 1

    def release(self) -> None:
        if self._depth == 0:
            raise RuntimeError("Lock released more times than acquired")

        self._depth -= 1
        if self._depth == 0 and self._lock_file is not None:
            try:
                if HAVE_FCNTL:
                    fcntl.flock(self._lock_file.fileno(), fcntl.LOCK_UN)
                elif HAVE_MSVCRT:
                    self._lock_file.seek(0)
                    msvcrt.locking(self._lock_file.fileno(), msvcrt.LK_UNLCK, 1)
            finally:
                self._lock_file.close()
                self._lock_file = None
                logger.debug("Released lock %s", self.lock_path)

    def __enter__(self) -> 'RepositoryLock':
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()
