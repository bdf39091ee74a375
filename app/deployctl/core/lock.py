"""Advisory lock around the installation journal.

A workload holds the lock for its whole read-modify-write cycle so that
two processes never interleave journal updates for the same install
directory. Implemented with flock (POSIX); on other platforms the lock
is a no-op.
"""

from __future__ import annotations

import contextlib
import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import IO

from deployctl.core.errors import JournalLockedError
from deployctl.core.paths import get_lock_path

if os.name == "posix":
    import fcntl
else:  # pragma: no cover
    fcntl = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


class JournalLock:
    """Exclusive, non-blocking advisory lock on a summary file.

    Attributes:
        path: The ``.lock`` sidecar file guarding the summary.
    """

    def __init__(self, summary_path: Path) -> None:
        self.path = get_lock_path(summary_path)
        self._handle: IO[str] | None = None

    @property
    def held(self) -> bool:
        return self._handle is not None

    def acquire(self) -> None:
        """Take the lock.

        Raises:
            JournalLockedError: If another process holds the lock.
        """
        if self._handle is not None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        handle = open(self.path, "a+", encoding="utf-8")  # noqa: SIM115
        if fcntl is not None:
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
            except BlockingIOError as e:
                handle.close()
                msg = f"Installation journal is locked by another process: {self.path}"
                raise JournalLockedError(msg) from e
        self._handle = handle
        logger.debug("Acquired journal lock %s", self.path)

    def release(self) -> None:
        """Release the lock if held."""
        if self._handle is None:
            return
        try:
            if fcntl is not None:
                fcntl.flock(self._handle.fileno(), fcntl.LOCK_UN)
        finally:
            self._handle.close()
            self._handle = None
        logger.debug("Released journal lock %s", self.path)

    def __enter__(self) -> JournalLock:
        self.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()


@contextlib.contextmanager
def journal_lock(summary_path: Path) -> Iterator[JournalLock]:
    """Hold the journal lock for the duration of the block."""
    lock = JournalLock(summary_path)
    with lock:
        yield lock
