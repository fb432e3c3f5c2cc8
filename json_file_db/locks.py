from __future__ import annotations
import logging
import threading
from typing import Optional

from .errors import LockTimeoutError

log = logging.getLogger(__name__)


class CollectionLock:
    """
    Exclusive lock owned by one collection handle. Serializes the
    load-mutate-store sequence of insert/update/delete.

    Use as a context manager so release runs on every exit path:

        with lock:
            ...
    """
    def __init__(self, name: str, timeout: Optional[float] = None) -> None:
        self.name = name
        self.timeout = timeout
        self._lock = threading.Lock()

    def acquire(self, timeout: Optional[float] = None) -> None:
        if timeout is None:
            timeout = self.timeout
        if self._lock.acquire(blocking=False):
            return
        log.debug("waiting for lock on collection %r", self.name)
        acquired = self._lock.acquire(timeout=-1 if timeout is None else timeout)
        if not acquired:
            raise LockTimeoutError(
                f"lock on collection {self.name!r} not acquired within {timeout}s"
            )

    def release(self) -> None:
        self._lock.release()

    def locked(self) -> bool:
        return self._lock.locked()

    def __enter__(self) -> "CollectionLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
