"""
Per-account mutual exclusion.

Each account id gets its own lock. A unit of work that touches
several accounts takes their locks in ascending id order, so two
transfers moving money in opposite directions between the same
pair of accounts can never wait on each other in a cycle.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterable, Iterator

from ledger_core.errors import StorageError

logger = logging.getLogger(__name__)


class AccountLocks:
    """Registry of one lock per account id, created on first use."""

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout
        self._locks: dict[int, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, account_id: int) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(account_id)
            if lock is None:
                lock = self._locks[account_id] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, account_ids: Iterable[int]) -> Iterator[list[int]]:
        """
        Hold the locks of every given account for the duration of the block.

        Yields the ordered, de-duplicated ids. Raises StorageError if a
        lock cannot be acquired within the timeout; locks taken so far
        are released first.
        """
        ordered = sorted(set(account_ids))
        acquired: list[threading.Lock] = []
        try:
            for account_id in ordered:
                lock = self._lock_for(account_id)
                if not lock.acquire(timeout=self.timeout):
                    logger.error(
                        "Timed out waiting for account lock",
                        extra={"account_id": account_id, "timeout": self.timeout},
                    )
                    raise StorageError(
                        f"Timed out after {self.timeout}s waiting for "
                        f"account {account_id}"
                    )
                acquired.append(lock)
            yield ordered
        finally:
            for lock in reversed(acquired):
                lock.release()
