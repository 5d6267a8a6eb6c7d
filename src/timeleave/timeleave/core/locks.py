from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable, ContextManager, Dict, Iterator


class AggregateLocks:
    """One re-entrant lock per employee aggregate.

    Every read-modify-write on an employee's ledger, balance or leave requests
    runs inside ``hold(employee_id)``. Different employees never share a lock.
    """

    def __init__(self):
        self._locks: Dict[int, threading.RLock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, employee_id: int) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(employee_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[employee_id] = lock
            return lock

    @contextmanager
    def hold(self, employee_id: int) -> Iterator[None]:
        lock = self._lock_for(int(employee_id))
        with lock:
            yield


# Opens one all-or-nothing scope around several repository writes.
TransactionFactory = Callable[[], ContextManager[None]]
