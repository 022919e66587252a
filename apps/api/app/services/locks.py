from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Hashable, Iterable, Iterator


class KeyedLocks:
    """
    Process-local mutexes keyed by (employee_id, work week start).

    The hours check reads existing totals and then writes; holding the keys
    for the whole read-then-write keeps two saves for the same employee/week
    from both passing the cap.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}

    @contextmanager
    def hold(self, keys: Iterable[Hashable]) -> Iterator[None]:
        # Sorted acquisition order, so overlapping key sets cannot deadlock.
        ordered = sorted(set(keys))
        with self._guard:
            locks = [self._locks.setdefault(k, threading.Lock()) for k in ordered]
        for lock in locks:
            lock.acquire()
        try:
            yield
        finally:
            for lock in reversed(locks):
                lock.release()


work_week_locks = KeyedLocks()
