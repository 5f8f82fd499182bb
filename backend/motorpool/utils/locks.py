"""Per-vehicle write serialization.

Writers across processes are serialized by the database: a vehicle row
lock (``SELECT ... FOR UPDATE``) on MySQL/PostgreSQL, ``BEGIN IMMEDIATE`` on
SQLite (see ``database.begin_write``). Inside one process writers also take
an in-memory lock keyed by vehicle id so threads queue without holding a
database connection busy.
"""

import threading
from contextlib import contextmanager
from typing import Iterator


class VehicleLockRegistry:
    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def _lock_for(self, vehicle_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(vehicle_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[vehicle_id] = lock
            return lock

    @contextmanager
    def hold(self, vehicle_id: str) -> Iterator[None]:
        lock = self._lock_for(vehicle_id)
        with lock:
            yield


vehicle_locks = VehicleLockRegistry()
