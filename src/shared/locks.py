"""Per-engine serialization locks."""

import threading
from typing import Dict


class EngineLocks:
    """
    Registry handing out one lock per database engine type.

    Only one dump of a given engine may run at a time: dump tools use a lot of
    memory and the engines' client tools read connection settings from the
    environment. Dumps of different engines do not block each other.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def lock_for(self, engine: str) -> threading.Lock:
        """Return the lock for an engine type, creating it on first use."""
        key = engine.lower()
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def engines(self):
        with self._guard:
            return sorted(self._locks)
