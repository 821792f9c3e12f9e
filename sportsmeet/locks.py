"""
Per-activity critical sections.

Every check-then-act sequence that touches an activity's seat counter runs
while holding that activity's lock, so two requests in this process can never
both observe the last free seat. Cross-process safety comes from the
conditional counter UPDATE and the partial unique indexes.
"""
import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator, List


class KeyedLock:
    """A registry of re-entrant locks, one per key.

    An entry lives only while some thread holds or waits for it; the last
    one out removes it, so the registry stays as small as the set of keys
    currently in use.
    """

    def __init__(self) -> None:
        # key -> [lock, number of holders and waiters]
        self._entries: Dict[Hashable, List] = {}
        self._guard = threading.Lock()

    def _acquire_entry(self, key: Hashable) -> threading.RLock:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = [threading.RLock(), 0]
                self._entries[key] = entry
            entry[1] += 1
            return entry[0]

    def _release_entry(self, key: Hashable) -> None:
        with self._guard:
            entry = self._entries[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._entries[key]

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        lock = self._acquire_entry(key)
        try:
            with lock:
                yield
        finally:
            self._release_entry(key)

    def __len__(self) -> int:
        return len(self._entries)


_activity_locks = KeyedLock()


def activity_lock(activity_id: int):
    """Serialize work on a single activity."""
    return _activity_locks.hold(("activity", activity_id))
