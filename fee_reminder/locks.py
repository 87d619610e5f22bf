"""Per-key locks for serializing work on one fee plan or one calendar day."""

import threading
from contextlib import contextmanager
from typing import Hashable, Iterator


class KeyedLock:
    """Mutual exclusion per key.

    An entry exists only while some thread holds or waits for its key, so
    the table does not grow with the number of keys ever seen.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[Hashable, list] = {}  # key -> [lock, holders and waiters]

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            entry = self._entries.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._entries[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
