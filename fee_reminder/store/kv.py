"""Key-value persistence backends.

Every entity is stored as a JSON-compatible document under a stable string
key of the form ``<type>:<id>``.
"""

from __future__ import annotations

import copy
import fcntl
import json
import logging
import os
import tempfile
import threading
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from typing import IO, Any, Iterator, Protocol

from fee_reminder.exceptions import InternalError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Persistence contract used by the school data store."""

    def get(self, key: str) -> dict[str, Any] | None: ...

    def get_by_prefix(self, prefix: str) -> list[dict[str, Any]]: ...

    def set(self, key: str, value: dict[str, Any]) -> None: ...

    def delete(self, key: str) -> bool: ...

    def exclusive(self) -> AbstractContextManager[None]:
        """Block every other writer until the returned context exits."""
        ...


class InMemoryKeyValueStore:
    """Thread-safe dict-backed store. Values are copied on the way in and out."""

    def __init__(self) -> None:
        self._data: dict[str, dict[str, Any]] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            value = self._data.get(key)
            return copy.deepcopy(value) if value is not None else None

    def get_by_prefix(self, prefix: str) -> list[dict[str, Any]]:
        with self._lock:
            return [copy.deepcopy(v) for k, v in self._data.items() if k.startswith(prefix)]

    def set(self, key: str, value: dict[str, Any]) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        with self._lock:
            yield

    def __len__(self) -> int:
        return len(self._data)


class JsonFileKeyValueStore:
    """Store persisted as a single JSON document on disk.

    The whole document is rewritten atomically on every mutation. Writers in
    other processes are excluded with ``fcntl.flock`` on a sidecar
    ``<name>.lock`` file; under that lock the document is re-read from disk
    before being changed, so no other writer's keys are lost. Reads pick up
    the latest document whenever the file changed since it was last loaded.
    """

    def __init__(self, path: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file store.

        Parameters
        ----------
        path : str | Path
            JSON file to read from and write to. Created on first write.
        pretty : bool
            Pretty-print JSON output.
        """
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self.pretty = pretty
        self._lock = threading.RLock()
        self._lock_file: IO[str] | None = None
        self._depth = 0
        self._signature: tuple[int, int, int] | None = None
        self._data: dict[str, dict[str, Any]] = {}
        self._reload()

    def _stat(self) -> tuple[int, int, int] | None:
        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise InternalError(f"Cannot read store {self.path}: {e}") from e
        return (st.st_ino, st.st_mtime_ns, st.st_size)

    def _reload(self, force: bool = False) -> None:
        """Load the document again if the file changed on disk."""
        signature = self._stat()
        if signature == self._signature and not force:
            return
        self._data = self._load() if signature is not None else {}
        self._signature = signature

    def _load(self) -> dict[str, dict[str, Any]]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise InternalError(f"Cannot read store {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise InternalError(f"Store {self.path} does not contain a JSON object")
        logger.debug("Loaded %d keys from %s", len(data), self.path)
        return data

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(self._data, f, indent=2, ensure_ascii=False)
                else:
                    json.dump(self._data, f, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise InternalError(f"Cannot write store {self.path}: {e}") from e
        self._signature = self._stat()

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        """Hold the store against every other writer, in this process or another.

        Re-entrant within a thread, so mutations inside the block do not
        block on the lock already held.
        """
        with self._lock:
            if self._depth == 0:
                try:
                    self.path.parent.mkdir(parents=True, exist_ok=True)
                    self._lock_file = open(self.lock_path, "a", encoding="utf-8")
                    fcntl.flock(self._lock_file, fcntl.LOCK_EX)
                except OSError as e:
                    if self._lock_file is not None:
                        self._lock_file.close()
                        self._lock_file = None
                    raise InternalError(f"Cannot lock store {self.path}: {e}") from e
            self._depth += 1
            try:
                if self._depth == 1:
                    self._reload(force=True)
                yield
            finally:
                self._depth -= 1
                if self._depth == 0 and self._lock_file is not None:
                    fcntl.flock(self._lock_file, fcntl.LOCK_UN)
                    self._lock_file.close()
                    self._lock_file = None

    def get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            self._reload()
            value = self._data.get(key)
            return copy.deepcopy(value) if value is not None else None

    def get_by_prefix(self, prefix: str) -> list[dict[str, Any]]:
        with self._lock:
            self._reload()
            return [copy.deepcopy(v) for k, v in self._data.items() if k.startswith(prefix)]

    def set(self, key: str, value: dict[str, Any]) -> None:
        with self.exclusive():
            previous = self._data.get(key)
            self._data[key] = copy.deepcopy(value)
            try:
                self._flush()
            except InternalError:
                # Keep memory consistent with disk
                if previous is None:
                    del self._data[key]
                else:
                    self._data[key] = previous
                raise

    def delete(self, key: str) -> bool:
        with self.exclusive():
            if key not in self._data:
                return False
            previous = self._data.pop(key)
            try:
                self._flush()
            except InternalError:
                self._data[key] = previous
                raise
            return True

    def __len__(self) -> int:
        with self._lock:
            self._reload()
            return len(self._data)
