"""A JSON array file shared between threads and processes.

Every repository rewrites its whole file, so a read-modify-write must not
interleave with another writer, whether that writer is a thread in this
process or a second ``ims`` process (for example ``ims movement out``
while ``ims serve`` is running). ``locked()`` holds a thread lock plus an
exclusive ``flock`` on a ``<name>.lock`` sidecar. Writes go to a temporary
file that replaces the original, so a reader never sees half a file.
"""

from __future__ import annotations

import fcntl
import json
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ims.domain.exceptions import PersistenceError


class JsonFile:

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock_path = path.with_name(path.name + ".lock")
        self._thread_lock = threading.RLock()
        self._depth = 0
        self._ensure()

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the file exclusively; re-entrant within one thread."""
        with self._thread_lock:
            if self._depth:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            fd = self._acquire()
            self._depth = 1
            try:
                yield
            finally:
                self._depth = 0
                self._release(fd)

    def read(self) -> list[dict]:
        with self.locked():
            return self.load()

    def load(self) -> list[dict]:
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Cannot read {self.path}: {exc}") from exc

    def persist(self, records: list[dict]) -> None:
        """Replace the file contents. Call inside ``locked()``."""
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp_path.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise PersistenceError(f"Cannot write {self.path}: {exc}") from exc

    # --- Lock helpers ---------------------------------------------------------

    def _acquire(self) -> int:
        try:
            fd = os.open(self._lock_path, os.O_RDWR | os.O_CREAT, 0o644)
        except OSError as exc:
            raise PersistenceError(f"Cannot open {self._lock_path}: {exc}") from exc
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
        except OSError as exc:
            os.close(fd)
            raise PersistenceError(f"Cannot lock {self._lock_path}: {exc}") from exc
        return fd

    @staticmethod
    def _release(fd: int) -> None:
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)

    def _ensure(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.locked():
            if not self.path.exists():
                self.persist([])
