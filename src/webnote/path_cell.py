from __future__ import annotations

import threading
from pathlib import Path


class FilePathCell:
    """
    Holds the note's file path; it can be set at most once per process.

    ``get`` reads without locking, so a load never waits behind a save that is
    sitting in the native dialog. ``try_init`` does its check-then-set under a
    lock, which makes the unset -> set transition linearizable: of any number
    of racing callers exactly one gets ``True`` and everyone afterwards sees
    that caller's path.
    """

    __slots__ = ("_lock", "_value")

    def __init__(self, initial: Path | None = None) -> None:
        self._lock = threading.Lock()
        self._value: Path | None = initial

    def get(self) -> Path | None:
        return self._value

    @property
    def is_set(self) -> bool:
        return self._value is not None

    def try_init(self, path: Path) -> bool:
        with self._lock:
            if self._value is not None:
                return False
            self._value = path
            return True

    def __repr__(self) -> str:
        return f"FilePathCell({self._value!r})"


__all__ = ["FilePathCell"]
