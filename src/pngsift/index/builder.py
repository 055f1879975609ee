"""Thread-safe accumulation of per-file metadata."""

from __future__ import annotations

import threading
from typing import Dict


class SharedIndex:
    """Mapping from image identity to metadata text, safe for concurrent writers.

    The lock only guards the dict assignment itself; callers are expected to
    do their parsing before calling :meth:`merge`. Read the result with
    :meth:`snapshot` once every writer has finished.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, str] = {}
        self._lock = threading.Lock()

    def merge(self, identity: str, metadata: str) -> None:
        with self._lock:
            self._entries[identity] = metadata

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._entries)

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
