from __future__ import annotations

import copy
import threading
from collections import OrderedDict
from typing import Any

"""Size-bounded parse cache keyed by the raw JSON text.

Eviction is oldest-inserted-first. Hits return a deep copy so two rows with
the same ``old_json`` text never share one mutable dict. The cache is a pure
optimisation: a store without one produces identical output.
"""

__all__ = [
    "ParseCache",
]


class ParseCache:
    """Insertion-ordered bounded map guarded by a lock.

    Safe to share between threads working on disjoint rows.
    """

    def __init__(self, max_size: int = 100) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}")
        self.max_size = max_size
        self._entries: OrderedDict[str, dict[str, Any]] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                self.misses += 1
                return None
            self.hits += 1
        return copy.deepcopy(value)

    def put(self, key: str, value: dict[str, Any]) -> None:
        stored = copy.deepcopy(value)
        with self._lock:
            if key in self._entries:
                # 재삽입은 순서를 바꾸지 않음 (insertion order 기준 eviction)
                self._entries[key] = stored
                return
            while len(self._entries) >= self.max_size:
                self._entries.popitem(last=False)
            self._entries[key] = stored

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
