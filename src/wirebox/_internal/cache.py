from __future__ import annotations

import threading
from collections.abc import Hashable
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class PublishOnceCache(Generic[K, V]):
    """Map keys to values that are published once and never replaced.

    Reads are lock-free. ``publish`` inserts under a lock only when the key is
    absent and returns whichever value ended up retained, so concurrent
    producers may compute redundantly but every caller sees the same value.
    """

    __slots__ = ("_lock", "_values")

    def __init__(self) -> None:
        self._values: dict[K, V] = {}
        self._lock = threading.Lock()

    def get(self, key: K, default: V | None = None) -> V | None:
        return self._values.get(key, default)

    def publish(self, key: K, value: V) -> tuple[V, bool]:
        """Insert ``value`` when ``key`` is absent.

        Returns:
            The retained value and whether ``value`` is the one retained.

        """
        with self._lock:
            if key in self._values:
                return self._values[key], False
            self._values[key] = value
            return value, True

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)
