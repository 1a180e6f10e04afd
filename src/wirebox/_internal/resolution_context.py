from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from wirebox.exceptions import WireboxCircularDependencyError


class ResolutionContext:
    """Track the concrete types under construction for one outermost resolve call.

    A context is created by the outermost ``resolve``/``resolve_by_name`` and
    passed down through every nested construction. It is never shared between
    calls, so concurrent resolutions cannot observe each other's stacks.
    """

    __slots__ = ("_held_singleton_locks", "_members", "_stack")

    def __init__(self) -> None:
        self._stack: list[type[Any]] = []
        self._members: set[type[Any]] = set()
        self._held_singleton_locks = 0

    @contextmanager
    def constructing(self, concrete_type: type[Any]) -> Iterator[None]:
        """Hold ``concrete_type`` on the stack for the duration of the block.

        Raises:
            WireboxCircularDependencyError: If the type is already under construction.

        """
        if concrete_type in self._members:
            raise WireboxCircularDependencyError([*self._stack, concrete_type])

        self._stack.append(concrete_type)
        self._members.add(concrete_type)
        try:
            yield
        finally:
            self._stack.pop()
            self._members.discard(concrete_type)

    @contextmanager
    def holding_singleton_lock(self) -> Iterator[None]:
        """Record that this call chain holds a singleton lock for the duration of the block."""
        self._held_singleton_locks += 1
        try:
            yield
        finally:
            self._held_singleton_locks -= 1

    @property
    def holds_singleton_locks(self) -> bool:
        return self._held_singleton_locks > 0

    @property
    def stack(self) -> tuple[type[Any], ...]:
        return tuple(self._stack)

    def __len__(self) -> int:
        return len(self._stack)
