from __future__ import annotations

import pytest

from wirebox._internal.resolution_context import ResolutionContext
from wirebox.exceptions import WireboxCircularDependencyError


class First:
    pass


class Second:
    pass


def test_stack_tracks_nested_construction() -> None:
    context = ResolutionContext()

    with context.constructing(First), context.constructing(Second):
        assert context.stack == (First, Second)
        assert len(context) == 2

    assert context.stack == ()


def test_reentering_a_type_reports_full_chain() -> None:
    context = ResolutionContext()

    with context.constructing(First), context.constructing(Second):
        with pytest.raises(WireboxCircularDependencyError) as exc_info:
            with context.constructing(First):
                pass

        assert context.stack == (First, Second)

    assert exc_info.value.chain == (First, Second, First)


def test_stack_is_unwound_when_block_raises() -> None:
    context = ResolutionContext()

    with pytest.raises(RuntimeError):
        with context.constructing(First):
            raise RuntimeError("boom")

    assert len(context) == 0
    with context.constructing(First):
        assert context.stack == (First,)


def test_sibling_constructions_of_same_type_are_allowed() -> None:
    context = ResolutionContext()

    with context.constructing(Second):
        with context.constructing(First):
            pass
        with context.constructing(First):
            assert context.stack == (Second, First)


def test_holding_singleton_lock_is_counted_and_released() -> None:
    context = ResolutionContext()

    assert not context.holds_singleton_locks
    with context.holding_singleton_lock():
        with context.holding_singleton_lock():
            assert context.holds_singleton_locks
        assert context.holds_singleton_locks

    assert not context.holds_singleton_locks


def test_holding_singleton_lock_is_released_when_block_raises() -> None:
    context = ResolutionContext()

    with pytest.raises(RuntimeError):
        with context.holding_singleton_lock():
            raise RuntimeError("boom")

    assert not context.holds_singleton_locks
