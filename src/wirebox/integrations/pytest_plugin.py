from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from wirebox.bindings import BindingRegistry
from wirebox.injector import Injector
from wirebox.lock_mode import LockMode


@pytest.fixture()
def wirebox_registry() -> BindingRegistry:
    """Create a per-test binding registry.

    The fixture is function-scoped, so bindings are isolated between tests
    unless users override fixture scope explicitly.

    Returns:
        A new, unfrozen ``BindingRegistry``.

    """
    return BindingRegistry()


@pytest.fixture()
def wirebox_injector_factory(
    wirebox_registry: BindingRegistry,
) -> Callable[..., Injector]:
    """Return a callable that freezes ``wirebox_registry`` into an ``Injector``.

    Declare bindings on ``wirebox_registry`` first, then call the factory once.
    Keyword arguments are forwarded to ``BindingRegistry.build_injector``.
    """

    def factory(*, lock_mode: LockMode | None = None, **options: Any) -> Injector:
        return wirebox_registry.build_injector(lock_mode=lock_mode, **options)

    return factory
