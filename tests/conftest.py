"""Shared pytest fixtures for wirebox tests."""

import pytest

from wirebox.bindings import BindingRegistry
from wirebox.inspection import ReflectionInspector


@pytest.fixture()
def registry() -> BindingRegistry:
    """Empty, unfrozen binding registry."""
    return BindingRegistry()


@pytest.fixture()
def inspector() -> ReflectionInspector:
    """ReflectionInspector instance."""
    return ReflectionInspector()
