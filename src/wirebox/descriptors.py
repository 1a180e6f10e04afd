from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from wirebox._internal.cache import PublishOnceCache
from wirebox.exceptions import WireboxAmbiguousConstructorError
from wirebox.inspection import ConstructorInfo, MethodInfo, ParameterSpec, TypeInspector

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ConstructorDescriptor:
    """The constructor selected for a concrete type, if any."""

    concrete_type: type[Any]
    constructor: ConstructorInfo | None

    @property
    def parameters(self) -> tuple[ParameterSpec, ...]:
        if self.constructor is None:
            return ()
        return self.constructor.parameters


@dataclass(frozen=True, slots=True)
class InjectionMethodDescriptor:
    """The ``@inject`` methods called on a fresh instance of a concrete type."""

    concrete_type: type[Any]
    methods: tuple[MethodInfo, ...]


def select_constructor(
    concrete_type: type[Any],
    constructors: Sequence[ConstructorInfo],
) -> ConstructorInfo | None:
    """Pick the marked constructor, else a zero-argument one, else nothing.

    Raises:
        WireboxAmbiguousConstructorError: If several constructors are marked.

    """
    marked = [constructor for constructor in constructors if constructor.marked]
    if len(marked) > 1:
        raise WireboxAmbiguousConstructorError(
            concrete_type,
            [constructor.name for constructor in marked],
        )
    if marked:
        return marked[0]

    for constructor in constructors:
        if constructor.accepts_no_arguments:
            return constructor
    return None


class DescriptorCache:
    """Compute and retain constructor and injection-method descriptors per concrete type.

    Descriptors are pure functions of a type's static shape, so threads racing
    on a cold entry compute equal values and keep whichever is published first.
    Failures are not cached.
    """

    def __init__(self, inspector: TypeInspector) -> None:
        self._inspector = inspector
        self._constructors: PublishOnceCache[type[Any], ConstructorDescriptor] = PublishOnceCache()
        self._methods: PublishOnceCache[type[Any], InjectionMethodDescriptor] = PublishOnceCache()

    def constructor_descriptor(self, concrete_type: type[Any]) -> ConstructorDescriptor:
        cached = self._constructors.get(concrete_type)
        if cached is not None:
            return cached

        constructor = select_constructor(
            concrete_type,
            self._inspector.constructors(concrete_type),
        )
        descriptor, published = self._constructors.publish(
            concrete_type,
            ConstructorDescriptor(concrete_type=concrete_type, constructor=constructor),
        )
        if published:
            logger.debug(
                "Constructor descriptor for %s: constructor=%s parameter_count=%d",
                concrete_type.__qualname__,
                constructor.name if constructor is not None else None,
                len(descriptor.parameters),
            )
        return descriptor

    def injection_method_descriptor(self, concrete_type: type[Any]) -> InjectionMethodDescriptor:
        cached = self._methods.get(concrete_type)
        if cached is not None:
            return cached

        descriptor, published = self._methods.publish(
            concrete_type,
            InjectionMethodDescriptor(
                concrete_type=concrete_type,
                methods=tuple(self._inspector.injection_methods(concrete_type)),
            ),
        )
        if published:
            logger.debug(
                "Injection method descriptor for %s: methods=%s",
                concrete_type.__qualname__,
                [method.name for method in descriptor.methods],
            )
        return descriptor

    def __len__(self) -> int:
        return len(self._constructors)
