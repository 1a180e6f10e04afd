from __future__ import annotations

import logging
import threading
from inspect import Parameter
from typing import Any, TypeVar, cast, overload

from wirebox._internal.cache import PublishOnceCache
from wirebox._internal.resolution_context import ResolutionContext
from wirebox.bindings import Binding, FrozenBindings, Lifetime
from wirebox.descriptors import DescriptorCache
from wirebox.exceptions import (
    WireboxConstructionFailedError,
    WireboxInjectionFailedError,
    WireboxNoUsableConstructorError,
    WireboxUnboundKeyError,
)
from wirebox.inspection import ParameterSpec, ReflectionInspector, TypeInspector
from wirebox.lock_mode import LockMode
from wirebox.service_key import ServiceKey

T = TypeVar("T")

logger = logging.getLogger(__name__)
_MISSING: Any = object()


class Injector:
    """Build fully wired objects from a frozen set of bindings.

    ``resolve`` looks the key up with a fixed precedence: instance bindings
    are returned as is, singleton bindings are constructed once and retained,
    transient bindings are constructed on every call. Construction picks the
    ``@inject`` constructor (else a zero-argument one), resolves its parameters
    recursively, calls it and then calls every ``@inject`` method on the new
    instance with resolved arguments.

    An injector is safe to share between threads. Descriptor and singleton
    caches only grow; each outermost call tracks its own construction stack to
    report circular dependencies.

    Examples:
        .. code-block:: python

            registry = BindingRegistry()
            registry.bind_instance(Formatter, Formatter("X"))
            registry.bind_singleton(Writer, Writer)
            injector = Injector(registry.freeze())

            assert injector.resolve(Writer) is injector.resolve(Writer)

    """

    def __init__(
        self,
        bindings: FrozenBindings,
        *,
        inspector: TypeInspector | None = None,
        lock_mode: LockMode = LockMode.NONE,
    ) -> None:
        """Create an injector over a frozen binding snapshot.

        Args:
            bindings: Snapshot produced by ``BindingRegistry.freeze``.
            inspector: Capability used to enumerate constructors, injection
                methods and to load types by name. Defaults to
                ``ReflectionInspector``.
            lock_mode: Singleton construction strategy, see ``LockMode``.

        """
        self._bindings = bindings
        self._inspector = inspector or ReflectionInspector()
        self._lock_mode = lock_mode
        self._descriptors = DescriptorCache(self._inspector)
        self._singletons: PublishOnceCache[ServiceKey, Any] = PublishOnceCache()
        self._singleton_locks: dict[ServiceKey, threading.RLock] = {}
        self._singleton_locks_lock = threading.Lock()

        logger.info(
            "Injector created: instance_bindings=%d singleton_bindings=%d "
            "transient_bindings=%d lock_mode=%s",
            len(bindings.instance),
            len(bindings.singleton),
            len(bindings.transient),
            lock_mode.value,
        )

    @property
    def bindings(self) -> FrozenBindings:
        return self._bindings

    @property
    def lock_mode(self) -> LockMode:
        return self._lock_mode

    @overload
    def resolve(self, key: type[T]) -> T: ...

    @overload
    def resolve(self, key: Any) -> Any: ...

    def resolve(self, key: Any) -> Any:
        """Return an object for ``key`` following the binding precedence.

        Args:
            key: A class, an ``Annotated[T, Component(...)]`` alias or a ``ServiceKey``.

        Raises:
            WireboxUnboundKeyError: If no binding exists for the key or for any
                dependency reached while constructing it.
            WireboxCircularDependencyError: If a type is reached again while it
                is still under construction.
            WireboxNoUsableConstructorError: If a type to construct has neither
                an ``@inject`` nor a zero-argument constructor.
            WireboxConstructionFailedError: If a constructor raised.
            WireboxInjectionFailedError: If an ``@inject`` method raised.

        """
        return self._resolve(ServiceKey.from_value(key), ResolutionContext())

    def resolve_by_name(self, type_name: str) -> Any:
        """Load a concrete type by dotted name and construct it.

        The named type is constructed directly without a binding lookup; its
        dependencies still resolve through the bindings.

        Args:
            type_name: ``"package.module.Class"`` or ``"package.module:Outer.Inner"``.

        Raises:
            WireboxUnknownTypeError: If the name does not refer to a class.

        """
        concrete_type = self._inspector.load_type(type_name)
        return self._construct(concrete_type, ResolutionContext())

    def construct(self, concrete_type: type[T]) -> T:
        """Construct and inject ``concrete_type`` without a binding lookup for it."""
        return self._construct(concrete_type, ResolutionContext())

    def is_bound(self, key: Any) -> bool:
        """Return whether any binding exists for ``key``."""
        return ServiceKey.from_value(key) in self._bindings

    def _resolve(self, service_key: ServiceKey, context: ResolutionContext) -> Any:
        binding = self._bindings.lookup(service_key)
        if binding is None:
            raise WireboxUnboundKeyError(service_key)

        if binding.lifetime is Lifetime.INSTANCE:
            return binding.instance
        if binding.lifetime is Lifetime.SINGLETON:
            return self._resolve_singleton(binding, context)
        return self._construct(cast("type[Any]", binding.concrete_type), context)

    def _resolve_singleton(self, binding: Binding, context: ResolutionContext) -> Any:
        service_key = binding.service_key
        cached = self._singletons.get(service_key, _MISSING)
        if cached is not _MISSING:
            return cached

        if self._lock_mode is LockMode.THREAD:
            lock = self._get_singleton_lock(service_key)
            # A chain that already holds a singleton lock never waits for another one,
            # otherwise two threads entering a cycle from opposite ends block each other.
            if lock.acquire(blocking=not context.holds_singleton_locks):
                try:
                    with context.holding_singleton_lock():
                        cached = self._singletons.get(service_key, _MISSING)
                        if cached is not _MISSING:
                            return cached
                        instance = self._construct(
                            cast("type[Any]", binding.concrete_type),
                            context,
                        )
                        return self._publish_singleton(service_key, instance)
                finally:
                    lock.release()

            logger.debug(
                "Singleton lock for %s is held by another thread, constructing without it",
                service_key,
            )

        instance = self._construct(cast("type[Any]", binding.concrete_type), context)
        return self._publish_singleton(service_key, instance)

    def _publish_singleton(self, service_key: ServiceKey, instance: Any) -> Any:
        retained, published = self._singletons.publish(service_key, instance)
        if published:
            logger.debug("Singleton published for %s", service_key)
        else:
            logger.debug(
                "Discarded singleton instance for %s, another one was published first",
                service_key,
            )
        return retained

    def _get_singleton_lock(self, service_key: ServiceKey) -> threading.RLock:
        lock = self._singleton_locks.get(service_key)
        if lock is None:
            with self._singleton_locks_lock:
                lock = self._singleton_locks.get(service_key)
                if lock is None:
                    lock = threading.RLock()
                    self._singleton_locks[service_key] = lock
        return lock

    def _construct(self, concrete_type: type[Any], context: ResolutionContext) -> Any:
        descriptor = self._descriptors.constructor_descriptor(concrete_type)

        with context.constructing(concrete_type):
            constructor = descriptor.constructor
            if constructor is None:
                raise WireboxNoUsableConstructorError(concrete_type)

            args, kwargs = self._resolve_arguments(constructor.parameters, context)
            try:
                instance = constructor.factory(*args, **kwargs)
            except Exception as error:
                raise WireboxConstructionFailedError(concrete_type) from error

            self._inject_methods(concrete_type, instance, context)

        return instance

    def _inject_methods(
        self,
        concrete_type: type[Any],
        instance: Any,
        context: ResolutionContext,
    ) -> None:
        descriptor = self._descriptors.injection_method_descriptor(concrete_type)
        for method in descriptor.methods:
            args, kwargs = self._resolve_arguments(method.parameters, context)
            try:
                getattr(instance, method.name)(*args, **kwargs)
            except Exception as error:
                raise WireboxInjectionFailedError(concrete_type, method.name) from error

    def _resolve_arguments(
        self,
        parameters: tuple[ParameterSpec, ...],
        context: ResolutionContext,
    ) -> tuple[list[Any], dict[str, Any]]:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for parameter in parameters:
            if parameter.has_default and parameter.service_key not in self._bindings:
                # Unbound optional parameters keep their default value.
                if parameter.kind is Parameter.POSITIONAL_ONLY:
                    args.append(parameter.default)
                continue

            value = self._resolve(parameter.service_key, context)
            if parameter.kind is Parameter.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[parameter.name] = value
        return args, kwargs

