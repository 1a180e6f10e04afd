from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum, auto
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from typing_extensions import Self

from wirebox.exceptions import WireboxAlreadyFrozenError, WireboxInvalidBindingError
from wirebox.service_key import ServiceKey
from wirebox.validators import BindingValidator

if TYPE_CHECKING:
    from wirebox.inspection import TypeInspector
    from wirebox.injector import Injector
    from wirebox.lock_mode import LockMode


class Lifetime(Enum):
    """Define how the injector produces the value of a binding."""

    INSTANCE = auto()
    """Return the pre-built instance unchanged."""

    SINGLETON = auto()
    """Construct once on first resolution and return the retained instance afterwards."""

    TRANSIENT = auto()
    """Construct a new instance on every resolution."""


@dataclass(frozen=True, slots=True)
class Binding:
    """One declared binding for a service key."""

    service_key: ServiceKey
    lifetime: Lifetime
    concrete_type: type[Any] | None = None
    instance: Any = None


class FrozenBindings:
    """Immutable snapshot of the bindings declared on a ``BindingRegistry``.

    Lookups apply the fixed precedence instance, singleton, transient.
    """

    __slots__ = ("_instance", "_singleton", "_transient")

    def __init__(
        self,
        *,
        transient: dict[ServiceKey, Binding],
        singleton: dict[ServiceKey, Binding],
        instance: dict[ServiceKey, Binding],
    ) -> None:
        self._transient = MappingProxyType(dict(transient))
        self._singleton = MappingProxyType(dict(singleton))
        self._instance = MappingProxyType(dict(instance))

    @property
    def transient(self) -> Mapping[ServiceKey, Binding]:
        return self._transient

    @property
    def singleton(self) -> Mapping[ServiceKey, Binding]:
        return self._singleton

    @property
    def instance(self) -> Mapping[ServiceKey, Binding]:
        return self._instance

    def lookup(self, service_key: ServiceKey) -> Binding | None:
        """Return the binding that wins for ``service_key``, if any."""
        for table in (self._instance, self._singleton, self._transient):
            binding = table.get(service_key)
            if binding is not None:
                return binding
        return None

    def __contains__(self, service_key: object) -> bool:
        return any(
            service_key in table for table in (self._instance, self._singleton, self._transient)
        )

    def __iter__(self) -> Iterator[Binding]:
        for table in (self._instance, self._singleton, self._transient):
            yield from table.values()

    def __len__(self) -> int:
        return len(self._instance) + len(self._singleton) + len(self._transient)

    def __repr__(self) -> str:
        return (
            f"FrozenBindings(instance={len(self._instance)}, "
            f"singleton={len(self._singleton)}, transient={len(self._transient)})"
        )


@dataclass(slots=True)
class _Tables:
    transient: dict[ServiceKey, Binding]
    singleton: dict[ServiceKey, Binding]
    instance: dict[ServiceKey, Binding]


class BindingRegistry:
    """Collect bindings and freeze them into an immutable snapshot.

    Keys may be classes, ``Annotated[T, Component(...)]`` aliases or
    ``ServiceKey`` values. Registering a key twice in the same table replaces
    the earlier binding. Freezing hands the tables over to ``FrozenBindings``;
    the registry cannot be used afterwards.

    Examples:
        .. code-block:: python

            registry = BindingRegistry()
            registry.bind_transient(ConsoleWriter, SystemOutConsoleWriter)
            registry.bind_singleton(MessageFormatter, MessageFormatter)
            registry.bind_instance(str, "Inject Says")
            injector = registry.build_injector()

            writer = injector.resolve(ConsoleWriter)

    """

    def __init__(self, validator: BindingValidator | None = None) -> None:
        self._validator = validator or BindingValidator()
        self._tables: _Tables | None = _Tables(transient={}, singleton={}, instance={})

    def bind_transient(self, key: Any, concrete_type: type[Any]) -> Self:
        """Bind ``key`` to a concrete type constructed on every resolution.

        Raises:
            WireboxInvalidBindingError: If the concrete type is not an
                instantiable subclass of the key type.
            WireboxAlreadyFrozenError: If the registry was already frozen.

        """
        tables = self._mutable_tables()
        service_key = ServiceKey.from_value(key)
        self._validator.validate_concrete_type(service_key, concrete_type)
        tables.transient[service_key] = Binding(
            service_key=service_key,
            lifetime=Lifetime.TRANSIENT,
            concrete_type=concrete_type,
        )
        return self

    def bind_singleton(self, key: Any, concrete_type: type[Any]) -> Self:
        """Bind ``key`` to a concrete type constructed once and then reused.

        Raises:
            WireboxInvalidBindingError: If the concrete type is not an
                instantiable subclass of the key type.
            WireboxAlreadyFrozenError: If the registry was already frozen.

        """
        tables = self._mutable_tables()
        service_key = ServiceKey.from_value(key)
        self._validator.validate_concrete_type(service_key, concrete_type)
        tables.singleton[service_key] = Binding(
            service_key=service_key,
            lifetime=Lifetime.SINGLETON,
            concrete_type=concrete_type,
        )
        return self

    def bind_instance(self, key: Any, instance: Any) -> Self:
        """Bind ``key`` to a pre-built instance returned as is.

        Raises:
            WireboxInvalidBindingError: If the instance does not satisfy the key type.
            WireboxAlreadyFrozenError: If the registry was already frozen.

        """
        tables = self._mutable_tables()
        service_key = ServiceKey.from_value(key)
        self._validator.validate_instance(service_key, instance)
        tables.instance[service_key] = Binding(
            service_key=service_key,
            lifetime=Lifetime.INSTANCE,
            instance=instance,
        )
        return self

    def bind_self(self, concrete_type: type[Any], lifetime: Lifetime = Lifetime.TRANSIENT) -> Self:
        """Bind a concrete type to itself with a transient or singleton lifetime."""
        if lifetime is Lifetime.SINGLETON:
            return self.bind_singleton(concrete_type, concrete_type)
        if lifetime is Lifetime.TRANSIENT:
            return self.bind_transient(concrete_type, concrete_type)
        msg = f"bind_self supports TRANSIENT and SINGLETON lifetimes, got {lifetime}."
        raise WireboxInvalidBindingError(ServiceKey.from_value(concrete_type), concrete_type, msg)

    def freeze(self) -> FrozenBindings:
        """Return the immutable snapshot and retire this registry.

        Raises:
            WireboxAlreadyFrozenError: If the registry was already frozen.

        """
        tables = self._mutable_tables()
        self._tables = None
        return FrozenBindings(
            transient=tables.transient,
            singleton=tables.singleton,
            instance=tables.instance,
        )

    def build_injector(
        self,
        *,
        inspector: TypeInspector | None = None,
        lock_mode: LockMode | None = None,
    ) -> Injector:
        """Freeze the registry and create an ``Injector`` over the snapshot."""
        from wirebox.injector import Injector  # noqa: PLC0415

        bindings = self.freeze()
        if lock_mode is None:
            return Injector(bindings, inspector=inspector)
        return Injector(bindings, inspector=inspector, lock_mode=lock_mode)

    @property
    def is_frozen(self) -> bool:
        return self._tables is None

    def _mutable_tables(self) -> _Tables:
        if self._tables is None:
            raise WireboxAlreadyFrozenError
        return self._tables
