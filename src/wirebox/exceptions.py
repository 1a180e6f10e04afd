from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from wirebox.service_key import ServiceKey


def _type_name(value: Any) -> str:
    return getattr(value, "__qualname__", None) or repr(value)


class WireboxError(Exception):
    """Represent a base class for all wirebox-specific failures.

    Catch this type when you want to handle any wirebox error path without
    matching each concrete exception class individually.
    """


class WireboxAlreadyFrozenError(WireboxError):
    """Signal use of a ``BindingRegistry`` after it was frozen.

    Raised by ``bind_*``, ``freeze`` and ``build_injector`` once the registry
    handed its bindings to a ``FrozenBindings`` snapshot.

    Typical fix is declaring every binding before freezing, or starting a new
    registry.
    """

    def __init__(self) -> None:
        super().__init__("Binding registry is already frozen and cannot be changed or frozen again.")


class WireboxInvalidBindingError(WireboxError):
    """Signal a binding whose value does not satisfy its key.

    Raised by ``bind_transient``/``bind_singleton`` when the concrete type is
    not an instantiable subclass of the key type, and by ``bind_instance``
    when the instance is not an instance of the key type.
    """

    def __init__(self, service_key: ServiceKey, value: Any, reason: str) -> None:
        self.service_key = service_key
        self.value = value
        super().__init__(f"Invalid binding for {service_key}: {reason}")


class WireboxInvalidMarkerError(WireboxError):
    """Signal ``@inject`` applied to something it cannot mark.

    Only functions (``__init__`` or regular methods) and classmethods can be
    marked for injection.
    """

    def __init__(self, target: Any) -> None:
        self.target = target
        super().__init__(
            f"@inject can mark functions and classmethods only, got {target!r}.",
        )


class WireboxUnboundKeyError(WireboxError):
    """Signal that a service key has no binding of any kind.

    Raised by ``Injector.resolve`` when neither an instance, a singleton nor a
    transient binding exists for the requested key, including keys requested
    transitively as constructor or method parameters.
    """

    def __init__(self, service_key: ServiceKey) -> None:
        self.service_key = service_key
        super().__init__(f"Service {service_key} is not bound.")


class WireboxUnknownTypeError(WireboxError):
    """Signal that a type name passed to ``resolve_by_name`` does not exist."""

    def __init__(self, type_name: str, reason: str | None = None) -> None:
        self.type_name = type_name
        msg = f"Unknown type {type_name!r}."
        if reason:
            msg = f"{msg} {reason}"
        super().__init__(msg)


class WireboxNoUsableConstructorError(WireboxError):
    """Signal a concrete type without a marked or zero-argument constructor.

    Typical fixes include marking ``__init__`` (or a classmethod constructor)
    with ``@inject`` or giving every ``__init__`` parameter a default value.
    """

    def __init__(self, concrete_type: type[Any]) -> None:
        self.concrete_type = concrete_type
        super().__init__(
            f"Type '{_type_name(concrete_type)}' has no @inject constructor "
            "and cannot be called without arguments.",
        )


class WireboxAmbiguousConstructorError(WireboxError):
    """Signal more than one ``@inject`` constructor on one concrete type."""

    def __init__(self, concrete_type: type[Any], constructor_names: Sequence[str]) -> None:
        self.concrete_type = concrete_type
        self.constructor_names = tuple(constructor_names)
        names = ", ".join(self.constructor_names)
        super().__init__(
            f"Type '{_type_name(concrete_type)}' has several @inject constructors: {names}.",
        )


class WireboxDependencyInferenceError(WireboxError):
    """Signal a required injectable parameter without a usable annotation.

    Typical fixes include annotating the parameter or giving it a default.
    """

    def __init__(self, target: Any, parameter_name: str, reason: str | None = None) -> None:
        self.target = target
        self.parameter_name = parameter_name
        msg = (
            f"Unable to infer dependency for required parameter '{parameter_name}' "
            f"in '{_type_name(target)}'. Add a type annotation."
        )
        if reason:
            msg = f"{msg} Original annotation error: {reason}"
        super().__init__(msg)


class WireboxCircularDependencyError(WireboxError):
    """Signal a type requested again while it is still under construction.

    ``chain`` holds the types from the outermost one to the repeated one, so
    the repeated type appears twice.
    """

    def __init__(self, chain: Sequence[type[Any]]) -> None:
        self.chain = tuple(chain)
        rendered = " -> ".join(_type_name(item) for item in self.chain)
        super().__init__(f"Circular dependency detected: {rendered}")


class WireboxConstructionFailedError(WireboxError):
    """Signal that a selected constructor itself raised.

    The original exception is preserved as ``__cause__``.
    """

    def __init__(self, concrete_type: type[Any]) -> None:
        self.concrete_type = concrete_type
        super().__init__(f"Constructor of '{_type_name(concrete_type)}' failed.")


class WireboxInjectionFailedError(WireboxError):
    """Signal that an ``@inject`` method raised during post-construction injection.

    The original exception is preserved as ``__cause__``.
    """

    def __init__(self, concrete_type: type[Any], method_name: str) -> None:
        self.concrete_type = concrete_type
        self.method_name = method_name
        super().__init__(
            f"Could not inject into '{_type_name(concrete_type)}' with method '{method_name}'.",
        )
