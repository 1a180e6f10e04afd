from __future__ import annotations

import inspect
import pkgutil
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from inspect import Parameter
from typing import Any, Protocol, get_type_hints, runtime_checkable

from wirebox.exceptions import (
    WireboxDependencyInferenceError,
    WireboxInvalidMarkerError,
    WireboxUnknownTypeError,
)
from wirebox.markers import is_injectable
from wirebox.service_key import ServiceKey

_MISSING_ANNOTATION: Any = object()
_CONSTRUCTOR_NAMES = {"__init__", "__new__"}
_SKIPPED_KINDS = {Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD}
_ZERO_ARGUMENT_BUILTINS = frozenset(
    {object, bool, int, float, complex, str, bytes, bytearray, list, tuple, dict, set, frozenset},
)


@dataclass(frozen=True, slots=True)
class ParameterSpec:
    """One injectable parameter of a constructor or method."""

    name: str
    service_key: ServiceKey
    kind: inspect._ParameterKind
    default: Any = Parameter.empty

    @property
    def has_default(self) -> bool:
        return self.default is not Parameter.empty


@dataclass(frozen=True, slots=True)
class ConstructorInfo:
    """A way to build instances of a concrete type.

    ``factory`` is called with resolved arguments and returns the new instance.
    ``parameters`` is only populated for marked constructors; unmarked ones are
    usable solely when ``accepts_no_arguments`` is true.
    """

    name: str
    factory: Callable[..., Any]
    parameters: tuple[ParameterSpec, ...]
    marked: bool
    accepts_no_arguments: bool


@dataclass(frozen=True, slots=True)
class MethodInfo:
    """A method marked for post-construction injection."""

    name: str
    parameters: tuple[ParameterSpec, ...]


@runtime_checkable
class TypeInspector(Protocol):
    """Describe constructible types for the injector.

    The default implementation is ``ReflectionInspector``. Provide another one
    to supply descriptors explicitly, for example from a registration table.
    """

    def constructors(self, concrete_type: type[Any]) -> Sequence[ConstructorInfo]: ...

    def injection_methods(self, concrete_type: type[Any]) -> Sequence[MethodInfo]: ...

    def load_type(self, type_name: str) -> type[Any]: ...


class ReflectionInspector:
    """Discover constructors and ``@inject`` methods through runtime introspection.

    Constructors are the class call itself (``__init__``/``__new__``) and every
    classmethod marked with ``@inject``. Injection methods are the other
    marked functions, ordered base classes first and by definition order
    within a class. Marked methods inherited from base classes are injected
    too, not only the ones the concrete type declares itself, unless the
    concrete type overrides them without the mark.
    """

    def constructors(self, concrete_type: type[Any]) -> list[ConstructorInfo]:
        init = concrete_type.__init__
        init_marked = is_injectable(init)
        constructors = [
            ConstructorInfo(
                name="__init__",
                factory=concrete_type,
                parameters=(
                    self._parameters(owner=init, function=init) if init_marked else ()
                ),
                marked=init_marked,
                accepts_no_arguments=self._accepts_no_arguments(concrete_type),
            ),
        ]

        for name, member in self._members(concrete_type):
            if not isinstance(member, classmethod) or not is_injectable(member):
                continue
            function = member.__func__
            parameters = self._parameters(owner=function, function=function)
            constructors.append(
                ConstructorInfo(
                    name=name,
                    factory=getattr(concrete_type, name),
                    parameters=parameters,
                    marked=True,
                    accepts_no_arguments=not parameters,
                ),
            )

        return constructors

    def injection_methods(self, concrete_type: type[Any]) -> list[MethodInfo]:
        methods: list[MethodInfo] = []
        for name, member in self._members(concrete_type):
            if name in _CONSTRUCTOR_NAMES or isinstance(member, classmethod):
                continue
            if isinstance(member, staticmethod):
                if is_injectable(member):
                    raise WireboxInvalidMarkerError(member)
                continue
            if inspect.isfunction(member) and is_injectable(member):
                methods.append(
                    MethodInfo(
                        name=name,
                        parameters=self._parameters(owner=member, function=member),
                    ),
                )
        return methods

    def load_type(self, type_name: str) -> type[Any]:
        try:
            loaded = pkgutil.resolve_name(type_name)
        except (ImportError, AttributeError, ValueError) as error:
            raise WireboxUnknownTypeError(type_name, str(error)) from error

        if not inspect.isclass(loaded):
            raise WireboxUnknownTypeError(type_name, f"Resolved to {loaded!r}, which is not a class.")
        return loaded

    def _members(self, concrete_type: type[Any]) -> Iterator[tuple[str, Any]]:
        """Yield effective class attributes, base classes first.

        A name keeps the position of its first definition while the value comes
        from the most derived class, so overrides replace inherited members.
        """
        mro = [klass for klass in concrete_type.__mro__ if klass is not object]
        seen: set[str] = set()
        for klass in reversed(mro):
            for name in vars(klass):
                if name in seen:
                    continue
                seen.add(name)
                yield name, inspect.getattr_static(concrete_type, name)

    def _accepts_no_arguments(self, concrete_type: type[Any]) -> bool:
        try:
            signature = inspect.signature(concrete_type)
        except (TypeError, ValueError):
            # Builtin types such as ``str`` or ``dict`` may expose no signature.
            return concrete_type in _ZERO_ARGUMENT_BUILTINS

        return not any(
            self._is_required(parameter) for parameter in signature.parameters.values()
        )

    def _parameters(self, *, owner: Any, function: Callable[..., Any]) -> tuple[ParameterSpec, ...]:
        # Marked members are read unbound, so the first parameter is self or cls.
        parameters = list(inspect.signature(function).parameters.values())[1:]
        annotations, annotation_error = self._resolved_type_hints(function)

        specs: list[ParameterSpec] = []
        for parameter in parameters:
            if parameter.kind in _SKIPPED_KINDS:
                continue
            annotation = annotations.get(parameter.name, _MISSING_ANNOTATION)
            if annotation is _MISSING_ANNOTATION:
                raw_annotation = parameter.annotation
                if raw_annotation is not Parameter.empty and not isinstance(raw_annotation, str):
                    annotation = raw_annotation

            has_default = parameter.default is not Parameter.empty
            if annotation is _MISSING_ANNOTATION:
                if has_default:
                    continue
                raise WireboxDependencyInferenceError(
                    owner,
                    parameter.name,
                    str(annotation_error) if annotation_error is not None else None,
                )

            specs.append(
                ParameterSpec(
                    name=parameter.name,
                    service_key=ServiceKey.from_value(annotation),
                    kind=parameter.kind,
                    default=parameter.default,
                ),
            )
        return tuple(specs)

    def _resolved_type_hints(
        self,
        function: Callable[..., Any],
    ) -> tuple[dict[str, Any], Exception | None]:
        try:
            return get_type_hints(function, include_extras=True), None
        except (AttributeError, NameError, TypeError) as error:
            return {}, error

    def _is_required(self, parameter: Parameter) -> bool:
        return parameter.kind not in _SKIPPED_KINDS and parameter.default is Parameter.empty
