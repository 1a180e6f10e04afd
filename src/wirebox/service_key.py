from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, NamedTuple, get_args, get_origin


class Component(NamedTuple):
    """Differentiate several bindings for the same base type.

    Attach ``Component`` metadata to ``typing.Annotated`` so wirebox treats each
    annotated key as distinct.

    Examples:
        .. code-block:: python

            from typing import Annotated, TypeAlias


            class Database: ...


            ReplicaDb: TypeAlias = Annotated[Database, Component("replica")]
            PrimaryDb: TypeAlias = Annotated[Database, Component("primary")]

    """

    value: Any


@dataclass(frozen=True, slots=True)
class ServiceKey:
    """Identify a bindable service.

    Equality follows the wrapped value (usually a class, compared by identity)
    and the optional component.
    """

    value: Any
    component: Component | None = None

    @classmethod
    def from_value(cls, value: Any) -> ServiceKey:
        """Normalize a type, ``Annotated`` alias or existing key into a ``ServiceKey``."""
        if isinstance(value, ServiceKey):
            return value

        if get_origin(value) is Annotated:
            inner, *metadata = get_args(value)
            components = [item for item in metadata if isinstance(item, Component)]
            if components:
                return cls(value=inner, component=components[-1])
            return cls(value=inner)

        return cls(value=value)

    def __str__(self) -> str:
        name = getattr(self.value, "__qualname__", None) or repr(self.value)
        if self.component is not None:
            return f"'{name}' (component={self.component.value!r})"
        return f"'{name}'"
