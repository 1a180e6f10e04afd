from __future__ import annotations

import inspect
from typing import Any

from wirebox._internal.type_checks import is_protocol_class, is_runtime_class
from wirebox.exceptions import WireboxInvalidBindingError
from wirebox.service_key import ServiceKey


class BindingValidator:
    """Validates bindings before they are stored in a registry."""

    def validate_concrete_type(self, service_key: ServiceKey, concrete_type: object) -> None:
        """Validate that a concrete type is instantiable and assignable to the key type."""
        if not inspect.isclass(concrete_type):
            msg = f"concrete type must be a class, got {concrete_type!r}."
            raise WireboxInvalidBindingError(service_key, concrete_type, msg)

        if inspect.isabstract(concrete_type):
            msg = f"concrete type '{concrete_type.__qualname__}' cannot be an abstract class."
            raise WireboxInvalidBindingError(service_key, concrete_type, msg)

        key_type = self._checkable_key_type(service_key)
        if key_type is not None and not issubclass(concrete_type, key_type):
            msg = (
                f"'{concrete_type.__qualname__}' is not a subclass of "
                f"'{key_type.__qualname__}'."
            )
            raise WireboxInvalidBindingError(service_key, concrete_type, msg)

    def validate_instance(self, service_key: ServiceKey, instance: object) -> None:
        """Validate that an instance satisfies the key type."""
        key_type = self._checkable_key_type(service_key)
        if key_type is not None and not isinstance(instance, key_type):
            msg = f"{instance!r} is not an instance of '{key_type.__qualname__}'."
            raise WireboxInvalidBindingError(service_key, instance, msg)

    def _checkable_key_type(self, service_key: ServiceKey) -> type[Any] | None:
        # Protocols and non-class tokens are trusted as declared.
        key_type = service_key.value
        if not is_runtime_class(key_type) or is_protocol_class(key_type):
            return None
        return key_type
