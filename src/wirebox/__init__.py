from wirebox.bindings import Binding, BindingRegistry, FrozenBindings, Lifetime
from wirebox.descriptors import ConstructorDescriptor, InjectionMethodDescriptor
from wirebox.exceptions import (
    WireboxAlreadyFrozenError,
    WireboxAmbiguousConstructorError,
    WireboxCircularDependencyError,
    WireboxConstructionFailedError,
    WireboxDependencyInferenceError,
    WireboxError,
    WireboxInjectionFailedError,
    WireboxInvalidBindingError,
    WireboxInvalidMarkerError,
    WireboxNoUsableConstructorError,
    WireboxUnboundKeyError,
    WireboxUnknownTypeError,
)
from wirebox.injector import Injector
from wirebox.inspection import (
    ConstructorInfo,
    MethodInfo,
    ParameterSpec,
    ReflectionInspector,
    TypeInspector,
)
from wirebox.lock_mode import LockMode
from wirebox.markers import inject, is_injectable
from wirebox.service_key import Component, ServiceKey

__all__ = [
    "Binding",
    "BindingRegistry",
    "Component",
    "ConstructorDescriptor",
    "ConstructorInfo",
    "FrozenBindings",
    "InjectionMethodDescriptor",
    "Injector",
    "Lifetime",
    "LockMode",
    "MethodInfo",
    "ParameterSpec",
    "ReflectionInspector",
    "ServiceKey",
    "TypeInspector",
    "WireboxAlreadyFrozenError",
    "WireboxAmbiguousConstructorError",
    "WireboxCircularDependencyError",
    "WireboxConstructionFailedError",
    "WireboxDependencyInferenceError",
    "WireboxError",
    "WireboxInjectionFailedError",
    "WireboxInvalidBindingError",
    "WireboxInvalidMarkerError",
    "WireboxNoUsableConstructorError",
    "WireboxUnboundKeyError",
    "WireboxUnknownTypeError",
    "inject",
    "is_injectable",
]
