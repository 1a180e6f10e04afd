"""Tests for Injector resolution and construction."""

import logging
from typing import Annotated

import pytest

from wirebox.bindings import BindingRegistry
from wirebox.exceptions import (
    WireboxConstructionFailedError,
    WireboxInjectionFailedError,
    WireboxNoUsableConstructorError,
    WireboxUnboundKeyError,
    WireboxUnknownTypeError,
)
from wirebox.injector import Injector
from wirebox.markers import inject
from wirebox.service_key import Component, ServiceKey


class Formatter:
    pass


class Writer:
    @inject
    def __init__(self, formatter: Formatter) -> None:
        self.formatter = formatter


class Base:
    pass


class Derived(Base):
    pass


class MessageFormatter:
    @inject
    def __init__(self, name: str) -> None:
        self.name = name

    def format(self, message: str) -> str:
        return f"{self.name}: {message}"


class ConsoleWriter:
    def write(self, message: str) -> str:
        raise NotImplementedError


class RecordingConsoleWriter(ConsoleWriter):
    def __init__(self) -> None:
        self.formatter: MessageFormatter | None = None

    @inject
    def set_message_formatter(self, formatter: MessageFormatter) -> None:
        self.formatter = formatter

    def write(self, message: str) -> str:
        assert self.formatter is not None
        return self.formatter.format(message)


class NoDefaultConstructorNoAnnotation:
    def __init__(self, value: str) -> None:
        self.value = value


class ClassWithAnnotatedConstructor:
    @inject
    def __init__(self, value: str) -> None:
        self.value = value


class ClassWithDependency:
    @inject
    def __init__(self, dependency: ClassWithAnnotatedConstructor) -> None:
        self.dependency = dependency


def _injector(registry: BindingRegistry) -> Injector:
    return Injector(registry.freeze())


class TestBindingPrecedence:
    def test_instance_binding_returns_same_object(self, registry: BindingRegistry) -> None:
        error = RuntimeError()
        registry.bind_instance(Exception, error)
        injector = _injector(registry)

        assert injector.resolve(Exception) is error
        assert injector.resolve(Exception) is error

    def test_singleton_binding_returns_same_object(self, registry: BindingRegistry) -> None:
        registry.bind_singleton(Exception, RuntimeError)
        injector = _injector(registry)

        first = injector.resolve(Exception)

        assert isinstance(first, RuntimeError)
        assert injector.resolve(Exception) is first

    def test_transient_binding_returns_new_objects(self, registry: BindingRegistry) -> None:
        registry.bind_transient(Base, Derived)
        injector = _injector(registry)

        first = injector.resolve(Base)
        second = injector.resolve(Base)

        assert isinstance(first, Derived)
        assert first is not second

    def test_direct_class_binding(self, registry: BindingRegistry) -> None:
        registry.bind_transient(str, str)
        injector = _injector(registry)

        assert injector.resolve(str) == ""

    def test_instance_wins_over_singleton_and_transient(self, registry: BindingRegistry) -> None:
        instance = Derived()
        registry.bind_transient(Base, Derived)
        registry.bind_singleton(Base, Derived)
        registry.bind_instance(Base, instance)
        injector = _injector(registry)

        assert injector.resolve(Base) is instance

    def test_singleton_wins_over_transient(self, registry: BindingRegistry) -> None:
        registry.bind_transient(Base, Derived)
        registry.bind_singleton(Base, Derived)
        injector = _injector(registry)

        assert injector.resolve(Base) is injector.resolve(Base)

    def test_unbound_key_fails(self, registry: BindingRegistry) -> None:
        injector = _injector(registry)

        with pytest.raises(WireboxUnboundKeyError, match="is not bound") as exc_info:
            injector.resolve(str)

        assert exc_info.value.service_key == ServiceKey(str)

    def test_is_bound(self, registry: BindingRegistry) -> None:
        registry.bind_instance(str, "x")
        injector = _injector(registry)

        assert injector.is_bound(str)
        assert not injector.is_bound(int)

    def test_component_keys_resolve_independently(self, registry: BindingRegistry) -> None:
        primary = Annotated[str, Component("primary")]
        registry.bind_instance(primary, "primary")
        registry.bind_instance(str, "default")
        injector = _injector(registry)

        assert injector.resolve(primary) == "primary"
        assert injector.resolve(ServiceKey(str, Component("primary"))) == "primary"
        assert injector.resolve(str) == "default"


class TestConstruction:
    def test_singleton_with_instance_dependency(self, registry: BindingRegistry) -> None:
        formatter = Formatter()
        registry.bind_instance(Formatter, formatter)
        registry.bind_singleton(Writer, Writer)
        injector = _injector(registry)

        first = injector.resolve(Writer)
        second = injector.resolve(Writer)

        assert first is second
        assert first.formatter is formatter

    def test_formatter_instance_value_is_injected(self, registry: BindingRegistry) -> None:
        registry.bind_instance(str, "X")
        registry.bind_singleton(ClassWithAnnotatedConstructor, ClassWithAnnotatedConstructor)
        injector = _injector(registry)

        first = injector.resolve(ClassWithAnnotatedConstructor)

        assert first is injector.resolve(ClassWithAnnotatedConstructor)
        assert first.value == "X"

    def test_nested_dependencies(self, registry: BindingRegistry) -> None:
        registry.bind_self(ClassWithDependency)
        registry.bind_self(ClassWithAnnotatedConstructor)
        registry.bind_transient(str, str)
        injector = _injector(registry)

        instance = injector.resolve(ClassWithDependency)

        assert isinstance(instance.dependency, ClassWithAnnotatedConstructor)
        assert instance.dependency.value == ""

    def test_no_usable_constructor(self, registry: BindingRegistry) -> None:
        registry.bind_self(NoDefaultConstructorNoAnnotation)
        injector = _injector(registry)

        with pytest.raises(WireboxNoUsableConstructorError) as exc_info:
            injector.resolve(NoDefaultConstructorNoAnnotation)

        assert exc_info.value.concrete_type is NoDefaultConstructorNoAnnotation

    def test_unbound_parameter_error_propagates_unchanged(self, registry: BindingRegistry) -> None:
        registry.bind_self(ClassWithAnnotatedConstructor)
        injector = _injector(registry)

        with pytest.raises(WireboxUnboundKeyError) as exc_info:
            injector.resolve(ClassWithAnnotatedConstructor)

        assert exc_info.value.service_key == ServiceKey(str)

    def test_constructor_failure_is_wrapped(self, registry: BindingRegistry) -> None:
        class Exploding:
            def __init__(self) -> None:
                msg = "boom"
                raise ValueError(msg)

        registry.bind_self(Exploding)
        injector = _injector(registry)

        with pytest.raises(WireboxConstructionFailedError, match="Exploding") as exc_info:
            injector.resolve(Exploding)

        assert exc_info.value.concrete_type is Exploding
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_nested_construction_failure_is_not_rewrapped(self, registry: BindingRegistry) -> None:
        class Exploding:
            def __init__(self) -> None:
                raise RuntimeError

        class Outer:
            @inject
            def __init__(self, inner: Exploding) -> None:
                self.inner = inner

        registry.bind_self(Exploding)
        registry.bind_self(Outer)
        injector = _injector(registry)

        with pytest.raises(WireboxConstructionFailedError) as exc_info:
            injector.resolve(Outer)

        assert exc_info.value.concrete_type is Exploding

    def test_default_parameter_used_when_unbound(self, registry: BindingRegistry) -> None:
        class WithDefault:
            @inject
            def __init__(self, formatter: Formatter, name: str = "fallback") -> None:
                self.formatter = formatter
                self.name = name

        registry.bind_self(Formatter)
        registry.bind_self(WithDefault)
        injector = _injector(registry)

        assert injector.resolve(WithDefault).name == "fallback"

    def test_default_parameter_overridden_when_bound(self) -> None:
        class WithDefault:
            @inject
            def __init__(self, name: str = "fallback") -> None:
                self.name = name

        injector = BindingRegistry().bind_self(WithDefault).bind_instance(str, "bound").build_injector()

        assert injector.resolve(WithDefault).name == "bound"

    def test_positional_only_and_keyword_only_parameters(self) -> None:
        class Mixed:
            @inject
            def __init__(self, formatter: Formatter, /, *, name: str) -> None:
                self.formatter = formatter
                self.name = name

        injector = (
            BindingRegistry()
            .bind_self(Formatter)
            .bind_self(Mixed)
            .bind_instance(str, "kw")
            .build_injector()
        )

        instance = injector.resolve(Mixed)

        assert isinstance(instance.formatter, Formatter)
        assert instance.name == "kw"

    def test_classmethod_constructor(self) -> None:
        class Config:
            def __init__(self, name: str, source: str) -> None:
                self.name = name
                self.source = source

            @classmethod
            @inject
            def from_name(cls, name: str) -> "Config":
                return cls(name, "classmethod")

        injector = BindingRegistry().bind_self(Config).bind_instance(str, "app").build_injector()

        config = injector.resolve(Config)

        assert config.name == "app"
        assert config.source == "classmethod"

    def test_construct_bypasses_binding_lookup(self, registry: BindingRegistry) -> None:
        registry.bind_instance(str, "X")
        injector = _injector(registry)

        instance = injector.construct(ClassWithAnnotatedConstructor)

        assert instance.value == "X"


class TestMethodInjection:
    def test_marked_method_is_called_after_construction(self) -> None:
        injector = (
            BindingRegistry()
            .bind_transient(ConsoleWriter, RecordingConsoleWriter)
            .bind_singleton(MessageFormatter, MessageFormatter)
            .bind_instance(str, "Inject Says")
            .build_injector()
        )

        writer = injector.resolve(ConsoleWriter)

        assert isinstance(writer, RecordingConsoleWriter)
        assert writer.write("hello!") == "Inject Says: hello!"
        assert writer.formatter is injector.resolve(MessageFormatter)

    def test_methods_run_base_first_in_definition_order(self) -> None:
        calls: list[str] = []

        class Parent:
            @inject
            def first(self) -> None:
                calls.append("first")

        class Child(Parent):
            @inject
            def second(self, formatter: Formatter) -> None:
                calls.append("second")

            @inject
            def third(self) -> None:
                calls.append("third")

        injector = BindingRegistry().bind_self(Child).bind_self(Formatter).build_injector()

        injector.resolve(Child)

        assert calls == ["first", "second", "third"]

    def test_method_failure_is_wrapped_and_stops_injection(self) -> None:
        calls: list[str] = []

        class Broken:
            @inject
            def failing(self) -> None:
                calls.append("failing")
                msg = "cannot inject"
                raise RuntimeError(msg)

            @inject
            def never_called(self) -> None:
                calls.append("never_called")

        injector = BindingRegistry().bind_self(Broken).build_injector()

        with pytest.raises(WireboxInjectionFailedError, match="failing") as exc_info:
            injector.resolve(Broken)

        assert exc_info.value.concrete_type is Broken
        assert exc_info.value.method_name == "failing"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert calls == ["failing"]

    def test_method_parameter_resolution_failure_propagates(self) -> None:
        class NeedsFormatter:
            @inject
            def set_formatter(self, formatter: Formatter) -> None:
                self.formatter = formatter

        injector = BindingRegistry().bind_self(NeedsFormatter).build_injector()

        with pytest.raises(WireboxUnboundKeyError):
            injector.resolve(NeedsFormatter)

    def test_overridden_unmarked_method_is_not_called(self) -> None:
        class Parent:
            called = False

            @inject
            def hook(self) -> None:
                self.called = True

        class Child(Parent):
            def hook(self) -> None:
                pass

        injector = BindingRegistry().bind_self(Child).build_injector()

        assert injector.resolve(Child).called is False


class TestResolveByName:
    def test_constructs_named_type(self, registry: BindingRegistry) -> None:
        registry.bind_instance(str, "named")
        injector = _injector(registry)

        instance = injector.resolve_by_name(f"{__name__}.ClassWithAnnotatedConstructor")

        assert isinstance(instance, ClassWithAnnotatedConstructor)
        assert instance.value == "named"

    def test_colon_form(self, registry: BindingRegistry) -> None:
        injector = _injector(registry)

        assert isinstance(injector.resolve_by_name(f"{__name__}:Derived"), Derived)

    def test_does_not_use_bindings_for_named_type(self, registry: BindingRegistry) -> None:
        registry.bind_singleton(Derived, Derived)
        injector = _injector(registry)

        first = injector.resolve_by_name(f"{__name__}.Derived")
        second = injector.resolve_by_name(f"{__name__}.Derived")

        assert first is not second

    def test_unknown_type(self, registry: BindingRegistry) -> None:
        injector = _injector(registry)

        with pytest.raises(WireboxUnknownTypeError) as exc_info:
            injector.resolve_by_name(f"{__name__}.DoesNotExist")

        assert exc_info.value.type_name == f"{__name__}.DoesNotExist"

    def test_unknown_module(self, registry: BindingRegistry) -> None:
        injector = _injector(registry)

        with pytest.raises(WireboxUnknownTypeError):
            injector.resolve_by_name("wirebox_missing_module.Thing")

    def test_name_of_non_class(self, registry: BindingRegistry) -> None:
        injector = _injector(registry)

        with pytest.raises(WireboxUnknownTypeError, match="not a class"):
            injector.resolve_by_name(f"{__name__}._injector")


class TestLogging:
    def test_logs_injector_creation(
        self,
        registry: BindingRegistry,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        caplog.set_level(logging.INFO, logger="wirebox.injector")
        registry.bind_instance(str, "x")

        _injector(registry)

        assert "Injector created: instance_bindings=1" in caplog.text

    def test_logs_singleton_publication(
        self,
        registry: BindingRegistry,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        caplog.set_level(logging.DEBUG, logger="wirebox")
        registry.bind_singleton(Base, Derived)
        injector = _injector(registry)

        injector.resolve(Base)

        assert "Singleton published for 'Base'" in caplog.text
        assert "Constructor descriptor for Derived" in caplog.text
