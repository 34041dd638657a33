import logging

import pytest

from components import (
    CyclicMembersA,
    CyclicMembersB,
    DefaultOther,
    DerivedFieldInjected,
    EnglishGreeter,
    FieldInjected,
    Greeter,
    MethodInjected,
    MockPrinter,
    Other,
    Printer,
    PropertyInjected,
)
from fabricant import CircularDependency, Container, UnresolvableDependency
from fabricant.domain import FieldTarget, MethodTarget, PropertyTarget, TargetKind
from fabricant.metadata import TypeCatalog


@pytest.fixture
def container() -> Container:
    container = Container()
    container.bind(Printer, MockPrinter).as_singleton()
    return container


def test_marked_fields_are_described():
    targets = TypeCatalog().describe(FieldInjected).targets

    assert targets == (
        FieldTarget("printer", Printer, True),
        FieldTarget("greeter", Greeter, False),
    )


def test_property_and_method_targets_are_described():
    catalog = TypeCatalog()

    (prop,) = catalog.describe(PropertyInjected).targets
    attach, attach_other = catalog.describe(MethodInjected).targets

    assert isinstance(prop, PropertyTarget)
    assert prop.annotation is Printer
    assert isinstance(attach, MethodTarget)
    assert attach.kind is TargetKind.METHOD
    assert [p.name for p in attach.parameters] == ["printer", "greeter", "volume"]
    assert attach_other.required is False


def test_required_field_is_injected(container):
    instance = container.create(FieldInjected)

    assert instance.printer is container.resolve(Printer)
    assert instance.greeter is None
    assert instance.plain is None


def test_optional_field_is_injected_when_bound(container):
    container.bind(Greeter, EnglishGreeter)

    instance = container.create(FieldInjected)

    assert isinstance(instance.greeter, EnglishGreeter)


def test_inherited_fields_are_injected(container):
    instance = container.create(DerivedFieldInjected)

    assert isinstance(instance.printer, MockPrinter)
    assert isinstance(instance.logger, logging.Logger)
    assert instance.logger.name == "components.DerivedFieldInjected"


def test_missing_required_field_raises():
    with pytest.raises(UnresolvableDependency, match="Failed to resolve type Printer"):
        Container().create(FieldInjected)


def test_property_setter_is_injected(container):
    instance = container.create(PropertyInjected)

    assert instance.printer is container.resolve(Printer)


def test_method_is_called_with_resolved_arguments(container):
    container.bind(Greeter, EnglishGreeter)

    instance = container.create(MethodInjected)
    printer, greeter, volume = instance.calls[0]

    assert printer is container.resolve(Printer)
    assert isinstance(greeter, EnglishGreeter)
    assert volume == 3


def test_optional_method_is_skipped_when_unresolvable(container):
    container.bind(Greeter, EnglishGreeter)

    instance = container.create(MethodInjected)

    assert len(instance.calls) == 1


def test_optional_method_is_called_when_resolvable(container):
    container.bind(Greeter, EnglishGreeter)
    container.bind(Other, DefaultOther)

    instance = container.create(MethodInjected)

    assert isinstance(instance.calls[1], DefaultOther)


def test_required_method_raises_when_unresolvable(container):
    with pytest.raises(UnresolvableDependency, match="Failed to resolve type Greeter"):
        container.create(MethodInjected)


def test_cyclic_members_raise(container):
    container.bind(CyclicMembersA)
    container.bind(CyclicMembersB)

    with pytest.raises(CircularDependency, match="CyclicMembersA -> CyclicMembersB -> CyclicMembersA"):
        container.resolve(CyclicMembersA)


def test_singleton_members_may_reference_each_other_once_built(container):
    container.bind(CyclicMembersB)
    a = CyclicMembersA()
    container.bind(CyclicMembersA).from_instance(a)

    b = container.resolve(CyclicMembersB)

    assert b.partner is a
