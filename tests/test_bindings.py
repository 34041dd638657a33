import pytest

from components import EnglishGreeter, Greeter, Lobby, LoudGreeter, Shape
from fabricant import BindingConflict, BindingState, InvalidBindingShape
from fabricant.bindings import (
    BindingRegistry,
    FactoryBinding,
    FactoryBindingBuilder,
    ObjectBinding,
    ObjectBindingBuilder,
)


@pytest.fixture
def binding() -> ObjectBinding:
    return ObjectBinding(Greeter, EnglishGreeter)


def test_new_binding_is_unbound_transient(binding):
    assert binding.state is BindingState.UNBOUND
    assert not binding.singleton
    assert not binding.immediate
    assert binding.instance is None


def test_singleton_flag_configures_binding(binding):
    binding.set_singleton(True)

    assert binding.state is BindingState.CONFIGURED
    assert binding.singleton


def test_instance_locks_binding(binding):
    greeter = EnglishGreeter()
    binding.set_instance(greeter)

    assert binding.locked
    assert binding.singleton
    assert binding.instance is greeter


def test_instance_given_at_construction_locks_binding():
    greeter = EnglishGreeter()
    binding = ObjectBinding(Greeter, EnglishGreeter, greeter)

    assert binding.state is BindingState.LOCKED
    assert binding.instance is greeter


def test_locked_binding_refuses_new_instance(binding):
    binding.set_instance(EnglishGreeter())

    with pytest.raises(BindingConflict, match="after it has been locked"):
        binding.set_instance(EnglishGreeter())


def test_locked_binding_refuses_singleton_change(binding):
    binding.set_instance(EnglishGreeter())

    with pytest.raises(BindingConflict, match="singleton setting of binding for Greeter"):
        binding.set_singleton(False)


def test_unchanged_values_are_accepted_after_lock(binding):
    greeter = EnglishGreeter()
    binding.set_instance(greeter)

    binding.set_instance(greeter)
    binding.set_singleton(True)

    assert binding.instance is greeter


def test_builder_chains_configuration(binding):
    builder = ObjectBindingBuilder(binding)

    result = builder.as_singleton().immediate().when_injected_into(Lobby, Shape)

    assert result is builder
    assert builder.binding.singleton
    assert builder.binding.immediate
    assert builder.binding.allowed_injectors == [Lobby, Shape]


def test_builder_from_instance(binding):
    greeter = EnglishGreeter()

    ObjectBindingBuilder(binding).from_instance(greeter)

    assert binding.instance is greeter


def test_factory_builder_restricts_injectors():
    binding = FactoryBinding(Greeter, EnglishGreeter, EnglishGreeter)

    FactoryBindingBuilder(binding).when_injected_into(Lobby)

    assert binding.allowed_injectors == [Lobby]


def test_registry_refuses_duplicate_key():
    registry = BindingRegistry()
    registry.insert(Greeter, ObjectBinding(Greeter, EnglishGreeter))

    with pytest.raises(BindingConflict, match="Type Greeter is already bound"):
        registry.insert(Greeter, ObjectBinding(Greeter, LoudGreeter))


def test_registry_exact_lookup():
    registry = BindingRegistry()
    binding = ObjectBinding(Greeter, EnglishGreeter)
    registry.insert(Greeter, binding)

    assert registry.lookup_exact(Greeter) is binding
    assert registry.lookup_exact(EnglishGreeter) is None
    assert Greeter in registry
    assert len(registry) == 1
    assert list(registry) == [Greeter]


def test_registry_structural_lookup_needs_single_candidate():
    registry = BindingRegistry()
    greeter = ObjectBinding(Greeter, EnglishGreeter)
    registry.insert(Greeter, greeter)

    assert registry.find(LoudGreeter) is None
    assert registry.find(LoudGreeter, structural=True) is greeter

    registry.insert(EnglishGreeter, ObjectBinding(EnglishGreeter, LoudGreeter))

    assert registry.lookup_assignable(LoudGreeter) is None


def test_none_is_not_a_valid_instance(binding):
    with pytest.raises(InvalidBindingShape, match="Cannot assign None as the instance of Greeter"):
        ObjectBindingBuilder(binding).from_instance(None)

    assert binding.state is BindingState.UNBOUND
