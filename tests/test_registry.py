"""
Model → serializer lookup (serializers/registry.py).
"""

import pytest

from quill.serializers import (
    Field,
    NoSerializerFound,
    Serializer,
    SerializerRegistry,
    type_name,
)


class Animal:
    def __init__(self, name=None):
        self.name = name


class Dog(Animal):
    pass


class Puppy(Dog):
    pass


class Rock:
    pass


class Billing:
    class Item:
        pass


class Catalog:
    class Item:
        pass


@pytest.fixture
def registry():
    return SerializerRegistry()


@pytest.fixture
def animal_serializer():
    class AnimalRecordSerializer(Serializer):
        name = Field()

    return AnimalRecordSerializer


@pytest.fixture
def dog_serializer(animal_serializer):
    class DogRecordSerializer(animal_serializer):
        bark = Field(getter=lambda dog: "woof", setter=False)

    return DogRecordSerializer


class TestSerializerRegistry:

    def test_empty(self, registry):
        assert registry.lookup(Animal) is None
        assert Animal not in registry
        assert len(registry) == 0

    def test_exact_type(self, registry, animal_serializer):
        registry.register(Animal, animal_serializer)
        assert registry.lookup(Animal) is animal_serializer
        assert Animal in registry

    def test_walks_ancestors(self, registry, animal_serializer):
        registry.register(Animal, animal_serializer)
        assert registry.lookup(Puppy) is animal_serializer

    def test_nearest_ancestor_wins(self, registry, animal_serializer, dog_serializer):
        registry.register(Animal, animal_serializer)
        registry.register(Dog, dog_serializer)
        assert registry.lookup(Puppy) is dog_serializer
        assert registry.lookup(Animal) is animal_serializer

    def test_by_name(self, registry, animal_serializer):
        registry.register_name(type_name(Dog), animal_serializer)
        assert registry.lookup(Puppy) is animal_serializer
        assert registry.lookup(Animal) is None

    def test_type_beats_name_for_same_class(self, registry, animal_serializer, dog_serializer):
        registry.register_name(type_name(Dog), animal_serializer)
        registry.register(Dog, dog_serializer)
        assert registry.lookup(Dog) is dog_serializer

    def test_resolve(self, registry, animal_serializer):
        registry.register(Animal, animal_serializer)
        dog = Dog("rex")
        serializer = registry.resolve(dog, only="name")
        assert isinstance(serializer, animal_serializer)
        assert serializer.object is dog
        assert serializer.only_fields == {"name": True}
        assert serializer.to_dict() == {"name": "rex"}

    def test_resolve_not_found(self, registry):
        with pytest.raises(NoSerializerFound) as exc_info:
            registry.resolve(Rock())
        assert exc_info.value.object_type is Rock
        assert exc_info.value.metadata["type"] == "Rock"

    def test_unregister(self, registry, animal_serializer):
        registry.register(Animal, animal_serializer)
        registry.register_name(type_name(Animal), animal_serializer)
        registry.unregister(animal_serializer)
        assert registry.lookup(Animal) is None

    def test_clear(self, registry, animal_serializer):
        registry.register(Animal, animal_serializer)
        registry.clear()
        assert len(registry) == 0


class TestSerializerClassRegistry:

    def test_custom_registry_on_serializer(self, registry):
        class IsolatedSerializer(Serializer):
            registry = SerializerRegistry()

            class Meta:
                model = Rock

            kind = Field(getter=lambda rock: "igneous")

        assert IsolatedSerializer.registry.lookup(Rock) is IsolatedSerializer
        assert Serializer.registry.lookup(Rock) is None
        assert type(IsolatedSerializer.for_object(Rock())) is IsolatedSerializer

    def test_meta_not_inherited(self):
        local = SerializerRegistry()

        class BaseRockSerializer(Serializer):
            registry = local

            class Meta:
                model = Rock

        class SpecialRockSerializer(BaseRockSerializer):
            pass

        assert local.lookup(Rock) is BaseRockSerializer

    def test_inherited_fields_through_registry(self, dog_serializer):
        dog = Dog("rex")
        assert dog_serializer(dog).to_dict() == {"name": "rex", "bark": "woof"}


class TestNamingConvention:

    def test_same_module_and_scope(self):
        local = SerializerRegistry()

        class Widget:
            pass

        class WidgetSerializer(Serializer):
            registry = local

        assert local.lookup(Widget) is WidgetSerializer

    def test_same_name_elsewhere_not_matched(self):
        local = SerializerRegistry()

        class ItemSerializer(Serializer):
            registry = local

        assert local.lookup(Billing.Item) is None
        assert local.lookup(Catalog.Item) is None

    def test_model_skips_name_registration(self):
        local = SerializerRegistry()

        class ItemSerializer(Serializer):
            registry = local

            class Meta:
                model = Billing.Item

        assert len(local) == 1
        assert local.lookup(Billing.Item) is ItemSerializer
        assert local.lookup(Catalog.Item) is None

    def test_for_object_on_same_named_class_raises(self):
        class ItemSerializer(Serializer):
            class Meta:
                model = Billing.Item

        try:
            assert type(Serializer.for_object(Billing.Item())) is ItemSerializer
            with pytest.raises(NoSerializerFound):
                Serializer.for_object(Catalog.Item())
        finally:
            Serializer.registry.unregister(ItemSerializer)

    def test_type_name(self):
        assert type_name(Catalog.Item) == f"{__name__}.Catalog.Item"
