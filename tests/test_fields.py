"""
Field declarations and field registries (serializers/fields.py, registry.py).
"""

import pytest

from quill.serializers.fields import Accessor, AccessorKind, Action, Field
from quill.serializers.registry import FieldRegistry
from quill.serializers.exceptions import InvalidFieldDeclaration


def names(fields):
    return [f.name for f in fields]


# ============================================================================
# Accessor
# ============================================================================

class TestAccessor:

    def test_default(self):
        assert Accessor.coerce(None).kind is AccessorKind.DEFAULT

    def test_disabled(self):
        accessor = Accessor.coerce(False)
        assert accessor.kind is AccessorKind.DISABLED
        assert not accessor.enabled

    def test_named(self):
        accessor = Accessor.coerce("field_1")
        assert accessor.kind is AccessorKind.NAMED
        assert accessor.name == "field_1"

    def test_inline(self):
        func = lambda obj: obj  # noqa: E731
        accessor = Accessor.coerce(func)
        assert accessor.kind is AccessorKind.INLINE
        assert accessor.func is func

    def test_invalid(self):
        with pytest.raises(InvalidFieldDeclaration):
            Accessor.coerce(12)


# ============================================================================
# Field
# ============================================================================

class TestField:

    def test_element_defaults_to_name(self):
        f = Field("field_1")
        assert f.name == "field_1"
        assert f.element == "field_1"

    def test_element(self):
        assert Field("field_5", element="field_five").element == "field_five"

    def test_no_exclusion(self):
        f = Field("a")
        assert not f.excluded(Action.GETTER)
        assert not f.excluded("setter")

    def test_exclude_true(self):
        f = Field("a", exclude=True)
        assert f.excluded("getter")
        assert f.excluded("setter")

    def test_exclude_single_action(self):
        f = Field("a", exclude="setter")
        assert not f.excluded("getter")
        assert f.excluded("setter")

    def test_exclude_list(self):
        f = Field("a", exclude=["getter", "setter"])
        assert f.excluded_actions == frozenset(Action)

    @pytest.mark.parametrize("bad", ["reader", 3, ["getter", "bogus"]])
    def test_exclude_invalid(self, bad):
        with pytest.raises(InvalidFieldDeclaration):
            Field("a", exclude=bad)

    def test_getter_setter_flags(self):
        f = Field("a", getter=False)
        assert not f.has_getter
        assert f.has_setter

    def test_unbound_name(self):
        with pytest.raises(InvalidFieldDeclaration):
            Field().name

    def test_bind(self):
        f = Field().bind("title")
        assert f.name == "title"

    def test_rebind_conflict(self):
        with pytest.raises(InvalidFieldDeclaration):
            Field("title").bind("name")

    def test_creation_order(self):
        first, second = Field(), Field()
        assert first._order < second._order

    def test_equality(self):
        assert Field("a", exclude=True) == Field("a", exclude=True)
        assert Field("a") != Field("a", element="b")


# ============================================================================
# FieldRegistry
# ============================================================================

@pytest.fixture
def registry():
    reg = FieldRegistry("TesterSerializer")
    reg.declare(Field("field_1"))
    reg.declare(Field("field_2", exclude="setter"))
    reg.declare(Field("field_3", exclude="getter"))
    reg.declare(Field("field_4", exclude=True))
    return reg


class TestFieldRegistry:

    def test_default_getter_fields(self, registry):
        assert names(registry.effective_fields("getter")) == ["field_1", "field_2"]

    def test_default_setter_fields(self, registry):
        assert names(registry.effective_fields("setter")) == ["field_1", "field_3"]

    def test_include(self, registry):
        fields = registry.effective_fields("getter", include={"field_4": True})
        assert names(fields) == ["field_1", "field_2", "field_4"]

    def test_include_nested_value_counts(self, registry):
        fields = registry.effective_fields("getter", include={"field_3": {"x": True}})
        assert "field_3" in names(fields)

    def test_exclude(self, registry):
        fields = registry.effective_fields("getter", exclude={"field_1": True})
        assert names(fields) == ["field_2"]

    def test_nested_exclude_keeps_field(self, registry):
        fields = registry.effective_fields("getter", exclude={"field_1": {"x": True}})
        assert names(fields) == ["field_1", "field_2"]

    def test_include_beats_exclude(self, registry):
        fields = registry.effective_fields(
            "getter", include={"field_1": True}, exclude={"field_1": True}
        )
        assert names(fields) == ["field_1", "field_2"]

    def test_only(self, registry):
        fields = registry.effective_fields("getter", only={"field_4": True, "field_1": True})
        assert names(fields) == ["field_1", "field_4"]

    def test_only_ignores_include_and_exclude(self, registry):
        fields = registry.effective_fields(
            "setter", include={"field_2": True}, exclude={"field_1": True},
            only={"field_1": True},
        )
        assert names(fields) == ["field_1"]

    def test_redeclare_overwrites(self, registry):
        registry.declare(Field("field_1", exclude=True))
        assert len(registry.declared_fields) == 4
        assert "field_1" not in names(registry.effective_fields("getter"))

    def test_empty_root(self):
        assert FieldRegistry("Serializer").effective_fields("getter") == []


class TestFieldRegistryInheritance:

    def test_parent_fields_first(self, registry):
        child = FieldRegistry("Child", parent=registry)
        child.declare(Field("extra"))
        assert names(child.all_fields()) == [
            "field_1", "field_2", "field_3", "field_4", "extra",
        ]

    def test_override_moves_to_child_position(self, registry):
        child = FieldRegistry("Child", parent=registry)
        child.declare(Field("extra"))
        child.declare(Field("field_4"))
        assert names(child.all_fields()) == [
            "field_1", "field_2", "field_3", "extra", "field_4",
        ]
        assert "field_4" in names(child.effective_fields("getter"))

    def test_parent_unchanged_by_child(self, registry):
        child = FieldRegistry("Child", parent=registry)
        child.declare(Field("field_1", exclude=True))
        assert "field_1" in names(registry.effective_fields("getter"))
        assert "field_1" not in names(child.effective_fields("getter"))

    def test_grandparent_chain(self, registry):
        child = FieldRegistry("Child", parent=registry)
        grandchild = FieldRegistry("Grandchild", parent=child)
        grandchild.declare(Field("deep"))
        assert names(grandchild.effective_fields("getter")) == ["field_1", "field_2", "deep"]
