"""
Serializer registries.

- ``FieldRegistry``: the fields declared directly on one serializer class,
  linked to at most one parent registry. Effective field lists are
  computed by walking that chain.
- ``SerializerRegistry``: maps model types (and conventional type names)
  to serializer classes, and resolves the serializer for an object by
  walking the object's type hierarchy.

Both are filled while serializer classes are being created and are only
read afterwards.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Type, Union

from .exceptions import NoSerializerFound
from .fields import Action, Field

if TYPE_CHECKING:
    from .base import Serializer

logger = logging.getLogger("quill.serializers.registry")


def type_name(klass: type) -> str:
    """Module-qualified name used by the naming convention (``"shop.models.Item"``)."""
    return f"{klass.__module__}.{klass.__qualname__}"


# ============================================================================
# Field declarations
# ============================================================================

class FieldRegistry:
    """Ordered field declarations of one serializer class."""

    def __init__(self, owner: str, parent: Optional["FieldRegistry"] = None):
        self.owner = owner
        self.parent = parent
        self._fields: Dict[str, Field] = {}

    def declare(self, field: Field) -> Field:
        """Add *field*, replacing an earlier declaration with the same name."""
        self._fields[field.name] = field
        return field

    @property
    def declared_fields(self) -> List[Field]:
        return list(self._fields.values())

    def all_fields(self) -> List[Field]:
        """Inherited fields followed by this registry's own declarations."""
        if self.parent is None:
            inherited: List[Field] = []
        else:
            inherited = [
                f for f in self.parent.all_fields() if f.name not in self._fields
            ]
        return inherited + self.declared_fields

    def effective_fields(
        self,
        action: Union[Action, str],
        include: Optional[Mapping[str, Any]] = None,
        exclude: Optional[Mapping[str, Any]] = None,
        only: Optional[Mapping[str, Any]] = None,
    ) -> List[Field]:
        """
        Fields used for *action* after applying normalized directives.

        With a non-empty ``only`` exactly the named fields are kept.
        Otherwise fields excluded by default for *action* and fields
        excluded wholly (``True``) by ``exclude`` are dropped, unless
        named in ``include``.
        """
        action = Action(action)
        include = include or {}
        exclude = exclude or {}
        only = only or {}

        fields = self.all_fields()
        if only:
            return [f for f in fields if f.name in only]

        excluded = {name for name, value in exclude.items() if value is True}
        excluded.update(f.name for f in fields if f.excluded(action))
        excluded.difference_update(include.keys())
        if not excluded:
            return fields
        return [f for f in fields if f.name not in excluded]

    def __repr__(self) -> str:
        return f"FieldRegistry({self.owner!r}, fields={list(self._fields)})"


# ============================================================================
# Model → serializer lookup
# ============================================================================

class SerializerRegistry:
    """Maps model types to the serializer classes that handle them."""

    def __init__(self) -> None:
        self._by_type: Dict[type, Type["Serializer"]] = {}
        self._by_name: Dict[str, Type["Serializer"]] = {}

    def register(self, model: type, serializer_class: Type["Serializer"]) -> None:
        """Register *serializer_class* for instances of *model* (and subclasses)."""
        previous = self._by_type.get(model)
        if previous is not None and previous is not serializer_class:
            logger.debug(
                "Replacing serializer for %s: %s -> %s",
                model.__qualname__, previous.__qualname__, serializer_class.__qualname__,
            )
        self._by_type[model] = serializer_class
        logger.debug("Registered %s for %s", serializer_class.__qualname__, model.__qualname__)

    def register_name(self, qualified_name: str, serializer_class: Type["Serializer"]) -> None:
        """Register *serializer_class* for the type whose ``type_name()`` is *qualified_name*."""
        self._by_name[qualified_name] = serializer_class
        logger.debug("Registered %s for type name %r", serializer_class.__qualname__, qualified_name)

    def unregister(self, serializer_class: Type["Serializer"]) -> None:
        """Drop every registration pointing at *serializer_class*."""
        for table in (self._by_type, self._by_name):
            for key in [k for k, v in table.items() if v is serializer_class]:
                del table[key]

    def lookup(self, model: type) -> Optional[Type["Serializer"]]:
        """
        Find the serializer for *model*, trying each type in its MRO.

        For every type an explicit model registration wins over the
        module-qualified ``<TypeName>Serializer`` naming convention.
        """
        for klass in model.__mro__:
            serializer_class = self._by_type.get(klass) or self._by_name.get(type_name(klass))
            if serializer_class is not None:
                if klass is not model:
                    logger.debug(
                        "Using %s serializer %s for %s",
                        klass.__qualname__, serializer_class.__qualname__, model.__qualname__,
                    )
                return serializer_class
        return None

    def resolve(self, obj: Any, **options: Any) -> "Serializer":
        """
        Build a serializer bound to *obj*.

        Raises:
            NoSerializerFound: if no type in the object's hierarchy is registered
        """
        serializer_class = self.lookup(type(obj))
        if serializer_class is None:
            raise NoSerializerFound(obj)
        return serializer_class(obj, **options)

    def __contains__(self, model: type) -> bool:
        return self.lookup(model) is not None

    def __len__(self) -> int:
        return len(self._by_type) + len(self._by_name)

    def clear(self) -> None:
        self._by_type.clear()
        self._by_name.clear()


serializer_registry = SerializerRegistry()
