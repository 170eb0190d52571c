"""
Quill Serializer Core — declarative field selection for domain objects.

Provides:

- ``SerializerMeta``: collects ``Field`` declarations into a per-class
  ``FieldRegistry`` linked to the parent serializer's registry, and
  registers the serializer for its model type.
- ``Serializer``: binds one object plus ``include``/``exclude``/``only``
  directives; reads it into an ordered mapping and writes mappings back.

Usage::

    class TicketSerializer(Serializer):
        class Meta:
            model = Ticket

        id = Field(setter=False)
        title = Field()
        venue = Field()
        notes = Field(exclude=True)

        def get_title(self):
            return self.object.title.strip()

    TicketSerializer(ticket, only=["title", {"venue": "name"}]).to_dict()
    # {"title": "...", "venue": {"name": "..."}}

    TicketSerializer(ticket).set_attributes({"title": "New title"})

Directives on a field whose value has a serializer of its own are passed
down to that serializer: ``exclude={"venue": "address"}`` keeps ``venue``
but drops ``address`` from the nested output.
"""

from __future__ import annotations

import decimal
import enum
import logging
import re
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    List,
    Mapping,
    Optional,
    Union,
)

from .._datastructures import FieldMap
from ..config import get_config
from .exceptions import InvalidFieldDeclaration
from .fields import Action, Field
from .registry import FieldRegistry, SerializerRegistry, serializer_registry
from .selectors import Directive, normalize_field_list

logger = logging.getLogger("quill.serializers")

# Values of these exact types are emitted as-is.
STATIC_TYPES = frozenset({
    str, bytes, int, float, complex, bool, type(None), decimal.Decimal, object,
})

_SEQUENCE_TYPES = (list, tuple, set, frozenset)

_CAMEL_BOUNDARY_1 = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY_2 = re.compile(r"([a-z\d])([A-Z])")


def underscore(name: str) -> str:
    """``"Outer.TicketItem"`` → ``"outer-ticket_item"``."""
    name = _CAMEL_BOUNDARY_1.sub(r"\1_\2", name)
    name = _CAMEL_BOUNDARY_2.sub(r"\1_\2", name)
    return name.replace("-", "_").replace(".", "-").lower()


# ============================================================================
# Metaclass
# ============================================================================

class SerializerMeta(type):
    """
    Metaclass for Serializer classes.

    Collects ``Field`` instances from the class body (in creation order)
    into a ``FieldRegistry`` whose parent is the registry of the single
    serializer base class, then registers the class for its model:

    - ``Meta.model`` (declared on the class itself, not inherited)
    - otherwise the naming convention ``<TypeName>Serializer`` →
      ``TypeName``, qualified by the serializer's module
    """

    def __new__(
        mcs,
        name: str,
        bases: tuple[type, ...],
        namespace: dict[str, Any],
        **kwargs: Any,
    ) -> SerializerMeta:
        declared: list[tuple[str, Field]] = []
        for key, value in list(namespace.items()):
            if isinstance(value, Field):
                declared.append((key, value))
                namespace.pop(key)

        declared.sort(key=lambda pair: pair[1]._order)

        parents = [b for b in bases if isinstance(b, SerializerMeta)]
        if len(parents) > 1:
            raise InvalidFieldDeclaration(
                f"Serializer {name} may extend only one serializer, got "
                f"{', '.join(p.__name__ for p in parents)}"
            )
        parent_registry = parents[0]._field_registry if parents else None

        field_registry = FieldRegistry(name, parent=parent_registry)
        for field_name, field in declared:
            field_registry.declare(field.bind(field_name))
        namespace["_field_registry"] = field_registry

        cls = super().__new__(mcs, name, bases, namespace, **kwargs)

        if parents:
            cls._register_model(namespace.get("Meta"))
        return cls

    def _register_model(cls, meta: Any) -> None:
        registry: SerializerRegistry = cls.registry
        model = getattr(meta, "model", None) if meta is not None else None
        if model is not None:
            registry.register(model, cls)
            return
        suffix = "Serializer"
        if cls.__name__.endswith(suffix) and len(cls.__name__) > len(suffix):
            registry.register_name(f"{cls.__module__}.{cls.__qualname__[: -len(suffix)]}", cls)


# ============================================================================
# Serializer
# ============================================================================

class Serializer(metaclass=SerializerMeta):
    """
    Base serializer. Never declares fields itself.

    Args:
        obj: The object to read from / write to. Not copied.
        include: Fields to add even if excluded by default.
        exclude: Fields to drop; nested directives filter nested serializers.
        only: The exact fields to use.
        root_element: Root name for tree formats (defaults to the object's
            class name in snake_case).

    Read with ``to_dict()`` (or ``data``); write with ``set_attributes()``.
    """

    _field_registry: ClassVar[FieldRegistry]

    registry: ClassVar[SerializerRegistry] = serializer_registry

    # Attribute on the object returned by ``to_param``; ``None`` defers
    # to the configured default.
    param_key: ClassVar[Optional[str]] = None

    class Meta:
        """Override in subclasses: ``model = SomeType``."""

    def __init__(
        self,
        obj: Any,
        *,
        include: Any = None,
        exclude: Any = None,
        only: Any = None,
        root_element: Optional[str] = None,
    ):
        self.object = obj
        self.include_fields: Directive = normalize_field_list(include)
        self.exclude_fields: Directive = normalize_field_list(exclude)
        self.only_fields: Directive = normalize_field_list(only)
        if root_element is not None:
            self.root_element = str(root_element)
        else:
            self.root_element = underscore(type(obj).__qualname__.rsplit("<locals>.", 1)[-1])

    # ── Declaration ──────────────────────────────────────────────────────

    @classmethod
    def declare(cls, name: str, **options: Any) -> Field:
        """
        Declare (or redeclare) a field after class creation.

        Accepts the same options as ``Field``: ``element``, ``getter``,
        ``setter`` and ``exclude``.
        """
        if cls is Serializer:
            raise InvalidFieldDeclaration(
                "Fields cannot be declared on the base Serializer", field_name=name
            )
        return cls._field_registry.declare(Field(name, **options))

    @classmethod
    def serializable_fields(
        cls,
        action: Union[Action, str],
        include: Optional[Mapping[str, Any]] = None,
        exclude: Optional[Mapping[str, Any]] = None,
        only: Optional[Mapping[str, Any]] = None,
    ) -> List[Field]:
        """Fields used for *action* given normalized directives."""
        return cls._field_registry.effective_fields(action, include, exclude, only)

    @classmethod
    def get_param_key(cls) -> str:
        """The object attribute used by ``to_param``."""
        return cls.param_key or get_config().param_key

    # ── Lookup ───────────────────────────────────────────────────────────

    @classmethod
    def for_object(cls, obj: Any, **options: Any) -> "Serializer":
        """
        Build the registered serializer for *obj* (or its nearest ancestor type).

        Raises:
            NoSerializerFound: if nothing in the object's hierarchy is registered
        """
        return cls.registry.resolve(obj, **options)

    def find_hook(self, name: str) -> Optional[Callable[..., Any]]:
        """
        Return the bound method *name* if a concrete serializer class or one
        of its mixins defines it, else ``None``. Attributes of the base class
        do not count.
        """
        for klass in type(self).__mro__:
            if klass is Serializer or klass is object:
                continue
            if name in vars(klass):
                attr = getattr(self, name)
                return attr if callable(attr) else None
        return None

    # ── Read ─────────────────────────────────────────────────────────────

    def _fields_for(self, action: Action) -> List[Field]:
        return self.serializable_fields(
            action,
            include=self.include_fields,
            exclude=self.exclude_fields,
            only=self.only_fields,
        )

    def to_dict(self) -> FieldMap:
        """Serialize the object to an ordered ``FieldMap``."""
        result = FieldMap()
        for field in self._fields_for(Action.GETTER):
            if field.has_getter:
                result[field.element] = self._wrap(field.get(self), field.name)
        return result

    @property
    def data(self) -> FieldMap:
        return self.to_dict()

    def _wrap(self, value: Any, field_name: str) -> Any:
        if type(value) in STATIC_TYPES:
            return value
        if isinstance(value, _SEQUENCE_TYPES):
            return [self._wrap(item, field_name) for item in value]
        if isinstance(value, Mapping):
            return {key: self._wrap(item, field_name) for key, item in value.items()}
        if isinstance(value, Serializer):
            return value.to_dict()

        serializer_class = self.registry.lookup(type(value))
        if serializer_class is None:
            return value
        nested = serializer_class(
            value,
            include=self._nested(self.include_fields, field_name),
            exclude=self._nested(self.exclude_fields, field_name),
            only=self._nested(self.only_fields, field_name),
        )
        return nested.to_dict()

    @staticmethod
    def _nested(directive: Directive, field_name: str) -> Optional[Directive]:
        value = directive.get(field_name)
        return value if isinstance(value, dict) else None

    # ── Write ────────────────────────────────────────────────────────────

    def set_attributes(self, attributes: Optional[Mapping[Any, Any]]) -> None:
        """
        Set values on the object through the field setters.

        Keys (including keys of nested mappings) are converted to strings.
        Only fields allowed for the setter action are written; keys for
        anything else are ignored.
        """
        if not attributes:
            return
        attributes = _normalize_attribute_keys(attributes)
        used = set()
        for field in self._fields_for(Action.SETTER):
            if field.name in attributes:
                field.set(self, attributes[field.name])
                used.add(field.name)
        ignored = set(attributes) - used
        if ignored:
            logger.debug(
                "%s ignored attributes: %s",
                type(self).__qualname__, ", ".join(sorted(ignored)),
            )

    # ── Encoded forms ────────────────────────────────────────────────────

    def to_json(self, **options: Any) -> str:
        from ..renderers import JSONRenderer
        return JSONRenderer(**options).render(self.to_dict())

    def to_xml(self, **options: Any) -> str:
        from ..renderers import XMLRenderer
        options.setdefault("root_tag", self.root_element)
        return XMLRenderer(**options).render(self.to_dict())

    def to_yaml(self, **options: Any) -> str:
        from ..renderers import YAMLRenderer
        return YAMLRenderer(**options).render(self.to_dict())

    def update_with_json(self, text: Union[str, bytes]) -> None:
        from ..parsers import JSONParser
        self.set_attributes(JSONParser().parse(text))

    def update_with_xml(self, text: Union[str, bytes]) -> None:
        from ..parsers import XMLParser
        document = XMLParser().parse(text)
        self.set_attributes(document.get(self.root_element))

    def update_with_yaml(self, text: Union[str, bytes]) -> None:
        from ..parsers import YAMLParser
        self.set_attributes(YAMLParser().parse(text))

    # ── Identity ─────────────────────────────────────────────────────────

    def to_param(self) -> Any:
        """The object's unique lookup key (``param_key`` attribute)."""
        value = getattr(self.object, self.get_param_key())
        return value() if callable(value) else value

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Serializer) or type(other) is not type(self):
            return NotImplemented
        return (
            other.object == self.object
            and other.include_fields == self.include_fields
            and other.exclude_fields == self.exclude_fields
            and other.only_fields == self.only_fields
            and other.root_element == self.root_element
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"<{type(self).__qualname__} object={self.object!r}>"


def _normalize_attribute_keys(attributes: Mapping[Any, Any]) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for key, value in attributes.items():
        if isinstance(value, Mapping):
            value = _normalize_attribute_keys(value)
        if isinstance(key, enum.Enum):
            key = key.value
        result[key if isinstance(key, str) else str(key)] = value
    return result
