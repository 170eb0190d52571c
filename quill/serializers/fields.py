"""
Quill Serializer Fields — declarative description of one serialized field.

A ``Field`` records:
- ``name``: the canonical field name
- ``element``: the output key (defaults to ``name``)
- ``getter`` / ``setter``: how the value is read from / written to the object
- ``exclude``: which actions skip the field unless it is explicitly included

Getter and setter options:
- ``None``: default strategy (``get_<name>`` / ``set_<name>`` on the
  serializer, else attribute ``<name>`` on the object)
- ``False``: disabled
- ``str``: a method name, looked up on the serializer first, then the object
- callable: called with the object (getter) or the object and value (setter)

Usage::

    class VenueSerializer(Serializer):
        class Meta:
            model = Venue

        id = Field(setter=False)
        name = Field()
        slug = Field(element="permalink")
        secret = Field(exclude=True)
        label = Field(getter=lambda venue: venue.name.upper(), setter=False)
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, FrozenSet, Optional, Union

from .exceptions import InvalidFieldDeclaration


class Action(str, Enum):
    """The two directions a field can be used in."""
    GETTER = "getter"
    SETTER = "setter"


class AccessorKind(str, Enum):
    DISABLED = "disabled"
    DEFAULT = "default"
    NAMED = "named"
    INLINE = "inline"


@dataclass(frozen=True)
class Accessor:
    """Tagged getter/setter strategy. ``Field.get``/``Field.set`` interpret it."""

    kind: AccessorKind
    name: Optional[str] = None
    func: Optional[Callable[..., Any]] = None

    @classmethod
    def coerce(cls, value: Any, field_name: str = "") -> "Accessor":
        if isinstance(value, Accessor):
            return value
        if value is None or value is True:
            return cls(AccessorKind.DEFAULT)
        if value is False:
            return cls(AccessorKind.DISABLED)
        if isinstance(value, str):
            return cls(AccessorKind.NAMED, name=value)
        if callable(value):
            return cls(AccessorKind.INLINE, func=value)
        raise InvalidFieldDeclaration(
            f"Field '{field_name}': accessor must be None, False, a name or a callable, "
            f"got {type(value).__name__}",
            field_name=field_name or None,
        )

    @property
    def enabled(self) -> bool:
        return self.kind is not AccessorKind.DISABLED


def _coerce_exclusion(value: Any, field_name: str = "") -> FrozenSet[Action]:
    if value is None or value is False:
        return frozenset()
    if value is True:
        return frozenset(Action)
    if isinstance(value, (str, Action)):
        values = [value]
    elif isinstance(value, (list, tuple, set, frozenset)):
        values = list(value)
    else:
        raise InvalidFieldDeclaration(
            f"Field '{field_name}': exclude must be None, True, 'getter', 'setter' "
            f"or a list of those, got {value!r}",
            field_name=field_name or None,
        )
    try:
        return frozenset(Action(v) for v in values)
    except ValueError:
        raise InvalidFieldDeclaration(
            f"Field '{field_name}': unknown action in exclude: {value!r}",
            field_name=field_name or None,
        ) from None


class Field:
    """
    Declaration of one serialized field.

    Fields are declared as class attributes of a ``Serializer`` (the
    metaclass supplies the name) or created directly with a name and
    passed to ``Serializer.declare``. A field is immutable once bound to
    a name.
    """

    _creation_counter: int = 0

    def __init__(
        self,
        name: Optional[str] = None,
        *,
        element: Optional[str] = None,
        getter: Union[None, bool, str, Callable[[Any], Any]] = None,
        setter: Union[None, bool, str, Callable[[Any, Any], Any]] = None,
        exclude: Any = None,
    ):
        label = name or ""
        self._name = name
        self._element = element
        self.getter = Accessor.coerce(getter, label)
        self.setter = Accessor.coerce(setter, label)
        self.excluded_actions = _coerce_exclusion(exclude, label)

        # Ordering
        self._order = Field._creation_counter
        Field._creation_counter += 1

    # ── Binding ──────────────────────────────────────────────────────────

    def bind(self, name: str) -> "Field":
        """
        Attach the field name (called by the serializer metaclass).

        Rebinding an already named field to a different name is an error.
        """
        if self._name is not None and self._name != name:
            raise InvalidFieldDeclaration(
                f"Field '{self._name}' cannot be re-declared as '{name}'",
                field_name=self._name,
            )
        self._name = name
        return self

    @property
    def name(self) -> str:
        if self._name is None:
            raise InvalidFieldDeclaration("Field has not been bound to a name")
        return self._name

    @property
    def element(self) -> str:
        return self._element if self._element is not None else self.name

    # ── Visibility ───────────────────────────────────────────────────────

    def excluded(self, action: Union[Action, str]) -> bool:
        """Return True if the field is skipped for *action* by default."""
        return Action(action) in self.excluded_actions

    @property
    def has_getter(self) -> bool:
        return self.getter.enabled

    @property
    def has_setter(self) -> bool:
        return self.setter.enabled

    # ── Access ───────────────────────────────────────────────────────────

    def get(self, serializer: Any) -> Any:
        """Read the field value through *serializer*."""
        accessor = self.getter
        if accessor.kind is AccessorKind.DISABLED:
            return None
        if accessor.kind is AccessorKind.INLINE:
            return accessor.func(serializer.object)

        if accessor.kind is AccessorKind.NAMED:
            method_name = accessor.name
        else:
            method_name = f"get_{self.name}"
        hook = serializer.find_hook(method_name)
        if hook is not None:
            return hook()

        attr_name = accessor.name if accessor.kind is AccessorKind.NAMED else self.name
        value = getattr(serializer.object, attr_name)
        if inspect.isroutine(value):
            return value()
        return value

    def set(self, serializer: Any, value: Any) -> None:
        """Write *value* through *serializer*."""
        accessor = self.setter
        if accessor.kind is AccessorKind.DISABLED:
            return
        if accessor.kind is AccessorKind.INLINE:
            accessor.func(serializer.object, value)
            return

        if accessor.kind is AccessorKind.NAMED:
            method_name = accessor.name
        else:
            method_name = f"set_{self.name}"
        hook = serializer.find_hook(method_name)
        if hook is not None:
            hook(value)
            return

        obj = serializer.object
        if accessor.kind is AccessorKind.NAMED:
            # Raises AttributeError when the object lacks the named setter.
            target = getattr(obj, accessor.name)
            if inspect.isroutine(target):
                target(value)
            else:
                setattr(obj, accessor.name, value)
            return

        target = getattr(obj, self.name, None)
        if inspect.isroutine(target):
            target(value)
        else:
            setattr(obj, self.name, value)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Field):
            return NotImplemented
        return (
            self._name == other._name
            and self._element == other._element
            and self.getter == other.getter
            and self.setter == other.setter
            and self.excluded_actions == other.excluded_actions
        )

    def __hash__(self) -> int:
        return hash((self._name, self._element, self.excluded_actions))

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        bound = f" {self._name!r}" if self._name else ""
        element = f", element={self._element!r}" if self._element else ""
        return f"<{cls}{bound}{element}>"
