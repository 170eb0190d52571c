"""
Quill Serializers — declarative field selection and object serialization.

Provides:
- Serializer: binds an object plus include/exclude/only directives
- Field: declaration of one serialized field
- FieldRegistry / SerializerRegistry: field inheritance and model lookup
- normalize_field_list / merge_field_lists: directive handling
- Faults: SerializationFault, InvalidDirectiveShape, NoSerializerFound

Usage::

    from quill.serializers import Serializer, Field

    class VenueSerializer(Serializer):
        class Meta:
            model = Venue

        id = Field(setter=False)
        name = Field()
        address = Field(exclude="getter")

    VenueSerializer(venue, include="address").to_dict()
"""

from .base import (
    Serializer,
    SerializerMeta,
    STATIC_TYPES,
    underscore,
)

from .fields import (
    Accessor,
    AccessorKind,
    Action,
    Field,
)

from .registry import (
    FieldRegistry,
    SerializerRegistry,
    serializer_registry,
    type_name,
)

from .selectors import (
    Directive,
    is_blank,
    merge_directives,
    merge_field_lists,
    normalize_field_list,
)

from .exceptions import (
    SERIALIZATION,
    SerializationFault,
    InvalidDirectiveShape,
    NoSerializerFound,
    InvalidFieldDeclaration,
)

__all__ = [
    # Core
    "Serializer",
    "SerializerMeta",
    "STATIC_TYPES",
    "underscore",
    # Fields
    "Accessor",
    "AccessorKind",
    "Action",
    "Field",
    # Registries
    "FieldRegistry",
    "SerializerRegistry",
    "serializer_registry",
    "type_name",
    # Directives
    "Directive",
    "is_blank",
    "merge_directives",
    "merge_field_lists",
    "normalize_field_list",
    # Faults
    "SERIALIZATION",
    "SerializationFault",
    "InvalidDirectiveShape",
    "NoSerializerFound",
    "InvalidFieldDeclaration",
]
