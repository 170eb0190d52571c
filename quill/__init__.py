"""
Quill - Declarative field selection and object serialization

Complete integration of:
- Serializers: per-class field declarations with inheritance
- Directives: include / exclude / only, nested into child serializers
- Registry: model type to serializer lookup along the type hierarchy
- Renderers & Parsers: JSON, XML and YAML encodings of serializer output
- Faults: Structured error handling with fault domains
- Config: Layered serializer defaults from files and environment
"""

__version__ = "0.3.0"

# ============================================================================
# Serializers
# ============================================================================

from .serializers import (
    Serializer,
    SerializerMeta,
    Field,
    Action,
    FieldRegistry,
    SerializerRegistry,
    serializer_registry,
    normalize_field_list,
    merge_field_lists,
    SerializationFault,
    InvalidDirectiveShape,
    NoSerializerFound,
    InvalidFieldDeclaration,
)

from ._datastructures import FieldMap, to_plain

# ============================================================================
# Encoding
# ============================================================================

from .renderers import (
    BaseRenderer,
    JSONRenderer,
    XMLRenderer,
    YAMLRenderer,
    get_renderer,
)

from .parsers import (
    BaseParser,
    JSONParser,
    XMLParser,
    YAMLParser,
)

# ============================================================================
# Faults & Config
# ============================================================================

from .faults import Fault, FaultDomain, Severity
from .config import (
    ConfigError,
    ConfigLoader,
    SerializerConfig,
    configure,
    get_config,
    reset_config,
)


def for_object(obj, **options):
    """Build the registered serializer for *obj*; see ``Serializer.for_object``."""
    return Serializer.for_object(obj, **options)


__all__ = [
    "__version__",
    # Serializers
    "Serializer",
    "SerializerMeta",
    "Field",
    "Action",
    "FieldRegistry",
    "SerializerRegistry",
    "serializer_registry",
    "normalize_field_list",
    "merge_field_lists",
    "for_object",
    "FieldMap",
    "to_plain",
    # Encoding
    "BaseRenderer",
    "JSONRenderer",
    "XMLRenderer",
    "YAMLRenderer",
    "get_renderer",
    "BaseParser",
    "JSONParser",
    "XMLParser",
    "YAMLParser",
    # Faults
    "SerializationFault",
    "InvalidDirectiveShape",
    "NoSerializerFound",
    "InvalidFieldDeclaration",
    "Fault",
    "FaultDomain",
    "Severity",
    # Config
    "ConfigError",
    "ConfigLoader",
    "SerializerConfig",
    "configure",
    "get_config",
    "reset_config",
]
