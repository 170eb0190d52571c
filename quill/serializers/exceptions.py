"""
Quill Serializer Exceptions — Fault-domain integrated error types.

All serializer errors are proper Quill Faults with domain, severity,
and structured metadata for programmatic handling.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..faults.core import Fault, FaultDomain, Severity


# ============================================================================
# Serialization Fault Domain
# ============================================================================

SERIALIZATION = FaultDomain.custom("SERIALIZATION", "Serializer declaration and lookup")


# ============================================================================
# Fault Classes
# ============================================================================

class SerializationFault(Fault):
    """
    Base fault for all serializer errors.

    Directive errors stay in the ``SERIALIZATION`` domain. Lookup and
    declaration errors use ``FaultDomain.REGISTRY`` and undecodable
    payloads use ``FaultDomain.IO``.
    """

    def __init__(
        self,
        code: str = "SERIALIZATION_ERROR",
        message: str = "Serialization failed",
        *,
        domain: FaultDomain = SERIALIZATION,
        severity: Optional[Severity] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=domain,
            severity=severity,
            retryable=False,
            public=True,
            metadata=metadata,
        )


class InvalidDirectiveShape(SerializationFault, TypeError):
    """
    Raised when an ``include``/``exclude``/``only`` directive is not a
    recognized shape (``None``, ``True``, a name, a sequence or a mapping).
    """

    def __init__(self, value: Any, *, metadata: Optional[Dict[str, Any]] = None):
        self.value = value
        meta = {"type": type(value).__name__, "value": repr(value)}
        if metadata:
            meta.update(metadata)
        super().__init__(
            code="INVALID_DIRECTIVE_SHAPE",
            message=f"illegal type in field list: {type(value).__name__}",
            metadata=meta,
        )


class NoSerializerFound(SerializationFault, LookupError):
    """
    Raised by serializer lookup when neither the object's type nor any
    of its ancestors has a registered serializer.
    """

    def __init__(self, obj: Any, *, metadata: Optional[Dict[str, Any]] = None):
        self.object_type = type(obj)
        meta = {"type": self.object_type.__qualname__}
        if metadata:
            meta.update(metadata)
        super().__init__(
            code="NO_SERIALIZER_FOUND",
            message=f"no known serializers for class {self.object_type.__qualname__}",
            domain=FaultDomain.REGISTRY,
            severity=Severity.WARN,
            metadata=meta,
        )


class InvalidFieldDeclaration(SerializationFault):
    """Raised when a field or serializer class is declared with bad options."""

    def __init__(
        self,
        message: str,
        *,
        field_name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        self.field_name = field_name
        meta: Dict[str, Any] = {}
        if field_name is not None:
            meta["field"] = field_name
        if metadata:
            meta.update(metadata)
        super().__init__(
            code="INVALID_FIELD_DECLARATION",
            message=message,
            domain=FaultDomain.REGISTRY,
            severity=Severity.FATAL,
            metadata=meta,
        )
