"""
Faults System (faults/ and serializers/exceptions.py)

Tests Fault, FaultDomain, Severity and the serializer fault types.
"""

import pytest

from quill.faults.core import Fault, FaultDomain, Severity, DOMAIN_DEFAULTS
from quill.serializers.exceptions import (
    SERIALIZATION,
    SerializationFault,
    InvalidDirectiveShape,
    NoSerializerFound,
    InvalidFieldDeclaration,
)


# ============================================================================
# Severity
# ============================================================================

class TestSeverity:

    def test_values(self):
        assert Severity.INFO == "info"
        assert Severity.WARN == "warn"
        assert Severity.ERROR == "error"
        assert Severity.FATAL == "fatal"


# ============================================================================
# FaultDomain
# ============================================================================

class TestFaultDomain:

    def test_standard_domains(self):
        assert FaultDomain.CONFIG.name == "config"
        assert FaultDomain.REGISTRY.name == "registry"
        assert FaultDomain.IO.name == "io"
        assert set(DOMAIN_DEFAULTS) == {FaultDomain.CONFIG, FaultDomain.REGISTRY, FaultDomain.IO}

    def test_custom_domain(self):
        custom = FaultDomain.custom("PAYMENTS", "Payment errors")
        assert custom.name == "payments"
        assert custom.description == "Payment errors"

    def test_domain_equality(self):
        assert FaultDomain("test") == FaultDomain("test")
        assert FaultDomain("test") != FaultDomain("other")
        assert FaultDomain("test") == "test"

    def test_domain_hashable(self):
        d = FaultDomain("test", "")
        assert d in {d}


# ============================================================================
# Fault
# ============================================================================

class TestFault:

    def test_basic_fault(self):
        f = Fault(code="NOT_FOUND", message="Not found", domain=FaultDomain.REGISTRY)
        assert f.code == "NOT_FOUND"
        assert f.severity == DOMAIN_DEFAULTS[FaultDomain.REGISTRY]["severity"]
        assert f.retryable is False
        assert f.public is False

    def test_custom_domain_defaults(self):
        f = Fault(code="X", message="y", domain=FaultDomain("elsewhere"))
        assert f.severity == Severity.ERROR
        assert f.retryable is False

    def test_fault_str(self):
        f = Fault(code="ERR", message="Something wrong", domain=FaultDomain.CONFIG)
        assert str(f) == "[ERR] Something wrong"

    def test_missing_code_rejected(self):
        with pytest.raises(TypeError, match="missing required"):
            Fault(message="msg", domain=FaultDomain.IO)

    def test_to_dict(self):
        f = Fault(
            code="ERR",
            message="msg",
            domain=FaultDomain.IO,
            metadata={"key": "value"},
        )
        d = f.to_dict()
        assert d["code"] == "ERR"
        assert d["domain"] == "io"
        assert d["severity"] == "warn"
        assert d["metadata"] == {"key": "value"}


# ============================================================================
# Serializer faults
# ============================================================================

class TestSerializerFaults:

    def test_serialization_fault_domain(self):
        f = SerializationFault()
        assert f.domain == SERIALIZATION
        assert f.code == "SERIALIZATION_ERROR"
        assert f.public is True

    def test_invalid_directive_shape(self):
        f = InvalidDirectiveShape(42)
        assert isinstance(f, SerializationFault)
        assert f.domain == SERIALIZATION
        assert f.severity == Severity.ERROR
        assert isinstance(f, TypeError)
        assert f.code == "INVALID_DIRECTIVE_SHAPE"
        assert f.metadata["type"] == "int"
        assert "int" in f.message

    def test_no_serializer_found(self):
        f = NoSerializerFound(1.5)
        assert isinstance(f, LookupError)
        assert f.object_type is float
        assert f.code == "NO_SERIALIZER_FOUND"
        assert f.severity == Severity.WARN
        assert f.domain == FaultDomain.REGISTRY

    def test_invalid_field_declaration(self):
        f = InvalidFieldDeclaration("bad", field_name="title")
        assert f.field_name == "title"
        assert f.metadata == {"field": "title"}
        assert f.severity == Severity.FATAL
        assert f.domain == FaultDomain.REGISTRY

    def test_catchable_as_fault(self):
        with pytest.raises(Fault):
            raise NoSerializerFound(object())

    def test_parse_error_in_io_domain(self):
        from quill.parsers import JSONParser

        with pytest.raises(SerializationFault) as exc_info:
            JSONParser().parse("{nope")
        assert exc_info.value.domain == FaultDomain.IO
        assert exc_info.value.severity == Severity.WARN

    def test_config_error_in_config_domain(self):
        from quill.config import ConfigError

        f = ConfigError("bad option", metadata={"option": "colour"})
        assert isinstance(f, Fault)
        assert f.code == "CONFIG_INVALID"
        assert f.domain == FaultDomain.CONFIG
        assert f.severity == Severity.FATAL
        assert str(f) == "[CONFIG_INVALID] bad option"
