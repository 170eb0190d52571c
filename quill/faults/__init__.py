"""
Quill faults - structured error types.

Errors raised by Quill are typed fault signals carrying a stable code,
a domain and a severity, so callers can branch on them programmatically.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain taxonomy
- Severity: Severity levels
"""

from .core import (
    DOMAIN_DEFAULTS,
    Fault,
    FaultDomain,
    Severity,
)

__all__ = [
    "DOMAIN_DEFAULTS",
    "Fault",
    "FaultDomain",
    "Severity",
]
