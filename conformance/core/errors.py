"""
Core error definitions for the conformance harness

Provides error codes and the exceptions raised while building and verifying
geodetic objects. Nothing in here depends on other harness modules.
"""

from enum import Enum
from typing import Any, Dict, Optional, Tuple


class ErrorCode(Enum):
    """Standardized error codes for harness failures."""

    # Test authoring errors
    CONFIGURATION_CONFLICT = "CONFIGURATION_CONFLICT"
    INVALID_FIXTURE = "INVALID_FIXTURE"

    # Vendor capability gaps (converted to SKIP)
    UNSUPPORTED_BY_VENDOR = "UNSUPPORTED_BY_VENDOR"

    # Conformance failures
    STRUCTURAL_VIOLATION = "STRUCTURAL_VIOLATION"
    PROPERTY_MISMATCH = "PROPERTY_MISMATCH"
    UNEXPECTED_EXCEPTION = "UNEXPECTED_EXCEPTION"


class HarnessError(Exception):
    """Base exception for errors raised by the harness itself."""

    code = ErrorCode.UNEXPECTED_EXCEPTION

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 path: Tuple[str, ...] = ()):
        self.message = message
        self.details = details or {}
        self.path = tuple(path)
        super().__init__(message)

    def within(self, label: str) -> 'HarnessError':
        """
        Attribute this error to an enclosing component.

        Args:
            label: Label of the enclosing component (e.g. "step 2")

        Returns:
            Self, with the label prepended to the component path
        """
        self.path = (label,) + self.path
        return self

    @property
    def label(self) -> str:
        """Human-readable message prefixed by the component path."""
        if not self.path:
            return self.message
        return f"{' / '.join(self.path)}: {self.message}"

    def __str__(self) -> str:
        return self.label


class ConfigurationConflict(HarnessError):
    """Raised when the same configuration key is written twice."""

    code = ErrorCode.CONFIGURATION_CONFLICT

    def __init__(self, key: Any, previous: Any, value: Any):
        self.key = key
        self.previous = previous
        self.value = value
        key_name = getattr(key, 'value', key)
        super().__init__(
            f"Configuration key '{key_name}' is already set",
            {"key": str(key_name), "previous": repr(previous), "value": repr(value)}
        )


class FixtureError(HarnessError):
    """Raised when a reference fixture is malformed."""

    code = ErrorCode.INVALID_FIXTURE


class UnsupportedByVendor(HarnessError):
    """Raised when the implementation under test cannot be exercised for a case."""

    code = ErrorCode.UNSUPPORTED_BY_VENDOR

    def __init__(self, message: str, reason: Any, kind: Optional[str] = None,
                 entity_code: Any = None, details: Optional[Dict[str, Any]] = None):
        self.reason = reason
        self.kind = kind
        self.entity_code = entity_code
        super().__init__(message, details)


class StructuralViolation(HarnessError, AssertionError):
    """Raised when an entity violates the referencing data model."""

    code = ErrorCode.STRUCTURAL_VIOLATION


class PropertyMismatch(HarnessError, AssertionError):
    """Raised when an entity property does not match the expected value."""

    code = ErrorCode.PROPERTY_MISMATCH

    def __init__(self, entity_label: str, property_label: str, expected: Any = None,
                 actual: Any = None, configuration_tip: Any = None,
                 message: Optional[str] = None):
        self.entity_label = entity_label
        self.property_label = property_label
        self.expected = expected
        self.actual = actual
        self.configuration_tip = configuration_tip
        if message is None:
            message = f"{entity_label} {property_label} mismatch: expected {expected!r} but got {actual!r}"
        super().__init__(message, {
            "entity": entity_label,
            "property": property_label,
            "expected": repr(expected),
            "actual": repr(actual),
        })


# Exceptions raised by the implementation under test

class UnsupportedCode(Exception):
    """Raised by a factory when a code or definition is not recognized."""

    def __init__(self, message: str = "", code: Any = None):
        self.code = code
        super().__init__(message or f"Code not recognized: {code}")


class NoSuchCode(UnsupportedCode):
    """Raised by an authority factory when no object exists for a code."""
    pass
