"""
Enumeration types for the RDAP lookup system.

These enums provide type-safe constants for lookup outcomes, error codes,
and configuration options throughout the system.
"""

from enum import Enum


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class DomainValidationErrorCode(Enum):
    """Error codes for domain validation failures."""

    EMPTY_INPUT = "empty_input"
    IDNA_ERROR = "idna_error"
    INVALID_SYNTAX = "invalid_syntax"


class RDAPErrorCode(Enum):
    """Error codes for RDAP client operations."""

    UPSTREAM_ERROR = "upstream_error"
    TRANSPORT_ERROR = "transport_error"


class RDAPStatus(Enum):
    """RDAP query result status."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


class LookupErrorKind(Enum):
    """Machine-distinguishable failure kinds surfaced to callers."""

    INVALID_INPUT = "invalid-input"
    UNSUPPORTED_TLD = "unsupported-tld"
    NOT_FOUND = "not-found"
    UPSTREAM_ERROR = "upstream-error"
    TRANSPORT_ERROR = "transport-error"
