"""
Exception classes for the RDAP lookup system.

All exceptions inherit from RdapLookupError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class RdapLookupError(Exception):
    """Base exception for all RDAP lookup errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(RdapLookupError):
    """Raised when domain normalization fails."""

    pass


class BootstrapError(RdapLookupError):
    """Raised when a bootstrap snapshot cannot be loaded or indexed."""

    pass


class NetworkError(RdapLookupError):
    """Raised when network operations outside a lookup fail (bootstrap refresh)."""

    pass


class ProtocolError(RdapLookupError):
    """Raised when a fetched document is not the expected JSON structure."""

    pass


class ConfigError(RdapLookupError):
    """Raised when configuration cannot be loaded or is invalid."""

    pass
