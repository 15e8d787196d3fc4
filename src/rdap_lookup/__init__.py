"""
RDAP Lookup - resolve a domain to its authoritative RDAP server and
normalize the registration data it returns.

This package provides the IANA bootstrap registry, an async RDAP client,
the response normalizer and the lookup service that composes them.
"""

__version__ = "0.1.0"
__author__ = "RDAP Lookup Team"

from rdap_lookup.exceptions import (
    RdapLookupError,
    ValidationError,
    BootstrapError,
    NetworkError,
    ProtocolError,
    ConfigError,
)
from rdap_lookup.enums import (
    LogLevel,
    DomainValidationErrorCode,
    RDAPErrorCode,
    RDAPStatus,
    LookupErrorKind,
)
from rdap_lookup.config import (
    LoggingConfig,
    LookupConfig,
    load_config_from_env,
    load_config_from_file,
    save_config_to_file,
)
from rdap_lookup.models import (
    DomainQuery,
    NameserverInfo,
    DnssecInfo,
    LookupResult,
    LookupFailure,
)
from rdap_lookup.audit_logger import (
    AuditLogger,
    LogEntry,
)
from rdap_lookup.domain_validator import (
    DomainValidator,
    DomainValidationResult,
    DomainValidationError,
)
from rdap_lookup.bootstrap import (
    BootstrapIndex,
    BootstrapMatch,
    SnapshotSource,
    StaticSnapshotSource,
    FileSnapshotSource,
    HttpSnapshotSource,
    VERISIGN_SNAPSHOT,
    extract_tld,
    select_base_url,
    refresh_snapshot,
)
from rdap_lookup.rdap_client import (
    RDAPClient,
    RDAPResponse,
    RDAPError,
    build_query_url,
)
from rdap_lookup.normalizer import (
    RdapNormalizer,
    format_rdap_date,
    INVALID_DATE,
)
from rdap_lookup.lookup_service import (
    LookupService,
    LookupOutcome,
)

__all__ = [
    # Exceptions
    "RdapLookupError",
    "ValidationError",
    "BootstrapError",
    "NetworkError",
    "ProtocolError",
    "ConfigError",
    # Enums
    "LogLevel",
    "DomainValidationErrorCode",
    "RDAPErrorCode",
    "RDAPStatus",
    "LookupErrorKind",
    # Configuration
    "LoggingConfig",
    "LookupConfig",
    "load_config_from_env",
    "load_config_from_file",
    "save_config_to_file",
    # Models
    "DomainQuery",
    "NameserverInfo",
    "DnssecInfo",
    "LookupResult",
    "LookupFailure",
    # Logging
    "AuditLogger",
    "LogEntry",
    # Domain Validator
    "DomainValidator",
    "DomainValidationResult",
    "DomainValidationError",
    # Bootstrap
    "BootstrapIndex",
    "BootstrapMatch",
    "SnapshotSource",
    "StaticSnapshotSource",
    "FileSnapshotSource",
    "HttpSnapshotSource",
    "VERISIGN_SNAPSHOT",
    "extract_tld",
    "select_base_url",
    "refresh_snapshot",
    # RDAP Client
    "RDAPClient",
    "RDAPResponse",
    "RDAPError",
    "build_query_url",
    # Normalizer
    "RdapNormalizer",
    "format_rdap_date",
    "INVALID_DATE",
    # Lookup Service
    "LookupService",
    "LookupOutcome",
]
