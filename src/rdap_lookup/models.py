"""
Data models for the RDAP lookup system.

This module defines the validated query, the canonical lookup result and
the structured failure returned by the lookup service.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .enums import LookupErrorKind


@dataclass(frozen=True)
class DomainQuery:
    """A validated, lowercase domain name."""

    name: str
    tld: str


@dataclass(frozen=True)
class NameserverInfo:
    """A nameserver with its glue addresses."""

    name: Optional[str]
    ipv4: tuple[str, ...] = ()
    ipv6: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {"name": self.name, "ipv4": list(self.ipv4), "ipv6": list(self.ipv6)}


@dataclass(frozen=True)
class DnssecInfo:
    """DNSSEC delegation data; DS records are kept verbatim."""

    signed: bool = False
    ds_records: tuple[dict, ...] = ()

    def to_dict(self) -> dict:
        return {"signed": self.signed, "dsRecords": [dict(r) for r in self.ds_records]}


@dataclass(frozen=True)
class LookupResult:
    """Canonical result of a successful RDAP domain lookup."""

    domain_name: str
    query_time_ms: int
    rdap_server: str
    raw_object: Any
    registry_handle: Optional[str] = None
    status_codes: tuple[str, ...] = ()
    registration_date: Optional[str] = None
    expiration_date: Optional[str] = None
    last_changed_date: Optional[str] = None
    rdap_database_updated_date: Optional[str] = None
    nameservers: tuple[NameserverInfo, ...] = ()
    registrar_name: Optional[str] = None
    registrar_iana_id: Optional[str] = None
    dnssec: DnssecInfo = field(default_factory=DnssecInfo)
    warnings: tuple[str, ...] = ()

    @property
    def success(self) -> bool:
        return True

    def to_dict(self) -> dict:
        """Serialize to the camelCase shape exposed to callers."""
        return {
            "success": True,
            "domainName": self.domain_name,
            "registryHandle": self.registry_handle,
            "statusCodes": list(self.status_codes),
            "queryTimeMs": self.query_time_ms,
            "rdapServer": self.rdap_server,
            "registrationDate": self.registration_date,
            "expirationDate": self.expiration_date,
            "lastChangedDate": self.last_changed_date,
            "rdapDatabaseUpdatedDate": self.rdap_database_updated_date,
            "nameservers": [ns.to_dict() for ns in self.nameservers],
            "registrarName": self.registrar_name,
            "registrarIanaId": self.registrar_iana_id,
            "dnssec": self.dnssec.to_dict(),
            "warnings": list(self.warnings),
            "rawObject": self.raw_object,
        }


@dataclass(frozen=True)
class LookupFailure:
    """Terminal failure of a lookup."""

    error_kind: LookupErrorKind
    message: str
    query_time_ms: Optional[int] = None  # set only once the HTTP exchange was attempted
    http_status_code: Optional[int] = None
    tld: Optional[str] = None

    @property
    def success(self) -> bool:
        return False

    def to_dict(self) -> dict:
        data = {
            "success": False,
            "errorKind": self.error_kind.value,
            "message": self.message,
        }
        if self.query_time_ms is not None:
            data["queryTimeMs"] = self.query_time_ms
        if self.http_status_code is not None:
            data["httpStatusCode"] = self.http_status_code
        if self.tld is not None:
            data["tld"] = self.tld
        return data
