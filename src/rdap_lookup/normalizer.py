"""
RDAP response normalizer.

Turns a raw RDAP domain object (RFC 9083) into a LookupResult. Registries
differ in which optional members they send and how carefully they shape
them, so every accessor treats a missing member or an unexpected type as
"no value" and never raises.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from .audit_logger import AuditLogger
from .models import DnssecInfo, LookupResult, NameserverInfo

INVALID_DATE = "Invalid Date"

IANA_REGISTRAR_ID_TYPE = "IANA Registrar ID"

# eventAction -> LookupResult field
EVENT_SLOTS = {
    "registration": "registration_date",
    "expiration": "expiration_date",
    "last changed": "last_changed_date",
    "last update of RDAP database": "rdap_database_updated_date",
}


def parse_rdap_timestamp(timestamp: Any) -> Optional[datetime]:
    """
    Parse an RDAP ISO-8601 timestamp.

    Returns:
        Timezone-aware UTC datetime, or None if the value is not a timestamp
    """
    if not isinstance(timestamp, str) or not timestamp.strip():
        return None
    value = timestamp.strip()
    if value[-1] in "Zz":
        value = value[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(value)
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        # year-9999 "never expires" dates can leave the datetime range in UTC
        return dt.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def format_rdap_date(timestamp: Any) -> str:
    """
    Format an RDAP timestamp as a long-form UTC date, e.g. "January 5, 2024".

    Unparseable input yields INVALID_DATE.
    """
    dt = parse_rdap_timestamp(timestamp)
    if dt is None:
        return INVALID_DATE
    return f"{dt.strftime('%B')} {dt.day}, {dt.year}"


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _strings(value: Any) -> tuple[str, ...]:
    return tuple(item for item in _list(value) if isinstance(item, str))


def find_registrar_entity(entities: Any) -> Optional[dict]:
    """First entity whose roles include "registrar"; later ones are ignored."""
    for entity in _list(entities):
        if isinstance(entity, dict) and "registrar" in _list(entity.get("roles")):
            return entity
    return None


def extract_registrar_name(entity: Optional[dict]) -> Optional[str]:
    """
    Read the "fn" property of the entity's jCard.

    vcardArray is ["vcard", [[name, params, type, value], ...]]; only a
    single string value counts as a name.
    """
    if entity is None:
        return None
    vcard = _list(entity.get("vcardArray"))
    if len(vcard) < 2:
        return None
    for prop in _list(vcard[1]):
        if isinstance(prop, list) and prop and prop[0] == "fn":
            if len(prop) >= 4 and isinstance(prop[3], str):
                return prop[3]
            return None
    return None


def extract_iana_id(entity: Optional[dict]) -> Optional[str]:
    if entity is None:
        return None
    for public_id in _list(entity.get("publicIds")):
        if isinstance(public_id, dict) and public_id.get("type") == IANA_REGISTRAR_ID_TYPE:
            identifier = public_id.get("identifier")
            if isinstance(identifier, bool):
                return None
            if isinstance(identifier, int):
                return str(identifier)
            return _str(identifier)
    return None


def extract_nameservers(nameservers: Any) -> tuple[NameserverInfo, ...]:
    result = []
    for ns in _list(nameservers):
        if not isinstance(ns, dict):
            continue
        addresses = _dict(ns.get("ipAddresses"))
        result.append(NameserverInfo(
            name=_str(ns.get("ldhName")),
            ipv4=_strings(addresses.get("v4")),
            ipv6=_strings(addresses.get("v6")),
        ))
    return tuple(result)


def extract_dnssec(secure_dns: Any) -> DnssecInfo:
    secure = _dict(secure_dns)
    return DnssecInfo(
        signed=secure.get("delegationSigned") is True,
        ds_records=tuple(r for r in _list(secure.get("dsData")) if isinstance(r, dict)),
    )


class RdapNormalizer:
    """Builds LookupResult records from raw RDAP domain objects."""

    def __init__(self, logger: Optional[AuditLogger] = None) -> None:
        self._logger = logger

    def normalize(
        self,
        raw: dict,
        *,
        rdap_server: str,
        query_time_ms: int,
        fallback_domain: Optional[str] = None,
    ) -> LookupResult:
        """
        Normalize a raw RDAP domain object.

        Args:
            raw: Decoded RDAP JSON object; kept unmodified on the result
            rdap_server: Base URL that answered the query
            query_time_ms: Elapsed query time
            fallback_domain: Name to report when the object carries none

        Returns:
            LookupResult
        """
        raw_dict = _dict(raw)
        dates, warnings = self._extract_dates(raw_dict.get("events"))
        registrar = find_registrar_entity(raw_dict.get("entities"))

        domain_name = (
            _str(raw_dict.get("ldhName"))
            or _str(raw_dict.get("unicodeName"))
            or fallback_domain
            or ""
        )

        return LookupResult(
            domain_name=domain_name,
            query_time_ms=query_time_ms,
            rdap_server=rdap_server,
            raw_object=raw,
            registry_handle=_str(raw_dict.get("handle")),
            status_codes=_strings(raw_dict.get("status")),
            nameservers=extract_nameservers(raw_dict.get("nameservers")),
            registrar_name=extract_registrar_name(registrar),
            registrar_iana_id=extract_iana_id(registrar),
            dnssec=extract_dnssec(raw_dict.get("secureDNS")),
            warnings=tuple(warnings),
            **dates,
        )

    def _extract_dates(self, events: Any) -> tuple[dict[str, str], list[str]]:
        # A repeated eventAction overwrites the earlier one
        dates: dict[str, str] = {}
        warnings: list[str] = []
        for event in _list(events):
            if not isinstance(event, dict):
                continue
            action = event.get("eventAction")
            slot = EVENT_SLOTS.get(action) if isinstance(action, str) else None
            if slot is None:
                continue
            timestamp = event.get("eventDate")
            formatted = format_rdap_date(timestamp)
            if formatted == INVALID_DATE:
                message = f"Unparseable eventDate for '{action}': {timestamp!r}"
                warnings.append(message)
                if self._logger:
                    self._logger.warn("RdapNormalizer", message)
            dates[slot] = formatted
        return dates, warnings
