"""
Lookup service for the RDAP lookup system.

Coordinates the components for one lookup:
1. Validate and normalize the domain (never touches the network on failure)
2. Resolve the TLD to an RDAP base URL via the bootstrap index
3. Query the RDAP server once, without retries
4. Normalize the RDAP object into a LookupResult

Every outcome is returned as a value: LookupResult on success, LookupFailure
with a LookupErrorKind otherwise.
"""

import asyncio
from typing import Iterable, Optional, Union

from .audit_logger import AuditLogger
from .bootstrap import BootstrapIndex
from .config import LookupConfig
from .domain_validator import DomainValidator
from .enums import LookupErrorKind, RDAPErrorCode, RDAPStatus
from .models import LookupFailure, LookupResult
from .normalizer import RdapNormalizer
from .rdap_client import RDAPClient, RDAPResponse

LookupOutcome = Union[LookupResult, LookupFailure]


class LookupService:
    """
    Resolves, queries and normalizes RDAP domain lookups.

    Holds no per-request state; a single instance serves any number of
    concurrent lookups.
    """

    async def __aenter__(self) -> "LookupService":
        """Async context manager entry."""
        await self._client.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self._client.close()

    def __init__(
        self,
        index: BootstrapIndex,
        client: Optional[RDAPClient] = None,
        config: Optional[LookupConfig] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the lookup service.

        Args:
            index: Bootstrap index used to pick the RDAP server
            client: Optional RDAP client; built from config when omitted
            config: Optional configuration (timeout, user agent)
            logger: Optional logger
        """
        self._config = config or LookupConfig()
        self._index = index
        self._logger = logger
        self._validator = DomainValidator()
        self._normalizer = RdapNormalizer(logger=logger)
        self._client = client or RDAPClient(
            timeout=self._config.timeout_seconds,
            user_agent=self._config.user_agent,
        )

    @property
    def index(self) -> BootstrapIndex:
        return self._index

    async def lookup(self, raw_domain: Optional[str]) -> LookupOutcome:
        """
        Look up a domain.

        Args:
            raw_domain: Domain as entered by the user

        Returns:
            LookupResult or LookupFailure
        """
        # Step 1: Validate and normalize domain
        validation = self._validator.validate(raw_domain)
        if not validation.valid:
            self._log_info(
                "Rejected domain input",
                {"raw_domain": raw_domain, "reason": validation.error.code.value},
            )
            return LookupFailure(
                error_kind=LookupErrorKind.INVALID_INPUT,
                message=validation.error.message,
            )
        domain = validation.canonical_domain

        # Step 2: Resolve RDAP server
        match = self._index.resolve(domain.name)
        if match is None:
            self._log_info("Unsupported TLD", {"domain": domain.name, "tld": domain.tld})
            return LookupFailure(
                error_kind=LookupErrorKind.UNSUPPORTED_TLD,
                message=f'TLD ".{domain.tld}" is not supported: no RDAP server is listed for it in the bootstrap registry.',
                tld=domain.tld,
            )

        self._log_info(
            "Starting lookup",
            {"domain": domain.name, "tld": match.tld, "rdap_server": match.base_url},
        )

        # Step 3: Query
        response = await self._client.query(match.base_url, domain.name)

        if response.status == RDAPStatus.NOT_FOUND:
            self._log_info(
                "Domain not found",
                {"domain": domain.name, "query_time_ms": response.response_time_ms},
            )
            return LookupFailure(
                error_kind=LookupErrorKind.NOT_FOUND,
                message=f'Domain "{domain.name}" not found in RDAP registry',
                query_time_ms=response.response_time_ms,
                http_status_code=404,
            )

        if response.status == RDAPStatus.ERROR:
            return self._failure_from_response(domain.name, response)

        # Step 4: Normalize
        result = self._normalizer.normalize(
            response.raw_response,
            rdap_server=match.base_url,
            query_time_ms=response.response_time_ms,
            fallback_domain=domain.name,
        )
        self._log_info(
            "Lookup succeeded",
            {
                "domain": result.domain_name,
                "query_time_ms": result.query_time_ms,
                "warnings": len(result.warnings),
            },
        )
        return result

    async def lookup_many(self, raw_domains: Iterable[str]) -> list[LookupOutcome]:
        """Run independent lookups concurrently; results keep input order."""
        return list(await asyncio.gather(*(self.lookup(d) for d in raw_domains)))

    def _failure_from_response(self, domain: str, response: RDAPResponse) -> LookupFailure:
        error = response.error
        if error.code == RDAPErrorCode.TRANSPORT_ERROR:
            if self._logger:
                self._logger.log_error(
                    "LookupService",
                    error.message,
                    request_url=response.url,
                    additional_data={"domain": domain},
                )
            kind = LookupErrorKind.TRANSPORT_ERROR
        else:
            if self._logger:
                self._logger.warn(
                    "LookupService",
                    error.message,
                    {
                        "domain": domain,
                        "request_url": response.url,
                        "response_status_code": error.http_status_code,
                    },
                )
            kind = LookupErrorKind.UPSTREAM_ERROR

        return LookupFailure(
            error_kind=kind,
            message=error.message,
            query_time_ms=response.response_time_ms,
            http_status_code=error.http_status_code,
        )

    def _log_info(self, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            self._logger.info("LookupService", message, data)
