"""
RDAP Client for domain queries.

This module provides an async RDAP client that queries a registry's RDAP
server, measures latency, and classifies the outcome:
- HTTP 2xx with a JSON object body -> FOUND
- HTTP 404 -> NOT_FOUND (the domain is not registered)
- any other status, or an unparseable body -> ERROR (upstream error)
- DNS, connect, TLS or timeout failure -> ERROR (transport error)

No retries are made. Cancelling the calling task aborts the request.
"""

import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from .config import DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT
from .enums import RDAPErrorCode, RDAPStatus

RDAP_ACCEPT = "application/rdap+json"


@dataclass
class RDAPError:
    """Error information from an RDAP query."""

    code: RDAPErrorCode
    message: str
    http_status_code: Optional[int] = None


@dataclass
class RDAPResponse:
    """Complete RDAP query response."""

    status: RDAPStatus
    url: str
    http_status_code: int
    raw_response: Optional[Any]
    error: Optional[RDAPError]
    response_time_ms: int = 0


def build_query_url(base_url: str, domain: str) -> str:
    """Build ``<base>domain/<domain>``; base URLs from the bootstrap end in '/'."""
    if not base_url.endswith("/"):
        base_url += "/"
    return f"{base_url}domain/{domain}"


class RDAPClient:
    """
    Async RDAP client.

    The underlying httpx.AsyncClient is created on context entry (or lazily
    on first query) unless one is injected, in which case the caller owns it.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize the RDAP client.

        Args:
            timeout: Request timeout in seconds
            user_agent: User-Agent header sent with every query
            client: Optional pre-built httpx client (not closed by this class)
        """
        self._timeout = timeout
        self._user_agent = user_agent
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "RDAPClient":
        """Async context manager entry."""
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                verify=True,
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    async def query(self, base_url: str, domain: str) -> RDAPResponse:
        """
        Query RDAP for a domain.

        Args:
            base_url: RDAP base URL chosen by the bootstrap registry
            domain: Canonical domain name

        Returns:
            RDAPResponse with the classified outcome and elapsed time
        """
        client = self._ensure_client()
        rdap_url = build_query_url(base_url, domain)
        headers = {"Accept": RDAP_ACCEPT, "User-Agent": self._user_agent}

        start_time = time.perf_counter()
        try:
            response = await client.get(rdap_url, headers=headers)
            body = response.content
        except httpx.TimeoutException:
            return self._transport_error(
                rdap_url,
                f"RDAP request timed out after {self._timeout}s",
                start_time,
            )
        except httpx.ConnectError as e:
            error_msg = str(e) or type(e).__name__
            if "ssl" in error_msg.lower() or "certificate" in error_msg.lower():
                return self._transport_error(
                    rdap_url, f"TLS connection error: {error_msg}", start_time
                )
            return self._transport_error(
                rdap_url, f"Connection error: {error_msg}", start_time
            )
        except httpx.HTTPError as e:
            return self._transport_error(
                rdap_url, f"RDAP request failed: {str(e) or type(e).__name__}", start_time
            )
        response_time_ms = self._elapsed_ms(start_time)

        if response.status_code == 404:
            return RDAPResponse(
                status=RDAPStatus.NOT_FOUND,
                url=rdap_url,
                http_status_code=404,
                raw_response=None,
                error=None,
                response_time_ms=response_time_ms,
            )

        if not response.is_success:
            return RDAPResponse(
                status=RDAPStatus.ERROR,
                url=rdap_url,
                http_status_code=response.status_code,
                raw_response=None,
                error=RDAPError(
                    code=RDAPErrorCode.UPSTREAM_ERROR,
                    message=f"RDAP lookup failed with status {response.status_code}",
                    http_status_code=response.status_code,
                ),
                response_time_ms=response_time_ms,
            )

        try:
            json_data = response.json() if body else None
        except ValueError as e:
            return self._parse_error(
                rdap_url, response.status_code,
                f"Failed to parse RDAP response: {e}", response_time_ms,
            )

        if not isinstance(json_data, dict):
            return self._parse_error(
                rdap_url, response.status_code,
                "Failed to parse RDAP response: body is not a JSON object",
                response_time_ms,
            )

        return RDAPResponse(
            status=RDAPStatus.FOUND,
            url=rdap_url,
            http_status_code=response.status_code,
            raw_response=json_data,
            error=None,
            response_time_ms=response_time_ms,
        )

    def _parse_error(
        self, url: str, status_code: int, message: str, response_time_ms: int
    ) -> RDAPResponse:
        return RDAPResponse(
            status=RDAPStatus.ERROR,
            url=url,
            http_status_code=status_code,
            raw_response=None,
            error=RDAPError(
                code=RDAPErrorCode.UPSTREAM_ERROR,
                message=message,
                http_status_code=status_code,
            ),
            response_time_ms=response_time_ms,
        )

    def _transport_error(self, url: str, message: str, start_time: float) -> RDAPResponse:
        return RDAPResponse(
            status=RDAPStatus.ERROR,
            url=url,
            http_status_code=0,
            raw_response=None,
            error=RDAPError(code=RDAPErrorCode.TRANSPORT_ERROR, message=message),
            response_time_ms=self._elapsed_ms(start_time),
        )

    def _elapsed_ms(self, start_time: float) -> int:
        """Calculate elapsed time in whole milliseconds."""
        return round((time.perf_counter() - start_time) * 1000)

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
