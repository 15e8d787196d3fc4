"""
Tests for the RDAP client.

The upstream server is simulated with httpx.MockTransport so every outcome
class can be exercised without network access.
"""

import asyncio

import httpx
from hypothesis import given, settings
from hypothesis import strategies as st

from rdap_lookup.enums import RDAPErrorCode, RDAPStatus
from rdap_lookup.rdap_client import RDAP_ACCEPT, RDAPClient, build_query_url

BASE_URL = "https://rdap.example-registry.test/"


def run_query(handler, domain: str = "example.com", base_url: str = BASE_URL):
    """Run one query against a mock transport."""

    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            client = RDAPClient(client=http_client)
            return await client.query(base_url, domain)

    return asyncio.run(_run())


class TestQueryUrl:
    """URL construction."""

    def test_domain_path_appended(self) -> None:
        assert build_query_url(BASE_URL, "example.com") == (
            "https://rdap.example-registry.test/domain/example.com"
        )

    def test_missing_slash_added(self) -> None:
        assert build_query_url("https://rdap.verisign.com/com/v1", "example.com") == (
            "https://rdap.verisign.com/com/v1/domain/example.com"
        )

    def test_request_shape(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ldhName": "example.com"})

        run_query(handler)

        assert len(seen) == 1
        assert seen[0].method == "GET"
        assert str(seen[0].url) == "https://rdap.example-registry.test/domain/example.com"
        assert seen[0].headers["Accept"] == RDAP_ACCEPT


class TestOutcomeClassification:
    """Each HTTP outcome maps to exactly one status."""

    def test_success(self) -> None:
        body = {"objectClassName": "domain", "ldhName": "example.com"}
        response = run_query(lambda request: httpx.Response(200, json=body))

        assert response.status == RDAPStatus.FOUND
        assert response.raw_response == body
        assert response.error is None
        assert response.response_time_ms >= 0

    def test_not_found(self) -> None:
        response = run_query(lambda request: httpx.Response(404, text="Not Found"))

        assert response.status == RDAPStatus.NOT_FOUND
        assert response.http_status_code == 404
        assert response.raw_response is None
        assert response.error is None

    @given(status_code=st.sampled_from([400, 401, 403, 410, 418, 429, 500, 502, 503, 504]))
    @settings(max_examples=20)
    def test_other_status_is_upstream_error(self, status_code: int) -> None:
        response = run_query(lambda request: httpx.Response(status_code, json={"errorCode": status_code}))

        assert response.status == RDAPStatus.ERROR
        assert response.error.code == RDAPErrorCode.UPSTREAM_ERROR
        assert response.error.http_status_code == status_code
        assert response.error.message == f"RDAP lookup failed with status {status_code}"

    def test_invalid_json_is_upstream_error(self) -> None:
        response = run_query(lambda request: httpx.Response(200, text="<html>oops</html>"))

        assert response.status == RDAPStatus.ERROR
        assert response.error.code == RDAPErrorCode.UPSTREAM_ERROR
        assert "parse" in response.error.message.lower()

    @given(body=st.one_of(
        st.lists(st.integers(), max_size=3),
        st.integers(),
        st.text(max_size=10),
        st.none(),
    ))
    @settings(max_examples=50)
    def test_non_object_json_is_upstream_error(self, body) -> None:
        response = run_query(lambda request: httpx.Response(200, json=body))

        assert response.status == RDAPStatus.ERROR
        assert response.error.code == RDAPErrorCode.UPSTREAM_ERROR

    def test_empty_body_is_upstream_error(self) -> None:
        response = run_query(lambda request: httpx.Response(200, content=b""))
        assert response.error.code == RDAPErrorCode.UPSTREAM_ERROR

    def test_connect_error_is_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Name or service not known", request=request)

        response = run_query(handler)

        assert response.status == RDAPStatus.ERROR
        assert response.http_status_code == 0
        assert response.error.code == RDAPErrorCode.TRANSPORT_ERROR
        assert "Name or service not known" in response.error.message

    def test_tls_error_is_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("[SSL: CERTIFICATE_VERIFY_FAILED]", request=request)

        response = run_query(handler)

        assert response.error.code == RDAPErrorCode.TRANSPORT_ERROR
        assert response.error.message.startswith("TLS connection error")

    def test_timeout_is_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        response = run_query(handler)

        assert response.error.code == RDAPErrorCode.TRANSPORT_ERROR
        assert "timed out" in response.error.message


class TestClientLifecycle:
    """Ownership of the underlying httpx client."""

    def test_injected_client_is_not_closed(self) -> None:
        async def _run() -> bool:
            http_client = httpx.AsyncClient(
                transport=httpx.MockTransport(lambda request: httpx.Response(404))
            )
            async with RDAPClient(client=http_client) as client:
                await client.query(BASE_URL, "example.com")
            closed = http_client.is_closed
            await http_client.aclose()
            return closed

        assert asyncio.run(_run()) is False

    def test_owned_client_is_closed(self) -> None:
        async def _run() -> bool:
            client = RDAPClient()
            async with client:
                http_client = client._client
            return http_client.is_closed

        assert asyncio.run(_run()) is True

    def test_cancellation_propagates(self) -> None:
        async def slow_handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(10)
            return httpx.Response(200, json={})

        async def _run() -> bool:
            async with httpx.AsyncClient(transport=httpx.MockTransport(slow_handler)) as http_client:
                client = RDAPClient(client=http_client)
                task = asyncio.create_task(client.query(BASE_URL, "example.com"))
                await asyncio.sleep(0.05)
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    return True
                return False

        assert asyncio.run(_run()) is True
